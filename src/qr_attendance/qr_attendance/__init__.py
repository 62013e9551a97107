"""QR Attendance package.

Organized by feature modules (sessions, attendance, geo, realtime, ...) with a
thin Flask/Socket.IO layer on top of service and repository layers.
"""

"""Constants and defaults.

Note: Keep constants here to avoid magic numbers spread across code.
"""

EARTH_RADIUS_METERS = 6371e3
DEFAULT_PROXIMITY_THRESHOLD_METERS = 10.0
DEFAULT_PAGE_LIMIT = 10
MAX_PAGE_LIMIT = 100
MAX_FINGERPRINT_LENGTH = 128
SESSION_ROOM_PREFIX = "session:"

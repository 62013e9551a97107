import os

SECRET_KEY = "test-secret"

DB_CONFIG = {
    "host": os.getenv("DB_HOST", "localhost"),
    "port": int(os.getenv("DB_PORT", "3306")),
    "user": os.getenv("DB_USER", "root"),
    "password": os.getenv("DB_PASSWORD", ""),
    "database": os.getenv("DB_NAME", "qr_attendance_test"),
}

DEBUG = False
TESTING = True

AUTO_INIT_DB = bool(int(os.getenv("AUTO_INIT_DB", "0")))
AUTO_SEED_DB = bool(int(os.getenv("AUTO_SEED_DB", "0")))

PROXIMITY_MODE = "fixed"
PROXIMITY_THRESHOLD_METERS = 10.0
PROXIMITY_MAX_SLACK_METERS = None
REQUIRE_LOCATION = True
LOCK_FINISHED_SESSIONS = False

SOCKETIO_CORS_ORIGINS = "*"

LOG_LEVEL = "WARNING"
LOG_FILE = None

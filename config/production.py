import os

SECRET_KEY = os.getenv("SECRET_KEY", "please-set-SECRET_KEY")

DB_CONFIG = {
    "host": os.getenv("DB_HOST", "localhost"),
    "port": int(os.getenv("DB_PORT", "3306")),
    "user": os.getenv("DB_USER", "root"),
    "password": os.getenv("DB_PASSWORD", ""),
    "database": os.getenv("DB_NAME", "qr_attendance"),
}

DEBUG = False

AUTO_INIT_DB = bool(int(os.getenv("AUTO_INIT_DB", "0")))
AUTO_SEED_DB = bool(int(os.getenv("AUTO_SEED_DB", "0")))

PROXIMITY_MODE = os.getenv("PROXIMITY_MODE", "accuracy")
PROXIMITY_THRESHOLD_METERS = float(os.getenv("PROXIMITY_THRESHOLD_METERS", "10"))
PROXIMITY_MAX_SLACK_METERS = float(os.getenv("PROXIMITY_MAX_SLACK_METERS", "50"))
REQUIRE_LOCATION = bool(int(os.getenv("REQUIRE_LOCATION", "1")))
LOCK_FINISHED_SESSIONS = bool(int(os.getenv("LOCK_FINISHED_SESSIONS", "0")))

# Comma-separated list of allowed origins
SOCKETIO_CORS_ORIGINS = os.getenv("SOCKETIO_CORS_ORIGINS", "")

LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO")
LOG_FILE = os.getenv("LOG_FILE", "logs/qr_attendance.log")

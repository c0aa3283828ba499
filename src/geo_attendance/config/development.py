import os

from ..core.constants import DEFAULT_GEOFENCE_RADIUS_METERS, DEFAULT_POLL_INTERVAL_SECONDS

SECRET_KEY = os.getenv("SECRET_KEY", "dev-secret-key")

DEBUG = True
LOG_LEVEL = os.getenv("LOG_LEVEL", "DEBUG")

# file | mysql | memory
STORAGE_BACKEND = os.getenv("STORAGE_BACKEND", "file")
STATE_FILE = os.getenv("STATE_FILE", "instance/attendance.json")

DB_CONFIG = {
    "host": os.getenv("DB_HOST", "localhost"),
    "port": int(os.getenv("DB_PORT", "3306")),
    "user": os.getenv("DB_USER", "root"),
    "password": os.getenv("DB_PASSWORD", ""),
    "database": os.getenv("DB_NAME", "geo_attendance"),
}

# If enabled (mysql backend), create the key-value table on startup (idempotent)
AUTO_INIT_DB = bool(int(os.getenv("AUTO_INIT_DB", "1")))

OFFICE_GEOFENCE = {
    "lat": float(os.getenv("OFFICE_LAT", "30.0444")),
    "lng": float(os.getenv("OFFICE_LNG", "31.2357")),
    "radius_meters": float(os.getenv("OFFICE_RADIUS_METERS", DEFAULT_GEOFENCE_RADIUS_METERS)),
}

POLL_INTERVAL_SECONDS = int(os.getenv("POLL_INTERVAL_SECONDS", DEFAULT_POLL_INTERVAL_SECONDS))

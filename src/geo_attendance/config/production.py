import os

from ..core.constants import DEFAULT_GEOFENCE_RADIUS_METERS, DEFAULT_POLL_INTERVAL_SECONDS

SECRET_KEY = os.getenv("SECRET_KEY", "please-set-SECRET_KEY")

DEBUG = False
LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO")

STORAGE_BACKEND = os.getenv("STORAGE_BACKEND", "file")
STATE_FILE = os.getenv("STATE_FILE", "/var/lib/geo-attendance/attendance.json")

DB_CONFIG = {
    "host": os.getenv("DB_HOST", "localhost"),
    "port": int(os.getenv("DB_PORT", "3306")),
    "user": os.getenv("DB_USER", "root"),
    "password": os.getenv("DB_PASSWORD", ""),
    "database": os.getenv("DB_NAME", "geo_attendance"),
}

AUTO_INIT_DB = bool(int(os.getenv("AUTO_INIT_DB", "0")))

OFFICE_GEOFENCE = {
    "lat": float(os.getenv("OFFICE_LAT", "0")),
    "lng": float(os.getenv("OFFICE_LNG", "0")),
    "radius_meters": float(os.getenv("OFFICE_RADIUS_METERS", DEFAULT_GEOFENCE_RADIUS_METERS)),
}

POLL_INTERVAL_SECONDS = int(os.getenv("POLL_INTERVAL_SECONDS", DEFAULT_POLL_INTERVAL_SECONDS))

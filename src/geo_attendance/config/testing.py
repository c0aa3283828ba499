from ..core.constants import DEFAULT_GEOFENCE_RADIUS_METERS

SECRET_KEY = "test-secret"

DEBUG = False
TESTING = True
LOG_LEVEL = "WARNING"

STORAGE_BACKEND = "memory"
STATE_FILE = None

DB_CONFIG = {
    "host": "localhost",
    "port": 3306,
    "user": "root",
    "password": "",
    "database": "geo_attendance_test",
}

AUTO_INIT_DB = False

OFFICE_GEOFENCE = {
    "lat": 30.0444,
    "lng": 31.2357,
    "radius_meters": float(DEFAULT_GEOFENCE_RADIUS_METERS),
}

POLL_INTERVAL_SECONDS = 1

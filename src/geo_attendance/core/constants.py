"""Constants and defaults.

Note: Keep constants here to avoid magic numbers spread across code.
"""

EARTH_RADIUS_METERS = 6371000

# Fixed storage identifiers (one blob per key).
ATTENDANCE_STATE_KEY = "attendance"
CURRENT_EMPLOYEE_KEY = "currentEmployeeCode"

DEFAULT_GEOFENCE_RADIUS_METERS = 150
DEFAULT_POLL_INTERVAL_SECONDS = 60

# Position acquisition: high accuracy first, then degrade.
HIGH_ACCURACY_TIMEOUT_SECONDS = 15
HIGH_ACCURACY_MAX_AGE_SECONDS = 0
LOW_ACCURACY_TIMEOUT_SECONDS = 20
LOW_ACCURACY_MAX_AGE_SECONDS = 60

from __future__ import annotations

import math
from typing import Any

from ..core.exceptions import ValidationError


def require_non_empty(value: Any, field_name: str) -> str:
    if not isinstance(value, str) or not value.strip():
        raise ValidationError(f"{field_name} is required")
    return value.strip()


def require_number(value: Any, field_name: str) -> float:
    if isinstance(value, bool):
        raise ValidationError(f"{field_name} must be a number")
    try:
        number = float(value)
    except (TypeError, ValueError):
        raise ValidationError(f"{field_name} must be a number") from None
    if math.isnan(number) or math.isinf(number):
        raise ValidationError(f"{field_name} must be a finite number")
    return number


def require_coordinates(lat: Any, lng: Any) -> tuple[float, float]:
    """Validate a latitude/longitude pair before it reaches the geofence."""
    lat_value = require_number(lat, "lat")
    lng_value = require_number(lng, "lng")
    if not -90.0 <= lat_value <= 90.0:
        raise ValidationError("lat must be between -90 and 90")
    if not -180.0 <= lng_value <= 180.0:
        raise ValidationError("lng must be between -180 and 180")
    return lat_value, lng_value

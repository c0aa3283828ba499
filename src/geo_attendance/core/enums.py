from __future__ import annotations

from enum import Enum


class TrackingEventType(str, Enum):
    """Event markers appended to a tracking session."""

    LEFT_OFFICE = "LeftOffice"
    BACK_IN_OFFICE = "BackInOffice"
    SIGNAL_LOST = "SignalLost"


class LocationErrorKind(str, Enum):
    """Why a position sample could not be obtained."""

    PERMISSION_DENIED = "PERMISSION_DENIED"
    POSITION_UNAVAILABLE = "POSITION_UNAVAILABLE"
    TIMEOUT = "TIMEOUT"
    UNSUPPORTED = "UNSUPPORTED"

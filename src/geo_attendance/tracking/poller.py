from __future__ import annotations

import logging
import threading
from dataclasses import dataclass
from datetime import datetime
from typing import Optional, Protocol

from ..common.datetime_utils import as_utc, now_utc
from ..core.constants import (
    DEFAULT_POLL_INTERVAL_SECONDS,
    HIGH_ACCURACY_MAX_AGE_SECONDS,
    HIGH_ACCURACY_TIMEOUT_SECONDS,
    LOW_ACCURACY_MAX_AGE_SECONDS,
    LOW_ACCURACY_TIMEOUT_SECONDS,
)
from ..core.enums import LocationErrorKind
from ..core.exceptions import LocationError
from ..geofence.service import OfficeGeofence
from .current_employee import CurrentEmployeeStore
from .model import TrackingPing
from .service import AttendanceLedger

logger = logging.getLogger(__name__)

LOCATION_ERROR_MESSAGES = {
    LocationErrorKind.PERMISSION_DENIED: "Location permission denied. Please allow location for this device.",
    LocationErrorKind.POSITION_UNAVAILABLE: "Location unavailable. Turn on GPS/Location services and try again.",
    LocationErrorKind.TIMEOUT: "Location timeout. Please try again.",
    LocationErrorKind.UNSUPPORTED: "Geolocation is not supported on this device.",
}

# Failures worth retrying with a coarser fix.
_DEGRADABLE = {LocationErrorKind.POSITION_UNAVAILABLE, LocationErrorKind.TIMEOUT}


def describe_location_error(kind: LocationErrorKind) -> str:
    return LOCATION_ERROR_MESSAGES.get(kind, "Unable to get location. Please check device settings.")


@dataclass(frozen=True)
class PositionSample:
    lat: float
    lng: float
    accuracy: float
    timestamp: Optional[datetime] = None


class PositionProvider(Protocol):
    def get_position(self, *, high_accuracy: bool, timeout: float, maximum_age: float) -> PositionSample:
        """Return one sample or raise LocationError within ``timeout`` seconds."""
        raise NotImplementedError


def acquire_position(provider: PositionProvider) -> PositionSample:
    """High accuracy first; degrade to low accuracy on unavailable/timeout."""
    try:
        return provider.get_position(
            high_accuracy=True,
            timeout=HIGH_ACCURACY_TIMEOUT_SECONDS,
            maximum_age=HIGH_ACCURACY_MAX_AGE_SECONDS,
        )
    except LocationError as exc:
        if exc.kind not in _DEGRADABLE:
            raise
        logger.debug("High accuracy fix failed (%s), retrying with low accuracy", exc.kind.value)
    return provider.get_position(
        high_accuracy=False,
        timeout=LOW_ACCURACY_TIMEOUT_SECONDS,
        maximum_age=LOW_ACCURACY_MAX_AGE_SECONDS,
    )


@dataclass(frozen=True)
class PollResult:
    code: Optional[str]
    ping: Optional[TrackingPing] = None
    error: Optional[LocationErrorKind] = None
    skipped: bool = False

    @property
    def message(self) -> Optional[str]:
        return describe_location_error(self.error) if self.error else None


class PresencePoller:
    """Caller side of the ledger: sample, classify against the office, record.

    Runs on the single local actor; each poll finishes before the next starts.
    """

    def __init__(
        self,
        ledger: AttendanceLedger,
        provider: PositionProvider,
        geofence: OfficeGeofence,
        *,
        current_employee: Optional[CurrentEmployeeStore] = None,
        interval_seconds: float = DEFAULT_POLL_INTERVAL_SECONDS,
    ):
        self._ledger = ledger
        self._provider = provider
        self._geofence = geofence
        self._current_employee = current_employee
        self._interval = float(interval_seconds)

    def _resolve_code(self, code: Optional[str]) -> Optional[str]:
        if code:
            return code
        if self._current_employee is not None:
            return self._current_employee.get()
        return None

    def poll_once(self, code: Optional[str] = None, *, now: Optional[datetime] = None) -> PollResult:
        code = self._resolve_code(code)
        if not code:
            return PollResult(code=None, skipped=True)

        employee = self._ledger.get_employee(code)
        if employee is None or not employee.checked_in:
            return PollResult(code=code, skipped=True)

        try:
            sample = acquire_position(self._provider)
        except LocationError as exc:
            logger.info("No position for employee %s: %s", code, exc.kind.value)
            self._ledger.record_signal_lost(code, now=now)
            return PollResult(code=code, error=exc.kind)

        timestamp = sample.timestamp or now or now_utc()
        ping = TrackingPing(
            timestamp=as_utc(timestamp),
            lat=sample.lat,
            lng=sample.lng,
            accuracy=sample.accuracy,
            inside_office=self._geofence.contains(sample.lat, sample.lng),
        )
        self._ledger.record_gps_ping(code, ping, now=now)
        return PollResult(code=code, ping=ping)

    def run(self, stop_event: threading.Event, code: Optional[str] = None) -> None:
        """Poll on a fixed interval until ``stop_event`` is set."""
        logger.info("Presence poller started (interval=%ss)", self._interval)
        while not stop_event.is_set():
            try:
                self.poll_once(code)
            except Exception:
                logger.exception("Presence poll failed, retrying in %ss", self._interval)
            if stop_event.wait(self._interval):
                break
        logger.info("Presence poller stopped")

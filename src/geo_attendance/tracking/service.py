from __future__ import annotations

import logging
import uuid
from collections import Counter
from dataclasses import replace
from datetime import datetime
from typing import Callable, List, Optional

from ..common.datetime_utils import as_utc, now_utc
from ..core.constants import ATTENDANCE_STATE_KEY
from ..core.enums import TrackingEventType
from ..core.exceptions import StateDecodeError
from ..storage.repository import KeyValueStore
from .codec import decode_state, encode_state
from .model import AttendanceState, EmployeeAttendance, TrackingEvent, TrackingPing, TrackingSession
from .observable import StateObservable

logger = logging.getLogger(__name__)


def default_session_id(now: datetime) -> str:
    return f"{int(now.timestamp() * 1000)}-{uuid.uuid4().hex[:12]}"


class AttendanceLedger:
    """Durable per-employee attendance record and session state machine.

    Every mutator reads the whole blob, mutates it in memory and writes it
    back. Nothing here raises for domain conditions: unknown employees are
    ignored, a missing active session is recovered, and an unreadable blob is
    replaced by the empty default while unreadable records inside a readable
    blob are skipped one by one. Recoveries, resets and skips are logged and
    counted (``recoveries``, ``state_resets``, ``records_skipped``).
    """

    def __init__(
        self,
        store: KeyValueStore,
        *,
        observable: Optional[StateObservable] = None,
        storage_key: str = ATTENDANCE_STATE_KEY,
        session_id_factory: Optional[Callable[[datetime], str]] = None,
    ):
        self._store = store
        self._observable = observable
        self._key = storage_key
        self._new_session_id = session_id_factory or default_session_id
        self.recoveries: Counter = Counter()
        self.state_resets = 0
        self.records_skipped = 0

    # ---- persistence ----

    def _read_state(self) -> AttendanceState:
        raw = self._store.get_item(self._key)
        if not raw:
            return AttendanceState()
        skipped: List[str] = []
        try:
            state = decode_state(raw, skipped)
        except StateDecodeError as exc:
            self.state_resets += 1
            logger.warning("Discarding unreadable attendance state (key=%s): %s", self._key, exc)
            return AttendanceState()
        for problem in skipped:
            logger.warning("Skipping unreadable attendance record (key=%s): %s", self._key, problem)
        self.records_skipped += len(skipped)
        return state

    def _write_state(self, state: AttendanceState) -> None:
        self._store.set_item(self._key, encode_state(state))
        if self._observable is not None:
            self._observable.publish(state)

    def _load_employee(self, code: str, operation: str):
        state = self._read_state()
        employee = state.find(code)
        if employee is None:
            logger.debug("Ignoring %s for unknown employee %s", operation, code)
        return state, employee

    # ---- reads ----

    def get_attendance_state(self) -> AttendanceState:
        return self._read_state()

    def get_employee(self, code: str) -> Optional[EmployeeAttendance]:
        return self._read_state().find(code)

    @property
    def recovered_sessions(self) -> int:
        return sum(self.recoveries.values())

    # ---- session helpers ----

    @staticmethod
    def _latest(current: Optional[datetime], when: datetime) -> datetime:
        return when if current is None or when > current else current

    def _touch(self, employee: EmployeeAttendance, when: datetime) -> None:
        employee.last_ping = self._latest(employee.last_ping, when)

    def _open_session(self, employee: EmployeeAttendance, now: datetime) -> TrackingSession:
        session = TrackingSession(id=self._new_session_id(now), start=now)
        employee.sessions.append(session)
        employee.active_session_id = session.id
        return session

    def _recover_active_session(self, employee: EmployeeAttendance, now: datetime, operation: str) -> TrackingSession:
        session = employee.active_session
        if session is not None:
            return session
        self.recoveries[operation] += 1
        logger.warning(
            "Recovered missing active session for employee %s during %s (dangling pointer=%s)",
            employee.code,
            operation,
            employee.active_session_id,
        )
        return self._open_session(employee, now)

    # ---- mutators ----

    def upsert_employee(self, code: str, *, name: Optional[str] = None, now: Optional[datetime] = None) -> None:
        """Register ``code`` or refresh its last ping. A given ``name`` replaces the stored one."""
        now = as_utc(now or now_utc())
        state = self._read_state()
        employee = state.find(code)
        if employee is not None:
            self._touch(employee, now)
            if name is not None:
                employee.name = name
        else:
            state.employees.append(EmployeeAttendance(code=code, last_ping=now, name=name))
        self._write_state(state)

    def update_ping(self, code: str, *, now: Optional[datetime] = None) -> None:
        now = as_utc(now or now_utc())
        state, employee = self._load_employee(code, "update_ping")
        if employee is None:
            return
        self._touch(employee, now)
        self._write_state(state)

    def check_in(self, code: str, *, now: Optional[datetime] = None) -> None:
        now = as_utc(now or now_utc())
        state, employee = self._load_employee(code, "check_in")
        if employee is None:
            return

        employee.checked_in = True
        employee.last_check_in = self._latest(employee.last_check_in, now)
        self._touch(employee, now)
        if employee.active_session_id is None:
            self._open_session(employee, now)
        else:
            # Redundant check-in keeps the open session; a dangling pointer is repaired.
            self._recover_active_session(employee, now, "check_in")
        self._write_state(state)

    def check_out(self, code: str, *, now: Optional[datetime] = None) -> None:
        now = as_utc(now or now_utc())
        state, employee = self._load_employee(code, "check_out")
        if employee is None:
            return

        employee.checked_in = False
        employee.last_check_out = self._latest(employee.last_check_out, now)
        self._touch(employee, now)
        if employee.active_session_id is not None:
            session = employee.active_session
            if session is not None:
                session.end = now
            employee.active_session_id = None
        self._write_state(state)

    def record_gps_ping(self, code: str, ping: TrackingPing, *, now: Optional[datetime] = None) -> None:
        now = as_utc(now or now_utc())
        state, employee = self._load_employee(code, "record_gps_ping")
        if employee is None:
            return
        if not employee.checked_in:
            logger.debug("Dropping ping for checked-out employee %s", code)
            return

        ping = replace(ping, timestamp=as_utc(ping.timestamp))
        session = self._recover_active_session(employee, now, "record_gps_ping")
        previous = session.last_ping
        if previous is not None and previous.inside_office != ping.inside_office:
            event_type = TrackingEventType.BACK_IN_OFFICE if ping.inside_office else TrackingEventType.LEFT_OFFICE
            session.events.append(TrackingEvent(timestamp=ping.timestamp, type=event_type))
            logger.info("Employee %s: %s at %s", code, event_type.value, ping.timestamp.isoformat())
        session.pings.append(ping)
        self._touch(employee, ping.timestamp)
        self._write_state(state)

    def record_signal_lost(self, code: str, *, now: Optional[datetime] = None) -> None:
        now = as_utc(now or now_utc())
        state, employee = self._load_employee(code, "record_signal_lost")
        if employee is None:
            return
        if not employee.checked_in:
            logger.debug("Ignoring signal loss for checked-out employee %s", code)
            return

        session = self._recover_active_session(employee, now, "record_signal_lost")
        session.events.append(TrackingEvent(timestamp=now, type=TrackingEventType.SIGNAL_LOST))
        self._touch(employee, now)
        logger.info("Employee %s: signal lost at %s", code, now.isoformat())
        self._write_state(state)

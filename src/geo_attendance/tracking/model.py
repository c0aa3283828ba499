from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from typing import List, Optional

from ..core.enums import TrackingEventType


@dataclass(frozen=True)
class TrackingPing:
    """One location sample; inside_office is precomputed by the caller."""

    timestamp: datetime
    lat: float
    lng: float
    accuracy: float
    inside_office: bool


@dataclass(frozen=True)
class TrackingEvent:
    timestamp: datetime
    type: TrackingEventType


@dataclass
class TrackingSession:
    """One check-in to check-out interval with its ping trail and events."""

    id: str
    start: datetime
    end: Optional[datetime] = None
    pings: List[TrackingPing] = field(default_factory=list)
    events: List[TrackingEvent] = field(default_factory=list)

    @property
    def is_open(self) -> bool:
        return self.end is None

    @property
    def last_ping(self) -> Optional[TrackingPing]:
        return self.pings[-1] if self.pings else None


@dataclass
class EmployeeAttendance:
    code: str
    checked_in: bool = False
    last_check_in: Optional[datetime] = None
    last_check_out: Optional[datetime] = None
    last_ping: Optional[datetime] = None
    active_session_id: Optional[str] = None
    sessions: List[TrackingSession] = field(default_factory=list)
    name: Optional[str] = None

    def find_session(self, session_id: Optional[str]) -> Optional[TrackingSession]:
        if not session_id:
            return None
        for session in self.sessions:
            if session.id == session_id:
                return session
        return None

    @property
    def active_session(self) -> Optional[TrackingSession]:
        """The session the pointer references, only if it is still open."""
        session = self.find_session(self.active_session_id)
        if session is None or not session.is_open:
            return None
        return session


@dataclass
class AttendanceState:
    employees: List[EmployeeAttendance] = field(default_factory=list)

    def find(self, code: str) -> Optional[EmployeeAttendance]:
        for employee in self.employees:
            if employee.code == code:
                return employee
        return None

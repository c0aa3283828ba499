from __future__ import annotations

from datetime import datetime, timezone

import pytest

from geo_attendance.storage.memory_store import InMemoryKeyValueStore
from geo_attendance.tracking.service import AttendanceLedger


@pytest.fixture
def fixed_now() -> datetime:
    return datetime(2026, 2, 1, 8, 0, 0, tzinfo=timezone.utc)


@pytest.fixture
def store() -> InMemoryKeyValueStore:
    return InMemoryKeyValueStore()


@pytest.fixture
def ledger(store) -> AttendanceLedger:
    return AttendanceLedger(store)


def assert_session_invariants(employee) -> None:
    open_sessions = [s for s in employee.sessions if s.end is None]
    assert (employee.active_session_id is not None) == employee.checked_in
    if employee.checked_in:
        assert len(open_sessions) == 1
        assert open_sessions[0].id == employee.active_session_id
    else:
        assert open_sessions == []


@pytest.fixture
def check_invariants():
    return assert_session_invariants

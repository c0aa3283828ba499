from __future__ import annotations

import json
from datetime import timedelta

from geo_attendance.core.constants import ATTENDANCE_STATE_KEY
from geo_attendance.core.enums import TrackingEventType
from geo_attendance.tracking.model import TrackingPing
from geo_attendance.tracking.observable import StateObservable
from geo_attendance.tracking.service import AttendanceLedger


def _ping(ts, inside: bool) -> TrackingPing:
    return TrackingPing(timestamp=ts, lat=30.0444, lng=31.2357, accuracy=12.0, inside_office=inside)


def test_upsert_creates_once_and_refreshes_last_ping(ledger, fixed_now):
    ledger.upsert_employee("1024", now=fixed_now)
    ledger.upsert_employee("1024", now=fixed_now + timedelta(minutes=3))

    state = ledger.get_attendance_state()
    assert [e.code for e in state.employees] == ["1024"]
    employee = state.employees[0]
    assert employee.checked_in is False
    assert employee.sessions == []
    assert employee.active_session_id is None
    assert employee.last_ping == fixed_now + timedelta(minutes=3)


def test_mutators_ignore_unknown_employee(ledger, store, fixed_now):
    ledger.check_in("ghost", now=fixed_now)
    ledger.check_out("ghost", now=fixed_now)
    ledger.record_gps_ping("ghost", _ping(fixed_now, True))
    ledger.record_signal_lost("ghost", now=fixed_now)
    ledger.update_ping("ghost", now=fixed_now)

    assert store.get_item(ATTENDANCE_STATE_KEY) is None
    assert ledger.get_employee("ghost") is None


def test_check_in_opens_session_and_check_out_closes_it(ledger, fixed_now, check_invariants):
    ledger.upsert_employee("1024", now=fixed_now)
    ledger.check_in("1024", now=fixed_now)

    employee = ledger.get_employee("1024")
    check_invariants(employee)
    assert employee.checked_in
    assert employee.last_check_in == fixed_now
    session = employee.sessions[0]
    assert session.start == fixed_now
    assert session.pings == [] and session.events == []

    later = fixed_now + timedelta(hours=8)
    ledger.check_out("1024", now=later)

    employee = ledger.get_employee("1024")
    check_invariants(employee)
    assert employee.last_check_out == later
    assert employee.last_ping == later
    assert employee.sessions[0].end == later


def test_check_in_check_out_sequence_keeps_invariants(ledger, fixed_now, check_invariants):
    ledger.upsert_employee("1024", now=fixed_now)
    ops = ["in", "in", "out", "out", "in", "out", "in"]
    expected_sessions = 0
    checked_in = False

    for i, op in enumerate(ops):
        now = fixed_now + timedelta(minutes=i + 1)
        if op == "in":
            if not checked_in:
                expected_sessions += 1
            ledger.check_in("1024", now=now)
            checked_in = True
        else:
            ledger.check_out("1024", now=now)
            checked_in = False

        employee = ledger.get_employee("1024")
        assert employee.checked_in is checked_in
        assert len(employee.sessions) == expected_sessions
        check_invariants(employee)

    assert ledger.recovered_sessions == 0


def test_redundant_check_in_keeps_session_but_refreshes_timestamps(ledger, fixed_now):
    ledger.upsert_employee("1024", now=fixed_now)
    ledger.check_in("1024", now=fixed_now)
    first_id = ledger.get_employee("1024").active_session_id

    ledger.check_in("1024", now=fixed_now + timedelta(minutes=10))

    employee = ledger.get_employee("1024")
    assert employee.active_session_id == first_id
    assert len(employee.sessions) == 1
    assert employee.last_check_in == fixed_now + timedelta(minutes=10)
    assert employee.last_ping == fixed_now + timedelta(minutes=10)


def test_session_end_is_set_once(ledger, fixed_now):
    ledger.upsert_employee("1024", now=fixed_now)
    ledger.check_in("1024", now=fixed_now)
    ledger.check_out("1024", now=fixed_now + timedelta(hours=1))
    ledger.check_out("1024", now=fixed_now + timedelta(hours=2))

    employee = ledger.get_employee("1024")
    assert employee.sessions[0].end == fixed_now + timedelta(hours=1)
    assert employee.last_check_out == fixed_now + timedelta(hours=2)


def test_transition_events_follow_inside_flags(ledger, fixed_now):
    ledger.upsert_employee("1024", now=fixed_now)
    ledger.check_in("1024", now=fixed_now)
    stamps = [fixed_now + timedelta(minutes=m) for m in range(1, 6)]
    for ts, inside in zip(stamps, [True, True, False, False, True]):
        ledger.record_gps_ping("1024", _ping(ts, inside))

    session = ledger.get_employee("1024").sessions[0]
    assert len(session.pings) == 5
    assert [(e.type, e.timestamp) for e in session.events] == [
        (TrackingEventType.LEFT_OFFICE, stamps[2]),
        (TrackingEventType.BACK_IN_OFFICE, stamps[4]),
    ]


def test_first_ping_of_each_session_emits_no_event(ledger, fixed_now):
    ledger.upsert_employee("1024", now=fixed_now)
    ledger.check_in("1024", now=fixed_now)
    ledger.record_gps_ping("1024", _ping(fixed_now + timedelta(minutes=1), False))
    ledger.check_out("1024", now=fixed_now + timedelta(minutes=2))
    ledger.check_in("1024", now=fixed_now + timedelta(minutes=3))
    ledger.record_gps_ping("1024", _ping(fixed_now + timedelta(minutes=4), True))

    sessions = ledger.get_employee("1024").sessions
    assert len(sessions) == 2
    assert all(s.events == [] for s in sessions)


def test_ping_for_checked_out_employee_is_dropped(ledger, store, fixed_now):
    ledger.upsert_employee("1024", now=fixed_now)
    ledger.check_in("1024", now=fixed_now)
    ledger.record_gps_ping("1024", _ping(fixed_now + timedelta(minutes=1), True))
    ledger.check_out("1024", now=fixed_now + timedelta(minutes=2))
    before = store.get_item(ATTENDANCE_STATE_KEY)

    ledger.record_gps_ping("1024", _ping(fixed_now + timedelta(minutes=3), False))
    ledger.record_signal_lost("1024", now=fixed_now + timedelta(minutes=4))

    assert store.get_item(ATTENDANCE_STATE_KEY) == before


def test_last_ping_never_moves_backwards(ledger, fixed_now):
    ledger.upsert_employee("1024", now=fixed_now)
    ledger.check_in("1024", now=fixed_now + timedelta(minutes=10))
    ledger.record_gps_ping("1024", _ping(fixed_now + timedelta(minutes=5), True))

    employee = ledger.get_employee("1024")
    assert employee.last_ping == fixed_now + timedelta(minutes=10)
    assert len(employee.sessions[0].pings) == 1


def test_update_ping_only_refreshes_last_ping(ledger, fixed_now):
    ledger.upsert_employee("1024", now=fixed_now)
    ledger.update_ping("1024", now=fixed_now + timedelta(seconds=30))

    employee = ledger.get_employee("1024")
    assert employee.last_ping == fixed_now + timedelta(seconds=30)
    assert employee.checked_in is False
    assert employee.sessions == []


def test_scenario_employee_1024(ledger, fixed_now, check_invariants):
    t0 = fixed_now
    ledger.upsert_employee("1024", now=t0)
    ledger.check_in("1024", now=t0)
    ledger.record_gps_ping("1024", _ping(t0 + timedelta(minutes=1), True))
    ledger.record_gps_ping("1024", _ping(t0 + timedelta(minutes=2), False))

    session = ledger.get_employee("1024").sessions[0]
    assert [(e.type, e.timestamp) for e in session.events] == [
        (TrackingEventType.LEFT_OFFICE, t0 + timedelta(minutes=2)),
    ]

    ledger.record_signal_lost("1024", now=t0 + timedelta(minutes=5))
    employee = ledger.get_employee("1024")
    assert employee.checked_in is True
    assert employee.sessions[0].events[-1].type == TrackingEventType.SIGNAL_LOST
    assert employee.sessions[0].events[-1].timestamp == t0 + timedelta(minutes=5)
    assert employee.sessions[0].end is None

    ledger.check_out("1024", now=t0 + timedelta(minutes=6))
    employee = ledger.get_employee("1024")
    assert employee.sessions[0].end == t0 + timedelta(minutes=6)
    assert employee.active_session_id is None
    check_invariants(employee)


def _seed_checked_in_without_session(store, **extra):
    employee = {
        "code": "1024",
        "checkedIn": True,
        "lastCheckIn": "2026-02-01T07:00:00.000Z",
        "lastCheckOut": None,
        "lastPing": "2026-02-01T07:00:00.000Z",
    }
    employee.update(extra)
    store.set_item(ATTENDANCE_STATE_KEY, json.dumps({"employees": [employee]}))


def test_ping_recovers_missing_session_and_counts_it(store, fixed_now, check_invariants, caplog):
    _seed_checked_in_without_session(store)
    ledger = AttendanceLedger(store)

    with caplog.at_level("WARNING"):
        ledger.record_gps_ping("1024", _ping(fixed_now, False), now=fixed_now)

    employee = ledger.get_employee("1024")
    check_invariants(employee)
    assert employee.sessions[0].start == fixed_now
    assert employee.sessions[0].events == []
    assert ledger.recoveries["record_gps_ping"] == 1
    assert "Recovered missing active session" in caplog.text


def test_signal_loss_recovers_missing_session(store, fixed_now, check_invariants):
    _seed_checked_in_without_session(store)
    ledger = AttendanceLedger(store)

    ledger.record_signal_lost("1024", now=fixed_now)

    employee = ledger.get_employee("1024")
    check_invariants(employee)
    assert [e.type for e in employee.sessions[0].events] == [TrackingEventType.SIGNAL_LOST]
    assert ledger.recoveries["record_signal_lost"] == 1


def test_check_in_repairs_dangling_session_pointer(store, fixed_now, check_invariants):
    _seed_checked_in_without_session(store, activeSessionId="missing", sessions=[])
    ledger = AttendanceLedger(store)

    ledger.check_in("1024", now=fixed_now)

    employee = ledger.get_employee("1024")
    check_invariants(employee)
    assert employee.active_session_id != "missing"
    assert ledger.recoveries["check_in"] == 1


def test_check_out_clears_dangling_pointer(store, fixed_now, check_invariants):
    _seed_checked_in_without_session(store, activeSessionId="missing", sessions=[])
    ledger = AttendanceLedger(store)

    ledger.check_out("1024", now=fixed_now)

    employee = ledger.get_employee("1024")
    check_invariants(employee)
    assert employee.sessions == []


def test_writes_are_published_to_observable(store, fixed_now):
    observable = StateObservable()
    ledger = AttendanceLedger(store, observable=observable)
    seen = []
    observable.subscribe(lambda state: seen.append([e.checked_in for e in state.employees]))

    ledger.upsert_employee("1024", now=fixed_now)
    ledger.check_in("1024", now=fixed_now)
    ledger.check_in("ghost", now=fixed_now)

    assert seen == [[], [False], [True]]
    assert observable.state.find("1024").checked_in is True


def test_session_ids_come_from_factory(store, fixed_now):
    ids = iter(["s-1", "s-2"])
    ledger = AttendanceLedger(store, session_id_factory=lambda now: next(ids))
    ledger.upsert_employee("1024", now=fixed_now)
    ledger.check_in("1024", now=fixed_now)
    ledger.check_out("1024", now=fixed_now)
    ledger.check_in("1024", now=fixed_now)

    assert [s.id for s in ledger.get_employee("1024").sessions] == ["s-1", "s-2"]


def test_default_session_ids_are_unique(ledger, fixed_now):
    ledger.upsert_employee("1024", now=fixed_now)
    for i in range(5):
        ledger.check_in("1024", now=fixed_now)
        ledger.check_out("1024", now=fixed_now)

    ids = [s.id for s in ledger.get_employee("1024").sessions]
    assert len(ids) == len(set(ids)) == 5
    assert all(i.startswith(str(int(fixed_now.timestamp() * 1000))) for i in ids)


def test_check_in_and_check_out_timestamps_never_move_backwards(ledger, fixed_now, check_invariants):
    ledger.upsert_employee("1024", now=fixed_now)
    ledger.check_in("1024", now=fixed_now + timedelta(hours=1))
    ledger.check_out("1024", now=fixed_now + timedelta(hours=2))

    ledger.check_in("1024", now=fixed_now + timedelta(minutes=30))
    ledger.check_out("1024", now=fixed_now + timedelta(minutes=45))

    employee = ledger.get_employee("1024")
    assert employee.last_check_in == fixed_now + timedelta(hours=1)
    assert employee.last_check_out == fixed_now + timedelta(hours=2)
    assert employee.last_ping == fixed_now + timedelta(hours=2)
    assert len(employee.sessions) == 2
    check_invariants(employee)


def test_upsert_stores_name_and_keeps_it_when_omitted(ledger, fixed_now):
    ledger.upsert_employee("1024", name="Mona", now=fixed_now)
    ledger.upsert_employee("1024", now=fixed_now + timedelta(minutes=1))
    assert ledger.get_employee("1024").name == "Mona"

    ledger.upsert_employee("1024", name="Mona Adel", now=fixed_now + timedelta(minutes=2))
    assert ledger.get_employee("1024").name == "Mona Adel"

"""Example: drive the ledger directly (no Flask), replaying one working day.

Controllers are a thin layer; the session state machine lives in the ledger.
"""

from datetime import datetime, timedelta, timezone

from geo_attendance.core.constants import ATTENDANCE_STATE_KEY
from geo_attendance.geofence.service import OfficeGeofence
from geo_attendance.storage.memory_store import InMemoryKeyValueStore
from geo_attendance.tracking.model import TrackingPing
from geo_attendance.tracking.service import AttendanceLedger


def main():
    office = OfficeGeofence(lat=30.0444, lng=31.2357, radius_meters=150)
    store = InMemoryKeyValueStore()
    ledger = AttendanceLedger(store)
    t0 = datetime(2026, 2, 1, 8, 0, tzinfo=timezone.utc)

    ledger.upsert_employee("1024", now=t0)
    ledger.check_in("1024", now=t0)
    for minutes, (lat, lng) in [(1, (30.0444, 31.2357)), (2, (30.0600, 31.2357))]:
        ping = TrackingPing(
            timestamp=t0 + timedelta(minutes=minutes),
            lat=lat,
            lng=lng,
            accuracy=10.0,
            inside_office=office.contains(lat, lng),
        )
        ledger.record_gps_ping("1024", ping)
    ledger.record_signal_lost("1024", now=t0 + timedelta(minutes=5))
    ledger.check_out("1024", now=t0 + timedelta(minutes=6))

    session = ledger.get_employee("1024").sessions[-1]
    for event in session.events:
        print(event.timestamp.isoformat(), event.type.value)
    print(store.get_item(ATTENDANCE_STATE_KEY))


if __name__ == "__main__":
    main()

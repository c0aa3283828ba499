from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Optional

from .database.connection import DBConfig, DatabaseConnection
from .geofence.service import OfficeGeofence
from .storage.file_store import JsonFileKeyValueStore
from .storage.memory_store import InMemoryKeyValueStore
from .storage.mysql_store import MySQLKeyValueStore
from .storage.repository import KeyValueStore
from .tracking.current_employee import CurrentEmployeeStore
from .tracking.observable import StateObservable
from .tracking.poller import PositionProvider, PresencePoller
from .tracking.service import AttendanceLedger


@dataclass(frozen=True)
class Container:
    store: KeyValueStore
    observable: StateObservable
    ledger: AttendanceLedger
    current_employee: CurrentEmployeeStore
    geofence: OfficeGeofence
    poller: Optional[PresencePoller] = None


def build_store(settings: Any) -> KeyValueStore:
    backend = str(getattr(settings, "STORAGE_BACKEND", "file")).lower()
    if backend == "memory":
        return InMemoryKeyValueStore()
    if backend == "mysql":
        conn = DatabaseConnection.get_instance(DBConfig.from_mapping(getattr(settings, "DB_CONFIG")))
        return MySQLKeyValueStore(conn)
    if backend == "file":
        return JsonFileKeyValueStore(getattr(settings, "STATE_FILE"))
    raise ValueError(f"Unknown STORAGE_BACKEND: {backend!r}")


def build_container(
    settings: Any,
    *,
    store: Optional[KeyValueStore] = None,
    position_provider: Optional[PositionProvider] = None,
) -> Container:
    store = store or build_store(settings)
    office = getattr(settings, "OFFICE_GEOFENCE")
    geofence = OfficeGeofence(
        lat=float(office["lat"]),
        lng=float(office["lng"]),
        radius_meters=float(office["radius_meters"]),
    )

    observable = StateObservable()
    ledger = AttendanceLedger(store, observable=observable)
    observable.publish(ledger.get_attendance_state())
    current_employee = CurrentEmployeeStore(store)

    poller = None
    if position_provider is not None:
        poller = PresencePoller(
            ledger,
            position_provider,
            geofence,
            current_employee=current_employee,
            interval_seconds=getattr(settings, "POLL_INTERVAL_SECONDS", 60),
        )

    return Container(
        store=store,
        observable=observable,
        ledger=ledger,
        current_employee=current_employee,
        geofence=geofence,
        poller=poller,
    )

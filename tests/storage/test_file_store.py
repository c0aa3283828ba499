from datetime import timedelta

from geo_attendance.storage.file_store import JsonFileKeyValueStore
from geo_attendance.tracking.service import AttendanceLedger


def test_items_persist_across_instances(tmp_path):
    path = tmp_path / "device" / "attendance.json"
    JsonFileKeyValueStore(path).set_item("a", "1")

    store = JsonFileKeyValueStore(path)
    assert store.get_item("a") == "1"

    store.remove_item("a")
    store.remove_item("missing")
    assert JsonFileKeyValueStore(path).get_item("a") is None


def test_unreadable_file_reads_as_empty(tmp_path, caplog):
    path = tmp_path / "attendance.json"
    path.write_text("{not json", encoding="utf-8")
    store = JsonFileKeyValueStore(path)

    assert store.get_item("attendance") is None
    assert "Unreadable store file" in caplog.text

    store.set_item("attendance", "{}")
    assert store.get_item("attendance") == "{}"
    assert list(tmp_path.iterdir()) == [path]


def test_ledger_survives_restart_on_file_store(tmp_path, fixed_now):
    path = tmp_path / "attendance.json"
    ledger = AttendanceLedger(JsonFileKeyValueStore(path))
    ledger.upsert_employee("1024", now=fixed_now)
    ledger.check_in("1024", now=fixed_now)

    restarted = AttendanceLedger(JsonFileKeyValueStore(path))
    restarted.check_out("1024", now=fixed_now + timedelta(hours=8))

    employee = restarted.get_employee("1024")
    assert employee.checked_in is False
    assert employee.sessions[0].end == fixed_now + timedelta(hours=8)

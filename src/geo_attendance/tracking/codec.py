"""Serialization of the attendance blob.

The stored shape is ``{"employees": [...]}`` with camelCase keys and ISO-8601
UTC timestamps. Decoding normalizes older shapes: records written before
session tracking existed have no ``activeSessionId``/``sessions`` and come back
as ``None``/``[]``.
"""
from __future__ import annotations

import json
from typing import Any, Callable, Dict, List, Optional

from ..common.datetime_utils import parse_iso, to_iso
from ..core.enums import TrackingEventType
from ..core.exceptions import StateDecodeError
from .model import AttendanceState, EmployeeAttendance, TrackingEvent, TrackingPing, TrackingSession

_RECORD_ERRORS = (KeyError, TypeError, ValueError)


def _ts(value) -> Optional[str]:
    return to_iso(value) if value is not None else None


def ping_to_dict(ping: TrackingPing) -> Dict[str, Any]:
    return {
        "timestamp": to_iso(ping.timestamp),
        "lat": float(ping.lat),
        "lng": float(ping.lng),
        "accuracy": float(ping.accuracy),
        "insideOffice": bool(ping.inside_office),
    }


def event_to_dict(event: TrackingEvent) -> Dict[str, Any]:
    return {"timestamp": to_iso(event.timestamp), "type": event.type.value}


def session_to_dict(session: TrackingSession) -> Dict[str, Any]:
    return {
        "id": session.id,
        "start": to_iso(session.start),
        "end": _ts(session.end),
        "pings": [ping_to_dict(p) for p in session.pings],
        "events": [event_to_dict(e) for e in session.events],
    }


def employee_to_dict(employee: EmployeeAttendance) -> Dict[str, Any]:
    data: Dict[str, Any] = {
        "code": employee.code,
        "checkedIn": employee.checked_in,
        "lastCheckIn": _ts(employee.last_check_in),
        "lastCheckOut": _ts(employee.last_check_out),
        "lastPing": _ts(employee.last_ping),
        "activeSessionId": employee.active_session_id,
        "sessions": [session_to_dict(s) for s in employee.sessions],
    }
    if employee.name is not None:
        data["name"] = employee.name
    return data


def state_to_dict(state: AttendanceState) -> Dict[str, Any]:
    return {"employees": [employee_to_dict(e) for e in state.employees]}


def encode_state(state: AttendanceState) -> str:
    return json.dumps(state_to_dict(state), separators=(",", ":"))


def _optional_ts(data: Dict[str, Any], key: str):
    value = data.get(key)
    return parse_iso(value) if value is not None else None


def _number(value: Any) -> float:
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        raise TypeError(f"Expected a number, got {value!r}")
    return float(value)


def _require_dict(value: Any, what: str) -> Dict[str, Any]:
    if not isinstance(value, dict):
        raise TypeError(f"{what} must be an object")
    return value


def _require_list(value: Any, what: str) -> list:
    if not isinstance(value, list):
        raise TypeError(f"{what} must be a list")
    return value


def ping_from_dict(data: Any) -> TrackingPing:
    data = _require_dict(data, "ping")
    return TrackingPing(
        timestamp=parse_iso(data["timestamp"]),
        lat=_number(data["lat"]),
        lng=_number(data["lng"]),
        accuracy=_number(data.get("accuracy", 0)),
        inside_office=bool(data["insideOffice"]),
    )


def event_from_dict(data: Any) -> TrackingEvent:
    data = _require_dict(data, "event")
    return TrackingEvent(timestamp=parse_iso(data["timestamp"]), type=TrackingEventType(data["type"]))


def _decode_items(
    data: Dict[str, Any],
    key: str,
    decode: Callable[[Any], Any],
    label: str,
    skipped: List[str],
) -> list:
    """Decode ``data[key]`` item by item; unusable items are left out and noted in ``skipped``."""
    items = data.get(key) or []
    if not isinstance(items, list):
        skipped.append(f"{label}.{key}: not a list")
        return []
    decoded = []
    for index, item in enumerate(items):
        try:
            decoded.append(decode(item))
        except _RECORD_ERRORS as exc:
            skipped.append(f"{label}.{key}[{index}]: {exc!r}")
    return decoded


def session_from_dict(data: Any, skipped: Optional[List[str]] = None) -> TrackingSession:
    skipped = [] if skipped is None else skipped
    data = _require_dict(data, "session")
    session_id = data["id"]
    if not isinstance(session_id, str) or not session_id:
        raise ValueError("session id must be a non-empty string")
    label = f"session {session_id}"
    return TrackingSession(
        id=session_id,
        start=parse_iso(data["start"]),
        end=_optional_ts(data, "end"),
        pings=_decode_items(data, "pings", ping_from_dict, label, skipped),
        events=_decode_items(data, "events", event_from_dict, label, skipped),
    )


def employee_from_dict(data: Any, skipped: Optional[List[str]] = None) -> EmployeeAttendance:
    skipped = [] if skipped is None else skipped
    data = _require_dict(data, "employee")
    code = data["code"]
    if not isinstance(code, str) or not code:
        raise ValueError("employee code must be a non-empty string")

    active_session_id = data.get("activeSessionId")
    if active_session_id is not None and not isinstance(active_session_id, str):
        raise TypeError("activeSessionId must be a string or null")

    label = f"employee {code}"
    name = data.get("name")
    return EmployeeAttendance(
        code=code,
        checked_in=bool(data.get("checkedIn", False)),
        last_check_in=_optional_ts(data, "lastCheckIn"),
        last_check_out=_optional_ts(data, "lastCheckOut"),
        last_ping=_optional_ts(data, "lastPing"),
        active_session_id=active_session_id or None,
        sessions=_decode_items(data, "sessions", lambda s: session_from_dict(s, skipped), label, skipped),
        name=str(name) if name is not None else None,
    )


def decode_state(raw: str, skipped: Optional[List[str]] = None) -> AttendanceState:
    """Decode a stored blob.

    Records are decoded one by one: an unusable employee, session, ping or
    event is left out and described in ``skipped`` (when given) while the
    rest of the state is kept.

    Raises:
        StateDecodeError: the blob is not valid JSON or has no ``employees``
            list. Callers decide how to recover.
    """
    skipped = [] if skipped is None else skipped
    try:
        parsed = json.loads(raw)
        parsed = _require_dict(parsed, "state")
        _require_list(parsed.get("employees"), "employees")
    except (TypeError, ValueError) as exc:
        raise StateDecodeError(f"Invalid attendance state: {exc}") from exc
    return AttendanceState(
        employees=_decode_items(parsed, "employees", lambda e: employee_from_dict(e, skipped), "state", skipped)
    )

from __future__ import annotations

from typing import Any, Dict, Optional

from flask import Flask, jsonify, request

from ..common.datetime_utils import now_utc, parse_iso
from ..common.validators import require_coordinates, require_non_empty, require_number
from ..core.exceptions import ValidationError
from ..container import Container
from .codec import employee_to_dict, state_to_dict
from .model import TrackingPing


def _fail(message: str, status: int):
    return jsonify({"success": False, "message": message}), status


def _ok(data: Any = None, message: str = "OK"):
    return jsonify({"success": True, "message": message, "data": data})


def _json_body() -> Dict[str, Any]:
    data = request.get_json(silent=True)
    return data if isinstance(data, dict) else {}


def register(app: Flask, container: Container) -> None:
    ledger = container.ledger

    def _employee_or_404(code: str):
        employee = ledger.get_employee(code)
        if employee is None:
            return None, _fail("Employee not found", 404)
        return employee, None

    @app.errorhandler(ValidationError)
    def _validation_error(e: ValidationError):
        return _fail(str(e), 400)

    @app.route("/api/attendance", methods=["GET"], endpoint="attendance_state")
    def attendance_state():
        return _ok(state_to_dict(ledger.get_attendance_state()))

    @app.route("/api/employees", methods=["POST"], endpoint="employee_login")
    def employee_login():
        """Device login: register the code in the ledger and remember it locally."""
        body = _json_body()
        code = require_non_empty(body.get("code"), "Employee code")
        name = body.get("name")
        if name is not None:
            name = require_non_empty(name, "Employee name")
        ledger.upsert_employee(code, name=name)
        container.current_employee.set(code)
        return _ok(employee_to_dict(ledger.get_employee(code)), "Login successful.")

    @app.route("/api/employees/<code>", methods=["GET"], endpoint="employee_detail")
    def employee_detail(code: str):
        employee, error = _employee_or_404(code)
        if error:
            return error
        return _ok(employee_to_dict(employee))

    @app.route("/api/employees/<code>/check-in", methods=["POST"], endpoint="employee_check_in")
    def employee_check_in(code: str):
        employee, error = _employee_or_404(code)
        if error:
            return error
        # Redundant check-ins are blocked here; the ledger itself tolerates them.
        if employee.checked_in:
            return _fail("You already have an active session.", 409)
        ledger.check_in(code)
        return _ok(employee_to_dict(ledger.get_employee(code)), "Checked in successfully.")

    @app.route("/api/employees/<code>/check-out", methods=["POST"], endpoint="employee_check_out")
    def employee_check_out(code: str):
        employee, error = _employee_or_404(code)
        if error:
            return error
        if not employee.checked_in:
            return _fail("No active session found. Please check in first.", 409)
        ledger.check_out(code)
        return _ok(employee_to_dict(ledger.get_employee(code)), "Checked out successfully.")

    @app.route("/api/employees/<code>/pings", methods=["POST"], endpoint="employee_ping")
    def employee_ping(code: str):
        body = _json_body()
        lat, lng = require_coordinates(body.get("lat"), body.get("lng"))
        accuracy = require_number(body.get("accuracy", 0), "accuracy")
        raw_ts: Optional[str] = body.get("timestamp")
        try:
            timestamp = parse_iso(raw_ts) if raw_ts else now_utc()
        except ValueError:
            raise ValidationError("timestamp must be an ISO-8601 string") from None

        ping = TrackingPing(
            timestamp=timestamp,
            lat=lat,
            lng=lng,
            accuracy=accuracy,
            inside_office=container.geofence.contains(lat, lng),
        )
        ledger.record_gps_ping(code, ping)
        return _ok({"insideOffice": ping.inside_office, "distanceMeters": container.geofence.distance_to(lat, lng)})

    @app.route("/api/employees/<code>/signal-lost", methods=["POST"], endpoint="employee_signal_lost")
    def employee_signal_lost(code: str):
        ledger.record_signal_lost(code)
        return _ok()

    @app.route("/api/current-employee", methods=["GET"], endpoint="current_employee_get")
    def current_employee_get():
        return _ok({"code": container.current_employee.get()})

    @app.route("/api/current-employee", methods=["DELETE"], endpoint="current_employee_clear")
    def current_employee_clear():
        container.current_employee.clear()
        return _ok()

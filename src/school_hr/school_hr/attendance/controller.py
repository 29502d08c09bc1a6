from __future__ import annotations

from flask import Flask, jsonify, request

from ..common.datetime_utils import parse_iso_date
from ..common.validators import require_non_empty
from ..container import Container
from ..core.exceptions import NotFoundError, ValidationError


def register(app: Flask, container: Container) -> None:
    def _month_year():
        try:
            return int(request.args.get("month") or 0), int(request.args.get("year") or 0)
        except ValueError:
            raise ValidationError("month and year must be numbers")

    @app.route("/api/attendance/<employee_id>/<day>", methods=["PUT"], endpoint="record_attendance")
    def record_attendance(employee_id: str, day: str):
        data = request.get_json(silent=True) or {}
        try:
            work_date = parse_iso_date(day)
        except ValueError:
            raise ValidationError("date must be YYYY-MM-DD")
        record = container.attendance_service.record_day(
            require_non_empty(employee_id, "employee_id"),
            work_date,
            check_in=data.get("check_in_time"),
            check_out=data.get("check_out_time"),
            notes=data.get("notes"),
        )
        return jsonify(record.to_dict())

    @app.route("/api/attendance/<employee_id>/<day>", methods=["GET"], endpoint="get_attendance")
    def get_attendance(employee_id: str, day: str):
        try:
            work_date = parse_iso_date(day)
        except ValueError:
            raise ValidationError("date must be YYYY-MM-DD")
        record = container.attendance_service.get_day(employee_id, work_date)
        if record is None:
            raise NotFoundError("No attendance record for that day")
        return jsonify(record.to_dict())

    @app.route("/api/attendance/<employee_id>/summary", methods=["GET"], endpoint="attendance_summary")
    def attendance_summary(employee_id: str):
        month, year = _month_year()
        return jsonify(container.attendance_service.monthly_summary(employee_id, month, year).to_dict())

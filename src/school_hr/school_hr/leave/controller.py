from __future__ import annotations

from flask import Flask, jsonify, request

from ..common.datetime_utils import parse_iso_date
from ..common.validators import optional_float, require_non_empty
from ..container import Container
from ..core.enums import RequestStatus, TransactionSource
from ..core.exceptions import NotFoundError, ValidationError
from .policy import resolve_leave_policy


def register(app: Flask, container: Container) -> None:
    def _parse_date(value, field_name: str):
        try:
            return parse_iso_date(require_non_empty(value, field_name))
        except ValueError:
            raise ValidationError(f"{field_name} must be YYYY-MM-DD")

    def _year() -> int:
        try:
            return int(request.args.get("year") or container.clock().year)
        except ValueError:
            raise ValidationError("year must be a number")

    @app.route("/api/leave/policies/<leave_type>", methods=["GET"], endpoint="leave_policy")
    def leave_policy(leave_type: str):
        employee_id = request.args.get("employee_id")
        if employee_id:
            policy = container.leave_ledger.get_policy_for_employee(employee_id, leave_type, _year())
        else:
            policy = resolve_leave_policy(leave_type)
        return jsonify(policy.to_dict())

    @app.route("/api/leave/balances/<employee_id>", methods=["GET"], endpoint="leave_balance")
    def leave_balance(employee_id: str):
        balance = container.leave_ledger.get_balance(employee_id, _year())
        if balance is None:
            raise NotFoundError(f"Employee {employee_id} not found")
        return jsonify(balance.to_dict())

    @app.route("/api/leave/balances/<employee_id>/lock", methods=["POST", "DELETE"], endpoint="leave_balance_lock")
    def leave_balance_lock(employee_id: str):
        balance = container.leave_ledger.set_lock(employee_id, _year(), request.method == "POST")
        return jsonify(balance.to_dict())

    def _source(value) -> TransactionSource:
        try:
            return TransactionSource(value or TransactionSource.MANUAL.value)
        except ValueError:
            raise ValidationError(f"Unknown transaction source: {value!r}")

    @app.route("/api/leave/balances/<employee_id>/usage", methods=["POST"], endpoint="leave_usage")
    def leave_usage(employee_id: str):
        data = request.get_json(silent=True) or {}
        result = container.leave_service.apply_leave_usage(
            employee_id,
            require_non_empty(data.get("leave_type"), "leave_type"),
            optional_float(data.get("days")) or 0,
            year=_year(),
            source=_source(data.get("source")),
            approved=bool(data.get("approved", False)),
        )
        if not result.ok:
            raise result.error
        return jsonify({"ok": True})

    @app.route("/api/leave/requests", methods=["POST"], endpoint="create_leave_request")
    def create_leave_request():
        data = request.get_json(silent=True) or {}
        decision = data.get("insurance_decision_applied")
        leave = container.leave_service.add_leave_request(
            employee_id=require_non_empty(data.get("employee_id"), "employee_id"),
            leave_type=require_non_empty(data.get("leave_type"), "leave_type"),
            start_date=_parse_date(data.get("start_date"), "start_date"),
            end_date=_parse_date(data.get("end_date"), "end_date"),
            total_days=optional_float(data.get("total_days")),
            notes=data.get("notes"),
            insurance_decision_applied=None if decision is None else bool(decision),
        )
        return jsonify(leave.to_dict()), 201

    @app.route("/api/leave/requests/<request_id>/approve", methods=["POST"], endpoint="approve_leave_request")
    def approve_leave_request(request_id: str):
        return jsonify(container.leave_service.approve_leave_request(request_id).to_dict())

    @app.route("/api/leave/requests/<request_id>/reject", methods=["POST"], endpoint="reject_leave_request")
    def reject_leave_request(request_id: str):
        return jsonify(container.leave_service.reject_leave_request(request_id).to_dict())

    @app.route("/api/leave/employees/<employee_id>/summary", methods=["GET"], endpoint="leave_summary")
    def leave_summary(employee_id: str):
        summary = container.leave_service.get_employee_leave_summary(employee_id, _year())
        status = request.args.get("status")
        requests = [r for r in summary.requests if not status or r.status == RequestStatus(status.upper())]
        return jsonify(
            {
                "employee_id": summary.employee_id,
                "year": summary.year,
                "balance": summary.balance.to_dict() if summary.balance else None,
                "requests": [r.to_dict() for r in requests],
            }
        )

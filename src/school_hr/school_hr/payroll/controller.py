from __future__ import annotations

from flask import Flask, jsonify, request

from ..common.validators import optional_float, require_non_empty
from ..container import Container
from ..core.exceptions import ValidationError
from .model import PayrollComponents, PayrollRow
from .settings import PayrollSettings


def register(app: Flask, container: Container) -> None:
    def _components(data: dict) -> PayrollComponents:
        return PayrollComponents(
            basic_salary=optional_float(data.get("basic_salary")),
            incentives=optional_float(data.get("incentives")) or 0,
            allowances=optional_float(data.get("allowances")) or 0,
            non_insurable_amount=optional_float(data.get("non_insurable_amount")) or 0,
            non_taxable_amount=optional_float(data.get("non_taxable_amount")) or 0,
            leave_deduction=optional_float(data.get("leave_deduction")) or 0,
        )

    @app.route("/api/payroll/settings", methods=["GET"], endpoint="get_payroll_settings")
    def get_payroll_settings():
        return jsonify(container.payroll_service.get_settings().to_dict())

    @app.route("/api/payroll/settings", methods=["PUT"], endpoint="save_payroll_settings")
    def save_payroll_settings():
        try:
            settings = PayrollSettings.from_dict(request.get_json(silent=True) or {})
        except (TypeError, ValueError, AttributeError):
            raise ValidationError("Payroll settings contain a non-numeric value")
        return jsonify(container.payroll_service.save_settings(settings).to_dict())

    @app.route("/api/payroll/<int:year>/<int:month>/rows/<employee_id>", methods=["POST"], endpoint="preview_payroll_row")
    def preview_payroll_row(year: int, month: int, employee_id: str):
        row = container.payroll_service.prepare_row(
            employee_id, month, year, _components(request.get_json(silent=True) or {})
        )
        return jsonify(row.to_dict())

    @app.route("/api/payroll/<int:year>/<int:month>/draft", methods=["POST"], endpoint="prepare_payroll_draft")
    def prepare_payroll_draft(year: int, month: int):
        data = request.get_json(silent=True) or {}
        components = {str(k): _components(v or {}) for k, v in (data.get("components") or {}).items()}
        rows = container.payroll_service.prepare_month(
            month,
            year,
            components=components,
            employee_ids=data.get("employee_ids"),
        )
        return jsonify([r.to_dict() for r in rows]), 201

    @app.route("/api/payroll/<int:year>/<int:month>/draft", methods=["PUT"], endpoint="save_payroll_draft")
    def save_payroll_draft(year: int, month: int):
        data = request.get_json(silent=True) or {}
        try:
            rows = [PayrollRow.from_dict(r) for r in data.get("rows") or []]
        except (KeyError, TypeError, ValueError, AttributeError):
            raise ValidationError("Each draft row needs an employee_id and numeric amounts")
        saved = container.payroll_service.save_draft(month, year, rows)
        return jsonify([r.to_dict() for r in saved])

    @app.route("/api/payroll/<int:year>/<int:month>/draft", methods=["GET"], endpoint="get_payroll_draft")
    def get_payroll_draft(year: int, month: int):
        return jsonify([r.to_dict() for r in container.payroll_service.get_draft(month, year)])

    @app.route("/api/payroll/<int:year>/<int:month>/approve", methods=["POST"], endpoint="approve_payroll_draft")
    def approve_payroll_draft(year: int, month: int):
        data = request.get_json(silent=True) or {}
        rows = container.payroll_service.approve_draft(month, year, employee_ids=data.get("employee_ids"))
        return jsonify([r.to_dict() for r in rows])

    @app.route("/api/payroll/<int:year>/<int:month>/post", methods=["POST"], endpoint="post_payroll")
    def post_payroll(year: int, month: int):
        data = request.get_json(silent=True) or {}
        posting = container.payroll_service.post_month(
            month,
            year,
            posted_by=require_non_empty(data.get("posted_by"), "posted_by"),
            account_codes=data.get("account_codes") or None,
        )
        return jsonify(posting.to_dict()), 201

    @app.route("/api/payroll/<int:year>/<int:month>/reverse", methods=["POST"], endpoint="reverse_payroll")
    def reverse_payroll(year: int, month: int):
        data = request.get_json(silent=True) or {}
        posting = container.posting_service.reverse_posting(
            month=month,
            year=year,
            reversed_by=require_non_empty(data.get("reversed_by"), "reversed_by"),
        )
        return jsonify(posting.to_dict())

    @app.route("/api/payroll/postings", methods=["GET"], endpoint="list_payroll_postings")
    def list_payroll_postings():
        return jsonify([p.to_dict() for p in container.posting_service.list_postings()])

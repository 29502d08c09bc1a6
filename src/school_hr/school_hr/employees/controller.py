from __future__ import annotations

from flask import Flask, jsonify, request

from ..common.validators import optional_float, require_non_empty, require_non_negative
from ..common.datetime_utils import parse_iso_date
from ..container import Container
from ..core.exceptions import NotFoundError
from .model import Employee


def register(app: Flask, container: Container) -> None:
    @app.route("/api/employees", methods=["GET"], endpoint="list_employees")
    def list_employees():
        return jsonify([e.to_dict() for e in container.employees_repo.list_all()])

    @app.route("/api/employees", methods=["POST"], endpoint="save_employee")
    def save_employee():
        data = request.get_json(silent=True) or {}
        hire_date = data.get("hire_date")
        maternity = data.get("maternity_eligible")
        employee = Employee(
            employee_id=require_non_empty(data.get("employee_id"), "employee_id"),
            full_name=require_non_empty(data.get("full_name"), "full_name"),
            gender=data.get("gender") or None,
            national_id=data.get("national_id") or None,
            hire_date=parse_iso_date(hire_date) if hire_date else None,
            annual_leave_override=optional_float(data.get("annual_leave_override")),
            maternity_eligible=None if maternity is None else bool(maternity),
            monthly_gross_salary=require_non_negative(data.get("monthly_gross_salary", 0), "monthly_gross_salary"),
            daily_wage=optional_float(data.get("daily_wage")),
        )
        container.employees_repo.save(employee)
        return jsonify(employee.to_dict()), 201

    @app.route("/api/employees/<employee_id>", methods=["GET"], endpoint="get_employee")
    def get_employee(employee_id: str):
        employee = container.employees_repo.get_by_id(employee_id)
        if employee is None:
            raise NotFoundError(f"Employee {employee_id} not found")
        return jsonify(employee.to_dict())

from __future__ import annotations

import pytest

from config import testing as testing_settings
from src.school_hr.school_hr.main import create_app
from src.school_hr.school_hr.payroll.accounts import Account
from src.school_hr.school_hr.storage.kv_store import InMemoryKeyValueStore

ALICE = {
    "employee_id": "E1",
    "full_name": "Alice",
    "gender": "Female",
    "hire_date": "2020-01-01",
    "monthly_gross_salary": 6600,
}

CHART = [
    Account("A1", "5100", "Salary Expense"),
    Account("A2", "5110", "Incentives"),
    Account("A3", "5120", "Allowances"),
    Account("A4", "5130", "Employer Insurance Expense"),
    Account("A5", "2100", "Insurance Payable"),
    Account("A6", "2200", "Tax Payable"),
    Account("A7", "2300", "Emergency Fund"),
    Account("A8", "1010", "Cash"),
]


@pytest.fixture()
def app():
    app = create_app(settings=testing_settings, store=InMemoryKeyValueStore())
    app.extensions["school_hr"].accounts_repo.save_all(CHART)
    return app


@pytest.fixture()
def client(app):
    client = app.test_client()
    assert client.post("/api/employees", json=ALICE).status_code == 201
    return client


def test_employee_lookup(client):
    assert client.get("/api/employees/E1").get_json()["full_name"] == "Alice"

    resp = client.get("/api/employees/NOPE")
    assert resp.status_code == 404
    assert resp.get_json()["error"] == "NotFound"


def test_employee_validation(client):
    resp = client.post("/api/employees", json={"employee_id": "E9"})

    assert resp.status_code == 400
    assert resp.get_json()["error"] == "Validation"


def test_leave_request_flow(client):
    resp = client.post(
        "/api/leave/requests",
        json={"employee_id": "E1", "leave_type": "ANNUAL", "start_date": "2025-03-02", "end_date": "2025-03-04"},
    )
    assert resp.status_code == 201
    request_id = resp.get_json()["request_id"]

    assert client.post(f"/api/leave/requests/{request_id}/approve").get_json()["status"] == "APPROVED"
    again = client.post(f"/api/leave/requests/{request_id}/approve")
    assert again.status_code == 409
    assert again.get_json()["error"] == "InvalidRequestState"

    balance = client.get("/api/leave/balances/E1?year=2025").get_json()
    assert balance["balances"]["ANNUAL"] == 18


def test_locked_balance_refuses_usage(client):
    client.post("/api/leave/balances/E1/lock?year=2025")

    resp = client.post(
        "/api/leave/balances/E1/usage?year=2025",
        json={"leave_type": "CASUAL", "days": 1, "approved": True},
    )

    assert resp.status_code == 409
    assert resp.get_json()["error"] == "BalanceLocked"


def test_attendance_record_and_summary(client):
    resp = client.put("/api/attendance/E1/2025-03-03", json={"check_in_time": "08:25", "check_out_time": "14:00"})
    assert resp.get_json()["status"] == "Late"

    summary = client.get("/api/attendance/E1/summary?month=3&year=2025").get_json()
    assert summary["total_late_minutes"] == 25

    assert client.get("/api/attendance/E1/2025-03-04").status_code == 404


def test_payroll_month_end_to_end(client):
    assert client.post("/api/payroll/2025/3/draft", json={}).status_code == 201
    client.post("/api/payroll/2025/3/approve", json={})

    resp = client.post("/api/payroll/2025/3/post", json={"posted_by": "hr-admin"})
    assert resp.status_code == 201
    assert resp.get_json()["status"] == "Posted"

    dup = client.post("/api/payroll/2025/3/post", json={"posted_by": "hr-admin"})
    assert dup.status_code == 409
    assert dup.get_json()["error"] == "AlreadyPosted"

    reversed_posting = client.post("/api/payroll/2025/3/reverse", json={"reversed_by": "auditor"}).get_json()
    assert reversed_posting["status"] == "Reversed"
    assert len(client.get("/api/payroll/postings").get_json()) == 1


def test_post_without_approved_rows(client):
    client.post("/api/payroll/2025/3/draft", json={})

    resp = client.post("/api/payroll/2025/3/post", json={"posted_by": "hr-admin"})

    assert resp.status_code == 400
    assert resp.get_json()["error"] == "NoApprovedRows"


def test_settings_round_trip(client):
    resp = client.put("/api/payroll/settings", json={"insurance": {"employeePercent": 10}})
    assert resp.get_json()["insurance"]["employeePercent"] == 10

    current = client.get("/api/payroll/settings").get_json()
    assert current["insurance"]["employerPercent"] == 18.75
    assert len(current["taxes"]["brackets"]) == 6


def test_unknown_usage_source_is_a_validation_error(client):
    resp = client.post(
        "/api/leave/balances/E1/usage?year=2025",
        json={"leave_type": "CASUAL", "days": 1, "source": "payroll"},
    )

    assert resp.status_code == 400
    assert resp.get_json()["error"] == "Validation"


def test_draft_row_without_employee_is_a_validation_error(client):
    resp = client.put("/api/payroll/2025/3/draft", json={"rows": [{"basic_salary": 100}]})

    assert resp.status_code == 400
    assert resp.get_json()["error"] == "Validation"


def test_non_numeric_settings_are_a_validation_error(client):
    resp = client.put("/api/payroll/settings", json={"insurance": {"employeePercent": "eleven"}})

    assert resp.status_code == 400
    assert resp.get_json()["error"] == "Validation"

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from typing import Any, Callable, Optional

from .attendance.factory import AttendanceStrategyFactory
from .attendance.kv_attendance_repository import KVAttendanceRepository
from .attendance.model import SchedulePolicy
from .attendance.service import AttendanceService
from .common.datetime_utils import now_local
from .common.locks import KeyedLock
from .core.constants import DEFAULT_LATE_GRACE_MINUTES, DEFAULT_WEEKEND_DAYS, DEFAULT_WORK_END, DEFAULT_WORK_START
from .database.connection import DatabaseConnection
from .employees.kv_employee_repository import KVEmployeeRepository
from .leave.kv_leave_repository import (
    KVLeaveAttendanceRepository,
    KVLeaveLedgerRepository,
    KVLeaveRequestRepository,
)
from .leave.ledger import LeaveBalanceLedger
from .leave.service import LeaveRequestService
from .payroll.accounts import KVAccountDirectory, KVLedgerSink
from .payroll.drafts import KVPayrollDraftRepository
from .payroll.posting import KVPostingRepository, PayrollPostingService
from .payroll.service import PayrollService
from .payroll.settings_repository import KVPayrollSettingsRepository
from .storage.kv_store import InMemoryKeyValueStore, KeyValueStore
from .storage.mysql_kv_store import MySQLKeyValueStore


@dataclass(frozen=True)
class Container:
    store: KeyValueStore
    clock: Callable[[], datetime]

    employees_repo: KVEmployeeRepository
    accounts_repo: KVAccountDirectory
    journal: KVLedgerSink

    leave_ledger: LeaveBalanceLedger
    leave_service: LeaveRequestService
    attendance_service: AttendanceService
    posting_service: PayrollPostingService
    payroll_service: PayrollService


def build_store(settings: Any) -> KeyValueStore:
    backend = str(getattr(settings, "STORE_BACKEND", "memory")).lower()
    if backend == "mysql":
        conn = DatabaseConnection.get_instance(DatabaseConnection.config_from_dict(getattr(settings, "DB_CONFIG")))
        return MySQLKeyValueStore(conn)
    return InMemoryKeyValueStore()


def build_container(
    *,
    settings: Any,
    store: Optional[KeyValueStore] = None,
    clock: Callable[[], datetime] = now_local,
) -> Container:
    store = store if store is not None else build_store(settings)
    locks = KeyedLock()

    employees_repo = KVEmployeeRepository(store)
    accounts_repo = KVAccountDirectory(store)
    journal = KVLedgerSink(store, clock=clock)

    leave_ledger = LeaveBalanceLedger(KVLeaveLedgerRepository(store), employees_repo, locks=locks, clock=clock)
    leave_service = LeaveRequestService(
        KVLeaveRequestRepository(store),
        KVLeaveAttendanceRepository(store),
        leave_ledger,
        employees_repo,
        clock=clock,
    )
    attendance_service = AttendanceService(
        KVAttendanceRepository(store),
        employees_repo,
        leave_service,
        policy=SchedulePolicy(
            work_start=str(getattr(settings, "WORK_START", DEFAULT_WORK_START)),
            work_end=str(getattr(settings, "WORK_END", DEFAULT_WORK_END)),
            late_grace_minutes=int(getattr(settings, "LATE_GRACE_MINUTES", DEFAULT_LATE_GRACE_MINUTES)),
        ),
        weekend_days=getattr(settings, "WEEKEND_DAYS", DEFAULT_WEEKEND_DAYS),
        strategy_factory=AttendanceStrategyFactory(),
    )
    posting_service = PayrollPostingService(
        KVPostingRepository(store),
        accounts_repo,
        journal,
        locks=locks,
        clock=clock,
    )
    payroll_service = PayrollService(
        employees_repo,
        attendance_service,
        leave_service,
        KVPayrollSettingsRepository(store),
        KVPayrollDraftRepository(store),
        posting_service,
    )

    return Container(
        store=store,
        clock=clock,
        employees_repo=employees_repo,
        accounts_repo=accounts_repo,
        journal=journal,
        leave_ledger=leave_ledger,
        leave_service=leave_service,
        attendance_service=attendance_service,
        posting_service=posting_service,
        payroll_service=payroll_service,
    )

from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Optional

from ...core.enums import AttendanceStatus, LeaveType
from ...leave.model import LeaveRequest
from ..model import SchedulePolicy


@dataclass(frozen=True)
class StatusDecision:
    status: AttendanceStatus
    late_minutes: int = 0
    early_leave_minutes: int = 0
    leave_type: Optional[LeaveType] = None


class AttendanceStrategy(ABC):
    """Strategy Pattern: encapsulate how we decide an attendance status."""

    @abstractmethod
    def decide(
        self,
        *,
        check_in: Optional[int],
        check_out: Optional[int],
        policy: SchedulePolicy,
        leave: Optional[LeaveRequest],
    ) -> StatusDecision:
        raise NotImplementedError


def early_leave_minutes(check_out: Optional[int], policy: SchedulePolicy) -> int:
    if check_out is None or check_out >= policy.end_minutes:
        return 0
    return policy.end_minutes - check_out

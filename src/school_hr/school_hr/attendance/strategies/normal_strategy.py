from __future__ import annotations

from typing import Optional

from ...core.enums import AttendanceStatus
from ...leave.model import LeaveRequest
from ..model import SchedulePolicy
from .base import AttendanceStrategy, StatusDecision, early_leave_minutes


class NormalStrategy(AttendanceStrategy):
    """On-time (within grace) check-in."""

    def decide(
        self,
        *,
        check_in: Optional[int],
        check_out: Optional[int],
        policy: SchedulePolicy,
        leave: Optional[LeaveRequest],
    ) -> StatusDecision:
        return StatusDecision(
            status=AttendanceStatus.PRESENT,
            early_leave_minutes=early_leave_minutes(check_out, policy),
        )

from __future__ import annotations

from typing import Optional

from ...core.enums import AttendanceStatus
from ...leave.model import LeaveRequest
from ..model import SchedulePolicy
from .base import AttendanceStrategy, StatusDecision


class OnLeaveStrategy(AttendanceStrategy):
    """Approved leave covers the day; clock times are ignored."""

    def decide(
        self,
        *,
        check_in: Optional[int],
        check_out: Optional[int],
        policy: SchedulePolicy,
        leave: Optional[LeaveRequest],
    ) -> StatusDecision:
        return StatusDecision(
            status=AttendanceStatus.ON_LEAVE,
            leave_type=leave.leave_type if leave else None,
        )

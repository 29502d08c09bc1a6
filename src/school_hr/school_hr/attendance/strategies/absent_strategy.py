from __future__ import annotations

from typing import Optional

from ...core.enums import AttendanceStatus
from ...leave.model import LeaveRequest
from ..model import SchedulePolicy
from .base import AttendanceStrategy, StatusDecision


class AbsentStrategy(AttendanceStrategy):
    """No check-in and no check-out."""

    def decide(
        self,
        *,
        check_in: Optional[int],
        check_out: Optional[int],
        policy: SchedulePolicy,
        leave: Optional[LeaveRequest],
    ) -> StatusDecision:
        return StatusDecision(status=AttendanceStatus.ABSENT)

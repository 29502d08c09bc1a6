from __future__ import annotations

from typing import Optional

from ...core.enums import AttendanceStatus
from ...leave.model import LeaveRequest
from ..model import SchedulePolicy
from .base import AttendanceStrategy, StatusDecision, early_leave_minutes


class LateStrategy(AttendanceStrategy):
    """Late check-in. Minutes count from work start, not from the end of grace."""

    def decide(
        self,
        *,
        check_in: Optional[int],
        check_out: Optional[int],
        policy: SchedulePolicy,
        leave: Optional[LeaveRequest],
    ) -> StatusDecision:
        late = max(0, (check_in or 0) - policy.start_minutes)
        return StatusDecision(
            status=AttendanceStatus.LATE,
            late_minutes=late,
            early_leave_minutes=early_leave_minutes(check_out, policy),
        )

from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

from ..leave.model import LeaveRequest
from .model import SchedulePolicy
from .strategies.absent_strategy import AbsentStrategy
from .strategies.base import AttendanceStrategy
from .strategies.late_strategy import LateStrategy
from .strategies.normal_strategy import NormalStrategy
from .strategies.on_leave_strategy import OnLeaveStrategy


@dataclass
class AttendanceStrategyFactory:
    """Factory Pattern: choose appropriate strategy based on rules."""

    def for_day(
        self,
        *,
        check_in: Optional[int],
        check_out: Optional[int],
        policy: SchedulePolicy,
        leave: Optional[LeaveRequest],
    ) -> AttendanceStrategy:
        if leave is not None:
            return OnLeaveStrategy()
        if check_in is None and check_out is None:
            return AbsentStrategy()
        if check_in is not None and check_in > policy.start_minutes + policy.late_grace_minutes:
            return LateStrategy()
        return NormalStrategy()

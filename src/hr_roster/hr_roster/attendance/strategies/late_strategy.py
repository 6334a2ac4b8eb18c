from __future__ import annotations

from datetime import datetime

from ...common.datetime_utils import minutes_between
from ...core.enums import AttendanceStatus
from .base import AttendanceStrategy, StatusDecision


class LateStrategy(AttendanceStrategy):
    """Late clock-in. Late minutes are counted from the shift start."""

    def decide_clock_in(self, *, now: datetime, shift_start: datetime) -> StatusDecision:
        return StatusDecision(status=AttendanceStatus.LATE, late_minutes=minutes_between(shift_start, now))

    def decide_clock_out(self, *, now: datetime, shift_end: datetime, current: AttendanceStatus) -> StatusDecision:
        return StatusDecision(status=current)

from __future__ import annotations

from datetime import datetime

from ...common.datetime_utils import minutes_between
from ...core.enums import AttendanceStatus
from .base import AttendanceStrategy, StatusDecision


class EarlyLeaveStrategy(AttendanceStrategy):
    """Early departure on clock-out; the stored status is kept."""

    def decide_clock_in(self, *, now: datetime, shift_start: datetime) -> StatusDecision:
        return StatusDecision(status=AttendanceStatus.ON_TIME)

    def decide_clock_out(self, *, now: datetime, shift_end: datetime, current: AttendanceStatus) -> StatusDecision:
        return StatusDecision(status=current, early_departure_minutes=max(1, minutes_between(now, shift_end)))

from __future__ import annotations

from datetime import datetime

from ...core.enums import AttendanceStatus
from .base import AttendanceStrategy, StatusDecision


class NormalStrategy(AttendanceStrategy):
    """On-time clock-in, normal clock-out."""

    def decide_clock_in(self, *, now: datetime, shift_start: datetime) -> StatusDecision:
        return StatusDecision(status=AttendanceStatus.ON_TIME)

    def decide_clock_out(self, *, now: datetime, shift_end: datetime, current: AttendanceStatus) -> StatusDecision:
        return StatusDecision(status=current)

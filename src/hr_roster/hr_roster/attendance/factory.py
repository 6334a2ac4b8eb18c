from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime, timedelta

from ..shifts.model import ShiftDefinition, ShiftPolicy
from .strategies.base import AttendanceStrategy
from .strategies.early_strategy import EarlyLeaveStrategy
from .strategies.late_strategy import LateStrategy
from .strategies.normal_strategy import NormalStrategy


@dataclass
class AttendanceStrategyFactory:
    """Factory Pattern: choose appropriate strategy based on rules."""

    policy: ShiftPolicy = field(default_factory=ShiftPolicy)

    def for_clock_in(self, *, now: datetime, shift_start: datetime) -> AttendanceStrategy:
        if now > shift_start + timedelta(minutes=self.policy.late_margin):
            return LateStrategy()
        return NormalStrategy()

    def for_clock_out(self, *, now: datetime, shift: ShiftDefinition, shift_end: datetime) -> AttendanceStrategy:
        # A shift ending at midnight has no early-exit margin.
        if shift.ends_next_day:
            threshold = shift_end
        else:
            threshold = shift_end - timedelta(minutes=self.policy.early_exit_margin)

        if now < threshold:
            return EarlyLeaveStrategy()
        return NormalStrategy()

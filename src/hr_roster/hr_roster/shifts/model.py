from __future__ import annotations

from dataclasses import dataclass
from datetime import date, datetime, time, timedelta

from ..core.constants import (
    DEFAULT_CLOCK_OUT_GRACE_MINUTES,
    DEFAULT_EARLY_ARRIVAL_MINUTES,
    DEFAULT_EARLY_EXIT_MARGIN_MINUTES,
    DEFAULT_LATE_MARGIN_MINUTES,
)
from ..core.enums import ShiftType


@dataclass(frozen=True)
class ShiftDefinition:
    """Named shift window.

    ``ends_next_day`` marks windows whose end time belongs to the calendar
    day after the work date (the evening shift ends at 00:00).
    """

    shift_type: ShiftType
    start_time: time
    end_time: time
    ends_next_day: bool = False

    @property
    def name(self) -> str:
        return self.shift_type.value.capitalize()

    def starts_at(self, work_date: date) -> datetime:
        return datetime.combine(work_date, self.start_time)

    def ends_at(self, work_date: date) -> datetime:
        end_date = work_date + timedelta(days=1) if self.ends_next_day else work_date
        return datetime.combine(end_date, self.end_time)


@dataclass(frozen=True)
class ShiftPolicy:
    """Lateness and window margins, in minutes."""

    late_margin: int = DEFAULT_LATE_MARGIN_MINUTES
    early_arrival: int = DEFAULT_EARLY_ARRIVAL_MINUTES
    early_exit_margin: int = DEFAULT_EARLY_EXIT_MARGIN_MINUTES
    clock_out_grace: int = DEFAULT_CLOCK_OUT_GRACE_MINUTES

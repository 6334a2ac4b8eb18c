from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date
from typing import Optional

from ..core.enums import ShiftType


@dataclass(frozen=True)
class ScheduleEntry:
    """One employee assigned to one shift on one date."""

    entry_id: int
    employee_id: int
    work_date: date
    shift_type: ShiftType


@dataclass(frozen=True)
class WeekSnapshot:
    """Morning/evening occupants per date of one week (office shifts excluded)."""

    week_start: date
    assignments: dict[date, list[Optional[int]]] = field(default_factory=dict)

    def occupant(self, work_date: date, shift_type: ShiftType) -> Optional[int]:
        slots = self.assignments.get(work_date)
        if not slots:
            return None
        return slots[0 if shift_type == ShiftType.MORNING else 1]

    def to_dict(self) -> dict:
        return {
            "week_start": self.week_start.isoformat(),
            "assignments": {d.isoformat(): list(v) for d, v in sorted(self.assignments.items())},
        }

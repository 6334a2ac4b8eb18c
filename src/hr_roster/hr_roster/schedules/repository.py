from __future__ import annotations

from datetime import date
from typing import Optional, Protocol, Sequence

from ..core.enums import ShiftType
from .model import ScheduleEntry


class ScheduleRepository(Protocol):
    def get_by_id(self, *, entry_id: int) -> Optional[ScheduleEntry]:
        raise NotImplementedError

    def get_for_employee_and_date(self, *, employee_id: int, work_date: date) -> Optional[ScheduleEntry]:
        raise NotImplementedError

    def has_shift(self, *, employee_id: int, work_date: date, shift_type: ShiftType) -> bool:
        raise NotImplementedError

    def count_in_range(
        self,
        *,
        employee_id: int,
        start: date,
        end: date,
        exclude_date: Optional[date] = None,
    ) -> int:
        raise NotImplementedError

    def upsert_slot(self, *, work_date: date, shift_type: ShiftType, employee_id: int) -> int:
        """Create or replace the occupant of the (date, shift) slot.

        Returns entry_id.
        """

        raise NotImplementedError

    def insert_ignore(self, *, employee_id: int, work_date: date, shift_type: ShiftType) -> int:
        """Create the entry unless it already exists. Returns entry_id either way."""

        raise NotImplementedError

    def delete_for_employee_in_range(self, *, employee_id: int, start: date, end: date) -> int:
        """Returns the number of deleted entries."""

        raise NotImplementedError

    def delete_range(self, *, start: date, end: date) -> int:
        raise NotImplementedError

    def list_range(
        self,
        *,
        start: date,
        end: date,
        employee_id: Optional[int] = None,
        shift_types: Optional[Sequence[ShiftType]] = None,
    ) -> Sequence[ScheduleEntry]:
        raise NotImplementedError

    def count_without_attendance(self, *, employee_id: int, start: date, end: date, before: date) -> int:
        """Entries in [start, end] dated before ``before`` that no attendance references."""

        raise NotImplementedError

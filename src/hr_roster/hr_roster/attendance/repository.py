from __future__ import annotations

from datetime import date, datetime, time
from typing import Optional, Protocol, Sequence

from ..core.enums import AttendanceStatus
from .model import AttendanceRecord, AttendanceReportRow


class AttendanceRepository(Protocol):
    def get_latest_open(self, employee_id: int) -> Optional[AttendanceRecord]:
        """Most recently created record of the employee with no clock-out."""

        raise NotImplementedError

    def get_for_entry(self, *, employee_id: int, entry_id: int) -> Optional[AttendanceRecord]:
        raise NotImplementedError

    def get_recent_for_employee(self, employee_id: int, limit: int) -> Sequence[AttendanceRecord]:
        raise NotImplementedError

    def create_clock_in(
        self,
        *,
        employee_id: int,
        entry_id: Optional[int],
        clock_in: time,
        status: AttendanceStatus,
        late_minutes: int,
        created_at: datetime,
    ) -> int:
        raise NotImplementedError

    def close(self, *, attendance_id: int, clock_out: time, early_departure_minutes: int) -> bool:
        """Set clock_out on an open record. Returns False if it was already closed."""

        raise NotImplementedError

    def get_report_rows(self, *, employee_id: int, start_date: date, end_date: date) -> Sequence[AttendanceReportRow]:
        """Records whose linked schedule entry is dated within the range."""

        raise NotImplementedError

from __future__ import annotations

from dataclasses import asdict, dataclass
from datetime import date, datetime, timedelta
from typing import Optional

from ..attendance.model import AttendanceReportRow
from ..attendance.repository import AttendanceRepository
from ..common.datetime_utils import minutes_between, month_bounds
from ..common.validators import require_date_range
from ..core.enums import AttendanceStatus, Role
from ..core.exceptions import NotFoundError
from ..core.transaction import TransactionManager
from ..employees.repository import EmployeeRepository
from ..schedules.repository import ScheduleRepository
from ..shifts.catalog import ShiftCatalog
from ..shifts.model import ShiftPolicy


@dataclass(frozen=True)
class AttendanceSummary:
    present: int = 0
    late: int = 0
    absent: int = 0
    late_minutes: int = 0
    early_minutes: int = 0
    early_count: int = 0

    @property
    def attendance_rate(self) -> float:
        total = self.present + self.late + self.absent
        return self.present / total if total else 0.0

    def to_dict(self) -> dict:
        return asdict(self)


@dataclass(frozen=True)
class MonthlyReport:
    year: int
    month: int
    rows: list[dict]
    total_present: int
    total_late: int
    total_absent: int


class AttendanceReportService:
    """Absence inference and attendance summaries.

    Absences are never read from stored statuses: an absence is a past
    schedule entry that no attendance record references (anti-join), so a
    record created late still clears it.
    """

    def __init__(
        self,
        tx: TransactionManager,
        attendance: AttendanceRepository,
        schedules: ScheduleRepository,
        employees: EmployeeRepository,
        *,
        catalog: Optional[ShiftCatalog] = None,
        policy: Optional[ShiftPolicy] = None,
    ):
        self._tx = tx
        self._attendance = attendance
        self._schedules = schedules
        self._employees = employees
        self._catalog = catalog or ShiftCatalog()
        self._policy = policy or ShiftPolicy()

    def get_absence_count(self, *, employee_id: int, start: date, end: date, today: date) -> int:
        start, end = require_date_range(start, end)
        with self._tx.transaction():
            return self._schedules.count_without_attendance(
                employee_id=int(employee_id),
                start=start,
                end=end,
                before=today,
            )

    def get_attendance_summary(self, *, employee_id: int, year: int, month: int, today: date) -> AttendanceSummary:
        with self._tx.transaction():
            if not self._employees.get_by_id(int(employee_id)):
                raise NotFoundError("Employee not found")
            return self._summarize(int(employee_id), year, month, today)

    def _summarize(self, employee_id: int, year: int, month: int, today: date) -> AttendanceSummary:
        start, end = month_bounds(year, month)
        rows = self._attendance.get_report_rows(employee_id=employee_id, start_date=start, end_date=end)

        present = late = late_minutes = early_minutes = early_count = 0
        for row in rows:
            if row.status == AttendanceStatus.ON_TIME:
                present += 1
            elif row.status == AttendanceStatus.LATE:
                late += 1
                late_minutes += self._late_minutes(row)

            early = self._early_minutes(row)
            if early > self._policy.early_exit_margin:
                early_minutes += early
                early_count += 1

        absent = self._schedules.count_without_attendance(employee_id=employee_id, start=start, end=end, before=today)
        return AttendanceSummary(
            present=present,
            late=late,
            absent=absent,
            late_minutes=late_minutes,
            early_minutes=early_minutes,
            early_count=early_count,
        )

    def _late_minutes(self, row: AttendanceReportRow) -> int:
        shift = self._catalog.get(row.shift_type)
        return minutes_between(shift.starts_at(row.work_date), datetime.combine(row.work_date, row.clock_in))

    def _early_minutes(self, row: AttendanceReportRow) -> int:
        if row.clock_out is None:
            return 0
        clock_in = datetime.combine(row.work_date, row.clock_in)
        clock_out = datetime.combine(row.work_date, row.clock_out)
        if clock_out < clock_in:
            clock_out += timedelta(days=1)
        shift = self._catalog.get(row.shift_type)
        return minutes_between(clock_out, shift.ends_at(row.work_date))

    def monthly_report(self, *, year: int, month: int, today: date) -> MonthlyReport:
        with self._tx.transaction():
            staff = self._employees.list_by_roles([Role.EMPLOYEE, Role.ADMIN])
            summaries = [(e, self._summarize(e.employee_id, year, month, today)) for e in staff]

        summaries.sort(key=lambda item: item[1].attendance_rate, reverse=True)
        rows = [{"employee_id": e.employee_id, "name": e.name, **s.to_dict()} for e, s in summaries]
        return MonthlyReport(
            year=year,
            month=month,
            rows=rows,
            total_present=sum(s.present for _, s in summaries),
            total_late=sum(s.late for _, s in summaries),
            total_absent=sum(s.absent for _, s in summaries),
        )

from __future__ import annotations

import logging
from datetime import date, timedelta
from typing import Optional

from ..common.datetime_utils import iter_dates, week_bounds
from ..common.validators import require_enum
from ..core.constants import DEFAULT_WEEKLY_SHIFT_LIMIT, SUPERVISOR_WORKDAYS
from ..core.enums import Role, ShiftType, Violation
from ..core.exceptions import NotFoundError, PolicyViolation, ValidationError
from ..core.transaction import TransactionManager
from ..employees.repository import EmployeeRepository
from ..leave.repository import LeaveRequestRepository
from ..shifts.catalog import ShiftCatalog
from .model import WeekSnapshot
from .repository import ScheduleRepository

logger = logging.getLogger(__name__)

ROSTER_SHIFTS = (ShiftType.MORNING, ShiftType.EVENING)


class ScheduleService:
    """Weekly roster: manual morning/evening assignment plus supervisor office days."""

    def __init__(
        self,
        tx: TransactionManager,
        schedules: ScheduleRepository,
        employees: EmployeeRepository,
        leaves: LeaveRequestRepository,
        *,
        catalog: Optional[ShiftCatalog] = None,
        weekly_limit: int = DEFAULT_WEEKLY_SHIFT_LIMIT,
    ):
        self._tx = tx
        self._schedules = schedules
        self._employees = employees
        self._leaves = leaves
        self._catalog = catalog or ShiftCatalog()
        self._weekly_limit = int(weekly_limit)

    def assign(self, *, employee_id: int, shift_type: ShiftType | str, work_date: date) -> WeekSnapshot:
        shift_type = require_enum(ShiftType, shift_type, "Shift type")
        if shift_type not in ROSTER_SHIFTS:
            raise ValidationError("Only morning and evening shifts can be assigned")
        other = ShiftType.EVENING if shift_type == ShiftType.MORNING else ShiftType.MORNING
        week_start, week_end = week_bounds(work_date)

        with self._tx.transaction():
            employee = self._employees.get_by_id(int(employee_id), for_update=True)
            if not employee:
                raise NotFoundError("Employee not found")

            if employee.role != Role.EMPLOYEE:
                raise PolicyViolation(Violation.WRONG_ROLE, "Only operational employees can be assigned")
            if self._schedules.has_shift(employee_id=employee.employee_id, work_date=work_date, shift_type=other):
                raise PolicyViolation(Violation.SAME_DAY_CONFLICT, f"Already assigned to {other.value} shift that day")

            worked = self._schedules.count_in_range(
                employee_id=employee.employee_id,
                start=week_start,
                end=week_end,
                exclude_date=work_date,
            )
            if worked >= self._weekly_limit:
                raise PolicyViolation(Violation.WEEK_LIMIT, f"Reached {self._weekly_limit}-day work week limit")
            if self._leaves.has_approved_covering(employee_id=employee.employee_id, day=work_date):
                raise PolicyViolation(Violation.ON_LEAVE, "Employee has approved leave on this day")

            entry_id = self._schedules.upsert_slot(
                work_date=work_date,
                shift_type=shift_type,
                employee_id=employee.employee_id,
            )
            self._ensure_supervisor_week(week_start)
            snapshot = self._snapshot(week_start)

        logger.info(
            "Assigned employee %s to %s shift on %s (entry=%s)",
            employee.employee_id,
            shift_type.value,
            work_date,
            entry_id,
        )
        return snapshot

    def _ensure_supervisor_week(self, week_start: date) -> int:
        """Fill the Mon-Fri office entries of every supervisor for the week.

        Checked per supervisor and weekday: an office entry created at a
        supervisor's clock-in only covers that one day. Returns the number of
        entries created (0 when the week is already complete).
        """
        workdays_end = week_start + timedelta(days=SUPERVISOR_WORKDAYS - 1)
        supervisors = self._employees.list_by_roles([Role.ADMIN])
        leaves = self._leaves.list_approved_overlapping(
            employee_ids=[s.employee_id for s in supervisors],
            start=week_start,
            end=workdays_end,
        )

        created = 0
        for supervisor in supervisors:
            own_leaves = [lr for lr in leaves if lr.employee_id == supervisor.employee_id]
            for day in iter_dates(week_start, workdays_end):
                if any(lr.covers(day) for lr in own_leaves):
                    continue
                if self._schedules.has_shift(
                    employee_id=supervisor.employee_id,
                    work_date=day,
                    shift_type=ShiftType.OFFICE,
                ):
                    continue
                self._schedules.insert_ignore(
                    employee_id=supervisor.employee_id,
                    work_date=day,
                    shift_type=ShiftType.OFFICE,
                )
                created += 1

        logger.info("Generated %s supervisor office entries for week of %s", created, week_start)
        return created

    def _snapshot(self, week_start: date) -> WeekSnapshot:
        entries = self._schedules.list_range(
            start=week_start,
            end=week_start + timedelta(days=6),
            shift_types=ROSTER_SHIFTS,
        )
        assignments: dict[date, list[Optional[int]]] = {}
        for entry in entries:
            slots = assignments.setdefault(entry.work_date, [None, None])
            slots[0 if entry.shift_type == ShiftType.MORNING else 1] = entry.employee_id
        return WeekSnapshot(week_start=week_start, assignments=assignments)

    def week(self, *, week_start: date) -> WeekSnapshot:
        with self._tx.transaction():
            return self._snapshot(week_start)

    def my_week(self, *, employee_id: int, week_start: date) -> dict[str, dict]:
        with self._tx.transaction():
            entries = self._schedules.list_range(
                start=week_start,
                end=week_start + timedelta(days=6),
                employee_id=int(employee_id),
            )

        out: dict[str, dict] = {}
        for entry in entries:
            shift = self._catalog.get(entry.shift_type)
            day = out.setdefault(entry.work_date.isoformat(), {})
            day[entry.shift_type.value] = {
                "name": shift.name,
                "start_time": shift.start_time.strftime("%H:%M"),
                "end_time": shift.end_time.strftime("%H:%M"),
            }
        return out

    def day(self, *, work_date: date) -> dict[str, Optional[dict]]:
        with self._tx.transaction():
            entries = self._schedules.list_range(start=work_date, end=work_date, shift_types=ROSTER_SHIFTS)
            out: dict[str, Optional[dict]] = {s.value: None for s in ROSTER_SHIFTS}
            for entry in entries:
                employee = self._employees.get_by_id(entry.employee_id)
                out[entry.shift_type.value] = {
                    "entry_id": entry.entry_id,
                    "employee_id": entry.employee_id,
                    "name": employee.name if employee else None,
                }
        return out

    def reset_week(self, *, week_start: date) -> int:
        week_start, week_end = week_bounds(week_start)
        with self._tx.transaction():
            deleted = self._schedules.delete_range(start=week_start, end=week_end)
        logger.info("Reset roster for week of %s (%s entries removed)", week_start, deleted)
        return deleted

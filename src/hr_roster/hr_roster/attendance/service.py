from __future__ import annotations

import logging
from datetime import date, datetime, timedelta
from typing import Optional

from ..core.constants import DEFAULT_HISTORY_LIMIT
from ..core.enums import AttendanceState, Role, ShiftType, Violation
from ..core.exceptions import NotFoundError, PolicyViolation
from ..core.transaction import TransactionManager
from ..employees.model import Employee
from ..employees.repository import EmployeeRepository
from ..leave.repository import LeaveRequestRepository
from ..schedules.model import ScheduleEntry
from ..schedules.repository import ScheduleRepository
from ..shifts.catalog import ShiftCatalog
from ..shifts.model import ShiftPolicy
from .factory import AttendanceStrategyFactory
from .model import AttendanceRecord, ClockInResult, ClockOutResult
from .repository import AttendanceRepository

logger = logging.getLogger(__name__)


class AttendanceService:
    """Clock-in / clock-out state machine.

    NotClockedIn -> ClockedIn -> ClockedOut, with at most one open record per
    employee. Clock-out looks up the latest open record rather than today's
    schedule so that shifts crossing midnight can be closed on the next day.
    """

    def __init__(
        self,
        tx: TransactionManager,
        attendance: AttendanceRepository,
        employees: EmployeeRepository,
        schedules: ScheduleRepository,
        leaves: LeaveRequestRepository,
        *,
        catalog: ShiftCatalog | None = None,
        policy: ShiftPolicy | None = None,
        strategy_factory: AttendanceStrategyFactory | None = None,
    ):
        self._tx = tx
        self._attendance = attendance
        self._employees = employees
        self._schedules = schedules
        self._leaves = leaves
        self._catalog = catalog or ShiftCatalog()
        self._policy = policy or ShiftPolicy()
        self._factory = strategy_factory or AttendanceStrategyFactory(self._policy)

    def _get_employee(self, employee_id: int, *, for_update: bool = False) -> Employee:
        employee = self._employees.get_by_id(int(employee_id), for_update=for_update)
        if not employee:
            raise NotFoundError("Employee not found")
        return employee

    def _schedule_for_today(self, employee: Employee, today: date) -> Optional[ScheduleEntry]:
        entry = self._schedules.get_for_employee_and_date(employee_id=employee.employee_id, work_date=today)
        if entry:
            return entry

        # Supervisors work office hours Mon-Fri even without an explicit roster entry.
        if employee.role == Role.ADMIN and today.weekday() < 5:
            entry_id = self._schedules.insert_ignore(
                employee_id=employee.employee_id,
                work_date=today,
                shift_type=ShiftType.OFFICE,
            )
            logger.info("Synthesised office entry %s for supervisor %s on %s", entry_id, employee.employee_id, today)
            return ScheduleEntry(
                entry_id=entry_id,
                employee_id=employee.employee_id,
                work_date=today,
                shift_type=ShiftType.OFFICE,
            )
        return None

    def clock_in(self, employee_id: int, *, now: datetime) -> ClockInResult:
        today = now.date()

        with self._tx.transaction():
            employee = self._get_employee(employee_id, for_update=True)

            if self._leaves.has_approved_covering(employee_id=employee.employee_id, day=today):
                raise PolicyViolation(Violation.ON_LEAVE, "You have an approved leave today")

            entry = self._schedule_for_today(employee, today)
            if not entry:
                raise PolicyViolation(Violation.NO_SCHEDULE, "You have no schedule today")

            shift = self._catalog.get(entry.shift_type)
            shift_start = shift.starts_at(entry.work_date)
            if now < shift_start - timedelta(minutes=self._policy.early_arrival):
                raise PolicyViolation(
                    Violation.TOO_EARLY,
                    f"It is too early to clock in. Your shift starts at {shift_start:%H:%M}",
                )

            if self._attendance.get_latest_open(employee.employee_id):
                raise PolicyViolation(Violation.ALREADY_CLOCKED_IN, "You are already clocked in")

            strategy = self._factory.for_clock_in(now=now, shift_start=shift_start)
            decision = strategy.decide_clock_in(now=now, shift_start=shift_start)

            attendance_id = self._attendance.create_clock_in(
                employee_id=employee.employee_id,
                entry_id=entry.entry_id,
                clock_in=now.time().replace(microsecond=0),
                status=decision.status,
                late_minutes=decision.late_minutes,
                created_at=now,
            )

        logger.info(
            "Employee %s clocked in (attendance=%s, shift=%s, status=%s)",
            employee.employee_id,
            attendance_id,
            entry.shift_type.value,
            decision.status.value,
        )
        return ClockInResult(
            attendance_id=attendance_id,
            status=decision.status,
            schedule_entry_id=entry.entry_id,
            late_minutes=decision.late_minutes,
        )

    def clock_out(self, employee_id: int, *, now: datetime) -> ClockOutResult:
        with self._tx.transaction():
            employee = self._get_employee(employee_id, for_update=True)

            record = self._attendance.get_latest_open(employee.employee_id)
            if not record:
                raise PolicyViolation(Violation.NO_OPEN_RECORD, "No active sign-in record was found to sign off")

            entry = None
            if record.schedule_entry_id is not None:
                entry = self._schedules.get_by_id(entry_id=record.schedule_entry_id)

            early_minutes = 0
            if entry:
                shift = self._catalog.get(entry.shift_type)
                shift_end = shift.ends_at(entry.work_date)
                if now > shift_end + timedelta(minutes=self._policy.clock_out_grace):
                    raise PolicyViolation(
                        Violation.WINDOW_CLOSED,
                        "Clock-out window closed (max 1 hour after shift end). Please contact admin",
                    )

                strategy = self._factory.for_clock_out(now=now, shift=shift, shift_end=shift_end)
                decision = strategy.decide_clock_out(now=now, shift_end=shift_end, current=record.status)
                early_minutes = decision.early_departure_minutes

            if not self._attendance.close(
                attendance_id=record.attendance_id,
                clock_out=now.time().replace(microsecond=0),
                early_departure_minutes=early_minutes,
            ):
                raise PolicyViolation(Violation.NO_OPEN_RECORD, "Attendance record was already closed")

        if early_minutes:
            logger.info("Employee %s left %s minutes early (attendance=%s)", employee.employee_id, early_minutes, record.attendance_id)
        logger.info("Employee %s clocked out (attendance=%s)", employee.employee_id, record.attendance_id)
        return ClockOutResult(
            attendance_id=record.attendance_id,
            early_departure=early_minutes > 0,
            early_departure_minutes=early_minutes,
        )

    def current_state(self, employee_id: int, *, today: date) -> AttendanceState:
        with self._tx.transaction():
            employee = self._get_employee(employee_id)
            if self._attendance.get_latest_open(employee.employee_id):
                return AttendanceState.CLOCKED_IN

            entry = self._schedules.get_for_employee_and_date(employee_id=employee.employee_id, work_date=today)
            if entry and self._attendance.get_for_entry(employee_id=employee.employee_id, entry_id=entry.entry_id):
                return AttendanceState.CLOCKED_OUT
            return AttendanceState.NOT_CLOCKED_IN

    def history(self, employee_id: int, *, limit: int = DEFAULT_HISTORY_LIMIT) -> list[dict]:
        with self._tx.transaction():
            rows = self._attendance.get_recent_for_employee(int(employee_id), int(limit))
        return [self._to_ui(r) for r in rows]

    @staticmethod
    def _to_ui(r: AttendanceRecord) -> dict:
        return {
            "attendance_id": r.attendance_id,
            "clock_in": r.clock_in.strftime("%H:%M:%S"),
            "clock_out": r.clock_out.strftime("%H:%M:%S") if r.clock_out else "-",
            "status": r.status.value,
            "late_minutes": r.late_minutes,
            "early_departure_minutes": r.early_departure_minutes,
        }

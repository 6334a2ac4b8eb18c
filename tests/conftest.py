from __future__ import annotations

import copy
from contextlib import contextmanager
from dataclasses import dataclass, field, replace
from datetime import date, datetime, time
from typing import Iterator, Optional, Sequence

import pytest

from src.hr_roster.hr_roster.attendance.model import AttendanceRecord, AttendanceReportRow
from src.hr_roster.hr_roster.container import Container, wire
from src.hr_roster.hr_roster.core.enums import AttendanceStatus, LeaveType, RequestStatus, Role, ShiftType
from src.hr_roster.hr_roster.employees.model import BALANCE_COLUMNS, Employee
from src.hr_roster.hr_roster.leave.events import LeaveDecided
from src.hr_roster.hr_roster.leave.model import LeaveRequest
from src.hr_roster.hr_roster.schedules.model import ScheduleEntry


@dataclass
class InMemoryStore:
    employees: dict[int, Employee] = field(default_factory=dict)
    entries: dict[int, ScheduleEntry] = field(default_factory=dict)
    attendances: dict[int, AttendanceRecord] = field(default_factory=dict)
    leaves: dict[int, LeaveRequest] = field(default_factory=dict)
    next_id: int = 0

    def new_id(self) -> int:
        self.next_id += 1
        return self.next_id

    def add_employee(self, employee_id: int, role: Role = Role.EMPLOYEE, **balances) -> Employee:
        employee = Employee(
            employee_id=employee_id,
            name=f"User {employee_id}",
            email=f"user{employee_id}@example.com",
            role=role,
            **balances,
        )
        self.employees[employee_id] = employee
        return employee

    def add_entry(self, employee_id: int, work_date: date, shift_type: ShiftType = ShiftType.MORNING) -> int:
        entry_id = self.new_id()
        self.entries[entry_id] = ScheduleEntry(
            entry_id=entry_id,
            employee_id=employee_id,
            work_date=work_date,
            shift_type=shift_type,
        )
        return entry_id

    def add_leave(
        self,
        employee_id: int,
        start: date,
        end: date,
        *,
        leave_type: LeaveType = LeaveType.ANNUAL,
        status: RequestStatus = RequestStatus.PENDING,
    ) -> int:
        request_id = self.new_id()
        self.leaves[request_id] = LeaveRequest(
            request_id=request_id,
            employee_id=employee_id,
            leave_type=leave_type,
            start_date=start,
            end_date=end,
            status=status,
            support_doc=None if leave_type == LeaveType.ANNUAL else "doc.pdf",
        )
        return request_id

    def add_attendance(
        self,
        employee_id: int,
        entry_id: Optional[int],
        clock_in: time,
        clock_out: Optional[time] = None,
        status: AttendanceStatus = AttendanceStatus.ON_TIME,
    ) -> int:
        attendance_id = self.new_id()
        self.attendances[attendance_id] = AttendanceRecord(
            attendance_id=attendance_id,
            employee_id=employee_id,
            schedule_entry_id=entry_id,
            clock_in=clock_in,
            clock_out=clock_out,
            status=status,
        )
        return attendance_id

    def entries_for(self, employee_id: int) -> list[ScheduleEntry]:
        return sorted(
            (e for e in self.entries.values() if e.employee_id == employee_id),
            key=lambda e: (e.work_date, e.shift_type.value),
        )


class InMemoryTransactionManager:
    """Snapshot the store on entry and restore it when the block raises."""

    def __init__(self, store: InMemoryStore):
        self._store = store
        self._depth = 0
        self.commits = 0
        self.rollbacks = 0

    @contextmanager
    def transaction(self) -> Iterator[None]:
        if self._depth:
            yield
            return

        snapshot = copy.deepcopy(self._store.__dict__)
        self._depth += 1
        try:
            yield
            self.commits += 1
        except Exception:
            self._store.__dict__.clear()
            self._store.__dict__.update(snapshot)
            self.rollbacks += 1
            raise
        finally:
            self._depth -= 1


class InMemoryEmployees:
    def __init__(self, store: InMemoryStore):
        self._s = store

    def get_by_id(self, employee_id: int, *, for_update: bool = False) -> Optional[Employee]:
        return self._s.employees.get(employee_id)

    def list_by_roles(self, roles: Sequence[Role]) -> Sequence[Employee]:
        return [e for _, e in sorted(self._s.employees.items()) if e.role in roles]

    def deduct_balance(self, *, employee_id: int, leave_type: LeaveType, days: int) -> bool:
        employee = self._s.employees.get(employee_id)
        if not employee or employee.balance(leave_type) < days:
            return False
        self._s.employees[employee_id] = replace(
            employee, **{BALANCE_COLUMNS[leave_type]: employee.balance(leave_type) - days}
        )
        return True

    def set_balance(self, *, employee_id: int, leave_type: LeaveType, balance: int) -> bool:
        employee = self._s.employees.get(employee_id)
        if not employee:
            return False
        self._s.employees[employee_id] = replace(employee, **{BALANCE_COLUMNS[leave_type]: balance})
        return True


class InMemorySchedules:
    def __init__(self, store: InMemoryStore):
        self._s = store

    def get_by_id(self, *, entry_id: int) -> Optional[ScheduleEntry]:
        return self._s.entries.get(entry_id)

    def get_for_employee_and_date(self, *, employee_id: int, work_date: date) -> Optional[ScheduleEntry]:
        for entry in self._s.entries_for(employee_id):
            if entry.work_date == work_date:
                return entry
        return None

    def has_shift(self, *, employee_id: int, work_date: date, shift_type: ShiftType) -> bool:
        return any(
            e.work_date == work_date and e.shift_type == shift_type for e in self._s.entries_for(employee_id)
        )

    def count_in_range(self, *, employee_id: int, start: date, end: date, exclude_date: Optional[date] = None) -> int:
        days = {
            e.work_date
            for e in self._s.entries_for(employee_id)
            if start <= e.work_date <= end and e.work_date != exclude_date
        }
        return len(days)

    def upsert_slot(self, *, work_date: date, shift_type: ShiftType, employee_id: int) -> int:
        for entry in self._s.entries.values():
            if entry.work_date == work_date and entry.shift_type == shift_type:
                self._s.entries[entry.entry_id] = replace(entry, employee_id=employee_id)
                return entry.entry_id
        return self._s.add_entry(employee_id, work_date, shift_type)

    def insert_ignore(self, *, employee_id: int, work_date: date, shift_type: ShiftType) -> int:
        for entry in self._s.entries_for(employee_id):
            if entry.work_date == work_date and entry.shift_type == shift_type:
                return entry.entry_id
        return self._s.add_entry(employee_id, work_date, shift_type)

    def _delete(self, predicate) -> int:
        doomed = [entry_id for entry_id, e in self._s.entries.items() if predicate(e)]
        for entry_id in doomed:
            del self._s.entries[entry_id]
            # ON DELETE SET NULL
            for a in list(self._s.attendances.values()):
                if a.schedule_entry_id == entry_id:
                    self._s.attendances[a.attendance_id] = replace(a, schedule_entry_id=None)
        return len(doomed)

    def delete_for_employee_in_range(self, *, employee_id: int, start: date, end: date) -> int:
        return self._delete(lambda e: e.employee_id == employee_id and start <= e.work_date <= end)

    def delete_range(self, *, start: date, end: date) -> int:
        return self._delete(lambda e: start <= e.work_date <= end)

    def list_range(
        self,
        *,
        start: date,
        end: date,
        employee_id: Optional[int] = None,
        shift_types: Optional[Sequence[ShiftType]] = None,
    ) -> Sequence[ScheduleEntry]:
        out = [
            e
            for e in self._s.entries.values()
            if start <= e.work_date <= end
            and (employee_id is None or e.employee_id == employee_id)
            and (shift_types is None or e.shift_type in shift_types)
        ]
        return sorted(out, key=lambda e: (e.work_date, e.shift_type.value))

    def count_without_attendance(self, *, employee_id: int, start: date, end: date, before: date) -> int:
        referenced = {
            (a.employee_id, a.schedule_entry_id) for a in self._s.attendances.values() if a.schedule_entry_id
        }
        return sum(
            1
            for e in self._s.entries_for(employee_id)
            if start <= e.work_date <= end and e.work_date < before and (employee_id, e.entry_id) not in referenced
        )


class InMemoryAttendance:
    def __init__(self, store: InMemoryStore):
        self._s = store

    def _for(self, employee_id: int) -> list[AttendanceRecord]:
        return sorted(
            (a for a in self._s.attendances.values() if a.employee_id == employee_id),
            key=lambda a: a.attendance_id,
            reverse=True,
        )

    def get_latest_open(self, employee_id: int) -> Optional[AttendanceRecord]:
        return next((a for a in self._for(employee_id) if a.clock_out is None), None)

    def get_for_entry(self, *, employee_id: int, entry_id: int) -> Optional[AttendanceRecord]:
        return next((a for a in self._for(employee_id) if a.schedule_entry_id == entry_id), None)

    def get_recent_for_employee(self, employee_id: int, limit: int) -> Sequence[AttendanceRecord]:
        return self._for(employee_id)[:limit]

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
        attendance_id = self._s.new_id()
        self._s.attendances[attendance_id] = AttendanceRecord(
            attendance_id=attendance_id,
            employee_id=employee_id,
            schedule_entry_id=entry_id,
            clock_in=clock_in,
            clock_out=None,
            status=status,
            late_minutes=late_minutes,
            created_at=created_at,
        )
        return attendance_id

    def close(self, *, attendance_id: int, clock_out: time, early_departure_minutes: int) -> bool:
        record = self._s.attendances.get(attendance_id)
        if not record or record.clock_out is not None:
            return False
        self._s.attendances[attendance_id] = replace(
            record, clock_out=clock_out, early_departure_minutes=early_departure_minutes
        )
        return True

    def get_report_rows(self, *, employee_id: int, start_date: date, end_date: date) -> Sequence[AttendanceReportRow]:
        rows = []
        for a in sorted(self._for(employee_id), key=lambda a: a.attendance_id):
            entry = self._s.entries.get(a.schedule_entry_id) if a.schedule_entry_id else None
            if not entry or not (start_date <= entry.work_date <= end_date):
                continue
            rows.append(
                AttendanceReportRow(
                    attendance_id=a.attendance_id,
                    employee_id=a.employee_id,
                    work_date=entry.work_date,
                    shift_type=entry.shift_type,
                    clock_in=a.clock_in,
                    clock_out=a.clock_out,
                    status=a.status,
                )
            )
        return rows


class InMemoryLeaves:
    def __init__(self, store: InMemoryStore):
        self._s = store

    def create(
        self,
        *,
        employee_id: int,
        leave_type: LeaveType,
        start_date: date,
        end_date: date,
        remark: Optional[str],
        support_doc: Optional[str],
        created_at: datetime,
    ) -> int:
        request_id = self._s.new_id()
        self._s.leaves[request_id] = LeaveRequest(
            request_id=request_id,
            employee_id=employee_id,
            leave_type=leave_type,
            start_date=start_date,
            end_date=end_date,
            status=RequestStatus.PENDING,
            remark=remark,
            support_doc=support_doc,
            created_at=created_at,
        )
        return request_id

    def get_by_id(self, *, request_id: int, for_update: bool = False) -> Optional[LeaveRequest]:
        return self._s.leaves.get(request_id)

    def list_active_for_employee(self, *, employee_id: int) -> Sequence[LeaveRequest]:
        return [
            r
            for r in self._s.leaves.values()
            if r.employee_id == employee_id and r.status in (RequestStatus.PENDING, RequestStatus.APPROVED)
        ]

    def has_approved_covering(self, *, employee_id: int, day: date) -> bool:
        return any(
            r.employee_id == employee_id and r.status == RequestStatus.APPROVED and r.covers(day)
            for r in self._s.leaves.values()
        )

    def list_approved_overlapping(self, *, employee_ids: Sequence[int], start: date, end: date) -> Sequence[LeaveRequest]:
        return [
            r
            for r in self._s.leaves.values()
            if r.employee_id in employee_ids
            and r.status == RequestStatus.APPROVED
            and r.start_date <= end
            and r.end_date >= start
        ]

    def decide(self, *, request_id: int, status: RequestStatus, decided_by: int, decided_at: datetime) -> bool:
        request = self._s.leaves.get(request_id)
        if not request or request.status != RequestStatus.PENDING:
            return False
        self._s.leaves[request_id] = replace(request, status=status, decided_by=decided_by, decided_at=decided_at)
        return True

    def delete_pending(self, *, request_id: int) -> bool:
        request = self._s.leaves.get(request_id)
        if not request or request.status != RequestStatus.PENDING:
            return False
        del self._s.leaves[request_id]
        return True

    def list_for_employees(self, *, employee_ids: Sequence[int], limit: int = 200) -> Sequence[LeaveRequest]:
        out = [r for r in self._s.leaves.values() if r.employee_id in employee_ids]
        out.sort(key=lambda r: r.request_id, reverse=True)
        return out[:limit]

    def approved_counts_by_type(self, *, employee_ids: Sequence[int]) -> dict[LeaveType, int]:
        counts: dict[LeaveType, int] = {}
        for r in self._s.leaves.values():
            if r.employee_id in employee_ids and r.status == RequestStatus.APPROVED:
                counts[r.leave_type] = counts.get(r.leave_type, 0) + 1
        return counts


class RecordingNotifier:
    def __init__(self, fail: bool = False):
        self.fail = fail
        self.events: list[LeaveDecided] = []

    def leave_decided(self, event: LeaveDecided) -> None:
        self.events.append(event)
        if self.fail:
            raise RuntimeError("smtp down")


@pytest.fixture
def fixed_now() -> datetime:
    # Monday
    return datetime(2026, 2, 2, 6, 5, 0)


@pytest.fixture
def store() -> InMemoryStore:
    return InMemoryStore()


@pytest.fixture
def tx(store: InMemoryStore) -> InMemoryTransactionManager:
    return InMemoryTransactionManager(store)


@pytest.fixture
def notifier() -> RecordingNotifier:
    return RecordingNotifier()


@pytest.fixture
def container(store: InMemoryStore, tx: InMemoryTransactionManager, notifier: RecordingNotifier) -> Container:
    return wire(
        tx=tx,
        employees_repo=InMemoryEmployees(store),
        attendance_repo=InMemoryAttendance(store),
        schedules_repo=InMemorySchedules(store),
        leaves_repo=InMemoryLeaves(store),
        notifier=notifier,
    )

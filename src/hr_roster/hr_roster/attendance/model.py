from __future__ import annotations

from dataclasses import dataclass
from datetime import date, datetime, time
from typing import Optional

from ..core.enums import AttendanceStatus, ShiftType


@dataclass(frozen=True)
class AttendanceRecord:
    """Domain entity: one clock-in/clock-out cycle.

    ``clock_out`` is None while the record is open.
    """

    attendance_id: int
    employee_id: int
    schedule_entry_id: Optional[int]
    clock_in: time
    clock_out: Optional[time]
    status: AttendanceStatus
    late_minutes: int = 0
    early_departure_minutes: int = 0
    created_at: Optional[datetime] = None

    @property
    def is_open(self) -> bool:
        return self.clock_out is None


@dataclass(frozen=True)
class AttendanceReportRow:
    """Read-model for reports: a record joined with its schedule entry."""

    attendance_id: int
    employee_id: int
    work_date: date
    shift_type: ShiftType
    clock_in: time
    clock_out: Optional[time]
    status: AttendanceStatus


@dataclass(frozen=True)
class ClockInResult:
    attendance_id: int
    status: AttendanceStatus
    schedule_entry_id: int
    late_minutes: int = 0

    def to_dict(self) -> dict:
        return {
            "attendance_id": self.attendance_id,
            "status": self.status.value,
            "schedule_entry_id": self.schedule_entry_id,
            "late_minutes": self.late_minutes,
        }


@dataclass(frozen=True)
class ClockOutResult:
    attendance_id: int
    early_departure: bool = False
    early_departure_minutes: int = 0

    def to_dict(self) -> dict:
        return {
            "attendance_id": self.attendance_id,
            "early_departure": self.early_departure,
            "early_departure_minutes": self.early_departure_minutes,
        }

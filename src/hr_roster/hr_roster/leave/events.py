from __future__ import annotations

from dataclasses import dataclass
from datetime import date
from typing import Optional

from ..core.enums import LeaveType, RequestStatus


@dataclass(frozen=True)
class ReassignmentNeeded:
    """Approved leave removed roster entries; a supervisor has gaps to fill."""

    employee_id: int
    employee_name: str
    start_date: date
    end_date: date
    count: int

    @property
    def dates_label(self) -> str:
        if self.start_date == self.end_date:
            return f"{self.start_date:%d %b}"
        return f"{self.start_date:%d %b} - {self.end_date:%d %b}"

    def to_dict(self) -> dict:
        return {
            "employee_id": self.employee_id,
            "name": self.employee_name,
            "start_date": self.start_date.isoformat(),
            "end_date": self.end_date.isoformat(),
            "dates": self.dates_label,
            "count": self.count,
        }


@dataclass(frozen=True)
class LeaveDecided:
    request_id: int
    employee_id: int
    employee_email: str
    leave_type: LeaveType
    status: RequestStatus
    reassignment: Optional[ReassignmentNeeded] = None

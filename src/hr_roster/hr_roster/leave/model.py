from __future__ import annotations

from dataclasses import dataclass
from datetime import date, datetime
from typing import Optional

from ..core.enums import LeaveType, RequestStatus


@dataclass(frozen=True)
class LeaveRequest:
    request_id: int
    employee_id: int
    leave_type: LeaveType
    start_date: date
    end_date: date
    status: RequestStatus
    remark: Optional[str] = None
    support_doc: Optional[str] = None
    created_at: Optional[datetime] = None
    decided_by: Optional[int] = None
    decided_at: Optional[datetime] = None

    def covers(self, day: date) -> bool:
        return self.start_date <= day <= self.end_date

    @property
    def days(self) -> int:
        return (self.end_date - self.start_date).days + 1

    def to_dict(self) -> dict:
        return {
            "request_id": self.request_id,
            "employee_id": self.employee_id,
            "type": self.leave_type.value,
            "start_date": self.start_date.isoformat(),
            "end_date": self.end_date.isoformat(),
            "status": int(self.status),
            "remark": self.remark or "",
            "has_support_doc": bool(self.support_doc),
        }


@dataclass(frozen=True)
class LeaveBalances:
    annual: int
    sick: int
    emergency: int

    def to_dict(self) -> dict:
        return {
            LeaveType.ANNUAL.value: self.annual,
            LeaveType.SICK.value: self.sick,
            LeaveType.EMERGENCY.value: self.emergency,
        }

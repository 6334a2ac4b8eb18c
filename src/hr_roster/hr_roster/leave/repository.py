from __future__ import annotations

from datetime import date, datetime
from typing import Optional, Protocol, Sequence

from ..core.enums import LeaveType, RequestStatus
from .model import LeaveRequest


class LeaveRequestRepository(Protocol):
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
        raise NotImplementedError

    def get_by_id(self, *, request_id: int, for_update: bool = False) -> Optional[LeaveRequest]:
        raise NotImplementedError

    def list_active_for_employee(self, *, employee_id: int) -> Sequence[LeaveRequest]:
        """Pending and approved requests of one employee."""

        raise NotImplementedError

    def has_approved_covering(self, *, employee_id: int, day: date) -> bool:
        raise NotImplementedError

    def list_approved_overlapping(self, *, employee_ids: Sequence[int], start: date, end: date) -> Sequence[LeaveRequest]:
        raise NotImplementedError

    def decide(self, *, request_id: int, status: RequestStatus, decided_by: int, decided_at: datetime) -> bool:
        """Move a PENDING request to ``status``. Returns False if it was not pending."""

        raise NotImplementedError

    def delete_pending(self, *, request_id: int) -> bool:
        raise NotImplementedError

    def list_for_employees(self, *, employee_ids: Sequence[int], limit: int = 200) -> Sequence[LeaveRequest]:
        """Newest first."""

        raise NotImplementedError

    def approved_counts_by_type(self, *, employee_ids: Sequence[int]) -> dict[LeaveType, int]:
        raise NotImplementedError

from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import date, datetime
from typing import Optional

from ..common.validators import optional_text, require_date_range, require_enum
from ..core.enums import Decision, LeaveType, RequestStatus, Role, Violation
from ..core.exceptions import AuthorizationError, NotFoundError, PolicyViolation
from ..core.transaction import TransactionManager
from ..employees.model import Employee
from ..employees.repository import EmployeeRepository
from ..notifications.notifier import LoggingNotifier, Notifier
from ..schedules.repository import ScheduleRepository
from .events import LeaveDecided, ReassignmentNeeded
from .ledger import LeaveBalanceLedger, day_count
from .model import LeaveBalances, LeaveRequest
from .repository import LeaveRequestRepository

logger = logging.getLogger(__name__)

# Leave types whose approval frees the employee's roster slots.
CASCADING_TYPES = frozenset({LeaveType.SICK, LeaveType.EMERGENCY})


@dataclass(frozen=True)
class DecisionResult:
    request_id: int
    status: RequestStatus
    reassignment: Optional[ReassignmentNeeded] = None

    def to_dict(self) -> dict:
        return {
            "request_id": self.request_id,
            "status": int(self.status),
            "reassignment_needed": self.reassignment.to_dict() if self.reassignment else None,
        }


def can_decide(approver: Employee, requester: Employee) -> bool:
    """Owners decide supervisors' requests, supervisors decide employees' requests."""
    if approver.employee_id == requester.employee_id:
        return False
    if approver.role == Role.OWNER:
        return requester.role == Role.ADMIN
    if approver.role == Role.ADMIN:
        return requester.role == Role.EMPLOYEE
    return False


class LeaveService:
    """Leave submission and the approval workflow.

    PENDING -> APPROVED and PENDING -> REJECTED are the only transitions.
    Approval deducts the balance and, for sick/emergency leave, removes the
    employee's roster entries in the same transaction. The decision
    notification is sent after commit and never undoes the decision.
    """

    def __init__(
        self,
        tx: TransactionManager,
        leaves: LeaveRequestRepository,
        employees: EmployeeRepository,
        schedules: ScheduleRepository,
        ledger: LeaveBalanceLedger,
        *,
        notifier: Optional[Notifier] = None,
    ):
        self._tx = tx
        self._leaves = leaves
        self._employees = employees
        self._schedules = schedules
        self._ledger = ledger
        self._notifier = notifier or LoggingNotifier()

    def _get_employee(self, employee_id: int, *, for_update: bool = False) -> Employee:
        employee = self._employees.get_by_id(int(employee_id), for_update=for_update)
        if not employee:
            raise NotFoundError("Employee not found")
        return employee

    def submit(
        self,
        *,
        employee_id: int,
        leave_type: LeaveType | str,
        start_date: date,
        end_date: Optional[date],
        remark: Optional[str] = None,
        support_doc: Optional[str] = None,
        today: date,
        now: Optional[datetime] = None,
    ) -> int:
        leave_type = require_enum(LeaveType, leave_type, "Leave type")
        start_date, end_date = require_date_range(start_date, end_date)
        support_doc = optional_text(support_doc)
        days = day_count(start_date, end_date)

        with self._tx.transaction():
            employee = self._get_employee(employee_id, for_update=True)

            self._ledger.check_submission_policy(
                leave_type,
                start_date,
                end_date,
                today=today,
                has_document=support_doc is not None,
            )
            self._ledger.ensure_sufficient(employee, leave_type, days)
            self._ledger.check_overlap(employee.employee_id, start_date, end_date)

            request_id = self._leaves.create(
                employee_id=employee.employee_id,
                leave_type=leave_type,
                start_date=start_date,
                end_date=end_date,
                remark=optional_text(remark),
                support_doc=support_doc,
                created_at=now or datetime.combine(today, datetime.min.time()),
            )

        logger.info(
            "Employee %s submitted %s request #%s (%s..%s)",
            employee.employee_id,
            leave_type.value,
            request_id,
            start_date,
            end_date,
        )
        return request_id

    def decide(self, *, request_id: int, approver_id: int, decision: Decision | str, now: datetime) -> DecisionResult:
        decision = require_enum(Decision, decision, "Decision")

        with self._tx.transaction():
            request = self._leaves.get_by_id(request_id=int(request_id), for_update=True)
            if not request:
                raise NotFoundError("Leave request not found")

            approver = self._get_employee(approver_id)
            requester = self._get_employee(request.employee_id, for_update=True)
            if not can_decide(approver, requester):
                raise AuthorizationError("You are not allowed to decide this leave request")

            if request.status != RequestStatus.PENDING:
                raise PolicyViolation(Violation.NOT_PENDING, "This leave request has already been decided")

            reassignment = None
            if decision == Decision.APPROVE:
                status = RequestStatus.APPROVED
                self._ledger.deduct(requester.employee_id, request.leave_type, request.days)
                reassignment = self._cancel_schedule(requester, request)
            else:
                status = RequestStatus.REJECTED

            if not self._leaves.decide(
                request_id=request.request_id,
                status=status,
                decided_by=approver.employee_id,
                decided_at=now,
            ):
                raise PolicyViolation(Violation.NOT_PENDING, "This leave request has already been decided")

        logger.info(
            "Leave request #%s %s by %s",
            request.request_id,
            status.name.lower(),
            approver.employee_id,
        )
        self._notify(
            LeaveDecided(
                request_id=request.request_id,
                employee_id=requester.employee_id,
                employee_email=requester.email,
                leave_type=request.leave_type,
                status=status,
                reassignment=reassignment,
            )
        )
        return DecisionResult(request_id=request.request_id, status=status, reassignment=reassignment)

    def _cancel_schedule(self, requester: Employee, request: LeaveRequest) -> Optional[ReassignmentNeeded]:
        if request.leave_type not in CASCADING_TYPES:
            return None

        deleted = self._schedules.delete_for_employee_in_range(
            employee_id=requester.employee_id,
            start=request.start_date,
            end=request.end_date,
        )
        if deleted <= 0:
            return None

        logger.info(
            "Removed %s roster entr%s of employee %s for leave #%s",
            deleted,
            "y" if deleted == 1 else "ies",
            requester.employee_id,
            request.request_id,
        )
        return ReassignmentNeeded(
            employee_id=requester.employee_id,
            employee_name=requester.name,
            start_date=request.start_date,
            end_date=request.end_date,
            count=deleted,
        )

    def _notify(self, event: LeaveDecided) -> None:
        try:
            self._notifier.leave_decided(event)
        except Exception:
            logger.exception("Leave decision notification failed for request #%s", event.request_id)

    def withdraw(self, *, request_id: int, employee_id: int) -> None:
        with self._tx.transaction():
            request = self._leaves.get_by_id(request_id=int(request_id), for_update=True)
            if not request:
                raise NotFoundError("Leave request not found")
            if request.employee_id != int(employee_id):
                raise AuthorizationError("You can only withdraw your own leave requests")
            if request.status != RequestStatus.PENDING or not self._leaves.delete_pending(request_id=request.request_id):
                raise PolicyViolation(Violation.NOT_PENDING, "Only pending requests can be withdrawn")

        logger.info("Employee %s withdrew leave request #%s", employee_id, request_id)

    def _visible_employee_ids(self, viewer: Employee) -> list[int]:
        if viewer.role == Role.OWNER:
            return [e.employee_id for e in self._employees.list_by_roles([Role.ADMIN])]
        if viewer.role == Role.ADMIN:
            ids = [e.employee_id for e in self._employees.list_by_roles([Role.EMPLOYEE])]
            return ids + [viewer.employee_id]
        return [viewer.employee_id]

    def list_for_viewer(self, *, viewer_id: int, limit: int = 200) -> list[LeaveRequest]:
        with self._tx.transaction():
            viewer = self._get_employee(viewer_id)
            return list(self._leaves.list_for_employees(employee_ids=self._visible_employee_ids(viewer), limit=limit))

    def balances(self, *, employee_id: int) -> LeaveBalances:
        with self._tx.transaction():
            employee = self._get_employee(employee_id)
        return LeaveBalances(
            annual=employee.annual_leave_balance,
            sick=employee.sick_leave_balance,
            emergency=employee.emergency_leave_balance,
        )

    def approved_totals(self, *, viewer_id: int) -> dict[str, int]:
        """Approved request counts per type, for supervisor and owner views."""
        with self._tx.transaction():
            viewer = self._get_employee(viewer_id)
            if viewer.role == Role.OWNER:
                scope = [Role.ADMIN]
            elif viewer.role == Role.ADMIN:
                scope = [Role.EMPLOYEE]
            else:
                raise AuthorizationError("Only supervisors and owners can view leave totals")
            ids = [e.employee_id for e in self._employees.list_by_roles(scope)]
            counts = self._leaves.approved_counts_by_type(employee_ids=ids)
        return {t.value: counts.get(t, 0) for t in LeaveType}

    def restore_balance(self, *, actor_id: int, employee_id: int, leave_type: LeaveType | str, days: int) -> int:
        leave_type = require_enum(LeaveType, leave_type, "Leave type")
        with self._tx.transaction():
            actor = self._get_employee(actor_id)
            target = self._get_employee(employee_id)
            if not can_decide(actor, target):
                raise AuthorizationError("You are not allowed to adjust this employee's balance")
            return self._ledger.restore(target.employee_id, leave_type, int(days))

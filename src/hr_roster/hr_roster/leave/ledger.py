from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import date, timedelta
from typing import Optional

from ..core.constants import (
    DEFAULT_ANNUAL_MAX_DAYS,
    DEFAULT_ANNUAL_NOTICE_DAYS,
    MAX_ANNUAL_BALANCE,
    MAX_EMERGENCY_BALANCE,
    MAX_SICK_BALANCE,
)
from ..core.enums import LeaveType, Violation
from ..core.exceptions import NotFoundError, PolicyViolation, ValidationError
from ..employees.model import Employee
from ..employees.repository import EmployeeRepository
from .repository import LeaveRequestRepository

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class LeavePolicy:
    annual_notice_days: int = DEFAULT_ANNUAL_NOTICE_DAYS
    annual_max_days: int = DEFAULT_ANNUAL_MAX_DAYS
    max_annual: int = MAX_ANNUAL_BALANCE
    max_sick: int = MAX_SICK_BALANCE
    max_emergency: int = MAX_EMERGENCY_BALANCE

    def maximum(self, leave_type: LeaveType) -> int:
        return {
            LeaveType.ANNUAL: self.max_annual,
            LeaveType.SICK: self.max_sick,
            LeaveType.EMERGENCY: self.max_emergency,
        }[leave_type]


def day_count(start: date, end: date) -> int:
    """Inclusive number of days in [start, end]."""
    return (end - start).days + 1


def ranges_overlap(start: date, end: date, other_start: date, other_end: date) -> bool:
    return (
        other_start <= start <= other_end
        or other_start <= end <= other_end
        or (start <= other_start and other_end <= end)
    )


class LeaveBalanceLedger:
    """Per-employee, per-type leave balances.

    Deduction is all-or-nothing and guarded in the database by
    ``balance >= days``; balances never go below zero.
    """

    def __init__(
        self,
        employees: EmployeeRepository,
        leaves: LeaveRequestRepository,
        *,
        policy: Optional[LeavePolicy] = None,
    ):
        self._employees = employees
        self._leaves = leaves
        self._policy = policy or LeavePolicy()

    @property
    def policy(self) -> LeavePolicy:
        return self._policy

    def ensure_sufficient(self, employee: Employee, leave_type: LeaveType, days: int) -> None:
        if employee.balance(leave_type) < days:
            raise PolicyViolation(
                Violation.INSUFFICIENT_BALANCE,
                f"Insufficient leave balance for {leave_type.value} ({employee.balance(leave_type)} left, {days} requested)",
            )

    def deduct(self, employee_id: int, leave_type: LeaveType, days: int) -> None:
        if days <= 0:
            raise ValidationError("Days to deduct must be positive")
        if not self._employees.deduct_balance(employee_id=employee_id, leave_type=leave_type, days=days):
            raise PolicyViolation(Violation.INSUFFICIENT_BALANCE, f"Insufficient leave balance for {leave_type.value}")
        logger.info("Deducted %s day(s) of %s from employee %s", days, leave_type.value, employee_id)

    def restore(self, employee_id: int, leave_type: LeaveType, days: int) -> int:
        """Administrative correction. Returns the new balance, capped at the policy maximum."""
        if days <= 0:
            raise ValidationError("Days to restore must be positive")
        employee = self._employees.get_by_id(employee_id, for_update=True)
        if not employee:
            raise NotFoundError("Employee not found")

        balance = min(employee.balance(leave_type) + days, self._policy.maximum(leave_type))
        self._employees.set_balance(employee_id=employee_id, leave_type=leave_type, balance=balance)
        logger.info("Restored %s balance of employee %s to %s", leave_type.value, employee_id, balance)
        return balance

    def check_overlap(self, employee_id: int, start: date, end: date) -> None:
        for existing in self._leaves.list_active_for_employee(employee_id=employee_id):
            if ranges_overlap(start, end, existing.start_date, existing.end_date):
                raise PolicyViolation(
                    Violation.OVERLAP,
                    f"Leave overlaps request #{existing.request_id} "
                    f"({existing.start_date.isoformat()} - {existing.end_date.isoformat()})",
                )

    def check_submission_policy(
        self,
        leave_type: LeaveType,
        start: date,
        end: date,
        *,
        today: date,
        has_document: bool,
    ) -> None:
        if start < today:
            raise PolicyViolation(Violation.PAST_DATE, "You can't make a leave request before today")

        if leave_type == LeaveType.ANNUAL:
            if start < today + timedelta(days=self._policy.annual_notice_days):
                raise PolicyViolation(
                    Violation.ADVANCE_NOTICE,
                    f"Annual leave must be requested at least {self._policy.annual_notice_days} days in advance",
                )
            if day_count(start, end) > self._policy.annual_max_days:
                raise PolicyViolation(
                    Violation.MAX_DURATION,
                    f"Annual leave can't exceed {self._policy.annual_max_days} consecutive days",
                )
        elif leave_type in (LeaveType.SICK, LeaveType.EMERGENCY):
            if not has_document:
                raise PolicyViolation(Violation.MISSING_DOCUMENT, f"{leave_type.value} requires a supporting document")

from __future__ import annotations

from dataclasses import dataclass

from ..core.enums import LeaveType, Role


@dataclass(frozen=True)
class Employee:
    """Domain entity: an account that can be scheduled.

    Note: Plain data object; the balance counters are only changed through
    the leave ledger.
    """

    employee_id: int
    name: str
    email: str
    role: Role
    annual_leave_balance: int = 14
    sick_leave_balance: int = 14
    emergency_leave_balance: int = 7

    def balance(self, leave_type: LeaveType) -> int:
        return {
            LeaveType.ANNUAL: self.annual_leave_balance,
            LeaveType.SICK: self.sick_leave_balance,
            LeaveType.EMERGENCY: self.emergency_leave_balance,
        }[leave_type]


BALANCE_COLUMNS = {
    LeaveType.ANNUAL: "annual_leave_balance",
    LeaveType.SICK: "sick_leave_balance",
    LeaveType.EMERGENCY: "emergency_leave_balance",
}

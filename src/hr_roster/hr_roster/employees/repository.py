from __future__ import annotations

from typing import Optional, Protocol, Sequence

from ..core.enums import LeaveType, Role
from .model import Employee


class EmployeeRepository(Protocol):
    """Repository interface for Employee.

    Note (DIP): services depend on this interface, not on a concrete database.
    """

    def get_by_id(self, employee_id: int, *, for_update: bool = False) -> Optional[Employee]:
        """``for_update`` locks the row until the surrounding transaction ends."""

        raise NotImplementedError

    def list_by_roles(self, roles: Sequence[Role]) -> Sequence[Employee]:
        raise NotImplementedError

    def deduct_balance(self, *, employee_id: int, leave_type: LeaveType, days: int) -> bool:
        """Subtract ``days`` only when the balance covers them. Returns False otherwise."""

        raise NotImplementedError

    def set_balance(self, *, employee_id: int, leave_type: LeaveType, balance: int) -> bool:
        raise NotImplementedError

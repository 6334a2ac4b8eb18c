from __future__ import annotations

from typing import Optional, Sequence

from ..core.enums import LeaveType, Role
from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor, fetchall, fetchone
from .model import BALANCE_COLUMNS, Employee
from .repository import EmployeeRepository

_COLUMNS = """
    employee_id, name, email, role,
    annual_leave_balance, sick_leave_balance, emergency_leave_balance
"""


def _to_employee(r: dict) -> Employee:
    return Employee(
        employee_id=int(r["employee_id"]),
        name=r["name"],
        email=r["email"],
        role=Role(r["role"]),
        annual_leave_balance=int(r["annual_leave_balance"]),
        sick_leave_balance=int(r["sick_leave_balance"]),
        emergency_leave_balance=int(r["emergency_leave_balance"]),
    )


class MySQLEmployeeRepository(EmployeeRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def get_by_id(self, employee_id: int, *, for_update: bool = False) -> Optional[Employee]:
        lock = " FOR UPDATE" if for_update else ""
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(f"SELECT {_COLUMNS} FROM employees WHERE employee_id=%s{lock}", (int(employee_id),))
            r = fetchone(cur)
            return _to_employee(r) if r else None

    def list_by_roles(self, roles: Sequence[Role]) -> Sequence[Employee]:
        if not roles:
            return []
        placeholders = ",".join(["%s"] * len(roles))
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"SELECT {_COLUMNS} FROM employees WHERE role IN ({placeholders}) ORDER BY employee_id",
                tuple(Role(r).value for r in roles),
            )
            return [_to_employee(r) for r in fetchall(cur)]

    def deduct_balance(self, *, employee_id: int, leave_type: LeaveType, days: int) -> bool:
        column = BALANCE_COLUMNS[LeaveType(leave_type)]
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"""
                UPDATE employees
                SET {column} = {column} - %s
                WHERE employee_id=%s AND {column} >= %s
                """,
                (int(days), int(employee_id), int(days)),
            )
            return cur.rowcount > 0

    def set_balance(self, *, employee_id: int, leave_type: LeaveType, balance: int) -> bool:
        column = BALANCE_COLUMNS[LeaveType(leave_type)]
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"UPDATE employees SET {column}=%s WHERE employee_id=%s",
                (int(balance), int(employee_id)),
            )
            return cur.rowcount > 0

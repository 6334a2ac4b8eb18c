from __future__ import annotations

from datetime import date, datetime
from typing import Optional, Sequence

from ..core.enums import LeaveType, RequestStatus
from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor, fetchall, fetchone, normalize_mysql_date
from .model import LeaveRequest
from .repository import LeaveRequestRepository

_COLUMNS = """
    request_id, employee_id, leave_type, start_date, end_date, status,
    remark, support_doc, created_at, decided_by, decided_at
"""


def _to_request(r: dict) -> LeaveRequest:
    return LeaveRequest(
        request_id=int(r["request_id"]),
        employee_id=int(r["employee_id"]),
        leave_type=LeaveType(r["leave_type"]),
        start_date=normalize_mysql_date(r["start_date"]),
        end_date=normalize_mysql_date(r["end_date"]),
        status=RequestStatus(int(r["status"])),
        remark=r.get("remark"),
        support_doc=r.get("support_doc"),
        created_at=r.get("created_at"),
        decided_by=r.get("decided_by"),
        decided_at=r.get("decided_at"),
    )


def _in_clause(values: Sequence[int]) -> str:
    return ",".join(["%s"] * len(values))


class MySQLLeaveRequestRepository(LeaveRequestRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

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
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                INSERT INTO leave_requests(
                    employee_id, leave_type, start_date, end_date, status, remark, support_doc, created_at
                )
                VALUES(%s,%s,%s,%s,%s,%s,%s,%s)
                """,
                (
                    int(employee_id),
                    LeaveType(leave_type).value,
                    start_date,
                    end_date,
                    int(RequestStatus.PENDING),
                    remark,
                    support_doc,
                    created_at,
                ),
            )
            return int(cur.lastrowid)

    def get_by_id(self, *, request_id: int, for_update: bool = False) -> Optional[LeaveRequest]:
        lock = " FOR UPDATE" if for_update else ""
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(f"SELECT {_COLUMNS} FROM leave_requests WHERE request_id=%s{lock}", (int(request_id),))
            r = fetchone(cur)
            return _to_request(r) if r else None

    def list_active_for_employee(self, *, employee_id: int) -> Sequence[LeaveRequest]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"""
                SELECT {_COLUMNS}
                FROM leave_requests
                WHERE employee_id=%s AND status IN (%s, %s)
                ORDER BY start_date
                """,
                (int(employee_id), int(RequestStatus.PENDING), int(RequestStatus.APPROVED)),
            )
            return [_to_request(r) for r in fetchall(cur)]

    def has_approved_covering(self, *, employee_id: int, day: date) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                SELECT 1 FROM leave_requests
                WHERE employee_id=%s AND status=%s
                  AND %s BETWEEN start_date AND COALESCE(end_date, start_date)
                LIMIT 1
                """,
                (int(employee_id), int(RequestStatus.APPROVED), day),
            )
            return fetchone(cur) is not None

    def list_approved_overlapping(self, *, employee_ids: Sequence[int], start: date, end: date) -> Sequence[LeaveRequest]:
        if not employee_ids:
            return []
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"""
                SELECT {_COLUMNS}
                FROM leave_requests
                WHERE employee_id IN ({_in_clause(employee_ids)})
                  AND status=%s
                  AND start_date <= %s AND end_date >= %s
                """,
                tuple(int(i) for i in employee_ids) + (int(RequestStatus.APPROVED), end, start),
            )
            return [_to_request(r) for r in fetchall(cur)]

    def decide(self, *, request_id: int, status: RequestStatus, decided_by: int, decided_at: datetime) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                UPDATE leave_requests
                SET status=%s, decided_by=%s, decided_at=%s
                WHERE request_id=%s AND status=%s
                """,
                (int(status), int(decided_by), decided_at, int(request_id), int(RequestStatus.PENDING)),
            )
            return cur.rowcount > 0

    def delete_pending(self, *, request_id: int) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                "DELETE FROM leave_requests WHERE request_id=%s AND status=%s",
                (int(request_id), int(RequestStatus.PENDING)),
            )
            return cur.rowcount > 0

    def list_for_employees(self, *, employee_ids: Sequence[int], limit: int = 200) -> Sequence[LeaveRequest]:
        if not employee_ids:
            return []
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"""
                SELECT {_COLUMNS}
                FROM leave_requests
                WHERE employee_id IN ({_in_clause(employee_ids)})
                ORDER BY request_id DESC
                LIMIT %s
                """,
                tuple(int(i) for i in employee_ids) + (int(limit),),
            )
            return [_to_request(r) for r in fetchall(cur)]

    def approved_counts_by_type(self, *, employee_ids: Sequence[int]) -> dict[LeaveType, int]:
        if not employee_ids:
            return {}
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"""
                SELECT leave_type, COUNT(*) AS total
                FROM leave_requests
                WHERE employee_id IN ({_in_clause(employee_ids)}) AND status=%s
                GROUP BY leave_type
                """,
                tuple(int(i) for i in employee_ids) + (int(RequestStatus.APPROVED),),
            )
            return {LeaveType(r["leave_type"]): int(r["total"]) for r in fetchall(cur)}

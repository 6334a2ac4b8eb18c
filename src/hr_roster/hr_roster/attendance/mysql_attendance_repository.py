from __future__ import annotations

from datetime import date, datetime, time
from typing import Optional, Sequence

from ..core.enums import AttendanceStatus, ShiftType
from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor, fetchall, fetchone, normalize_mysql_date, normalize_mysql_time
from .model import AttendanceRecord, AttendanceReportRow
from .repository import AttendanceRepository

_COLUMNS = """
    attendance_id, employee_id, entry_id, clock_in_time, clock_out_time,
    status, late_minutes, early_departure_minutes, created_at
"""


def _to_record(r: dict) -> AttendanceRecord:
    return AttendanceRecord(
        attendance_id=int(r["attendance_id"]),
        employee_id=int(r["employee_id"]),
        schedule_entry_id=int(r["entry_id"]) if r.get("entry_id") is not None else None,
        clock_in=normalize_mysql_time(r["clock_in_time"]),
        clock_out=normalize_mysql_time(r.get("clock_out_time")),
        status=AttendanceStatus(r["status"]),
        late_minutes=int(r.get("late_minutes") or 0),
        early_departure_minutes=int(r.get("early_departure_minutes") or 0),
        created_at=r.get("created_at"),
    )


class MySQLAttendanceRepository(AttendanceRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def get_latest_open(self, employee_id: int) -> Optional[AttendanceRecord]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"""
                SELECT {_COLUMNS}
                FROM attendances
                WHERE employee_id=%s AND clock_out_time IS NULL
                ORDER BY attendance_id DESC
                LIMIT 1
                """,
                (int(employee_id),),
            )
            r = fetchone(cur)
            return _to_record(r) if r else None

    def get_for_entry(self, *, employee_id: int, entry_id: int) -> Optional[AttendanceRecord]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"""
                SELECT {_COLUMNS}
                FROM attendances
                WHERE employee_id=%s AND entry_id=%s
                ORDER BY attendance_id DESC
                LIMIT 1
                """,
                (int(employee_id), int(entry_id)),
            )
            r = fetchone(cur)
            return _to_record(r) if r else None

    def get_recent_for_employee(self, employee_id: int, limit: int) -> Sequence[AttendanceRecord]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"""
                SELECT {_COLUMNS}
                FROM attendances
                WHERE employee_id=%s
                ORDER BY attendance_id DESC
                LIMIT %s
                """,
                (int(employee_id), int(limit)),
            )
            return [_to_record(r) for r in fetchall(cur)]

    def create_clock_in(
        self,
        *,
        employee_id: int,
        entry_id: Optional[int],
        clock_in: time,
        status: AttendanceStatus,
        late_minutes: int,
        created_at: datetime,
    ) -> int:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                INSERT INTO attendances(employee_id, entry_id, clock_in_time, status, late_minutes, created_at)
                VALUES(%s,%s,%s,%s,%s,%s)
                """,
                (int(employee_id), entry_id, clock_in, status.value, int(late_minutes), created_at),
            )
            return int(cur.lastrowid)

    def close(self, *, attendance_id: int, clock_out: time, early_departure_minutes: int) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                UPDATE attendances
                SET clock_out_time=%s, early_departure_minutes=%s
                WHERE attendance_id=%s AND clock_out_time IS NULL
                """,
                (clock_out, int(early_departure_minutes), int(attendance_id)),
            )
            return cur.rowcount > 0

    def get_report_rows(self, *, employee_id: int, start_date: date, end_date: date) -> Sequence[AttendanceReportRow]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                SELECT a.attendance_id, a.employee_id, a.clock_in_time, a.clock_out_time, a.status,
                       sc.work_date, sc.shift_type
                FROM attendances a
                JOIN shift_schedules sc ON sc.entry_id = a.entry_id
                WHERE a.employee_id=%s AND sc.work_date BETWEEN %s AND %s
                ORDER BY sc.work_date ASC, a.attendance_id ASC
                """,
                (int(employee_id), start_date, end_date),
            )
            return [
                AttendanceReportRow(
                    attendance_id=int(r["attendance_id"]),
                    employee_id=int(r["employee_id"]),
                    work_date=normalize_mysql_date(r["work_date"]),
                    shift_type=ShiftType(r["shift_type"]),
                    clock_in=normalize_mysql_time(r["clock_in_time"]),
                    clock_out=normalize_mysql_time(r.get("clock_out_time")),
                    status=AttendanceStatus(r["status"]),
                )
                for r in fetchall(cur)
            ]

from __future__ import annotations

from datetime import date
from typing import Optional, Sequence

from ..core.enums import ShiftType
from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor, fetchall, fetchone, normalize_mysql_date
from .model import ScheduleEntry
from .repository import ScheduleRepository


def _to_entry(r: dict) -> ScheduleEntry:
    return ScheduleEntry(
        entry_id=int(r["entry_id"]),
        employee_id=int(r["employee_id"]),
        work_date=normalize_mysql_date(r["work_date"]),
        shift_type=ShiftType(r["shift_type"]),
    )


class MySQLScheduleRepository(ScheduleRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def get_by_id(self, *, entry_id: int) -> Optional[ScheduleEntry]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                "SELECT entry_id, employee_id, work_date, shift_type FROM shift_schedules WHERE entry_id=%s",
                (int(entry_id),),
            )
            r = fetchone(cur)
            return _to_entry(r) if r else None

    def get_for_employee_and_date(self, *, employee_id: int, work_date: date) -> Optional[ScheduleEntry]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                SELECT entry_id, employee_id, work_date, shift_type
                FROM shift_schedules
                WHERE employee_id=%s AND work_date=%s
                ORDER BY entry_id
                LIMIT 1
                """,
                (int(employee_id), work_date),
            )
            r = fetchone(cur)
            return _to_entry(r) if r else None

    def has_shift(self, *, employee_id: int, work_date: date, shift_type: ShiftType) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                SELECT 1 FROM shift_schedules
                WHERE employee_id=%s AND work_date=%s AND shift_type=%s
                LIMIT 1
                """,
                (int(employee_id), work_date, ShiftType(shift_type).value),
            )
            return fetchone(cur) is not None

    def count_in_range(
        self,
        *,
        employee_id: int,
        start: date,
        end: date,
        exclude_date: Optional[date] = None,
    ) -> int:
        clauses = ["employee_id=%s", "work_date BETWEEN %s AND %s"]
        params: list[object] = [int(employee_id), start, end]
        if exclude_date is not None:
            clauses.append("work_date <> %s")
            params.append(exclude_date)

        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(f"SELECT COUNT(DISTINCT work_date) AS n FROM shift_schedules WHERE {' AND '.join(clauses)}", tuple(params))
            r = fetchone(cur)
            return int(r["n"]) if r else 0

    def upsert_slot(self, *, work_date: date, shift_type: ShiftType, employee_id: int) -> int:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                SELECT entry_id FROM shift_schedules
                WHERE work_date=%s AND shift_type=%s
                ORDER BY entry_id
                LIMIT 1
                FOR UPDATE
                """,
                (work_date, ShiftType(shift_type).value),
            )
            r = fetchone(cur)
            if r:
                cur.execute(
                    "UPDATE shift_schedules SET employee_id=%s WHERE entry_id=%s",
                    (int(employee_id), int(r["entry_id"])),
                )
                return int(r["entry_id"])

            cur.execute(
                "INSERT INTO shift_schedules(employee_id, work_date, shift_type) VALUES(%s,%s,%s)",
                (int(employee_id), work_date, ShiftType(shift_type).value),
            )
            return int(cur.lastrowid)

    def insert_ignore(self, *, employee_id: int, work_date: date, shift_type: ShiftType) -> int:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                "INSERT IGNORE INTO shift_schedules(employee_id, work_date, shift_type) VALUES(%s,%s,%s)",
                (int(employee_id), work_date, ShiftType(shift_type).value),
            )
            if cur.lastrowid:
                return int(cur.lastrowid)

            # Already present: lastrowid is 0, fetch the existing id.
            cur.execute(
                """
                SELECT entry_id FROM shift_schedules
                WHERE employee_id=%s AND work_date=%s AND shift_type=%s
                """,
                (int(employee_id), work_date, ShiftType(shift_type).value),
            )
            r = fetchone(cur)
            return int(r["entry_id"]) if r else 0

    def delete_for_employee_in_range(self, *, employee_id: int, start: date, end: date) -> int:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                "DELETE FROM shift_schedules WHERE employee_id=%s AND work_date BETWEEN %s AND %s",
                (int(employee_id), start, end),
            )
            return int(cur.rowcount)

    def delete_range(self, *, start: date, end: date) -> int:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute("DELETE FROM shift_schedules WHERE work_date BETWEEN %s AND %s", (start, end))
            return int(cur.rowcount)

    def list_range(
        self,
        *,
        start: date,
        end: date,
        employee_id: Optional[int] = None,
        shift_types: Optional[Sequence[ShiftType]] = None,
    ) -> Sequence[ScheduleEntry]:
        clauses = ["work_date BETWEEN %s AND %s"]
        params: list[object] = [start, end]
        if employee_id is not None:
            clauses.append("employee_id=%s")
            params.append(int(employee_id))
        if shift_types:
            clauses.append(f"shift_type IN ({','.join(['%s'] * len(shift_types))})")
            params.extend(ShiftType(s).value for s in shift_types)

        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"""
                SELECT entry_id, employee_id, work_date, shift_type
                FROM shift_schedules
                WHERE {' AND '.join(clauses)}
                ORDER BY work_date ASC, entry_id ASC
                """,
                tuple(params),
            )
            return [_to_entry(r) for r in fetchall(cur)]

    def count_without_attendance(self, *, employee_id: int, start: date, end: date, before: date) -> int:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                SELECT COUNT(*) AS n
                FROM shift_schedules sc
                WHERE sc.employee_id=%s
                  AND sc.work_date BETWEEN %s AND %s
                  AND sc.work_date < %s
                  AND NOT EXISTS (
                      SELECT 1 FROM attendances a
                      WHERE a.entry_id = sc.entry_id AND a.employee_id = sc.employee_id
                  )
                """,
                (int(employee_id), start, end, before),
            )
            r = fetchone(cur)
            return int(r["n"]) if r else 0

from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

from .attendance.factory import AttendanceStrategyFactory
from .attendance.mysql_attendance_repository import MySQLAttendanceRepository
from .attendance.repository import AttendanceRepository
from .attendance.service import AttendanceService
from .core.constants import DEFAULT_WEEKLY_SHIFT_LIMIT
from .core.transaction import TransactionManager
from .database.connection import DBConfig, DatabaseConnection
from .employees.mysql_employee_repository import MySQLEmployeeRepository
from .employees.repository import EmployeeRepository
from .leave.ledger import LeaveBalanceLedger, LeavePolicy
from .leave.mysql_leave_repository import MySQLLeaveRequestRepository
from .leave.repository import LeaveRequestRepository
from .leave.service import LeaveService
from .notifications.notifier import LoggingNotifier, Notifier
from .reports.service import AttendanceReportService
from .schedules.mysql_schedule_repository import MySQLScheduleRepository
from .schedules.repository import ScheduleRepository
from .schedules.service import ScheduleService
from .shifts.catalog import ShiftCatalog
from .shifts.model import ShiftPolicy


@dataclass(frozen=True)
class Container:
    tx: TransactionManager

    employees_repo: EmployeeRepository
    attendance_repo: AttendanceRepository
    schedules_repo: ScheduleRepository
    leaves_repo: LeaveRequestRepository

    attendance_service: AttendanceService
    leave_service: LeaveService
    schedule_service: ScheduleService
    report_service: AttendanceReportService


def _policies(policy: Optional[dict]) -> tuple[ShiftPolicy, LeavePolicy, int]:
    policy = dict(policy or {})
    shift_policy = ShiftPolicy(
        **{k: int(policy[k]) for k in ("late_margin", "early_arrival", "early_exit_margin", "clock_out_grace") if k in policy}
    )
    leave_policy = LeavePolicy(
        **{
            k: int(policy[k])
            for k in ("annual_notice_days", "annual_max_days", "max_annual", "max_sick", "max_emergency")
            if k in policy
        }
    )
    weekly_limit = int(policy.get("weekly_limit", DEFAULT_WEEKLY_SHIFT_LIMIT))
    return shift_policy, leave_policy, weekly_limit


def wire(
    *,
    tx: TransactionManager,
    employees_repo: EmployeeRepository,
    attendance_repo: AttendanceRepository,
    schedules_repo: ScheduleRepository,
    leaves_repo: LeaveRequestRepository,
    policy: Optional[dict] = None,
    notifier: Optional[Notifier] = None,
) -> Container:
    """Build services on top of any repository implementation."""
    shift_policy, leave_policy, weekly_limit = _policies(policy)
    catalog = ShiftCatalog()

    attendance_service = AttendanceService(
        tx,
        attendance_repo,
        employees_repo,
        schedules_repo,
        leaves_repo,
        catalog=catalog,
        policy=shift_policy,
        strategy_factory=AttendanceStrategyFactory(shift_policy),
    )
    ledger = LeaveBalanceLedger(employees_repo, leaves_repo, policy=leave_policy)
    leave_service = LeaveService(
        tx,
        leaves_repo,
        employees_repo,
        schedules_repo,
        ledger,
        notifier=notifier or LoggingNotifier(),
    )
    schedule_service = ScheduleService(
        tx,
        schedules_repo,
        employees_repo,
        leaves_repo,
        catalog=catalog,
        weekly_limit=weekly_limit,
    )
    report_service = AttendanceReportService(
        tx,
        attendance_repo,
        schedules_repo,
        employees_repo,
        catalog=catalog,
        policy=shift_policy,
    )

    return Container(
        tx=tx,
        employees_repo=employees_repo,
        attendance_repo=attendance_repo,
        schedules_repo=schedules_repo,
        leaves_repo=leaves_repo,
        attendance_service=attendance_service,
        leave_service=leave_service,
        schedule_service=schedule_service,
        report_service=report_service,
    )


def build_container(*, db_config: dict, policy: Optional[dict] = None) -> Container:
    config = DBConfig(
        host=str(db_config["host"]),
        port=int(db_config.get("port", 3306)),
        user=str(db_config["user"]),
        password=str(db_config["password"]),
        database=str(db_config["database"]),
        isolation_level=str(db_config.get("isolation_level", "READ COMMITTED")),
    )
    conn = DatabaseConnection.get_instance(config)

    return wire(
        tx=conn,
        employees_repo=MySQLEmployeeRepository(conn),
        attendance_repo=MySQLAttendanceRepository(conn),
        schedules_repo=MySQLScheduleRepository(conn),
        leaves_repo=MySQLLeaveRequestRepository(conn),
        policy=policy,
    )

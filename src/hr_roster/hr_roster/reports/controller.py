from __future__ import annotations

from flask import Flask, request, session

from ..common.datetime_utils import month_bounds, now_local, parse_month
from ..common.http import current_user_id, date_arg, login_required, ok, roles_required
from ..common.validators import require_positive_id
from ..container import Container
from ..core.enums import Role
from ..core.exceptions import AuthorizationError


def register(app: Flask, container: Container) -> None:
    def target_employee_id() -> int:
        """Employees only see their own numbers; supervisors and owners may pass ?employee_id=."""
        raw = request.args.get("employee_id")
        if not raw:
            return current_user_id()
        employee_id = require_positive_id(raw, "Employee id")
        if employee_id != current_user_id() and session.get("role") == Role.EMPLOYEE.value:
            raise AuthorizationError("You can only view your own report")
        return employee_id

    def month_arg() -> tuple[int, int]:
        raw = request.args.get("month")
        if not raw:
            today = now_local().date()
            return today.year, today.month
        return parse_month(raw)

    @app.route("/reports/summary", methods=["GET"], endpoint="report_summary")
    @login_required
    def report_summary():
        year, month = month_arg()
        summary = container.report_service.get_attendance_summary(
            employee_id=target_employee_id(),
            year=year,
            month=month,
            today=now_local().date(),
        )
        return ok(
            month=f"{year:04d}-{month:02d}",
            summary=summary.to_dict(),
            attendance_rate=round(summary.attendance_rate, 4),
        )

    @app.route("/reports/absences", methods=["GET"], endpoint="report_absences")
    @login_required
    def report_absences():
        today = now_local().date()
        default_start, _ = month_bounds(today.year, today.month)
        start = date_arg("start", default=default_start)
        end = date_arg("end", default=today)
        count = container.report_service.get_absence_count(
            employee_id=target_employee_id(),
            start=start,
            end=end,
            today=today,
        )
        return ok(start=start.isoformat(), end=end.isoformat(), absences=count)

    @app.route("/reports/monthly", methods=["GET"], endpoint="report_monthly")
    @roles_required(Role.ADMIN, Role.OWNER)
    def report_monthly():
        year, month = month_arg()
        report = container.report_service.monthly_report(year=year, month=month, today=now_local().date())
        return ok(
            month=f"{report.year:04d}-{report.month:02d}",
            rows=report.rows,
            total_present=report.total_present,
            total_late=report.total_late,
            total_absent=report.total_absent,
        )

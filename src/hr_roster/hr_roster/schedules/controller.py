from __future__ import annotations

from flask import Flask

from ..common.datetime_utils import now_local, parse_iso_date, week_bounds
from ..common.http import current_user_id, date_arg, json_body, login_required, ok, required_field, roles_required
from ..common.validators import require_positive_id
from ..container import Container
from ..core.enums import Role


def register(app: Flask, container: Container) -> None:
    def week_start_arg():
        monday, _ = week_bounds(date_arg("week_start", default=now_local().date()))
        return monday

    @app.route("/schedules/assign", methods=["POST"], endpoint="schedule_assign")
    @roles_required(Role.ADMIN, Role.OWNER)
    def schedule_assign():
        data = json_body()
        snapshot = container.schedule_service.assign(
            employee_id=require_positive_id(data.get("employee_id"), "Employee id"),
            shift_type=required_field(data, "shift_type"),
            work_date=parse_iso_date(required_field(data, "work_date")),
        )
        return ok(week=snapshot.to_dict())

    @app.route("/schedules/week", methods=["GET"], endpoint="schedule_week")
    @login_required
    def schedule_week():
        snapshot = container.schedule_service.week(week_start=week_start_arg())
        return ok(week=snapshot.to_dict())

    @app.route("/schedules/my-week", methods=["GET"], endpoint="schedule_my_week")
    @login_required
    def schedule_my_week():
        week_start = week_start_arg()
        days = container.schedule_service.my_week(employee_id=current_user_id(), week_start=week_start)
        return ok(week_start=week_start.isoformat(), days=days)

    @app.route("/schedules/day", methods=["GET"], endpoint="schedule_day")
    @login_required
    def schedule_day():
        work_date = date_arg("date", default=now_local().date())
        return ok(date=work_date.isoformat(), shifts=container.schedule_service.day(work_date=work_date))

    @app.route("/schedules/reset", methods=["POST"], endpoint="schedule_reset")
    @roles_required(Role.ADMIN, Role.OWNER)
    def schedule_reset():
        data = json_body()
        week_start = parse_iso_date(required_field(data, "week_start"))
        deleted = container.schedule_service.reset_week(week_start=week_start)
        return ok(week_start=week_bounds(week_start)[0].isoformat(), deleted=deleted)

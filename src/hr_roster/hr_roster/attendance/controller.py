from __future__ import annotations

from flask import Flask, request

from ..common.datetime_utils import now_local
from ..common.http import current_user_id, login_required, ok
from ..container import Container
from ..core.constants import DEFAULT_HISTORY_LIMIT


def register(app: Flask, container: Container) -> None:
    @app.route("/attendance/clock-in", methods=["POST"], endpoint="clock_in")
    @login_required
    def clock_in():
        result = container.attendance_service.clock_in(current_user_id(), now=now_local())
        return ok(**result.to_dict()), 201

    @app.route("/attendance/clock-out", methods=["POST"], endpoint="clock_out")
    @login_required
    def clock_out():
        result = container.attendance_service.clock_out(current_user_id(), now=now_local())
        return ok(**result.to_dict())

    @app.route("/attendance/state", methods=["GET"], endpoint="attendance_state")
    @login_required
    def attendance_state():
        state = container.attendance_service.current_state(current_user_id(), today=now_local().date())
        return ok(state=state.value)

    @app.route("/attendance/history", methods=["GET"], endpoint="attendance_history")
    @login_required
    def attendance_history():
        limit = request.args.get("limit", default=DEFAULT_HISTORY_LIMIT, type=int)
        rows = container.attendance_service.history(current_user_id(), limit=max(1, min(limit, 200)))
        return ok(history=rows)

from __future__ import annotations

from flask import Flask, request

from ..common.datetime_utils import now_local, parse_iso_date
from ..common.http import current_user_id, json_body, login_required, ok, required_field, roles_required
from ..common.validators import require_positive_id
from ..container import Container
from ..core.enums import Role


def register(app: Flask, container: Container) -> None:
    @app.route("/leave-requests", methods=["GET"], endpoint="leave_list")
    @login_required
    def leave_list():
        limit = request.args.get("limit", default=200, type=int)
        requests = container.leave_service.list_for_viewer(viewer_id=current_user_id(), limit=max(1, min(limit, 500)))
        return ok(requests=[r.to_dict() for r in requests])

    @app.route("/leave-requests", methods=["POST"], endpoint="leave_submit")
    @login_required
    def leave_submit():
        data = json_body()
        end_raw = data.get("end_date")
        now = now_local()
        request_id = container.leave_service.submit(
            employee_id=current_user_id(),
            leave_type=required_field(data, "leave_type"),
            start_date=parse_iso_date(required_field(data, "start_date")),
            end_date=parse_iso_date(end_raw) if end_raw else None,
            remark=data.get("remark"),
            support_doc=data.get("support_doc"),
            today=now.date(),
            now=now,
        )
        return ok(request_id=request_id), 201

    @app.route("/leave-requests/<int:request_id>/decision", methods=["POST"], endpoint="leave_decide")
    @roles_required(Role.ADMIN, Role.OWNER)
    def leave_decide(request_id: int):
        data = json_body()
        result = container.leave_service.decide(
            request_id=request_id,
            approver_id=current_user_id(),
            decision=required_field(data, "decision"),
            now=now_local(),
        )
        return ok(**result.to_dict())

    @app.route("/leave-requests/<int:request_id>", methods=["DELETE"], endpoint="leave_withdraw")
    @login_required
    def leave_withdraw(request_id: int):
        container.leave_service.withdraw(request_id=request_id, employee_id=current_user_id())
        return ok(request_id=request_id)

    @app.route("/leave-requests/balances", methods=["GET"], endpoint="leave_balances")
    @login_required
    def leave_balances():
        balances = container.leave_service.balances(employee_id=current_user_id())
        return ok(balances=balances.to_dict())

    @app.route("/leave-requests/totals", methods=["GET"], endpoint="leave_totals")
    @roles_required(Role.ADMIN, Role.OWNER)
    def leave_totals():
        return ok(totals=container.leave_service.approved_totals(viewer_id=current_user_id()))

    @app.route("/leave-requests/balances/restore", methods=["POST"], endpoint="leave_restore_balance")
    @roles_required(Role.ADMIN, Role.OWNER)
    def leave_restore_balance():
        data = json_body()
        balance = container.leave_service.restore_balance(
            actor_id=current_user_id(),
            employee_id=require_positive_id(data.get("employee_id"), "Employee id"),
            leave_type=required_field(data, "leave_type"),
            days=require_positive_id(data.get("days"), "Days"),
        )
        return ok(balance=balance)

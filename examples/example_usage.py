"""Example: driving the service layer directly, without Flask.

Controllers are thin; every rule lives in the services built by the container.
"""

import importlib
import logging

from config import get_settings_module

from src.hr_roster.hr_roster.common.datetime_utils import now_local, week_bounds
from src.hr_roster.hr_roster.container import build_container


def main(employee_id: int = 1) -> None:
    logging.basicConfig(level=logging.INFO)
    settings = importlib.import_module(get_settings_module())
    container = build_container(db_config=settings.DB_CONFIG, policy=settings.POLICY)

    today = now_local().date()
    monday, _ = week_bounds(today)
    print("state:", container.attendance_service.current_state(employee_id, today=today).value)
    print("history:", container.attendance_service.history(employee_id, limit=5))
    print("balances:", container.leave_service.balances(employee_id=employee_id).to_dict())
    print("my week:", container.schedule_service.my_week(employee_id=employee_id, week_start=monday))


if __name__ == "__main__":
    main()

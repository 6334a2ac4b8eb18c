import os

from dotenv import load_dotenv

load_dotenv(override=False)


def _int(name: str, default: int) -> int:
    return int(os.environ.get(name, str(default)))


class Config:
    SECRET_KEY = os.environ.get("SECRET_KEY") or "change-me"

    # Database
    DB_USER = os.environ.get("DB_USER", "root")
    DB_PASSWORD = os.environ.get("DB_PASSWORD", "")
    DB_HOST = os.environ.get("DB_HOST", "localhost")
    DB_PORT = _int("DB_PORT", 3306)
    DB_NAME = os.environ.get("DB_NAME", "hr_roster")
    DB_ISOLATION_LEVEL = os.environ.get("DB_ISOLATION_LEVEL", "READ COMMITTED")

    LOG_LEVEL = os.environ.get("LOG_LEVEL", "INFO").upper()
    AUTO_INIT_DB = bool(_int("AUTO_INIT_DB", 0))

    # Shift windows, in minutes
    LATE_MARGIN_MINUTES = _int("LATE_MARGIN_MINUTES", 15)
    EARLY_ARRIVAL_MINUTES = _int("EARLY_ARRIVAL_MINUTES", 30)
    EARLY_EXIT_MARGIN_MINUTES = _int("EARLY_EXIT_MARGIN_MINUTES", 15)
    CLOCK_OUT_GRACE_MINUTES = _int("CLOCK_OUT_GRACE_MINUTES", 60)

    # Roster and leave policy
    WEEKLY_SHIFT_LIMIT = _int("WEEKLY_SHIFT_LIMIT", 6)
    ANNUAL_NOTICE_DAYS = _int("ANNUAL_NOTICE_DAYS", 7)
    ANNUAL_MAX_DAYS = _int("ANNUAL_MAX_DAYS", 5)
    MAX_ANNUAL_BALANCE = _int("MAX_ANNUAL_BALANCE", 14)
    MAX_SICK_BALANCE = _int("MAX_SICK_BALANCE", 14)
    MAX_EMERGENCY_BALANCE = _int("MAX_EMERGENCY_BALANCE", 7)


DB_CONFIG = {
    "host": Config.DB_HOST,
    "port": Config.DB_PORT,
    "user": Config.DB_USER,
    "password": Config.DB_PASSWORD,
    "database": Config.DB_NAME,
    "isolation_level": Config.DB_ISOLATION_LEVEL,
}

POLICY = {
    "late_margin": Config.LATE_MARGIN_MINUTES,
    "early_arrival": Config.EARLY_ARRIVAL_MINUTES,
    "early_exit_margin": Config.EARLY_EXIT_MARGIN_MINUTES,
    "clock_out_grace": Config.CLOCK_OUT_GRACE_MINUTES,
    "weekly_limit": Config.WEEKLY_SHIFT_LIMIT,
    "annual_notice_days": Config.ANNUAL_NOTICE_DAYS,
    "annual_max_days": Config.ANNUAL_MAX_DAYS,
    "max_annual": Config.MAX_ANNUAL_BALANCE,
    "max_sick": Config.MAX_SICK_BALANCE,
    "max_emergency": Config.MAX_EMERGENCY_BALANCE,
}

from __future__ import annotations

from enum import Enum, IntEnum


class Role(str, Enum):
    """Account roles. ADMIN is the shift supervisor."""

    EMPLOYEE = "employee"
    ADMIN = "admin"
    OWNER = "owner"


class ShiftType(str, Enum):
    MORNING = "morning"
    EVENING = "evening"
    OFFICE = "office"


class AttendanceStatus(str, Enum):
    """Status fixed at clock-in."""

    ON_TIME = "on_time"
    LATE = "late"
    MISSED = "missed"


class AttendanceState(str, Enum):
    NOT_CLOCKED_IN = "not_clocked_in"
    CLOCKED_IN = "clocked_in"
    CLOCKED_OUT = "clocked_out"


class LeaveType(str, Enum):
    ANNUAL = "Annual Leave"
    SICK = "Sick Leave"
    EMERGENCY = "Emergency Leave"


class RequestStatus(IntEnum):
    """Leave request workflow status as stored in the database."""

    PENDING = 0
    APPROVED = 1
    REJECTED = 2


class Decision(str, Enum):
    APPROVE = "approve"
    REJECT = "reject"


class Violation(str, Enum):
    """Business rule gates that can reject an operation."""

    TOO_EARLY = "too_early"
    NO_SCHEDULE = "no_schedule"
    ON_LEAVE = "on_leave"
    ALREADY_CLOCKED_IN = "already_clocked_in"
    NO_OPEN_RECORD = "no_open_record"
    WINDOW_CLOSED = "window_closed"
    INSUFFICIENT_BALANCE = "insufficient_balance"
    OVERLAP = "overlap"
    PAST_DATE = "past_date"
    ADVANCE_NOTICE = "advance_notice"
    MAX_DURATION = "max_duration"
    MISSING_DOCUMENT = "missing_document"
    NOT_PENDING = "not_pending"
    WRONG_ROLE = "wrong_role"
    SAME_DAY_CONFLICT = "same_day_conflict"
    WEEK_LIMIT = "week_limit"

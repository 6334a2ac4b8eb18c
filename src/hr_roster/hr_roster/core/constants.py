"""Policy defaults.

Note: Keep constants here to avoid magic numbers spread across code.
Deployments override them through the settings modules.
"""

DEFAULT_LATE_MARGIN_MINUTES = 15
DEFAULT_EARLY_ARRIVAL_MINUTES = 30
DEFAULT_EARLY_EXIT_MARGIN_MINUTES = 15
DEFAULT_CLOCK_OUT_GRACE_MINUTES = 60

DEFAULT_WEEKLY_SHIFT_LIMIT = 6
SUPERVISOR_WORKDAYS = 5

DEFAULT_ANNUAL_NOTICE_DAYS = 7
DEFAULT_ANNUAL_MAX_DAYS = 5

MAX_ANNUAL_BALANCE = 14
MAX_SICK_BALANCE = 14
MAX_EMERGENCY_BALANCE = 7

DEFAULT_HISTORY_LIMIT = 15

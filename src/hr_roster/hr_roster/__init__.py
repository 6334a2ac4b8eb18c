"""HR roster package.

Feature modules (attendance, leave, schedules, reports, ...) hold the rules;
Flask controllers are a thin JSON layer over the service classes.
"""

from __future__ import annotations

import logging
from typing import Protocol

from ..leave.events import LeaveDecided

logger = logging.getLogger(__name__)


class Notifier(Protocol):
    """Delivery of leave decisions to the employee (e-mail in production)."""

    def leave_decided(self, event: LeaveDecided) -> None:
        raise NotImplementedError


class LoggingNotifier(Notifier):
    """Default notifier: records the message that would be sent."""

    def leave_decided(self, event: LeaveDecided) -> None:
        logger.info(
            "Notify %s: request #%s (%s) is now %s",
            event.employee_email,
            event.request_id,
            event.leave_type.value,
            event.status.name.lower(),
        )

from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass
from datetime import datetime

from ...core.enums import AttendanceStatus


@dataclass(frozen=True)
class StatusDecision:
    status: AttendanceStatus
    late_minutes: int = 0
    early_departure_minutes: int = 0

    @property
    def early_departure(self) -> bool:
        return self.early_departure_minutes > 0


class AttendanceStrategy(ABC):
    """Strategy Pattern: encapsulate how we decide an attendance status.

    Clock-out never changes the status fixed at clock-in; it only reports
    early departure alongside it.
    """

    @abstractmethod
    def decide_clock_in(self, *, now: datetime, shift_start: datetime) -> StatusDecision:
        raise NotImplementedError

    @abstractmethod
    def decide_clock_out(self, *, now: datetime, shift_end: datetime, current: AttendanceStatus) -> StatusDecision:
        raise NotImplementedError

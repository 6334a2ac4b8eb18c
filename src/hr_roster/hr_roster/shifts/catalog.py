from __future__ import annotations

from datetime import time
from typing import Iterable, Optional, Sequence

from ..core.enums import ShiftType
from ..core.exceptions import NotFoundError
from .model import ShiftDefinition

DEFAULT_SHIFTS = (
    ShiftDefinition(ShiftType.MORNING, time(6, 0), time(15, 0)),
    ShiftDefinition(ShiftType.EVENING, time(15, 0), time(0, 0), ends_next_day=True),
    ShiftDefinition(ShiftType.OFFICE, time(9, 0), time(17, 0)),
)


class ShiftCatalog:
    """Immutable reference data: one window per shift type."""

    def __init__(self, shifts: Optional[Iterable[ShiftDefinition]] = None):
        self._by_type = {s.shift_type: s for s in (shifts or DEFAULT_SHIFTS)}

    def get(self, shift_type: ShiftType) -> ShiftDefinition:
        shift = self._by_type.get(ShiftType(shift_type))
        if not shift:
            raise NotFoundError(f"No shift window defined for {shift_type}")
        return shift

    def list_all(self) -> Sequence[ShiftDefinition]:
        return list(self._by_type.values())

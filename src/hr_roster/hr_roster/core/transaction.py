from __future__ import annotations

from contextlib import AbstractContextManager
from typing import Protocol


class TransactionManager(Protocol):
    """Unit-of-work boundary used by every service operation.

    Everything executed inside ``with tx.transaction():`` commits together or
    not at all. Nested calls join the outer transaction.
    """

    def transaction(self) -> AbstractContextManager[None]:
        raise NotImplementedError

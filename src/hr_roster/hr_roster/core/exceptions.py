from __future__ import annotations

from typing import Optional

from .enums import Violation


class DomainError(Exception):
    """Base exception for business rule violations."""


class ValidationError(DomainError):
    """Raised when input data is malformed (dates, missing fields, unknown types)."""


class PolicyViolation(DomainError):
    """Raised when a business-rule gate rejects an operation.

    ``code`` is the machine readable reason returned to API clients.
    """

    def __init__(self, code: Violation, message: Optional[str] = None):
        self.code = code
        super().__init__(message or code.value.replace("_", " "))


class AuthorizationError(DomainError):
    """Raised when a user lacks permission for an action."""


class NotFoundError(DomainError):
    """Raised when a referenced record does not exist."""

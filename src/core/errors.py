# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Exception hierarchy for access and consistency decisions.

This module defines the caller-visible error taxonomy:
- GuardError: Base exception carrying a DecisionCode
- NotFoundError: A referenced entity does not exist
- ForbiddenError: The caller's scope does not cover the target
- InvalidStateError: The principal or request is malformed
- RejectedError: A consistency or lifecycle rule refused the write
- StoreUnavailableError: The record store could not be reached

None of these are fatal. Engine functions return typed decisions; these
exceptions are raised when a caller asks a decision to be enforced.
"""

from typing import Any

from src.models.common import DecisionCode


class GuardError(Exception):
    """Base exception for all decision errors.

    Attributes:
        message: Human-readable error description.
        code: Machine-readable decision code.
        details: Optional dictionary with additional error context.
    """

    default_code: DecisionCode = DecisionCode.INVALID_STATE

    def __init__(
        self,
        message: str,
        code: DecisionCode | None = None,
        details: dict[str, Any] | None = None,
    ) -> None:
        """Initialize the error.

        Args:
            message: Human-readable error description.
            code: Decision code, defaults to the class default.
            details: Optional dictionary with additional error context.
        """
        self.message = message
        self.code = code or self.default_code
        self.details = details or {}
        super().__init__(message)

    def __str__(self) -> str:
        """Return string representation with the code prefix."""
        return f"[{self.code.value}] {self.message}"


class NotFoundError(GuardError):
    """Raised when a referenced entity is missing."""

    default_code = DecisionCode.NOT_FOUND


class ForbiddenError(GuardError):
    """Raised when access is denied by scope."""

    default_code = DecisionCode.FORBIDDEN


class InvalidStateError(GuardError):
    """Raised when a principal or request is malformed.

    Example: a unit staff principal without a unit identifier.
    """

    default_code = DecisionCode.INVALID_STATE


class RejectedError(GuardError):
    """Raised when a consistency or lifecycle rule rejects a write.

    The code identifies which rule failed (e.g. PLAN_NOT_ACTIVE).
    """

    default_code = DecisionCode.REJECTED


class StoreUnavailableError(GuardError):
    """Raised when the record store fails (connectivity, timeouts).

    Never retried by the engine; retry policy belongs to the store.

    Attributes:
        original_error: The underlying exception that caused this error.
    """

    default_code = DecisionCode.STORE_UNAVAILABLE

    def __init__(self, message: str, original_error: Exception | None = None) -> None:
        """Initialize the store error.

        Args:
            message: Human-readable error description.
            original_error: The underlying exception that caused this error.
        """
        super().__init__(message)
        self.original_error = original_error

    def __str__(self) -> str:
        """Return string representation of the error."""
        if self.original_error:
            return f"[{self.code.value}] {self.message}: {self.original_error}"
        return super().__str__()


_ERRORS_BY_CODE: dict[DecisionCode, type[GuardError]] = {
    DecisionCode.NOT_FOUND: NotFoundError,
    DecisionCode.FORBIDDEN: ForbiddenError,
    DecisionCode.INVALID_STATE: InvalidStateError,
}


def error_for(code: DecisionCode, message: str, details: dict[str, Any] | None = None) -> GuardError:
    """Build the exception matching a decision code.

    Codes without a dedicated class map to RejectedError.

    Args:
        code: Decision code of the failed decision.
        message: Human-readable error description.
        details: Optional additional context.

    Returns:
        Exception instance (not raised).
    """
    error_class = _ERRORS_BY_CODE.get(code, RejectedError)
    return error_class(message, code=code, details=details)

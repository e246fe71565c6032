"""Unified exception hierarchy for coursegate.

All errors raised by the library inherit from CourseGateError. This module provides:
- Base exception hierarchy with stable error codes
- ErrorRegistry for mapping codes back to exception classes
- ``mutation_handler`` decorator that turns failures into a MutationResult

Usage:
    from coursegate.exceptions import (
        CourseGateError,
        AuthorizationError,
        StorageError,
        mutation_handler,
    )

Storage backends may define thin subclasses for backend-specific errors:
    class PostgresGrantStoreError(StorageError):
        pass
"""

from __future__ import annotations

import functools
import logging
from typing import Any, Callable, TypeVar, cast

__all__ = [
    # Base hierarchy
    "CourseGateError",
    "ConfigurationError",
    "AuthorizationError",
    "InvalidGrantError",
    "InvalidTreeError",
    "NotFoundError",
    "StorageError",
    # Registry
    "ErrorRegistry",
    "error_registry",
    "register_error",
    # Mutation helpers
    "mutation_handler",
]

logger = logging.getLogger(__name__)


# ---- Exception Hierarchy ----------------------------------------------------


class CourseGateError(Exception):
    """Base exception for coursegate.

    Attributes:
        code: Stable error code string (e.g. "PERMISSION_DENIED").
        message: Human-readable error description.
        details: Additional context as keyword arguments.
    """

    code: str = "INTERNAL_ERROR"
    message: str = "An internal error occurred"

    def __init__(self, message: str | None = None, code: str | None = None, **kwargs: Any) -> None:
        self.message = message or self.message
        self.code = code or self.code
        self.details = kwargs
        super().__init__(self.message)


class ConfigurationError(CourseGateError):
    """Invalid or missing configuration."""

    code: str = "CONFIGURATION_ERROR"


class AuthorizationError(CourseGateError):
    """Caller is not allowed to perform the operation (e.g. non-admin mutation)."""

    code: str = "PERMISSION_DENIED"
    message: str = "Permission denied"


class InvalidGrantError(CourseGateError):
    """Grant request names an unknown scope or an empty scope id."""

    code: str = "INVALID_GRANT"


class InvalidTreeError(CourseGateError):
    """Tree change would break parent links (e.g. a unit under another course's module)."""

    code: str = "INVALID_TREE"


class NotFoundError(CourseGateError):
    """Referenced course, module, unit or member does not exist."""

    code: str = "NOT_FOUND"


class StorageError(CourseGateError):
    """Backing store failed to read or write."""

    code: str = "STORAGE_ERROR"


# ---- Error Registry ---------------------------------------------------------

_E = TypeVar("_E", bound=type[CourseGateError])


class ErrorRegistry:
    """Registry for mapping stable error codes to exception classes."""

    def __init__(self) -> None:
        self._errors: dict[str, type[CourseGateError]] = {}

    def register(self, code: str, error_cls: type[CourseGateError]) -> None:
        self._errors[code] = error_cls

    def get(self, code: str) -> type[CourseGateError] | None:
        return self._errors.get(code)

    def all(self) -> dict[str, type[CourseGateError]]:
        return dict(self._errors)


error_registry = ErrorRegistry()


def register_error(code: str) -> Callable[[_E], _E]:
    """Decorator to register a custom error type.

    Usage:
        @register_error("ENROLLMENT_CLOSED")
        class EnrollmentClosedError(CourseGateError):
            code = "ENROLLMENT_CLOSED"
    """

    def decorator(cls: _E) -> _E:
        error_registry.register(code, cls)
        return cls

    return cast(Callable[[_E], _E], decorator)


# Register base errors
error_registry.register("INTERNAL_ERROR", CourseGateError)
error_registry.register("CONFIGURATION_ERROR", ConfigurationError)
error_registry.register("PERMISSION_DENIED", AuthorizationError)
error_registry.register("INVALID_GRANT", InvalidGrantError)
error_registry.register("INVALID_TREE", InvalidTreeError)
error_registry.register("NOT_FOUND", NotFoundError)
error_registry.register("STORAGE_ERROR", StorageError)


# ---- Mutation Error Handling ------------------------------------------------


def mutation_handler(method):
    """Decorator for mutation entry points that must return a result, not raise.

    Catches CourseGateError and converts it into an error ``MutationResult``
    carrying the stable code. Unexpected exceptions are logged with traceback
    and reported as ``INTERNAL_ERROR``.

    Usage:
        @mutation_handler
        def set_grant(self, user_id, scope, scope_id, is_granted):
            ...
    """
    from .models import MutationResult

    @functools.wraps(method)
    def wrapper(self, *args, **kwargs):
        try:
            return method(self, *args, **kwargs)
        except CourseGateError as e:
            logger.error(
                "%s failed: [%s] %s",
                method.__name__,
                e.code,
                e.message,
                extra={
                    "error_code": e.code,
                    "error_details": e.details,
                },
            )
            return MutationResult.from_error(e)

        except Exception as e:
            logger.exception("%s unexpected error: %s", method.__name__, e)
            return MutationResult(
                success=False,
                code=CourseGateError.code,
                error=f"Unexpected {type(e).__name__}: {e}",
            )

    return wrapper

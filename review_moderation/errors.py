"""Error kinds raised by the review core.

Every failure the core reports is one of four kinds. The transport layer
classifies on the class (or on ``code``), never on the message text:

- ``ValidationError`` — malformed input, caller-fixable, never retried
- ``NotFoundError``   — referenced review, user or product is absent
- ``ForbiddenError``  — not a moderator, not the owner, or self-moderation
- ``StorageError``    — backend failure (constraint, busy/locked, corruption)
"""
from __future__ import annotations

import functools
from typing import Optional


class ReviewSystemError(Exception):
    """Base class for all core errors."""

    code = "review_system_error"

    def __init__(self, message: str, *, operation: Optional[str] = None):
        super().__init__(message)
        self.message = message
        self.operation = operation

    def __str__(self) -> str:
        if self.operation:
            return f"Failed to {self.operation}: {self.message}"
        return self.message


class ValidationError(ReviewSystemError):
    code = "validation_error"


class NotFoundError(ReviewSystemError):
    code = "not_found"


class ForbiddenError(ReviewSystemError):
    code = "forbidden"


class StorageError(ReviewSystemError):
    code = "storage_error"


def operation(name: str):
    """Tag core errors escaping an async service method with ``name``.

    The error class is preserved. An error that already names an operation
    keeps it.
    """

    def decorator(func):
        @functools.wraps(func)
        async def wrapper(*args, **kwargs):
            try:
                return await func(*args, **kwargs)
            except ReviewSystemError as exc:
                if exc.operation is None:
                    exc.operation = name
                raise

        return wrapper

    return decorator

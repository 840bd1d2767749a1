"""Larder exception hierarchy.

This module defines traceable domain errors with clear boundaries.
Each pipeline stage raises a specific error type for debuggability.
"""

from __future__ import annotations


class LarderError(Exception):
    """Base exception for all Larder failures."""


class LarderConfigError(LarderError):
    """Raised for invalid runtime configuration."""


class MalformedEventError(LarderError):
    """Raised when a trigger payload does not have the expected shape."""


class BlobReadError(LarderError):
    """Raised when a source object is missing or unreadable."""


class ParseError(LarderError):
    """Raised for malformed CSV input; no records are produced."""


class BatchWriteError(LarderError):
    """Raised when a batch write call is rejected by the store.

    Attributes:
        retryable: Whether the same items may succeed on a later attempt.
        error_code: Store error code when one was reported.
    """

    def __init__(self, message: str, retryable: bool, error_code: str | None = None) -> None:
        super().__init__(message)
        self.retryable = retryable
        self.error_code = error_code


class RecordStructureError(LarderError):
    """Raised when a record can never become a valid store item."""


class ExecutionBudgetExceeded(LarderError):
    """Raised when an upload invocation runs past its time budget."""


class MalformedChangeEventError(LarderError):
    """Raised for a change-stream item that cannot be projected."""


class DeadLetterPublishError(LarderError):
    """Raised when permanently failed records cannot be published."""

"""Runtime configuration model for Larder.

This module owns all environment variable parsing and validation.
Other modules consume a typed config object instead of raw env reads.
"""

from __future__ import annotations

from dataclasses import dataclass
import os

from core.constants import (
    DEFAULT_AWS_REGION,
    DEFAULT_BATCH_SIZE,
    DEFAULT_DEAD_LETTER_PREFIX,
    DEFAULT_EXECUTION_BUDGET_SECONDS,
    DEFAULT_MAX_ATTEMPTS,
    DEFAULT_RETRY_BASE_DELAY_SECONDS,
    MAX_BATCH_WRITE_ITEMS,
)
from core.errors import LarderConfigError


@dataclass(frozen=True)
class LarderConfig:
    """Validated runtime configuration.

    Attributes:
        table_name: Target table identifier, required for uploads.
        aws_region: AWS region for boto3 session initialization.
        aws_profile: Optional AWS profile for boto3 session initialization.
        batch_size: Items per batch write call, at most 25.
        max_attempts: Write attempts per record before dead-lettering.
        retry_base_delay: Backoff base in seconds for retried batches.
        execution_budget: Wall-clock ceiling in seconds for one upload.
        dead_letter_bucket: Optional S3 bucket receiving dead-letter files.
        dead_letter_prefix: Key prefix for dead-letter files.
    """

    table_name: str | None
    aws_region: str = DEFAULT_AWS_REGION
    aws_profile: str | None = None
    batch_size: int = DEFAULT_BATCH_SIZE
    max_attempts: int = DEFAULT_MAX_ATTEMPTS
    retry_base_delay: float = DEFAULT_RETRY_BASE_DELAY_SECONDS
    execution_budget: float = DEFAULT_EXECUTION_BUDGET_SECONDS
    dead_letter_bucket: str | None = None
    dead_letter_prefix: str = DEFAULT_DEAD_LETTER_PREFIX

    @classmethod
    def from_env(cls) -> "LarderConfig":
        """Build config from process environment variables.

        Returns:
            A validated config object.

        Raises:
            LarderConfigError: If environment values are invalid.
        """
        batch_size = _parse_int("LARDER_BATCH_SIZE", DEFAULT_BATCH_SIZE)
        if not 1 <= batch_size <= MAX_BATCH_WRITE_ITEMS:
            raise LarderConfigError(
                f"Invalid LARDER_BATCH_SIZE value: expected 1..{MAX_BATCH_WRITE_ITEMS}, "
                f"got {batch_size}. The store rejects larger batch write calls."
            )
        max_attempts = _parse_int("LARDER_MAX_ATTEMPTS", DEFAULT_MAX_ATTEMPTS)
        if max_attempts < 1:
            raise LarderConfigError(
                f"Invalid LARDER_MAX_ATTEMPTS value: expected at least 1, got {max_attempts}."
            )
        return cls(
            table_name=os.getenv("LARDER_TABLE_NAME") or None,
            aws_region=os.getenv("LARDER_AWS_REGION", DEFAULT_AWS_REGION),
            aws_profile=os.getenv("LARDER_AWS_PROFILE") or None,
            batch_size=batch_size,
            max_attempts=max_attempts,
            retry_base_delay=_parse_seconds(
                "LARDER_RETRY_BASE_DELAY", DEFAULT_RETRY_BASE_DELAY_SECONDS
            ),
            execution_budget=_parse_seconds(
                "LARDER_EXECUTION_BUDGET", DEFAULT_EXECUTION_BUDGET_SECONDS
            ),
            dead_letter_bucket=os.getenv("LARDER_DEAD_LETTER_BUCKET") or None,
            dead_letter_prefix=os.getenv("LARDER_DEAD_LETTER_PREFIX", DEFAULT_DEAD_LETTER_PREFIX),
        )

    def require_table_name(self) -> str:
        """Return the target table name or fail with a config error.

        Raises:
            LarderConfigError: If no table name is configured.
        """
        if not self.table_name:
            raise LarderConfigError(
                "No target table configured. Set LARDER_TABLE_NAME to the table "
                "that should receive uploaded food records."
            )
        return self.table_name


def _parse_int(variable: str, default: int) -> int:
    """Parse an integer environment value.

    Args:
        variable: Environment variable name.
        default: Value used when the variable is unset.

    Returns:
        Parsed integer.

    Raises:
        LarderConfigError: If value cannot be parsed into int.
    """
    raw_value = os.getenv(variable)
    if raw_value is None:
        return default
    try:
        return int(raw_value)
    except ValueError as error:
        raise LarderConfigError(
            f"Invalid {variable} value: expected integer, got '{raw_value}'. "
            f"Set {variable} to a numeric value."
        ) from error


def _parse_seconds(variable: str, default: float) -> float:
    """Parse a non-negative duration in seconds.

    Raises:
        LarderConfigError: If value is not a non-negative number.
    """
    raw_value = os.getenv(variable)
    if raw_value is None:
        return default
    try:
        seconds = float(raw_value)
    except ValueError as error:
        raise LarderConfigError(
            f"Invalid {variable} value: expected seconds, got '{raw_value}'."
        ) from error
    if seconds < 0:
        raise LarderConfigError(f"Invalid {variable} value: seconds cannot be negative.")
    return seconds

"""Core constants used across Larder modules.

This module centralizes store limits, field names, and defaults.
Keeping values here avoids magic literals in business logic.
"""

from __future__ import annotations

PRIMARY_KEY_FIELD = "food_name"
OPTIONAL_FIELDS = ("scientific_name", "group", "sub_group")
FOOD_FIELDS = (PRIMARY_KEY_FIELD, *OPTIONAL_FIELDS)
NOT_PRESENT = "not present"
MAX_BATCH_WRITE_ITEMS = 25
DEFAULT_AWS_REGION = "eu-west-2"
DEFAULT_BATCH_SIZE = MAX_BATCH_WRITE_ITEMS
DEFAULT_MAX_ATTEMPTS = 3
DEFAULT_RETRY_BASE_DELAY_SECONDS = 0.05
DEFAULT_EXECUTION_BUDGET_SECONDS = 300.0
DEFAULT_DEAD_LETTER_PREFIX = "dead-letter"
CSV_ENCODING = "utf-8-sig"
RETRYABLE_STORE_ERROR_CODES = (
    "ProvisionedThroughputExceededException",
    "ThrottlingException",
    "RequestLimitExceeded",
    "InternalServerError",
    "ServiceUnavailable",
)
STREAM_EVENTS_WITH_IMAGE = ("INSERT", "MODIFY")
EXIT_CODE_DEAD_LETTERS = 3

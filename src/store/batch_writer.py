"""Batch writers for the food table.

This module wraps the store's batch write call behind a small interface
and classifies store failures as retryable or permanent.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Any, Mapping, Sequence

from botocore.exceptions import BotoCoreError, ClientError, ParamValidationError

from core.constants import MAX_BATCH_WRITE_ITEMS, RETRYABLE_STORE_ERROR_CODES
from core.errors import BatchWriteError
from core.types import BatchWriteResult


class BatchWriter(ABC):
    """Issue one put-only batch write call against a table."""

    @abstractmethod
    def batch_write(
        self,
        table_name: str,
        items: Sequence[Mapping[str, Any]],
    ) -> BatchWriteResult:
        """Put up to 25 native items in one call.

        Args:
            table_name: Target table identifier.
            items: Native typed items.

        Returns:
            Result listing items the store did not commit.

        Raises:
            BatchWriteError: If the call is rejected outright.
        """


class DynamoDbBatchWriter(BatchWriter):
    """Batch writer backed by a boto3 DynamoDB client."""

    def __init__(self, dynamodb_client: Any) -> None:
        self._client = dynamodb_client

    def batch_write(
        self,
        table_name: str,
        items: Sequence[Mapping[str, Any]],
    ) -> BatchWriteResult:
        if len(items) > MAX_BATCH_WRITE_ITEMS:
            raise BatchWriteError(
                f"Batch of {len(items)} items exceeds the {MAX_BATCH_WRITE_ITEMS}-item "
                "limit of one write call.",
                retryable=False,
            )
        request_items = {table_name: [{"PutRequest": {"Item": dict(item)}} for item in items]}
        try:
            response = self._client.batch_write_item(RequestItems=request_items)
        except ClientError as error:
            raise _classify_client_error(error, table_name) from error
        except ParamValidationError as error:
            raise BatchWriteError(
                f"Batch write to {table_name} has malformed items: {error}.",
                retryable=False,
            ) from error
        except BotoCoreError as error:
            raise BatchWriteError(
                f"Batch write to {table_name} failed before reaching the store: {error}.",
                retryable=True,
            ) from error
        unprocessed_requests = response.get("UnprocessedItems", {}).get(table_name, [])
        return BatchWriteResult(
            unprocessed_items=tuple(
                request["PutRequest"]["Item"]
                for request in unprocessed_requests
                if "PutRequest" in request
            )
        )


def _classify_client_error(error: ClientError, table_name: str) -> BatchWriteError:
    """Map a botocore client error to a typed batch write error."""
    error_payload = error.response.get("Error", {})
    error_code = error_payload.get("Code", "Unknown")
    message = error_payload.get("Message", str(error))
    return BatchWriteError(
        f"Batch write to {table_name} rejected with {error_code}: {message}",
        retryable=error_code in RETRYABLE_STORE_ERROR_CODES,
        error_code=error_code,
    )

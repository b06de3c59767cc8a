"""
Domain-Specific Exceptions for dynamo_record

Organized by category:
1. Record Validation Errors
2. Record Type Configuration Errors
3. Store Errors (everything DynamoDB reports back)
"""

from typing import Any, Dict, Optional

from .base import DynamoRecordError


# =============================================================================
# Record Validation Errors
# =============================================================================

class ValidationError(DynamoRecordError):
    """Raised when record attributes fail schema validation.

    ``errors`` holds the first failing attribute as
    ``{"name": ..., "errors": [...], "value": ...}``.
    """

    def __init__(self, message: str, errors: Optional[Dict[str, Any]] = None, original_error: Optional[Exception] = None):
        """Initialize validation error.

        Args:
            message: Human-readable error message
            errors: The first attribute-level validation failure
            original_error: The original exception that caused this error
        """
        self.errors = errors or {}
        super().__init__(message, original_error, validation_errors=self.errors or None)


# =============================================================================
# Record Type Configuration Errors
# =============================================================================

class ConfigurationError(DynamoRecordError):
    """Raised when a record type is declared inconsistently.

    Used for:
    - Record types without a schema
    - Partition/sort key names that are not declared schema attributes
    - Key-based operations on a type without a partition key
    """

    def __init__(self, message: str, record_type: Optional[str] = None):
        self.record_type = record_type
        super().__init__(message, record_type=record_type)


# =============================================================================
# Store Errors
# =============================================================================

class StoreError(DynamoRecordError):
    """Raised when a DynamoDB operation fails.

    The boto3 ``ClientError`` is kept as ``original_error`` (and as the
    ``__cause__`` of the raised exception). Nothing in this package retries.
    """

    def __init__(
        self,
        message: str,
        error_code: Optional[str] = None,
        operation: Optional[str] = None,
        table_name: Optional[str] = None,
        original_error: Optional[Exception] = None
    ):
        """Initialize store error.

        Args:
            message: Human-readable error message
            error_code: DynamoDB error code (e.g. ``AccessDeniedException``)
            operation: The operation that failed (e.g. ``PutItem``)
            table_name: The table the operation targeted
            original_error: The original exception that caused this error
        """
        self.error_code = error_code
        self.operation = operation
        self.table_name = table_name
        super().__init__(
            message,
            original_error,
            error_code=error_code,
            operation=operation,
            table_name=table_name
        )


class ConflictError(StoreError):
    """Raised when a conditional write fails (``ConditionalCheckFailedException``)."""


class RetryableError(StoreError):
    """Raised for throttling, capacity and transient service failures.

    The caller decides whether to retry; this package never does.
    """


class AccessDeniedError(StoreError):
    """Raised for authentication and authorization failures."""


class TableNotFoundError(StoreError):
    """Raised when the target table or index does not exist."""

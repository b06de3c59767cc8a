# Base exception class
from .base import DynamoRecordError

from .domain_exceptions import (
    AccessDeniedError,
    ConfigurationError,
    ConflictError,
    RetryableError,
    StoreError,
    TableNotFoundError,
    ValidationError,
)

__all__ = [
    # Base exception
    "DynamoRecordError",

    # Domain exceptions (alphabetically ordered)
    "AccessDeniedError",
    "ConfigurationError",
    "ConflictError",
    "RetryableError",
    "StoreError",
    "TableNotFoundError",
    "ValidationError",
]

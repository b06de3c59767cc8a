"""
dynamo_record

Active-Record style mapping over DynamoDB: define a record type with a pydantic
schema and a partition key, then validate, save and look up records without
writing request payloads by hand.
"""

from .config import RecordConfig
from .core import RecordStore, create_store
from .exceptions import (
    AccessDeniedError,
    ConfigurationError,
    ConflictError,
    DynamoRecordError,
    RetryableError,
    StoreError,
    TableNotFoundError,
    ValidationError,
)
from .models import QueryPage, Record, RecordIdentity, StoredRecord
from .schema import PydanticSchema, Schema, as_schema

__version__ = "1.0.0"
__all__ = [
    # Configuration
    "RecordConfig",

    # Store
    "RecordStore",
    "create_store",

    # Records
    "Record",
    "StoredRecord",
    "RecordIdentity",
    "QueryPage",

    # Schemas
    "Schema",
    "PydanticSchema",
    "as_schema",

    # Exceptions
    "AccessDeniedError",
    "ConfigurationError",
    "ConflictError",
    "DynamoRecordError",
    "RetryableError",
    "StoreError",
    "TableNotFoundError",
    "ValidationError",
]

from .store import (
    RecordStore,
    create_store,
    map_botocore_error,
    map_dynamodb_error,
)

__all__ = [
    "RecordStore",
    "create_store",
    "map_botocore_error",
    "map_dynamodb_error",
]

from .record import Record
from .stored_record import QueryPage, RecordIdentity, StoredRecord

__all__ = [
    "Record",
    "StoredRecord",
    "RecordIdentity",
    "QueryPage",
]

"""
Storage serialization helpers.

The boto3 resource API accepts plain Python values but rejects ``float`` and
has no ``datetime`` type. Items are converted on their way to the store:

- ``float`` becomes ``Decimal`` (through ``str`` so 0.1 stays 0.1)
- ``datetime`` becomes an ISO-8601 string in UTC (naive values are assumed UTC)
- dicts and lists are converted recursively

Values read back are returned as DynamoDB hands them over; the record schema
is responsible for coercing them.
"""

from datetime import datetime, timezone
from decimal import Decimal
from typing import Any, Dict, Mapping


def to_utc(dt: datetime) -> datetime:
    """Convert datetime to UTC, treating naive datetimes as UTC already."""
    if dt.tzinfo is None:
        return dt.replace(tzinfo=timezone.utc)
    return dt.astimezone(timezone.utc)


def serialize_value(value: Any) -> Any:
    """Convert a single attribute value into something boto3 can store."""
    if isinstance(value, float):
        return Decimal(str(value))
    if isinstance(value, datetime):
        return to_utc(value).isoformat()
    if isinstance(value, dict):
        return {k: serialize_value(v) for k, v in value.items()}
    if isinstance(value, (list, tuple)):
        return [serialize_value(v) for v in value]
    return value


def serialize_item(item: Mapping[str, Any]) -> Dict[str, Any]:
    """Convert a record's attributes into a DynamoDB item.

    Args:
        item: Attribute name to value mapping

    Returns:
        New dictionary safe to pass as ``Item`` to ``put_item``
    """
    return {name: serialize_value(value) for name, value in item.items()}

"""
Test helpers for dynamo_record.

Record types shared by the unit and integration tests.
"""

from .records import (
    Event,
    EventSchema,
    Note,
    NoteSchema,
    Widget,
    WidgetSchema,
)

__all__ = [
    'Event',
    'EventSchema',
    'Note',
    'NoteSchema',
    'Widget',
    'WidgetSchema',
]

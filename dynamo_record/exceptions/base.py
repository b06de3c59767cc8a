from typing import Any, Optional


class DynamoRecordError(Exception):
    """Base exception for all dynamo_record errors.

    Context entries describe where the error happened (record type, table,
    operation). Entries whose value is None are not recorded, so an error
    only reports what is actually known about it.

    Attributes:
        message: Human-readable error message
        original_error: The exception that caused this error (if any)
        context: Known facts about the failure, in the order they were added
    """

    def __init__(self, message: str, original_error: Optional[Exception] = None, **context: Any):
        self.message = message
        self.original_error = original_error
        self.context = {}
        self.add_context(**context)
        super().__init__(message)

    def add_context(self, **context: Any) -> 'DynamoRecordError':
        """Record more context on an error that is already propagating.

        Existing entries are kept. Returns the error so it can be re-raised
        directly: ``raise error.add_context(record_type="Widget")``.
        """
        for key, value in context.items():
            if value is not None:
                self.context.setdefault(key, value)
        return self

    def __str__(self) -> str:
        if not self.context:
            return self.message
        details = ", ".join(f"{key}={value}" for key, value in self.context.items())
        return f"{self.message} (Context: {details})"

    def __repr__(self) -> str:
        return f"{type(self).__name__}({self.message!r}, original_error={self.original_error!r}, **{self.context!r})"

"""
Record schemas.

A schema tells a record which attribute names exist and whether a set of
attribute values is valid. Records only talk to the ``Schema`` protocol, so any
validation library can sit behind it; ``PydanticSchema`` is the one shipped
here.

Validation is short-circuiting from the caller's point of view: a failure
describes exactly one attribute, the first invalid one in declaration order,
as ``{"name": ..., "errors": [...], "value": ...}``.
"""

from typing import Any, Dict, List, Mapping, Protocol, Tuple, Type, runtime_checkable

from pydantic import BaseModel
from pydantic import ValidationError as PydanticValidationError

from .exceptions import ConfigurationError, ValidationError

ROOT_ERROR_NAME = "__root__"


@runtime_checkable
class Schema(Protocol):
    """What a record needs from its schema."""

    def attribute_names(self) -> Tuple[str, ...]:
        """Declared attribute names, in declaration order."""
        ...

    def validate(self, candidate: Mapping[str, Any]) -> None:
        """Raise ValidationError describing the first invalid attribute."""
        ...


def format_error(error: Dict[str, Any]) -> str:
    """Render a ``{name, errors, value}`` failure as a single line."""
    return f"{error['name']}: {'; '.join(error['errors'])} (value={error['value']!r})"


class PydanticSchema:
    """Schema backed by a pydantic model class.

    The model's fields are the declared attributes. Candidates are validated
    with ``model_validate``; pydantic reports every failure, and only the one
    for the earliest declared field is kept.
    """

    def __init__(self, model_class: Type[BaseModel]):
        if not (isinstance(model_class, type) and issubclass(model_class, BaseModel)):
            raise ConfigurationError(f"PydanticSchema needs a pydantic model class, got {model_class!r}")
        self.model_class = model_class
        self._names = tuple(model_class.model_fields)

        # Error locations use aliases; records store values under field names
        self._alias_names: Dict[str, str] = {}
        for name, field in model_class.model_fields.items():
            for alias in (field.alias, field.validation_alias):
                if isinstance(alias, str):
                    self._alias_names[alias] = name

    def __repr__(self) -> str:
        return f"PydanticSchema({self.model_class.__name__})"

    def attribute_names(self) -> Tuple[str, ...]:
        return self._names

    def validate(self, candidate: Mapping[str, Any]) -> None:
        try:
            self.model_class.model_validate(dict(candidate), by_name=True)
        except PydanticValidationError as e:
            first = self._first_error(e.errors(), candidate)
            raise ValidationError(format_error(first), errors=first, original_error=e) from e

    def _first_error(self, errors: List[Dict[str, Any]], candidate: Mapping[str, Any]) -> Dict[str, Any]:
        order = {name: index for index, name in enumerate(self._names)}
        by_name: Dict[str, List[str]] = {}
        for error in errors:
            loc = error.get('loc') or ()
            name = str(loc[0]) if loc else ROOT_ERROR_NAME
            name = self._alias_names.get(name, name)
            by_name.setdefault(name, []).append(error.get('msg', ''))

        name = min(by_name, key=lambda n: order.get(n, len(order)))
        return {
            'name': name,
            'errors': by_name[name],
            'value': candidate.get(name),
        }


def as_schema(schema: Any) -> Schema:
    """Resolve a record type's ``schema`` declaration.

    Accepts an object implementing ``Schema`` or a pydantic model class.

    Raises:
        ConfigurationError: If ``schema`` is neither
    """
    if isinstance(schema, type) and issubclass(schema, BaseModel):
        return PydanticSchema(schema)
    if schema is not None and not isinstance(schema, type) and isinstance(schema, Schema):
        return schema
    raise ConfigurationError(f"Unsupported schema: {schema!r}")

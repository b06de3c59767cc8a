import logging
from typing import Any, ClassVar, Dict, List, Mapping, Optional

from ..exceptions import ConfigurationError, ValidationError
from ..schema import ROOT_ERROR_NAME, Schema, as_schema

logger = logging.getLogger(__name__)


class Record:
    """Schema-validated attribute container.

    Concrete types declare their schema as a class attribute, either a pydantic
    model class or any object implementing ``Schema``::

        class Widget(Record):
            schema = WidgetSchema

    Attribute values are stored sparsely: an attribute that was never populated
    is absent, which is different from one populated with ``None``. Only names
    declared by the schema are ever stored.

    Populated attributes can be read as ``record.<name>``. A declared name that
    is also a method or attribute of the record type (``get``, ``validate``,
    ``schema``, ``identity`` on stored records, ...) resolves to that member
    instead; read such values through ``get()`` or ``get_attributes()``.
    """

    schema: ClassVar[Any] = None

    def __init__(self, values: Optional[Mapping[str, Any]] = None, *, schema: Any = None):
        """Create a record.

        Args:
            values: Initial attribute values; undeclared names are ignored
            schema: Per-instance schema, overriding the class declaration

        Raises:
            ConfigurationError: If no usable schema is declared
        """
        declared = schema if schema is not None else type(self).schema
        if declared is None:
            raise ConfigurationError(f"{type(self).__name__} does not declare a schema", type(self).__name__)
        self._schema: Schema = as_schema(declared)
        self._values: Dict[str, Any] = {}
        self._validation_errors: List[Dict[str, Any]] = []
        self.populate(values or {})

    def __getattr__(self, name: str) -> Any:
        # Only reached when normal lookup fails, so record members shadow attributes
        if not name.startswith('_'):
            values = self.__dict__.get('_values', {})
            if name in values:
                return values[name]
        raise AttributeError(f"{type(self).__name__!r} object has no attribute {name!r}")

    def __eq__(self, other: object) -> bool:
        if type(other) is not type(self):
            return NotImplemented
        return self.get_attributes() == other.get_attributes()

    def __repr__(self) -> str:
        return f"<{type(self).__name__} {self.get_attributes()!r}>"

    def get_schema(self) -> Schema:
        return self._schema

    def populate(self, values: Mapping[str, Any]) -> 'Record':
        """Assign every declared attribute found in ``values``.

        Undeclared names are dropped silently. Returns the record for chaining.
        """
        declared = self._schema.attribute_names()
        for name, value in values.items():
            if name in declared:
                self._values[name] = value
        return self

    def get_attributes(self) -> Dict[str, Any]:
        """Return the populated attributes in schema order."""
        return {
            name: self._values[name]
            for name in self._schema.attribute_names()
            if name in self._values
        }

    def get(self, *names: str) -> Dict[str, Any]:
        """Return the populated attributes among ``names`` (all when omitted).

        Raises:
            KeyError: If a name is not declared by the schema
        """
        if not names:
            return self.get_attributes()

        declared = self._schema.attribute_names()
        for name in names:
            if name not in declared:
                raise KeyError(f"Field {name} not found.")
        return {name: self._values[name] for name in declared if name in names and name in self._values}

    def validate(self) -> bool:
        """Validate the current attributes against the schema.

        Returns:
            True when valid. False otherwise, with the first failing attribute
            recorded in ``get_validation_errors()``.
        """
        self._validation_errors = []
        try:
            self._schema.validate(self.get_attributes())
        except ValidationError as e:
            error = e.errors or {'name': ROOT_ERROR_NAME, 'errors': [e.message], 'value': None}
            self._validation_errors.append(error)
            logger.debug(f"{type(self).__name__} failed validation: {e.message}")
            return False
        return True

    def get_validation_errors(self) -> List[Dict[str, Any]]:
        return self._validation_errors

"""
Stored records: records with a table, a primary key and DynamoDB operations.

A concrete type names its schema, its key attributes and, optionally, its
table::

    class Widget(StoredRecord):
        schema = WidgetSchema
        partition_key = "widget_id"
        sort_key = "version"          # optional
        table_name = "widgets"        # optional, defaults to project-stage-Widget

    Widget({"widget_id": "w-1", "version": 1, "name": "Sprocket"}).save()
    widget = Widget.find_by_pk("w-1", 1)
    widgets = Widget.find_all_by("widget_id = :id", {":id": "w-1"})

The operations are layered. The public ones (``save``, ``find_by_pk``,
``find_all_by_pk``, ``find_all_by``) build requests from record state and turn
items back into records. Underneath, ``_get_document``, ``_batch_get_documents``,
``_query_documents`` and ``_put_document`` each add the table name to the
caller's options, make exactly one store call and unwrap the response.
"""

import logging
from typing import Any, ClassVar, Dict, List, NamedTuple, Optional, Sequence, Type, TypeVar

from pydantic import BaseModel, ConfigDict

from ..config import RecordConfig
from ..core import RecordStore, create_store
from ..exceptions import ConfigurationError, StoreError, ValidationError
from ..schema import format_error
from .record import Record

logger = logging.getLogger(__name__)

T = TypeVar('T', bound='StoredRecord')


class RecordIdentity(BaseModel):
    """Where a stored record lives and which attributes form its key."""

    model_config = ConfigDict(frozen=True)

    table_name: str
    partition_key_name: Optional[str] = None
    sort_key_name: Optional[str] = None


class QueryPage(NamedTuple):
    """One page of query results."""

    items: List[Dict[str, Any]]
    last_evaluated_key: Optional[Dict[str, Any]] = None


class StoredRecord(Record):
    """Record persisted as one DynamoDB item."""

    partition_key: ClassVar[Optional[str]] = None
    sort_key: ClassVar[Optional[str]] = None
    table_name: ClassVar[Optional[str]] = None

    _store: ClassVar[Optional[RecordStore]] = None

    def __init__(self, values: Optional[Dict[str, Any]] = None, *, schema: Any = None, table_name: Optional[str] = None):
        """Create a stored record.

        Args:
            values: Initial attribute values; undeclared names are ignored
            schema: Per-instance schema, overriding the class declaration
            table_name: Per-instance table name, overriding the type's

        Raises:
            ConfigurationError: If a declared key attribute is not in the schema
        """
        super().__init__(values, schema=schema)
        cls = type(self)
        declared = self._schema.attribute_names()
        for role, name in (("partition", cls.partition_key), ("sort", cls.sort_key)):
            if name is not None and name not in declared:
                raise ConfigurationError(
                    f"{cls.__name__}: {role} key '{name}' is not a declared attribute",
                    cls.__name__
                )

        self.identity = RecordIdentity(
            table_name=table_name or cls.default_table_name(),
            partition_key_name=cls.partition_key,
            sort_key_name=cls.sort_key
        )

    # ------------------------------------------------------------------
    # Store binding and naming
    # ------------------------------------------------------------------

    @classmethod
    def bind(cls, store: RecordStore) -> None:
        """Bind the store used by this type and, unless they bind their own, its subclasses."""
        cls._store = store

    @classmethod
    def configure(cls, config: RecordConfig) -> RecordStore:
        """Create a store from ``config`` and bind it."""
        store = create_store(config)
        cls.bind(store)
        return store

    @classmethod
    def get_store(cls) -> RecordStore:
        """Return the bound store, creating a default one from the environment on first use."""
        if cls._store is None:
            logger.info("No store bound, creating one from environment configuration")
            StoredRecord._store = create_store()
        return cls._store

    @classmethod
    def default_table_name(cls) -> str:
        """Table name of the type: the explicit ``table_name`` or project-stage-TypeName."""
        if cls.table_name:
            return cls.table_name
        return cls.get_store().config.get_table_name(cls.__name__)

    def get_table_name(self) -> str:
        return self.identity.table_name

    def get_partition_key(self) -> Optional[str]:
        return self.identity.partition_key_name

    get_hash_key = get_partition_key

    def get_sort_key(self) -> Optional[str]:
        return self.identity.sort_key_name

    def build_key(self, partition_key_value: Any, sort_key_value: Any = None) -> Dict[str, Any]:
        """Build the primary key for a lookup.

        The sort key is only included when a value is given.

        Raises:
            ConfigurationError: If the type has no partition key, or a sort key
                value is given for a type without a sort key
        """
        pk_name = self.get_partition_key()
        if pk_name is None:
            raise ConfigurationError(f"{type(self).__name__} does not declare a partition key", type(self).__name__)

        key = {pk_name: partition_key_value}
        if sort_key_value is not None:
            sk_name = self.get_sort_key()
            if sk_name is None:
                raise ConfigurationError(f"{type(self).__name__} does not declare a sort key", type(self).__name__)
            key[sk_name] = sort_key_value
        return key

    # ------------------------------------------------------------------
    # Public operations
    # ------------------------------------------------------------------

    def save(self, condition_expression: Any = None) -> Dict[str, Any]:
        """Validate, then write the whole item, replacing any existing one.

        Args:
            condition_expression: Optional put condition (string or boto3 condition)

        Returns:
            The raw PutItem response

        Raises:
            ValidationError: If the record is invalid; nothing is sent to the store
            StoreError: If DynamoDB rejects the write
        """
        if not self.validate():
            first = self.get_validation_errors()[0]
            raise ValidationError(format_error(first), errors=first)

        if self.get_partition_key() is None:
            raise ConfigurationError(f"{type(self).__name__} does not declare a partition key", type(self).__name__)

        options = {}
        if condition_expression is not None:
            options['ConditionExpression'] = condition_expression
        return type(self)._put_document(self, **options)

    def db_save(self, condition_expression: Any = None) -> Dict[str, Any]:
        """Same as ``save``."""
        return self.save(condition_expression)

    @classmethod
    def find_by_pk(cls: Type[T], partition_key_value: Any, sort_key_value: Any = None) -> Optional[T]:
        """Look up one record by primary key.

        Returns:
            The populated record, or None when no item has that key
        """
        record = cls()
        key = record.build_key(partition_key_value, sort_key_value)
        item = cls._get_document(record, Key=key)
        if item is None:
            logger.debug(f"No item in {record.get_table_name()} with key {key}")
            return None
        return record.populate(item)

    @classmethod
    def find_all_by_pk(
        cls: Type[T],
        partition_key_values: Sequence[Any],
        sort_key_values: Optional[Sequence[Any]] = None
    ) -> List[T]:
        """Look up several records with one BatchGetItem call.

        Empty partition key values are skipped. The sort key at the same index,
        when present, is added to the key.

        Records come back in the order DynamoDB returns them, which is not the
        request order. Unprocessed keys are not requested again.
        """
        record = cls()
        sort_key_values = sort_key_values or []

        keys = []
        for index, pk_value in enumerate(partition_key_values):
            if not pk_value:
                continue
            sk_value = sort_key_values[index] if index < len(sort_key_values) else None
            keys.append(record.build_key(pk_value, sk_value))

        if not keys:
            return []

        items = cls._batch_get_documents(record, keys)
        logger.info(f"Batch get returned {len(items)} of {len(keys)} items from {record.get_table_name()}")
        return [cls().populate(item) for item in items]

    @classmethod
    def find_all_by(
        cls: Type[T],
        key_condition_expression: Any,
        expression_values: Optional[Dict[str, Any]] = None,
        *,
        index_name: Optional[str] = None,
        **options: Any
    ) -> List[T]:
        """Query by key condition, following pagination to the end.

        Args:
            key_condition_expression: String expression (``"pk = :pk"``) or boto3 ``Key`` condition
            expression_values: ``ExpressionAttributeValues`` for a string expression
            index_name: Query a secondary index instead of the table
            **options: Extra Query parameters sent with every page

        Returns:
            All matching records, in page order
        """
        record = cls()
        params = {'KeyConditionExpression': key_condition_expression, **options}
        if expression_values:
            params['ExpressionAttributeValues'] = expression_values
        if index_name:
            params['IndexName'] = index_name

        items: List[Dict[str, Any]] = []
        pages = 0
        while True:
            page = cls._query_documents(record, **params)
            pages += 1
            items.extend(page.items)
            if not page.last_evaluated_key:
                break
            params['ExclusiveStartKey'] = page.last_evaluated_key

        logger.info(f"Query returned {len(items)} items in {pages} page(s) from {record.get_table_name()}")
        return [cls().populate(item) for item in items]

    # ------------------------------------------------------------------
    # Key-value layer: one store call each
    # ------------------------------------------------------------------

    @classmethod
    def _call_store(cls, method: str, **params: Any) -> Dict[str, Any]:
        try:
            return getattr(cls.get_store(), method)(**params)
        except StoreError as e:
            # Same error object, tagged with the record type that issued the call
            raise e.add_context(record_type=cls.__name__)

    @classmethod
    def _get_document(cls, record: 'StoredRecord', **options: Any) -> Optional[Dict[str, Any]]:
        params = {'TableName': record.get_table_name(), **options}
        response = cls._call_store("get_item", **params)
        return response.get('Item')

    @classmethod
    def _batch_get_documents(cls, record: 'StoredRecord', keys: List[Dict[str, Any]], **options: Any) -> List[Dict[str, Any]]:
        table_name = record.get_table_name()
        request_items = {table_name: {'Keys': keys, **options}}
        response = cls._call_store("batch_get_item", RequestItems=request_items)

        unprocessed = response.get('UnprocessedKeys', {}).get(table_name, {}).get('Keys') or []
        if unprocessed:
            logger.warning(f"Batch get on {table_name} left {len(unprocessed)} keys unprocessed")

        return response.get('Responses', {}).get(table_name, [])

    @classmethod
    def _query_documents(cls, record: 'StoredRecord', **options: Any) -> QueryPage:
        params = {'TableName': record.get_table_name(), **options}
        response = cls._call_store("query", **params)
        return QueryPage(
            items=response.get('Items', []),
            last_evaluated_key=response.get('LastEvaluatedKey')
        )

    @classmethod
    def _put_document(cls, record: 'StoredRecord', **options: Any) -> Dict[str, Any]:
        params = {
            'TableName': record.get_table_name(),
            'Item': record.get_attributes(),
            'ReturnValues': 'NONE',
            **options
        }
        return cls._call_store("put_item", **params)

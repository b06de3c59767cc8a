"""
Tests for RecordStore (core/store.py)

These tests verify the thin DynamoDB wrapper shared by every record type:
lazy resource creation, table handle caching and error mapping.
"""

import logging
from datetime import datetime, timezone
from decimal import Decimal
from unittest.mock import Mock, patch

import pytest
from botocore.exceptions import ClientError, EndpointConnectionError, NoCredentialsError, ReadTimeoutError

from dynamo_record.config import RecordConfig
from dynamo_record.core import RecordStore, create_store, map_botocore_error, map_dynamodb_error
from dynamo_record.exceptions import (
    AccessDeniedError,
    ConflictError,
    RetryableError,
    StoreError,
    TableNotFoundError,
)


def client_error(code, message="boom", operation="PutItem"):
    return ClientError({'Error': {'Code': code, 'Message': message}}, operation)


@pytest.fixture
def mock_table():
    """Mock DynamoDB table resource."""
    table = Mock()
    table.get_item.return_value = {}
    table.query.return_value = {'Items': []}
    table.put_item.return_value = {}
    return table


@pytest.fixture
def store_with_table(record_config, mock_table):
    """Store whose resource hands out ``mock_table`` for every table name."""
    store = RecordStore(record_config)
    store._dynamodb = Mock()
    store._dynamodb.Table.return_value = mock_table
    return store


class TestRecordStore:
    """Test RecordStore class."""

    def test_initialization(self, record_config):
        """Test RecordStore initialization."""
        store = RecordStore(record_config)

        assert store.config == record_config
        assert store._dynamodb is None
        assert store._tables == {}

    def test_dynamodb_property_lazy_initialization(self, record_config):
        """Test lazy initialization of DynamoDB resource."""
        with patch('boto3.Session') as mock_session_class:
            mock_session = Mock()
            mock_dynamodb = Mock()
            mock_session_class.return_value = mock_session
            mock_session.resource.return_value = mock_dynamodb

            store = RecordStore(record_config)

            result = store.dynamodb

            assert result == mock_dynamodb
            mock_session_class.assert_called_once_with(
                aws_access_key_id="test_key",
                aws_secret_access_key="test_secret",
                region_name="us-east-1"
            )
            args, kwargs = mock_session.resource.call_args
            assert args == ('dynamodb',)
            assert kwargs['region_name'] == "us-east-1"
            assert 'endpoint_url' not in kwargs
            assert kwargs['config'].max_pool_connections == 50

    def test_dynamodb_property_with_endpoint(self):
        """Test that a configured endpoint is passed to the resource."""
        with patch('boto3.Session') as mock_session_class:
            mock_session = Mock()
            mock_session_class.return_value = mock_session

            store = RecordStore(RecordConfig(region_name="us-east-1", endpoint_url="http://localhost:8000"))
            _ = store.dynamodb

            _, kwargs = mock_session.resource.call_args
            assert kwargs['endpoint_url'] == "http://localhost:8000"

    def test_dynamodb_property_reuses_instance(self, record_config):
        """Test that DynamoDB resource is reused on subsequent accesses."""
        with patch('boto3.Session') as mock_session_class:
            mock_session = Mock()
            mock_dynamodb = Mock()
            mock_session_class.return_value = mock_session
            mock_session.resource.return_value = mock_dynamodb

            store = RecordStore(record_config)

            result1 = store.dynamodb
            result2 = store.dynamodb

            assert result1 == result2 == mock_dynamodb
            mock_session_class.assert_called_once()

    def test_dynamodb_connection_error(self, record_config):
        """Test DynamoDB connection error handling."""
        with patch('boto3.Session') as mock_session_class:
            mock_session_class.side_effect = Exception("Connection failed")

            store = RecordStore(record_config)

            with pytest.raises(StoreError, match="Failed to connect to DynamoDB") as exc_info:
                _ = store.dynamodb

            assert exc_info.value.operation == "Connect"

    def test_table_handles_are_cached(self, store_with_table, mock_table):
        """Test that each table handle is created once."""
        assert store_with_table.table("Widget") is mock_table
        assert store_with_table.table("Widget") is mock_table

        store_with_table._dynamodb.Table.assert_called_once_with("Widget")

    def test_table_access_error(self, record_config):
        """Test table access error handling."""
        store = RecordStore(record_config)
        store._dynamodb = Mock()
        store._dynamodb.Table.side_effect = Exception("Table access failed")

        with pytest.raises(StoreError, match="Failed to access table") as exc_info:
            store.table("Widget")

        assert exc_info.value.table_name == "Widget"

    def test_get_item(self, store_with_table, mock_table):
        """Test GetItem passes everything but the table name through."""
        mock_table.get_item.return_value = {'Item': {'widget_id': 'w-1'}}

        result = store_with_table.get_item(TableName="Widget", Key={'widget_id': 'w-1'}, ConsistentRead=True)

        assert result == {'Item': {'widget_id': 'w-1'}}
        mock_table.get_item.assert_called_once_with(Key={'widget_id': 'w-1'}, ConsistentRead=True)

    def test_query(self, store_with_table, mock_table):
        """Test Query returns the raw page."""
        mock_table.query.return_value = {'Items': [{'widget_id': 'w-1'}], 'LastEvaluatedKey': {'widget_id': 'w-1'}}

        result = store_with_table.query(
            TableName="Widget",
            KeyConditionExpression="widget_id = :id",
            ExpressionAttributeValues={':id': 'w-1'}
        )

        assert result['LastEvaluatedKey'] == {'widget_id': 'w-1'}
        mock_table.query.assert_called_once_with(
            KeyConditionExpression="widget_id = :id",
            ExpressionAttributeValues={':id': 'w-1'}
        )

    def test_batch_get_item(self, store_with_table):
        """Test BatchGetItem goes through the service resource."""
        request_items = {'Widget': {'Keys': [{'widget_id': 'w-1'}]}}
        store_with_table._dynamodb.batch_get_item.return_value = {'Responses': {'Widget': []}}

        result = store_with_table.batch_get_item(RequestItems=request_items)

        assert result == {'Responses': {'Widget': []}}
        store_with_table._dynamodb.batch_get_item.assert_called_once_with(RequestItems=request_items)

    def test_batch_get_item_error(self, store_with_table):
        """Test BatchGetItem error mapping names the single table."""
        store_with_table._dynamodb.batch_get_item.side_effect = client_error(
            'ProvisionedThroughputExceededException', operation='BatchGetItem'
        )

        with pytest.raises(RetryableError) as exc_info:
            store_with_table.batch_get_item(RequestItems={'Widget': {'Keys': [{'widget_id': 'w-1'}]}})

        assert exc_info.value.operation == "BatchGetItem"
        assert exc_info.value.table_name == "Widget"

    def test_put_item_serializes_values(self, store_with_table, mock_table):
        """Test PutItem converts floats and datetimes before sending."""
        created = datetime(2024, 1, 2, 3, 4, 5, tzinfo=timezone.utc)

        store_with_table.put_item(
            TableName="Widget",
            Item={'widget_id': 'w-1', 'price': 9.99, 'created_at': created, 'dims': [1.5, 2]},
            ReturnValues='NONE'
        )

        mock_table.put_item.assert_called_once_with(
            Item={
                'widget_id': 'w-1',
                'price': Decimal('9.99'),
                'created_at': '2024-01-02T03:04:05+00:00',
                'dims': [Decimal('1.5'), 2]
            },
            ReturnValues='NONE'
        )

    def test_put_item_conflict(self, store_with_table, mock_table):
        """Test a failed condition surfaces as ConflictError with its cause."""
        error = client_error('ConditionalCheckFailedException')
        mock_table.put_item.side_effect = error

        with pytest.raises(ConflictError) as exc_info:
            store_with_table.put_item(TableName="Widget", Item={'widget_id': 'w-1'})

        assert exc_info.value.original_error is error
        assert exc_info.value.__cause__ is error
        assert exc_info.value.error_code == 'ConditionalCheckFailedException'
        assert mock_table.put_item.call_count == 1

    def test_query_transport_error(self, store_with_table, mock_table):
        """Test a connection failure surfaces as RetryableError with its cause."""
        error = EndpointConnectionError(endpoint_url="http://localhost:8000")
        mock_table.query.side_effect = error

        with pytest.raises(RetryableError) as exc_info:
            store_with_table.query(TableName="Widget", KeyConditionExpression="widget_id = :id")

        assert exc_info.value.original_error is error
        assert exc_info.value.__cause__ is error
        assert exc_info.value.error_code == "EndpointConnectionError"
        assert exc_info.value.operation == "Query"

    def test_put_item_client_side_error(self, store_with_table, mock_table):
        """Test non-transport botocore errors become a plain StoreError."""
        mock_table.put_item.side_effect = NoCredentialsError()

        with pytest.raises(StoreError) as exc_info:
            store_with_table.put_item(TableName="Widget", Item={'widget_id': 'w-1'})

        assert type(exc_info.value) is StoreError
        assert exc_info.value.table_name == "Widget"

    def test_debug_logging_flag(self):
        """Test that enable_debug_logging lowers the package log level."""
        package_logger = logging.getLogger('dynamo_record')
        previous = package_logger.level
        try:
            RecordStore(RecordConfig(region_name="us-east-1", enable_debug_logging=True))

            assert package_logger.level == logging.DEBUG
        finally:
            package_logger.setLevel(previous)

    def test_create_store(self, record_config):
        """Test the factory function."""
        store = create_store(record_config)

        assert isinstance(store, RecordStore)
        assert store.config is record_config


class TestErrorMapping:
    """Test ClientError to StoreError mapping."""

    @pytest.mark.parametrize("code, expected", [
        ('ConditionalCheckFailedException', ConflictError),
        ('ResourceNotFoundException', TableNotFoundError),
        ('ProvisionedThroughputExceededException', RetryableError),
        ('ThrottlingException', RetryableError),
        ('InternalServerError', RetryableError),
        ('AccessDeniedException', AccessDeniedError),
        ('UnrecognizedClientException', AccessDeniedError),
        ('ValidationException', StoreError),
    ])
    def test_error_classes(self, code, expected):
        mapped = map_dynamodb_error(client_error(code), "PutItem", "Widget")

        assert type(mapped) is expected
        assert mapped.error_code == code

    def test_message_and_context(self):
        mapped = map_dynamodb_error(client_error('ValidationException', "bad key"), "GetItem", "Widget")

        assert mapped.message == "DynamoDB operation failed - GetItem on Widget: bad key"
        assert mapped.operation == "GetItem"
        assert mapped.table_name == "Widget"
        assert "error_code=ValidationException" in str(mapped)

    def test_without_table_name(self):
        mapped = map_dynamodb_error(client_error('ThrottlingException', "slow down"), "BatchGetItem", None)

        assert mapped.message == "Throttling/service unavailable - BatchGetItem: slow down"
        assert "table_name" not in str(mapped)

    @pytest.mark.parametrize("error, expected", [
        (EndpointConnectionError(endpoint_url="http://localhost:8000"), RetryableError),
        (ReadTimeoutError(endpoint_url="http://localhost:8000"), RetryableError),
        (NoCredentialsError(), StoreError),
    ])
    def test_botocore_error_classes(self, error, expected):
        mapped = map_botocore_error(error, "GetItem", "Widget")

        assert type(mapped) is expected
        assert mapped.message.endswith(f"GetItem on Widget: {error}")
        assert mapped.original_error is error

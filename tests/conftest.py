"""
Test configuration and fixtures for dynamo_record.

Unit tests bind a ``Mock`` store to ``StoredRecord``; integration tests bind a
real ``RecordStore`` talking to moto's in-process DynamoDB.
"""

from unittest.mock import Mock

import pytest
from moto import mock_aws

from dynamo_record import RecordConfig, RecordStore, StoredRecord


@pytest.fixture
def record_config():
    """Configuration for testing: fake credentials, no project or stage."""
    return RecordConfig(
        aws_access_key_id="test_key",
        aws_secret_access_key="test_secret",
        region_name="us-east-1",
        endpoint_url=None,
        project=None,
        stage=None,
        enable_debug_logging=False
    )


@pytest.fixture
def mock_store(record_config):
    """Store stub recording every call; responses are set per test."""
    store = Mock(spec=RecordStore)
    store.config = record_config
    store.get_item.return_value = {}
    store.batch_get_item.return_value = {'Responses': {}}
    store.query.return_value = {'Items': []}
    store.put_item.return_value = {'ResponseMetadata': {'HTTPStatusCode': 200}}
    return store


@pytest.fixture
def bound_store(mock_store):
    """Mock store bound to every StoredRecord type for the duration of a test."""
    StoredRecord.bind(mock_store)
    yield mock_store
    StoredRecord._store = None


@pytest.fixture
def moto_store(record_config):
    """Real RecordStore against moto, bound to every StoredRecord type."""
    with mock_aws():
        store = RecordStore(record_config)
        StoredRecord.bind(store)
        yield store
        StoredRecord._store = None


@pytest.fixture
def widget_table(moto_store):
    """Create the Widget table (partition key only)."""
    return moto_store.dynamodb.create_table(
        TableName='Widget',
        KeySchema=[
            {'AttributeName': 'widget_id', 'KeyType': 'HASH'}
        ],
        AttributeDefinitions=[
            {'AttributeName': 'widget_id', 'AttributeType': 'S'}
        ],
        BillingMode='PAY_PER_REQUEST'
    )


@pytest.fixture
def event_table(moto_store):
    """Create the Event table (composite key) with a reading index."""
    return moto_store.dynamodb.create_table(
        TableName='Event',
        KeySchema=[
            {'AttributeName': 'device_id', 'KeyType': 'HASH'},
            {'AttributeName': 'timestamp', 'KeyType': 'RANGE'}
        ],
        AttributeDefinitions=[
            {'AttributeName': 'device_id', 'AttributeType': 'S'},
            {'AttributeName': 'timestamp', 'AttributeType': 'S'},
            {'AttributeName': 'reading', 'AttributeType': 'N'}
        ],
        GlobalSecondaryIndexes=[
            {
                'IndexName': 'ReadingIndex',
                'KeySchema': [
                    {'AttributeName': 'device_id', 'KeyType': 'HASH'},
                    {'AttributeName': 'reading', 'KeyType': 'RANGE'}
                ],
                'Projection': {'ProjectionType': 'ALL'}
            }
        ],
        BillingMode='PAY_PER_REQUEST'
    )


@pytest.fixture
def sample_widget_data():
    """Sample widget attributes."""
    return {
        "widget_id": "w-1",
        "name": "Sprocket",
        "description": "A small toothed wheel"
    }

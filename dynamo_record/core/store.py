"""
Record Store

A thin wrapper around the boto3 DynamoDB resource shared by every record type.
One store holds one lazily-created resource and is reused for all operations,
so a process normally has exactly one of these.

The store knows nothing about records. Each method:

- issues exactly one boto3 call
- takes the raw boto3 keyword arguments, ``TableName`` included
- returns the raw boto3 response
- maps ``ClientError`` and botocore transport errors to a ``StoreError`` subclass

Retries and timeouts are botocore's business, configured through
``RecordConfig.retries`` and ``RecordConfig.timeout_seconds``.
"""

import logging
from typing import Any, Dict, Optional

import boto3
from botocore.config import Config
from botocore.exceptions import (
    BotoCoreError,
    ClientError,
    ConnectionClosedError,
    ConnectTimeoutError,
    EndpointConnectionError,
    ReadTimeoutError,
)

from ..config import RecordConfig
from ..exceptions import (
    AccessDeniedError,
    ConflictError,
    RetryableError,
    StoreError,
    TableNotFoundError,
)
from ..utils import serialize_item

logger = logging.getLogger(__name__)

_RETRYABLE_CODES = {
    'ProvisionedThroughputExceededException',
    'RequestLimitExceeded',
    'ThrottlingException',
    'InternalServerError',
    'ServiceUnavailable',
    'ServiceUnavailableException',
    'RequestTimeoutException',
}

_ACCESS_CODES = {
    'AccessDeniedException',
    'UnrecognizedClientException',
    'InvalidSignatureException',
    'IncompleteSignatureException',
    'ExpiredTokenException',
    'MissingAuthenticationTokenException',
}

_TRANSPORT_ERRORS = (
    EndpointConnectionError,
    ConnectionClosedError,
    ConnectTimeoutError,
    ReadTimeoutError,
)


def map_dynamodb_error(error: ClientError, operation: str, table_name: Optional[str]) -> StoreError:
    """Map a DynamoDB ClientError to a StoreError subclass.

    Args:
        error: The boto3 ClientError
        operation: The operation that failed (e.g. "GetItem", "PutItem")
        table_name: The DynamoDB table name, if the call targeted one table

    Returns:
        StoreError (or subclass) carrying the error code and the original error
    """
    error_code = error.response.get('Error', {}).get('Code', 'Unknown')
    error_message = error.response.get('Error', {}).get('Message', str(error))

    context = f"{operation} on {table_name}" if table_name else operation
    full_message = f"{context}: {error_message}"
    kwargs = {
        'error_code': error_code,
        'operation': operation,
        'table_name': table_name,
        'original_error': error,
    }

    if error_code == 'ConditionalCheckFailedException':
        return ConflictError(f"Conditional check failed - {full_message}", **kwargs)

    if error_code == 'ResourceNotFoundException':
        return TableNotFoundError(f"Table or index not found - {full_message}", **kwargs)

    if error_code in _RETRYABLE_CODES:
        return RetryableError(f"Throttling/service unavailable - {full_message}", **kwargs)

    if error_code in _ACCESS_CODES:
        return AccessDeniedError(f"Authentication/authorization failed - {full_message}", **kwargs)

    return StoreError(f"DynamoDB operation failed - {full_message}", **kwargs)


def map_botocore_error(error: BotoCoreError, operation: str, table_name: Optional[str]) -> StoreError:
    """Map a botocore transport or client-side error to a StoreError.

    Connection failures and timeouts become RetryableError; anything else
    (bad parameters, missing credentials) is a plain StoreError.
    """
    context = f"{operation} on {table_name}" if table_name else operation
    kwargs = {
        'error_code': type(error).__name__,
        'operation': operation,
        'table_name': table_name,
        'original_error': error,
    }

    if isinstance(error, _TRANSPORT_ERRORS):
        return RetryableError(f"Connection failed - {context}: {error}", **kwargs)

    return StoreError(f"DynamoDB request failed - {context}: {error}", **kwargs)


class RecordStore:
    """Shared DynamoDB handle used by all stored records."""

    def __init__(self, config: Optional[RecordConfig] = None):
        """Initialize record store.

        Args:
            config: Connection and naming configuration (defaults to the environment)
        """
        self.config = config or RecordConfig.from_env()
        self._dynamodb = None
        self._tables: Dict[str, Any] = {}

        if self.config.enable_debug_logging:
            logging.getLogger('dynamo_record').setLevel(logging.DEBUG)

    @property
    def dynamodb(self):
        """Lazy initialization of DynamoDB resource."""
        if self._dynamodb is None:
            try:
                session = boto3.Session(
                    aws_access_key_id=self.config.aws_access_key_id,
                    aws_secret_access_key=self.config.aws_secret_access_key,
                    region_name=self.config.region_name
                )

                resource_kwargs = {
                    'region_name': self.config.region_name
                }

                if self.config.endpoint_url:
                    resource_kwargs['endpoint_url'] = self.config.endpoint_url

                resource_kwargs['config'] = Config(
                    retries={'max_attempts': self.config.retries},
                    max_pool_connections=self.config.max_pool_connections,
                    read_timeout=self.config.timeout_seconds,
                    connect_timeout=self.config.timeout_seconds
                )

                self._dynamodb = session.resource('dynamodb', **resource_kwargs)
            except Exception as e:
                logger.error(f"Failed to create DynamoDB resource: {e}")
                raise StoreError(f"Failed to connect to DynamoDB: {e}", operation="Connect", original_error=e) from e
        return self._dynamodb

    def table(self, table_name: str):
        """Return the cached boto3 Table handle for ``table_name``."""
        if table_name not in self._tables:
            try:
                self._tables[table_name] = self.dynamodb.Table(table_name)
            except StoreError:
                raise
            except Exception as e:
                logger.error(f"Failed to access table '{table_name}': {e}")
                raise StoreError(
                    f"Failed to access table '{table_name}': {e}",
                    operation="Connect",
                    table_name=table_name,
                    original_error=e
                ) from e
        return self._tables[table_name]

    def get_item(self, TableName: str, **kwargs) -> Dict[str, Any]:
        """Execute GetItem. ``kwargs`` go to boto3 unchanged (``Key`` etc.)."""
        logger.debug(f"GetItem on {TableName}: {kwargs}")
        try:
            return self.table(TableName).get_item(**kwargs)
        except ClientError as e:
            logger.error(f"GetItem on {TableName} failed: {e}")
            raise map_dynamodb_error(e, "GetItem", TableName) from e
        except BotoCoreError as e:
            logger.error(f"GetItem on {TableName} failed: {e}")
            raise map_botocore_error(e, "GetItem", TableName) from e

    def batch_get_item(self, RequestItems: Dict[str, Any], **kwargs) -> Dict[str, Any]:
        """Execute BatchGetItem through the service resource.

        Unprocessed keys are returned in the response untouched.
        """
        table_name = next(iter(RequestItems), None) if len(RequestItems) == 1 else None
        logger.debug(f"BatchGetItem: {RequestItems}")
        try:
            return self.dynamodb.batch_get_item(RequestItems=RequestItems, **kwargs)
        except ClientError as e:
            logger.error(f"BatchGetItem failed: {e}")
            raise map_dynamodb_error(e, "BatchGetItem", table_name) from e
        except BotoCoreError as e:
            logger.error(f"BatchGetItem failed: {e}")
            raise map_botocore_error(e, "BatchGetItem", table_name) from e

    def query(self, TableName: str, **kwargs) -> Dict[str, Any]:
        """Execute one Query page.

        Pagination is left to the caller: pass the previous page's
        ``LastEvaluatedKey`` back as ``ExclusiveStartKey``.
        """
        logger.debug(f"Query on {TableName}: {kwargs}")
        try:
            return self.table(TableName).query(**kwargs)
        except ClientError as e:
            logger.error(f"Query on {TableName} failed: {e}")
            raise map_dynamodb_error(e, "Query", TableName) from e
        except BotoCoreError as e:
            logger.error(f"Query on {TableName} failed: {e}")
            raise map_botocore_error(e, "Query", TableName) from e

    def put_item(self, TableName: str, Item: Dict[str, Any], **kwargs) -> Dict[str, Any]:
        """Execute PutItem, replacing any item with the same primary key."""
        item = serialize_item(Item)
        try:
            response = self.table(TableName).put_item(Item=item, **kwargs)
        except ClientError as e:
            logger.error(f"PutItem on {TableName} failed: {e}")
            raise map_dynamodb_error(e, "PutItem", TableName) from e
        except BotoCoreError as e:
            logger.error(f"PutItem on {TableName} failed: {e}")
            raise map_botocore_error(e, "PutItem", TableName) from e
        logger.info(f"Put item in {TableName}: {item}")
        return response


def create_store(config: Optional[RecordConfig] = None) -> RecordStore:
    """Factory function to create a RecordStore.

    Args:
        config: Configuration; read from the environment when omitted

    Returns:
        Configured RecordStore instance
    """
    return RecordStore(config)

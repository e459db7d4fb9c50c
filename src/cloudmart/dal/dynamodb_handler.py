"""
Data Access Layer (DAL) for DynamoDB operations.

This module provides the generic table handler used by every repository,
with uniform error mapping, pagination helpers and observability.
"""

import functools
import time
from typing import Any, Callable, Dict, List, Optional, Sequence, Tuple

import boto3
from aws_lambda_powertools.metrics import MetricUnit
from boto3.dynamodb.types import TypeSerializer
from botocore.exceptions import BotoCoreError, ClientError

from cloudmart.handlers.utils.errors import (
    BaseServiceError,
    ErrorCategory,
    ErrorSeverity,
    ExternalServiceError,
)
from cloudmart.handlers.utils.observability import logger, metrics, tracer


class DALError(BaseServiceError):
    """Base exception for Data Access Layer errors."""

    def __init__(
        self,
        message: str,
        operation: str,
        table_name: str,
        error_code: str = "DAL_ERROR",
        severity: ErrorSeverity = ErrorSeverity.HIGH,
        retry_after: Optional[int] = None,
    ):
        super().__init__(
            message=message,
            error_code=error_code,
            severity=severity,
            category=ErrorCategory.INFRASTRUCTURE,
            retry_after=retry_after,
            user_message="A database error occurred. Please try again later.",
        )
        self.operation = operation
        self.table_name = table_name


class ConditionalCheckFailedError(DALError):
    """Raised when a conditional check fails in DynamoDB."""

    def __init__(self, table_name: str, operation: str):
        super().__init__(
            message="Conditional check failed",
            operation=operation,
            table_name=table_name,
            error_code="CONDITIONAL_CHECK_FAILED",
            severity=ErrorSeverity.MEDIUM,
        )


def handle_dynamodb_errors(operation: str) -> Callable:
    """Decorator translating boto3 failures of a handler method into DAL errors."""

    def decorator(func: Callable) -> Callable:
        @functools.wraps(func)
        def wrapper(self: 'DynamoDBHandler', *args, **kwargs):
            operation_start = time.time()
            try:
                result = func(self, *args, **kwargs)
            except ClientError as e:
                error_code = e.response['Error']['Code']
                error_message = e.response['Error']['Message']

                metrics.add_metric(name=f"DynamoDB{operation}Error", unit=MetricUnit.Count, value=1)
                logger.error(f"DynamoDB {operation} error", extra={
                    "error_code": error_code,
                    "error_message": error_message,
                    "table_name": self.table_name,
                })

                if error_code == 'ConditionalCheckFailedException':
                    raise ConditionalCheckFailedError(table_name=self.table_name, operation=operation) from e
                if error_code == 'ResourceNotFoundException':
                    raise DALError(
                        message=f"Table {self.table_name} not found",
                        operation=operation,
                        table_name=self.table_name,
                        error_code="TABLE_NOT_FOUND",
                    ) from e
                if error_code in ('ProvisionedThroughputExceededException', 'ThrottlingException'):
                    raise DALError(
                        message="DynamoDB throttling detected",
                        operation=operation,
                        table_name=self.table_name,
                        error_code="THROTTLING_ERROR",
                        retry_after=30,
                    ) from e
                raise DALError(
                    message=f"DynamoDB error: {error_message}",
                    operation=operation,
                    table_name=self.table_name,
                    error_code=f"DYNAMODB_{error_code}",
                ) from e
            except BotoCoreError as e:
                metrics.add_metric(name=f"DynamoDB{operation}Error", unit=MetricUnit.Count, value=1)
                logger.error(f"DynamoDB connection error during {operation}", extra={
                    "error": str(e),
                    "table_name": self.table_name,
                })
                raise ExternalServiceError(
                    message=f"Database connection error: {str(e)}",
                    service_name="DynamoDB",
                    error_code="EXTERNAL_SERVICE_ERROR",
                ) from e

            duration_ms = (time.time() - operation_start) * 1000
            logger.debug(f"DynamoDB {operation} completed", extra={
                "table_name": self.table_name,
                "duration_ms": round(duration_ms, 2),
            })
            return result

        return wrapper

    return decorator


class DynamoDBHandler:
    """DynamoDB table handler with consistent error handling and observability."""

    def __init__(self, table_name: str, region_name: Optional[str] = None, endpoint_url: Optional[str] = None):
        """
        Initialize DynamoDB handler.

        Args:
            table_name: Name of the DynamoDB table
            region_name: AWS region name
            endpoint_url: DynamoDB endpoint URL (for local testing)
        """
        self.table_name = table_name

        resource_kwargs: Dict[str, Any] = {}
        if region_name:
            resource_kwargs['region_name'] = region_name
        if endpoint_url:
            resource_kwargs['endpoint_url'] = endpoint_url

        self.dynamodb = boto3.resource('dynamodb', **resource_kwargs)
        self.table = self.dynamodb.Table(table_name)

        logger.debug("DynamoDB handler initialized", extra={"table_name": table_name})

    @tracer.capture_method
    @handle_dynamodb_errors("GetItem")
    def get_item(self, key: Dict[str, Any], consistent_read: bool = False) -> Optional[Dict[str, Any]]:
        """
        Get a single item from DynamoDB.

        Args:
            key: Primary key of the item to retrieve
            consistent_read: Whether to use strongly consistent read

        Returns:
            Item data or None if not found

        Raises:
            DALError: If DynamoDB operation fails
        """
        response = self.table.get_item(Key=key, ConsistentRead=consistent_read)
        return response.get('Item')

    @tracer.capture_method
    @handle_dynamodb_errors("PutItem")
    def put_item(self, item: Dict[str, Any], condition_expression: Optional[Any] = None) -> Dict[str, Any]:
        """
        Put an item into DynamoDB.

        Args:
            item: Item data to store
            condition_expression: Conditional expression for the put operation

        Returns:
            The stored item data

        Raises:
            DALError: If DynamoDB operation fails
            ConditionalCheckFailedError: If condition check fails
        """
        put_item_kwargs: Dict[str, Any] = {'Item': item}
        if condition_expression is not None:
            put_item_kwargs['ConditionExpression'] = condition_expression

        self.table.put_item(**put_item_kwargs)
        return item

    @tracer.capture_method
    @handle_dynamodb_errors("TransactWriteItems")
    def transact_put_items(self, puts: Sequence[Tuple[str, Dict[str, Any]]]) -> None:
        """
        Write items to one or more tables in a single all-or-nothing transaction.

        Args:
            puts: (table name, item) pairs, at most 100

        Raises:
            DALError: If the transaction is cancelled or fails
        """
        serializer = TypeSerializer()
        self.dynamodb.meta.client.transact_write_items(TransactItems=[
            {'Put': {'TableName': table_name, 'Item': {name: serializer.serialize(value) for name, value in item.items()}}}
            for table_name, item in puts
        ])

    @tracer.capture_method
    @handle_dynamodb_errors("DeleteItem")
    def delete_item(self, key: Dict[str, Any]) -> bool:
        response = self.table.delete_item(Key=key, ReturnValues='ALL_OLD')
        return 'Attributes' in response

    @tracer.capture_method
    @handle_dynamodb_errors("Query")
    def query_items(
        self,
        key_condition: Any,
        index_name: Optional[str] = None,
        filter_expression: Optional[Any] = None,
        limit: Optional[int] = None,
        scan_index_forward: bool = True,
        exclusive_start_key: Optional[Dict[str, Any]] = None,
    ) -> Dict[str, Any]:
        """
        Query one page of items.

        Returns:
            Dictionary with 'items' and optional 'last_evaluated_key'
        """
        query_kwargs: Dict[str, Any] = {
            'KeyConditionExpression': key_condition,
            'ScanIndexForward': scan_index_forward,
        }
        if index_name:
            query_kwargs['IndexName'] = index_name
        if filter_expression is not None:
            query_kwargs['FilterExpression'] = filter_expression
        if limit:
            query_kwargs['Limit'] = limit
        if exclusive_start_key:
            query_kwargs['ExclusiveStartKey'] = exclusive_start_key

        response = self.table.query(**query_kwargs)
        result = {'items': response.get('Items', [])}
        if 'LastEvaluatedKey' in response:
            result['last_evaluated_key'] = response['LastEvaluatedKey']
        return result

    @tracer.capture_method
    @handle_dynamodb_errors("Scan")
    def scan_items(
        self,
        filter_expression: Optional[Any] = None,
        limit: Optional[int] = None,
        exclusive_start_key: Optional[Dict[str, Any]] = None,
    ) -> Dict[str, Any]:
        """
        Scan one page of items.

        Returns:
            Dictionary with 'items' and optional 'last_evaluated_key'
        """
        scan_kwargs: Dict[str, Any] = {}
        if filter_expression is not None:
            scan_kwargs['FilterExpression'] = filter_expression
        if limit:
            scan_kwargs['Limit'] = limit
        if exclusive_start_key:
            scan_kwargs['ExclusiveStartKey'] = exclusive_start_key

        response = self.table.scan(**scan_kwargs)
        result = {'items': response.get('Items', [])}
        if 'LastEvaluatedKey' in response:
            result['last_evaluated_key'] = response['LastEvaluatedKey']
        return result

    def query_all(self, key_condition: Any, index_name: Optional[str] = None, filter_expression: Optional[Any] = None) -> List[Dict[str, Any]]:
        """Query every page and return all matching items."""
        items: List[Dict[str, Any]] = []
        start_key = None
        while True:
            page = self.query_items(
                key_condition=key_condition,
                index_name=index_name,
                filter_expression=filter_expression,
                exclusive_start_key=start_key,
            )
            items.extend(page['items'])
            start_key = page.get('last_evaluated_key')
            if not start_key:
                return items

    def scan_all(self, filter_expression: Optional[Any] = None) -> List[Dict[str, Any]]:
        """Scan every page and return all matching items."""
        items: List[Dict[str, Any]] = []
        start_key = None
        while True:
            page = self.scan_items(filter_expression=filter_expression, exclusive_start_key=start_key)
            items.extend(page['items'])
            start_key = page.get('last_evaluated_key')
            if not start_key:
                return items


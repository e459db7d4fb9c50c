"""
Order queue publisher.

New orders are announced on an SQS queue consumed by the payment processor.
The message body is a small JSON envelope; camelCase keys are part of the
queue contract shared with other consumers.
"""

import json
import time
from typing import Any, Dict, Optional

import boto3
from aws_lambda_powertools.metrics import MetricUnit
from botocore.exceptions import BotoCoreError, ClientError

from cloudmart.handlers.utils.errors import ExternalServiceError
from cloudmart.handlers.utils.observability import logger, metrics, tracer
from cloudmart.models.order import Order


def build_order_message(order: Order) -> Dict[str, Any]:
    return {
        'orderId': order.id,
        'orderNumber': order.order_number,
        'userId': order.user_id,
        'total': float(order.total),
        'status': order.status.value,
        'timestamp': int(time.time() * 1000),
    }


class OrderQueuePublisher:
    def __init__(self, queue_url: str, client: Optional[Any] = None):
        self.queue_url = queue_url
        self._client = client

    @property
    def client(self):
        if self._client is None:
            self._client = boto3.client('sqs')
        return self._client

    @tracer.capture_method
    def send_order_message(self, order: Order) -> Optional[str]:
        """
        Publish a new order for asynchronous payment processing.

        Never raises: an unset queue URL or a failed send is logged and the
        order stays PENDING.

        Returns:
            SQS message id, or None when nothing was sent
        """
        if not self.queue_url:
            logger.warning("Order queue URL is not configured, skipping order message", extra={"order_id": order.id})
            return None

        try:
            message_id = self.send_message(self.queue_url, json.dumps(build_order_message(order)))
        except ExternalServiceError:
            logger.exception("Failed to send order message", extra={"order_id": order.id})
            metrics.add_metric(name="OrderMessageFailed", unit=MetricUnit.Count, value=1)
            return None

        logger.info("Order message sent", extra={
            "order_id": order.id,
            "order_number": order.order_number,
            "message_id": message_id,
        })
        return message_id

    @tracer.capture_method
    def send_message(self, queue_url: str, message: str) -> str:
        """
        Send a raw message body.

        Raises:
            ExternalServiceError: If SQS rejects the message
        """
        try:
            response = self.client.send_message(QueueUrl=queue_url, MessageBody=message)
        except (ClientError, BotoCoreError) as e:
            raise ExternalServiceError(message=f"Failed to send SQS message: {str(e)}", service_name="SQS") from e

        metrics.add_metric(name="QueueMessageSent", unit=MetricUnit.Count, value=1)
        return response['MessageId']

"""
Customer notifications over Amazon SNS.
"""

from typing import Any, Optional

import boto3
from aws_lambda_powertools.metrics import MetricUnit
from botocore.exceptions import BotoCoreError, ClientError

from cloudmart.handlers.utils.errors import ExternalServiceError
from cloudmart.handlers.utils.observability import logger, metrics, tracer
from cloudmart.models.order import Order, OrderStatus

CONFIRMATION_TEMPLATE = (
    "Thank you for your order!\n\n"
    "Order Number: {order_number}\n"
    "Order Date: {order_date}\n"
    "Total Amount: ${total:.2f}\n"
    "Status: {status}\n\n"
    "Shipping Address: {shipping_address}\n\n"
    "We will notify you when your order is shipped."
)

STATUS_UPDATE_TEMPLATE = (
    "Your order {order_number} status has been updated from {old_status} to {new_status}.\n"
    "Total: ${total:.2f}"
)


class NotificationPublisher:
    """Publishes order notifications to a topic; order flows never fail because of it."""

    def __init__(self, topic_arn: str, client: Optional[Any] = None):
        self.topic_arn = topic_arn
        self._client = client

    @property
    def client(self):
        if self._client is None:
            self._client = boto3.client('sns')
        return self._client

    @tracer.capture_method
    def publish_order_confirmation(self, order: Order) -> Optional[str]:
        message = CONFIRMATION_TEMPLATE.format(
            order_number=order.order_number,
            order_date=order.created_at,
            total=order.total,
            status=order.status.value,
            shipping_address=order.shipping_address or '',
        )
        return self._publish_safely(order, f"Order Confirmation - {order.order_number}", message)

    @tracer.capture_method
    def publish_order_status_update(self, order: Order, old_status: OrderStatus) -> Optional[str]:
        message = STATUS_UPDATE_TEMPLATE.format(
            order_number=order.order_number,
            old_status=old_status.value,
            new_status=order.status.value,
            total=order.total,
        )
        return self._publish_safely(order, f"Order Status Update - {order.order_number}", message)

    def _publish_safely(self, order: Order, subject: str, message: str) -> Optional[str]:
        if not self.topic_arn:
            logger.warning("Order topic ARN is not configured, skipping notification", extra={
                "order_id": order.id,
                "subject": subject,
            })
            return None

        try:
            message_id = self.publish_message(self.topic_arn, subject, message)
        except ExternalServiceError:
            logger.exception("Failed to publish notification", extra={"order_id": order.id, "subject": subject})
            metrics.add_metric(name="NotificationFailed", unit=MetricUnit.Count, value=1)
            return None

        logger.info("Notification published", extra={
            "order_id": order.id,
            "subject": subject,
            "message_id": message_id,
        })
        return message_id

    @tracer.capture_method
    def publish_message(self, topic_arn: str, subject: str, message: str) -> str:
        """
        Publish a raw notification.

        Raises:
            ExternalServiceError: If SNS rejects the message
        """
        try:
            response = self.client.publish(TopicArn=topic_arn, Subject=subject, Message=message)
        except (ClientError, BotoCoreError) as e:
            raise ExternalServiceError(message=f"Failed to publish SNS message: {str(e)}", service_name="SNS") from e

        metrics.add_metric(name="NotificationPublished", unit=MetricUnit.Count, value=1)
        return response['MessageId']

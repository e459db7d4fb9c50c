"""
Asynchronous order processing.

Consumes order messages from the order queue, runs the (simulated) payment
and moves the order to CONFIRMED or CANCELLED.
"""

import json
import random
import time
from typing import Callable, Optional

from aws_lambda_powertools.metrics import MetricUnit

from cloudmart.handlers.utils.errors import ResourceNotFoundError
from cloudmart.handlers.utils.observability import logger, metrics, tracer
from cloudmart.logic.notification_service import NotificationPublisher
from cloudmart.logic.order_service import OrderService
from cloudmart.models.order import Order, OrderStatus

SNS_NOTIFICATION_TYPE = 'Notification'


class PaymentSimulator:
    """Stand-in for a payment provider: waits, then succeeds with a fixed probability."""

    def __init__(
        self,
        success_rate_percent: Callable[[], int],
        delay_seconds: float = 2.0,
        sleep: Optional[Callable[[float], None]] = None,
        rng: Optional[Callable[[], float]] = None,
    ):
        self.success_rate_percent = success_rate_percent
        self.delay_seconds = delay_seconds
        self._sleep = sleep or time.sleep
        self._rng = rng or random.random

    @tracer.capture_method
    def process_payment(self, order: Order) -> bool:
        if self.delay_seconds:
            self._sleep(self.delay_seconds)
        success = self._rng() * 100 < self.success_rate_percent()
        logger.info("Payment processed", extra={"order_id": order.id, "success": success})
        return success


class OrderProcessor:
    def __init__(self, orders: OrderService, notifications: NotificationPublisher, payments: PaymentSimulator):
        self.orders = orders
        self.notifications = notifications
        self.payments = payments

    @tracer.capture_method
    def process_message(self, body: str, message_id: Optional[str] = None) -> None:
        """
        Handle one queue message.

        Topic envelopes and messages without an order id are logged and
        dropped. An unknown order raises so the message is retried.

        Raises:
            ResourceNotFoundError: If the order does not exist
            json.JSONDecodeError: If the body is not JSON
        """
        payload = json.loads(body)

        if not isinstance(payload, dict):
            logger.warning("Order message is not a JSON object, skipping", extra={"message_id": message_id})
            return

        if payload.get('Type') == SNS_NOTIFICATION_TYPE:
            logger.info("Skipping topic notification delivered to the order queue", extra={
                "message_id": message_id,
                "subject": payload.get('Subject'),
                "preview": (payload.get('Message') or '')[:100],
            })
            return

        order_id = payload.get('orderId')
        if not order_id:
            logger.warning("Order message without orderId, skipping", extra={"message_id": message_id})
            return

        order = self.orders.find_order(str(order_id))
        if order is None:
            raise ResourceNotFoundError('Order', str(order_id))

        if order.status != OrderStatus.PENDING:
            logger.info("Order already processed, skipping", extra={"order_id": order.id, "status": order.status.value})
            return

        self._settle(order)

    def _settle(self, order: Order) -> None:
        logger.info("Processing payment", extra={"order_id": order.id, "order_number": order.order_number})

        if not self.payments.process_payment(order):
            metrics.add_metric(name="PaymentFailed", unit=MetricUnit.Count, value=1)
            self.orders.change_status(order, OrderStatus.CANCELLED)
            logger.warning("Payment failed, order cancelled", extra={"order_id": order.id})
            return

        metrics.add_metric(name="PaymentSucceeded", unit=MetricUnit.Count, value=1)
        self.orders.change_status(order, OrderStatus.CONFIRMED)
        self.notifications.publish_order_confirmation(order)
        logger.info("Payment succeeded, order confirmed", extra={"order_id": order.id})

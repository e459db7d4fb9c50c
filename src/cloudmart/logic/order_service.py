"""
Business Logic Layer for Order Management.

Checkout validates every line against the catalog, reserves stock, stores
the order as PENDING and hands it to the payment pipeline through the order
queue. Stock is decremented optimistically at checkout and restored on
cancellation.
"""

from typing import Dict, List, Optional

from aws_lambda_powertools.metrics import MetricUnit

from cloudmart.dal.order_repository import OrderRepository
from cloudmart.dal.product_repository import ProductRepository
from cloudmart.handlers.utils.errors import BadRequestError, BaseServiceError, ResourceNotFoundError
from cloudmart.handlers.utils.observability import logger, metrics, tracer
from cloudmart.logic.cart_service import CartService
from cloudmart.logic.notification_service import NotificationPublisher
from cloudmart.logic.queue_service import OrderQueuePublisher
from cloudmart.models.input import CreateOrderRequest
from cloudmart.models.order import Order, OrderItem, OrderStatus
from cloudmart.models.product import Product
from cloudmart.models.user import User
from cloudmart.security.auth import require_admin, require_owner_or_admin


def parse_order_status(value: str) -> OrderStatus:
    """
    Parse a status name, case-insensitively.

    Raises:
        BadRequestError: If the value is not a known status
    """
    try:
        return OrderStatus(value.strip().upper())
    except ValueError:
        allowed = ', '.join(status.value for status in OrderStatus)
        raise BadRequestError(f'Invalid order status: {value}. Allowed values: {allowed}')


def newest_first(orders: List[Order]) -> List[Order]:
    return sorted(orders, key=lambda order: order.created_at, reverse=True)


class OrderService:
    """Business logic service for order management."""

    def __init__(
        self,
        orders: OrderRepository,
        products: ProductRepository,
        carts: CartService,
        queue: OrderQueuePublisher,
        notifications: NotificationPublisher,
    ):
        """
        Initialize order service.

        Args:
            orders: Orders repository
            products: Products repository, used for stock reservation
            carts: Cart service, cleared after a successful checkout
            queue: Publisher for the payment pipeline
            notifications: Publisher for customer notifications
        """
        self.orders = orders
        self.products = products
        self.carts = carts
        self.queue = queue
        self.notifications = notifications

    def _require_order(self, order_id: str) -> Order:
        order = self.orders.get_by_id(order_id)
        if order is None:
            raise ResourceNotFoundError('Order', order_id)
        return order

    @tracer.capture_method
    def _reserve_stock(self, request: CreateOrderRequest) -> tuple[List[OrderItem], Dict[str, Product]]:
        """
        Validate every line and reserve stock in memory.

        Nothing is persisted here, so a rejected line leaves the catalog
        untouched. Repeated lines for one product draw from the same stock.
        """
        reserved: Dict[str, Product] = {}
        items: List[OrderItem] = []

        for line in request.items:
            product = reserved.get(line.product_id) or self.products.get_by_id(line.product_id)
            if product is None:
                raise ResourceNotFoundError('Product', line.product_id, message=f'Product not found: {line.product_id}')
            if not product.is_available and product.id not in reserved:
                raise BadRequestError(f'Product is not available: {product.name}')
            if product.stock < line.quantity:
                raise BadRequestError(f'Insufficient stock for product: {product.name}')

            product.decrease_stock(line.quantity)
            reserved[product.id] = product
            items.append(OrderItem.create(
                product_id=product.id,
                product_name=product.name,
                quantity=line.quantity,
                unit_price=product.price,
            ))

        return items, reserved

    @tracer.capture_method
    def create_order(self, request: CreateOrderRequest, current_user: User) -> Order:
        """
        Place an order for the current user.

        Raises:
            BadRequestError: If the order is empty, a product is unavailable or stock is insufficient
            ResourceNotFoundError: If a product does not exist
        """
        if not request.items:
            raise BadRequestError('Order must contain at least one item')

        items, reserved = self._reserve_stock(request)
        order = Order.create(
            user_id=current_user.id,
            items=items,
            shipping_address=request.shipping_address,
            payment_method=request.payment_method,
            notes=request.notes,
        )
        self.orders.save_with_products(order, reserved.values(), self.products.table_name)

        metrics.add_metric(name="OrderCreated", unit=MetricUnit.Count, value=1)
        metrics.add_metric(name="OrderItemsCount", unit=MetricUnit.Count, value=len(items))
        logger.info("Order created", extra={
            "order_id": order.id,
            "order_number": order.order_number,
            "user_id": current_user.id,
            "total": str(order.total),
        })

        self.queue.send_order_message(order)

        try:
            self.carts.clear_cart(current_user.id)
        except BaseServiceError as e:
            logger.warning("Failed to clear cart after checkout", extra={"user_id": current_user.id, "error": e.message})

        return order

    @tracer.capture_method
    def get_order(self, order_id: str, current_user: User) -> Order:
        order = self._require_order(order_id)
        require_owner_or_admin(current_user, order.user_id, message='You are not authorized to view this order')
        return order

    @tracer.capture_method
    def get_order_by_number(self, order_number: str, current_user: User) -> Order:
        order = self.orders.get_by_order_number(order_number)
        if order is None:
            raise ResourceNotFoundError('Order', order_number, message=f'Order not found with number: {order_number}')
        require_owner_or_admin(current_user, order.user_id, message='You are not authorized to view this order')
        return order

    @tracer.capture_method
    def get_user_orders(self, current_user: User) -> List[Order]:
        return newest_first(self.orders.find_by_user(current_user.id))

    @tracer.capture_method
    def get_all_orders(self, current_user: User) -> List[Order]:
        require_admin(current_user)
        return newest_first(self.orders.list_all())

    @tracer.capture_method
    def get_orders_by_status(self, status: str, current_user: User) -> List[Order]:
        require_admin(current_user)
        return newest_first(self.orders.find_by_status(parse_order_status(status)))

    @tracer.capture_method
    def update_order_status(self, order_id: str, status: str, current_user: User) -> Order:
        require_admin(current_user)
        return self.change_status(self._require_order(order_id), parse_order_status(status))

    @tracer.capture_method
    def change_status(self, order: Order, status: OrderStatus) -> Order:
        """
        Persist a status change and notify the customer.

        Moving back to PENDING is not announced.
        """
        old_status = order.change_status(status)
        self.orders.save(order)

        metrics.add_metric(name=f"Order{status.value.title()}", unit=MetricUnit.Count, value=1)
        logger.info("Order status updated", extra={
            "order_id": order.id,
            "old_status": old_status.value,
            "new_status": status.value,
        })

        if status != OrderStatus.PENDING:
            self.notifications.publish_order_status_update(order, old_status)
        return order

    @tracer.capture_method
    def cancel_order(self, order_id: str, current_user: User) -> Order:
        """
        Cancel a PENDING or CONFIRMED order and put its stock back.

        Raises:
            AccessDeniedError: If the user neither owns the order nor is an admin
            BadRequestError: If the order is past the cancellable states
        """
        order = self._require_order(order_id)
        require_owner_or_admin(current_user, order.user_id, message='You are not authorized to cancel this order')
        if not order.is_cancellable:
            raise BadRequestError(f'Order cannot be cancelled in current status: {order.status.value}')

        for item in order.items:
            product = self.products.get_by_id(item.product_id)
            if product is None:
                logger.warning("Cannot restore stock for missing product", extra={
                    "order_id": order.id,
                    "product_id": item.product_id,
                })
                continue
            product.increase_stock(item.quantity)
            self.products.save(product)

        order.change_status(OrderStatus.CANCELLED)
        self.orders.save(order)

        metrics.add_metric(name="OrderCancelled", unit=MetricUnit.Count, value=1)
        logger.info("Order cancelled", extra={"order_id": order.id, "user_id": current_user.id})
        return order

    @tracer.capture_method
    def find_order(self, order_id: str) -> Optional[Order]:
        """Look up an order without an access check, for internal consumers."""
        return self.orders.get_by_id(order_id)

"""
DynamoDB repository for orders.

Table layout: partition key ``id``; global secondary indexes
``order_number-index`` (``order_number``) and ``user_id-index``
(``user_id``, sort key ``created_at``). Order lines are embedded.
"""

from typing import Iterable, List, Optional

from boto3.dynamodb.conditions import Attr, Key

from cloudmart.dal.dynamodb_handler import DynamoDBHandler
from cloudmart.handlers.utils.observability import tracer
from cloudmart.models.order import Order, OrderStatus
from cloudmart.models.product import Product

ORDER_NUMBER_INDEX = 'order_number-index'
USER_ID_INDEX = 'user_id-index'


class OrderRepository:
    def __init__(self, table: DynamoDBHandler) -> None:
        self.table = table

    @tracer.capture_method
    def get_by_id(self, order_id: str) -> Optional[Order]:
        item = self.table.get_item({'id': order_id})
        return Order.from_item(item) if item else None

    @tracer.capture_method
    def get_by_order_number(self, order_number: str) -> Optional[Order]:
        items = self.table.query_all(Key('order_number').eq(order_number), index_name=ORDER_NUMBER_INDEX)
        return Order.from_item(items[0]) if items else None

    @tracer.capture_method
    def save(self, order: Order) -> Order:
        self.table.put_item(order.to_item())
        return order

    @tracer.capture_method
    def save_with_products(self, order: Order, products: Iterable[Product], products_table_name: str) -> Order:
        """Persist a new order and the stock changes of its products atomically."""
        puts = [(products_table_name, product.to_item()) for product in products]
        puts.append((self.table.table_name, order.to_item()))
        self.table.transact_put_items(puts)
        return order

    @tracer.capture_method
    def find_by_user(self, user_id: str) -> List[Order]:
        items = self.table.query_all(Key('user_id').eq(user_id), index_name=USER_ID_INDEX)
        return [Order.from_item(item) for item in items]

    @tracer.capture_method
    def find_by_status(self, status: OrderStatus) -> List[Order]:
        items = self.table.scan_all(Attr('status').eq(status.value))
        return [Order.from_item(item) for item in items]

    @tracer.capture_method
    def list_all(self) -> List[Order]:
        return [Order.from_item(item) for item in self.table.scan_all()]

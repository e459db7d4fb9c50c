"""
DynamoDB repository for shopping carts, one item per user keyed by ``user_id``.
"""

from typing import Optional

from cloudmart.dal.dynamodb_handler import DynamoDBHandler
from cloudmart.handlers.utils.observability import tracer
from cloudmart.models.cart import Cart


class CartRepository:
    def __init__(self, table: DynamoDBHandler) -> None:
        self.table = table

    @tracer.capture_method
    def get(self, user_id: str) -> Optional[Cart]:
        item = self.table.get_item({'user_id': user_id})
        return Cart.from_item(item) if item else None

    @tracer.capture_method
    def save(self, cart: Cart) -> Cart:
        cart.touch()
        self.table.put_item(cart.to_item())
        return cart

    @tracer.capture_method
    def delete(self, user_id: str) -> bool:
        return self.table.delete_item({'user_id': user_id})

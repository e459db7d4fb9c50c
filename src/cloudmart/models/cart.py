"""
Shopping cart domain model.

One cart document per user, holding a denormalized snapshot of each product
line so the cart can be rendered without reading the catalog.
"""

from decimal import Decimal
from typing import Annotated, List, Optional

from pydantic import Field

from cloudmart.models.base import DynamoModel, to_money, utc_now


class CartItem(DynamoModel):
    """A product line in a cart."""

    product_id: str
    product_name: str
    price: Decimal
    quantity: Annotated[int, Field(gt=0)]
    image_url: Optional[str] = None
    available_stock: int = 0
    subtotal: Decimal = Decimal('0')

    def refresh(self, price: Decimal, available_stock: int) -> None:
        """Update price and stock from the catalog and recompute the subtotal."""
        self.price = to_money(price)
        self.available_stock = available_stock
        self.subtotal = to_money(self.price * self.quantity)


class Cart(DynamoModel):
    """Core Cart domain model, keyed by user id."""

    user_id: str
    items: List[CartItem] = Field(default_factory=list)
    updated_at: Optional[str] = None

    @property
    def total(self) -> Decimal:
        return to_money(sum((item.subtotal for item in self.items), Decimal('0')))

    def find_item(self, product_id: str) -> Optional[CartItem]:
        return next((item for item in self.items if item.product_id == product_id), None)

    def touch(self) -> None:
        self.updated_at = utc_now()

    @classmethod
    def empty(cls, user_id: str) -> 'Cart':
        return cls(user_id=user_id, items=[], updated_at=utc_now())

"""
Order domain model for the business logic layer.

Order lines carry the unit price captured at checkout, so later catalog price
changes never alter an existing order.
"""

from datetime import datetime, timezone
from decimal import Decimal
from enum import Enum
from typing import Annotated, List, Optional
from uuid import uuid4

from pydantic import Field

from cloudmart.models.base import DynamoModel, to_money, utc_now


class OrderStatus(str, Enum):
    """Order status enumeration."""

    PENDING = 'PENDING'
    CONFIRMED = 'CONFIRMED'
    PROCESSING = 'PROCESSING'
    SHIPPED = 'SHIPPED'
    DELIVERED = 'DELIVERED'
    CANCELLED = 'CANCELLED'


CANCELLABLE_STATUSES = frozenset({OrderStatus.PENDING, OrderStatus.CONFIRMED})


def generate_order_number(now: Optional[datetime] = None) -> str:
    """Build a human readable order number such as ORD-2024-1A2B3C4D."""
    year = (now or datetime.now(timezone.utc)).year
    return f'ORD-{year}-{uuid4().hex[:8].upper()}'


class OrderItem(DynamoModel):
    """A purchased product line."""

    product_id: str
    product_name: str
    quantity: Annotated[int, Field(gt=0)]
    unit_price: Decimal
    subtotal: Decimal

    @classmethod
    def create(cls, product_id: str, product_name: str, quantity: int, unit_price: Decimal) -> 'OrderItem':
        price = to_money(unit_price)
        return cls(
            product_id=product_id,
            product_name=product_name,
            quantity=quantity,
            unit_price=price,
            subtotal=to_money(price * quantity),
        )


class Order(DynamoModel):
    """Core Order domain model."""

    id: Annotated[str, Field(description='Unique identifier for the order')]

    order_number: Annotated[str, Field(
        description='Human readable order number',
        examples=['ORD-2024-1A2B3C4D']
    )]

    user_id: Annotated[str, Field(description='Id of the customer who placed the order')]

    items: List[OrderItem] = Field(default_factory=list)

    subtotal: Decimal = Decimal('0.00')

    shipping_cost: Decimal = Decimal('0.00')

    discount: Decimal = Decimal('0.00')

    total: Decimal = Decimal('0.00')

    status: OrderStatus = OrderStatus.PENDING

    shipping_address: Optional[str] = None

    payment_method: Optional[str] = None

    notes: Optional[str] = None

    created_at: str

    updated_at: str

    @property
    def is_cancellable(self) -> bool:
        return self.status in CANCELLABLE_STATUSES

    def calculate_totals(self) -> None:
        """Recompute subtotal and total from the order lines."""
        self.subtotal = to_money(sum((item.subtotal for item in self.items), Decimal('0')))
        self.total = to_money(self.subtotal + self.shipping_cost - self.discount)

    def change_status(self, status: OrderStatus) -> OrderStatus:
        """Set a new status and return the previous one."""
        previous = self.status
        self.status = status
        self.updated_at = utc_now()
        return previous

    @classmethod
    def create(
        cls,
        user_id: str,
        items: List[OrderItem],
        shipping_address: Optional[str] = None,
        payment_method: Optional[str] = None,
        notes: Optional[str] = None,
    ) -> 'Order':
        """
        Create a new pending order with generated ID, number and totals.

        Args:
            user_id: Customer placing the order
            items: Priced order lines
            shipping_address: Delivery address
            payment_method: Payment method chosen at checkout
            notes: Free text notes

        Returns:
            New Order instance
        """
        now = utc_now()
        order = cls(
            id=str(uuid4()),
            order_number=generate_order_number(),
            user_id=user_id,
            items=items,
            status=OrderStatus.PENDING,
            shipping_address=shipping_address,
            payment_method=payment_method,
            notes=notes,
            created_at=now,
            updated_at=now,
        )
        order.calculate_totals()
        return order

"""
Product domain model.
"""

from decimal import Decimal
from enum import Enum
from typing import Annotated, Optional
from uuid import uuid4

from pydantic import Field

from cloudmart.models.base import DynamoModel, to_money, utc_now


class ProductStatus(str, Enum):
    """Catalog status of a product."""

    ACTIVE = 'ACTIVE'
    OUT_OF_STOCK = 'OUT_OF_STOCK'
    DISCONTINUED = 'DISCONTINUED'
    DELETED = 'DELETED'


class Product(DynamoModel):
    """Core Product domain model."""

    id: Annotated[str, Field(description='Unique identifier for the product')]

    name: Annotated[str, Field(min_length=1, max_length=200)]

    description: Optional[str] = None

    price: Annotated[Decimal, Field(gt=0, description='Unit price', examples=[Decimal('19.99')])]

    stock: Annotated[int, Field(ge=0, description='Units available for sale')]

    category: Annotated[str, Field(min_length=1, max_length=100)]

    brand: Optional[str] = None

    image_url: Optional[str] = None

    status: ProductStatus = ProductStatus.ACTIVE

    seller_id: Annotated[str, Field(description='User id of the seller owning the product')]

    seller_name: Optional[str] = None

    created_at: str

    updated_at: str

    @property
    def is_available(self) -> bool:
        return self.status == ProductStatus.ACTIVE

    def decrease_stock(self, quantity: int) -> None:
        """Take units out of stock, flipping to OUT_OF_STOCK when none remain."""
        self.stock -= quantity
        if self.stock == 0:
            self.status = ProductStatus.OUT_OF_STOCK
        self.updated_at = utc_now()

    def increase_stock(self, quantity: int) -> None:
        """Put units back into stock, reactivating a sold-out product."""
        self.stock += quantity
        if self.status == ProductStatus.OUT_OF_STOCK and self.stock > 0:
            self.status = ProductStatus.ACTIVE
        self.updated_at = utc_now()

    @classmethod
    def create(
        cls,
        name: str,
        price: Decimal,
        stock: int,
        category: str,
        seller_id: str,
        seller_name: Optional[str] = None,
        description: Optional[str] = None,
        brand: Optional[str] = None,
        image_url: Optional[str] = None,
    ) -> 'Product':
        now = utc_now()
        return cls(
            id=str(uuid4()),
            name=name,
            description=description,
            price=to_money(price),
            stock=stock,
            category=category,
            brand=brand,
            image_url=image_url,
            status=ProductStatus.ACTIVE,
            seller_id=seller_id,
            seller_name=seller_name,
            created_at=now,
            updated_at=now,
        )

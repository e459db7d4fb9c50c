"""
Input models for request validation using Pydantic.

This module defines the request bodies accepted by the CloudMart API.
"""

import re
from decimal import Decimal
from typing import Annotated, List

from pydantic import BaseModel, Field, field_validator

from cloudmart.models.user import EMAIL_PATTERN

# an order and its products are written in one DynamoDB transaction (100 items max)
MAX_ORDER_LINES = 99


def _validate_email(v: str) -> str:
    if not re.match(EMAIL_PATTERN, v):
        raise ValueError('Invalid email format')
    return v.lower()


class RegisterRequest(BaseModel):
    """Request model for registering a new customer."""

    first_name: Annotated[str, Field(min_length=1, max_length=50, examples=['Jane'])]

    last_name: Annotated[str, Field(min_length=1, max_length=50, examples=['Doe'])]

    email: Annotated[str, Field(description='Login email', examples=['jane.doe@example.com'])]

    password: Annotated[str, Field(min_length=6, max_length=72, description='Plain text password')]

    phone: Annotated[str | None, Field(default=None, max_length=20)] = None

    address: Annotated[str | None, Field(default=None, max_length=500)] = None

    @field_validator('email')
    @classmethod
    def validate_email_format(cls, v: str) -> str:
        """Validate email format."""
        return _validate_email(v)


class LoginRequest(BaseModel):
    """Request model for logging in."""

    email: Annotated[str, Field(min_length=1)]

    password: Annotated[str, Field(min_length=1)]

    @field_validator('email')
    @classmethod
    def lower_email(cls, v: str) -> str:
        return v.strip().lower()


class UpdateUserRequest(BaseModel):
    """Partial update of a user profile."""

    first_name: Annotated[str | None, Field(default=None, min_length=1, max_length=50)] = None
    last_name: Annotated[str | None, Field(default=None, min_length=1, max_length=50)] = None
    phone: Annotated[str | None, Field(default=None, max_length=20)] = None
    address: Annotated[str | None, Field(default=None, max_length=500)] = None


class ImageUpload(BaseModel):
    """Image file sent inline as base64."""

    filename: Annotated[str | None, Field(default=None, examples=['shoe.png'])] = None

    content_type: Annotated[str | None, Field(default=None, examples=['image/png'])] = None

    data: Annotated[str, Field(description='Base64 encoded file content')]


class CreateProductRequest(BaseModel):
    """Request model for creating a product."""

    name: Annotated[str, Field(min_length=1, max_length=200, examples=['Running Shoe'])]

    description: Annotated[str | None, Field(default=None, max_length=2000)] = None

    price: Annotated[Decimal, Field(gt=0, max_digits=12, decimal_places=2, examples=[Decimal('59.90')])]

    stock: Annotated[int, Field(ge=0, examples=[25])]

    category: Annotated[str, Field(min_length=1, max_length=100, examples=['Footwear'])]

    brand: Annotated[str | None, Field(default=None, max_length=100)] = None

    image: ImageUpload | None = None


class UpdateProductRequest(BaseModel):
    """Partial update of a product; omitted fields keep their value."""

    name: Annotated[str | None, Field(default=None, min_length=1, max_length=200)] = None
    description: Annotated[str | None, Field(default=None, max_length=2000)] = None
    price: Annotated[Decimal | None, Field(default=None, gt=0, max_digits=12, decimal_places=2)] = None
    stock: Annotated[int | None, Field(default=None, ge=0)] = None
    category: Annotated[str | None, Field(default=None, min_length=1, max_length=100)] = None
    brand: Annotated[str | None, Field(default=None, max_length=100)] = None
    image: ImageUpload | None = None


class AddToCartRequest(BaseModel):
    """Request model for adding a product to the cart."""

    product_id: Annotated[str, Field(min_length=1)]

    quantity: Annotated[int, Field(ge=1, examples=[2])]


class OrderItemRequest(BaseModel):
    """A product line in an order request."""

    product_id: Annotated[str, Field(min_length=1)]

    quantity: Annotated[int, Field(ge=1)]


class CreateOrderRequest(BaseModel):
    """Request model for placing an order."""

    items: List[OrderItemRequest] = Field(default_factory=list, max_length=MAX_ORDER_LINES)

    shipping_address: Annotated[str, Field(min_length=1, max_length=500)]

    payment_method: Annotated[str | None, Field(default=None, max_length=50, examples=['CREDIT_CARD'])] = None

    notes: Annotated[str | None, Field(default=None, max_length=500)] = None

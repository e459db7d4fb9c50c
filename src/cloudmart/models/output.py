"""
Output models for API responses using Pydantic.

Money is rendered as JSON numbers and passwords never leave the service.
"""

import math
from typing import Annotated, Any, Generic, List, Optional, Sequence, TypeVar

from pydantic import BaseModel, Field

from cloudmart.models.cart import Cart, CartItem
from cloudmart.models.order import Order, OrderItem
from cloudmart.models.product import Product
from cloudmart.models.user import User

T = TypeVar('T')


class ApiResponse(BaseModel):
    """Envelope for every successful response."""

    success: bool = True
    message: Optional[str] = None
    data: Any = None


class PageResponse(BaseModel, Generic[T]):
    """One page of a sorted result set."""

    content: List[T]
    page: Annotated[int, Field(ge=0)]
    size: Annotated[int, Field(ge=1)]
    total_elements: int
    total_pages: int
    first: bool
    last: bool

    @classmethod
    def from_items(cls, items: Sequence[T], page: int, size: int) -> 'PageResponse[T]':
        """Slice an already sorted sequence into the requested page."""
        total = len(items)
        total_pages = math.ceil(total / size) if total else 0
        start = page * size
        return cls(
            content=list(items[start:start + size]),
            page=page,
            size=size,
            total_elements=total,
            total_pages=total_pages,
            first=page == 0,
            last=page >= total_pages - 1,
        )


class UserResponse(BaseModel):
    """Public view of a user."""

    id: str
    first_name: str
    last_name: str
    email: str
    phone: Optional[str] = None
    address: Optional[str] = None
    role: str
    status: str
    created_at: str

    @classmethod
    def from_user(cls, user: User) -> 'UserResponse':
        return cls(
            id=user.id,
            first_name=user.first_name,
            last_name=user.last_name,
            email=user.email,
            phone=user.phone,
            address=user.address,
            role=user.role.value,
            status=user.status.value,
            created_at=user.created_at,
        )


class AuthResponse(BaseModel):
    """Access token issued by register and login."""

    token: str
    type: str = 'Bearer'
    user: UserResponse


class ProductResponse(BaseModel):
    id: str
    name: str
    description: Optional[str] = None
    price: float
    stock: int
    category: str
    brand: Optional[str] = None
    image_url: Optional[str] = None
    status: str
    seller_id: str
    seller_name: Optional[str] = None
    created_at: str
    updated_at: str

    @classmethod
    def from_product(cls, product: Product) -> 'ProductResponse':
        return cls(
            id=product.id,
            name=product.name,
            description=product.description,
            price=float(product.price),
            stock=product.stock,
            category=product.category,
            brand=product.brand,
            image_url=product.image_url,
            status=product.status.value,
            seller_id=product.seller_id,
            seller_name=product.seller_name,
            created_at=product.created_at,
            updated_at=product.updated_at,
        )


class CartItemResponse(BaseModel):
    product_id: str
    product_name: str
    price: float
    quantity: int
    image_url: Optional[str] = None
    available_stock: int
    subtotal: float

    @classmethod
    def from_item(cls, item: CartItem) -> 'CartItemResponse':
        return cls(
            product_id=item.product_id,
            product_name=item.product_name,
            price=float(item.price),
            quantity=item.quantity,
            image_url=item.image_url,
            available_stock=item.available_stock,
            subtotal=float(item.subtotal),
        )


class CartResponse(BaseModel):
    user_id: str
    items: List[CartItemResponse]
    total: float
    updated_at: Optional[str] = None

    @classmethod
    def from_cart(cls, cart: Cart) -> 'CartResponse':
        return cls(
            user_id=cart.user_id,
            items=[CartItemResponse.from_item(item) for item in cart.items],
            total=float(cart.total),
            updated_at=cart.updated_at,
        )


class OrderItemResponse(BaseModel):
    product_id: str
    product_name: str
    quantity: int
    unit_price: float
    subtotal: float

    @classmethod
    def from_item(cls, item: OrderItem) -> 'OrderItemResponse':
        return cls(
            product_id=item.product_id,
            product_name=item.product_name,
            quantity=item.quantity,
            unit_price=float(item.unit_price),
            subtotal=float(item.subtotal),
        )


class OrderResponse(BaseModel):
    """Public view of an order."""

    id: str
    order_number: str
    user_id: str
    items: List[OrderItemResponse]
    subtotal: float
    shipping_cost: float
    discount: float
    total: float
    status: str
    shipping_address: Optional[str] = None
    payment_method: Optional[str] = None
    notes: Optional[str] = None
    created_at: str
    updated_at: str

    @classmethod
    def from_order(cls, order: Order) -> 'OrderResponse':
        return cls(
            id=order.id,
            order_number=order.order_number,
            user_id=order.user_id,
            items=[OrderItemResponse.from_item(item) for item in order.items],
            subtotal=float(order.subtotal),
            shipping_cost=float(order.shipping_cost),
            discount=float(order.discount),
            total=float(order.total),
            status=order.status.value,
            shipping_address=order.shipping_address,
            payment_method=order.payment_method,
            notes=order.notes,
            created_at=order.created_at,
            updated_at=order.updated_at,
        )


class HealthResponse(BaseModel):
    status: str = 'UP'
    timestamp: str
    environment: str
    service: str = 'CloudMart Backend'
    version: str

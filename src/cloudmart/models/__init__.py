"""
CloudMart Models Package

Domain models persisted in DynamoDB, input models validating request bodies
and output models shaping API responses.
"""

from .cart import Cart, CartItem
from .order import Order, OrderItem, OrderStatus
from .product import Product, ProductStatus
from .user import User, UserRole, UserStatus

__all__ = [
    "Cart",
    "CartItem",
    "Order",
    "OrderItem",
    "OrderStatus",
    "Product",
    "ProductStatus",
    "User",
    "UserRole",
    "UserStatus",
]

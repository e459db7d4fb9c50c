"""
Data Access Layer for CloudMart.

Each repository wraps a DynamoDBHandler for one table and converts between
DynamoDB items and domain models.
"""

from cloudmart.dal.cart_repository import CartRepository
from cloudmart.dal.dynamodb_handler import ConditionalCheckFailedError, DALError, DynamoDBHandler
from cloudmart.dal.order_repository import OrderRepository
from cloudmart.dal.product_repository import ProductRepository
from cloudmart.dal.user_repository import UserRepository

__all__ = [
    'CartRepository',
    'ConditionalCheckFailedError',
    'DALError',
    'DynamoDBHandler',
    'OrderRepository',
    'ProductRepository',
    'UserRepository',
]

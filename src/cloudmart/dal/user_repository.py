"""
DynamoDB repository for users.

Table layout: partition key ``id`` and a global secondary index
``email-index`` on ``email`` for login lookups.
"""

from typing import List, Optional

from boto3.dynamodb.conditions import Attr, Key

from cloudmart.dal.dynamodb_handler import DynamoDBHandler
from cloudmart.handlers.utils.observability import tracer
from cloudmart.models.user import User

EMAIL_INDEX = 'email-index'


class UserRepository:
    def __init__(self, table: DynamoDBHandler) -> None:
        self.table = table

    @tracer.capture_method
    def get_by_id(self, user_id: str) -> Optional[User]:
        item = self.table.get_item({'id': user_id})
        return User.from_item(item) if item else None

    @tracer.capture_method
    def get_by_email(self, email: str) -> Optional[User]:
        items = self.table.query_all(Key('email').eq(email.lower()), index_name=EMAIL_INDEX)
        return User.from_item(items[0]) if items else None

    def exists_by_email(self, email: str) -> bool:
        return self.get_by_email(email) is not None

    @tracer.capture_method
    def create(self, user: User) -> User:
        """Insert a new user, failing if the id is already taken."""
        self.table.put_item(user.to_item(), condition_expression=Attr('id').not_exists())
        return user

    @tracer.capture_method
    def save(self, user: User) -> User:
        self.table.put_item(user.to_item())
        return user

    @tracer.capture_method
    def list_all(self) -> List[User]:
        return [User.from_item(item) for item in self.table.scan_all()]

"""
User domain model.

Users register as customers; sellers and admins are promoted out of band.
Deleting a user only flips its status so orders and products keep their owner.
"""

from enum import Enum
from typing import Annotated, Optional
from uuid import uuid4

from pydantic import Field, field_validator

from cloudmart.models.base import DynamoModel, utc_now

EMAIL_PATTERN = r'^[a-zA-Z0-9._%+-]+@[a-zA-Z0-9.-]+\.[a-zA-Z]{2,}$'


class UserRole(str, Enum):
    """Roles granting access to the API."""

    CUSTOMER = 'CUSTOMER'
    SELLER = 'SELLER'
    ADMIN = 'ADMIN'


class UserStatus(str, Enum):
    """Account status."""

    ACTIVE = 'ACTIVE'
    INACTIVE = 'INACTIVE'
    SUSPENDED = 'SUSPENDED'
    DELETED = 'DELETED'


class User(DynamoModel):
    """Core User domain model."""

    id: Annotated[str, Field(description='Unique identifier for the user')]

    first_name: Annotated[str, Field(min_length=1, max_length=50)]

    last_name: Annotated[str, Field(min_length=1, max_length=50)]

    email: Annotated[str, Field(
        pattern=EMAIL_PATTERN,
        description='Unique, lower-cased email address used to log in',
        examples=['jane.doe@example.com']
    )]

    password: Annotated[str, Field(description='bcrypt hash of the password')]

    phone: Optional[str] = None

    address: Optional[str] = None

    role: UserRole = UserRole.CUSTOMER

    status: UserStatus = UserStatus.ACTIVE

    created_at: Annotated[str, Field(description='ISO timestamp when the user registered')]

    updated_at: Annotated[str, Field(description='ISO timestamp of the last change')]

    @field_validator('email')
    @classmethod
    def normalize_email(cls, v: str) -> str:
        return v.lower()

    @property
    def full_name(self) -> str:
        return f'{self.first_name} {self.last_name}'

    @property
    def is_admin(self) -> bool:
        return self.role == UserRole.ADMIN

    @property
    def is_active(self) -> bool:
        return self.status == UserStatus.ACTIVE

    @classmethod
    def create(
        cls,
        first_name: str,
        last_name: str,
        email: str,
        password_hash: str,
        phone: Optional[str] = None,
        address: Optional[str] = None,
        role: UserRole = UserRole.CUSTOMER,
    ) -> 'User':
        """
        Create a new active user with generated ID and timestamps.

        Args:
            first_name: Given name
            last_name: Family name
            email: Login email, stored lower-cased
            password_hash: Already hashed password
            phone: Optional phone number
            address: Optional postal address
            role: Role granted to the account

        Returns:
            New User instance
        """
        now = utc_now()
        return cls(
            id=str(uuid4()),
            first_name=first_name,
            last_name=last_name,
            email=email,
            password=password_hash,
            phone=phone,
            address=address,
            role=role,
            status=UserStatus.ACTIVE,
            created_at=now,
            updated_at=now,
        )

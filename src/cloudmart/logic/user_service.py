"""
Business logic for user administration and profiles.
"""

from typing import List

from aws_lambda_powertools.metrics import MetricUnit

from cloudmart.dal.user_repository import UserRepository
from cloudmart.handlers.utils.errors import BadRequestError, ResourceNotFoundError
from cloudmart.handlers.utils.observability import logger, metrics, tracer
from cloudmart.models.base import utc_now
from cloudmart.models.input import UpdateUserRequest
from cloudmart.models.user import User, UserStatus
from cloudmart.security.auth import require_admin, require_owner_or_admin

USER_SORT_FIELDS = ('created_at', 'updated_at', 'email', 'first_name', 'last_name')


class UserService:
    def __init__(self, users: UserRepository):
        self.users = users

    def _require_user(self, user_id: str) -> User:
        user = self.users.get_by_id(user_id)
        if user is None:
            raise ResourceNotFoundError('User', user_id)
        return user

    @tracer.capture_method
    def get_user(self, user_id: str, current_user: User) -> User:
        require_admin(current_user)
        return self._require_user(user_id)

    @tracer.capture_method
    def list_users(self, current_user: User, sort_by: str = 'created_at') -> List[User]:
        """Return every user sorted by ``sort_by``, newest or highest first."""
        require_admin(current_user)
        if sort_by not in USER_SORT_FIELDS:
            raise BadRequestError(f'Invalid sort field: {sort_by}')
        return sorted(self.users.list_all(), key=lambda user: getattr(user, sort_by) or '', reverse=True)

    @tracer.capture_method
    def update_user(self, user_id: str, request: UpdateUserRequest, current_user: User) -> User:
        require_owner_or_admin(current_user, user_id, message='You can only update your own profile')
        user = self._require_user(user_id)

        changes = request.model_dump(exclude_unset=True, exclude_none=True)
        for field, value in changes.items():
            setattr(user, field, value)
        user.updated_at = utc_now()
        self.users.save(user)

        logger.info("User updated", extra={"user_id": user_id, "fields": sorted(changes)})
        return user

    @tracer.capture_method
    def delete_user(self, user_id: str, current_user: User) -> None:
        """Soft delete: the account is kept with status DELETED and can no longer log in."""
        require_admin(current_user)
        user = self._require_user(user_id)
        user.status = UserStatus.DELETED
        user.updated_at = utc_now()
        self.users.save(user)

        metrics.add_metric(name="UserDeleted", unit=MetricUnit.Count, value=1)
        logger.info("User deleted", extra={"user_id": user_id})

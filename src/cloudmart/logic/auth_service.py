"""
Business logic for registration, login and request authentication.
"""

from typing import Mapping, Optional

from aws_lambda_powertools.metrics import MetricUnit

from cloudmart.dal.user_repository import UserRepository
from cloudmart.handlers.utils.errors import AuthenticationError, BadRequestError
from cloudmart.handlers.utils.observability import logger, metrics, tracer
from cloudmart.models.input import LoginRequest, RegisterRequest
from cloudmart.models.output import AuthResponse, UserResponse
from cloudmart.models.user import User
from cloudmart.security.auth import TokenService, extract_bearer_token, hash_password, verify_password

INVALID_CREDENTIALS = 'Invalid email or password'


class AuthService:
    def __init__(self, users: UserRepository, tokens: TokenService):
        self.users = users
        self.tokens = tokens

    def _auth_response(self, user: User) -> AuthResponse:
        return AuthResponse(token=self.tokens.issue_token(user), user=UserResponse.from_user(user))

    @tracer.capture_method
    def register(self, request: RegisterRequest) -> AuthResponse:
        """
        Register a new customer and log them in.

        Raises:
            BadRequestError: If the email is already registered
        """
        if self.users.exists_by_email(request.email):
            raise BadRequestError('Email already exists')

        user = User.create(
            first_name=request.first_name,
            last_name=request.last_name,
            email=request.email,
            password_hash=hash_password(request.password),
            phone=request.phone,
            address=request.address,
        )
        self.users.create(user)

        metrics.add_metric(name="UserRegistered", unit=MetricUnit.Count, value=1)
        logger.info("User registered", extra={"user_id": user.id})
        return self._auth_response(user)

    @tracer.capture_method
    def login(self, request: LoginRequest) -> AuthResponse:
        """
        Authenticate with email and password.

        Unknown emails, wrong passwords and inactive accounts all fail with the
        same message.

        Raises:
            AuthenticationError: If the credentials are not valid
        """
        user = self.users.get_by_email(request.email)
        if user is None or not verify_password(request.password, user.password) or not user.is_active:
            metrics.add_metric(name="LoginFailed", unit=MetricUnit.Count, value=1)
            raise AuthenticationError(INVALID_CREDENTIALS)

        metrics.add_metric(name="LoginSucceeded", unit=MetricUnit.Count, value=1)
        logger.info("User logged in", extra={"user_id": user.id})
        return self._auth_response(user)

    @tracer.capture_method
    def authenticate(self, headers: Optional[Mapping[str, str]]) -> User:
        """Resolve the active user behind the request's bearer token."""
        claims = self.tokens.decode_token(extract_bearer_token(headers))
        user = self.users.get_by_id(claims.user_id)
        if user is None or not user.is_active:
            raise AuthenticationError('User account is not active')
        logger.append_keys(user_id=user.id)
        return user

"""
Authentication primitives: password hashing, bearer tokens and role checks.

Passwords are hashed with bcrypt. Access tokens are HS256 JWTs signed with a
key read from the environment or from AWS Secrets Manager.
"""

from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from typing import Mapping, Optional

import bcrypt
import jwt
from aws_lambda_powertools.metrics import MetricUnit
from jwt.exceptions import ExpiredSignatureError, InvalidTokenError

from cloudmart.handlers.utils.errors import AccessDeniedError, AuthenticationError
from cloudmart.handlers.utils.observability import logger, metrics, tracer
from cloudmart.models.user import User, UserRole

BEARER_PREFIX = 'Bearer '


def hash_password(password: str) -> str:
    return bcrypt.hashpw(password.encode('utf-8'), bcrypt.gensalt()).decode('utf-8')


def verify_password(password: str, password_hash: str) -> bool:
    """Check a plain password against a stored bcrypt hash."""
    try:
        return bcrypt.checkpw(password.encode('utf-8'), password_hash.encode('utf-8'))
    except ValueError:
        logger.warning("Stored password hash is malformed")
        return False


@dataclass
class TokenClaims:
    """Claims carried by a CloudMart access token."""

    user_id: str
    email: str
    role: str
    issued_at: datetime
    expires_at: datetime


class TokenService:
    """Issues and verifies signed access tokens."""

    def __init__(self, secret_key: str, expiration_seconds: int = 86400, algorithm: str = 'HS256'):
        if not secret_key:
            raise ValueError('Token signing key is not configured')
        self.secret_key = secret_key
        self.expiration_seconds = expiration_seconds
        self.algorithm = algorithm

    @tracer.capture_method
    def issue_token(self, user: User) -> str:
        now = datetime.now(timezone.utc)
        payload = {
            'sub': user.id,
            'email': user.email,
            'role': user.role.value,
            'iat': now,
            'exp': now + timedelta(seconds=self.expiration_seconds),
        }
        return jwt.encode(payload, self.secret_key, algorithm=self.algorithm)

    @tracer.capture_method
    def decode_token(self, token: str) -> TokenClaims:
        """
        Verify a token and return its claims.

        Raises:
            AuthenticationError: If the token is expired, tampered or malformed
        """
        try:
            payload = jwt.decode(
                token,
                self.secret_key,
                algorithms=[self.algorithm],
                options={'require': ['sub', 'exp', 'iat']},
            )
        except ExpiredSignatureError:
            metrics.add_metric(name="AuthenticationTokenExpired", unit=MetricUnit.Count, value=1)
            raise AuthenticationError('Token has expired')
        except InvalidTokenError as e:
            metrics.add_metric(name="AuthenticationInvalidToken", unit=MetricUnit.Count, value=1)
            logger.warning("Invalid access token", extra={"error": str(e)})
            raise AuthenticationError('Invalid token')

        return TokenClaims(
            user_id=payload['sub'],
            email=payload.get('email', ''),
            role=payload.get('role', ''),
            issued_at=datetime.fromtimestamp(payload['iat'], tz=timezone.utc),
            expires_at=datetime.fromtimestamp(payload['exp'], tz=timezone.utc),
        )


def extract_bearer_token(headers: Optional[Mapping[str, str]]) -> str:
    """
    Pull the token out of an ``Authorization: Bearer <token>`` header.

    Header names are matched case-insensitively.

    Raises:
        AuthenticationError: If the header is missing or not a bearer token
    """
    authorization = next(
        (value for name, value in (headers or {}).items() if name.lower() == 'authorization'),
        None,
    )
    if not authorization or not authorization.startswith(BEARER_PREFIX):
        raise AuthenticationError('Authentication required')
    token = authorization[len(BEARER_PREFIX):].strip()
    if not token:
        raise AuthenticationError('Authentication required')
    return token


def require_role(user: User, *roles: UserRole, message: str = 'Access denied') -> None:
    """Raise AccessDeniedError unless the user holds one of the roles."""
    if user.role not in roles:
        raise AccessDeniedError(message)


def require_admin(user: User, message: str = 'Admin access required') -> None:
    require_role(user, UserRole.ADMIN, message=message)


def require_owner_or_admin(user: User, owner_id: str, message: str = 'Access denied') -> None:
    """Allow the owner of a resource or any admin."""
    if user.id != owner_id and not user.is_admin:
        raise AccessDeniedError(message)

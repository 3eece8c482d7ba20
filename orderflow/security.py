"""
Authentication and authorization utilities shared by every service.

Validates JWT tokens issued by the auth service and carries the caller's
credential through the request as an explicit ``RequestContext``.
"""
import logging
from dataclasses import dataclass
from datetime import datetime, timedelta
from typing import Optional

from fastapi import Depends
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from jose import JWTError, jwt
from pydantic import BaseModel

from . import config
from .errors import ForbiddenError, UnauthorizedError

logger = logging.getLogger(__name__)

TOKEN_TYPE_USER = "user"
TOKEN_TYPE_SERVICE = "service"

ROLE_INVENTORY_MANAGER = "inventory_manager"
ROLE_FINANCE_MANAGER = "finance_manager"
ROLES = (ROLE_INVENTORY_MANAGER, ROLE_FINANCE_MANAGER)

# auto_error=False so a missing token is reported through UnauthorizedError
security = HTTPBearer(auto_error=False)


class TokenClaims(BaseModel):
    """Data extracted from a JWT token."""
    sub: str
    email: Optional[str] = None
    role: Optional[str] = None
    type: str = TOKEN_TYPE_USER

    @property
    def is_service(self) -> bool:
        return self.type == TOKEN_TYPE_SERVICE


@dataclass(frozen=True)
class RequestContext:
    """
    Request-scoped caller credential.

    Attributes:
        token: Raw bearer token presented by the caller, if any
        claims: Decoded claims of that token, if any
    """
    token: Optional[str] = None
    claims: Optional[TokenClaims] = None

    @property
    def is_authenticated(self) -> bool:
        return self.token is not None


def create_token(subject: str, token_type: str, expires_delta: timedelta,
                 email: Optional[str] = None, role: Optional[str] = None) -> str:
    """
    Create a signed JWT.

    Args:
        subject: User ID or service name
        token_type: "user" or "service"
        expires_delta: Lifetime of the token
        email: Email claim for user tokens
        role: Role claim for user tokens

    Returns:
        Encoded JWT token string
    """
    to_encode = {
        "sub": subject,
        "type": token_type,
        "exp": datetime.utcnow() + expires_delta,
        "iat": datetime.utcnow(),
    }
    if email is not None:
        to_encode["email"] = email
    if role is not None:
        to_encode["role"] = role
    return jwt.encode(to_encode, config.SECRET_KEY, algorithm=config.ALGORITHM)


def decode_token(token: str) -> TokenClaims:
    """
    Validate a JWT and return its claims.

    Raises:
        UnauthorizedError: if the token is malformed, expired or badly signed
    """
    try:
        payload = jwt.decode(token, config.SECRET_KEY, algorithms=[config.ALGORITHM])
        return TokenClaims(**payload)
    except (JWTError, ValueError) as e:
        logger.error(f"JWT validation error: {e}")
        raise UnauthorizedError("invalid or expired token")


def get_request_context(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(security)
) -> RequestContext:
    """
    FastAPI dependency building the request context from an optional bearer token.

    A missing token yields an empty context; a present but invalid token is rejected.
    """
    if credentials is None:
        return RequestContext()
    token = credentials.credentials
    return RequestContext(token=token, claims=decode_token(token))


def require_context(context: RequestContext = Depends(get_request_context)) -> RequestContext:
    """FastAPI dependency requiring a valid bearer token."""
    if not context.is_authenticated:
        raise UnauthorizedError()
    return context


def require_roles(*allowed_roles: str):
    """
    Build a dependency that requires one of ``allowed_roles``.

    Service tokens bypass role checks for inter-service communication.
    """
    def dependency(context: RequestContext = Depends(require_context)) -> RequestContext:
        if context.claims.is_service:
            return context
        if context.claims.role not in allowed_roles:
            raise ForbiddenError("insufficient role")
        return context
    return dependency

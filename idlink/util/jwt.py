"""JWT token utilities."""

from datetime import datetime, timedelta, timezone
from typing import Optional

import jwt
from pydantic import BaseModel

from idlink.config import AuthSettings


class TokenPayload(BaseModel):
    """JWT token payload.

    Mirrors the session principal so routes can authorize without a store
    read. Group fields go stale after a merge until the session is refreshed.
    """

    user_id: str
    email: Optional[str] = None
    phone_number: Optional[str] = None
    name: Optional[str] = None
    image: Optional[str] = None
    register_source: str
    group_id: Optional[str] = None
    is_master: bool = False
    master_id: Optional[str] = None
    linked_emails: list[str] = []
    linked_phones: list[str] = []
    linked_providers: list[str] = []
    has_linked_accounts: bool = False
    two_factor_enabled: bool = False
    exp: datetime


class JWTError(Exception):
    """JWT-related error."""

    pass


def create_token(claims: dict, settings: AuthSettings) -> str:
    """Create a JWT token carrying the given claims.

    Args:
        claims: Principal claims (everything in TokenPayload except exp)
        settings: Authentication settings

    Returns:
        Encoded JWT token
    """
    expiry = datetime.now(timezone.utc) + timedelta(days=settings.jwt_expiry_days)

    payload = {**claims, "exp": expiry}

    token = jwt.encode(payload, settings.jwt_secret, algorithm=settings.jwt_algorithm)

    return token


def verify_token(token: str, settings: AuthSettings) -> TokenPayload:
    """Verify and decode a JWT token.

    Args:
        token: JWT token to verify
        settings: Authentication settings

    Returns:
        Token payload if valid

    Raises:
        JWTError: If token is invalid or expired
    """
    try:
        payload = jwt.decode(
            token, settings.jwt_secret, algorithms=[settings.jwt_algorithm]
        )
        return TokenPayload(**payload)
    except jwt.ExpiredSignatureError:
        raise JWTError("Token has expired")
    except jwt.InvalidTokenError:
        raise JWTError("Invalid token")

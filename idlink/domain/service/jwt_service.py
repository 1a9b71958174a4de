"""JWT token domain service."""

import logfire

from idlink.config import AuthSettings
from idlink.domain.model import Principal
from idlink.util.jwt import TokenPayload, create_token, verify_token

from .base import Service


class JWTService(Service):
    """Domain service for JWT token operations."""

    def __init__(self, auth_settings: AuthSettings) -> None:
        """Initialize JWT service.

        Args:
            auth_settings: Authentication settings
        """
        self.auth_settings = auth_settings

    def create_token(self, principal: Principal) -> str:
        """Create a session token carrying the principal.

        Args:
            principal: Resolved principal

        Returns:
            JWT token string
        """
        with logfire.span("jwt_service.create_token", user_id=str(principal.id)):
            claims = principal.model_dump(mode="json", exclude={"id"})
            claims["user_id"] = str(principal.id)
            token = create_token(claims, self.auth_settings)
            logfire.info(
                "JWT token created",
                user_id=str(principal.id),
                group_id=claims["group_id"],
            )
            return token

    def verify_token(self, token: str) -> TokenPayload:
        """Verify JWT token and extract payload.

        Args:
            token: JWT token string

        Returns:
            Token payload

        Raises:
            JWTError: If token is invalid or expired
        """
        with logfire.span("jwt_service.verify_token"):
            try:
                payload = verify_token(token, self.auth_settings)
                logfire.info("JWT token verified", user_id=payload.user_id)
                return payload
            except Exception as e:
                logfire.error("JWT token verification failed", error=str(e))
                raise

    def get_user_id_from_token(self, token: str | None) -> str | None:
        """Extract user ID from JWT token without raising exceptions.

        Args:
            token: JWT token string (optional)

        Returns:
            User ID if token is valid, None if token is missing or invalid
        """
        if not token:
            return None

        try:
            payload = self.verify_token(token)
            return payload.user_id
        except Exception as e:
            # Invalid or expired token, treat as unauthenticated
            logfire.debug(
                "JWT verification failed, treating as unauthenticated", error=str(e)
            )
            return None

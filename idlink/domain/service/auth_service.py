"""OAuth authentication domain service."""

import asyncio

import logfire

from idlink.config import AuthSettings
from idlink.domain.error import (
    ExternalServiceError,
    ExternalServiceRejectedError,
    InfrastructureError,
    InvalidCredentialError,
)
from idlink.domain.value.types import AuthProvider, OAuthProviderInfo

from .base import Service


class OAuthClient:
    """Generic OAuth client interface for all providers."""

    async def initiate_authorization(self, state: str) -> str:
        """Initiate OAuth authorization flow.

        Args:
            state: State parameter for CSRF protection

        Returns:
            Authorization URL to redirect user to
        """
        raise NotImplementedError

    async def complete_authorization(self, code: str, state: str) -> OAuthProviderInfo:
        """Complete OAuth authorization flow.

        Args:
            code: Authorization code from OAuth callback
            state: State parameter for verification

        Returns:
            Provider user information
        """
        raise NotImplementedError


class AuthService(Service):
    """Domain service for multi-provider OAuth operations.

    Coordinates the authorization-code handshake across the enabled OAuth
    providers (Google, GitHub).
    """

    def __init__(
        self,
        oauth_clients: dict[AuthProvider, OAuthClient],
        auth_settings: AuthSettings,
    ) -> None:
        """Initialize auth service.

        Args:
            oauth_clients: Map of provider to OAuth client implementation
            auth_settings: Authentication settings
        """
        self.oauth_clients = oauth_clients
        self.auth_settings = auth_settings

    def _client(self, provider: AuthProvider) -> OAuthClient:
        client = self.oauth_clients.get(provider)
        if not client or provider not in self.auth_settings.enabled_providers:
            raise ValueError(f"Unsupported provider: {provider}")
        return client

    async def initiate_login(self, provider: AuthProvider, state: str) -> str:
        """Initiate OAuth login flow for any provider.

        Args:
            provider: OAuth provider to use
            state: State parameter for CSRF protection

        Returns:
            Authorization URL to redirect user to

        Raises:
            ValueError: If provider not supported
        """
        return await self._client(provider).initiate_authorization(state)

    async def complete_login(
        self, provider: AuthProvider, code: str, state: str
    ) -> OAuthProviderInfo:
        """Complete OAuth login flow for any provider.

        A rejected or timed-out exchange is an invalid credential. A provider
        that cannot be reached is an infrastructure failure.

        Args:
            provider: OAuth provider used
            code: Authorization code from OAuth callback
            state: State parameter for verification

        Returns:
            User information from provider

        Raises:
            ValueError: If provider not supported
            InvalidCredentialError: If the provider rejects the code or times out
            InfrastructureError: If the provider is unreachable or failing
        """
        client = self._client(provider)
        with logfire.span("auth_service.complete_login", provider=provider.value):
            try:
                return await asyncio.wait_for(
                    client.complete_authorization(code, state),
                    timeout=self.auth_settings.external_call_timeout_seconds,
                )
            except (asyncio.TimeoutError, ExternalServiceRejectedError) as e:
                logfire.warn(
                    "OAuth code exchange rejected", provider=provider.value, error=str(e)
                )
                raise InvalidCredentialError(f"{provider.value} exchange failed") from e
            except ExternalServiceError as e:
                logfire.error(
                    "OAuth provider unavailable", provider=provider.value, error=str(e)
                )
                raise InfrastructureError(f"{provider.value} unavailable") from e

"""Tests for AuthService."""

import asyncio

import pytest

from idlink.adapter.github import MockGitHubOAuthClient
from idlink.adapter.google import GoogleCodeRejectedError, GoogleOAuthError
from idlink.domain.error import InfrastructureError, InvalidCredentialError
from idlink.domain.service import AuthService, OAuthClient
from idlink.domain.value import AuthProvider


class StubGoogleClient(OAuthClient):
    """Fails the code exchange with the given error, or hangs if none."""

    def __init__(self, error: Exception | None = None) -> None:
        self.error = error

    async def initiate_authorization(self, state: str) -> str:
        return f"https://accounts.google.com/o/oauth2/v2/auth?state={state}"

    async def complete_authorization(self, code: str, state: str):
        if self.error is not None:
            raise self.error
        await asyncio.sleep(10)


def build_auth_service(google_client: OAuthClient, auth_settings) -> AuthService:
    return AuthService(
        {AuthProvider.GOOGLE: google_client, AuthProvider.GITHUB: MockGitHubOAuthClient()},
        auth_settings,
    )


class TestCompleteLogin:
    """Mapping of provider failures onto sign-in errors."""

    @pytest.mark.asyncio
    async def test_rejected_code_is_invalid_credential(self, auth_settings):
        service = build_auth_service(
            StubGoogleClient(GoogleCodeRejectedError("Token exchange failed: 400")),
            auth_settings,
        )

        with pytest.raises(InvalidCredentialError):
            await service.complete_login(AuthProvider.GOOGLE, "code", "state")

    @pytest.mark.asyncio
    async def test_unreachable_provider_is_infrastructure_error(self, auth_settings):
        service = build_auth_service(
            StubGoogleClient(
                GoogleOAuthError("HTTP error during token exchange: connection refused")
            ),
            auth_settings,
        )

        with pytest.raises(InfrastructureError):
            await service.complete_login(AuthProvider.GOOGLE, "code", "state")

    @pytest.mark.asyncio
    async def test_timeout_fails_closed(self, auth_settings):
        service = build_auth_service(StubGoogleClient(), auth_settings)

        with pytest.raises(InvalidCredentialError):
            await service.complete_login(AuthProvider.GOOGLE, "code", "state")

    @pytest.mark.asyncio
    async def test_returns_provider_profile(self, auth_settings):
        service = build_auth_service(StubGoogleClient(), auth_settings)

        info = await service.complete_login(AuthProvider.GITHUB, "code", "state")

        assert info.provider == AuthProvider.GITHUB

    @pytest.mark.asyncio
    async def test_disabled_provider_is_rejected(self, auth_settings):
        settings = auth_settings.model_copy(
            update={"enabled_providers": [AuthProvider.GITHUB]}
        )
        service = build_auth_service(StubGoogleClient(), settings)

        with pytest.raises(ValueError):
            await service.initiate_login(AuthProvider.GOOGLE, "state")

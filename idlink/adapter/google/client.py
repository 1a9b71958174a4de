"""Google OAuth 2.0 client implementation.

Implements the authorization code flow against Google's OpenID Connect
endpoints.
"""

from urllib.parse import urlencode

import httpx
import logfire

from idlink.adapter.error import ProviderError, ProviderRejectedError
from idlink.domain.service.auth_service import OAuthClient
from idlink.domain.value.types import AuthProvider, OAuthProviderInfo


class GoogleOAuthError(ProviderError):
    """Google unreachable or failing."""

    pass


class GoogleCodeRejectedError(ProviderRejectedError):
    """Google refused the authorization code or access token."""

    pass


class GoogleOAuthClient(OAuthClient):
    """Base class for Google OAuth clients.

    Provides type distinction for dependency injection.
    """

    pass


class RealGoogleOAuthClient(GoogleOAuthClient):
    """Google OAuth 2.0 client."""

    def __init__(
        self,
        client_id: str,
        client_secret: str,
        redirect_uri: str,
        timeout: float = 10.0,
    ) -> None:
        """Initialize Google OAuth client.

        Args:
            client_id: Google OAuth client ID
            client_secret: Google OAuth client secret
            redirect_uri: Callback URL registered with Google
            timeout: Per-request HTTP timeout in seconds
        """
        self.client_id = client_id
        self.client_secret = client_secret
        self.redirect_uri = redirect_uri
        self.timeout = timeout

        # OAuth endpoints
        self.authorize_url = "https://accounts.google.com/o/oauth2/v2/auth"
        self.token_url = "https://oauth2.googleapis.com/token"
        self.user_info_url = "https://openidconnect.googleapis.com/v1/userinfo"

    async def initiate_authorization(self, state: str) -> str:
        """Build the Google consent URL.

        Args:
            state: State parameter for CSRF protection

        Returns:
            Authorization URL to redirect user to
        """
        params = {
            "response_type": "code",
            "client_id": self.client_id,
            "redirect_uri": self.redirect_uri,
            "scope": "openid email profile",
            "state": state,
            "prompt": "select_account",
        }

        logfire.info("Google OAuth authorization initiated", state=state)

        return f"{self.authorize_url}?{urlencode(params)}"

    async def complete_authorization(self, code: str, state: str) -> OAuthProviderInfo:
        """Exchange the code and fetch the OpenID profile.

        Args:
            code: Authorization code from Google callback
            state: State parameter (checked by the caller)

        Returns:
            User information from Google

        Raises:
            GoogleCodeRejectedError: If Google rejects the code
            GoogleOAuthError: If Google cannot be reached or errors
        """
        access_token = await self._exchange_code_for_token(code)
        user_info = await self._get_user_info(access_token)

        logfire.info("Google OAuth completed", sub=user_info["sub"])

        return OAuthProviderInfo(
            provider=AuthProvider.GOOGLE,
            provider_account_id=user_info["sub"],
            email=user_info.get("email"),
            name=user_info.get("name"),
            image=user_info.get("picture"),
            email_verified=bool(user_info.get("email_verified", False)),
        )

    async def _exchange_code_for_token(self, code: str) -> str:
        """Exchange authorization code for access token.

        Raises:
            GoogleCodeRejectedError: If Google rejects the code
            GoogleOAuthError: If Google cannot be reached or errors
        """
        data = {
            "code": code,
            "grant_type": "authorization_code",
            "client_id": self.client_id,
            "client_secret": self.client_secret,
            "redirect_uri": self.redirect_uri,
        }

        try:
            async with httpx.AsyncClient() as client:
                response = await client.post(
                    self.token_url, data=data, timeout=self.timeout
                )

                if response.status_code != 200:
                    logfire.error(
                        "Google token exchange failed",
                        status_code=response.status_code,
                        error=response.text,
                    )
                    error_class = (
                        GoogleCodeRejectedError
                        if response.status_code < 500
                        else GoogleOAuthError
                    )
                    raise error_class(f"Token exchange failed: {response.status_code}")

                return response.json()["access_token"]

        except httpx.HTTPError as e:
            logfire.error("Google token exchange HTTP error", error=str(e))
            raise GoogleOAuthError(f"HTTP error during token exchange: {e}")

    async def _get_user_info(self, access_token: str) -> dict:
        """Get the OpenID userinfo document.

        Raises:
            GoogleCodeRejectedError: If Google rejects the access token
            GoogleOAuthError: If Google cannot be reached or errors
        """
        try:
            async with httpx.AsyncClient() as client:
                response = await client.get(
                    self.user_info_url,
                    headers={"Authorization": f"Bearer {access_token}"},
                    timeout=self.timeout,
                )

                if response.status_code != 200:
                    logfire.error(
                        "Google user info request failed",
                        status_code=response.status_code,
                        error=response.text,
                    )
                    error_class = (
                        GoogleCodeRejectedError
                        if response.status_code < 500
                        else GoogleOAuthError
                    )
                    raise error_class(f"User info request failed: {response.status_code}")

                return response.json()

        except httpx.HTTPError as e:
            logfire.error("Google user info HTTP error", error=str(e))
            raise GoogleOAuthError(f"HTTP error fetching user info: {e}")


class MockGoogleOAuthClient(GoogleOAuthClient):
    """Mock Google OAuth client for testing.

    Returns the profile registered for a code in `profiles`, or a fixed
    default profile.
    """

    def __init__(self) -> None:
        self.profiles: dict[str, OAuthProviderInfo] = {}

    async def initiate_authorization(self, state: str) -> str:
        """Return mock authorization URL."""
        return f"https://accounts.google.com/o/oauth2/v2/auth?state={state}&mock=true"

    async def complete_authorization(self, code: str, state: str) -> OAuthProviderInfo:
        """Return mock user information.

        Raises:
            GoogleCodeRejectedError: If code is "invalid"
            GoogleOAuthError: If code is "unavailable"
        """
        if code == "invalid":
            raise GoogleCodeRejectedError("Token exchange failed: 400")
        if code == "unavailable":
            raise GoogleOAuthError("HTTP error during token exchange: connection refused")
        return self.profiles.get(
            code,
            OAuthProviderInfo(
                provider=AuthProvider.GOOGLE,
                provider_account_id="mockgoogle123",
                email="mock@gmail.com",
                name="Mock Google User",
                image="https://example.com/google-avatar.jpg",
            ),
        )

"""GitHub OAuth client implementation.

GitHub only returns a public email on the user object, so the verified
primary address is read from the emails endpoint.
"""

from typing import Optional
from urllib.parse import urlencode

import httpx
import logfire

from idlink.adapter.error import ProviderError, ProviderRejectedError
from idlink.domain.service.auth_service import OAuthClient
from idlink.domain.value.types import AuthProvider, OAuthProviderInfo


class GitHubOAuthError(ProviderError):
    """GitHub unreachable or failing."""

    pass


class GitHubCodeRejectedError(ProviderRejectedError):
    """GitHub refused the authorization code or access token."""

    pass


class GitHubOAuthClient(OAuthClient):
    """Base class for GitHub OAuth clients.

    Provides type distinction for dependency injection.
    """

    pass


class RealGitHubOAuthClient(GitHubOAuthClient):
    """GitHub OAuth App client."""

    def __init__(
        self,
        client_id: str,
        client_secret: str,
        redirect_uri: str,
        timeout: float = 10.0,
    ) -> None:
        """Initialize GitHub OAuth client.

        Args:
            client_id: GitHub OAuth App client ID
            client_secret: GitHub OAuth App client secret
            redirect_uri: Callback URL registered with GitHub
            timeout: Per-request HTTP timeout in seconds
        """
        self.client_id = client_id
        self.client_secret = client_secret
        self.redirect_uri = redirect_uri
        self.timeout = timeout

        self.authorize_url = "https://github.com/login/oauth/authorize"
        self.token_url = "https://github.com/login/oauth/access_token"
        self.api_url = "https://api.github.com"

    async def initiate_authorization(self, state: str) -> str:
        """Build the GitHub authorization URL."""
        params = {
            "client_id": self.client_id,
            "redirect_uri": self.redirect_uri,
            "scope": "read:user user:email",
            "state": state,
        }

        logfire.info("GitHub OAuth authorization initiated", state=state)

        return f"{self.authorize_url}?{urlencode(params)}"

    async def complete_authorization(self, code: str, state: str) -> OAuthProviderInfo:
        """Exchange the code and fetch the user profile.

        Raises:
            GitHubCodeRejectedError: If GitHub rejects the code
            GitHubOAuthError: If GitHub cannot be reached or errors
        """
        access_token = await self._exchange_code_for_token(code, state)
        user = await self._get(access_token, "/user")
        email = await self._primary_verified_email(access_token)

        logfire.info("GitHub OAuth completed", github_id=user["id"])

        return OAuthProviderInfo(
            provider=AuthProvider.GITHUB,
            provider_account_id=str(user["id"]),
            email=email,
            name=user.get("name") or user.get("login"),
            image=user.get("avatar_url"),
            email_verified=email is not None,
        )

    async def _exchange_code_for_token(self, code: str, state: str) -> str:
        """Exchange authorization code for access token.

        GitHub answers errors with HTTP 200 and an "error" field.

        Raises:
            GitHubCodeRejectedError: If GitHub rejects the code
            GitHubOAuthError: If GitHub cannot be reached or errors
        """
        data = {
            "code": code,
            "client_id": self.client_id,
            "client_secret": self.client_secret,
            "redirect_uri": self.redirect_uri,
            "state": state,
        }

        try:
            async with httpx.AsyncClient() as client:
                response = await client.post(
                    self.token_url,
                    data=data,
                    headers={"Accept": "application/json"},
                    timeout=self.timeout,
                )
                result = response.json() if response.status_code == 200 else {}

                if "access_token" not in result:
                    logfire.error(
                        "GitHub token exchange failed",
                        status_code=response.status_code,
                        error=result.get("error", response.text),
                    )
                    error_class = (
                        GitHubCodeRejectedError
                        if response.status_code < 500
                        else GitHubOAuthError
                    )
                    raise error_class(
                        f"Token exchange failed: {result.get('error', response.status_code)}"
                    )

                return result["access_token"]

        except httpx.HTTPError as e:
            logfire.error("GitHub token exchange HTTP error", error=str(e))
            raise GitHubOAuthError(f"HTTP error during token exchange: {e}")

    async def _get(self, access_token: str, path: str):
        try:
            async with httpx.AsyncClient() as client:
                response = await client.get(
                    f"{self.api_url}{path}",
                    headers={
                        "Authorization": f"Bearer {access_token}",
                        "Accept": "application/vnd.github+json",
                    },
                    timeout=self.timeout,
                )

                if response.status_code != 200:
                    logfire.error(
                        "GitHub API request failed",
                        path=path,
                        status_code=response.status_code,
                    )
                    error_class = (
                        GitHubCodeRejectedError
                        if response.status_code < 500
                        else GitHubOAuthError
                    )
                    raise error_class(f"GitHub {path} failed: {response.status_code}")

                return response.json()

        except httpx.HTTPError as e:
            logfire.error("GitHub API HTTP error", path=path, error=str(e))
            raise GitHubOAuthError(f"HTTP error fetching {path}: {e}")

    async def _primary_verified_email(self, access_token: str) -> Optional[str]:
        emails = await self._get(access_token, "/user/emails")
        for entry in emails:
            if entry.get("primary") and entry.get("verified"):
                return entry["email"]
        return None


class MockGitHubOAuthClient(GitHubOAuthClient):
    """Mock GitHub OAuth client for testing.

    Returns the profile registered for a code in `profiles`, or a fixed
    default profile.
    """

    def __init__(self) -> None:
        self.profiles: dict[str, OAuthProviderInfo] = {}

    async def initiate_authorization(self, state: str) -> str:
        """Return mock authorization URL."""
        return f"https://github.com/login/oauth/authorize?state={state}&mock=true"

    async def complete_authorization(self, code: str, state: str) -> OAuthProviderInfo:
        """Return mock user information.

        Raises:
            GitHubCodeRejectedError: If code is "invalid"
            GitHubOAuthError: If code is "unavailable"
        """
        if code == "invalid":
            raise GitHubCodeRejectedError("Token exchange failed: bad_verification_code")
        if code == "unavailable":
            raise GitHubOAuthError("HTTP error during token exchange: connection refused")
        return self.profiles.get(
            code,
            OAuthProviderInfo(
                provider=AuthProvider.GITHUB,
                provider_account_id="424242",
                email="mock@users.github.com",
                name="Mock GitHub User",
                image="https://example.com/github-avatar.png",
            ),
        )

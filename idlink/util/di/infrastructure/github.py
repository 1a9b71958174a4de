"""GitHub infrastructure providers."""

from dishka import Scope, provide

from idlink.adapter.github import GitHubOAuthClient, RealGitHubOAuthClient
from idlink.config import Settings
from idlink.util.di.base import ProviderBase


class GitHubProvider(ProviderBase):
    """GitHub component base."""

    __mock_component__ = "github"


class ProdGitHubProvider(GitHubProvider):
    """Production GitHub provider."""

    __is_mock__ = False

    @provide(scope=Scope.APP)
    def get_github_oauth_client(self, settings: Settings) -> GitHubOAuthClient:
        """Provide GitHub OAuth client.

        Raises:
            ValueError: If GitHub OAuth credentials are not configured
        """
        if not settings.auth.github.client_id:
            raise ValueError("GitHub OAuth client ID must be configured")
        if not settings.auth.github.client_secret:
            raise ValueError("GitHub OAuth client secret must be configured")

        return RealGitHubOAuthClient(
            client_id=settings.auth.github.client_id,
            client_secret=settings.auth.github.client_secret,
            redirect_uri=settings.auth.github_callback_url,
            timeout=settings.auth.external_call_timeout_seconds,
        )

"""OAuth infrastructure provider for multi-provider authentication."""

from dishka import Scope, provide

from idlink.adapter.github import GitHubOAuthClient
from idlink.adapter.google import GoogleOAuthClient
from idlink.domain.service.auth_service import OAuthClient
from idlink.domain.value import AuthProvider
from idlink.util.di.base import ProviderBase


class OAuthAggregatorProvider(ProviderBase):
    """Provider that aggregates all OAuth clients into a dictionary."""

    scope = Scope.APP

    @provide(scope=Scope.APP)
    def get_oauth_clients(
        self,
        google_oauth_client: GoogleOAuthClient,
        github_oauth_client: GitHubOAuthClient,
    ) -> dict[AuthProvider, OAuthClient]:
        """Provide dictionary of all OAuth clients by provider.

        Args:
            google_oauth_client: Google OAuth client (specific type)
            github_oauth_client: GitHub OAuth client (specific type)

        Returns:
            Dictionary mapping AuthProvider to OAuthClient
        """
        return {
            AuthProvider.GOOGLE: google_oauth_client,
            AuthProvider.GITHUB: github_oauth_client,
        }

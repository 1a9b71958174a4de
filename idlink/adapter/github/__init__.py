"""GitHub OAuth adapter."""

from .client import (
    GitHubCodeRejectedError,
    GitHubOAuthClient,
    GitHubOAuthError,
    MockGitHubOAuthClient,
    RealGitHubOAuthClient,
)

__all__ = [
    "GitHubCodeRejectedError",
    "GitHubOAuthClient",
    "GitHubOAuthError",
    "MockGitHubOAuthClient",
    "RealGitHubOAuthClient",
]

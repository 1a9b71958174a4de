"""Infrastructure providers."""

# Import bases
from .github import GitHubProvider
from .google import GoogleProvider
from .oauth import OAuthAggregatorProvider
from .persistence import PersistenceProvider
from .sms import SmsProvider

# Import implementations (needed for __subclasses__())
from .github import ProdGitHubProvider  # noqa: F401
from .google import ProdGoogleProvider  # noqa: F401
from .persistence import ProdPersistenceProvider  # noqa: F401
from .sms import ProdSmsProvider  # noqa: F401

__all__ = [
    "GitHubProvider",
    "GoogleProvider",
    "OAuthAggregatorProvider",
    "PersistenceProvider",
    "ProdGitHubProvider",
    "ProdGoogleProvider",
    "ProdPersistenceProvider",
    "ProdSmsProvider",
    "SmsProvider",
]

"""Mock providers for testing."""

from .github import MockGitHubProvider
from .google import MockGoogleProvider
from .persistence import MockPersistenceProvider
from .sms import MockSmsProvider
from .container import build_test_container

__all__ = [
    "MockGitHubProvider",
    "MockGoogleProvider",
    "MockPersistenceProvider",
    "MockSmsProvider",
    "build_test_container",
]

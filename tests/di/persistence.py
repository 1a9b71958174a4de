"""Mock persistence providers for testing."""

from dishka import Scope, provide

from idlink.domain.repository import (
    ActivityRepository,
    UserIdentityRepository,
    UserRepository,
)
from idlink.persistence.repository.inmemory import (
    InMemoryActivityRepository,
    InMemoryUserIdentityRepository,
    InMemoryUserRepository,
)
from idlink.util.di.infrastructure.persistence import PersistenceProvider


class MockPersistenceProvider(PersistenceProvider):
    """Mock persistence provider using in-memory repositories.

    Uses APP scope so state survives across the requests of one container
    (an API test signs in, then calls an account route). Each test builds
    its own container, which keeps tests isolated.
    """

    __is_mock__ = True

    @provide(scope=Scope.APP)
    def get_user_repository(self) -> UserRepository:
        """Provide in-memory user repository."""
        return InMemoryUserRepository()

    @provide(scope=Scope.APP)
    def get_user_identity_repository(self) -> UserIdentityRepository:
        """Provide in-memory user identity repository."""
        return InMemoryUserIdentityRepository()

    @provide(scope=Scope.APP)
    def get_activity_repository(self) -> ActivityRepository:
        """Provide in-memory activity repository."""
        return InMemoryActivityRepository()

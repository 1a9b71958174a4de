"""Test harness for unit, integration and API tests.

Integration runs assume PostgreSQL is reachable at DATABASE__URL with the
schema migrated (scripts/run_migrations.py).
"""

import pytest_asyncio

from idlink.util.di import Component
from tests.di import build_test_container


def create_env_fixture(unmock: set[Component] | None = None):
    """Factory for creating test environment fixtures.

    Creates a pytest fixture that:
    - Builds a fresh test container with the given components unmocked
    - Yields a request-scoped container for service access

    Args:
        unmock: Components to use real implementations for

    Returns:
        Pytest fixture function that yields AsyncContainer

    Usage:
        # Unit tests - everything mocked
        unit_env = create_env_fixture()

        # Integration tests - real persistence
        integration_env = create_env_fixture(unmock={"persistence"})

        @pytest.mark.asyncio
        async def test_register(unit_env):
            use_case = await unit_env.get(RegisterUseCase)
            result = await use_case.execute(RegisterRequest(...))
            assert result.token
    """

    @pytest_asyncio.fixture
    async def _test_environment():
        container = build_test_container(unmock=unmock or set())

        async with container() as request_container:
            yield request_container

        await container.close()

    return _test_environment

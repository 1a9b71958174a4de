"""Database connection and session management.

Provides async database engine and session factory for PostgreSQL.
"""

from collections.abc import Iterator
from contextlib import contextmanager

import logfire
from sqlalchemy.exc import DBAPIError, IntegrityError, OperationalError
from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)

from idlink.config import Settings
from idlink.domain.error import DuplicateIdentityError, StoreUnavailableError

# Unique index name -> attribute reported to the caller
_UNIQUE_CONSTRAINTS = {
    "uq_users_active_email": "email",
    "uq_users_active_phone": "phone_number",
    "uq_provider_identity": "provider_account",
}


def create_engine(settings: Settings) -> AsyncEngine:
    """Create async database engine.

    Args:
        settings: Application settings with database URL

    Returns:
        Configured async engine
    """
    return create_async_engine(
        settings.database_url,
        echo=settings.debug,  # Log SQL queries in debug mode
        pool_pre_ping=True,  # Verify connections before using
        pool_size=settings.database.pool_size,
        max_overflow=settings.database.max_overflow,
        connect_args={"command_timeout": settings.database.command_timeout_seconds},
    )


def create_session_factory(engine: AsyncEngine) -> async_sessionmaker[AsyncSession]:
    """Create async session factory.

    Args:
        engine: Database engine

    Returns:
        Session factory for creating database sessions
    """
    return async_sessionmaker(
        engine,
        class_=AsyncSession,
        expire_on_commit=False,  # Don't expire objects after commit
        autoflush=False,  # Manual flushing for better control
        autocommit=False,  # Explicit transaction management
    )


@contextmanager
def store_errors() -> Iterator[None]:
    """Translate driver errors into domain errors.

    Raises:
        DuplicateIdentityError: On a unique index violation
        StoreUnavailableError: When the database cannot be reached or times out
    """
    try:
        yield
    except IntegrityError as e:
        message = str(e.orig)
        for constraint, attribute in _UNIQUE_CONSTRAINTS.items():
            if constraint in message:
                raise DuplicateIdentityError(attribute) from e
        raise
    except (OperationalError, DBAPIError, OSError, TimeoutError) as e:
        logfire.error("Database unavailable", error=str(e))
        raise StoreUnavailableError(str(e)) from e

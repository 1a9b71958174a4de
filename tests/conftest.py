"""Test configuration and fixtures."""

from datetime import datetime, timedelta
from typing import Optional
from uuid import uuid4

import pytest

from idlink.config import AuthSettings, LinkingSettings, SmsSettings, TwoFactorSettings
from idlink.domain.model import User
from idlink.domain.value import RegisterSource, UserId
from idlink.persistence.repository.inmemory import (
    InMemoryActivityRepository,
    InMemoryUserIdentityRepository,
    InMemoryUserRepository,
)
from idlink.util.password import hash_password

# bcrypt is slow on purpose; hash once per session
PASSWORD = "correct horse battery"
PASSWORD_HASH = hash_password(PASSWORD)

_EPOCH = datetime(2024, 1, 1, 12, 0, 0)


def make_user(
    email: Optional[str] = None,
    phone_number: Optional[str] = None,
    name: Optional[str] = None,
    register_source: RegisterSource = RegisterSource.CREDENTIALS,
    verified: bool = True,
    age_days: int = 0,
    **fields,
) -> User:
    """Build an identity record for tests.

    Args:
        verified: Put the email and phone into the verified sets
        age_days: How many days before the fixed test epoch the record was
            created; larger means older
    """
    created_at = _EPOCH - timedelta(days=age_days)
    fields.setdefault("created_at", created_at)
    fields.setdefault("updated_at", created_at)
    if register_source == RegisterSource.CREDENTIALS:
        fields.setdefault("password_hash", PASSWORD_HASH)
    return User(
        id=UserId(uuid4()),
        email=email,
        phone_number=phone_number,
        name=name,
        register_source=register_source,
        verified_emails=frozenset({email}) if email and verified else frozenset(),
        verified_phones=(
            frozenset({phone_number}) if phone_number and verified else frozenset()
        ),
        **fields,
    )


@pytest.fixture
def user_repo() -> InMemoryUserRepository:
    return InMemoryUserRepository()


@pytest.fixture
def identity_repo() -> InMemoryUserIdentityRepository:
    return InMemoryUserIdentityRepository()


@pytest.fixture
def activity_repo() -> InMemoryActivityRepository:
    return InMemoryActivityRepository()


@pytest.fixture
def linking_settings() -> LinkingSettings:
    return LinkingSettings()


@pytest.fixture
def auth_settings() -> AuthSettings:
    return AuthSettings(jwt_secret="test-secret", external_call_timeout_seconds=0.2)


@pytest.fixture
def two_factor_settings() -> TwoFactorSettings:
    return TwoFactorSettings()


@pytest.fixture
def sms_settings() -> SmsSettings:
    return SmsSettings()

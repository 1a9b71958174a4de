"""Tests for JWT utilities."""

import jwt
import pytest

from idlink.config import AuthSettings
from idlink.util.jwt import JWTError, create_token, verify_token


@pytest.fixture
def settings() -> AuthSettings:
    return AuthSettings(jwt_secret="unit-test-secret")


def claims(**overrides) -> dict:
    base = {
        "user_id": "6f1c0d52-9a3e-4b8e-8d6f-2a1b3c4d5e6f",
        "email": "alice@example.com",
        "register_source": "credentials",
        "linked_emails": ["alice@example.com"],
    }
    base.update(overrides)
    return base


class TestJWT:
    """Token round trip and rejection."""

    def test_claims_survive_round_trip(self, settings):
        token = create_token(claims(group_id="g-1", is_master=True), settings)

        payload = verify_token(token, settings)

        assert payload.user_id == "6f1c0d52-9a3e-4b8e-8d6f-2a1b3c4d5e6f"
        assert payload.group_id == "g-1"
        assert payload.is_master
        assert payload.linked_emails == ["alice@example.com"]

    def test_wrong_secret_rejected(self, settings):
        token = create_token(claims(), AuthSettings(jwt_secret="other-secret"))

        with pytest.raises(JWTError, match="Invalid token"):
            verify_token(token, settings)

    def test_expired_token_rejected(self, settings):
        token = jwt.encode(
            {**claims(), "exp": 1}, settings.jwt_secret, algorithm=settings.jwt_algorithm
        )

        with pytest.raises(JWTError, match="expired"):
            verify_token(token, settings)

"""HTTP tests for the auth and account routes, against mock providers."""

import pytest
from fastapi.testclient import TestClient

from idlink.adapter.sms import MockSmsClient
from idlink.interface.api.app import create_app
from tests.di import build_test_container

PASSWORD = "correct horse battery"


@pytest.fixture
def client():
    """Test client over a fresh in-memory container."""
    with TestClient(create_app(build_test_container(for_app=True))) as test_client:
        yield test_client


def register(client: TestClient, email: str, name: str | None = None) -> dict:
    response = client.post(
        "/auth/register", json={"email": email, "password": PASSWORD, "name": name}
    )
    assert response.status_code == 200, response.text
    return response.json()


class TestHealth:
    """Health endpoint."""

    def test_health(self, client):
        response = client.get("/health")

        assert response.status_code == 200
        assert response.json()["status"] == "healthy"
        assert set(response.json()["providers"]) == {"google", "github"}


class TestSignIn:
    """Sign-in routes and the error mapping."""

    def test_register_sets_session_cookie(self, client):
        # Act
        body = register(client, "alice@example.com", "Alice")
        me = client.get("/auth/me")

        # Assert
        assert "auth_token" in client.cookies
        assert body["principal"]["email"] == "alice@example.com"
        assert me.json()["authenticated"] is True
        assert me.json()["principal"]["id"] == body["user_id"]

    def test_wrong_password_is_generic_401(self, client):
        register(client, "alice@example.com")
        client.post("/auth/logout")

        response = client.post(
            "/auth/signin",
            json={"method": "credentials", "email": "alice@example.com", "password": "x"},
        )

        assert response.status_code == 401
        assert response.json() == {
            "error": "invalid_credential",
            "message": "Invalid credentials",
        }

    def test_unknown_email_looks_like_wrong_password(self, client):
        response = client.post(
            "/auth/signin",
            json={"method": "credentials", "email": "ghost@example.com", "password": "x"},
        )

        assert response.status_code == 401
        assert response.json()["message"] == "Invalid credentials"

    def test_missing_fields_are_400(self, client):
        response = client.post("/auth/signin", json={"method": "phone"})

        assert response.status_code == 400
        assert response.json()["error"] == "missing_credentials"

    def test_unknown_method_is_400(self, client):
        response = client.post("/auth/signin", json={"method": "carrier-pigeon"})

        assert response.status_code == 400

    def test_oauth_account_password_sign_in_names_provider(self, client):
        # Arrange: the mock Google profile creates mock@gmail.com
        callback = client.get(
            "/auth/callback/google",
            params={"code": "code", "state": "state"},
            follow_redirects=False,
        )
        client.post("/auth/logout")

        # Act
        response = client.post(
            "/auth/signin",
            json={
                "method": "credentials",
                "email": "mock@gmail.com",
                "password": PASSWORD,
            },
        )

        # Assert
        assert callback.status_code == 302
        assert response.status_code == 401
        assert response.json()["error"] == "wrong_provider"
        assert response.json()["provider"] == "Google"

    def test_failed_oauth_callback_redirects_with_kind(self, client):
        response = client.get(
            "/auth/callback/github",
            params={"code": "invalid", "state": "state"},
            follow_redirects=False,
        )

        assert response.status_code == 302
        assert response.headers["location"].endswith(
            "/auth/error?error=invalid_credential"
        )

    def test_initiate_login_returns_provider_url(self, client):
        response = client.post("/auth/login", json={"provider": "github"})

        assert response.status_code == 200
        assert "mock=true" in response.json()["authorization_url"]

    def test_phone_registration_and_sign_in(self, client):
        # Arrange
        registered = client.post(
            "/auth/register", json={"phone_number": "+14155550100"}
        )

        # Act
        verified = client.post(
            "/auth/phone/verify",
            json={"phone_number": "+14155550100", "code": MockSmsClient.MOCK_CODE},
        )
        client.post("/auth/logout")
        code_sent = client.post("/auth/phone/code", json={"phone_number": "+14155550100"})
        signed_in = client.post(
            "/auth/signin",
            json={
                "method": "phone",
                "phone_number": "+14155550100",
                "code": MockSmsClient.MOCK_CODE,
            },
        )

        # Assert
        assert registered.json()["phone_verification_required"] is True
        assert "auth_token" in client.cookies
        assert verified.status_code == 200
        assert code_sent.json() == {"sent": True}
        assert signed_in.status_code == 200
        assert signed_in.json()["principal"]["phone_number"] == "+14155550100"

    def test_me_without_cookie(self, client):
        response = client.get("/auth/me")

        assert response.status_code == 200
        assert response.json() == {"authenticated": False, "principal": None}


class TestAccountRoutes:
    """Linking and deactivation through the API."""

    def test_requires_session(self, client):
        response = client.get("/account/profile")

        assert response.status_code == 401
        assert response.json()["error"] == "not_authenticated"

    def test_link_then_deactivate_with_transfer(self, client):
        # Arrange: two records sharing a name
        first = register(client, "a@example.com", "Alice Smith")
        client.post("/auth/logout")
        second = register(client, "b@example.com", "Alice Smith")
        assert [c["candidate_user_id"] for c in second["link_candidates"]] == [
            first["user_id"]
        ]

        # Act: link, refresh the session, then try to leave
        candidates = client.post("/account/link-candidates", json={})
        linked = client.post(
            "/account/link", json={"secondary_ids": [first["user_id"]]}
        )
        me = client.get("/auth/me")
        refused = client.post("/account/deactivate", json={})
        left = client.post("/account/deactivate", json={"transfer_ownership": True})
        after = client.get("/account/profile")

        # Assert
        assert candidates.json()["candidates"][0]["confidence"] == 10
        assert linked.status_code == 200
        assert linked.json()["master_id"] == second["user_id"]
        assert me.json()["principal"]["has_linked_accounts"] is True
        assert me.json()["principal"]["linked_emails"] == [
            "a@example.com",
            "b@example.com",
        ]
        assert refused.status_code == 409
        assert refused.json()["error"] == "requires_transfer"
        assert refused.json()["active_member_ids"] == [first["user_id"]]
        assert left.status_code == 200
        assert left.json()["new_master_id"] == first["user_id"]
        assert after.status_code == 401

    def test_linking_a_stranger_is_404(self, client):
        stranger = register(client, "bob@example.com", "Bob")
        client.post("/auth/logout")
        register(client, "alice@example.com", "Alice")

        response = client.post(
            "/account/link", json={"secondary_ids": [stranger["user_id"]]}
        )

        assert response.status_code == 404
        assert response.json()["error"] == "candidate_not_found"

    def test_backup_codes_require_two_factor(self, client):
        register(client, "alice@example.com")

        response = client.get("/account/backup-codes")

        assert response.status_code == 400
        assert response.json()["error"] == "two_factor_not_enabled"

"""Tests for request span attributes."""

from types import SimpleNamespace

from idlink.util.observability import request_attributes


def fake_request(path: str, method: str = "POST"):
    return SimpleNamespace(
        url=SimpleNamespace(path=path),
        method=method,
        client=SimpleNamespace(host="203.0.113.7"),
    )


class TestRequestAttributes:
    """Tests for request_attributes."""

    def test_drops_values_on_sign_in_routes(self):
        attributes = {"values": {"password": "hunter2", "two_factor_code": "123456"}}

        result = request_attributes(fake_request("/auth/signin"), attributes)

        assert "values" not in result
        assert result["path"] == "/auth/signin"
        assert result["method"] == "POST"
        assert result["client_host"] == "203.0.113.7"

    def test_drops_values_on_backup_code_routes(self):
        result = request_attributes(
            fake_request("/account/backup-codes/regenerate"),
            {"values": {"password": "hunter2"}},
        )

        assert "values" not in result

    def test_keeps_values_elsewhere(self):
        attributes = {"values": {"transfer_ownership": True}}

        result = request_attributes(fake_request("/account/deactivate"), attributes)

        assert result["values"] == {"transfer_ownership": True}
        assert attributes == {"values": {"transfer_ownership": True}}

"""Tests for TOTP, backup code and password helpers."""

import pyotp

from idlink.util.password import hash_password, verify_password
from idlink.util.totp import generate_backup_codes, generate_secret, verify_totp


class TestTotp:
    def test_current_code_accepted(self):
        secret = generate_secret()

        assert verify_totp(secret, pyotp.TOTP(secret).now())

    def test_non_numeric_code_rejected(self):
        assert not verify_totp(generate_secret(), "ABCDEF")

    def test_backup_codes_are_unique_upper_hex(self):
        codes = generate_backup_codes(10, 4)

        assert len(set(codes)) == 10
        assert all(len(c) == 8 and c == c.upper() for c in codes)
        assert all(int(c, 16) >= 0 for c in codes)


class TestPassword:
    def test_hash_verifies_only_original(self):
        hashed = hash_password("s3cret-pass")

        assert hashed != "s3cret-pass"
        assert verify_password("s3cret-pass", hashed)
        assert not verify_password("wrong", hashed)

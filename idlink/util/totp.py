"""TOTP (RFC 6238) utilities."""

import secrets

import pyotp


def generate_secret() -> str:
    """Generate a new base32 TOTP secret."""
    return pyotp.random_base32()


def verify_totp(secret: str, code: str, valid_window: int = 2) -> bool:
    """Verify a 6-digit TOTP code.

    Args:
        secret: Base32 secret
        code: Code entered by the user
        valid_window: Accepted 30-second steps either side of now

    Returns:
        True if the code is valid within the window
    """
    code = code.strip()
    if not code.isdigit():
        return False
    return pyotp.TOTP(secret).verify(code, valid_window=valid_window)


def generate_backup_codes(count: int = 10, num_bytes: int = 4) -> list[str]:
    """Generate single-use backup codes.

    Returns:
        count upper-case hex codes of 2 * num_bytes characters
    """
    return [secrets.token_hex(num_bytes).upper() for _ in range(count)]

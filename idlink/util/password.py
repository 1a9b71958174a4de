"""Password hashing utilities."""

import bcrypt


def hash_password(password: str) -> str:
    """Hash a password with a fresh bcrypt salt.

    Args:
        password: Plain-text password

    Returns:
        bcrypt hash as text
    """
    return bcrypt.hashpw(password.encode("utf-8"), bcrypt.gensalt()).decode("utf-8")


def verify_password(password: str, password_hash: str) -> bool:
    """Check a password against a stored bcrypt hash.

    A malformed stored hash counts as a mismatch.
    """
    try:
        return bcrypt.checkpw(password.encode("utf-8"), password_hash.encode("utf-8"))
    except ValueError:
        return False

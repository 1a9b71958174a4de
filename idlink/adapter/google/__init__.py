"""Google OAuth adapter."""

from .client import (
    GoogleCodeRejectedError,
    GoogleOAuthClient,
    GoogleOAuthError,
    MockGoogleOAuthClient,
    RealGoogleOAuthClient,
)

__all__ = [
    "GoogleCodeRejectedError",
    "GoogleOAuthClient",
    "GoogleOAuthError",
    "MockGoogleOAuthClient",
    "RealGoogleOAuthClient",
]

"""SMS verification adapter."""

from .client import (
    MockSmsClient,
    RealTwilioSmsClient,
    SmsProviderError,
    VerifySmsClient,
)

__all__ = [
    "MockSmsClient",
    "RealTwilioSmsClient",
    "SmsProviderError",
    "VerifySmsClient",
]

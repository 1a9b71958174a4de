"""Twilio Verify SMS client implementation.

Twilio generates, delivers and checks the one-time codes; this client only
starts and checks verifications.
"""

import httpx
import logfire

from idlink.adapter.error import ProviderError
from idlink.domain.service.credential_service import SmsClient


class SmsProviderError(ProviderError):
    """SMS provider error."""

    pass


class VerifySmsClient(SmsClient):
    """Base class for SMS verification clients.

    Provides type distinction for dependency injection.
    """

    pass


class RealTwilioSmsClient(VerifySmsClient):
    """Twilio Verify client."""

    def __init__(
        self,
        account_sid: str,
        auth_token: str,
        verify_service_sid: str,
        timeout: float = 10.0,
    ) -> None:
        """Initialize Twilio Verify client.

        Args:
            account_sid: Twilio account SID
            auth_token: Twilio auth token
            verify_service_sid: Verify service SID
            timeout: Per-request HTTP timeout in seconds
        """
        self.auth = (account_sid, auth_token)
        self.timeout = timeout
        self.base_url = f"https://verify.twilio.com/v2/Services/{verify_service_sid}"

    async def send_code(self, phone_number: str) -> None:
        """Start an SMS verification.

        Raises:
            SmsProviderError: If Twilio rejects the request or is unreachable
        """
        try:
            async with httpx.AsyncClient() as client:
                response = await client.post(
                    f"{self.base_url}/Verifications",
                    data={"To": phone_number, "Channel": "sms"},
                    auth=self.auth,
                    timeout=self.timeout,
                )
        except httpx.HTTPError as e:
            logfire.error("Twilio send HTTP error", error=str(e))
            raise SmsProviderError(f"HTTP error sending code: {e}")

        if response.status_code not in (200, 201):
            logfire.error(
                "Twilio send failed",
                status_code=response.status_code,
                error=response.text,
            )
            raise SmsProviderError(f"Send failed: {response.status_code}")

        logfire.info("SMS verification started")

    async def check_code(self, phone_number: str, code: str) -> bool:
        """Check a code against the pending verification.

        Twilio answers 404 once a verification has expired or been used.

        Raises:
            SmsProviderError: If Twilio is unreachable or errors
        """
        try:
            async with httpx.AsyncClient() as client:
                response = await client.post(
                    f"{self.base_url}/VerificationCheck",
                    data={"To": phone_number, "Code": code},
                    auth=self.auth,
                    timeout=self.timeout,
                )
        except httpx.HTTPError as e:
            logfire.error("Twilio check HTTP error", error=str(e))
            raise SmsProviderError(f"HTTP error checking code: {e}")

        if response.status_code == 404:
            return False
        if response.status_code != 200:
            logfire.error(
                "Twilio check failed",
                status_code=response.status_code,
                error=response.text,
            )
            raise SmsProviderError(f"Check failed: {response.status_code}")

        return response.json().get("status") == "approved"


class MockSmsClient(VerifySmsClient):
    """Mock SMS client for testing.

    Accepts MOCK_CODE for any number and remembers where codes were sent.
    """

    MOCK_CODE = "123456"

    def __init__(self) -> None:
        self.sent_to: list[str] = []

    async def send_code(self, phone_number: str) -> None:
        """Record the destination."""
        self.sent_to.append(phone_number)

    async def check_code(self, phone_number: str, code: str) -> bool:
        """Accept only MOCK_CODE."""
        return code == self.MOCK_CODE

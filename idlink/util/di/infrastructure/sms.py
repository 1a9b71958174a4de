"""SMS infrastructure providers."""

from dishka import Scope, provide

from idlink.adapter.sms import RealTwilioSmsClient, VerifySmsClient
from idlink.config import Settings
from idlink.util.di.base import ProviderBase


class SmsProvider(ProviderBase):
    """SMS component base."""

    __mock_component__ = "sms"


class ProdSmsProvider(SmsProvider):
    """Production SMS provider backed by Twilio Verify."""

    __is_mock__ = False

    @provide(scope=Scope.APP)
    def get_sms_client(self, settings: Settings) -> VerifySmsClient:
        """Provide SMS verification client."""
        return RealTwilioSmsClient(
            account_sid=settings.sms.account_sid,
            auth_token=settings.sms.auth_token,
            verify_service_sid=settings.sms.verify_service_sid,
            timeout=settings.auth.external_call_timeout_seconds,
        )

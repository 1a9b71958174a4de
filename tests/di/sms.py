"""Mock SMS providers for testing."""

from dishka import Scope, provide

from idlink.adapter.sms import MockSmsClient, VerifySmsClient
from idlink.util.di.infrastructure.sms import SmsProvider


class MockSmsProvider(SmsProvider):
    """Mock SMS provider; accepts MockSmsClient.MOCK_CODE for every number."""

    __is_mock__ = True

    @provide(scope=Scope.APP)
    def get_sms_client(self) -> VerifySmsClient:
        """Provide mock SMS client."""
        return MockSmsClient()

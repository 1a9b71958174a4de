"""Core DI providers (non-mockable)."""

from dishka import Scope, provide

from idlink.config import (
    AuthSettings,
    LinkingSettings,
    Settings,
    SmsSettings,
    TwoFactorSettings,
)
from idlink.util.di.base import ProviderBase


class ProdConfigProvider(ProviderBase):
    """Production config provider - concrete, no mocks needed.

    Settings are loaded from environment variables and .env file automatically.
    """

    @provide(scope=Scope.APP)
    def provide_settings(self) -> Settings:
        """Provide application settings from environment."""
        return Settings()

    @provide(scope=Scope.APP)
    def provide_auth_settings(self, settings: Settings) -> AuthSettings:
        """Provide auth settings."""
        return settings.auth

    @provide(scope=Scope.APP)
    def provide_linking_settings(self, settings: Settings) -> LinkingSettings:
        """Provide account linking settings."""
        return settings.linking

    @provide(scope=Scope.APP)
    def provide_two_factor_settings(self, settings: Settings) -> TwoFactorSettings:
        """Provide two-factor settings."""
        return settings.two_factor

    @provide(scope=Scope.APP)
    def provide_sms_settings(self, settings: Settings) -> SmsSettings:
        """Provide SMS settings."""
        return settings.sms

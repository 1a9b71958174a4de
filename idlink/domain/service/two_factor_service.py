"""Two-factor backup code domain service."""

import logfire

from idlink.config import TwoFactorSettings
from idlink.domain.error import (
    InvalidCredentialError,
    NotFoundError,
    TwoFactorNotEnabledError,
)
from idlink.domain.model import User
from idlink.domain.repository import UserRepository
from idlink.domain.value import ActivityEventType, UserId
from idlink.util.password import verify_password
from idlink.util.totp import generate_backup_codes

from .activity_service import ActivityService
from .base import Service


class TwoFactorService(Service):
    """Backup code status and regeneration."""

    def __init__(
        self,
        user_repository: UserRepository,
        activity_service: ActivityService,
        two_factor_settings: TwoFactorSettings,
    ) -> None:
        self.user_repository = user_repository
        self.activity_service = activity_service
        self.settings = two_factor_settings

    async def _get_enabled_user(self, user_id: UserId) -> User:
        user = await self.user_repository.find_by_id(user_id)
        if user is None or not user.is_active:
            raise NotFoundError("User", str(user_id))
        if not user.two_factor_enabled:
            raise TwoFactorNotEnabledError()
        return user

    async def remaining_backup_codes(self, user_id: UserId) -> int:
        """Count unused backup codes.

        Raises:
            TwoFactorNotEnabledError: If 2FA is off
        """
        user = await self._get_enabled_user(user_id)
        return len(user.backup_codes)

    async def regenerate_backup_codes(self, user_id: UserId, password: str) -> list[str]:
        """Replace all backup codes after re-checking the password.

        Args:
            user_id: Record ID
            password: Current password

        Returns:
            The new codes; they are not retrievable again

        Raises:
            TwoFactorNotEnabledError: If 2FA is off
            InvalidCredentialError: If the password is wrong or the record has none
        """
        with logfire.span(
            "two_factor_service.regenerate_backup_codes", user_id=str(user_id)
        ):
            user = await self._get_enabled_user(user_id)
            if not user.password_hash or not verify_password(
                password, user.password_hash
            ):
                logfire.warn("Backup code regeneration refused", user_id=str(user_id))
                raise InvalidCredentialError("Password confirmation failed")

            codes = generate_backup_codes(
                self.settings.backup_code_count, self.settings.backup_code_bytes
            )
            await self.user_repository.replace_backup_codes(user.id, codes)
            await self.activity_service.record(
                str(user.id), ActivityEventType.BACKUP_CODES_REGENERATED, count=len(codes)
            )
            logfire.info("Backup codes regenerated", user_id=str(user_id))
            return codes

"""Get current user use case."""

from typing import Optional
from uuid import UUID

from pydantic import BaseModel

from idlink.domain.error import AccountNotFoundError, NotFoundError
from idlink.domain.model import Principal
from idlink.domain.service import GroupService, JWTService, UserService
from idlink.domain.value import UserId


class GetCurrentUserRequest(BaseModel):
    """Get current user request."""

    token: str  # JWT token


class GetCurrentUserResponse(BaseModel):
    """Get current user response."""

    principal: Principal
    # Set when the group changed since the token was issued
    refreshed_token: Optional[str] = None


class GetCurrentUserUseCase:
    """Use case for getting the current principal, re-synced with its group."""

    def __init__(
        self,
        jwt_service: JWTService,
        user_service: UserService,
        group_service: GroupService,
    ) -> None:
        """Initialize get current user use case.

        Args:
            jwt_service: JWT token domain service
            user_service: User domain service
            group_service: Group domain service
        """
        self.jwt_service = jwt_service
        self.user_service = user_service
        self.group_service = group_service

    async def execute(self, request: GetCurrentUserRequest) -> GetCurrentUserResponse:
        """Execute get current user flow.

        Steps:
        1. Verify JWT token via JWT service
        2. Load the record and rebuild the principal from the current group
        3. Re-issue the token if its claims went stale (e.g. after a merge)

        Args:
            request: Request with JWT token

        Returns:
            Principal, plus a fresh token when the old one is stale

        Raises:
            JWTError: If token is invalid or expired
            AccountNotFoundError: If the record is gone or deactivated
        """
        # Verify token (raises JWTError if invalid)
        payload = self.jwt_service.verify_token(request.token)

        try:
            user = await self.user_service.get_by_id(UserId(UUID(payload.user_id)))
        except NotFoundError:
            raise AccountNotFoundError(f"Token subject {payload.user_id} not found")
        if not user.is_active:
            raise AccountNotFoundError(f"Token subject {payload.user_id} deactivated")

        principal = await self.group_service.resolve_principal(user)

        current = principal.model_dump(mode="json", exclude={"id"})
        claimed = payload.model_dump(mode="json", exclude={"user_id", "exp"})
        refreshed = self.jwt_service.create_token(principal) if current != claimed else None

        return GetCurrentUserResponse(principal=principal, refreshed_token=refreshed)

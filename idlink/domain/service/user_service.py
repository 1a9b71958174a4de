"""User domain service."""

from datetime import datetime
from typing import Optional

import logfire

from idlink.domain.error import NotFoundError
from idlink.domain.model import User
from idlink.domain.repository import UserRepository
from idlink.domain.value import UserId

from .base import Service


class UserService(Service):
    """Domain service for identity record operations."""

    def __init__(self, user_repository: UserRepository) -> None:
        """Initialize user service.

        Args:
            user_repository: User repository
        """
        self.user_repository = user_repository

    async def get_by_id(self, user_id: UserId) -> User:
        """Get user by ID.

        Args:
            user_id: User ID

        Returns:
            User entity

        Raises:
            NotFoundError: If user not found
        """
        with logfire.span("user_service.get_by_id", user_id=str(user_id)):
            user = await self.user_repository.find_by_id(user_id)
            if not user:
                logfire.warn("User not found", user_id=str(user_id))
                raise NotFoundError("User", str(user_id))
            return user

    async def get_user_by_email(self, email: str) -> Optional[User]:
        """Get the active user with this email.

        Args:
            email: Normalized email

        Returns:
            User if found, None otherwise
        """
        with logfire.span("user_service.get_user_by_email"):
            user = await self.user_repository.find_by_email(email)
            if user:
                logfire.info("User found by email", user_id=str(user.id))
            return user

    async def get_user_by_phone(self, phone_number: str) -> Optional[User]:
        """Get the active user with this E.164 phone number."""
        with logfire.span("user_service.get_user_by_phone"):
            user = await self.user_repository.find_by_phone(phone_number)
            if user:
                logfire.info("User found by phone", user_id=str(user.id))
            return user

    async def create(self, user: User) -> User:
        """Insert a new user.

        Raises:
            DuplicateIdentityError: If email or phone is already in use
        """
        with logfire.span(
            "user_service.create",
            user_id=str(user.id),
            register_source=user.register_source.value,
        ):
            created = await self.user_repository.create(user)
            logfire.info("User created", user_id=str(created.id))
            return created

    async def update(self, user: User) -> User:
        """Write a user back, using the version it was read at as precondition.

        Raises:
            ConcurrencyConflictError: If the record changed since it was read
        """
        with logfire.span(
            "user_service.update", user_id=str(user.id), version=user.version
        ):
            updated = await self.user_repository.update(
                user.model_copy(update={"updated_at": datetime.now()}),
                expected_version=user.version,
            )
            logfire.info(
                "User updated", user_id=str(user.id), version=updated.version
            )
            return updated

    async def mark_phone_verified(self, user: User) -> User:
        """Add the user's phone to its verified phones."""
        if user.phone_number is None or user.phone_verified:
            return user
        return await self.update(
            user.model_copy(
                update={"verified_phones": user.verified_phones | {user.phone_number}}
            )
        )

    async def touch_last_sign_in(self, user_id: UserId) -> None:
        """Record a successful sign-in."""
        with logfire.span("user_service.touch_last_sign_in", user_id=str(user_id)):
            await self.user_repository.touch_last_sign_in(user_id, datetime.now())

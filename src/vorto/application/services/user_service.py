"""User service - technical user persistence."""

import logging
from dataclasses import replace
from uuid import UUID

from vorto.application.ports import UnitOfWork
from vorto.domain.entities import User
from vorto.domain.exceptions import InvalidUser

logger = logging.getLogger(__name__)


class UserService:
    """Creates or updates technical (service) accounts."""

    async def create_or_update_technical_user(
        self, uow: UnitOfWork, user: User, created_by: UUID | None = None
    ) -> User:
        """Persist a technical user within the caller's unit of work."""
        if not user.username or not user.username.strip():
            raise InvalidUser("Technical user has no username")
        if not user.auth_provider_id or not user.auth_provider_id.strip():
            raise InvalidUser(
                f"Technical user [{user.username}] has no authentication provider"
            )

        existing = await uow.users.get_by_username(user.username)
        if existing is not None:
            if not existing.technical_user:
                raise InvalidUser(
                    f"User [{user.username}] already exists and is not a technical user"
                )
            updated = replace(
                existing,
                auth_provider_id=user.auth_provider_id,
                subject=user.subject,
            )
            await uow.users.update(updated)
            logger.info("Updated technical user [%s]", updated.username)
            return updated

        created = replace(user, technical_user=True, created_by=created_by or user.created_by)
        await uow.users.create(created)
        logger.info("Created technical user [%s]", created.username)
        return created

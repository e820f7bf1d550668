"""User repository port."""

from typing import Protocol
from uuid import UUID

from vorto.domain.entities import User


class UserRepository(Protocol):
    """Port for user persistence."""

    async def get_by_id(self, user_id: UUID) -> User | None: ...

    async def get_by_username(self, username: str) -> User | None: ...

    async def list_by_ids(self, user_ids: list[UUID]) -> list[User]: ...

    async def exists(self, user_id: UUID) -> bool: ...

    async def create(self, user: User) -> User: ...

    async def update(self, user: User) -> None: ...

"""Repository-wide (non namespace) role repository port."""

from typing import Protocol
from uuid import UUID


class RepositoryRoleRepository(Protocol):
    """Port for repository-wide roles such as sysadmin, stored as a mask."""

    async def get_roles(self, user_id: UUID) -> int: ...

"""User-namespace role association repository port."""

from typing import Protocol
from uuid import UUID

from vorto.domain.entities import UserNamespaceRoles


class UserNamespaceRoleRepository(Protocol):
    """Port for user-namespace role associations.

    ``role_filter`` selects rows whose mask contains all bits of the filter.
    """

    async def get(self, user_id: UUID, namespace_id: UUID) -> UserNamespaceRoles | None: ...

    async def exists(self, user_id: UUID, namespace_id: UUID) -> bool: ...

    async def save(self, association: UserNamespaceRoles) -> UserNamespaceRoles: ...

    async def delete(self, user_id: UUID, namespace_id: UUID) -> None: ...

    async def delete_by_namespace(self, namespace_id: UUID) -> None: ...

    async def list_by_namespace(
        self, namespace_id: UUID, role_filter: int | None = None
    ) -> list[UserNamespaceRoles]: ...

    async def list_by_user(
        self, user_id: UUID, role_filter: int | None = None
    ) -> list[UserNamespaceRoles]: ...

    async def list_all(self, role_filter: int | None = None) -> list[UserNamespaceRoles]: ...

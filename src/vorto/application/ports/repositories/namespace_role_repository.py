"""Namespace role repository port."""

from typing import Protocol

from vorto.domain.entities import NamespaceRole


class NamespaceRoleRepository(Protocol):
    """Port for the namespace role catalog (read-only)."""

    async def list_all(self) -> list[NamespaceRole]: ...

    async def get_by_name(self, name: str) -> NamespaceRole | None: ...

"""Namespace repository port."""

from typing import Protocol
from uuid import UUID

from vorto.domain.entities import Namespace


class NamespaceRepository(Protocol):
    """Port for namespace persistence. Names are matched case-insensitively."""

    async def get_by_id(self, namespace_id: UUID) -> Namespace | None: ...

    async def get_by_name(self, name: str) -> Namespace | None: ...

    async def list_by_ids(self, namespace_ids: list[UUID]) -> list[Namespace]: ...

    async def list_all(self) -> list[Namespace]: ...

    async def exists(self, namespace_id: UUID) -> bool: ...

    async def count_owned_with_prefix(self, owner_id: UUID, prefix: str) -> int: ...

    async def create(self, namespace: Namespace) -> Namespace: ...

    async def delete(self, namespace_id: UUID) -> None: ...

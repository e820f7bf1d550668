"""Unit of Work port - transactional boundary."""

from collections.abc import AsyncIterator
from typing import Protocol

from vorto.application.ports.repositories import (
    NamespaceRepository,
    NamespaceRoleRepository,
    RepositoryRoleRepository,
    UserNamespaceRoleRepository,
    UserRepository,
)


class UnitOfWork(Protocol):
    """Unit of Work - manages transaction and repository access."""

    @property
    def users(self) -> UserRepository: ...

    @property
    def namespaces(self) -> NamespaceRepository: ...

    @property
    def namespace_roles(self) -> NamespaceRoleRepository: ...

    @property
    def user_namespace_roles(self) -> UserNamespaceRoleRepository: ...

    @property
    def repository_roles(self) -> RepositoryRoleRepository: ...

    async def commit(self) -> None: ...

    async def rollback(self) -> None: ...


class UnitOfWorkFactory(Protocol):
    """Factory for creating UnitOfWork instances."""

    async def __call__(self) -> AsyncIterator[UnitOfWork]: ...

"""PostgreSQL Unit of Work implementation."""

from collections.abc import AsyncIterator
from contextlib import asynccontextmanager

from psycopg_pool import AsyncConnectionPool

from vorto.infrastructure.persistence.postgres.namespace_repository import (
    PostgresNamespaceRepository,
)
from vorto.infrastructure.persistence.postgres.namespace_role_repository import (
    PostgresNamespaceRoleRepository,
)
from vorto.infrastructure.persistence.postgres.repository_role_repository import (
    PostgresRepositoryRoleRepository,
)
from vorto.infrastructure.persistence.postgres.user_namespace_role_repository import (
    PostgresUserNamespaceRoleRepository,
)
from vorto.infrastructure.persistence.postgres.user_repository import (
    PostgresUserRepository,
)


class PostgresUnitOfWork:
    """PostgreSQL Unit of Work - one connection, one transaction."""

    def __init__(self, pool: AsyncConnectionPool) -> None:
        self._pool = pool
        self._conn: object | None = None
        self._conn_cm: object | None = None

    async def __aenter__(self) -> "PostgresUnitOfWork":
        self._conn_cm = self._pool.connection()
        self._conn = await self._conn_cm.__aenter__()
        self._users = PostgresUserRepository(self._conn)
        self._namespaces = PostgresNamespaceRepository(self._conn)
        self._namespace_roles = PostgresNamespaceRoleRepository(self._conn)
        self._user_namespace_roles = PostgresUserNamespaceRoleRepository(self._conn)
        self._repository_roles = PostgresRepositoryRoleRepository(self._conn)
        return self

    async def __aexit__(self, exc_type: object, exc_val: object, exc_tb: object) -> None:
        if exc_type and self._conn:
            await self._conn.rollback()
        if self._conn_cm:
            await self._conn_cm.__aexit__(exc_type, exc_val, exc_tb)

    @property
    def users(self) -> PostgresUserRepository:
        return self._users

    @property
    def namespaces(self) -> PostgresNamespaceRepository:
        return self._namespaces

    @property
    def namespace_roles(self) -> PostgresNamespaceRoleRepository:
        return self._namespace_roles

    @property
    def user_namespace_roles(self) -> PostgresUserNamespaceRoleRepository:
        return self._user_namespace_roles

    @property
    def repository_roles(self) -> PostgresRepositoryRoleRepository:
        return self._repository_roles

    async def commit(self) -> None:
        if self._conn:
            await self._conn.commit()

    async def rollback(self) -> None:
        if self._conn:
            await self._conn.rollback()


def create_uow_factory(pool: AsyncConnectionPool) -> object:
    """Create UnitOfWork factory (async context manager)."""

    @asynccontextmanager
    async def factory() -> AsyncIterator[PostgresUnitOfWork]:
        uow = PostgresUnitOfWork(pool)
        async with uow:
            try:
                yield uow
                await uow.commit()
            except BaseException:
                await uow.rollback()
                raise

    return factory

"""PostgreSQL namespace repository implementation."""

from uuid import UUID

from psycopg import AsyncConnection

from vorto.domain.entities import Namespace

_COLUMNS = "id, name, owner_id, created_at"


def _row_to_namespace(r: tuple) -> Namespace:
    return Namespace(id=r[0], name=r[1], owner_id=r[2], created_at=r[3])


class PostgresNamespaceRepository:
    """Namespace repository implementation. Names are stored lowercase."""

    def __init__(self, conn: AsyncConnection) -> None:
        self._conn = conn

    async def get_by_id(self, namespace_id: UUID) -> Namespace | None:
        cur = await self._conn.execute(
            f"SELECT {_COLUMNS} FROM namespace WHERE id = %s",
            (namespace_id,),
        )
        r = await cur.fetchone()
        return _row_to_namespace(r) if r else None

    async def get_by_name(self, name: str) -> Namespace | None:
        """Get namespace by name, case-insensitive."""
        cur = await self._conn.execute(
            f"SELECT {_COLUMNS} FROM namespace WHERE lower(name) = lower(%s)",
            (name,),
        )
        r = await cur.fetchone()
        return _row_to_namespace(r) if r else None

    async def list_by_ids(self, namespace_ids: list[UUID]) -> list[Namespace]:
        if not namespace_ids:
            return []
        cur = await self._conn.execute(
            f"SELECT {_COLUMNS} FROM namespace WHERE id = ANY(%s) ORDER BY name",
            (list(namespace_ids),),
        )
        rows = await cur.fetchall()
        return [_row_to_namespace(r) for r in rows]

    async def list_all(self) -> list[Namespace]:
        cur = await self._conn.execute(f"SELECT {_COLUMNS} FROM namespace ORDER BY name")
        rows = await cur.fetchall()
        return [_row_to_namespace(r) for r in rows]

    async def exists(self, namespace_id: UUID) -> bool:
        cur = await self._conn.execute(
            "SELECT 1 FROM namespace WHERE id = %s",
            (namespace_id,),
        )
        return await cur.fetchone() is not None

    async def count_owned_with_prefix(self, owner_id: UUID, prefix: str) -> int:
        """Count namespaces owned by user whose name starts with prefix."""
        cur = await self._conn.execute(
            "SELECT count(*) FROM namespace WHERE owner_id = %s AND starts_with(name, %s)",
            (owner_id, prefix.lower()),
        )
        r = await cur.fetchone()
        return r[0]

    async def create(self, namespace: Namespace) -> Namespace:
        await self._conn.execute(
            f"INSERT INTO namespace ({_COLUMNS}) VALUES (%s, %s, %s, %s)",
            (namespace.id, namespace.name, namespace.owner_id, namespace.created_at),
        )
        return namespace

    async def delete(self, namespace_id: UUID) -> None:
        await self._conn.execute(
            "DELETE FROM namespace WHERE id = %s",
            (namespace_id,),
        )

"""PostgreSQL namespace role catalog repository."""

from psycopg import AsyncConnection

from vorto.domain.entities import NamespaceRole


class PostgresNamespaceRoleRepository:
    """Namespace role catalog, read-only."""

    def __init__(self, conn: AsyncConnection) -> None:
        self._conn = conn

    async def list_all(self) -> list[NamespaceRole]:
        """List all roles ordered by bit value."""
        cur = await self._conn.execute(
            "SELECT name, role, privileged FROM namespace_role ORDER BY role"
        )
        rows = await cur.fetchall()
        return [NamespaceRole(name=r[0], value=r[1], privileged=r[2]) for r in rows]

    async def get_by_name(self, name: str) -> NamespaceRole | None:
        cur = await self._conn.execute(
            "SELECT name, role, privileged FROM namespace_role WHERE name = %s",
            (name,),
        )
        r = await cur.fetchone()
        if not r:
            return None
        return NamespaceRole(name=r[0], value=r[1], privileged=r[2])

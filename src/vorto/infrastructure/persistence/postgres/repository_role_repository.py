"""PostgreSQL repository-wide role repository."""

from uuid import UUID

from psycopg import AsyncConnection


class PostgresRepositoryRoleRepository:
    """Repository-wide roles (sysadmin) stored as a mask per user."""

    def __init__(self, conn: AsyncConnection) -> None:
        self._conn = conn

    async def get_roles(self, user_id: UUID) -> int:
        """Role mask of the user, 0 when no row exists."""
        cur = await self._conn.execute(
            "SELECT roles FROM user_repository_roles WHERE user_id = %s",
            (user_id,),
        )
        r = await cur.fetchone()
        return r[0] if r else 0

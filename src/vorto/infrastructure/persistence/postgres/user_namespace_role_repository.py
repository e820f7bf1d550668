"""PostgreSQL user-namespace role association repository."""

from uuid import UUID

from psycopg import AsyncConnection

from vorto.domain.entities import UserNamespaceRoles
from vorto.domain.value_objects import RoleSet

_COLUMNS = "user_id, namespace_id, roles"


def _row_to_association(r: tuple) -> UserNamespaceRoles:
    return UserNamespaceRoles(user_id=r[0], namespace_id=r[1], roles=RoleSet(r[2]))


class PostgresUserNamespaceRoleRepository:
    """Association repository - one row per (user, namespace) with a role mask."""

    def __init__(self, conn: AsyncConnection) -> None:
        self._conn = conn

    async def get(self, user_id: UUID, namespace_id: UUID) -> UserNamespaceRoles | None:
        cur = await self._conn.execute(
            f"SELECT {_COLUMNS} FROM user_namespace_roles "
            "WHERE user_id = %s AND namespace_id = %s",
            (user_id, namespace_id),
        )
        r = await cur.fetchone()
        return _row_to_association(r) if r else None

    async def exists(self, user_id: UUID, namespace_id: UUID) -> bool:
        cur = await self._conn.execute(
            "SELECT 1 FROM user_namespace_roles WHERE user_id = %s AND namespace_id = %s",
            (user_id, namespace_id),
        )
        return await cur.fetchone() is not None

    async def save(self, association: UserNamespaceRoles) -> UserNamespaceRoles:
        """Insert or replace the role mask of the pair."""
        await self._conn.execute(
            f"INSERT INTO user_namespace_roles ({_COLUMNS}) VALUES (%s, %s, %s) "
            "ON CONFLICT (user_id, namespace_id) DO UPDATE SET roles = EXCLUDED.roles",
            (association.user_id, association.namespace_id, int(association.roles)),
        )
        return association

    async def delete(self, user_id: UUID, namespace_id: UUID) -> None:
        await self._conn.execute(
            "DELETE FROM user_namespace_roles WHERE user_id = %s AND namespace_id = %s",
            (user_id, namespace_id),
        )

    async def delete_by_namespace(self, namespace_id: UUID) -> None:
        await self._conn.execute(
            "DELETE FROM user_namespace_roles WHERE namespace_id = %s",
            (namespace_id,),
        )

    async def _list(
        self, column: str | None, key: UUID | None, role_filter: int | None
    ) -> list[UserNamespaceRoles]:
        conditions = []
        params: list[object] = []
        if column:
            conditions.append(f"{column} = %s")
            params.append(key)
        if role_filter:
            conditions.append("(roles & %s) = %s")
            params.extend((role_filter, role_filter))
        where = (" WHERE " + " AND ".join(conditions)) if conditions else ""
        cur = await self._conn.execute(
            f"SELECT {_COLUMNS} FROM user_namespace_roles{where}",
            tuple(params),
        )
        rows = await cur.fetchall()
        return [_row_to_association(r) for r in rows]

    async def list_by_namespace(
        self, namespace_id: UUID, role_filter: int | None = None
    ) -> list[UserNamespaceRoles]:
        return await self._list("namespace_id", namespace_id, role_filter)

    async def list_by_user(
        self, user_id: UUID, role_filter: int | None = None
    ) -> list[UserNamespaceRoles]:
        return await self._list("user_id", user_id, role_filter)

    async def list_all(self, role_filter: int | None = None) -> list[UserNamespaceRoles]:
        return await self._list(None, None, role_filter)

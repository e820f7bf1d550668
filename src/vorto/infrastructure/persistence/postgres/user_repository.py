"""PostgreSQL user repository implementation."""

from uuid import UUID

from psycopg import AsyncConnection

from vorto.domain.entities import User

_COLUMNS = "id, username, auth_provider_id, created_at, technical_user, subject, created_by"


def _row_to_user(r: tuple) -> User:
    return User(
        id=r[0],
        username=r[1],
        auth_provider_id=r[2],
        created_at=r[3],
        technical_user=r[4],
        subject=r[5],
        created_by=r[6],
    )


class PostgresUserRepository:
    """User repository implementation."""

    def __init__(self, conn: AsyncConnection) -> None:
        self._conn = conn

    async def get_by_id(self, user_id: UUID) -> User | None:
        cur = await self._conn.execute(
            f"SELECT {_COLUMNS} FROM vorto_user WHERE id = %s",
            (user_id,),
        )
        r = await cur.fetchone()
        return _row_to_user(r) if r else None

    async def get_by_username(self, username: str) -> User | None:
        cur = await self._conn.execute(
            f"SELECT {_COLUMNS} FROM vorto_user WHERE username = %s",
            (username,),
        )
        r = await cur.fetchone()
        return _row_to_user(r) if r else None

    async def list_by_ids(self, user_ids: list[UUID]) -> list[User]:
        """List users with the given ids, unknown ids are skipped."""
        if not user_ids:
            return []
        cur = await self._conn.execute(
            f"SELECT {_COLUMNS} FROM vorto_user WHERE id = ANY(%s)",
            (list(user_ids),),
        )
        rows = await cur.fetchall()
        return [_row_to_user(r) for r in rows]

    async def exists(self, user_id: UUID) -> bool:
        cur = await self._conn.execute(
            "SELECT 1 FROM vorto_user WHERE id = %s",
            (user_id,),
        )
        return await cur.fetchone() is not None

    async def create(self, user: User) -> User:
        await self._conn.execute(
            f"INSERT INTO vorto_user ({_COLUMNS}) VALUES (%s, %s, %s, %s, %s, %s, %s)",
            (
                user.id,
                user.username,
                user.auth_provider_id,
                user.created_at,
                user.technical_user,
                user.subject,
                user.created_by,
            ),
        )
        return user

    async def update(self, user: User) -> None:
        await self._conn.execute(
            "UPDATE vorto_user SET auth_provider_id=%s, subject=%s, technical_user=%s WHERE id=%s",
            (user.auth_provider_id, user.subject, user.technical_user, user.id),
        )

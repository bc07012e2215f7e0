from __future__ import annotations

from typing import Optional

import psycopg

from kinote.domain.entities import User
from kinote.domain.ports.user_repository import UserRepositoryPort

_USER_COLUMNS = "id, email, name, email_verified_at, created_at"


def _to_user(row: tuple) -> User:
    id_, email, name, verified_at, created_at = row
    return User(
        id=str(id_),
        email=str(email),
        name=name or "",
        email_verified_at=verified_at,
        created_at=created_at,
    )


class PgUserRepository(UserRepositoryPort):
    """
    Postgres implementation of UserRepositoryPort.

    NOTE:
    - This repo is constructed with an *active async connection* supplied by the UoW.
    - It does not commit; the UnitOfWork controls the transaction boundary.
    """

    def __init__(self, conn: psycopg.AsyncConnection) -> None:
        self._conn = conn

    async def get_by_email(self, email: str) -> Optional[User]:
        sql = f"SELECT {_USER_COLUMNS} FROM users WHERE email = LOWER(TRIM(%s))"
        async with self._conn.cursor() as cur:
            await cur.execute(sql, (email,))
            row = await cur.fetchone()
        return _to_user(row) if row else None

    async def get_by_id(self, user_id: str) -> Optional[User]:
        sql = f"SELECT {_USER_COLUMNS} FROM users WHERE id = %s"
        async with self._conn.cursor() as cur:
            await cur.execute(sql, (user_id,))
            row = await cur.fetchone()
        return _to_user(row) if row else None

    async def get_by_email_with_hash(self, email: str) -> Optional[tuple[User, str]]:
        sql = f"""
        SELECT {_USER_COLUMNS}, password_hash
        FROM users
        WHERE email = LOWER(TRIM(%s))
        """
        async with self._conn.cursor() as cur:
            await cur.execute(sql, (email,))
            row = await cur.fetchone()
        if not row:
            return None
        *user_cols, password_hash = row
        return _to_user(tuple(user_cols)), password_hash

    async def create_verified(
        self, *, name: str, email: str, password_hash: str
    ) -> User:
        # An existing row (e.g. a legacy unverified signup) is only marked
        # verified; its name and password are left as they are.
        sql = f"""
        INSERT INTO users (email, name, password_hash, email_verified_at)
        VALUES (LOWER(TRIM(%s)), %s, %s, now())
        ON CONFLICT (email) DO UPDATE
            SET email_verified_at = COALESCE(users.email_verified_at, now())
        RETURNING {_USER_COLUMNS}
        """
        async with self._conn.cursor() as cur:
            await cur.execute(sql, (email, name, password_hash))
            row = await cur.fetchone()

        if not row:
            raise RuntimeError("create_verified returned no row")
        return _to_user(row)

    async def update_password(self, user_id: str, password_hash: str) -> Optional[User]:
        sql = f"""
        UPDATE users SET password_hash = %s
        WHERE id = %s
        RETURNING {_USER_COLUMNS}
        """
        async with self._conn.cursor() as cur:
            await cur.execute(sql, (password_hash, user_id))
            row = await cur.fetchone()
        return _to_user(row) if row else None

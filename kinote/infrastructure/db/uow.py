from __future__ import annotations

import logging
from contextlib import AsyncExitStack
from types import TracebackType
from typing import Optional, Type

import psycopg
from psycopg_pool import AsyncConnectionPool

from kinote.domain.ports.unit_of_work import UnitOfWorkPort
from kinote.infrastructure.db.users_repo import PgUserRepository

logger = logging.getLogger(__name__)


class PgUnitOfWork(UnitOfWorkPort):
    """
    One pooled connection per ``async with`` block.

    Work that is not committed explicitly is rolled back before the connection
    goes back to the pool, so read-only blocks need no commit.
    """

    def __init__(self, pool: AsyncConnectionPool) -> None:
        self._pool = pool
        self._stack: Optional[AsyncExitStack] = None
        self._conn: Optional[psycopg.AsyncConnection] = None
        self._committed = False
        self.db_users: PgUserRepository

    async def __aenter__(self) -> "PgUnitOfWork":
        stack = AsyncExitStack()
        self._conn = await stack.enter_async_context(self._pool.connection())
        self._stack = stack
        self._committed = False
        self.db_users = PgUserRepository(self._conn)
        return self

    async def __aexit__(
        self,
        exc_type: Type[BaseException] | None,
        exc_value: BaseException | None,
        traceback: TracebackType | None,
    ) -> None:
        stack, conn = self._stack, self._conn
        self._stack = self._conn = None
        try:
            if conn is not None and (exc_value is not None or not self._committed):
                try:
                    await conn.rollback()
                except psycopg.Error:
                    logger.warning("rollback failed", exc_info=True)
        finally:
            self._committed = False
            if stack is not None:
                await stack.__aexit__(exc_type, exc_value, traceback)

    async def commit(self) -> None:
        if self._conn is None:
            raise RuntimeError("commit() called outside of 'async with'")
        await self._conn.commit()
        self._committed = True

    async def rollback(self) -> None:
        if self._conn is not None:
            await self._conn.rollback()
        self._committed = False

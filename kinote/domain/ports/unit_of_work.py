from __future__ import annotations

from types import TracebackType
from typing import Protocol, Type

from kinote.domain.ports.user_repository import UserRepositoryPort


class UnitOfWorkPort(Protocol):
    """
    Transaction boundary around the users table.

    A pending registration becomes an account inside one block:

        async with uow as tx:
            user = await tx.db_users.create_verified(name=..., email=..., password_hash=...)
            await tx.commit()

    Leaving the block without commit() (or with an exception) rolls back.
    """

    db_users: UserRepositoryPort

    async def __aenter__(self) -> "UnitOfWorkPort": ...

    async def __aexit__(
        self,
        exc_type: Type[BaseException] | None,
        exc_value: BaseException | None,
        traceback: TracebackType | None,
    ) -> None: ...

    async def commit(self) -> None: ...

    async def rollback(self) -> None: ...

from typing import Callable

from kinote.domain.entities import User
from kinote.domain.errors import EmailNotVerified, InvalidCredentials, UserNotFound
from kinote.domain.ports.unit_of_work import UnitOfWorkPort
from kinote.domain.services import normalize_email


async def login_user(
    uow: UnitOfWorkPort,
    email: str,
    password: str,
    verify_password: Callable[[str, str], bool],
) -> User:
    async with uow as transaction:
        record = await transaction.db_users.get_by_email_with_hash(
            normalize_email(email)
        )
    if not record:
        raise InvalidCredentials()
    user, password_hash = record
    if not verify_password(password, password_hash):
        raise InvalidCredentials()
    if not user.is_verified:
        raise EmailNotVerified(user.email)
    return user


async def get_current_user(uow: UnitOfWorkPort, user_id: str) -> User:
    async with uow as transaction:
        user = await transaction.db_users.get_by_id(user_id)
    if not user:
        raise UserNotFound(user_id)
    return user

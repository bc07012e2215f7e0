from __future__ import annotations

import logging

from kinote.domain.entities import PendingRegistration, User
from kinote.domain.errors import (
    PendingRegistrationNotFound,
    VerificationExpired,
    VerificationMismatch,
)
from kinote.domain.expiring import ExpiringEntry, Verification, VerifyOutcome, verify_secret
from kinote.domain.ports.registration_stores import RegistrationStoresPort
from kinote.domain.ports.unit_of_work import UnitOfWorkPort
from kinote.domain.services import normalize_email, secure_compare

logger = logging.getLogger(__name__)


def _raise_for(result: Verification) -> None:
    if result.outcome is VerifyOutcome.NOT_FOUND:
        raise PendingRegistrationNotFound()
    if result.outcome is VerifyOutcome.EXPIRED:
        raise VerificationExpired()
    if result.outcome is VerifyOutcome.MISMATCH:
        raise VerificationMismatch()


async def confirm_with_code(
    uow: UnitOfWorkPort,
    stores: RegistrationStoresPort,
    email: str,
    code: str,
) -> User:
    normalized_email = normalize_email(email)
    now = stores.now()

    entry = stores.registrations.get(normalized_email)
    if entry is None:
        raise PendingRegistrationNotFound()
    if entry.is_expired(now):
        stores.registrations.discard(normalized_email, entry)
        raise VerificationExpired()

    result = verify_secret(stores.codes, normalized_email, code, now=now)
    if result.outcome is VerifyOutcome.NOT_FOUND:
        # the registration is alive but its code is gone: ask for a new one
        raise VerificationExpired()
    _raise_for(result)
    if not secure_compare(result.entry.payload, entry.secret):
        # code from an attempt that has since been replaced
        stores.codes.discard(normalized_email, result.entry)
        raise VerificationExpired()

    return await _finalize(uow, stores, normalized_email, entry)


async def confirm_with_token(
    uow: UnitOfWorkPort,
    stores: RegistrationStoresPort,
    email: str,
    token: str,
) -> User:
    normalized_email = normalize_email(email)
    result = verify_secret(
        stores.registrations, normalized_email, token, now=stores.now()
    )
    _raise_for(result)
    return await _finalize(uow, stores, normalized_email, result.entry)


async def _finalize(
    uow: UnitOfWorkPort,
    stores: RegistrationStoresPort,
    email: str,
    entry: ExpiringEntry[PendingRegistration],
) -> User:
    # Claim first: of two concurrent confirmations only one gets past here.
    if not stores.registrations.discard(email, entry):
        raise PendingRegistrationNotFound()

    pending = entry.payload
    try:
        async with uow as transaction:
            user = await transaction.db_users.create_verified(
                name=pending.name,
                email=pending.email,
                password_hash=pending.password_hash,
            )
            await transaction.commit()
    except Exception:
        # give the user another try with the same code
        stores.registrations.restore(email, entry)
        raise

    stores.codes.remove(email)
    logger.info("registration confirmed", extra={"email": email, "user_id": user.id})
    return user

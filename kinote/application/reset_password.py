from __future__ import annotations

import logging
from typing import Callable

import kinote.domain.services as domain_services
from kinote.application.email_templates import password_reset_email
from kinote.application.notifications import send_without_failing, ttl_minutes
from kinote.domain.entities import User
from kinote.domain.errors import ResetLinkExpired, ResetLinkInvalid, UserNotFound
from kinote.domain.expiring import ExpiringEntry, VerifyOutcome, verify_secret
from kinote.domain.ports.email_port import EmailPort
from kinote.domain.ports.registration_stores import RegistrationStoresPort
from kinote.domain.ports.unit_of_work import UnitOfWorkPort

logger = logging.getLogger(__name__)


async def request_password_reset(
    uow: UnitOfWorkPort,
    stores: RegistrationStoresPort,
    email_port: EmailPort,
    email: str,
    frontend_url: str,
) -> None:
    """
    Mail a reset link if an account exists. The caller answers the same way
    either way, so nothing here reveals whether the email is known.
    """
    normalized_email = domain_services.normalize_email(email)
    async with uow as transaction:
        user = await transaction.db_users.get_by_email(normalized_email)
    if not user:
        logger.info("password reset for unknown email", extra={"email": normalized_email})
        return

    token = domain_services.generate_verification_token()
    stores.password_resets.put(
        normalized_email,
        ExpiringEntry.issue(
            user.id,
            token,
            ttl_seconds=stores.password_reset_ttl_seconds,
            now=stores.now(),
        ),
    )
    stores.ensure_cleanup()
    logger.info("password reset issued", extra={"user_id": user.id})

    message = password_reset_email(
        name=user.name,
        email=normalized_email,
        token=token,
        frontend_url=frontend_url,
        ttl_minutes=ttl_minutes(stores.password_reset_ttl_seconds),
    )
    await send_without_failing(email_port, to=normalized_email, message=message)


async def reset_password(
    uow: UnitOfWorkPort,
    stores: RegistrationStoresPort,
    email: str,
    token: str,
    new_password: str,
    hash_password: Callable[..., str],
) -> User:
    normalized_email = domain_services.normalize_email(email)
    result = verify_secret(
        stores.password_resets, normalized_email, token, now=stores.now()
    )
    if result.outcome is VerifyOutcome.EXPIRED:
        raise ResetLinkExpired()
    if not result.ok:
        raise ResetLinkInvalid()

    entry = result.entry
    # single use: a second request with the same link finds nothing
    if not stores.password_resets.discard(normalized_email, entry):
        raise ResetLinkInvalid()

    try:
        async with uow as transaction:
            user = await transaction.db_users.update_password(
                entry.payload, hash_password(new_password)
            )
            if user is None:
                raise UserNotFound(entry.payload)
            await transaction.commit()
    except UserNotFound:
        raise
    except Exception:
        stores.password_resets.restore(normalized_email, entry)
        raise

    logger.info("password reset completed", extra={"user_id": user.id})
    return user

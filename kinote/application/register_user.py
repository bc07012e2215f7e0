from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import datetime
from typing import Callable

import kinote.domain.services as domain_services
from kinote.application.email_templates import verification_email
from kinote.application.notifications import send_without_failing, ttl_minutes
from kinote.domain.entities import PendingRegistration
from kinote.domain.errors import EmailAlreadyRegistered
from kinote.domain.expiring import ExpiringEntry
from kinote.domain.ports.email_port import EmailPort
from kinote.domain.ports.registration_stores import RegistrationStoresPort
from kinote.domain.ports.unit_of_work import UnitOfWorkPort

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class PendingReceipt:
    email: str
    expires_at: datetime
    email_sent: bool


async def begin_registration(
    uow: UnitOfWorkPort,
    stores: RegistrationStoresPort,
    email_port: EmailPort,
    name: str,
    email: str,
    password: str,
    hash_password: Callable[..., str],
    frontend_url: str,
) -> PendingReceipt:
    normalized_email = domain_services.normalize_email(email)

    async with uow as transaction:
        existing = await transaction.db_users.get_by_email(normalized_email)
    if existing:
        raise EmailAlreadyRegistered(normalized_email)

    pending = PendingRegistration(
        name=name.strip(),
        email=normalized_email,
        password_hash=hash_password(password),
    )
    token = domain_services.generate_verification_token()
    code = domain_services.generate_6digit_code()

    # A new attempt replaces whatever was pending for this email.
    now = stores.now()
    registration = ExpiringEntry.issue(
        pending, token, ttl_seconds=stores.registration_ttl_seconds, now=now
    )
    stores.registrations.put(normalized_email, registration)
    stores.codes.put(
        normalized_email,
        # the code only confirms the registration it was mailed for
        ExpiringEntry.issue(token, code, ttl_seconds=stores.code_ttl_seconds, now=now),
    )
    stores.ensure_cleanup()
    logger.info("pending registration stored", extra={"email": normalized_email})

    message = verification_email(
        name=pending.name,
        email=normalized_email,
        code=code,
        token=token,
        frontend_url=frontend_url,
        ttl_minutes=ttl_minutes(stores.code_ttl_seconds),
    )
    sent = await send_without_failing(email_port, to=normalized_email, message=message)
    return PendingReceipt(
        email=normalized_email, expires_at=registration.expires_at, email_sent=sent
    )


def store_registration(
    stores: RegistrationStoresPort,
    name: str,
    email: str,
    password: str,
    token: str,
    hash_password: Callable[..., str],
) -> datetime:
    """
    Keep a pending signup under a token chosen by the client (the link flow
    of the web frontend). No code is issued and no email is sent here; a code
    mailed for an earlier attempt is dropped with the attempt it belonged to.
    """
    normalized_email = domain_services.normalize_email(email)
    pending = PendingRegistration(
        name=name.strip(),
        email=normalized_email,
        password_hash=hash_password(password),
    )
    entry = ExpiringEntry.issue(
        pending,
        token,
        ttl_seconds=stores.registration_ttl_seconds,
        now=stores.now(),
    )
    stores.registrations.put(normalized_email, entry)
    stores.codes.remove(normalized_email)
    stores.ensure_cleanup()
    return entry.expires_at

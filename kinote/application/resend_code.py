from __future__ import annotations

import logging
from datetime import datetime

import kinote.domain.services as domain_services
from kinote.application.email_templates import resend_code_email
from kinote.application.notifications import send_without_failing, ttl_minutes
from kinote.domain.errors import PendingRegistrationNotFound, VerificationExpired
from kinote.domain.expiring import ExpiringEntry
from kinote.domain.ports.email_port import EmailPort
from kinote.domain.ports.registration_stores import RegistrationStoresPort

logger = logging.getLogger(__name__)


async def resend_verification_code(
    stores: RegistrationStoresPort,
    email_port: EmailPort,
    email: str,
) -> datetime:
    normalized_email = domain_services.normalize_email(email)
    now = stores.now()

    registration = stores.registrations.get(normalized_email)
    if registration is None:
        raise PendingRegistrationNotFound()
    if registration.is_expired(now):
        stores.registrations.discard(normalized_email, registration)
        raise VerificationExpired()

    code = domain_services.generate_6digit_code()
    entry = ExpiringEntry.issue(
        registration.secret, code, ttl_seconds=stores.code_ttl_seconds, now=now
    )
    stores.codes.put(normalized_email, entry)
    stores.ensure_cleanup()
    logger.info("verification code reissued", extra={"email": normalized_email})

    message = resend_code_email(
        name=registration.payload.name,
        code=code,
        ttl_minutes=ttl_minutes(stores.code_ttl_seconds),
    )
    await send_without_failing(email_port, to=normalized_email, message=message)
    return entry.expires_at

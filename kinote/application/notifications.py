from __future__ import annotations

import logging

from kinote.application.email_templates import EmailMessage
from kinote.domain.ports.email_port import EmailPort

logger = logging.getLogger(__name__)


async def send_without_failing(
    email_port: EmailPort, *, to: str, message: EmailMessage
) -> bool:
    """
    Deliver a registration email. A relay failure is logged and reported as
    False; the pending entry it refers to stays valid and can be resent.
    """
    try:
        await email_port.send(to=to, subject=message.subject, body=message.body)
    except Exception:  # noqa: BLE001
        logger.warning(
            "registration email failed",
            extra={"to": to, "subject": message.subject},
            exc_info=True,
        )
        return False
    return True


def ttl_minutes(ttl_seconds: float) -> int:
    return max(1, int(ttl_seconds // 60))

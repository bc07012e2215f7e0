import logging

from kinote.domain.ports.registration_stores import RegistrationStoresPort
from kinote.domain.services import normalize_email

logger = logging.getLogger(__name__)


def cancel_registration(stores: RegistrationStoresPort, email: str) -> None:
    """Drop any pending signup and code for this email. Safe to repeat."""
    normalized_email = normalize_email(email)
    stores.forget(normalized_email)
    logger.info("pending registration cancelled", extra={"email": normalized_email})

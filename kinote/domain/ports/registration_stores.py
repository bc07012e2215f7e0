from __future__ import annotations

from datetime import datetime
from typing import Protocol

from kinote.domain.entities import PendingRegistration
from kinote.domain.ports.expiring_store import ExpiringStorePort


class RegistrationStoresPort(Protocol):
    """
    The short-lived secrets of the auth flows, keyed by normalized email.

    - registrations: PendingRegistration, secret is the confirmation link token
    - codes: the 6-digit code as secret, payload is the link token of the
      registration it was issued for
    - password_resets: user id, secret is the reset link token
    """

    registrations: ExpiringStorePort[PendingRegistration]
    codes: ExpiringStorePort[str]
    password_resets: ExpiringStorePort[str]
    registration_ttl_seconds: float
    code_ttl_seconds: float
    password_reset_ttl_seconds: float

    def now(self) -> datetime:
        """Current instant from the injected clock."""

    def ensure_cleanup(self) -> bool:
        """Start the periodic sweep if it is not running yet."""

    def forget(self, email: str) -> None:
        """Drop the pending registration and its code."""

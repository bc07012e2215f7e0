"""
Expiring entries and the verification gate.

A signup that has not been confirmed yet lives in memory as an ExpiringEntry:
an opaque payload, the secret the user has to echo back (a 6-digit code or a
link token) and an absolute deadline. The entry is invalid at and after
``expires_at``.

Gate outcomes for one key:

    absent   -> NOT_FOUND
    pending  -> EXPIRED    deadline reached, entry removed on read
    pending  -> MISMATCH   entry kept, caller may retry until the deadline
    pending  -> VERIFIED   entry kept, caller finalizes and removes it

Secrets are compared as strings, never as numbers, so "012345" and "12345"
stay different codes.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime, timedelta
from enum import Enum
from typing import TYPE_CHECKING, Generic, Optional, TypeVar

from kinote.domain.services import secure_compare

if TYPE_CHECKING:
    from kinote.domain.ports.expiring_store import ExpiringStorePort

P = TypeVar("P")


@dataclass(frozen=True)
class ExpiringEntry(Generic[P]):
    payload: P
    secret: str
    expires_at: datetime

    @classmethod
    def issue(
        cls, payload: P, secret: str, *, ttl_seconds: float, now: datetime
    ) -> "ExpiringEntry[P]":
        return cls(
            payload=payload,
            secret=secret,
            expires_at=now + timedelta(seconds=ttl_seconds),
        )

    def is_expired(self, now: datetime) -> bool:
        return self.expires_at <= now


class VerifyOutcome(str, Enum):
    VERIFIED = "verified"
    NOT_FOUND = "not_found"
    EXPIRED = "expired"
    MISMATCH = "mismatch"


@dataclass(frozen=True)
class Verification(Generic[P]):
    outcome: VerifyOutcome
    entry: Optional[ExpiringEntry[P]] = None

    @property
    def ok(self) -> bool:
        return self.outcome is VerifyOutcome.VERIFIED


def verify_secret(
    store: "ExpiringStorePort[P]",
    key: str,
    candidate: str,
    *,
    now: datetime,
) -> Verification[P]:
    """
    Check ``candidate`` against the secret stored under ``key``.

    Expired entries are deleted here (compare-and-delete, so a replacement
    written in the meantime survives). A successful check does not consume
    the entry; the caller removes it once the account exists.
    """
    entry = store.get(key)
    if entry is None:
        return Verification(VerifyOutcome.NOT_FOUND)

    if entry.is_expired(now):
        store.discard(key, entry)
        return Verification(VerifyOutcome.EXPIRED)

    if not secure_compare(candidate, entry.secret):
        return Verification(VerifyOutcome.MISMATCH)

    return Verification(VerifyOutcome.VERIFIED, entry)

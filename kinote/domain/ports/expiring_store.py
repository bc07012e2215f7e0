from __future__ import annotations

from datetime import datetime
from typing import Iterable, Optional, Protocol, TypeVar

from kinote.domain.expiring import ExpiringEntry

P = TypeVar("P")


class ExpiringStorePort(Protocol[P]):
    name: str

    def put(self, key: str, entry: ExpiringEntry[P]) -> None:
        """Insert or replace the entry for key (no merge)."""

    def get(self, key: str) -> Optional[ExpiringEntry[P]]:
        """Return the entry for key whatever its expiry, or None."""

    def remove(self, key: str) -> None:
        """Delete the entry for key; no-op when absent."""

    def discard(self, key: str, entry: ExpiringEntry[P]) -> bool:
        """Delete key only while it still holds this exact entry."""

    def restore(self, key: str, entry: ExpiringEntry[P]) -> bool:
        """Put entry back only if key is vacant."""

    def list_all(self) -> Iterable[tuple[str, datetime]]:
        """(key, expires_at) pairs, without payloads or secrets."""

    def evict_expired(self, now: datetime) -> int:
        """Drop entries expiring strictly before now; return how many."""

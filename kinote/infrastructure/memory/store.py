from __future__ import annotations

import logging
import threading
from datetime import datetime
from typing import Iterator, Optional, TypeVar

from kinote.domain.expiring import ExpiringEntry
from kinote.domain.ports.expiring_store import ExpiringStorePort
from kinote.domain.services import normalize_email

logger = logging.getLogger(__name__)

P = TypeVar("P")


class EntryListing:
    """
    Restartable view of ``(key, expires_at)`` pairs.
    Each iteration snapshots the store when it starts.
    """

    def __init__(self, store: "InMemoryExpiringStore") -> None:
        self._store = store

    def __iter__(self) -> Iterator[tuple[str, datetime]]:
        yield from self._store._snapshot()

    def __len__(self) -> int:
        return len(self._store)


class InMemoryExpiringStore(ExpiringStorePort[P]):
    """
    Process-local map of normalized email -> ExpiringEntry.

    NOTE:
    - Volatile: nothing survives a restart. Codes and tokens are short-lived
      and can be requested again.
    - Keys are normalized on every call, callers may pass raw emails.
    - One RLock guards all access so the store is safe from threadpool
      dependencies as well as from the event loop.
    """

    def __init__(self, name: str) -> None:
        self.name = name
        self._entries: dict[str, ExpiringEntry[P]] = {}
        self._lock = threading.RLock()

    @staticmethod
    def _key(key: str) -> str:
        return normalize_email(key)

    def put(self, key: str, entry: ExpiringEntry[P]) -> None:
        with self._lock:
            self._entries[self._key(key)] = entry

    def get(self, key: str) -> Optional[ExpiringEntry[P]]:
        with self._lock:
            return self._entries.get(self._key(key))

    def remove(self, key: str) -> None:
        with self._lock:
            self._entries.pop(self._key(key), None)

    def discard(self, key: str, entry: ExpiringEntry[P]) -> bool:
        k = self._key(key)
        with self._lock:
            if self._entries.get(k) is not entry:
                return False
            del self._entries[k]
            return True

    def restore(self, key: str, entry: ExpiringEntry[P]) -> bool:
        k = self._key(key)
        with self._lock:
            if k in self._entries:
                return False
            self._entries[k] = entry
            return True

    def list_all(self) -> EntryListing:
        return EntryListing(self)

    def _snapshot(self) -> list[tuple[str, datetime]]:
        with self._lock:
            return [(k, e.expires_at) for k, e in self._entries.items()]

    def evict_expired(self, now: datetime) -> int:
        expired: list[str] = []
        with self._lock:
            for k, entry in self._entries.items():
                try:
                    if entry.expires_at < now:
                        expired.append(k)
                except Exception:  # noqa: BLE001
                    # one unreadable entry must not stop the sweep
                    logger.warning(
                        "skipping entry with unreadable expiry",
                        extra={"store": self.name},
                        exc_info=True,
                    )
            for k in expired:
                del self._entries[k]
        return len(expired)

    def __len__(self) -> int:
        with self._lock:
            return len(self._entries)

    def __contains__(self, key: object) -> bool:
        if not isinstance(key, str):
            return False
        with self._lock:
            return self._key(key) in self._entries

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime

from kinote.domain.entities import PendingRegistration
from kinote.domain.ports.clock import ClockPort
from kinote.domain.ports.registration_stores import RegistrationStoresPort
from kinote.infrastructure.clock import SystemClock
from kinote.infrastructure.memory.cleanup import CleanupScheduler
from kinote.infrastructure.memory.store import InMemoryExpiringStore


@dataclass
class RegistrationStores(RegistrationStoresPort):
    """
    The process-wide in-memory stores of the auth flows.

    Built once per application (see kinote.main.create_app) and handed to
    handlers through dependencies; nothing else should construct stores.
    One scheduler sweeps all three.
    """

    registrations: InMemoryExpiringStore[PendingRegistration]
    codes: InMemoryExpiringStore[str]
    password_resets: InMemoryExpiringStore[str]
    scheduler: CleanupScheduler
    clock: ClockPort
    registration_ttl_seconds: float = 600
    code_ttl_seconds: float = 600
    password_reset_ttl_seconds: float = 3600
    auto_start_cleanup: bool = True

    @classmethod
    def create(
        cls,
        *,
        clock: ClockPort | None = None,
        registration_ttl_seconds: float = 600,
        code_ttl_seconds: float = 600,
        password_reset_ttl_seconds: float = 3600,
        cleanup_interval_seconds: float = 60.0,
        auto_start_cleanup: bool = True,
    ) -> "RegistrationStores":
        clock = clock or SystemClock()
        registrations: InMemoryExpiringStore[PendingRegistration] = (
            InMemoryExpiringStore("pending_registrations")
        )
        codes: InMemoryExpiringStore[str] = InMemoryExpiringStore(
            "verification_codes"
        )
        password_resets: InMemoryExpiringStore[str] = InMemoryExpiringStore(
            "password_resets"
        )
        scheduler = CleanupScheduler(
            (registrations, codes, password_resets),
            clock=clock,
            interval_seconds=cleanup_interval_seconds,
        )
        return cls(
            registrations=registrations,
            codes=codes,
            password_resets=password_resets,
            scheduler=scheduler,
            clock=clock,
            registration_ttl_seconds=registration_ttl_seconds,
            code_ttl_seconds=code_ttl_seconds,
            password_reset_ttl_seconds=password_reset_ttl_seconds,
            auto_start_cleanup=auto_start_cleanup,
        )

    def now(self) -> datetime:
        return self.clock.now()

    def ensure_cleanup(self) -> bool:
        """Start the sweep on first write if the lifespan has not already."""
        if not self.auto_start_cleanup:
            return False
        return self.scheduler.start()

    def forget(self, email: str) -> None:
        self.registrations.remove(email)
        self.codes.remove(email)

from dataclasses import dataclass
from datetime import datetime

from kinote.domain.services import normalize_email


@dataclass
class User:
    id: str | None = None
    email: str | None = None
    name: str = ""
    email_verified_at: datetime | None = None
    created_at: datetime | None = None

    def __post_init__(self):
        if self.email:
            self.email = normalize_email(self.email)
            if not self.email:
                raise ValueError("email cannot be empty")
        else:
            raise ValueError("email is required")

    @property
    def is_verified(self) -> bool:
        return self.email_verified_at is not None

    def mark_verified(self, when: datetime) -> None:
        if self.email_verified_at is None:
            self.email_verified_at = when


@dataclass(frozen=True)
class PendingRegistration:
    """Signup data held in memory until the email is confirmed."""

    name: str
    email: str
    password_hash: str

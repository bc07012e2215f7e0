from __future__ import annotations

from typing import Optional, Protocol

from kinote.domain.entities import User


class UserRepositoryPort(Protocol):
    async def get_by_email(self, email: str) -> Optional[User]:
        """Return the user with this (normalized) email, or None."""

    async def get_by_id(self, user_id: str) -> Optional[User]:
        """Return the user with this id, or None."""

    async def get_by_email_with_hash(self, email: str) -> tuple[User, str] | None:
        """
        Fetch user by email together with the stored password hash.
        Return None if not found.
        """

    async def create_verified(
        self, *, name: str, email: str, password_hash: str
    ) -> User:
        """
        Insert a user whose email is already confirmed.
        If a row with this email exists, mark it verified instead and
        return it unchanged otherwise.
        """

    async def update_password(self, user_id: str, password_hash: str) -> Optional[User]:
        """Replace the stored hash; return the user, or None if the id is unknown."""

"""Port for password hashing and verification."""

from __future__ import annotations

from typing import Protocol


class PasswordHasherPort(Protocol):
    """Salted hashing and constant-time comparison contract."""

    def hash_password(self, password: str, *, rounds: int | None = None) -> str:
        """Hash plaintext for storage using `rounds` or the hasher default."""

    def verify_password(self, *, password: str, password_hash: str) -> bool:
        """Verify plaintext against stored hash."""

    async def hash_password_async(self, password: str, *, rounds: int | None = None) -> str:
        """Hash plaintext without blocking the event loop."""

    async def verify_password_async(self, *, password: str, password_hash: str) -> bool:
        """Verify plaintext against stored hash without blocking the event loop."""

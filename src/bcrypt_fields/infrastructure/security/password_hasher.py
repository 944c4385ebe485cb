"""Bcrypt password hasher adapter."""

from __future__ import annotations

import asyncio

import bcrypt

from bcrypt_fields.application.ports.password_hasher_port import PasswordHasherPort

DEFAULT_ROUNDS = 12


class BcryptPasswordHasher(PasswordHasherPort):
    """Password hashing adapter using bcrypt."""

    def __init__(self, *, default_rounds: int = DEFAULT_ROUNDS) -> None:
        self.default_rounds = default_rounds

    def hash_password(self, password: str, *, rounds: int | None = None) -> str:
        salt = bcrypt.gensalt(rounds=rounds or self.default_rounds)
        return bcrypt.hashpw(password.encode("utf-8"), salt).decode("utf-8")

    def verify_password(self, *, password: str, password_hash: str) -> bool:
        try:
            return bcrypt.checkpw(password.encode("utf-8"), password_hash.encode("utf-8"))
        except ValueError:
            return False

    async def hash_password_async(self, password: str, *, rounds: int | None = None) -> str:
        """Hash in a worker thread so concurrent field hashes overlap."""

        return await asyncio.to_thread(self.hash_password, password, rounds=rounds)

    async def verify_password_async(self, *, password: str, password_hash: str) -> bool:
        return await asyncio.to_thread(
            self.verify_password,
            password=password,
            password_hash=password_hash,
        )

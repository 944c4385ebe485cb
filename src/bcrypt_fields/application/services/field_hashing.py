"""Field-aware adapter over the hashing capability."""

from __future__ import annotations

import logging

from bcrypt_fields.application.ports.password_hasher_port import PasswordHasherPort
from bcrypt_fields.domain.errors import HashingFailure
from bcrypt_fields.domain.protected_field import ProtectedField

logger = logging.getLogger(__name__)


class FieldHashing:
    """Hash and compare protected field values with per-field cost resolution."""

    def __init__(
        self,
        *,
        password_hasher: PasswordHasherPort,
        default_rounds: int | None = None,
    ) -> None:
        self._password_hasher = password_hasher
        self._default_rounds = default_rounds

    @property
    def password_hasher(self) -> PasswordHasherPort:
        return self._password_hasher

    def rounds_for(self, field: ProtectedField) -> int | None:
        """Return field override, else schema default, else None for the hasher default."""

        return field.rounds or self._default_rounds

    async def hash(self, field: ProtectedField, plaintext: str) -> str:
        _require_text(plaintext, field=field, role="plaintext")
        try:
            return await self._password_hasher.hash_password_async(
                plaintext,
                rounds=self.rounds_for(field),
            )
        except Exception as error:
            raise _hashing_failure("hash", field=field, error=error) from error

    def hash_sync(self, field: ProtectedField, plaintext: str) -> str:
        _require_text(plaintext, field=field, role="plaintext")
        try:
            return self._password_hasher.hash_password(plaintext, rounds=self.rounds_for(field))
        except Exception as error:
            raise _hashing_failure("hash", field=field, error=error) from error

    async def compare(self, field: ProtectedField, candidate: str, hashed: object) -> bool:
        _require_text(candidate, field=field, role="candidate")
        password_hash = _require_text(hashed, field=field, role="stored hash")
        try:
            return await self._password_hasher.verify_password_async(
                password=candidate,
                password_hash=password_hash,
            )
        except Exception as error:
            raise _hashing_failure("compare", field=field, error=error) from error

    def compare_sync(self, field: ProtectedField, candidate: str, hashed: object) -> bool:
        _require_text(candidate, field=field, role="candidate")
        password_hash = _require_text(hashed, field=field, role="stored hash")
        try:
            return self._password_hasher.verify_password(
                password=candidate,
                password_hash=password_hash,
            )
        except Exception as error:
            raise _hashing_failure("compare", field=field, error=error) from error


def _require_text(value: object, *, field: ProtectedField, role: str) -> str:
    if not isinstance(value, str):
        raise HashingFailure(
            f"{role} for {field.path} must be a string, got {type(value).__name__}",
            field_path=field.path,
        )
    return value


def _hashing_failure(action: str, *, field: ProtectedField, error: Exception) -> HashingFailure:
    logger.warning(
        "field_%s_failed field=%s error_type=%s",
        action,
        field.path,
        type(error).__name__,
    )
    return HashingFailure(f"failed to {action} {field.path}: {error}", field_path=field.path)

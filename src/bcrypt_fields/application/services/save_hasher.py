"""Pre-save hook hashing modified protected fields of one document."""

from __future__ import annotations

import asyncio
import logging

from bcrypt_fields.application.ports.schema_port import DocumentPort
from bcrypt_fields.application.services.field_hashing import FieldHashing
from bcrypt_fields.domain.errors import HashingFailure
from bcrypt_fields.domain.protected_field import ProtectedField, ProtectedFieldSet

logger = logging.getLogger(__name__)


class SaveTimeHasher:
    """Replace modified protected plaintexts with their hashes before a save proceeds."""

    def __init__(self, *, fields: ProtectedFieldSet, hashing: FieldHashing) -> None:
        self._fields = fields
        self._hashing = hashing

    def changed_fields(self, document: DocumentPort) -> list[ProtectedField]:
        """Return modified protected fields holding a value, in declared order."""

        return [
            field
            for field in self._fields
            if document.is_modified(field.path) and document.get(field.path) is not None
        ]

    async def __call__(self, document: DocumentPort) -> None:
        changed = self.changed_fields(document)
        if not changed:
            return

        logger.debug(
            "save_hashing_started fields=%s",
            ",".join(field.path for field in changed),
        )
        outcomes = await asyncio.gather(
            *(self._hash_into(document, field) for field in changed),
            return_exceptions=True,
        )
        failures = [outcome for outcome in outcomes if isinstance(outcome, BaseException)]
        if failures:
            logger.warning(
                "save_hashing_aborted failed=%s total=%s",
                len(failures),
                len(changed),
            )
            first = failures[0]
            if isinstance(first, HashingFailure):
                raise first
            raise HashingFailure(f"save hashing failed: {first}") from first

        logger.debug("save_hashing_completed count=%s", len(changed))

    async def _hash_into(self, document: DocumentPort, field: ProtectedField) -> None:
        hashed = await self._hashing.hash(field, document.get(field.path))
        document.set(field.path, hashed)

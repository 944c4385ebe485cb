"""Pre-update hook hashing protected fields inside update payloads."""

from __future__ import annotations

import asyncio
import logging
from collections.abc import MutableMapping
from typing import Any

from bcrypt_fields.application.ports.schema_port import UpdateQueryPort
from bcrypt_fields.application.services.field_hashing import FieldHashing
from bcrypt_fields.domain.errors import HashingFailure
from bcrypt_fields.domain.protected_field import ProtectedField, ProtectedFieldSet

SET_OPERATOR = "$set"

logger = logging.getLogger(__name__)


def effective_payload(update: MutableMapping[str, Any]) -> MutableMapping[str, Any]:
    """Return the mapping scanned for protected fields.

    When the payload carries a `$set` mapping only that mapping is scanned; protected
    keys given at the top level next to `$set` are left as they are.
    """

    nested = update.get(SET_OPERATOR)
    if isinstance(nested, MutableMapping):
        return nested
    return update


class UpdateTimeHasher:
    """Hash protected values of an update payload before the update is sent."""

    def __init__(self, *, fields: ProtectedFieldSet, hashing: FieldHashing) -> None:
        self._fields = fields
        self._hashing = hashing

    def changed_fields(self, payload: MutableMapping[str, Any]) -> list[ProtectedField]:
        """Return protected fields present with a non-empty value, in declared order."""

        return [field for field in self._fields if payload.get(field.path)]

    async def __call__(self, query: UpdateQueryPort) -> None:
        update = query.get_update()
        if not update:
            return
        payload = effective_payload(update)
        changed = self.changed_fields(payload)
        if not changed:
            return

        logger.debug(
            "update_hashing_started fields=%s",
            ",".join(field.path for field in changed),
        )
        outcomes = await asyncio.gather(
            *(self._hashing.hash(field, payload[field.path]) for field in changed),
            return_exceptions=True,
        )
        failures = [outcome for outcome in outcomes if isinstance(outcome, BaseException)]
        if failures:
            logger.warning(
                "update_hashing_aborted failed=%s total=%s",
                len(failures),
                len(changed),
            )
            first = failures[0]
            if isinstance(first, HashingFailure):
                raise first
            raise HashingFailure(f"update hashing failed: {first}") from first

        for field, hashed in zip(changed, outcomes, strict=True):
            payload[field.path] = hashed
        logger.debug("update_hashing_completed count=%s", len(changed))

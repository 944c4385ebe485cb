"""Install per-field encrypt/verify operations onto a schema."""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Callable, Coroutine
from dataclasses import dataclass
from typing import Any, TypeVar

from bcrypt_fields.application.ports.schema_port import DocumentPort, SchemaPort
from bcrypt_fields.application.services.field_hashing import FieldHashing
from bcrypt_fields.domain.protected_field import ProtectedField

T = TypeVar("T")
CompletionCallback = Callable[[BaseException | None, Any], None]

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class FieldAccessors:
    """Generated operations for one protected field."""

    field: ProtectedField
    encrypt: Callable[..., asyncio.Task[str]]
    verify: Callable[..., asyncio.Task[bool]]
    verify_sync: Callable[[DocumentPort, str], bool]


def deliver(
    coroutine: Coroutine[Any, Any, T],
    callback: CompletionCallback | None = None,
) -> asyncio.Task[T]:
    """Schedule one operation and notify `callback(error, result)` from the same task."""

    task = asyncio.create_task(coroutine)
    if callback is not None:

        def _notify(done: asyncio.Task[T]) -> None:
            if done.cancelled():
                callback(asyncio.CancelledError(), None)
                return
            error = done.exception()
            callback(error, None if error is not None else done.result())

        task.add_done_callback(_notify)
    return task


def install_field_accessors(
    schema: SchemaPort,
    field: ProtectedField,
    hashing: FieldHashing,
) -> FieldAccessors:
    """Attach `encrypt_<field>`, `verify_<field>` and `verify_<field>_sync` to `schema`."""

    def encrypt(
        plaintext: str,
        callback: CompletionCallback | None = None,
    ) -> asyncio.Task[str]:
        return deliver(hashing.hash(field, plaintext), callback)

    def verify(
        document: DocumentPort,
        candidate: str,
        callback: CompletionCallback | None = None,
    ) -> asyncio.Task[bool]:
        return deliver(hashing.compare(field, candidate, document.get(field.path)), callback)

    def verify_sync(document: DocumentPort, candidate: str) -> bool:
        return hashing.compare_sync(field, candidate, document.get(field.path))

    encrypt.__name__ = field.encrypt_name
    verify.__name__ = field.verify_name
    verify_sync.__name__ = field.verify_sync_name

    schema.statics[field.encrypt_name] = encrypt
    schema.methods[field.verify_name] = verify
    schema.methods[field.verify_sync_name] = verify_sync

    if schema.path(field.path) is None:
        schema.add(_nested_string_declaration(field))
        logger.debug("protected_field_declared field=%s", field.path)

    return FieldAccessors(field=field, encrypt=encrypt, verify=verify, verify_sync=verify_sync)


def _nested_string_declaration(field: ProtectedField) -> dict[str, Any]:
    declaration: dict[str, Any] = {"type": str}
    for segment in reversed(field.segments):
        declaration = {segment: declaration}
    return declaration

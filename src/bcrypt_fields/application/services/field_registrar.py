"""Resolve which schema fields are protected by hashing."""

from __future__ import annotations

import logging
from collections.abc import Mapping, Sequence
from typing import Any

from bcrypt_fields.application.ports.schema_port import SchemaPort
from bcrypt_fields.domain.errors import FieldConfigurationError
from bcrypt_fields.domain.protected_field import (
    DEFAULT_FIELD_PATH,
    ProtectedField,
    ProtectedFieldSet,
)

FIELD_MARKER_OPTION = "bcrypt"
ROUNDS_OPTION = "rounds"

logger = logging.getLogger(__name__)


def normalize_rounds(value: object, *, source: str) -> int | None:
    """Return a cost factor or None when unset; `0` counts as unset."""

    if value is None:
        return None
    if isinstance(value, bool) or not isinstance(value, int):
        raise FieldConfigurationError(f"{source} must be an integer, got {value!r}")
    if value < 0:
        raise FieldConfigurationError(f"{source} cannot be negative, got {value}")
    return value or None


def normalize_field_option(fields: object) -> list[str]:
    """Normalize the `fields`/`field` option into an ordered list of unique paths."""

    if fields is None:
        return []
    if isinstance(fields, str):
        candidates: Sequence[object] = [fields]
    elif isinstance(fields, Sequence):
        candidates = fields
    else:
        raise FieldConfigurationError(
            f"fields must be a string or a sequence of strings, got {type(fields).__name__}"
        )

    paths: list[str] = []
    for candidate in candidates:
        if not isinstance(candidate, str):
            raise FieldConfigurationError(
                f"protected field entries must be strings, got {type(candidate).__name__}"
            )
        if candidate not in paths:
            paths.append(candidate)
    return paths


def resolve_protected_fields(
    schema: SchemaPort,
    *,
    fields: object = None,
    rounds: object = None,
) -> ProtectedFieldSet:
    """Build the protected field set from options, per-path markers and the default."""

    paths = normalize_field_option(fields)
    for name, options in schema.each_path():
        if options.get(FIELD_MARKER_OPTION) and name not in paths:
            paths.append(name)

    if not paths:
        paths.append(DEFAULT_FIELD_PATH)

    default_rounds = normalize_rounds(rounds, source="rounds option")
    protected = ProtectedFieldSet(
        fields=tuple(
            ProtectedField(path=path, rounds=_declared_rounds(schema.path(path), path=path))
            for path in paths
        ),
        default_rounds=default_rounds,
    )
    logger.debug(
        "protected_fields_resolved fields=%s default_rounds=%s",
        ",".join(protected.paths),
        default_rounds,
    )
    return protected


def _declared_rounds(options: Mapping[str, Any] | None, *, path: str) -> int | None:
    if options is None:
        return None
    return normalize_rounds(options.get(ROUNDS_OPTION), source=f"rounds of {path}")

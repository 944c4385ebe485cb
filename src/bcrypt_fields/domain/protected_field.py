"""Protected field descriptors and nested path helpers."""

from __future__ import annotations

import re
from collections.abc import Iterator, Mapping, MutableMapping
from dataclasses import dataclass, field
from typing import Any

from bcrypt_fields.domain.errors import FieldConfigurationError

DEFAULT_FIELD_PATH = "password"

_CAMEL_BOUNDARY = re.compile(r"(?<=[a-z0-9])(?=[A-Z])")


def split_field_path(path: str) -> tuple[str, ...]:
    """Split one dotted path into segments and reject blank segments."""

    if not isinstance(path, str):
        raise FieldConfigurationError(
            f"protected field path must be a string, got {type(path).__name__}"
        )
    segments = tuple(path.split("."))
    if not path or any(not segment for segment in segments):
        raise FieldConfigurationError(f"invalid protected field path: {path!r}")
    return segments


def field_token(segments: tuple[str, ...]) -> str:
    """Return the capitalized accessor token, e.g. `profile.password` -> `ProfilePassword`."""

    return "".join(segment[0].upper() + segment[1:] for segment in segments)


def attribute_suffix(segments: tuple[str, ...]) -> str:
    """Return the snake_case suffix used to name generated operations."""

    return "_".join(_CAMEL_BOUNDARY.sub("_", segment).lower() for segment in segments)


@dataclass(frozen=True)
class ProtectedField:
    """One field whose plaintext is replaced by its hash before persistence."""

    path: str
    rounds: int | None = None
    segments: tuple[str, ...] = field(init=False)
    token: str = field(init=False)
    attribute_suffix: str = field(init=False)

    def __post_init__(self) -> None:
        segments = split_field_path(self.path)
        object.__setattr__(self, "segments", segments)
        object.__setattr__(self, "token", field_token(segments))
        object.__setattr__(self, "attribute_suffix", attribute_suffix(segments))

    @property
    def encrypt_name(self) -> str:
        return f"encrypt_{self.attribute_suffix}"

    @property
    def verify_name(self) -> str:
        return f"verify_{self.attribute_suffix}"

    @property
    def verify_sync_name(self) -> str:
        return f"verify_{self.attribute_suffix}_sync"


@dataclass(frozen=True)
class ProtectedFieldSet:
    """Ordered, duplicate-free protected fields of one schema."""

    fields: tuple[ProtectedField, ...]
    default_rounds: int | None = None

    def __post_init__(self) -> None:
        if not self.fields:
            raise FieldConfigurationError("protected field set cannot be empty")
        paths = [item.path for item in self.fields]
        if len(set(paths)) != len(paths):
            raise FieldConfigurationError(f"duplicate protected field paths: {paths}")

    def __iter__(self) -> Iterator[ProtectedField]:
        return iter(self.fields)

    def __len__(self) -> int:
        return len(self.fields)

    @property
    def paths(self) -> tuple[str, ...]:
        return tuple(item.path for item in self.fields)

    def get(self, path: str) -> ProtectedField | None:
        for item in self.fields:
            if item.path == path:
                return item
        return None


def get_nested(data: Mapping[str, Any], segments: tuple[str, ...]) -> Any:
    """Return the value stored at `segments` or None when any level is missing."""

    current: Any = data
    for segment in segments:
        if not isinstance(current, Mapping) or segment not in current:
            return None
        current = current[segment]
    return current


def set_nested(data: MutableMapping[str, Any], segments: tuple[str, ...], value: Any) -> None:
    """Store `value` at `segments`, creating intermediate mappings as needed."""

    current = data
    for segment in segments[:-1]:
        child = current.get(segment)
        if not isinstance(child, MutableMapping):
            child = {}
            current[segment] = child
        current = child
    current[segments[-1]] = value

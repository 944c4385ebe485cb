"""Ports for the document-modeling host that the field-hashing extension plugs into."""

from __future__ import annotations

from collections.abc import Awaitable, Callable, Iterator, Mapping
from typing import Any, Protocol

SAVE_OPERATION = "save"
UPDATE_OPERATION = "update"
FIND_ONE_AND_UPDATE_OPERATION = "find_one_and_update"
UPDATE_OPERATIONS = (UPDATE_OPERATION, FIND_ONE_AND_UPDATE_OPERATION)

PreHook = Callable[[Any], Awaitable[None]]


class DocumentPort(Protocol):
    """Document instance capabilities required by save-time hashing and verification."""

    def get(self, path: str) -> Any:
        """Return value stored at dotted path or None."""

    def set(self, path: str, value: Any) -> None:
        """Store value at dotted path."""

    def is_modified(self, path: str) -> bool:
        """Return whether the path changed since the document was loaded or created."""


class UpdateQueryPort(Protocol):
    """In-flight update operation exposing its mutable payload."""

    def get_update(self) -> dict[str, Any]:
        """Return the update payload; mutations are sent with the update."""


class SchemaPort(Protocol):
    """Schema definition capabilities used at definition time."""

    statics: dict[str, Callable[..., Any]]
    methods: dict[str, Callable[..., Any]]

    def path(self, name: str) -> Mapping[str, Any] | None:
        """Return declaration options for a dotted path or None when undeclared."""

    def each_path(self) -> Iterator[tuple[str, Mapping[str, Any]]]:
        """Yield every declared dotted path with its declaration options."""

    def add(self, definition: Mapping[str, Any]) -> None:
        """Declare additional, possibly nested, paths."""

    def pre(self, operation: str, hook: PreHook) -> None:
        """Register an async hook awaited before the operation is committed."""

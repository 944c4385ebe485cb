"""Declarative document schema with statics, methods and pre-write hooks."""

from __future__ import annotations

from collections import defaultdict
from collections.abc import Callable, Iterator, Mapping
from typing import Any, TypeVar

from bcrypt_fields.application.ports.schema_port import (
    SAVE_OPERATION,
    UPDATE_OPERATIONS,
    PreHook,
    SchemaPort,
)

R = TypeVar("R")
_HOOK_OPERATIONS = frozenset({SAVE_OPERATION, *UPDATE_OPERATIONS})


def _is_leaf(value: object) -> bool:
    return isinstance(value, type) or (isinstance(value, Mapping) and "type" in value)


class DocumentSchema(SchemaPort):
    """Schema of nested document paths.

    A definition maps names to a type (`{"email": str}`), to declaration options
    carrying a `type` key (`{"password": {"type": str, "rounds": 10}}`) or to a
    nested definition (`{"profile": {"pin": str}}`). Paths are addressed with dots.
    """

    def __init__(self, definition: Mapping[str, Any] | None = None) -> None:
        self._paths: dict[str, dict[str, Any]] = {}
        self._hooks: dict[str, list[PreHook]] = defaultdict(list)
        self.statics: dict[str, Callable[..., Any]] = {}
        self.methods: dict[str, Callable[..., Any]] = {}
        if definition:
            self.add(definition)

    def add(self, definition: Mapping[str, Any], *, prefix: str = "") -> None:
        for name, value in definition.items():
            path = f"{prefix}{name}"
            if _is_leaf(value):
                options = {"type": value} if isinstance(value, type) else dict(value)
                self._paths[path] = options
            elif isinstance(value, Mapping):
                self.add(value, prefix=f"{path}.")
            else:
                raise TypeError(f"invalid declaration for {path}: {value!r}")

    def path(self, name: str) -> Mapping[str, Any] | None:
        return self._paths.get(name)

    def each_path(self) -> Iterator[tuple[str, Mapping[str, Any]]]:
        yield from list(self._paths.items())

    def pre(self, operation: str, hook: PreHook) -> None:
        if operation not in _HOOK_OPERATIONS:
            raise ValueError(f"unsupported hook operation: {operation}")
        self._hooks[operation].append(hook)

    def hooks_for(self, operation: str) -> tuple[PreHook, ...]:
        return tuple(self._hooks.get(operation, ()))

    def plugin(
        self,
        plugin: Callable[[DocumentSchema, Mapping[str, Any]], R],
        options: Mapping[str, Any] | None = None,
    ) -> R:
        """Apply one plugin function to this schema and return its result."""

        return plugin(self, options or {})

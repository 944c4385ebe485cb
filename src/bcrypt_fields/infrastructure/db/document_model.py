"""Document instances with nested data and modified-path tracking."""

from __future__ import annotations

import copy
from collections.abc import Mapping
from typing import Any, ClassVar
from uuid import UUID, uuid4

from bcrypt_fields.application.ports.schema_port import DocumentPort
from bcrypt_fields.domain.protected_field import get_nested, set_nested
from bcrypt_fields.infrastructure.db.document_schema import DocumentSchema


def _segments(path: str) -> tuple[str, ...]:
    return tuple(path.split("."))


class Document(DocumentPort):
    """One document of a model created by `create_model`."""

    schema: ClassVar[DocumentSchema]

    def __init__(
        self,
        data: Mapping[str, Any] | None = None,
        *,
        document_id: UUID | None = None,
    ) -> None:
        self.id = document_id or uuid4()
        self.is_new = True
        self._data: dict[str, Any] = {}
        self._modified: set[str] = set()
        for path, value in (data or {}).items():
            self.set(path, value)

    @classmethod
    def from_persisted(cls, *, document_id: UUID, body: Mapping[str, Any]) -> Document:
        """Rebuild a loaded document without marking any path as modified."""

        document = cls(document_id=document_id)
        document._data = copy.deepcopy(dict(body))
        document.is_new = False
        return document

    def get(self, path: str) -> Any:
        return get_nested(self._data, _segments(path))

    def set(self, path: str, value: Any) -> None:
        if not self.is_new and self.get(path) == value:
            return
        set_nested(self._data, _segments(path), copy.deepcopy(value))
        self._modified.add(path)

    def is_modified(self, path: str) -> bool:
        return any(
            modified == path
            or modified.startswith(f"{path}.")
            or path.startswith(f"{modified}.")
            for modified in self._modified
        )

    @property
    def modified_paths(self) -> frozenset[str]:
        return frozenset(self._modified)

    def mark_persisted(self) -> None:
        """Reset modified tracking after a successful write."""

        self.is_new = False
        self._modified.clear()

    def to_dict(self) -> dict[str, Any]:
        return copy.deepcopy(self._data)

    def __repr__(self) -> str:
        return f"{type(self).__name__}(id={self.id}, paths={sorted(self._data)})"


def create_model(name: str, schema: DocumentSchema) -> type[Document]:
    """Create a `Document` subclass exposing schema statics and methods."""

    namespace: dict[str, Any] = {"schema": schema}
    namespace.update({key: staticmethod(value) for key, value in schema.statics.items()})
    namespace.update(schema.methods)
    return type(name, (Document,), namespace)

"""SQLAlchemy-backed document repository running schema pre-write hooks."""

from __future__ import annotations

import copy
import logging
from collections.abc import Mapping
from typing import Any, cast
from uuid import UUID

import sqlalchemy as sa
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from bcrypt_fields.application.ports.schema_port import (
    FIND_ONE_AND_UPDATE_OPERATION,
    SAVE_OPERATION,
    UPDATE_OPERATION,
    UpdateQueryPort,
)
from bcrypt_fields.application.services.update_hasher import SET_OPERATOR
from bcrypt_fields.domain.protected_field import get_nested, set_nested
from bcrypt_fields.infrastructure.db.document_model import Document
from bcrypt_fields.infrastructure.db.metadata import documents

ID_FILTER_KEY = "_id"

logger = logging.getLogger(__name__)


class UnsupportedUpdateOperatorError(ValueError):
    """Raised when an update payload uses an operator other than `$set`."""


class UpdateQuery(UpdateQueryPort):
    """In-flight update handed to pre-update hooks."""

    def __init__(
        self,
        *,
        operation: str,
        where: Mapping[str, Any],
        update: Mapping[str, Any],
    ) -> None:
        self.operation = operation
        self.where = dict(where)
        self._update = copy.deepcopy(dict(update))

    def get_update(self) -> dict[str, Any]:
        return self._update


class SqlAlchemyDocumentRepository:
    """Persist documents of one model as JSON rows of a collection.

    Update `where` filters are equality matches on dotted paths (or `_id`) evaluated over the
    collection rows in Python.
    """

    def __init__(
        self,
        session_factory: async_sessionmaker[AsyncSession],
        model: type[Document],
        *,
        collection: str | None = None,
    ) -> None:
        self._session_factory = session_factory
        self._model = model
        self._collection = collection or model.__name__.lower()

    async def save(self, document: Document) -> Document:
        """Run save hooks, then insert or update the document.

        A failing hook aborts the save before any SQL is issued.
        """

        for hook in self._model.schema.hooks_for(SAVE_OPERATION):
            await hook(document)

        body = document.to_dict()
        async with self._session_factory() as session:
            if document.is_new:
                await session.execute(
                    sa.insert(documents).values(
                        id=document.id,
                        collection=self._collection,
                        body=body,
                    )
                )
            else:
                await session.execute(
                    sa.update(documents)
                    .where(documents.c.id == document.id)
                    .values(body=body, updated_at=sa.func.current_timestamp())
                )
            await session.commit()

        logger.info(
            "document_saved collection=%s document_id=%s created=%s",
            self._collection,
            document.id,
            document.is_new,
        )
        document.mark_persisted()
        return document

    async def get(self, document_id: UUID) -> Document | None:
        statement = sa.select(documents.c.id, documents.c.body).where(
            documents.c.collection == self._collection,
            documents.c.id == document_id,
        )
        async with self._session_factory() as session:
            result = await session.execute(statement)

        row = result.mappings().first()
        if row is None:
            return None
        return self._to_document(row)

    async def update(self, *, where: Mapping[str, Any], update: Mapping[str, Any]) -> int:
        """Apply `update` to every matching document and return the match count."""

        query = UpdateQuery(operation=UPDATE_OPERATION, where=where, update=update)
        updated = await self._apply(query, limit=None)
        return len(updated)

    async def find_one_and_update(
        self,
        *,
        where: Mapping[str, Any],
        update: Mapping[str, Any],
    ) -> Document | None:
        """Apply `update` to the first matching document and return it updated."""

        query = UpdateQuery(
            operation=FIND_ONE_AND_UPDATE_OPERATION,
            where=where,
            update=update,
        )
        updated = await self._apply(query, limit=1)
        return updated[0] if updated else None

    async def _apply(self, query: UpdateQuery, *, limit: int | None) -> list[Document]:
        for hook in self._model.schema.hooks_for(query.operation):
            await hook(query)

        payload = query.get_update()
        statement = sa.select(documents.c.id, documents.c.body).where(
            documents.c.collection == self._collection,
        )
        updated: list[Document] = []
        async with self._session_factory() as session:
            result = await session.execute(statement)
            for row in result.mappings().all():
                if limit is not None and len(updated) >= limit:
                    break
                if not _matches(row, query.where):
                    continue
                body = _apply_update(cast(dict[str, Any], row["body"]), payload)
                await session.execute(
                    sa.update(documents)
                    .where(documents.c.id == row["id"])
                    .values(body=body, updated_at=sa.func.current_timestamp())
                )
                updated.append(
                    self._model.from_persisted(document_id=_to_uuid(row["id"]), body=body)
                )
            await session.commit()

        logger.info(
            "documents_updated collection=%s operation=%s count=%s",
            self._collection,
            query.operation,
            len(updated),
        )
        return updated

    def _to_document(self, row: sa.RowMapping) -> Document:
        return self._model.from_persisted(
            document_id=_to_uuid(row["id"]),
            body=cast(dict[str, Any], row["body"]),
        )


def _to_uuid(raw: object) -> UUID:
    return raw if isinstance(raw, UUID) else UUID(str(raw))


def _matches(row: sa.RowMapping, where: Mapping[str, Any]) -> bool:
    for path, expected in where.items():
        if path == ID_FILTER_KEY:
            if _to_uuid(row["id"]) != _to_uuid(expected):
                return False
        elif get_nested(row["body"], tuple(path.split("."))) != expected:
            return False
    return True


def _apply_update(body: dict[str, Any], payload: Mapping[str, Any]) -> dict[str, Any]:
    updated = copy.deepcopy(body)
    for key, value in payload.items():
        if key == SET_OPERATOR:
            for path, nested_value in value.items():
                set_nested(updated, tuple(path.split(".")), copy.deepcopy(nested_value))
        elif key.startswith("$"):
            raise UnsupportedUpdateOperatorError(f"unsupported update operator: {key}")
        else:
            set_nested(updated, tuple(key.split(".")), copy.deepcopy(value))
    return updated

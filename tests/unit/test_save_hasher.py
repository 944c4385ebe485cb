from __future__ import annotations

import asyncio
from typing import Any

import pytest

from bcrypt_fields.application.services.field_hashing import FieldHashing
from bcrypt_fields.application.services.save_hasher import SaveTimeHasher
from bcrypt_fields.domain.errors import HashingFailure
from bcrypt_fields.domain.protected_field import ProtectedField, ProtectedFieldSet


class GatedPasswordHasher:
    """Hashes complete only once `expected` hashes are in flight together."""

    def __init__(self, *, expected: int, fail_on: frozenset[str] = frozenset()) -> None:
        self.expected = expected
        self.fail_on = fail_on
        self.in_flight = 0
        self.max_in_flight = 0
        self.started: list[str] = []
        self._release = asyncio.Event()

    def hash_password(self, password: str, *, rounds: int | None = None) -> str:
        if password in self.fail_on:
            raise ValueError("hash backend unavailable")
        return f"hashed:{rounds}:{password}"

    def verify_password(self, *, password: str, password_hash: str) -> bool:
        return password_hash.split(":", 2)[2] == password

    async def hash_password_async(self, password: str, *, rounds: int | None = None) -> str:
        self.started.append(password)
        self.in_flight += 1
        self.max_in_flight = max(self.max_in_flight, self.in_flight)
        if self.in_flight >= self.expected:
            self._release.set()
        await self._release.wait()
        self.in_flight -= 1
        return self.hash_password(password, rounds=rounds)

    async def verify_password_async(self, *, password: str, password_hash: str) -> bool:
        return self.verify_password(password=password, password_hash=password_hash)


class FakeDocument:
    def __init__(self, values: dict[str, Any], *, modified: set[str]) -> None:
        self.values = values
        self.modified = modified

    def get(self, path: str) -> Any:
        return self.values.get(path)

    def set(self, path: str, value: Any) -> None:
        self.values[path] = value

    def is_modified(self, path: str) -> bool:
        return path in self.modified


def _fields(*paths: str, default_rounds: int | None = None) -> ProtectedFieldSet:
    return ProtectedFieldSet(
        fields=tuple(ProtectedField(path=path) for path in paths),
        default_rounds=default_rounds,
    )


def _hasher(fields: ProtectedFieldSet, password_hasher: GatedPasswordHasher) -> SaveTimeHasher:
    hashing = FieldHashing(password_hasher=password_hasher, default_rounds=fields.default_rounds)
    return SaveTimeHasher(fields=fields, hashing=hashing)


@pytest.mark.asyncio
async def test_unmodified_document_is_left_untouched() -> None:
    password_hasher = GatedPasswordHasher(expected=1)
    save_hasher = _hasher(_fields("password"), password_hasher)
    document = FakeDocument({"password": "hashed:None:secret"}, modified=set())

    await save_hasher(document)

    assert password_hasher.started == []
    assert document.values == {"password": "hashed:None:secret"}


@pytest.mark.asyncio
async def test_only_modified_fields_are_hashed() -> None:
    password_hasher = GatedPasswordHasher(expected=1)
    save_hasher = _hasher(_fields("password", "pin", default_rounds=5), password_hasher)
    document = FakeDocument(
        {"password": "hashed:5:old", "pin": "1234"},
        modified={"pin"},
    )

    await save_hasher(document)

    assert password_hasher.started == ["1234"]
    assert document.values == {"password": "hashed:5:old", "pin": "hashed:5:1234"}


@pytest.mark.asyncio
async def test_modified_fields_hash_concurrently_in_declared_order() -> None:
    password_hasher = GatedPasswordHasher(expected=3)
    save_hasher = _hasher(_fields("password", "pin", "profile.answer"), password_hasher)
    document = FakeDocument(
        {"password": "secret", "pin": "1234", "profile.answer": "blue"},
        modified={"password", "pin", "profile.answer"},
    )

    await asyncio.wait_for(save_hasher(document), timeout=1)

    assert password_hasher.started == ["secret", "1234", "blue"]
    assert password_hasher.max_in_flight == 3
    assert document.values == {
        "password": "hashed:None:secret",
        "pin": "hashed:None:1234",
        "profile.answer": "hashed:None:blue",
    }


@pytest.mark.asyncio
async def test_single_failure_aborts_after_all_hashes_settle() -> None:
    password_hasher = GatedPasswordHasher(expected=2, fail_on=frozenset({"1234"}))
    save_hasher = _hasher(_fields("password", "pin"), password_hasher)
    document = FakeDocument(
        {"password": "secret", "pin": "1234"},
        modified={"password", "pin"},
    )

    with pytest.raises(HashingFailure) as error:
        await asyncio.wait_for(save_hasher(document), timeout=1)

    assert error.value.field_path == "pin"
    assert password_hasher.in_flight == 0
    assert document.values["password"] == "hashed:None:secret"
    assert document.values["pin"] == "1234"


@pytest.mark.asyncio
async def test_modified_field_without_value_is_skipped() -> None:
    password_hasher = GatedPasswordHasher(expected=1)
    save_hasher = _hasher(_fields("password", "profile.pin"), password_hasher)
    document = FakeDocument({"password": "secret"}, modified={"password", "profile.pin"})

    await asyncio.wait_for(save_hasher(document), timeout=1)

    assert password_hasher.started == ["secret"]
    assert document.values == {"password": "hashed:None:secret"}

from __future__ import annotations

import pytest

from bcrypt_fields.config.settings import load_settings
from bcrypt_fields.domain.errors import FieldConfigurationError
from bcrypt_fields.infrastructure.db.document_model import create_model
from bcrypt_fields.infrastructure.db.document_schema import DocumentSchema
from bcrypt_fields.infrastructure.security.password_hasher import BcryptPasswordHasher
from bcrypt_fields.plugin import bcrypt_plugin


class FakePasswordHasher:
    def hash_password(self, password: str, *, rounds: int | None = None) -> str:
        return f"hashed:{rounds}:{password}"

    def verify_password(self, *, password: str, password_hash: str) -> bool:
        return password_hash.split(":", 2)[2] == password

    async def hash_password_async(self, password: str, *, rounds: int | None = None) -> str:
        return self.hash_password(password, rounds=rounds)

    async def verify_password_async(self, *, password: str, password_hash: str) -> bool:
        return self.verify_password(password=password, password_hash=password_hash)


def test_default_plugin_protects_password_field() -> None:
    schema = DocumentSchema({"email": str})

    installed = schema.plugin(bcrypt_plugin, {"password_hasher": FakePasswordHasher()})

    assert installed.fields.paths == ("password",)
    assert schema.path("password") == {"type": str}
    assert set(schema.statics) == {"encrypt_password"}
    assert set(schema.methods) == {"verify_password", "verify_password_sync"}
    assert len(schema.hooks_for("save")) == 1
    assert schema.hooks_for("update") == schema.hooks_for("find_one_and_update")


def test_explicit_fields_generate_named_operations() -> None:
    schema = DocumentSchema({"email": str})

    installed = schema.plugin(
        bcrypt_plugin,
        {"fields": ["password", "profile.pin"], "password_hasher": FakePasswordHasher()},
    )
    User = create_model("User", schema)

    assert [field.token for field in installed.fields] == ["Password", "ProfilePin"]
    for name in (
        "encrypt_password",
        "encrypt_profile_pin",
        "verify_password",
        "verify_profile_pin",
        "verify_profile_pin_sync",
    ):
        assert callable(getattr(User, name))
    assert installed.accessors_for("profile.pin").field.path == "profile.pin"
    with pytest.raises(KeyError):
        installed.accessors_for("email")


def test_singular_field_option_is_accepted() -> None:
    schema = DocumentSchema()

    installed = schema.plugin(
        bcrypt_plugin,
        {"field": "secret", "password_hasher": FakePasswordHasher()},
    )

    assert installed.fields.paths == ("secret",)


def test_unknown_option_fails_fast() -> None:
    with pytest.raises(FieldConfigurationError):
        DocumentSchema().plugin(bcrypt_plugin, {"feilds": ["password"]})


@pytest.mark.asyncio
async def test_save_hook_and_generated_methods_round_trip() -> None:
    schema = DocumentSchema({"email": str, "password": {"type": str, "rounds": 9}})
    schema.plugin(
        bcrypt_plugin,
        {"rounds": 5, "fields": ["password", "pin"], "password_hasher": FakePasswordHasher()},
    )
    User = create_model("User", schema)
    user = User({"email": "a@example.org", "password": "secret", "pin": "1234"})

    for hook in schema.hooks_for("save"):
        await hook(user)

    assert user.get("password") == "hashed:9:secret"
    assert user.get("pin") == "hashed:5:1234"
    assert await user.verify_password("secret") is True
    assert user.verify_pin_sync("1234") is True
    assert user.verify_pin_sync("0000") is False
    assert await User.encrypt_pin("42") == "hashed:5:42"


def test_default_hasher_uses_configured_rounds(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("BCRYPT_DEFAULT_ROUNDS", "4")
    load_settings.cache_clear()
    try:
        installed = DocumentSchema().plugin(bcrypt_plugin)
    finally:
        load_settings.cache_clear()

    password_hasher = installed.hashing.password_hasher
    assert isinstance(password_hasher, BcryptPasswordHasher)
    assert password_hasher.default_rounds == 4

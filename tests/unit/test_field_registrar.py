from __future__ import annotations

import pytest

from bcrypt_fields.application.services.field_registrar import (
    normalize_field_option,
    resolve_protected_fields,
)
from bcrypt_fields.domain.errors import FieldConfigurationError
from bcrypt_fields.infrastructure.db.document_schema import DocumentSchema


def test_defaults_to_password_without_configuration_or_markers() -> None:
    schema = DocumentSchema({"email": str})

    protected = resolve_protected_fields(schema)

    assert protected.paths == ("password",)
    assert protected.default_rounds is None


def test_explicit_fields_keep_order_and_drop_duplicates() -> None:
    schema = DocumentSchema({"email": str})

    protected = resolve_protected_fields(
        schema,
        fields=["password", "profile.pin", "password"],
    )

    assert protected.paths == ("password", "profile.pin")
    assert [field.token for field in protected] == ["Password", "ProfilePin"]


def test_single_string_field_is_accepted() -> None:
    protected = resolve_protected_fields(DocumentSchema(), fields="secret")

    assert protected.paths == ("secret",)


def test_marked_paths_are_appended_after_configured_fields() -> None:
    schema = DocumentSchema(
        {
            "email": str,
            "apiKey": {"type": str, "bcrypt": True},
            "profile": {"pin": {"type": str, "bcrypt": True}},
            "password": {"type": str, "bcrypt": True},
        }
    )

    protected = resolve_protected_fields(schema, fields=["password"])

    assert protected.paths == ("password", "apiKey", "profile.pin")


def test_markers_alone_replace_the_default_field() -> None:
    schema = DocumentSchema({"pin": {"type": str, "bcrypt": True}})

    assert resolve_protected_fields(schema).paths == ("pin",)


def test_cost_factor_override_is_read_from_path_declaration() -> None:
    schema = DocumentSchema(
        {
            "password": {"type": str, "rounds": 6},
            "pin": str,
        }
    )

    protected = resolve_protected_fields(schema, fields=["password", "pin"], rounds=5)

    assert protected.default_rounds == 5
    assert protected.get("password").rounds == 6  # type: ignore[union-attr]
    assert protected.get("pin").rounds is None  # type: ignore[union-attr]


def test_zero_rounds_means_unset() -> None:
    protected = resolve_protected_fields(DocumentSchema(), rounds=0)

    assert protected.default_rounds is None


@pytest.mark.parametrize("fields", [42, ["password", 7], {"password": True}])
def test_non_string_field_entries_fail_fast(fields: object) -> None:
    with pytest.raises(FieldConfigurationError):
        normalize_field_option(fields)


@pytest.mark.parametrize("rounds", ["10", 1.5, True, -1])
def test_invalid_rounds_fail_fast(rounds: object) -> None:
    with pytest.raises(FieldConfigurationError):
        resolve_protected_fields(DocumentSchema(), rounds=rounds)


def test_invalid_declared_rounds_fail_fast() -> None:
    schema = DocumentSchema({"password": {"type": str, "rounds": "high"}})

    with pytest.raises(FieldConfigurationError):
        resolve_protected_fields(schema)

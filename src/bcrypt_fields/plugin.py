"""Schema plugin wiring field registration, accessors and write hooks."""

from __future__ import annotations

import logging
from collections.abc import Mapping
from dataclasses import dataclass
from typing import Any

from bcrypt_fields.application.ports.password_hasher_port import PasswordHasherPort
from bcrypt_fields.application.ports.schema_port import (
    SAVE_OPERATION,
    UPDATE_OPERATIONS,
    SchemaPort,
)
from bcrypt_fields.application.services.accessor_installer import (
    FieldAccessors,
    install_field_accessors,
)
from bcrypt_fields.application.services.field_hashing import FieldHashing
from bcrypt_fields.application.services.field_registrar import resolve_protected_fields
from bcrypt_fields.application.services.save_hasher import SaveTimeHasher
from bcrypt_fields.application.services.update_hasher import UpdateTimeHasher
from bcrypt_fields.config.settings import load_settings
from bcrypt_fields.domain.errors import FieldConfigurationError
from bcrypt_fields.domain.protected_field import ProtectedFieldSet
from bcrypt_fields.infrastructure.security.password_hasher import BcryptPasswordHasher

_KNOWN_OPTIONS = frozenset({"fields", "field", "rounds", "password_hasher"})

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class BcryptFields:
    """Result of applying the plugin to one schema."""

    fields: ProtectedFieldSet
    hashing: FieldHashing
    accessors: Mapping[str, FieldAccessors]
    save_hasher: SaveTimeHasher
    update_hasher: UpdateTimeHasher

    def accessors_for(self, path: str) -> FieldAccessors:
        """Return generated operations for one protected path."""

        try:
            return self.accessors[path]
        except KeyError:
            raise KeyError(f"{path} is not a protected field") from None


def bcrypt_plugin(schema: SchemaPort, options: Mapping[str, Any] | None = None) -> BcryptFields:
    """Protect schema fields by hashing them before save and update operations.

    Recognized options: `fields` (or `field`) as a dotted path or a sequence of them,
    `rounds` as the schema-level default cost factor and `password_hasher` to replace
    the bcrypt hasher.
    """

    options = dict(options or {})
    unknown = set(options) - _KNOWN_OPTIONS
    if unknown:
        raise FieldConfigurationError(f"unknown bcrypt plugin options: {sorted(unknown)}")

    fields_option = options.get("fields")
    if fields_option is None:
        fields_option = options.get("field")

    protected = resolve_protected_fields(
        schema,
        fields=fields_option,
        rounds=options.get("rounds"),
    )
    password_hasher: PasswordHasherPort | None = options.get("password_hasher")
    if password_hasher is None:
        password_hasher = BcryptPasswordHasher(
            default_rounds=load_settings().bcrypt_default_rounds,
        )
    hashing = FieldHashing(
        password_hasher=password_hasher,
        default_rounds=protected.default_rounds,
    )

    accessors = {
        field.path: install_field_accessors(schema, field, hashing) for field in protected
    }

    save_hasher = SaveTimeHasher(fields=protected, hashing=hashing)
    update_hasher = UpdateTimeHasher(fields=protected, hashing=hashing)
    schema.pre(SAVE_OPERATION, save_hasher)
    for operation in UPDATE_OPERATIONS:
        schema.pre(operation, update_hasher)

    logger.info("bcrypt_fields_installed fields=%s", ",".join(protected.paths))
    return BcryptFields(
        fields=protected,
        hashing=hashing,
        accessors=accessors,
        save_hasher=save_hasher,
        update_hasher=update_hasher,
    )

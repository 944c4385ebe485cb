"""Error types raised by the field-hashing extension."""

from __future__ import annotations


class FieldConfigurationError(TypeError):
    """Raised when protected-field configuration is invalid at definition time."""


class HashingFailure(RuntimeError):
    """Raised when the hashing capability fails to hash or compare a field value."""

    def __init__(self, message: str, *, field_path: str | None = None) -> None:
        super().__init__(message)
        self.field_path = field_path

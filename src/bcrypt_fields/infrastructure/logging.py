"""Shared logging configuration for the command-line tool and host processes."""

from __future__ import annotations

import logging

_LOG_FORMAT = "%(asctime)s %(levelname)s [%(name)s] %(message)s"
_PACKAGE_LOGGER = "bcrypt_fields"


def configure_logging(*, level: str, package_level: str | None = None) -> None:
    """Configure root logging and optionally a separate level for extension loggers."""

    logging.basicConfig(level=_resolve_level(level), format=_LOG_FORMAT)
    if package_level is not None:
        logging.getLogger(_PACKAGE_LOGGER).setLevel(_resolve_level(package_level))


def _resolve_level(level: str) -> int:
    normalized_level = level.strip().upper() if level.strip() else "INFO"
    resolved = getattr(logging, normalized_level, logging.INFO)
    return resolved if isinstance(resolved, int) else logging.INFO

"""bcrypt-fields command-line entrypoint."""

from __future__ import annotations

import argparse
import logging
import sys
from collections.abc import Sequence
from typing import TextIO

from bcrypt_fields.application.services.field_hashing import FieldHashing
from bcrypt_fields.config.settings import Settings, load_settings
from bcrypt_fields.domain.errors import HashingFailure
from bcrypt_fields.domain.protected_field import DEFAULT_FIELD_PATH, ProtectedField
from bcrypt_fields.infrastructure.logging import configure_logging
from bcrypt_fields.infrastructure.security.password_hasher import BcryptPasswordHasher

EXIT_OK = 0
EXIT_MISMATCH = 1
EXIT_FAILURE = 2

logger = logging.getLogger(__name__)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="bcrypt-fields",
        description="Hash or verify a protected field value read from stdin.",
    )
    subcommands = parser.add_subparsers(dest="command", required=True)

    hash_command = subcommands.add_parser("hash", help="print the bcrypt hash of stdin")
    hash_command.add_argument("--rounds", type=int, default=None, help="cost factor override")
    hash_command.add_argument("--field", default=DEFAULT_FIELD_PATH, help="field path label")

    verify_command = subcommands.add_parser("verify", help="check stdin against a stored hash")
    verify_command.add_argument("password_hash", help="stored bcrypt hash")
    verify_command.add_argument("--field", default=DEFAULT_FIELD_PATH, help="field path label")
    return parser


def run(
    argv: Sequence[str] | None = None,
    *,
    stdin: TextIO | None = None,
    stdout: TextIO | None = None,
    settings: Settings | None = None,
) -> int:
    """Execute one CLI command and return its exit code."""

    arguments = build_parser().parse_args(argv)
    stdin = stdin or sys.stdin
    stdout = stdout or sys.stdout
    settings = settings or load_settings()
    configure_logging(
        level=settings.log_level,
        package_level=settings.bcrypt_fields_log_level,
    )

    hashing = FieldHashing(
        password_hasher=BcryptPasswordHasher(default_rounds=settings.bcrypt_default_rounds),
    )
    value = stdin.read().rstrip("\r\n")

    try:
        if arguments.command == "hash":
            field = ProtectedField(path=arguments.field, rounds=arguments.rounds)
            stdout.write(hashing.hash_sync(field, value) + "\n")
            return EXIT_OK

        field = ProtectedField(path=arguments.field)
        if hashing.compare_sync(field, value, arguments.password_hash):
            stdout.write("match\n")
            return EXIT_OK
        stdout.write("mismatch\n")
        return EXIT_MISMATCH
    except HashingFailure as error:
        logger.error("cli_command_failed command=%s field=%s", arguments.command, error.field_path)
        stdout.write(f"error: {error}\n")
        return EXIT_FAILURE


def main() -> None:
    """Run bcrypt-fields CLI."""

    sys.exit(run())


if __name__ == "__main__":
    main()

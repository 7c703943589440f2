"""Structured error types for osmsieve."""

from __future__ import annotations

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from osmsieve.staging import StagingKey


class OsmSieveError(Exception):
    """Base error for all osmsieve errors."""


class ConfigurationError(OsmSieveError):
    """Raised when the tag rule file is missing, unreadable, or malformed."""

    def __init__(self, path: str, detail: str) -> None:
        self.path = path
        self.detail = detail
        super().__init__(f"Invalid rule file '{path}': {detail}")


class ArgumentError(OsmSieveError):
    """Raised when the command is invoked without usable input files."""


class DecodeError(OsmSieveError):
    """Raised when an input extract cannot be decoded."""

    def __init__(self, path: str, detail: str) -> None:
        self.path = path
        self.detail = detail
        super().__init__(f"Cannot decode '{path}': {detail}")


class StorageBackendError(OsmSieveError):
    """Raised when staging store operations fail."""

    def __init__(self, operation: str, detail: str) -> None:
        self.operation = operation
        self.detail = detail
        super().__init__(f"Storage backend error during {operation}: {detail}")


class SerializationError(OsmSieveError):
    """Raised when an entity cannot be encoded to or decoded from its stored form."""


class DanglingReferenceError(OsmSieveError):
    """Raised when a relation member is in neither staging namespace.

    Expected near extract boundaries; the closure collector skips it.
    """

    def __init__(self, key: StagingKey) -> None:
        self.key = key
        super().__init__(f"Member {key} is not present in the extract")


# Errors the CLI reports with the usage exit code rather than the runtime one.
USAGE_ERRORS: tuple[type[OsmSieveError], ...] = (ConfigurationError, ArgumentError)

"""Error types raised by the generation pipeline.

Every error carries a message that says what failed and why; the CLI
prints it as a single line. Symbol resolution misses are not errors and
have no type here.
"""

from __future__ import annotations


class HookgenError(Exception):
    """Base class for all generator errors."""


class InputParseError(HookgenError):
    """Example JSON could not be parsed, even after the repair pass."""

    def __init__(
        self,
        message: str,
        original_error: str | None = None,
        repair_error: str | None = None,
    ) -> None:
        super().__init__(message)
        self.original_error = original_error
        self.repair_error = repair_error


class SchemaSynthesisError(HookgenError):
    """A JSON Schema could not be compiled into type declarations."""

    def __init__(self, message: str, artifact: str | None = None) -> None:
        super().__init__(message)
        self.artifact = artifact


class DocumentError(HookgenError):
    """An OpenAPI document could not be read or has no paths."""


class ConfigError(HookgenError):
    """A configuration file is malformed or names unknown settings."""


class SinkError(HookgenError):
    """Writing a fragment to its destination failed."""

    def __init__(self, message: str, path: str | None = None) -> None:
        super().__init__(message)
        self.path = path

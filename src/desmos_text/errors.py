"""Error types for desmos-text translation and serialization."""

from __future__ import annotations

from typing import Any


class DestError(Exception):
    """Base exception for all desmos-text errors."""


class UnsupportedVersionError(DestError):
    """Raised when a graph state is not a supported document version."""

    def __init__(self, version: Any, supported: int) -> None:
        self.version = version
        self.supported = supported
        super().__init__(
            f"Desmos JSON version {version!r} is not supported "
            f"(only version {supported} is)"
        )


class InvariantError(DestError):
    """Raised when an IR value is constructed outside its invariants.

    This always indicates a defect in the translator, never bad user input.
    """


class ConfigError(DestError):
    """Raised when a configuration file cannot be used."""


class UnsupportedItemError(DestError):
    """Raised when an expression-list entry has an unknown type."""

    def __init__(self, item_type: Any, item_id: Any) -> None:
        self.item_type = item_type
        self.item_id = item_id
        super().__init__(f"Unsupported item type {item_type!r} (id {item_id!r})")

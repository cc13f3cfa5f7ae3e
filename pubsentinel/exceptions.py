"""Custom exceptions for pubsentinel."""

from __future__ import annotations

from pathlib import Path


class PubSentinelError(Exception):
    """Base exception for all pubsentinel errors."""


class ManifestNotFoundError(PubSentinelError):
    """Raised when the manifest file does not exist."""

    def __init__(self, path: Path):
        self.path = path
        super().__init__(f"{path.name} not found in {path.parent}")


class ManifestParseError(PubSentinelError):
    """Raised when the manifest cannot be read as YAML at all."""


class ManifestWriteError(PubSentinelError):
    """Raised when the edited manifest cannot be written back."""

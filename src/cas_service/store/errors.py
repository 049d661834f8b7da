"""Exceptions raised by the content store."""

from __future__ import annotations

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from pathlib import Path


class StoreError(Exception):
    """Base exception for content store failures."""


class ObjectNotFoundError(StoreError):
    """Raised when a requested object does not exist."""

    def __init__(self, namespace: str, key: str, path: Path) -> None:
        self.namespace = namespace
        self.key = key
        self.path = path
        super().__init__(f"Object '{key}' not found in namespace '{namespace}'")


class StorageIOError(StoreError):
    """
    Raised when the underlying filesystem fails.

    Attributes:
        operation: Store operation that failed (write, read, delete, ...)
        path: Filesystem path involved
        reason: Description taken from the original OSError
    """

    def __init__(self, operation: str, path: Path, cause: OSError) -> None:
        self.operation = operation
        self.path = path
        self.reason = cause.strerror or str(cause)
        super().__init__(f"{operation} failed for {path}: {self.reason}")


class StoreMisconfiguredError(StoreError):
    """Raised when the store is missing a path transform or sanitizer."""


class InvalidObjectKeyError(StoreError):
    """Raised when a key resolves to no usable path segment."""


class CipherError(StoreError):
    """Raised when a stream cannot be decrypted or encrypted."""

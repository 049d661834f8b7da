"""Content-addressable object storage."""

from cas_service.store.content_store import ContentStore, StoreConfig
from cas_service.store.errors import (
    CipherError,
    InvalidObjectKeyError,
    ObjectNotFoundError,
    StorageIOError,
    StoreError,
    StoreMisconfiguredError,
)
from cas_service.store.paths import (
    Location,
    PathTransform,
    cas_path_transform,
    get_path_transform,
    identity_path_transform,
)
from cas_service.store.peers import PeerTable
from cas_service.store.sanitize import get_sanitizer, sanitize_lenient, sanitize_strict

__all__ = [
    "CipherError",
    "ContentStore",
    "InvalidObjectKeyError",
    "Location",
    "ObjectNotFoundError",
    "PathTransform",
    "PeerTable",
    "StorageIOError",
    "StoreConfig",
    "StoreError",
    "StoreMisconfiguredError",
    "cas_path_transform",
    "get_path_transform",
    "get_sanitizer",
    "identity_path_transform",
    "sanitize_lenient",
    "sanitize_strict",
]

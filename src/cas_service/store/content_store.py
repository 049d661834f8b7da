"""
Content-addressable object store on the local filesystem.

Objects live at:

    <root>_storage/<namespace>/<sharded path>/<leaf name>

where the sharded path and leaf name come from the configured path
transform and every segment has been sanitized. A sibling
<root>_network directory is reserved for the network layer.
"""

from __future__ import annotations

import logging
import os
import shutil
from dataclasses import dataclass
from pathlib import Path
from typing import TYPE_CHECKING

from cas_service.store.crypto import check_key, copy_decrypt
from cas_service.store.errors import (
    InvalidObjectKeyError,
    ObjectNotFoundError,
    StorageIOError,
    StoreMisconfiguredError,
)
from cas_service.store.paths import Location, PathTransform, identity_path_transform
from cas_service.store.sanitize import (
    Sanitizer,
    sanitize_lenient,
    sanitize_root,
    split_segments,
)

if TYPE_CHECKING:
    from typing import BinaryIO

STORAGE_SUFFIX = "_storage"
NETWORK_SUFFIX = "_network"
COPY_CHUNK_SIZE = 32 * 1024
NAMESPACE_FORBIDDEN_CHARS = ("/", "\\")


@dataclass
class StoreConfig:
    """
    Construction options for ContentStore.

    Attributes:
        root: Base name for the storage and network areas
        path_transform: Maps logical keys to Locations (identity by default)
        listen_address: Address the network layer listens on
        sanitizer: Per-segment path sanitizer (lenient by default)
    """

    root: str
    path_transform: PathTransform | None = identity_path_transform
    listen_address: str = ""
    sanitizer: Sanitizer | None = sanitize_lenient


class ContentStore:
    """
    Filesystem-backed object store addressed by (namespace, key).

    Operations are synchronous and take no locks; concurrent writers to
    the same key race at the filesystem level and the last one wins.
    """

    def __init__(self, config: StoreConfig, logger: logging.Logger | None = None) -> None:
        if config.path_transform is None:
            raise StoreMisconfiguredError("ContentStore requires a path transform")
        if config.sanitizer is None:
            raise StoreMisconfiguredError("ContentStore requires a path sanitizer")

        self.root = sanitize_root(config.root)
        self.storage_dir = Path(self.root + STORAGE_SUFFIX)
        self.network_dir = Path(self.root + NETWORK_SUFFIX)
        self.listen_address = config.listen_address
        self.path_transform: PathTransform | None = config.path_transform
        self.sanitizer: Sanitizer = config.sanitizer
        self.logger = logger or logging.getLogger(__name__)

    # -----------------------------
    # Path resolution
    # -----------------------------

    def _locate(self, key: str) -> Location:
        if self.path_transform is None:
            raise StoreMisconfiguredError("ContentStore path transform is not initialized")
        return self.path_transform(key)

    def _namespace_dir(self, namespace: str) -> Path:
        """Resolve a namespace to exactly one directory below the storage area."""
        if not namespace or any(char in namespace for char in NAMESPACE_FORBIDDEN_CHARS):
            raise InvalidObjectKeyError(
                f"Namespace '{namespace}' must be a single non-empty path segment"
            )
        segment = self.sanitizer(namespace)
        if segment in ("", "."):
            raise InvalidObjectKeyError(f"Namespace '{namespace}' resolves to the storage root")
        return self.storage_dir / segment

    def _resolve(self, namespace: str, key: str) -> tuple[Path, Path]:
        """Return (parent directory, object file) for a key."""
        location = self._locate(key)
        leaf_segments = split_segments(location.leaf_name, self.sanitizer)
        if not leaf_segments:
            raise InvalidObjectKeyError(f"Key '{key}' resolves to an empty filename")

        parent = self._namespace_dir(namespace).joinpath(
            *split_segments(location.sharded_path, self.sanitizer),
            *leaf_segments[:-1],
        )
        return parent, parent / leaf_segments[-1]

    def object_path(self, namespace: str, key: str) -> Path:
        """Filesystem path an object is (or would be) stored at."""
        return self._resolve(namespace, key)[1]

    # -----------------------------
    # Queries
    # -----------------------------

    def has(self, namespace: str, key: str) -> bool:
        """Report whether an object exists. Any filesystem error counts as absent."""
        try:
            os.stat(self.object_path(namespace, key))
        except (OSError, InvalidObjectKeyError):
            return False
        return True

    def count(self, namespace: str | None = None) -> int:
        """Number of stored object files, store-wide or for one namespace."""
        base = self.storage_dir if namespace is None else self._namespace_dir(namespace)
        if not base.is_dir():
            return 0
        return sum(1 for path in base.rglob("*") if path.is_file())

    # -----------------------------
    # Writes
    # -----------------------------

    def _open_for_writing(self, namespace: str, key: str) -> BinaryIO:
        parent, path = self._resolve(namespace, key)
        try:
            parent.mkdir(parents=True, exist_ok=True)
        except OSError as e:
            raise StorageIOError("mkdir", parent, e) from e
        try:
            return path.open("wb")
        except OSError as e:
            raise StorageIOError("create", path, e) from e

    def write(self, namespace: str, key: str, source: BinaryIO) -> int:
        """
        Stream source into the object file, replacing any previous content.

        A failed copy leaves whatever was written so far in place.

        Args:
            namespace: Owner namespace
            key: Logical key
            source: Readable binary stream

        Returns:
            Number of bytes written

        Raises:
            StorageIOError: If a directory or the file cannot be created or written
        """
        written = 0
        with self._open_for_writing(namespace, key) as dst:
            try:
                while chunk := source.read(COPY_CHUNK_SIZE):
                    written += dst.write(chunk)
            except OSError as e:
                raise StorageIOError("write", Path(dst.name), e) from e

        self.logger.debug(
            "Object written",
            extra={"namespace": namespace, "key": key, "bytes_written": written},
        )
        return written

    def write_decrypted(
        self,
        encryption_key: bytes,
        namespace: str,
        key: str,
        source: BinaryIO,
    ) -> int:
        """
        Decrypt source while streaming it into the object file.

        Returns:
            Number of plaintext bytes written

        Raises:
            CipherError: If the stream cannot be decrypted with encryption_key.
                An invalid key is rejected before the destination is touched.
            StorageIOError: If the destination cannot be created or written
        """
        check_key(encryption_key)
        with self._open_for_writing(namespace, key) as dst:
            try:
                written = copy_decrypt(encryption_key, source, dst)
            except OSError as e:
                raise StorageIOError("write", Path(dst.name), e) from e

        self.logger.debug(
            "Decrypted object written",
            extra={"namespace": namespace, "key": key, "bytes_written": written},
        )
        return written

    # -----------------------------
    # Reads
    # -----------------------------

    def read(self, namespace: str, key: str) -> tuple[int, BinaryIO]:
        """
        Open an object for reading.

        The returned stream belongs to the caller and must be closed.

        Returns:
            Tuple of (size in bytes, open binary stream)

        Raises:
            ObjectNotFoundError: If the object does not exist
            StorageIOError: If the file cannot be opened or inspected
        """
        path = self.object_path(namespace, key)
        try:
            stream = path.open("rb")
        except (FileNotFoundError, NotADirectoryError) as e:
            raise ObjectNotFoundError(namespace, key, path) from e
        except OSError as e:
            raise StorageIOError("open", path, e) from e

        try:
            size = os.fstat(stream.fileno()).st_size
        except OSError as e:
            stream.close()
            raise StorageIOError("stat", path, e) from e

        self.logger.debug(
            "Object opened",
            extra={"namespace": namespace, "key": key, "size": size},
        )
        return size, stream

    # -----------------------------
    # Deletion
    # -----------------------------

    def _remove_tree(self, path: Path, operation: str) -> None:
        try:
            shutil.rmtree(path)
        except FileNotFoundError:
            return
        except NotADirectoryError:
            try:
                path.unlink()
            except OSError as e:
                raise StorageIOError(operation, path, e) from e
        except OSError as e:
            raise StorageIOError(operation, path, e) from e

    def delete_by_prefix_bucket(self, namespace: str, key: str) -> None:
        """
        Remove the whole prefix bucket a key falls in.

        The bucket is the first shard segment of the key's Location, so
        every other object of the namespace sharing that segment is
        removed too.

        Raises:
            InvalidObjectKeyError: If the key has no usable first segment
            StorageIOError: If removal fails
        """
        location = self._locate(key)
        bucket = split_segments(location.sharded_path, self.sanitizer)[:1]
        if not bucket:
            raise InvalidObjectKeyError(f"Key '{key}' has no prefix bucket to delete")

        bucket_dir = self._namespace_dir(namespace).joinpath(*bucket)
        self._remove_tree(bucket_dir, "delete")
        self.logger.info(
            "Prefix bucket deleted",
            extra={"namespace": namespace, "key": key, "bucket": str(bucket_dir)},
        )

    delete = delete_by_prefix_bucket

    def delete_namespace(self, namespace: str) -> None:
        """Remove every object stored under a namespace."""
        namespace_dir = self._namespace_dir(namespace)
        self._remove_tree(namespace_dir, "delete_namespace")
        self.logger.info("Namespace deleted", extra={"namespace": namespace})

    def clear(self) -> None:
        """Remove the entire storage area."""
        self._remove_tree(self.storage_dir, "clear")
        self.logger.info("Storage cleared", extra={"storage_dir": str(self.storage_dir)})

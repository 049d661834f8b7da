"""
Key to storage location transforms.

A path transform maps a logical key to a Location: a nested directory
path plus a leaf filename. The CAS transform fans objects out over
fixed-width fragments of the key's SHA-1 digest:

    "hello.txt" -> 3857b/67247/18628/eab42/6eba0/622e4/4bd2c/edbd5
                   leaf: 3857b672471862eab426eba0622e44bd2cedbd5d
"""

from __future__ import annotations

import hashlib
from collections.abc import Callable
from dataclasses import dataclass

from cas_service.store.errors import StoreMisconfiguredError

SHARD_WIDTH = 5
SEGMENT_SEPARATOR = "/"


@dataclass(frozen=True)
class Location:
    """Deterministic storage location for a logical key."""

    sharded_path: str
    leaf_name: str

    def first_shard_segment(self) -> str:
        """Return the prefix bucket, the first fragment of the sharded path."""
        return self.sharded_path.split(SEGMENT_SEPARATOR)[0]

    @property
    def full_path(self) -> str:
        """Sharded path and leaf name joined with '/'."""
        return f"{self.sharded_path}{SEGMENT_SEPARATOR}{self.leaf_name}"


PathTransform = Callable[[str], Location]


def cas_path_transform(key: str) -> Location:
    """Shard a key by the SHA-1 digest of its UTF-8 bytes."""
    digest = hashlib.sha1(key.encode("utf-8")).hexdigest()  # noqa: S324
    fragments = [
        digest[start : start + SHARD_WIDTH]
        for start in range(0, len(digest) - SHARD_WIDTH + 1, SHARD_WIDTH)
    ]
    return Location(
        sharded_path=SEGMENT_SEPARATOR.join(fragments),
        leaf_name=digest,
    )


def identity_path_transform(key: str) -> Location:
    """Use the key itself as both the directory path and the filename."""
    return Location(sharded_path=key, leaf_name=key)


PATH_TRANSFORMS: dict[str, PathTransform] = {
    "identity": identity_path_transform,
    "cas": cas_path_transform,
}


def get_path_transform(name: str) -> PathTransform:
    """
    Look up a path transform by its configuration name.

    Raises:
        StoreMisconfiguredError: If the name is not registered
    """
    try:
        return PATH_TRANSFORMS[name]
    except KeyError:
        raise StoreMisconfiguredError(
            f"Unknown path transform '{name}'. Must be one of {sorted(PATH_TRANSFORMS)}"
        ) from None

"""
Peer connection table.

Owned by the network layer. The content store never reads or writes it;
the lock here guards only this mapping, not object I/O.
"""

from __future__ import annotations

import threading
from typing import Any


class PeerTable:
    """Thread-safe mapping from peer address to live connection."""

    def __init__(self) -> None:
        self._peers: dict[str, Any] = {}
        self._lock = threading.Lock()

    def add(self, address: str, connection: Any) -> None:
        """Register or replace the connection for a peer."""
        with self._lock:
            self._peers[address] = connection

    def remove(self, address: str) -> Any | None:
        """Forget a peer. Returns its connection, or None if unknown."""
        with self._lock:
            return self._peers.pop(address, None)

    def get(self, address: str) -> Any | None:
        with self._lock:
            return self._peers.get(address)

    def addresses(self) -> list[str]:
        """Snapshot of known peer addresses, sorted."""
        with self._lock:
            return sorted(self._peers)

    def __len__(self) -> int:
        with self._lock:
            return len(self._peers)

    def __contains__(self, address: object) -> bool:
        with self._lock:
            return address in self._peers

"""
AES-CTR stream cipher used for encrypted object transfer.

Encrypted streams carry a random 16-byte IV followed by the CTR
ciphertext. Both directions work chunk by chunk, so neither side holds
the whole object in memory.
"""

from __future__ import annotations

import os
from typing import TYPE_CHECKING

from cryptography.hazmat.primitives.ciphers import Cipher, algorithms, modes

from cas_service.store.errors import CipherError

if TYPE_CHECKING:
    from typing import BinaryIO

    from cryptography.hazmat.primitives.ciphers import CipherContext

BLOCK_SIZE = 16
COPY_CHUNK_SIZE = 32 * 1024
VALID_KEY_SIZES: frozenset[int] = frozenset({16, 24, 32})


def new_encryption_key() -> bytes:
    """Generate a random 256-bit AES key."""
    return os.urandom(32)


def check_key(key: bytes) -> None:
    """Raise CipherError unless key is a valid AES key size."""
    if len(key) not in VALID_KEY_SIZES:
        raise CipherError(
            f"Invalid AES key length: {len(key)} bytes. Must be one of {sorted(VALID_KEY_SIZES)}"
        )


def _cipher(key: bytes, iv: bytes) -> Cipher[modes.CTR]:
    return Cipher(algorithms.AES(key), modes.CTR(iv))


def _read_exact(src: BinaryIO, size: int) -> bytes:
    data = b""
    while len(data) < size:
        chunk = src.read(size - len(data))
        if not chunk:
            break
        data += chunk
    return data


def _copy_stream(context: CipherContext, src: BinaryIO, dst: BinaryIO) -> int:
    written = 0
    while chunk := src.read(COPY_CHUNK_SIZE):
        written += dst.write(context.update(chunk))
    written += dst.write(context.finalize())
    return written


def copy_decrypt(key: bytes, src: BinaryIO, dst: BinaryIO) -> int:
    """
    Decrypt an IV-prefixed AES-CTR stream into dst.

    Args:
        key: AES key (16, 24 or 32 bytes)
        src: Readable stream of IV + ciphertext
        dst: Writable stream receiving plaintext

    Returns:
        Number of plaintext bytes written

    Raises:
        CipherError: If the key is invalid or the IV header is truncated
    """
    check_key(key)
    iv = _read_exact(src, BLOCK_SIZE)
    if len(iv) != BLOCK_SIZE:
        raise CipherError(
            f"Encrypted stream too short: expected {BLOCK_SIZE}-byte IV, got {len(iv)} bytes"
        )
    return _copy_stream(_cipher(key, iv).decryptor(), src, dst)


def copy_encrypt(key: bytes, src: BinaryIO, dst: BinaryIO) -> int:
    """
    Encrypt src into dst as IV + AES-CTR ciphertext.

    Returns:
        Number of bytes written, IV included
    """
    check_key(key)
    iv = os.urandom(BLOCK_SIZE)
    encryptor = _cipher(key, iv).encryptor()
    written = dst.write(iv)
    return written + _copy_stream(encryptor, src, dst)

"""
Object storage endpoints.

Objects are addressed by namespace and logical key. Keys may contain
slashes; the store sanitizes every segment before touching the disk.
"""

from __future__ import annotations

import io
from typing import TYPE_CHECKING

from fastapi import APIRouter, Request, Response
from fastapi.responses import StreamingResponse

from cas_service.config import get_settings
from cas_service.core.exceptions import ServiceError, service_error_from_store
from cas_service.core.state import get_app_state
from cas_service.schemas import WriteResponse
from cas_service.store.errors import StoreError

if TYPE_CHECKING:
    from collections.abc import Iterator
    from typing import BinaryIO

    from cas_service.store.content_store import ContentStore

router = APIRouter()

STREAM_CHUNK_SIZE = 64 * 1024


def _get_content_store() -> ContentStore:
    """Get initialized content store or raise a service error."""
    store = get_app_state().content_store
    if store is None:
        raise ServiceError(
            error="service_unavailable",
            message="Content store is not initialized",
            status_code=503,
            details={},
        )
    return store


def _iter_stream(stream: BinaryIO) -> Iterator[bytes]:
    """Yield a file in chunks, closing it however iteration ends."""
    try:
        while chunk := stream.read(STREAM_CHUNK_SIZE):
            yield chunk
    finally:
        stream.close()


@router.put("/namespaces/{namespace}/objects/{key:path}", response_model=WriteResponse)
async def put_object(namespace: str, key: str, request: Request) -> WriteResponse:
    """Store the request body under (namespace, key)."""
    store = _get_content_store()
    data = await request.body()
    try:
        written = store.write(namespace, key, io.BytesIO(data))
    except StoreError as exc:
        raise service_error_from_store(exc, namespace, key) from exc
    return WriteResponse(namespace=namespace, key=key, bytes_written=written)


@router.put(
    "/namespaces/{namespace}/encrypted-objects/{key:path}",
    response_model=WriteResponse,
)
async def put_encrypted_object(namespace: str, key: str, request: Request) -> WriteResponse:
    """Decrypt the request body with the configured key and store the plaintext."""
    state = get_app_state()
    store = _get_content_store()
    if state.encryption_key is None:
        raise ServiceError(
            error="encryption_not_configured",
            message="Encrypted uploads are disabled: no encryption key configured",
            status_code=503,
            details={"namespace": namespace, "key": key},
        )

    data = await request.body()
    try:
        written = store.write_decrypted(state.encryption_key, namespace, key, io.BytesIO(data))
    except StoreError as exc:
        raise service_error_from_store(exc, namespace, key) from exc
    return WriteResponse(namespace=namespace, key=key, bytes_written=written)


@router.get("/namespaces/{namespace}/objects/{key:path}")
async def get_object(namespace: str, key: str) -> StreamingResponse:
    """Stream an object back to the client."""
    settings = get_settings()
    store = _get_content_store()
    try:
        size, stream = store.read(namespace, key)
    except StoreError as exc:
        raise service_error_from_store(exc, namespace, key) from exc

    return StreamingResponse(
        _iter_stream(stream),
        media_type=settings.storage.content_type,
        headers={"Content-Length": str(size)},
    )


@router.head("/namespaces/{namespace}/objects/{key:path}")
async def head_object(namespace: str, key: str) -> Response:
    """Report object existence as 200 or 404."""
    store = _get_content_store()
    status_code = 200 if store.has(namespace, key) else 404
    return Response(status_code=status_code)


@router.delete("/namespaces/{namespace}/objects/{key:path}", status_code=204)
async def delete_object(namespace: str, key: str) -> Response:
    """
    Delete the prefix bucket holding an object.

    Other objects of the namespace in the same bucket are removed too.
    """
    store = _get_content_store()
    try:
        store.delete_by_prefix_bucket(namespace, key)
    except StoreError as exc:
        raise service_error_from_store(exc, namespace, key) from exc
    return Response(status_code=204)


@router.delete("/namespaces/{namespace}", status_code=204)
async def delete_namespace(namespace: str) -> Response:
    """Delete every object stored under a namespace."""
    store = _get_content_store()
    try:
        store.delete_namespace(namespace)
    except StoreError as exc:
        raise service_error_from_store(exc, namespace, None) from exc
    return Response(status_code=204)


@router.delete("/objects", status_code=204)
async def clear_objects() -> Response:
    """Wipe the whole storage area."""
    store = _get_content_store()
    try:
        store.clear()
    except StoreError as exc:
        raise service_error_from_store(exc, "*", None) from exc
    return Response(status_code=204)

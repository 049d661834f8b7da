"""
Service information endpoint.
"""

from __future__ import annotations

from fastapi import APIRouter

from cas_service.config import get_safe_config, get_settings
from cas_service.core.exceptions import ServiceError
from cas_service.core.state import get_app_state
from cas_service.schemas import InfoResponse, StorageInfo

router = APIRouter()


@router.get("/info", response_model=InfoResponse)
async def get_info() -> InfoResponse:
    """Get service information and storage layout."""
    settings = get_settings()
    store = get_app_state().content_store
    if store is None:
        raise ServiceError(
            error="service_unavailable",
            message="Content store is not initialized",
            status_code=503,
            details={},
        )

    try:
        object_count = store.count()
    except OSError as exc:
        raise ServiceError(
            error="storage_count_failed",
            message="Failed to count stored objects",
            status_code=503,
            details={
                "exception_type": exc.__class__.__name__,
                "reason": str(exc),
            },
        ) from exc

    storage_info = StorageInfo(
        root=store.root,
        storage_dir=str(store.storage_dir),
        network_dir=str(store.network_dir),
        path_transform=settings.storage.path_transform,
        sanitizer=settings.storage.sanitizer,
        content_type=settings.storage.content_type,
        object_count=object_count,
    )

    return InfoResponse(
        service=settings.service.name,
        version=settings.service.version,
        storage=storage_info,
        config=get_safe_config(),
    )

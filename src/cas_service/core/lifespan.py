"""Application lifecycle management."""

from __future__ import annotations

from contextlib import asynccontextmanager
from typing import TYPE_CHECKING

from cas_service.config import get_settings
from cas_service.core.state import init_app_state
from cas_service.logging import get_logger, setup_logging
from cas_service.store.content_store import ContentStore, StoreConfig
from cas_service.store.paths import get_path_transform
from cas_service.store.sanitize import get_sanitizer

if TYPE_CHECKING:
    from collections.abc import AsyncIterator

    from fastapi import FastAPI


@asynccontextmanager
async def lifespan(_app: FastAPI) -> AsyncIterator[None]:
    """Manage application lifecycle."""
    # === STARTUP ===
    settings = get_settings()

    # Initialize logging first
    setup_logging(settings.logging.level, settings.service.name)
    logger = get_logger(__name__)

    state = init_app_state()

    store = ContentStore(
        StoreConfig(
            root=settings.storage.root,
            path_transform=get_path_transform(settings.storage.path_transform),
            listen_address=settings.network.listen_address,
            sanitizer=get_sanitizer(settings.storage.sanitizer),
        ),
        logger=get_logger("store"),
    )
    state.content_store = store
    state.encryption_key = settings.encryption.key_bytes

    logger.info(
        "Service starting",
        extra={
            "service": settings.service.name,
            "version": settings.service.version,
            "host": settings.server.host,
            "port": settings.server.port,
            "storage_dir": str(store.storage_dir),
            "path_transform": settings.storage.path_transform,
            "sanitizer": settings.storage.sanitizer,
            "listen_address": store.listen_address,
            "encrypted_uploads": state.encryption_key is not None,
            "object_count": store.count(),
        },
    )

    yield  # Application runs here

    # === SHUTDOWN ===
    logger.info(
        "Service shutting down",
        extra={
            "uptime_seconds": state.uptime_seconds,
            "uptime": state.uptime_formatted,
            "object_count": store.count(),
            "peer_count": len(state.peers),
        },
    )

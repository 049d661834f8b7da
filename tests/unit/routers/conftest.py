"""
Fixtures for router unit tests.

Routers run against a mocked settings object and a mocked application
state; the real lifespan never executes.
"""

from __future__ import annotations

from typing import TYPE_CHECKING
from unittest.mock import MagicMock, patch

import pytest
from fastapi.testclient import TestClient

if TYPE_CHECKING:
    from collections.abc import Iterator


@pytest.fixture
def mock_settings() -> MagicMock:
    """Settings with the fields routers read."""
    settings = MagicMock()
    settings.service.name = "cas-service"
    settings.service.version = "0.1.0"
    settings.storage.path_transform = "cas"
    settings.storage.sanitizer = "lenient"
    settings.storage.content_type = "application/octet-stream"
    return settings


@pytest.fixture
def mock_state() -> MagicMock:
    """Application state holding a mocked content store."""
    state = MagicMock()
    state.encryption_key = None
    state.uptime_seconds = 12.5
    state.uptime_formatted = "12s"
    return state


@pytest.fixture
def client(mock_settings: MagicMock, mock_state: MagicMock) -> Iterator[TestClient]:
    """TestClient for an app wired to the mocks."""
    with (
        patch("cas_service.config.get_settings", return_value=mock_settings),
        patch("cas_service.app.get_settings", return_value=mock_settings),
        patch("cas_service.app.lifespan"),
        patch("cas_service.routers.health.get_app_state", return_value=mock_state),
        patch("cas_service.routers.info.get_app_state", return_value=mock_state),
        patch("cas_service.routers.info.get_settings", return_value=mock_settings),
        patch(
            "cas_service.routers.info.get_safe_config",
            return_value={"encryption": {"key": "[REDACTED]"}},
        ),
        patch("cas_service.routers.objects.get_app_state", return_value=mock_state),
        patch("cas_service.routers.objects.get_settings", return_value=mock_settings),
    ):
        from cas_service.app import create_app  # noqa: PLC0415

        app = create_app()
        yield TestClient(app, raise_server_exceptions=False)

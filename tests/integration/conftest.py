"""
Fixtures for integration tests.

These tests use the real application with actual file storage.
"""

from __future__ import annotations

import os
from typing import TYPE_CHECKING

import pytest
from fastapi.testclient import TestClient

from cas_service.app import create_app
from cas_service.config import clear_settings_cache
from cas_service.core.state import reset_app_state

if TYPE_CHECKING:
    from collections.abc import Iterator
    from pathlib import Path

INTEGRATION_KEY_HEX = "000102030405060708090a0b0c0d0e0f101112131415161718191a1b1c1d1e1f"


@pytest.fixture(scope="module")
def encryption_key_hex() -> str:
    """Hex AES-256 key the integration app is configured with."""
    return INTEGRATION_KEY_HEX


@pytest.fixture(scope="module")
def storage_root(tmp_path_factory: pytest.TempPathFactory) -> Path:
    """Temporary storage root; objects land in <root>_storage."""
    return tmp_path_factory.mktemp("cas_integration") / "node"


@pytest.fixture(scope="module")
def integration_client(storage_root: Path) -> Iterator[TestClient]:
    """
    Create test client with the real application.

    Uses a temporary directory for storage to avoid polluting real data.
    """
    config_file = storage_root.parent / "config.yaml"
    config_file.write_text(f"""
service:
  name: cas-service
  version: 0.1.0

storage:
  root: "{storage_root}"
  path_transform: cas
  sanitizer: lenient
  content_type: "application/octet-stream"

network:
  listen_address: ":3000"

encryption:
  key: "{INTEGRATION_KEY_HEX}"

server:
  host: "0.0.0.0"
  port: 8010

logging:
  level: "INFO"
  format: "json"
""")
    os.environ["CONFIG_PATH"] = str(config_file)

    clear_settings_cache()
    app = create_app()
    with TestClient(app) as test_client:
        yield test_client

    clear_settings_cache()
    reset_app_state()
    os.environ.pop("CONFIG_PATH", None)


@pytest.fixture
def client(integration_client: TestClient) -> Iterator[TestClient]:
    """
    Per-test client that clears storage before each test.
    """
    integration_client.delete("/objects")
    yield integration_client

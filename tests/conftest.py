"""
Shared test configuration and fixtures.

This file contains pytest configuration that applies to all tests.
Test-type-specific fixtures are defined in their respective conftest.py files.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

import pytest

from cas_service.store.content_store import ContentStore, StoreConfig
from cas_service.store.paths import cas_path_transform

if TYPE_CHECKING:
    from pathlib import Path


@pytest.fixture
def cas_store(tmp_path: Path) -> ContentStore:
    """Content store using the CAS transform under a temporary root."""
    return ContentStore(StoreConfig(root=str(tmp_path / "net"), path_transform=cas_path_transform))

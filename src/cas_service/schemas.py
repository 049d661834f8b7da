"""
Pydantic request/response models for the content store API.
"""

from __future__ import annotations

from typing import Any, Literal

from pydantic import BaseModel, ConfigDict


class HealthResponse(BaseModel):
    """Response model for GET /health endpoint."""

    status: Literal["healthy", "unhealthy"]
    """Service health status."""

    uptime_seconds: float
    """Uptime in seconds since service start."""

    uptime: str
    """Human-readable uptime."""

    system_time: str
    """Current system time in yyyy-mm-dd hh:mm format (UTC)."""


class StorageInfo(BaseModel):
    """Storage layout for /info endpoint."""

    model_config = ConfigDict(extra="forbid")

    root: str
    """Sanitized storage root name."""

    storage_dir: str
    """Directory holding object files."""

    network_dir: str
    """Directory reserved for the network layer."""

    path_transform: str
    """Configured key to location transform."""

    sanitizer: str
    """Configured path segment sanitizer."""

    content_type: str
    """Content type for served objects."""

    object_count: int
    """Number of objects currently stored."""


class InfoResponse(BaseModel):
    """Response model for GET /info endpoint."""

    service: str
    """Service name."""

    version: str
    """Service version."""

    storage: StorageInfo
    """Storage layout and status."""

    config: dict[str, Any]
    """Effective configuration with sensitive values redacted."""


class WriteResponse(BaseModel):
    """Response model for object uploads."""

    model_config = ConfigDict(extra="forbid")

    namespace: str
    """Namespace the object was written under."""

    key: str
    """Logical key of the object."""

    bytes_written: int
    """Number of (plaintext) bytes persisted."""


class ErrorResponse(BaseModel):
    """Standard error response model."""

    error: str
    """Machine-readable error code."""

    message: str
    """Human-readable error description."""

    details: dict[str, Any]
    """Additional error context."""

"""
Path segment sanitizers.

Every namespace and Location component is split into segments and each
segment is passed through a sanitizer before it touches the filesystem.
Neither sanitizer can produce "." or ".." segments.
"""

from __future__ import annotations

import re
from collections.abc import Callable

from cas_service.store.errors import StoreMisconfiguredError

Sanitizer = Callable[[str], str]

DRIVE_SEPARATOR = ":"
REPLACEMENT = "_"
PARENT_SEGMENT = ".."

_SEPARATOR_PATTERN = re.compile(r"[/\\]")
_UNSAFE_CHARS_PATTERN = re.compile(r"[^A-Za-z0-9_-]+")

# Windows device names, matched case-insensitively against the segment start
RESERVED_PREFIXES: tuple[str, ...] = ("con", "prn", "aux", "nul")
_RESERVED_NUMBERED_PATTERN = re.compile(r"^(com|lpt)[0-9]", re.IGNORECASE)
RESERVED_MARKER = "file_"


def sanitize_root(root: str) -> str:
    """Replace drive separators in the configured storage root."""
    return root.replace(DRIVE_SEPARATOR, REPLACEMENT)


def sanitize_lenient(segment: str) -> str:
    """
    Neutralize drive separators and parent references in a segment.

    Example:
        "C:" -> "C_", ".." -> "__", "notes.txt" -> "notes.txt"
    """
    if segment == PARENT_SEGMENT:
        return REPLACEMENT * len(PARENT_SEGMENT)
    return segment.replace(DRIVE_SEPARATOR, REPLACEMENT)


def sanitize_strict(segment: str) -> str:
    """
    Keep only [A-Za-z0-9_-] and rename reserved device names.

    Example:
        "report.pdf" -> "reportpdf", "CON" -> "file_CON", "" -> "_"
    """
    safe = _UNSAFE_CHARS_PATTERN.sub("", segment)
    if not safe:
        return REPLACEMENT

    lowered = safe.lower()
    if lowered.startswith(RESERVED_PREFIXES) or _RESERVED_NUMBERED_PATTERN.match(safe):
        safe = RESERVED_MARKER + safe

    return safe


def split_segments(component: str, sanitizer: Sanitizer) -> list[str]:
    """
    Split a path component on separators and sanitize each segment.

    Empty and "." segments are dropped, so absolute paths and doubled
    separators cannot escape the directory they are joined under.

    Args:
        component: Namespace, sharded path, or leaf name
        sanitizer: Per-segment sanitizer

    Returns:
        Sanitized segments, possibly empty
    """
    return [
        sanitizer(segment)
        for segment in _SEPARATOR_PATTERN.split(component)
        if segment not in ("", ".")
    ]


SANITIZERS: dict[str, Sanitizer] = {
    "lenient": sanitize_lenient,
    "strict": sanitize_strict,
}


def get_sanitizer(name: str) -> Sanitizer:
    """
    Look up a sanitizer by its configuration name.

    Raises:
        StoreMisconfiguredError: If the name is not registered
    """
    try:
        return SANITIZERS[name]
    except KeyError:
        raise StoreMisconfiguredError(
            f"Unknown sanitizer '{name}'. Must be one of {sorted(SANITIZERS)}"
        ) from None

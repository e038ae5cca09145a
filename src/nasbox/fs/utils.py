"""Path utilities, name validation, content-type lookup."""

from __future__ import annotations

import mimetypes
import os
import posixpath
from datetime import UTC, datetime
from pathlib import Path

# =============================================================================
# Content Types (used for inline streaming)
# =============================================================================

CONTENT_TYPES: dict[str, str] = {
    # Text
    ".txt": "text/plain",
    ".md": "text/markdown",
    ".csv": "text/csv",
    ".html": "text/html",
    ".htm": "text/html",
    ".css": "text/css",
    ".js": "text/javascript",
    ".json": "application/json",
    ".xml": "application/xml",
    # Documents
    ".pdf": "application/pdf",
    ".doc": "application/msword",
    ".docx": "application/vnd.openxmlformats-officedocument.wordprocessingml.document",
    ".xls": "application/vnd.ms-excel",
    ".xlsx": "application/vnd.openxmlformats-officedocument.spreadsheetml.sheet",
    ".ppt": "application/vnd.ms-powerpoint",
    ".pptx": "application/vnd.openxmlformats-officedocument.presentationml.presentation",
    # Images
    ".png": "image/png",
    ".jpg": "image/jpeg",
    ".jpeg": "image/jpeg",
    ".gif": "image/gif",
    ".webp": "image/webp",
    ".svg": "image/svg+xml",
    ".bmp": "image/bmp",
    ".ico": "image/x-icon",
    # Audio / video
    ".mp3": "audio/mpeg",
    ".wav": "audio/wav",
    ".flac": "audio/flac",
    ".ogg": "audio/ogg",
    ".mp4": "video/mp4",
    ".webm": "video/webm",
    ".mov": "video/quicktime",
    ".mkv": "video/x-matroska",
    # Archives
    ".zip": "application/zip",
    ".gz": "application/gzip",
    ".tar": "application/x-tar",
    ".7z": "application/x-7z-compressed",
}

DEFAULT_CONTENT_TYPE = "application/octet-stream"

# Reserved filenames (Windows compatibility)
RESERVED_NAMES = {
    "CON", "PRN", "AUX", "NUL",
    "COM1", "COM2", "COM3", "COM4", "COM5", "COM6", "COM7", "COM8", "COM9",
    "LPT1", "LPT2", "LPT3", "LPT4", "LPT5", "LPT6", "LPT7", "LPT8", "LPT9",
}

MAX_PATH_LENGTH = 4096
MAX_NAME_LENGTH = 255


# =============================================================================
# Path Utilities
# =============================================================================


def normalize_path(path: str | None) -> str:
    """Normalize a client-relative path into "/"-joined POSIX form.

    - Treats backslashes as separators
    - Drops any leading /
    - Collapses . and .. references and double slashes
    - Returns "" for the storage root

    Unlike a clamped normalization, leading ``..`` segments are kept so
    that the resolver can reject them.

    Examples:
        normalize_path("foo.txt") -> "foo.txt"
        normalize_path("/foo//bar.txt") -> "foo/bar.txt"
        normalize_path("foo/../bar.txt") -> "bar.txt"
        normalize_path("foo/../../etc") -> "../etc"
        normalize_path("") -> ""
    """
    if not path:
        return ""

    path = path.strip().replace("\\", "/").lstrip("/")
    if not path:
        return ""

    path = posixpath.normpath(path)
    return "" if path == "." else path


def split_path(path: str) -> tuple[str, str]:
    """Split a relative path into (parent, name).

    Examples:
        split_path("foo/bar.txt") -> ("foo", "bar.txt")
        split_path("foo.txt") -> ("", "foo.txt")
        split_path("") -> ("", "")
    """
    path = normalize_path(path)
    if not path:
        return "", ""
    return posixpath.split(path)


def validate_path(path: str) -> tuple[bool, str]:
    """Validate a raw path string for malformed input.

    Returns:
        (is_valid, error_message) - error_message is empty if valid
    """
    if "\x00" in path:
        return False, "Path contains null bytes"

    for ch in path:
        code = ord(ch)
        if 0x01 <= code <= 0x1F:
            return False, f"Path contains control character: 0x{code:02x}"

    if len(path) > MAX_PATH_LENGTH:
        return False, f"Path too long (max {MAX_PATH_LENGTH} characters)"

    for segment in path.replace("\\", "/").split("/"):
        if len(segment) > MAX_NAME_LENGTH:
            return False, f"Name too long (max {MAX_NAME_LENGTH} characters)"

    return True, ""


def validate_name(name: str) -> tuple[bool, str]:
    """Validate a single user-chosen name segment (folder or upload filename).

    A name must never carry separators or traversal references, since it
    is joined onto an already-resolved directory.
    """
    if not name or not name.strip():
        return False, "Name must not be empty"

    if "/" in name or "\\" in name:
        return False, f"Name must not contain path separators: {name!r}"

    if name in (".", ".."):
        return False, f"Invalid name: {name!r}"

    valid, error = validate_path(name)
    if not valid:
        return False, error

    stem = name.upper().split(".")[0]
    if stem in RESERVED_NAMES:
        return False, f"Reserved filename: {name}"

    return True, ""


def is_within(path: Path, parent: Path) -> bool:
    """True if *path* equals *parent* or lies below it.

    Compares path segments, so ``/data/foobar`` is not within ``/data/foo``.
    """
    try:
        path.relative_to(parent)
    except ValueError:
        return False
    return True


def is_hidden(name: str) -> bool:
    """Dot-prefixed names are hidden from every listing."""
    return name.startswith(".")


def restored_name(name: str, stamp: int | None = None, *, is_directory: bool = False) -> str:
    """Build a non-colliding name for an item restored onto an occupied path.

    The suffix goes before a file's extension. Folder names are never split.

    Examples:
        restored_name("report.txt", 1700000000000) -> "report-restored-1700000000000.txt"
        restored_name("v1.2", 1700000000000, is_directory=True) -> "v1.2-restored-1700000000000"
    """
    if stamp is None:
        stamp = timestamp_ms()
    if is_directory:
        return f"{name}-restored-{stamp}"
    stem, ext = os.path.splitext(name)
    return f"{stem}-restored-{stamp}{ext}"


def timestamp_ms() -> int:
    """Current UTC time in milliseconds."""
    return int(datetime.now(UTC).timestamp() * 1000)


def guess_content_type(filename: str) -> str:
    """Guess the content type of a file from its extension."""
    ext = Path(filename).suffix.lower()
    if ext in CONTENT_TYPES:
        return CONTENT_TYPES[ext]
    mime_type, _ = mimetypes.guess_type(filename)
    return mime_type or DEFAULT_CONTENT_TYPE

"""Entry, metadata records, and operation result types."""

from __future__ import annotations

import asyncio
import contextlib
from dataclasses import dataclass, field
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from collections.abc import AsyncIterator
    from datetime import datetime
    from pathlib import Path

DEFAULT_CHUNK_SIZE = 64 * 1024


# =============================================================================
# Filesystem + Metadata Records
# =============================================================================


@dataclass
class Entry:
    """A directory-listing row. Derived from the filesystem, never persisted."""

    name: str
    path: str
    is_directory: bool
    size: int
    mtime: datetime


@dataclass
class TrashRecord:
    """A trashed item. ``trash_id`` names its location in the trash area."""

    trash_id: str
    original_path: str
    original_name: str
    is_directory: bool
    size: int
    deleted_at: datetime


@dataclass
class ShareRecord:
    """A capability link: possession of ``token`` grants read access to ``path``."""

    token: str
    path: str
    created: datetime


@dataclass
class MetadataDocument:
    """The three metadata collections, loaded and saved as one unit."""

    starred: list[str] = field(default_factory=list)
    trash: list[TrashRecord] = field(default_factory=list)
    shared: dict[str, ShareRecord] = field(default_factory=dict)

    def set_starred(self, path: str, starred: bool) -> bool:
        """Add or remove *path*. Returns True if the set changed."""
        if starred and path not in self.starred:
            self.starred.append(path)
            return True
        if not starred and path in self.starred:
            self.starred.remove(path)
            return True
        return False

    def find_trash(self, trash_id: str) -> TrashRecord | None:
        for record in self.trash:
            if record.trash_id == trash_id:
                return record
        return None

    def rewrite_path(self, old_path: str, new_path: str) -> int:
        """Point star and share records at *new_path* after a move.

        Records equal to *old_path* are rewritten, and so are records below
        it (``old_path + "/..."``), so items inside a moved folder keep
        their stars and links. Matching is on segment boundaries.

        Returns the number of records rewritten.
        """

        def _moved(path: str) -> str | None:
            if path == old_path:
                return new_path
            if old_path and path.startswith(old_path + "/"):
                return new_path + path[len(old_path):]
            return None

        count = 0
        starred: list[str] = []
        for path in self.starred:
            target = _moved(path)
            if target is not None:
                count += 1
                path = target
            if path not in starred:
                starred.append(path)
        self.starred = starred

        for share in self.shared.values():
            target = _moved(share.path)
            if target is not None:
                share.path = target
                count += 1
        return count


# =============================================================================
# Operation Results
# =============================================================================


@dataclass
class MoveReport:
    """Per-item outcome of a batch move."""

    moved: list[str] = field(default_factory=list)
    errors: list[str] = field(default_factory=list)
    new_paths: dict[str, str] = field(default_factory=dict)


@dataclass
class SharedItemInfo:
    """Public description of a share target."""

    name: str
    size: int
    content_type: str | None
    created: datetime
    is_directory: bool


@dataclass
class UploadFile:
    """One uploaded file: the client-chosen filename and its bytes."""

    filename: str
    data: bytes


@dataclass
class Download:
    """A byte stream ready to hand to the transport layer.

    ``disposition`` is ``"attachment"`` or ``"inline"``. When ``temporary``
    is set the file at ``path`` is removed once it has been streamed.
    """

    path: Path
    filename: str
    content_type: str
    disposition: str
    size: int
    temporary: bool = False

    async def iter_bytes(self, chunk_size: int = DEFAULT_CHUNK_SIZE) -> AsyncIterator[bytes]:
        """Stream the file contents in chunks without blocking the loop."""
        handle = await asyncio.to_thread(self.path.open, "rb")
        try:
            while True:
                chunk = await asyncio.to_thread(handle.read, chunk_size)
                if not chunk:
                    break
                yield chunk
        finally:
            await asyncio.to_thread(handle.close)
            if self.temporary:
                with contextlib.suppress(OSError):
                    await asyncio.to_thread(self.path.unlink)

    async def read_all(self) -> bytes:
        return b"".join([chunk async for chunk in self.iter_bytes()])


@dataclass
class Result:
    """Common shape of every facade result."""

    success: bool
    message: str
    error_code: str | None = None


@dataclass
class ListResult(Result):
    """Result of a listing operation."""

    entries: list[Entry] = field(default_factory=list)
    path: str = ""


@dataclass
class TrashListResult(Result):
    """Result of listing the trash."""

    entries: list[TrashRecord] = field(default_factory=list)


@dataclass
class MoveResult(Result):
    """Result of a (batch) move or rename."""

    moved: list[str] = field(default_factory=list)
    errors: list[str] = field(default_factory=list)


@dataclass
class DeleteResult(Result):
    """Result of moving items to the trash."""

    trash_ids: list[str] = field(default_factory=list)
    errors: list[str] = field(default_factory=list)
    permanent: bool = False
    total_deleted: int | None = None


@dataclass
class RestoreResult(Result):
    """Result of restoring an item from the trash."""

    file_path: str | None = None


@dataclass
class MkdirResult(Result):
    """Result of creating a folder."""

    path: str | None = None


@dataclass
class StarResult(Result):
    """Result of a star toggle."""

    path: str | None = None
    starred: bool = False


@dataclass
class UploadResult(Result):
    """Result of an upload."""

    paths: list[str] = field(default_factory=list)

    @property
    def count(self) -> int:
        return len(self.paths)


@dataclass
class DownloadResult(Result):
    """Result of opening a download or inline stream."""

    download: Download | None = None


@dataclass
class ShareResult(Result):
    """Result of creating a share link."""

    token: str | None = None
    public_url: str | None = None


@dataclass
class ShareInfoResult(Result):
    """Result of looking up a share token."""

    info: SharedItemInfo | None = None

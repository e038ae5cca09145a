"""LocalStorage — folder creation, uploads, and byte streams for the live tree."""

from __future__ import annotations

import asyncio
import contextlib
import logging
import os
import tempfile
from pathlib import Path
from typing import TYPE_CHECKING

from .archive import ZipArchiver
from .exceptions import InvalidPathError, NotDirectoryError, PathNotFoundError, StorageError
from .types import Download
from .utils import guess_content_type

if TYPE_CHECKING:
    from collections.abc import Sequence

    from .archive import Archiver
    from .resolver import PathResolver
    from .types import UploadFile

logger = logging.getLogger(__name__)

DEFAULT_FOLDER_NAME = "New Folder"


class LocalStorage:
    """Write-side and byte-stream operations on the live tree.

    Every client-chosen name (folder name, upload filename) goes through
    ``PathResolver.join`` so a name such as ``../../etc/passwd`` is rejected
    rather than written outside the storage root.
    """

    def __init__(self, resolver: PathResolver, archiver: Archiver | None = None) -> None:
        self.resolver = resolver
        self.archiver: Archiver = archiver or ZipArchiver()

    # ------------------------------------------------------------------
    # Write Operations
    # ------------------------------------------------------------------

    async def create_folder(self, parent: str, name: str | None = None) -> str:
        """Create *name* inside *parent*. An existing folder is not an error."""
        parent_dir = self.resolver.resolve(parent)
        target = self.resolver.join(parent_dir, name or DEFAULT_FOLDER_NAME)

        def _mkdir() -> None:
            if target.exists() and not target.is_dir():
                raise FileExistsError(target.name)
            target.mkdir(parents=True, exist_ok=True)

        try:
            await asyncio.to_thread(_mkdir)
        except FileExistsError:
            raise NotDirectoryError(f"Path exists as file: {target.name}") from None
        except OSError as e:
            raise StorageError(f"Failed to create folder: {target.name}") from e

        return self.resolver.relative(target)

    async def upload(self, destination: str, files: Sequence[UploadFile]) -> list[str]:
        """Write uploaded files into *destination*, creating it if needed.

        Existing files with the same name are replaced. Each file is written
        to a temporary file first and moved into place.
        """
        dest_dir = self.resolver.resolve(destination)
        targets = [(self.resolver.join(dest_dir, f.filename), f) for f in files]

        def _write(target: Path, data: bytes) -> None:
            target.parent.mkdir(parents=True, exist_ok=True)
            if target.is_dir():
                raise IsADirectoryError(target.name)
            fd, tmp_path = tempfile.mkstemp(
                dir=str(target.parent), prefix=".upload-", suffix=".tmp"
            )
            try:
                with os.fdopen(fd, "wb") as f:
                    f.write(data)
                Path(tmp_path).replace(target)
            except Exception:
                with contextlib.suppress(OSError):
                    Path(tmp_path).unlink()
                raise

        written: list[str] = []
        for target, upload in targets:
            try:
                await asyncio.to_thread(_write, target, upload.data)
            except OSError as e:
                raise StorageError(f"Failed to write file: {upload.filename}") from e
            written.append(self.resolver.relative(target))

        logger.debug("Uploaded %d files to %s", len(written), destination or "/")
        return written

    # ------------------------------------------------------------------
    # Byte Streams
    # ------------------------------------------------------------------

    async def open_download(self, relative_path: str) -> Download:
        """Attachment stream of a file, or an archive when the path is a folder."""
        resolved = self.resolver.resolve(relative_path)
        return await self.open_resolved(resolved, disposition="attachment")

    async def open_stream(self, relative_path: str) -> Download:
        """Inline stream of a file with a best-guess content type."""
        resolved = self.resolver.resolve(relative_path)
        if await asyncio.to_thread(resolved.is_dir):
            raise InvalidPathError("Cannot stream a folder")
        return await self.open_resolved(resolved, disposition="inline")

    async def open_resolved(self, resolved: Path, *, disposition: str = "attachment") -> Download:
        """Build a ``Download`` for an already-resolved path."""
        if not await asyncio.to_thread(resolved.exists):
            raise PathNotFoundError("File not found")

        if await asyncio.to_thread(resolved.is_dir):
            archive = await self.archiver.build(resolved)
            size = (await asyncio.to_thread(archive.stat)).st_size
            return Download(
                path=archive,
                filename=(resolved.name or "download") + self.archiver.extension,
                content_type=self.archiver.content_type,
                disposition="attachment",
                size=size,
                temporary=True,
            )

        st = await asyncio.to_thread(resolved.stat)
        return Download(
            path=resolved,
            filename=resolved.name,
            content_type=guess_content_type(resolved.name),
            disposition=disposition,
            size=st.st_size,
        )

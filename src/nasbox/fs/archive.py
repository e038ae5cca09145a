"""Archiver protocol and the default zip implementation.

Folder downloads are delegated to an ``Archiver`` so the transport layer can
swap in a streaming or cached implementation.
"""

from __future__ import annotations

import asyncio
import os
import tempfile
import zipfile
from pathlib import Path
from typing import Protocol, runtime_checkable

from .utils import is_hidden


@runtime_checkable
class Archiver(Protocol):
    """Builds a single downloadable file out of a directory."""

    extension: str
    content_type: str

    async def build(self, source_dir: Path) -> Path:
        """Archive *source_dir* into a temporary file and return its path.

        The caller owns the returned file and removes it when done.
        """
        ...


class ZipArchiver:
    """Zip a directory tree, skipping hidden names and symlinks."""

    extension = ".zip"
    content_type = "application/zip"

    def __init__(self, temp_dir: str | Path | None = None) -> None:
        self.temp_dir = Path(temp_dir) if temp_dir else None

    async def build(self, source_dir: Path) -> Path:
        return await asyncio.to_thread(self._build, source_dir)

    def _build(self, source_dir: Path) -> Path:
        fd, tmp = tempfile.mkstemp(
            suffix=self.extension, dir=str(self.temp_dir) if self.temp_dir else None
        )
        os.close(fd)
        archive = Path(tmp)
        try:
            with zipfile.ZipFile(archive, "w", compression=zipfile.ZIP_DEFLATED) as zf:
                for dirpath, dirnames, filenames in os.walk(source_dir):
                    dirnames[:] = sorted(d for d in dirnames if not is_hidden(d))
                    for name in sorted(filenames):
                        path = Path(dirpath) / name
                        if is_hidden(name) or path.is_symlink():
                            continue
                        arcname = Path(source_dir.name) / path.relative_to(source_dir)
                        zf.write(path, arcname.as_posix())
        except Exception:
            archive.unlink(missing_ok=True)
            raise
        return archive

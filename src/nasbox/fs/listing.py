"""DirectoryLister — read-only traversal producing Entry rows."""

from __future__ import annotations

import asyncio
import heapq
import os
from datetime import UTC, datetime
from pathlib import Path
from typing import TYPE_CHECKING

from .exceptions import NotDirectoryError, PathNotFoundError
from .types import Entry
from .utils import is_hidden

if TYPE_CHECKING:
    from .resolver import PathResolver

DEFAULT_RECENT_LIMIT = 50


class DirectoryLister:
    """List directories under a resolver's root.

    Dot-prefixed names are never returned. Revealing hidden files is a
    presentation concern, not a storage one.
    """

    def __init__(self, resolver: PathResolver) -> None:
        self.resolver = resolver

    def _entry(self, path: Path, st: os.stat_result, is_dir: bool) -> Entry:
        return Entry(
            name=path.name,
            path=self.resolver.relative(path),
            is_directory=is_dir,
            size=0 if is_dir else st.st_size,
            mtime=datetime.fromtimestamp(st.st_mtime, tz=UTC),
        )

    async def list(self, relative_path: str = "") -> list[Entry]:
        """List the direct children of *relative_path*."""
        resolved = self.resolver.resolve(relative_path)
        return await self.list_resolved(resolved)

    async def list_resolved(self, resolved: Path) -> list[Entry]:
        """List the direct children of an already-resolved directory."""
        if not await asyncio.to_thread(resolved.exists):
            raise PathNotFoundError(f"Directory not found: {self._display(resolved)}")
        if not await asyncio.to_thread(resolved.is_dir):
            raise NotDirectoryError(f"Not a directory: {self._display(resolved)}")

        def _scan() -> list[Entry]:
            entries: list[Entry] = []
            with os.scandir(resolved) as it:
                for item in it:
                    if is_hidden(item.name):
                        continue
                    try:
                        entries.append(
                            self._entry(Path(item.path), item.stat(), item.is_dir())
                        )
                    except OSError:
                        continue
            entries.sort(key=lambda e: (not e.is_directory, e.name.lower()))
            return entries

        return await asyncio.to_thread(_scan)

    async def list_recursive(
        self, relative_path: str = "", limit: int = DEFAULT_RECENT_LIMIT
    ) -> list[Entry]:
        """Files only, newest first, capped at *limit*. Skips hidden names at every level."""
        resolved = self.resolver.resolve(relative_path)
        if not await asyncio.to_thread(resolved.is_dir):
            raise NotDirectoryError(f"Not a directory: {self._display(resolved)}")

        def _walk() -> list[Entry]:
            files: list[Entry] = []
            for dirpath, dirnames, filenames in os.walk(resolved):
                dirnames[:] = [d for d in dirnames if not is_hidden(d)]
                for name in filenames:
                    if is_hidden(name):
                        continue
                    path = Path(dirpath) / name
                    try:
                        files.append(self._entry(path, path.stat(), False))
                    except OSError:
                        continue
            return heapq.nlargest(limit, files, key=lambda e: e.mtime)

        return await asyncio.to_thread(_walk)

    async def entry_for(self, resolved: Path) -> Entry | None:
        """Stat one resolved path. Returns None if it does not exist."""

        def _stat() -> Entry | None:
            try:
                st = resolved.stat()
            except OSError:
                return None
            return self._entry(resolved, st, resolved.is_dir())

        return await asyncio.to_thread(_stat)

    def _display(self, resolved: Path) -> str:
        return self.resolver.relative(resolved) or "/"

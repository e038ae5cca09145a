"""TrashManager — reversible deletion through a hidden trash area.

Lifecycle per item: LIVE -> TRASHED -> RESTORED | PURGED.

The physical move and the metadata update are two steps. A crash between
them leaves either an untracked entry in the trash area or nothing at all;
it never leaves a record pointing at a live item.
"""

from __future__ import annotations

import asyncio
import logging
import os
import secrets
import shutil
from datetime import UTC, datetime
from typing import TYPE_CHECKING

from .exceptions import (
    AccessDeniedError,
    NasboxError,
    PathNotFoundError,
    PersistenceError,
    StorageError,
)
from .types import TrashRecord
from .utils import restored_name, timestamp_ms

if TYPE_CHECKING:
    from pathlib import Path

    from .metadata import MetadataStore
    from .resolver import PathResolver

logger = logging.getLogger(__name__)

DEFAULT_TRASH_DIR = ".trash"


def _remove(path: Path) -> None:
    if path.is_dir() and not path.is_symlink():
        shutil.rmtree(path)
    else:
        path.unlink()


class TrashManager:
    """Trash management: move to trash, list, restore, purge, and empty."""

    def __init__(
        self,
        resolver: PathResolver,
        store: MetadataStore,
        trash_dir_name: str = DEFAULT_TRASH_DIR,
    ) -> None:
        self.resolver = resolver
        self.store = store
        self.trash_dir = resolver.root / trash_dir_name

    def _new_trash_id(self, taken: set[str]) -> str:
        while True:
            trash_id = f"{timestamp_ms()}-{secrets.token_hex(8)}"
            if trash_id not in taken and not os.path.lexists(self.trash_dir / trash_id):
                return trash_id

    # ------------------------------------------------------------------
    # Delete
    # ------------------------------------------------------------------

    async def move_to_trash(self, relative_path: str) -> TrashRecord:
        """Move a live item into the trash area and record it."""
        resolved = self.resolver.resolve(relative_path)
        if resolved == self.resolver.root:
            raise AccessDeniedError("The storage root cannot be deleted")

        rel = self.resolver.relative(resolved)
        try:
            st = await asyncio.to_thread(resolved.lstat)
        except FileNotFoundError:
            raise PathNotFoundError(f"File not found: {rel}") from None
        except OSError as e:
            raise StorageError(f"Cannot access: {rel}") from e

        is_dir = resolved.is_dir() and not resolved.is_symlink()
        doc = await self.store.load()
        trash_id = self._new_trash_id({r.trash_id for r in doc.trash})

        def _move() -> None:
            self.trash_dir.mkdir(parents=True, exist_ok=True)
            shutil.move(str(resolved), str(self.trash_dir / trash_id))

        try:
            await asyncio.to_thread(_move)
        except OSError as e:
            raise StorageError(f"Failed to delete: {rel}") from e

        record = TrashRecord(
            trash_id=trash_id,
            original_path=rel,
            original_name=resolved.name,
            is_directory=is_dir,
            size=0 if is_dir else st.st_size,
            deleted_at=datetime.now(UTC),
        )
        logger.debug("Trashed %s as %s", rel, trash_id)

        try:
            async with self.store.edit() as doc:
                doc.trash.append(record)
        except PersistenceError:
            logger.warning("Trash record for %s was not saved", rel)

        return record

    # ------------------------------------------------------------------
    # List
    # ------------------------------------------------------------------

    def _present(self, record: TrashRecord) -> bool:
        return os.path.lexists(self.trash_dir / record.trash_id)

    async def list_trash(self) -> list[TrashRecord]:
        """Return trash records whose physical entry still exists.

        Records whose entry has vanished are dropped from storage as well.
        """
        doc = await self.store.load()
        present = await asyncio.to_thread(lambda: [r for r in doc.trash if self._present(r)])

        if len(present) != len(doc.trash):
            try:
                async with self.store.edit() as current:
                    current.trash = await asyncio.to_thread(
                        lambda: [r for r in current.trash if self._present(r)]
                    )
            except PersistenceError:
                logger.warning("Could not prune stale trash records")

        return sorted(present, key=lambda r: r.deleted_at, reverse=True)

    # ------------------------------------------------------------------
    # Restore
    # ------------------------------------------------------------------

    async def restore(self, trash_id: str) -> str:
        """Move a trashed item back to its original path.

        If the original path is occupied, the item is restored next to it
        under a ``-restored-<timestamp>`` name. Returns the restored path.
        """
        doc = await self.store.load()
        record = doc.find_trash(trash_id)
        if record is None:
            raise PathNotFoundError(f"Not in trash: {trash_id}")

        source = self.trash_dir / record.trash_id
        if not await asyncio.to_thread(os.path.lexists, source):
            raise PathNotFoundError(f"Trashed item is missing: {record.original_name}")

        target = self.resolver.resolve(record.original_path)
        if target == self.resolver.root:
            raise AccessDeniedError()

        def _restore() -> Path:
            target.parent.mkdir(parents=True, exist_ok=True)
            dest = target
            if os.path.lexists(dest):
                dest = target.parent / restored_name(
                    target.name, is_directory=source.is_dir() and not source.is_symlink()
                )
            shutil.move(str(source), str(dest))
            return dest

        try:
            dest = await asyncio.to_thread(_restore)
        except OSError as e:
            raise StorageError(f"Failed to restore: {record.original_path}") from e

        restored = self.resolver.relative(dest)
        logger.debug("Restored %s to %s", trash_id, restored)

        try:
            async with self.store.edit() as doc:
                doc.trash = [r for r in doc.trash if r.trash_id != trash_id]
        except PersistenceError:
            logger.warning("Trash record %s was not removed", trash_id)

        return restored

    # ------------------------------------------------------------------
    # Purge / Empty
    # ------------------------------------------------------------------

    async def purge(self, trash_id: str) -> TrashRecord:
        """Permanently delete one trashed item."""
        doc = await self.store.load()
        record = doc.find_trash(trash_id)
        if record is None:
            raise PathNotFoundError(f"Not in trash: {trash_id}")

        source = self.trash_dir / record.trash_id
        try:
            if await asyncio.to_thread(os.path.lexists, source):
                await asyncio.to_thread(_remove, source)
        except OSError as e:
            raise StorageError(f"Failed to purge: {record.original_name}") from e

        await self._forget([record], {trash_id})
        logger.info("Purged %s (%s)", trash_id, record.original_path)
        return record

    async def empty_trash(self) -> int:
        """Permanently delete everything in the trash area.

        Returns the number of entries removed. An empty or missing trash
        area is not an error.
        """

        def _empty() -> set[str]:
            if not self.trash_dir.is_dir():
                return set()
            removed: set[str] = set()
            for entry in list(self.trash_dir.iterdir()):
                _remove(entry)
                removed.add(entry.name)
            return removed

        try:
            removed = await asyncio.to_thread(_empty)
        except OSError as e:
            raise StorageError("Failed to empty trash") from e

        doc = await self.store.load()
        await self._forget([r for r in doc.trash if r.trash_id in removed], removed)
        logger.info("Emptied trash: %d entries removed", len(removed))
        return len(removed)

    async def _forget(self, records: list[TrashRecord], removed: set[str]) -> None:
        """Drop purged records and the stars that pointed at their original paths.

        A star is kept when a live item has since reappeared at that path.
        """
        purged_paths = {r.original_path for r in records}

        def _vacant(path: str) -> bool:
            try:
                return not os.path.lexists(self.resolver.resolve(path))
            except NasboxError:
                return True

        try:
            async with self.store.edit() as doc:
                doc.trash = [
                    r for r in doc.trash
                    if r.trash_id not in removed and self._present(r)
                ]
                stale = [p for p in doc.starred if p in purged_paths and _vacant(p)]
                for path in stale:
                    doc.set_starred(path, False)
        except PersistenceError:
            logger.warning("Trash records were not cleared after purge")

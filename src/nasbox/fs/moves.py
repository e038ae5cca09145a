"""MoveCoordinator — batch relocation within the live tree.

Sources are moved concurrently and independently; one failing source never
aborts its siblings. Star and share records that named a moved source are
rewritten to the new path in a single metadata write for the whole batch.
"""

from __future__ import annotations

import asyncio
import logging
import os
import shutil
import threading
from typing import TYPE_CHECKING

from .exceptions import (
    AccessDeniedError,
    AlreadyExistsError,
    InvalidDestinationError,
    NasboxError,
    PathNotFoundError,
    PersistenceError,
    SelfContainmentError,
    StorageError,
)
from .types import MoveReport
from .utils import is_within, normalize_path, split_path

if TYPE_CHECKING:
    from collections.abc import Sequence
    from pathlib import Path

    from .metadata import MetadataStore
    from .resolver import PathResolver

logger = logging.getLogger(__name__)


class MoveCoordinator:
    """Move items between directories and keep metadata pointing at them."""

    def __init__(self, resolver: PathResolver, store: MetadataStore) -> None:
        self.resolver = resolver
        self.store = store
        self._rename_lock = threading.Lock()

    async def move_many(self, sources: Sequence[str], destination: str) -> MoveReport:
        """Move every source into *destination*, reporting per-item outcomes.

        Raises ``InvalidDestinationError`` if *destination* does not resolve
        to an existing directory. Per-source failures are collected as
        messages in the report.
        """
        try:
            dest_dir = self.resolver.resolve(destination)
        except NasboxError as e:
            raise InvalidDestinationError(f"Invalid destination: {e.message}") from None

        if not await asyncio.to_thread(dest_dir.is_dir):
            raise InvalidDestinationError(
                f"Destination is not a directory: {normalize_path(destination) or '/'}"
            )

        outcomes = await asyncio.gather(
            *(self._move_one(src, dest_dir) for src in sources),
            return_exceptions=True,
        )

        report = MoveReport()
        for src, outcome in zip(sources, outcomes, strict=True):
            if isinstance(outcome, NasboxError):
                report.errors.append(outcome.message)
            elif isinstance(outcome, BaseException):
                logger.warning("Unexpected error moving %s", src, exc_info=outcome)
                report.errors.append(f"Failed to move '{split_path(src)[1] or src}'")
            else:
                old_path, new_path = outcome
                report.moved.append(split_path(new_path)[1])
                report.new_paths[old_path] = new_path

        await self._rewrite_metadata(report.new_paths)
        return report

    async def rename(self, relative_path: str, new_name: str) -> str:
        """Rename one item in place. Returns its new relative path."""
        source = self._resolve_source(relative_path)
        target = self.resolver.join(source.parent, new_name)
        old_path = self.resolver.relative(source)
        if target == source:
            return old_path

        await self._relocate(source, target, old_path)
        new_path = self.resolver.relative(target)
        await self._rewrite_metadata({old_path: new_path})
        return new_path

    # ------------------------------------------------------------------
    # Internals
    # ------------------------------------------------------------------

    def _resolve_source(self, relative_path: str) -> Path:
        label = split_path(relative_path)[1] or relative_path
        try:
            source = self.resolver.resolve(relative_path)
        except NasboxError:
            raise AccessDeniedError(f"Access denied: '{label}'") from None
        if source == self.resolver.root:
            raise AccessDeniedError("The storage root cannot be moved")
        return source

    async def _move_one(self, relative_path: str, dest_dir: Path) -> tuple[str, str]:
        source = self._resolve_source(relative_path)
        old_path = self.resolver.relative(source)

        if is_within(dest_dir, source):
            raise SelfContainmentError(f"Cannot move folder '{source.name}' into itself")
        if self.resolver.is_reserved(dest_dir, source.name):
            raise AccessDeniedError(f"Cannot move '{source.name}' to the top level")

        target = dest_dir / source.name
        await self._relocate(source, target, old_path)
        return old_path, self.resolver.relative(target)

    async def _relocate(self, source: Path, target: Path, old_path: str) -> None:
        def _move() -> None:
            # Check and rename must not interleave across batch members.
            with self._rename_lock:
                if not os.path.lexists(source):
                    raise PathNotFoundError(f"Item '{source.name}' not found")
                if os.path.lexists(target):
                    raise AlreadyExistsError(
                        f"Item '{target.name}' already exists in destination"
                    )
                shutil.move(str(source), str(target))

        try:
            await asyncio.to_thread(_move)
        except OSError as e:
            raise StorageError(f"Failed to move '{source.name}'") from e
        logger.debug("Moved %s to %s", old_path, self.resolver.relative(target))

    async def _rewrite_metadata(self, new_paths: dict[str, str]) -> None:
        if not new_paths:
            return
        try:
            async with self.store.edit() as doc:
                for old_path, new_path in new_paths.items():
                    doc.rewrite_path(old_path, new_path)
        except PersistenceError:
            logger.warning("Metadata was not updated after moving %d items", len(new_paths))

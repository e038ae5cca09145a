"""StarService — user tagging of live paths."""

from __future__ import annotations

import asyncio
from typing import TYPE_CHECKING

from .exceptions import NasboxError, PathNotFoundError

if TYPE_CHECKING:
    from .listing import DirectoryLister
    from .metadata import MetadataStore
    from .resolver import PathResolver
    from .types import Entry


class StarService:
    """Star toggles and the self-healing starred listing."""

    def __init__(
        self,
        resolver: PathResolver,
        store: MetadataStore,
        lister: DirectoryLister,
    ) -> None:
        self.resolver = resolver
        self.store = store
        self.lister = lister

    async def set_starred(self, relative_path: str, starred: bool) -> str:
        """Star or unstar a path. Idempotent; returns the normalized path.

        Only existing items can be starred. Unstarring works on any path so
        a dangling star can always be cleared.
        """
        resolved = self.resolver.resolve(relative_path)
        rel = self.resolver.relative(resolved)
        if starred and not await asyncio.to_thread(resolved.exists):
            raise PathNotFoundError(f"File not found: {rel or '/'}")

        await self.store.set_starred(rel, starred)
        return rel

    async def list_starred(self) -> list[Entry]:
        """Entries for every starred path that still exists.

        Dangling stars are skipped, not reported and not pruned.
        """
        entries: list[Entry] = []
        for path in await self.store.starred_paths():
            try:
                resolved = self.resolver.resolve(path)
            except NasboxError:
                continue
            entry = await self.lister.entry_for(resolved)
            if entry is not None:
                entries.append(entry)
        return entries

"""ShareManager — anonymous capability links.

Possession of a token is the only credential. Records are never removed
automatically: a token whose target was moved away or trashed keeps
resolving to ``TargetGoneError`` until it is revoked.
"""

from __future__ import annotations

import asyncio
import logging
import secrets
from datetime import UTC, datetime
from typing import TYPE_CHECKING

from .exceptions import (
    LinkInvalidError,
    NasboxError,
    NotDirectoryError,
    PathNotFoundError,
    TargetGoneError,
)
from .listing import DirectoryLister
from .types import ShareRecord, SharedItemInfo
from .utils import guess_content_type

if TYPE_CHECKING:
    from pathlib import Path

    from .metadata import MetadataStore
    from .resolver import PathResolver
    from .storage import LocalStorage
    from .types import Download, Entry

logger = logging.getLogger(__name__)

DEFAULT_TOKEN_BYTES = 24


class ShareManager:
    """Issue, resolve, and serve share tokens.

    Browsing a shared folder uses a resolver rooted at the shared directory,
    so a sub-path can never climb out of the share into its siblings.
    """

    def __init__(
        self,
        resolver: PathResolver,
        store: MetadataStore,
        storage: LocalStorage,
        token_bytes: int = DEFAULT_TOKEN_BYTES,
    ) -> None:
        self.resolver = resolver
        self.store = store
        self.storage = storage
        self.token_bytes = token_bytes

    # ------------------------------------------------------------------
    # Issue / Revoke
    # ------------------------------------------------------------------

    async def create_share(self, relative_path: str) -> ShareRecord:
        """Register a new token for an existing path."""
        resolved = self.resolver.resolve(relative_path)
        rel = self.resolver.relative(resolved)
        if not await asyncio.to_thread(resolved.exists):
            raise PathNotFoundError(f"File not found: {rel or '/'}")

        async with self.store.edit() as doc:
            token = secrets.token_urlsafe(self.token_bytes)
            while token in doc.shared:
                token = secrets.token_urlsafe(self.token_bytes)
            record = ShareRecord(token=token, path=rel, created=datetime.now(UTC))
            doc.shared[token] = record

        logger.debug("Created share for %s", rel or "/")
        return record

    async def revoke_share(self, token: str) -> bool:
        """Remove a token. Returns True if it was registered."""
        async with self.store.edit() as doc:
            removed = doc.shared.pop(token, None)
        return removed is not None

    async def shares_for(self, relative_path: str) -> list[ShareRecord]:
        """All tokens currently pointing at *relative_path*."""
        rel = self.resolver.relative(self.resolver.resolve(relative_path))
        doc = await self.store.load()
        return [r for r in doc.shared.values() if r.path == rel]

    # ------------------------------------------------------------------
    # Resolve
    # ------------------------------------------------------------------

    async def resolve_share(self, token: str) -> tuple[ShareRecord, Path]:
        """Return the share record and the live path it points at.

        Raises ``LinkInvalidError`` for unknown tokens and ``TargetGoneError``
        when the stored path no longer exists.
        """
        doc = await self.store.load()
        record = doc.shared.get(token)
        if record is None:
            raise LinkInvalidError("Invalid or expired link")

        try:
            target = self.resolver.resolve(record.path)
        except NasboxError:
            raise TargetGoneError("Shared item is no longer available") from None

        if not await asyncio.to_thread(target.exists):
            raise TargetGoneError("Shared item is no longer available")
        return record, target

    async def share_info(self, token: str) -> SharedItemInfo:
        """Public description of the shared item."""
        record, target = await self.resolve_share(token)
        st = await asyncio.to_thread(target.stat)
        is_dir = await asyncio.to_thread(target.is_dir)
        return SharedItemInfo(
            name=target.name,
            size=0 if is_dir else st.st_size,
            content_type=None if is_dir else guess_content_type(target.name),
            created=record.created,
            is_directory=is_dir,
        )

    # ------------------------------------------------------------------
    # Serve
    # ------------------------------------------------------------------

    async def browse(self, token: str, sub_path: str = "") -> list[Entry]:
        """List a directory inside a shared folder.

        Entry paths are relative to the shared folder, not the storage root.
        """
        _, target = await self.resolve_share(token)
        if not await asyncio.to_thread(target.is_dir):
            raise NotDirectoryError("Shared item is not a folder")

        scoped = self.resolver.scoped(target)
        return await DirectoryLister(scoped).list(sub_path)

    async def download(self, token: str, sub_path: str = "") -> Download:
        """Stream the shared file, a file inside a shared folder, or the folder archive."""
        _, target = await self.resolve_share(token)

        if sub_path:
            if not await asyncio.to_thread(target.is_dir):
                raise NotDirectoryError("Shared item is not a folder")
            target = self.resolver.scoped(target).resolve(sub_path)

        return await self.storage.open_resolved(target, disposition="attachment")

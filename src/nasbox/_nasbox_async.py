"""NasboxAsync — primary async API over one storage root."""

from __future__ import annotations

import asyncio
import logging
from pathlib import Path
from typing import TYPE_CHECKING, Any, TypeVar

from nasbox.config import NasboxConfig
from nasbox.fs.exceptions import NasboxError
from nasbox.fs.listing import DirectoryLister
from nasbox.fs.metadata import MetadataStore
from nasbox.fs.moves import MoveCoordinator
from nasbox.fs.resolver import PathResolver
from nasbox.fs.sharing import ShareManager
from nasbox.fs.stars import StarService
from nasbox.fs.storage import LocalStorage
from nasbox.fs.trash import TrashManager
from nasbox.fs.types import (
    DeleteResult,
    DownloadResult,
    ListResult,
    MkdirResult,
    MoveResult,
    RestoreResult,
    Result,
    ShareInfoResult,
    ShareResult,
    StarResult,
    TrashListResult,
    UploadResult,
)
from nasbox.fs.utils import normalize_path, split_path

if TYPE_CHECKING:
    from collections.abc import Sequence

    from nasbox.fs.archive import Archiver
    from nasbox.fs.types import UploadFile

logger = logging.getLogger(__name__)

R = TypeVar("R", bound=Result)


def _failure(result_type: type[R], error: NasboxError, **fields: Any) -> R:
    return result_type(success=False, message=error.message, error_code=error.code, **fields)


class NasboxAsync:
    """Async facade wiring resolver, metadata, trash, moves, stars, and shares.

    Every operation returns a result object. Storage errors never escape as
    exceptions; they come back with ``success=False``, a stable
    ``error_code``, and a client-safe ``message``.

    Usage::

        async with NasboxAsync("/srv/nas") as box:
            await box.create_folder("", "archive")
            result = await box.move(["notes.txt"], "archive")
    """

    def __init__(
        self,
        storage_root: str | Path | None = None,
        *,
        config: NasboxConfig | None = None,
        archiver: Archiver | None = None,
        **options: Any,
    ) -> None:
        if config is None:
            if storage_root is None:
                raise ValueError("Provide storage_root or config")
            config = NasboxConfig(storage_root=Path(storage_root), **options)
        elif storage_root is not None or options:
            raise ValueError("Provide storage_root/options or config, not both")

        self.config = config
        if config.create_root:
            config.storage_root.mkdir(parents=True, exist_ok=True)
        if not config.storage_root.exists():
            raise FileNotFoundError(f"Storage root does not exist: {config.storage_root}")

        assert config.data_dir is not None
        self.resolver = PathResolver(config.storage_root, reserved=config.reserved_names)
        self.store = MetadataStore(config.data_dir)
        self.lister = DirectoryLister(self.resolver)
        self.storage = LocalStorage(self.resolver, archiver)
        self.stars = StarService(self.resolver, self.store, self.lister)
        self.trash = TrashManager(self.resolver, self.store, config.trash_dir_name)
        self.mover = MoveCoordinator(self.resolver, self.store)
        self.shares = ShareManager(
            self.resolver, self.store, self.storage, token_bytes=config.token_bytes
        )
        self._closed = False

    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------

    async def open(self) -> None:
        await self.store.open()

    async def close(self) -> None:
        if self._closed:
            return
        self._closed = True
        await self.store.close()

    async def __aenter__(self) -> NasboxAsync:
        await self.open()
        return self

    async def __aexit__(self, exc_type: object, exc_val: object, exc_tb: object) -> None:
        await self.close()

    # ------------------------------------------------------------------
    # Listing
    # ------------------------------------------------------------------

    async def list_dir(self, path: str = "") -> ListResult:
        """List a directory of the live tree."""
        try:
            resolved = self.resolver.resolve(path)
            entries = await self.lister.list_resolved(resolved)
        except NasboxError as e:
            return _failure(ListResult, e)
        rel = self.resolver.relative(resolved)
        return ListResult(
            success=True,
            message=f"Listed {len(entries)} items in /{rel}",
            entries=entries,
            path=rel,
        )

    async def list_recent(self) -> ListResult:
        """Most recently modified files anywhere under the root, newest first."""
        try:
            entries = await self.lister.list_recursive("", limit=self.config.recent_limit)
        except NasboxError as e:
            return _failure(ListResult, e)
        return ListResult(
            success=True, message=f"Found {len(entries)} recent files", entries=entries
        )

    async def list_starred(self) -> ListResult:
        """Starred items that still exist."""
        entries = await self.stars.list_starred()
        return ListResult(
            success=True, message=f"Found {len(entries)} starred items", entries=entries
        )

    async def list_trash(self) -> TrashListResult:
        """Trashed items, most recently deleted first."""
        records = await self.trash.list_trash()
        return TrashListResult(
            success=True, message=f"Found {len(records)} items in trash", entries=records
        )

    # ------------------------------------------------------------------
    # Live tree mutations
    # ------------------------------------------------------------------

    async def create_folder(self, parent_path: str, name: str | None = None) -> MkdirResult:
        try:
            path = await self.storage.create_folder(parent_path, name)
        except NasboxError as e:
            return _failure(MkdirResult, e)
        return MkdirResult(success=True, message=f"Created folder: /{path}", path=path)

    async def upload(self, destination_path: str, files: Sequence[UploadFile]) -> UploadResult:
        try:
            paths = await self.storage.upload(destination_path, files)
        except NasboxError as e:
            return _failure(UploadResult, e)
        return UploadResult(success=True, message=f"Uploaded {len(paths)} files", paths=paths)

    async def delete(self, path: str) -> DeleteResult:
        """Move an item to the trash. Never a hard delete."""
        try:
            record = await self.trash.move_to_trash(path)
        except NasboxError as e:
            return _failure(DeleteResult, e)
        return DeleteResult(
            success=True,
            message=f"Moved to trash: /{record.original_path}",
            trash_ids=[record.trash_id],
            total_deleted=1,
        )

    async def delete_many(self, paths: Sequence[str]) -> DeleteResult:
        """Trash several items; each one succeeds or fails on its own."""
        outcomes = await asyncio.gather(
            *(self.trash.move_to_trash(p) for p in paths), return_exceptions=True
        )
        trash_ids: list[str] = []
        errors: list[str] = []
        for path, outcome in zip(paths, outcomes, strict=True):
            name = split_path(path)[1] or path
            if isinstance(outcome, NasboxError):
                errors.append(f"{name}: {outcome.message}")
            elif isinstance(outcome, BaseException):
                logger.warning("Unexpected error deleting %s", path, exc_info=outcome)
                errors.append(f"{name}: Failed to delete")
            else:
                trash_ids.append(outcome.trash_id)

        if not trash_ids and errors:
            return DeleteResult(
                success=False,
                message=", ".join(errors),
                error_code="batch_failed",
                errors=errors,
            )
        return DeleteResult(
            success=True,
            message=f"Moved {len(trash_ids)} items to trash",
            trash_ids=trash_ids,
            errors=errors,
            total_deleted=len(trash_ids),
        )

    async def move(self, sources: Sequence[str], destination_path: str) -> MoveResult:
        """Move items into a folder, reporting partial success per item."""
        if not sources:
            return MoveResult(
                success=False, message="No items selected", error_code="invalid_request"
            )
        try:
            report = await self.mover.move_many(sources, destination_path)
        except NasboxError as e:
            return _failure(MoveResult, e)

        if not report.moved:
            return MoveResult(
                success=False,
                message=", ".join(report.errors),
                error_code="batch_failed",
                errors=report.errors,
            )
        return MoveResult(
            success=True,
            message=f"Moved {len(report.moved)} items",
            moved=report.moved,
            errors=report.errors,
        )

    async def rename(self, path: str, new_name: str) -> MoveResult:
        try:
            new_path = await self.mover.rename(path, new_name)
        except NasboxError as e:
            return _failure(MoveResult, e)
        return MoveResult(
            success=True, message=f"Renamed to /{new_path}", moved=[split_path(new_path)[1]]
        )

    async def star(self, path: str, starred: bool = True) -> StarResult:
        try:
            rel = await self.stars.set_starred(path, starred)
        except NasboxError as e:
            return _failure(StarResult, e)
        return StarResult(
            success=True,
            message=f"{'Starred' if starred else 'Unstarred'}: /{rel}",
            path=rel,
            starred=starred,
        )

    # ------------------------------------------------------------------
    # Trash
    # ------------------------------------------------------------------

    async def restore(self, trash_id: str) -> RestoreResult:
        try:
            path = await self.trash.restore(trash_id)
        except NasboxError as e:
            return _failure(RestoreResult, e)
        return RestoreResult(success=True, message=f"Restored from trash: /{path}", file_path=path)

    async def purge(self, trash_id: str) -> DeleteResult:
        try:
            record = await self.trash.purge(trash_id)
        except NasboxError as e:
            return _failure(DeleteResult, e)
        return DeleteResult(
            success=True,
            message=f"Permanently deleted: {record.original_name}",
            trash_ids=[record.trash_id],
            permanent=True,
            total_deleted=1,
        )

    async def empty_trash(self) -> DeleteResult:
        try:
            count = await self.trash.empty_trash()
        except NasboxError as e:
            return _failure(DeleteResult, e)
        return DeleteResult(
            success=True,
            message=f"Permanently deleted {count} items from trash",
            permanent=True,
            total_deleted=count,
        )

    # ------------------------------------------------------------------
    # Byte streams
    # ------------------------------------------------------------------

    async def download(self, path: str) -> DownloadResult:
        """Attachment stream; folders are archived."""
        try:
            download = await self.storage.open_download(path)
        except NasboxError as e:
            return _failure(DownloadResult, e)
        return DownloadResult(success=True, message=download.filename, download=download)

    async def stream(self, path: str) -> DownloadResult:
        """Inline stream with a best-guess content type."""
        try:
            download = await self.storage.open_stream(path)
        except NasboxError as e:
            return _failure(DownloadResult, e)
        return DownloadResult(success=True, message=download.filename, download=download)

    # ------------------------------------------------------------------
    # Sharing
    # ------------------------------------------------------------------

    async def create_share(self, path: str) -> ShareResult:
        try:
            record = await self.shares.create_share(path)
        except NasboxError as e:
            return _failure(ShareResult, e)
        return ShareResult(
            success=True,
            message=f"Shared: /{record.path}",
            token=record.token,
            public_url=self.config.share_url(record.token),
        )

    async def revoke_share(self, token: str) -> Result:
        try:
            removed = await self.shares.revoke_share(token)
        except NasboxError as e:
            return _failure(Result, e)
        if not removed:
            return Result(
                success=False, message="Invalid or expired link", error_code="link_invalid"
            )
        return Result(success=True, message="Share link revoked")

    async def get_share_info(self, token: str) -> ShareInfoResult:
        try:
            info = await self.shares.share_info(token)
        except NasboxError as e:
            return _failure(ShareInfoResult, e)
        return ShareInfoResult(success=True, message=info.name, info=info)

    async def download_share(self, token: str, sub_path: str = "") -> DownloadResult:
        try:
            download = await self.shares.download(token, sub_path)
        except NasboxError as e:
            return _failure(DownloadResult, e)
        return DownloadResult(success=True, message=download.filename, download=download)

    async def list_share_folder(self, token: str, sub_path: str = "") -> ListResult:
        try:
            entries = await self.shares.browse(token, sub_path)
        except NasboxError as e:
            return _failure(ListResult, e)
        return ListResult(
            success=True,
            message=f"Listed {len(entries)} items",
            entries=entries,
            path=normalize_path(sub_path),
        )

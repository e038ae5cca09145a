"""Nasbox — synchronous wrapper around NasboxAsync."""

from __future__ import annotations

import asyncio
import threading
from typing import TYPE_CHECKING, Any

from nasbox._nasbox_async import NasboxAsync

if TYPE_CHECKING:
    from collections.abc import Sequence
    from pathlib import Path

    from nasbox.config import NasboxConfig
    from nasbox.fs.archive import Archiver
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
        UploadFile,
        UploadResult,
    )


class Nasbox:
    """Synchronous facade backed by a private event loop in a background thread.

    Usable from plain sync code or from inside another running loop.

    Usage::

        with Nasbox("/srv/nas") as box:
            box.create_folder("", "archive")
            box.move(["notes.txt"], "archive")
    """

    def __init__(
        self,
        storage_root: str | Path | None = None,
        *,
        config: NasboxConfig | None = None,
        archiver: Archiver | None = None,
        **options: Any,
    ) -> None:
        self._closed = False
        self._async = NasboxAsync(storage_root, config=config, archiver=archiver, **options)

        self._loop = asyncio.new_event_loop()
        self._thread = threading.Thread(target=self._loop.run_forever, daemon=True)
        self._thread.start()

        self._run(self._async.open())

    @property
    def config(self) -> NasboxConfig:
        return self._async.config

    def _run(self, coro: Any) -> Any:
        """Submit *coro* to the private loop and block for the result."""
        future = asyncio.run_coroutine_threadsafe(coro, self._loop)
        return future.result()

    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------

    def close(self) -> None:
        if self._closed:
            return
        self._closed = True
        try:
            self._run(self._async.close())
        finally:
            self._loop.call_soon_threadsafe(self._loop.stop)
            self._thread.join(timeout=5)
            self._loop.close()

    def __enter__(self) -> Nasbox:
        return self

    def __exit__(self, *args: object) -> None:
        self.close()

    # ------------------------------------------------------------------
    # Listing
    # ------------------------------------------------------------------

    def list_dir(self, path: str = "") -> ListResult:
        return self._run(self._async.list_dir(path))

    def list_recent(self) -> ListResult:
        return self._run(self._async.list_recent())

    def list_starred(self) -> ListResult:
        return self._run(self._async.list_starred())

    def list_trash(self) -> TrashListResult:
        return self._run(self._async.list_trash())

    # ------------------------------------------------------------------
    # Mutations
    # ------------------------------------------------------------------

    def create_folder(self, parent_path: str, name: str | None = None) -> MkdirResult:
        return self._run(self._async.create_folder(parent_path, name))

    def upload(self, destination_path: str, files: Sequence[UploadFile]) -> UploadResult:
        return self._run(self._async.upload(destination_path, files))

    def delete(self, path: str) -> DeleteResult:
        return self._run(self._async.delete(path))

    def delete_many(self, paths: Sequence[str]) -> DeleteResult:
        return self._run(self._async.delete_many(paths))

    def move(self, sources: Sequence[str], destination_path: str) -> MoveResult:
        return self._run(self._async.move(sources, destination_path))

    def rename(self, path: str, new_name: str) -> MoveResult:
        return self._run(self._async.rename(path, new_name))

    def star(self, path: str, starred: bool = True) -> StarResult:
        return self._run(self._async.star(path, starred))

    def restore(self, trash_id: str) -> RestoreResult:
        return self._run(self._async.restore(trash_id))

    def purge(self, trash_id: str) -> DeleteResult:
        return self._run(self._async.purge(trash_id))

    def empty_trash(self) -> DeleteResult:
        return self._run(self._async.empty_trash())

    # ------------------------------------------------------------------
    # Byte streams
    # ------------------------------------------------------------------

    def download(self, path: str) -> DownloadResult:
        return self._run(self._async.download(path))

    def stream(self, path: str) -> DownloadResult:
        return self._run(self._async.stream(path))

    def read_bytes(self, result: DownloadResult) -> bytes:
        """Drain a successful download result into memory."""
        if result.download is None:
            raise ValueError(result.message)
        return self._run(result.download.read_all())

    # ------------------------------------------------------------------
    # Sharing
    # ------------------------------------------------------------------

    def create_share(self, path: str) -> ShareResult:
        return self._run(self._async.create_share(path))

    def revoke_share(self, token: str) -> Result:
        return self._run(self._async.revoke_share(token))

    def get_share_info(self, token: str) -> ShareInfoResult:
        return self._run(self._async.get_share_info(token))

    def download_share(self, token: str, sub_path: str = "") -> DownloadResult:
        return self._run(self._async.download_share(token, sub_path))

    def list_share_folder(self, token: str, sub_path: str = "") -> ListResult:
        return self._run(self._async.list_share_folder(token, sub_path))

"""Tests for ShareManager — capability links over files and folders."""

from __future__ import annotations

import io
import zipfile

import pytest

from nasbox.fs.exceptions import (
    AccessDeniedError,
    LinkInvalidError,
    NotDirectoryError,
    PathNotFoundError,
    TargetGoneError,
)
from nasbox.fs.sharing import ShareManager


@pytest.fixture
def tree(root):
    """album/a.jpg, album/sub/b.jpg, notes.txt, private.txt."""
    (root / "album" / "sub").mkdir(parents=True)
    (root / "album" / "a.jpg").write_bytes(b"jpeg-a")
    (root / "album" / "sub" / "b.jpg").write_bytes(b"jpeg-b")
    (root / "notes.txt").write_text("notes")
    (root / "private.txt").write_text("private")
    return root


# ---------------------------------------------------------------------------
# create / revoke
# ---------------------------------------------------------------------------


class TestCreateShare:
    async def test_token_is_url_safe_and_long(self, shares, tree):
        record = await shares.create_share("notes.txt")
        assert record.path == "notes.txt"
        assert len(record.token) >= 32
        assert all(c.isalnum() or c in "-_" for c in record.token)

    async def test_tokens_are_distinct(self, shares, tree):
        first = await shares.create_share("notes.txt")
        second = await shares.create_share("notes.txt")
        assert first.token != second.token

    async def test_persisted(self, shares, store, tree):
        record = await shares.create_share("album")
        doc = await store.load()
        assert doc.shared[record.token].path == "album"

    async def test_missing_target(self, shares, tree):
        with pytest.raises(PathNotFoundError):
            await shares.create_share("ghost.txt")

    async def test_traversal_denied(self, shares, tree):
        with pytest.raises(AccessDeniedError):
            await shares.create_share("../etc/passwd")

    async def test_custom_token_size(self, resolver, store, storage, tree):
        manager = ShareManager(resolver, store, storage, token_bytes=32)
        record = await manager.create_share("notes.txt")
        assert len(record.token) >= 43

    async def test_shares_for(self, shares, tree):
        record = await shares.create_share("notes.txt")
        await shares.create_share("album")
        assert [r.token for r in await shares.shares_for("notes.txt")] == [record.token]


class TestRevokeShare:
    async def test_revoke(self, shares, tree):
        record = await shares.create_share("notes.txt")
        assert await shares.revoke_share(record.token) is True
        with pytest.raises(LinkInvalidError):
            await shares.resolve_share(record.token)

    async def test_revoke_unknown(self, shares):
        assert await shares.revoke_share("nope") is False


# ---------------------------------------------------------------------------
# resolve / info
# ---------------------------------------------------------------------------


class TestResolveShare:
    async def test_unknown_token(self, shares):
        with pytest.raises(LinkInvalidError):
            await shares.resolve_share("does-not-exist")

    async def test_target_gone_after_trash(self, shares, trash, store, tree):
        record = await shares.create_share("notes.txt")
        await trash.move_to_trash("notes.txt")

        with pytest.raises(TargetGoneError):
            await shares.resolve_share(record.token)
        assert record.token in (await store.load()).shared

    async def test_target_gone_is_not_found(self, shares, tree):
        record = await shares.create_share("notes.txt")
        (tree / "notes.txt").unlink()
        with pytest.raises(PathNotFoundError):
            await shares.resolve_share(record.token)

    async def test_file_info(self, shares, tree):
        record = await shares.create_share("notes.txt")
        info = await shares.share_info(record.token)
        assert info.name == "notes.txt"
        assert info.size == 5
        assert info.content_type == "text/plain"
        assert info.is_directory is False
        assert info.created == record.created

    async def test_folder_info(self, shares, tree):
        record = await shares.create_share("album")
        info = await shares.share_info(record.token)
        assert info.is_directory is True
        assert info.size == 0
        assert info.content_type is None


# ---------------------------------------------------------------------------
# browse / download
# ---------------------------------------------------------------------------


class TestBrowse:
    async def test_browse_folder_root(self, shares, tree):
        record = await shares.create_share("album")
        entries = await shares.browse(record.token)
        assert [(e.name, e.path) for e in entries] == [("sub", "sub"), ("a.jpg", "a.jpg")]

    async def test_browse_sub_folder(self, shares, tree):
        record = await shares.create_share("album")
        entries = await shares.browse(record.token, "sub")
        assert [e.path for e in entries] == ["sub/b.jpg"]

    async def test_browse_cannot_escape_share(self, shares, tree):
        record = await shares.create_share("album")
        with pytest.raises(AccessDeniedError):
            await shares.browse(record.token, "../")

    async def test_browse_file_share_rejected(self, shares, tree):
        record = await shares.create_share("notes.txt")
        with pytest.raises(NotDirectoryError):
            await shares.browse(record.token)

    async def test_root_share_hides_trash(self, shares, trash, tree):
        await trash.move_to_trash("private.txt")
        record = await shares.create_share("")
        with pytest.raises(AccessDeniedError):
            await shares.browse(record.token, ".trash")


class TestShareDownload:
    async def test_download_shared_file(self, shares, tree):
        record = await shares.create_share("notes.txt")
        download = await shares.download(record.token)
        assert download.filename == "notes.txt"
        assert download.disposition == "attachment"
        assert await download.read_all() == b"notes"

    async def test_download_file_inside_folder(self, shares, tree):
        record = await shares.create_share("album")
        download = await shares.download(record.token, "sub/b.jpg")
        assert await download.read_all() == b"jpeg-b"

    async def test_download_folder_archive(self, shares, tree):
        record = await shares.create_share("album")
        download = await shares.download(record.token)
        assert download.filename == "album.zip"
        data = await download.read_all()
        with zipfile.ZipFile(io.BytesIO(data)) as zf:
            assert sorted(zf.namelist()) == ["album/a.jpg", "album/sub/b.jpg"]

    async def test_sub_path_escape_denied(self, shares, tree):
        record = await shares.create_share("album")
        with pytest.raises(AccessDeniedError):
            await shares.download(record.token, "../private.txt")

    async def test_sub_path_on_file_share(self, shares, tree):
        record = await shares.create_share("notes.txt")
        with pytest.raises(NotDirectoryError):
            await shares.download(record.token, "anything")

    async def test_missing_sub_path(self, shares, tree):
        record = await shares.create_share("album")
        with pytest.raises(PathNotFoundError):
            await shares.download(record.token, "nope.jpg")

    async def test_share_survives_parent_move(self, shares, mover, tree):
        (tree / "archive").mkdir()
        record = await shares.create_share("album/a.jpg")
        await mover.move_many(["album"], "archive")
        download = await shares.download(record.token)
        assert await download.read_all() == b"jpeg-a"

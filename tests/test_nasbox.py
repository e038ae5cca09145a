"""Tests for Nasbox — the synchronous wrapper."""

from __future__ import annotations

import pytest

from nasbox import Nasbox, UploadFile


@pytest.fixture
def sync_box(root):
    box = Nasbox(root, public_base_url="https://nas.example")
    yield box
    box.close()


class TestSyncWrapper:
    def test_upload_and_list(self, sync_box):
        result = sync_box.upload("docs", [UploadFile("a.txt", b"hi")])
        assert result.success is True
        listing = sync_box.list_dir("docs")
        assert [e.name for e in listing.entries] == ["a.txt"]

    def test_download_read_bytes(self, sync_box):
        sync_box.upload("", [UploadFile("a.txt", b"payload")])
        result = sync_box.download("a.txt")
        assert sync_box.read_bytes(result) == b"payload"

    def test_read_bytes_on_failure(self, sync_box):
        result = sync_box.download("missing.txt")
        with pytest.raises(ValueError):
            sync_box.read_bytes(result)

    def test_trash_round_trip(self, sync_box, root):
        sync_box.upload("", [UploadFile("a.txt", b"x")])
        deleted = sync_box.delete("a.txt")
        assert not (root / "a.txt").exists()
        assert sync_box.restore(deleted.trash_ids[0]).success is True
        assert (root / "a.txt").exists()

    def test_share(self, sync_box):
        sync_box.create_folder("", "album")
        share = sync_box.create_share("album")
        assert share.public_url.startswith("https://nas.example/share/")
        assert sync_box.list_share_folder(share.token).success is True

    def test_close_is_idempotent(self, root):
        box = Nasbox(root)
        box.close()
        box.close()

    def test_context_manager(self, root):
        with Nasbox(root) as box:
            assert box.config.storage_root == root
            assert box.move(["ghost"], "").error_code == "batch_failed"

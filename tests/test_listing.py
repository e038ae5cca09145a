"""Tests for DirectoryLister — directory and recent listings."""

from __future__ import annotations

import os

import pytest

from nasbox.fs.exceptions import AccessDeniedError, NotDirectoryError, PathNotFoundError


def _touch(path, content: str = "x", mtime: float | None = None) -> None:
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(content)
    if mtime is not None:
        os.utime(path, (mtime, mtime))


# ---------------------------------------------------------------------------
# list
# ---------------------------------------------------------------------------


class TestList:
    async def test_empty_root(self, lister):
        assert await lister.list("") == []

    async def test_directories_first_then_name(self, lister, root):
        _touch(root / "b.txt")
        _touch(root / "A.txt")
        (root / "zeta").mkdir()
        (root / "Alpha").mkdir()

        entries = await lister.list("")
        assert [e.name for e in entries] == ["Alpha", "zeta", "A.txt", "b.txt"]

    async def test_entry_fields(self, lister, root):
        _touch(root / "docs" / "a.txt", "hello")
        (entry,) = await lister.list("docs")
        assert entry.name == "a.txt"
        assert entry.path == "docs/a.txt"
        assert entry.is_directory is False
        assert entry.size == 5
        assert entry.mtime.tzinfo is not None

    async def test_directory_size_is_zero(self, lister, root):
        _touch(root / "docs" / "a.txt", "hello")
        (entry,) = await lister.list("")
        assert entry.is_directory is True
        assert entry.size == 0

    async def test_hidden_entries_skipped(self, lister, root):
        _touch(root / ".secret")
        (root / ".trash").mkdir()
        _touch(root / "visible.txt")
        entries = await lister.list("")
        assert [e.name for e in entries] == ["visible.txt"]

    async def test_missing_directory(self, lister):
        with pytest.raises(PathNotFoundError):
            await lister.list("nope")

    async def test_file_is_not_directory(self, lister, root):
        _touch(root / "a.txt")
        with pytest.raises(NotDirectoryError):
            await lister.list("a.txt")

    async def test_traversal_denied(self, lister):
        with pytest.raises(AccessDeniedError):
            await lister.list("../")


# ---------------------------------------------------------------------------
# list_recursive
# ---------------------------------------------------------------------------


class TestListRecursive:
    async def test_newest_first_files_only(self, lister, root):
        _touch(root / "old.txt", mtime=1_000_000)
        _touch(root / "docs" / "mid.txt", mtime=2_000_000)
        _touch(root / "docs" / "deep" / "new.txt", mtime=3_000_000)

        entries = await lister.list_recursive("")
        assert [e.path for e in entries] == ["docs/deep/new.txt", "docs/mid.txt", "old.txt"]
        assert all(not e.is_directory for e in entries)

    async def test_limit(self, lister, root):
        for i in range(5):
            _touch(root / f"f{i}.txt", mtime=1_000_000 + i)
        entries = await lister.list_recursive("", limit=2)
        assert [e.name for e in entries] == ["f4.txt", "f3.txt"]

    async def test_hidden_trees_pruned(self, lister, root):
        _touch(root / ".trash" / "123-abc" / "gone.txt")
        _touch(root / "docs" / ".cache" / "x.txt")
        _touch(root / "docs" / ".hidden.txt")
        _touch(root / "docs" / "seen.txt")
        entries = await lister.list_recursive("")
        assert [e.path for e in entries] == ["docs/seen.txt"]


# ---------------------------------------------------------------------------
# entry_for
# ---------------------------------------------------------------------------


class TestEntryFor:
    async def test_existing(self, lister, resolver, root):
        _touch(root / "a.txt", "abc")
        entry = await lister.entry_for(resolver.resolve("a.txt"))
        assert entry is not None
        assert entry.size == 3

    async def test_missing(self, lister, resolver):
        assert await lister.entry_for(resolver.resolve("nope.txt")) is None

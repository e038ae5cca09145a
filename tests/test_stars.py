"""Tests for StarService — starring and the starred listing."""

from __future__ import annotations

import pytest

from nasbox.fs.exceptions import AccessDeniedError, PathNotFoundError
from nasbox.fs.stars import StarService


@pytest.fixture
def stars(resolver, store, lister) -> StarService:
    return StarService(resolver, store, lister)


class TestStars:
    async def test_star_existing(self, stars, store, root):
        (root / "a.txt").write_text("a")
        assert await stars.set_starred("/a.txt", True) == "a.txt"
        assert await store.starred_paths() == ["a.txt"]

    async def test_star_idempotent(self, stars, store, root):
        (root / "a.txt").write_text("a")
        await stars.set_starred("a.txt", True)
        await stars.set_starred("a.txt", True)
        assert await store.starred_paths() == ["a.txt"]

    async def test_star_missing_rejected(self, stars):
        with pytest.raises(PathNotFoundError):
            await stars.set_starred("ghost.txt", True)

    async def test_unstar_missing_allowed(self, stars, store):
        await store.set_starred("ghost.txt", True)
        assert await stars.set_starred("ghost.txt", False) == "ghost.txt"
        assert await store.starred_paths() == []

    async def test_traversal_denied(self, stars):
        with pytest.raises(AccessDeniedError):
            await stars.set_starred("../x", True)


class TestListStarred:
    async def test_lists_existing_in_star_order(self, stars, root):
        (root / "b.txt").write_text("b")
        (root / "docs").mkdir()
        await stars.set_starred("b.txt", True)
        await stars.set_starred("docs", True)
        entries = await stars.list_starred()
        assert [(e.path, e.is_directory) for e in entries] == [("b.txt", False), ("docs", True)]

    async def test_dangling_star_skipped_not_pruned(self, stars, store, root):
        (root / "a.txt").write_text("a")
        await stars.set_starred("a.txt", True)
        (root / "a.txt").unlink()

        assert await stars.list_starred() == []
        assert await store.starred_paths() == ["a.txt"]

    async def test_reserved_star_skipped(self, stars, store, root):
        await store.set_starred(".trash/x", True)
        assert await stars.list_starred() == []

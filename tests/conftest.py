"""Shared fixtures for nasbox tests."""

from __future__ import annotations

from typing import TYPE_CHECKING

import pytest

from nasbox._nasbox_async import NasboxAsync
from nasbox.fs.listing import DirectoryLister
from nasbox.fs.metadata import MetadataStore
from nasbox.fs.moves import MoveCoordinator
from nasbox.fs.resolver import PathResolver
from nasbox.fs.sharing import ShareManager
from nasbox.fs.storage import LocalStorage
from nasbox.fs.trash import TrashManager

if TYPE_CHECKING:
    from collections.abc import AsyncIterator
    from pathlib import Path


@pytest.fixture
def root(tmp_path: Path) -> Path:
    """Empty storage root inside a temporary directory."""
    path = tmp_path / "storage"
    path.mkdir()
    return path


@pytest.fixture
def resolver(root: Path) -> PathResolver:
    return PathResolver(root, reserved={".trash", ".nasbox"})


@pytest.fixture
async def store(root: Path) -> AsyncIterator[MetadataStore]:
    """Metadata store backed by a SQLite file under the storage root."""
    s = MetadataStore(root / ".nasbox")
    await s.open()
    yield s
    await s.close()


@pytest.fixture
def lister(resolver: PathResolver) -> DirectoryLister:
    return DirectoryLister(resolver)


@pytest.fixture
def storage(resolver: PathResolver) -> LocalStorage:
    return LocalStorage(resolver)


@pytest.fixture
def trash(resolver: PathResolver, store: MetadataStore) -> TrashManager:
    return TrashManager(resolver, store)


@pytest.fixture
def mover(resolver: PathResolver, store: MetadataStore) -> MoveCoordinator:
    return MoveCoordinator(resolver, store)


@pytest.fixture
def shares(
    resolver: PathResolver, store: MetadataStore, storage: LocalStorage
) -> ShareManager:
    return ShareManager(resolver, store, storage)


@pytest.fixture
async def box(root: Path) -> AsyncIterator[NasboxAsync]:
    """Fully wired async facade over the temporary storage root."""
    async with NasboxAsync(root, public_base_url="https://nas.example") as b:
        yield b

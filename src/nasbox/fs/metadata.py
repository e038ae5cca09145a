"""MetadataStore — durable home of the starred, trash, and share collections.

The whole document is loaded and saved as one unit. ``edit()`` is the only
read-modify-write entry point and serializes writers behind a single lock.
"""

from __future__ import annotations

import asyncio
import contextlib
import logging
import sqlite3
from datetime import UTC, datetime
from pathlib import Path
from typing import TYPE_CHECKING

from sqlalchemy import delete, event
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
from sqlmodel import SQLModel, select

from nasbox.models.metadata import ShareLink, StarredPath, TrashEntry

from .exceptions import PersistenceError
from .types import MetadataDocument, ShareRecord, TrashRecord

if TYPE_CHECKING:
    from collections.abc import AsyncIterator

    from sqlalchemy.ext.asyncio import AsyncEngine

logger = logging.getLogger(__name__)

METADATA_FILENAME = "metadata.db"

_TABLES = [
    StarredPath.__table__,  # type: ignore[attr-defined]
    TrashEntry.__table__,  # type: ignore[attr-defined]
    ShareLink.__table__,  # type: ignore[attr-defined]
]


def _aware(value: datetime) -> datetime:
    """SQLite drops tzinfo on the way back; every stored timestamp is UTC."""
    if value.tzinfo is None:
        return value.replace(tzinfo=UTC)
    return value


class MetadataStore:
    """Load/save the metadata document from ``{data_dir}/metadata.db``.

    Reads fail soft (an empty document is returned and the error is logged).
    Writes raise ``PersistenceError``; callers log and swallow it so a
    metadata failure never rolls back a filesystem change that already
    happened.
    """

    def __init__(
        self,
        data_dir: str | Path,
        *,
        engine: AsyncEngine | None = None,
    ) -> None:
        self.data_dir = Path(data_dir)
        self._engine = engine
        self._owns_engine = engine is None
        self._session_factory: async_sessionmaker[AsyncSession] | None = None
        self._init_lock = asyncio.Lock()
        self._write_lock = asyncio.Lock()

    @property
    def db_path(self) -> Path:
        return self.data_dir / METADATA_FILENAME

    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------

    async def open(self) -> None:
        await self._ensure_db()

    async def close(self) -> None:
        if self._engine is not None and self._owns_engine:
            await self._engine.dispose()
            self._engine = None
        self._session_factory = None

    async def _ensure_db(self) -> async_sessionmaker[AsyncSession]:
        """Initialize the database if needed."""
        if self._session_factory is not None:
            return self._session_factory
        async with self._init_lock:
            if self._session_factory is not None:
                return self._session_factory

            if self._engine is None:
                await asyncio.to_thread(self.data_dir.mkdir, parents=True, exist_ok=True)
                self._engine = create_async_engine(
                    f"sqlite+aiosqlite:///{self.db_path}",
                    echo=False,
                )

                @event.listens_for(self._engine.sync_engine, "connect")
                def _set_sqlite_pragma(
                    dbapi_connection: object, connection_record: object
                ) -> None:
                    cursor = dbapi_connection.cursor()  # type: ignore[union-attr]
                    cursor.execute("PRAGMA journal_mode=WAL")
                    result = cursor.fetchone()
                    if result[0].lower() != "wal":
                        logger.warning("WAL mode not active, got: %s", result[0])
                    cursor.execute("PRAGMA busy_timeout=5000")
                    cursor.close()

            async with self._engine.begin() as conn:
                await conn.run_sync(
                    lambda c: SQLModel.metadata.create_all(c, tables=_TABLES)
                )

            self._session_factory = async_sessionmaker(
                self._engine, class_=AsyncSession, expire_on_commit=False
            )
            logger.debug("Metadata store ready at %s", self.db_path)
            return self._session_factory

    # ------------------------------------------------------------------
    # Load / Save
    # ------------------------------------------------------------------

    async def load(self) -> MetadataDocument:
        """Return the persisted document, or an empty one if it cannot be read."""
        try:
            return await self._read()
        except (SQLAlchemyError, sqlite3.Error, OSError):
            logger.warning("Failed to load metadata; using an empty document", exc_info=True)
            return MetadataDocument()

    async def save(self, doc: MetadataDocument) -> None:
        """Persist the whole document in one transaction."""
        try:
            await self._write(doc)
        except (SQLAlchemyError, sqlite3.Error, OSError) as e:
            logger.warning("Failed to save metadata", exc_info=True)
            raise PersistenceError("Failed to save metadata") from e

    @contextlib.asynccontextmanager
    async def edit(self) -> AsyncIterator[MetadataDocument]:
        """Serialized read-modify-write of the document.

        The document is saved when the block exits cleanly. Unlike ``load()``,
        a read failure here raises ``PersistenceError``.
        """
        async with self._write_lock:
            try:
                doc = await self._read()
            except (SQLAlchemyError, sqlite3.Error, OSError) as e:
                logger.warning("Failed to load metadata for update", exc_info=True)
                raise PersistenceError("Failed to load metadata") from e
            yield doc
            await self.save(doc)

    async def _read(self) -> MetadataDocument:
        factory = await self._ensure_db()
        async with factory() as session:
            starred = (
                await session.execute(select(StarredPath).order_by(StarredPath.position))
            ).scalars().all()
            trash = (
                await session.execute(select(TrashEntry).order_by(TrashEntry.deleted_at))
            ).scalars().all()
            shares = (await session.execute(select(ShareLink))).scalars().all()

        return MetadataDocument(
            starred=[row.path for row in starred],
            trash=[
                TrashRecord(
                    trash_id=row.trash_id,
                    original_path=row.original_path,
                    original_name=row.original_name,
                    is_directory=row.is_directory,
                    size=row.size_bytes,
                    deleted_at=_aware(row.deleted_at),
                )
                for row in trash
            ],
            shared={
                row.token: ShareRecord(
                    token=row.token, path=row.path, created=_aware(row.created_at)
                )
                for row in shares
            },
        )

    async def _write(self, doc: MetadataDocument) -> None:
        factory = await self._ensure_db()
        starred = list(dict.fromkeys(doc.starred))
        async with factory() as session, session.begin():
            await session.execute(delete(StarredPath))
            await session.execute(delete(TrashEntry))
            await session.execute(delete(ShareLink))
            session.add_all(
                StarredPath(path=path, position=i) for i, path in enumerate(starred)
            )
            session.add_all(
                TrashEntry(
                    trash_id=r.trash_id,
                    original_path=r.original_path,
                    original_name=r.original_name,
                    is_directory=r.is_directory,
                    size_bytes=r.size,
                    deleted_at=r.deleted_at,
                )
                for r in doc.trash
            )
            session.add_all(
                ShareLink(token=token, path=r.path, created_at=r.created)
                for token, r in doc.shared.items()
            )

    # ------------------------------------------------------------------
    # Stars
    # ------------------------------------------------------------------

    async def set_starred(self, path: str, starred: bool) -> bool:
        """Add or remove *path* from the starred set. Idempotent.

        Returns True if the set changed.
        """
        async with self.edit() as doc:
            changed = doc.set_starred(path, starred)
        return changed

    async def starred_paths(self) -> list[str]:
        doc = await self.load()
        return list(doc.starred)

"""Metadata models — persisted form of the starred, trash, and share collections.

The three tables live in one SQLite file and are always rewritten together
inside a single transaction by ``MetadataStore.save()``.
"""

from __future__ import annotations

from datetime import UTC, datetime

from sqlalchemy import DateTime
from sqlmodel import Field, SQLModel


class StarredPath(SQLModel, table=True):
    """One starred relative path."""

    __tablename__ = "nasbox_starred"

    path: str = Field(primary_key=True)
    position: int = Field(default=0)


class TrashEntry(SQLModel, table=True):
    """One trashed item, keyed by the name of its location in the trash area."""

    __tablename__ = "nasbox_trash"

    trash_id: str = Field(primary_key=True)
    original_path: str = Field(index=True)
    original_name: str = Field(default="")
    is_directory: bool = Field(default=False)
    size_bytes: int = Field(default=0)
    deleted_at: datetime = Field(
        default_factory=lambda: datetime.now(UTC),
        sa_type=DateTime(timezone=True),  # type: ignore[invalid-argument-type]
    )


class ShareLink(SQLModel, table=True):
    """One share token and the relative path it grants access to."""

    __tablename__ = "nasbox_shares"

    token: str = Field(primary_key=True)
    path: str = Field(index=True)
    created_at: datetime = Field(
        default_factory=lambda: datetime.now(UTC),
        sa_type=DateTime(timezone=True),  # type: ignore[invalid-argument-type]
    )

"""SQLModel database models for nasbox metadata."""

from nasbox.models.metadata import ShareLink, StarredPath, TrashEntry

__all__ = [
    "ShareLink",
    "StarredPath",
    "TrashEntry",
]

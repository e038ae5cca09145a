"""Storage layer — path sandboxing, metadata, trash, moves, and sharing."""

from nasbox.fs.archive import Archiver, ZipArchiver
from nasbox.fs.exceptions import (
    AccessDeniedError,
    AlreadyExistsError,
    InvalidDestinationError,
    InvalidPathError,
    LinkInvalidError,
    NasboxError,
    NotDirectoryError,
    PathNotFoundError,
    PersistenceError,
    SelfContainmentError,
    StorageError,
    TargetGoneError,
)
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
    Download,
    DownloadResult,
    Entry,
    ListResult,
    MetadataDocument,
    MkdirResult,
    MoveReport,
    MoveResult,
    RestoreResult,
    Result,
    ShareInfoResult,
    SharedItemInfo,
    ShareRecord,
    ShareResult,
    StarResult,
    TrashListResult,
    TrashRecord,
    UploadFile,
    UploadResult,
)

__all__ = [
    "AccessDeniedError",
    "AlreadyExistsError",
    "Archiver",
    "DeleteResult",
    "DirectoryLister",
    "Download",
    "DownloadResult",
    "Entry",
    "InvalidDestinationError",
    "InvalidPathError",
    "LinkInvalidError",
    "ListResult",
    "LocalStorage",
    "MetadataDocument",
    "MetadataStore",
    "MkdirResult",
    "MoveCoordinator",
    "MoveReport",
    "MoveResult",
    "NasboxError",
    "NotDirectoryError",
    "PathNotFoundError",
    "PathResolver",
    "PersistenceError",
    "RestoreResult",
    "Result",
    "SelfContainmentError",
    "ShareInfoResult",
    "ShareManager",
    "ShareRecord",
    "ShareResult",
    "SharedItemInfo",
    "StarResult",
    "StarService",
    "StorageError",
    "TargetGoneError",
    "TrashListResult",
    "TrashManager",
    "TrashRecord",
    "UploadFile",
    "UploadResult",
    "ZipArchiver",
]

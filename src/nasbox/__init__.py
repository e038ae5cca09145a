"""nasbox: sandboxed file storage.

Trash, stars, and anonymous share links on top of a plain directory tree.
"""

__version__ = "0.1.0"

from nasbox._nasbox import Nasbox
from nasbox._nasbox_async import NasboxAsync
from nasbox.config import NasboxConfig
from nasbox.fs.archive import Archiver, ZipArchiver
from nasbox.fs.exceptions import NasboxError
from nasbox.fs.types import (
    DeleteResult,
    Download,
    DownloadResult,
    Entry,
    ListResult,
    MkdirResult,
    MoveResult,
    RestoreResult,
    Result,
    ShareInfoResult,
    SharedItemInfo,
    ShareResult,
    StarResult,
    TrashListResult,
    TrashRecord,
    UploadFile,
    UploadResult,
)

__all__ = [
    "Archiver",
    "DeleteResult",
    "Download",
    "DownloadResult",
    "Entry",
    "ListResult",
    "MkdirResult",
    "MoveResult",
    "Nasbox",
    "NasboxAsync",
    "NasboxConfig",
    "NasboxError",
    "RestoreResult",
    "Result",
    "ShareInfoResult",
    "ShareResult",
    "SharedItemInfo",
    "StarResult",
    "TrashListResult",
    "TrashRecord",
    "UploadFile",
    "UploadResult",
    "ZipArchiver",
    "__version__",
]

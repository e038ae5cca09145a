"""Custom exception hierarchy for the nasbox storage layer.

Every exception carries a stable ``code`` and a ``message`` that is safe to
hand to a client: no absolute host paths, no stack traces.
"""


class NasboxError(Exception):
    """Base exception for all nasbox storage errors."""

    code = "error"

    def __init__(self, message: str = "") -> None:
        super().__init__(message)
        self.message = message or self.code


class InvalidPathError(NasboxError):
    """Raised when a path is malformed (null bytes, control characters, too long)."""

    code = "invalid_path"


class AccessDeniedError(NasboxError):
    """Raised when a path escapes the storage root or targets a reserved name."""

    code = "access_denied"

    def __init__(self, message: str = "Access denied") -> None:
        super().__init__(message)


class PathNotFoundError(NasboxError):
    """Raised when a file or directory path does not exist."""

    code = "not_found"


class TargetGoneError(PathNotFoundError):
    """Raised when a share token is valid but its target no longer exists."""

    code = "target_gone"


class NotDirectoryError(NasboxError):
    """Raised when a directory operation is applied to a file."""

    code = "not_a_directory"


class InvalidDestinationError(NasboxError):
    """Raised when a move destination is missing or is not a directory."""

    code = "invalid_destination"


class AlreadyExistsError(NasboxError):
    """Raised when an item with the same name already exists at the destination."""

    code = "already_exists"


class SelfContainmentError(NasboxError):
    """Raised when a directory would be moved into itself or its own subtree."""

    code = "self_containment"


class LinkInvalidError(NasboxError):
    """Raised when a share token is not registered."""

    code = "link_invalid"


class PersistenceError(NasboxError):
    """Raised when the metadata document could not be written."""

    code = "persistence_error"


class StorageError(NasboxError):
    """Raised on disk I/O failures during a mutating operation."""

    code = "storage_error"

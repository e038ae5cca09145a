"""PathResolver — confines client-relative paths to the storage root."""

from __future__ import annotations

import os
from pathlib import Path
from typing import TYPE_CHECKING

from .exceptions import AccessDeniedError, InvalidPathError
from .utils import is_within, normalize_path, validate_name, validate_path

if TYPE_CHECKING:
    from collections.abc import Iterable


class PathResolver:
    """Resolve client-relative paths into absolute paths under *root*.

    Security: every returned path lies lexically under ``root`` and its
    symlink-resolved form lies under the resolved root as well. Paths are
    normalized before the containment check, never after.

    The returned path is the lexical one, so an operation on a symlink acts
    on the link and not on its target.
    """

    def __init__(self, root: Path | str, reserved: Iterable[str] = ()) -> None:
        self.root = Path(root).resolve()
        self.reserved = frozenset(reserved)

        if not self.root.is_dir():
            raise NotADirectoryError(f"Storage root is not a directory: {self.root}")

    def resolve(self, relative_path: str | None) -> Path:
        """Resolve *relative_path*; ``""`` denotes the root itself."""
        raw = relative_path or ""
        valid, error = validate_path(raw)
        if not valid:
            raise InvalidPathError(error)

        rel = normalize_path(raw)
        if not rel:
            return self.root

        head = rel.split("/", 1)[0]
        if head in self.reserved:
            raise AccessDeniedError()

        return self._contain(Path(os.path.normpath(self.root / rel)))

    def join(self, base: Path, name: str) -> Path:
        """Join a user-chosen *name* onto an already-resolved directory *base*."""
        if "/" in name or "\\" in name or name in (".", ".."):
            raise AccessDeniedError()

        valid, error = validate_name(name)
        if not valid:
            raise InvalidPathError(error)

        if self.is_reserved(base, name):
            raise AccessDeniedError()

        return self._contain(Path(os.path.normpath(base / name)))

    def relative(self, path: Path) -> str:
        """Return the "/"-joined path of *path* relative to the root."""
        rel = path.relative_to(self.root).as_posix()
        return "" if rel == "." else rel

    def scoped(self, base: Path) -> PathResolver:
        """A resolver whose root is *base*, for browsing inside a shared folder."""
        self._contain(base)
        return PathResolver(base, self.reserved if base == self.root else ())

    def is_reserved(self, base: Path, name: str) -> bool:
        """True if *name* placed directly in *base* would take a reserved top-level name."""
        return base == self.root and name in self.reserved

    def _contain(self, candidate: Path) -> Path:
        if not is_within(candidate, self.root):
            raise AccessDeniedError()
        if not is_within(candidate.resolve(), self.root):
            raise AccessDeniedError()
        return candidate

"""NasboxConfig — storage root, metadata location, and tunables."""

from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path

from nasbox.fs.listing import DEFAULT_RECENT_LIMIT
from nasbox.fs.sharing import DEFAULT_TOKEN_BYTES
from nasbox.fs.trash import DEFAULT_TRASH_DIR
from nasbox.fs.utils import is_within

DATA_DIR_NAME = ".nasbox"
ENV_PREFIX = "NASBOX_"


@dataclass
class NasboxConfig:
    """Configuration for one storage root."""

    storage_root: Path
    """Directory exposed to clients. Everything outside it is unreachable."""

    data_dir: Path | None = None
    """Where ``metadata.db`` lives. Defaults to ``{storage_root}/.nasbox``."""

    trash_dir_name: str = DEFAULT_TRASH_DIR
    """Name of the hidden trash directory directly under the storage root."""

    public_base_url: str = ""
    """Prefix for share links, e.g. ``https://nas.local``."""

    recent_limit: int = DEFAULT_RECENT_LIMIT
    """Maximum number of entries in the recent view."""

    token_bytes: int = DEFAULT_TOKEN_BYTES
    """Random bytes per share token."""

    create_root: bool = True
    """Create the storage root if it does not exist."""

    def __post_init__(self) -> None:
        self.storage_root = Path(self.storage_root).expanduser()
        if self.data_dir is None:
            self.data_dir = self.storage_root / DATA_DIR_NAME
        else:
            self.data_dir = Path(self.data_dir).expanduser()
        if "/" in self.trash_dir_name or not self.trash_dir_name.startswith("."):
            raise ValueError(f"Trash directory must be a hidden name: {self.trash_dir_name!r}")
        if self.recent_limit < 1:
            raise ValueError("recent_limit must be positive")
        if self.token_bytes < 16:
            raise ValueError("token_bytes must be at least 16")

    @property
    def reserved_names(self) -> set[str]:
        """Top-level names under the storage root that clients cannot address."""
        reserved = {self.trash_dir_name}
        root = self.storage_root.resolve()
        assert self.data_dir is not None
        data_dir = self.data_dir.resolve()
        if data_dir != root and is_within(data_dir, root):
            reserved.add(data_dir.relative_to(root).parts[0])
        return reserved

    def share_url(self, token: str) -> str:
        return f"{self.public_base_url.rstrip('/')}/share/{token}"

    @classmethod
    def from_env(cls, **overrides: object) -> NasboxConfig:
        """Build a config from ``NASBOX_*`` environment variables.

        Keyword arguments take precedence over the environment.
        """
        values: dict[str, object] = {}
        env = os.environ
        if f"{ENV_PREFIX}STORAGE_ROOT" in env:
            values["storage_root"] = env[f"{ENV_PREFIX}STORAGE_ROOT"]
        if f"{ENV_PREFIX}DATA_DIR" in env:
            values["data_dir"] = env[f"{ENV_PREFIX}DATA_DIR"]
        if f"{ENV_PREFIX}PUBLIC_BASE_URL" in env:
            values["public_base_url"] = env[f"{ENV_PREFIX}PUBLIC_BASE_URL"]
        if f"{ENV_PREFIX}RECENT_LIMIT" in env:
            values["recent_limit"] = int(env[f"{ENV_PREFIX}RECENT_LIMIT"])
        values.update(overrides)
        if "storage_root" not in values:
            raise ValueError(f"{ENV_PREFIX}STORAGE_ROOT is not set")
        return cls(**values)  # type: ignore[arg-type]

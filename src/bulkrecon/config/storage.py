"""Where the snapshot database and the manifest queue live on disk."""

from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path
from typing import Final

APP_DIR_NAME: Final[str] = "bulkrecon"
DEFAULT_DB_FILENAME: Final[str] = "bulkrecon.db"
DEFAULT_QUEUE_DIRNAME: Final[str] = "sp_create"


@dataclass(frozen=True, slots=True)
class StorageConfig:
    data_dir: Path
    queue_dir: Path
    database_uri_override: str | None = None

    @property
    def sqlite_path(self) -> Path:
        return self.data_dir / DEFAULT_DB_FILENAME

    def database_uri(self) -> str:
        """Return the SQLAlchemy URI, creating the data directory for the SQLite default."""

        if self.database_uri_override:
            return self.database_uri_override
        self.data_dir.mkdir(parents=True, exist_ok=True)
        return f"sqlite+pysqlite:///{self.sqlite_path}"


def _env_path(name: str) -> Path | None:
    raw = os.getenv(name)
    if not raw or not raw.strip():
        return None
    return Path(raw.strip()).expanduser().resolve()


def _platform_data_home() -> Path:
    if os.name == "nt":
        base = os.getenv("LOCALAPPDATA")
        return Path(base) if base else Path.home() / "AppData" / "Local"
    base = os.getenv("XDG_DATA_HOME")
    return Path(base) if base else Path.home() / ".local" / "share"


def get_storage_config() -> StorageConfig:
    """Resolve storage locations from ``BULKRECON_DATA_DIR``, ``BULKRECON_QUEUE_DIR``
    and ``DATABASE_URI``, falling back to the per-user data directory."""

    data_dir = _env_path("BULKRECON_DATA_DIR") or (
        (_platform_data_home() / APP_DIR_NAME).expanduser().resolve()
    )
    queue_dir = _env_path("BULKRECON_QUEUE_DIR") or data_dir / DEFAULT_QUEUE_DIRNAME
    return StorageConfig(
        data_dir=data_dir,
        queue_dir=queue_dir,
        database_uri_override=os.getenv("DATABASE_URI") or None,
    )


def get_database_uri() -> str:
    return get_storage_config().database_uri()


def get_queue_dir() -> Path:
    return get_storage_config().queue_dir

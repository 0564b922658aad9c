"""Run the snapshot store's Alembic migrations programmatically."""

from __future__ import annotations

import logging
import tomllib
from pathlib import Path
from typing import TYPE_CHECKING, Final

from alembic import command
from alembic.config import Config

from bulkrecon.config.storage import get_database_uri

if TYPE_CHECKING:
    from sqlalchemy.engine import Engine

log = logging.getLogger(__name__)

MIGRATIONS_DIR: Final[Path] = Path(__file__).resolve().parent
# src/bulkrecon/adapters/sqlalchemy/migrations -> repository root
SOURCE_ROOT: Final[Path] = MIGRATIONS_DIR.parents[4]


def _alembic_table(pyproject: Path) -> dict[str, str]:
    """Return ``[tool.alembic]`` from a checkout's pyproject, or nothing when installed."""

    if not pyproject.is_file():
        return {}
    with pyproject.open("rb") as handle:
        table = tomllib.load(handle).get("tool", {}).get("alembic", {})
    return {str(key): str(value) for key, value in table.items()}


def alembic_config(*, root: Path = SOURCE_ROOT) -> Config:
    options = _alembic_table(root / "pyproject.toml")
    location = options.pop("script_location", None)
    if location is None:
        script_dir = MIGRATIONS_DIR
    else:
        script_dir = Path(location) if Path(location).is_absolute() else root / location

    config = Config()
    config.set_main_option("script_location", str(script_dir))
    for key, value in options.items():
        config.set_main_option(key, value)
    return config


def upgrade_head(*, engine: Engine | None = None, database_uri: str | None = None) -> None:
    """Bring the snapshot tables up to the newest revision.

    With ``engine`` the migration runs inside one of its connections, which keeps
    in-memory SQLite databases alive across the upgrade.
    """

    config = alembic_config()
    if engine is None:
        config.set_main_option("sqlalchemy.url", database_uri or get_database_uri())
        command.upgrade(config, "head")
        return
    with engine.begin() as connection:
        config.attributes["connection"] = connection
        log.debug("Upgrading schema on %s", engine.url.render_as_string(hide_password=True))
        command.upgrade(config, "head")

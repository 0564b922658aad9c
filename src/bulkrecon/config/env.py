"""Environment variable readers shared by the config modules."""

from __future__ import annotations

import os
from typing import TYPE_CHECKING

from .errors import ConfigurationError, MissingConfigurationError

if TYPE_CHECKING:
    from collections.abc import Sequence


def _read(name: str) -> str | None:
    value = os.getenv(name)
    if value is None or not value.strip():
        return None
    return value.strip()


def require_env_vars(names: Sequence[str]) -> dict[str, str]:
    """Return the named variables, reporting every blank or absent one at once."""

    values = {name: _read(name) for name in names}
    missing = [name for name, value in values.items() if value is None]
    if missing:
        raise MissingConfigurationError(missing)
    return {name: value for name, value in values.items() if value is not None}


def require_env_var(name: str) -> str:
    return require_env_vars([name])[name]


def optional_positive_int(name: str) -> int | None:
    """Parse ``name`` as an integer >= 1; unset or blank means ``None``."""

    raw = _read(name)
    if raw is None:
        return None
    try:
        value = int(raw)
    except ValueError as exc:
        raise ConfigurationError(f"Invalid integer for {name}: {raw}", variable=name) from exc
    if value < 1:
        raise ConfigurationError(f"{name} must be >= 1, got {value}", variable=name)
    return value

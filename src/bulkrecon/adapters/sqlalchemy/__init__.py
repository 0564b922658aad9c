"""SQLAlchemy adapter package for the bulk snapshot store."""

from __future__ import annotations

from .mappings import create_all_tables, metadata
from .repositories import SqlAlchemySnapshotRepository
from .unit_of_work import SqlAlchemyUnitOfWork, shutdown, startup

__all__ = [
    "SqlAlchemySnapshotRepository",
    "SqlAlchemyUnitOfWork",
    "create_all_tables",
    "metadata",
    "shutdown",
    "startup",
]

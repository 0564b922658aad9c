from __future__ import annotations

import os
from datetime import UTC, datetime
from typing import TYPE_CHECKING

import pytest
from sqlalchemy import create_engine
from sqlalchemy.engine import Engine  # noqa: TC002
from sqlalchemy.orm import Session, sessionmaker

from bulkrecon.adapters.filesystem import PENDING_DIRNAME, FileSystemManifestQueue
from bulkrecon.adapters.sqlalchemy import SqlAlchemySnapshotRepository
from bulkrecon.adapters.sqlalchemy.migrations import upgrade_head
from bulkrecon.adapters.sqlalchemy.unit_of_work import SqlAlchemyUnitOfWork, shutdown, startup
from bulkrecon.domain.reconciliation import ReconcileEngine, SnapshotRepository
from tests.helpers.snapshots import ACCOUNT_ID, FakeSnapshotReader

os.environ.setdefault("DATABASE_URI", "sqlite+pysqlite:///:memory:")

if TYPE_CHECKING:
    from collections.abc import Callable, Iterator
    from pathlib import Path

FIXED_NOW = datetime(2026, 3, 2, 9, 30, tzinfo=UTC)


@pytest.fixture
def sqlite_engine() -> Iterator[Engine]:
    engine = create_engine("sqlite+pysqlite:///:memory:", future=True)
    upgrade_head(engine=engine)
    try:
        yield engine
    finally:
        engine.dispose()


@pytest.fixture
def sqlite_session(sqlite_engine: Engine) -> Iterator[Session]:
    session_factory = sessionmaker(bind=sqlite_engine, future=True)
    session = session_factory()
    try:
        yield session
    finally:
        session.close()


@pytest.fixture
def sql_snapshots(sqlite_session: Session) -> SqlAlchemySnapshotRepository:
    return SqlAlchemySnapshotRepository(sqlite_session)


@pytest.fixture
def sqlite_unit_of_work(
    sqlite_engine: Engine,
) -> Iterator[Callable[[], SqlAlchemyUnitOfWork]]:
    startup(engine=sqlite_engine, force=True)

    def factory() -> SqlAlchemyUnitOfWork:
        return SqlAlchemyUnitOfWork()

    try:
        yield factory
    finally:
        shutdown()


@pytest.fixture
def fake_reader() -> FakeSnapshotReader:
    return FakeSnapshotReader()


@pytest.fixture
def snapshot_repository(fake_reader: FakeSnapshotReader) -> SnapshotRepository:
    return SnapshotRepository(fake_reader, ACCOUNT_ID)


@pytest.fixture
def engine() -> ReconcileEngine:
    return ReconcileEngine(clock=lambda: FIXED_NOW)


@pytest.fixture
def queue(tmp_path: Path) -> FileSystemManifestQueue:
    (tmp_path / PENDING_DIRNAME).mkdir()
    manifest_queue = FileSystemManifestQueue.at(tmp_path)
    manifest_queue.ensure_directories()
    return manifest_queue

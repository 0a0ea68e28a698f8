from __future__ import annotations

import os
from pathlib import Path
from typing import TYPE_CHECKING

import pytest
from sqlalchemy import create_engine
from sqlalchemy.engine import Engine  # noqa: TC002
from sqlalchemy.orm import Session, sessionmaker

from crmrecords.adapters.sqlalchemy import start_mappers
from crmrecords.adapters.sqlalchemy.migrations import upgrade_head
from crmrecords.adapters.sqlalchemy.unit_of_work import SqlAlchemyUnitOfWork, shutdown, startup
from crmrecords.domain.reconciler import RecordReconciler
from tests.helpers.fakes import FakeUnitOfWork, InMemoryDatabase
from tests.helpers.records import FIXED_TODAY

os.environ.setdefault("DATABASE_URI", "sqlite+pysqlite:///:memory:")

if TYPE_CHECKING:
    from collections.abc import Callable, Iterator

DATA_DIR = Path(__file__).resolve().parent / "data"


@pytest.fixture
def data_dir() -> Path:
    return DATA_DIR


@pytest.fixture
def sqlite_engine() -> Iterator[Engine]:
    engine = create_engine("sqlite+pysqlite:///:memory:", future=True)
    start_mappers()
    upgrade_head(engine=engine)
    try:
        yield engine
    finally:
        engine.dispose()


@pytest.fixture
def sqlite_session(sqlite_engine: Engine) -> Iterator[Session]:
    session_factory = sessionmaker(bind=sqlite_engine, future=True, expire_on_commit=False)
    session = session_factory()
    try:
        yield session
    finally:
        session.close()


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
def memory_db() -> InMemoryDatabase:
    return InMemoryDatabase()


@pytest.fixture
def fake_reconciler(memory_db: InMemoryDatabase) -> RecordReconciler:
    return RecordReconciler(lambda: FakeUnitOfWork(memory_db), today=lambda: FIXED_TODAY)


@pytest.fixture
def sqlite_reconciler(
    sqlite_unit_of_work: Callable[[], SqlAlchemyUnitOfWork],
) -> RecordReconciler:
    return RecordReconciler(sqlite_unit_of_work, today=lambda: FIXED_TODAY)

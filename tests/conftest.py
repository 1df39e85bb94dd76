from __future__ import annotations

import os
from typing import TYPE_CHECKING

import pytest
from sqlalchemy import create_engine
from sqlalchemy.engine import Engine  # noqa: TC002
from sqlalchemy.orm import Session, sessionmaker

from stashpy.adapters.sqlalchemy import start_mappers
from stashpy.adapters.sqlalchemy.migrations import upgrade_head
from stashpy.adapters.sqlalchemy.unit_of_work import SqlAlchemyUnitOfWork, shutdown, startup
from stashpy.domain.tagging import TagCatalog, TagDefinition
from tests.helpers.bookmarks import InMemoryStore, TickingClock

os.environ.setdefault("DATABASE_URI", "sqlite+pysqlite:///:memory:")

if TYPE_CHECKING:
    from collections.abc import Callable, Iterator


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
    session_factory = sessionmaker(bind=sqlite_engine, future=True)
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
def store() -> InMemoryStore:
    return InMemoryStore()


@pytest.fixture
def clock() -> TickingClock:
    return TickingClock()


@pytest.fixture
def small_catalog() -> TagCatalog:
    """Two focused definitions, small enough for short texts to clear the threshold."""

    return TagCatalog.of(
        [
            TagDefinition(
                name="ai/ml",
                slug="ai-ml",
                color="#8B5CF6",
                keywords=("machine learning", "neural network"),
            ),
            TagDefinition(
                name="coding",
                slug="coding",
                color="#3B82F6",
                keywords=("python", "code"),
            ),
        ]
    )

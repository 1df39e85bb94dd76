"""SQLAlchemy-backed units of work."""

from __future__ import annotations

import logging
from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import TYPE_CHECKING, Literal

from sqlalchemy import create_engine
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm import Session, sessionmaker

from stashpy.adapters.sqlalchemy.mappings import start_mappers
from stashpy.adapters.sqlalchemy.migrations import upgrade_head
from stashpy.adapters.sqlalchemy.repositories import (
    SqlAlchemyBookmarkRepository,
    SqlAlchemyTagAssociationRepository,
    SqlAlchemyTagRepository,
)
from stashpy.config import get_database_config
from stashpy.domain.errors import ConstraintViolation, StorageError
from stashpy.domain.ports.unit_of_work import IngestRepositories, RepositoryCollection

if TYPE_CHECKING:
    from collections.abc import Callable
    from types import TracebackType

    from sqlalchemy.engine import Engine

log = logging.getLogger(__name__)


class StartupError(RuntimeError):
    """Raised when a SQLAlchemy unit of work is used before initialisation."""


@dataclass(slots=True)
class _AdapterState:
    _engine: Engine | None = None
    _session_factory: sessionmaker[Session] | None = None

    @property
    def engine(self) -> Engine | None:
        return self._engine

    @engine.setter
    def engine(self, value: Engine | None) -> None:
        self._session_factory = None
        self._engine = value

    @property
    def session_factory(self) -> sessionmaker[Session]:
        if self._engine is None:
            raise StartupError(
                "SQLAlchemy adapter not initialised. Call stashpy.adapters.sqlalchemy."
                "unit_of_work.startup() before requesting a unit of work."
            )
        if self._session_factory is None:
            self._session_factory = sessionmaker(bind=self._engine, expire_on_commit=False)
        return self._session_factory


_STATE = _AdapterState()


def startup(
    *,
    engine: Engine | None = None,
    database_uri: str | None = None,
    force: bool = False,
) -> None:
    """Initialise the SQLAlchemy engine, metadata, and session factory."""

    if _STATE.engine is not None and not force:
        raise StartupError(
            "SQLAlchemy adapter already initialised. Pass force=True to reconfigure."
        )

    resolved_engine = engine or create_engine(
        database_uri or get_database_config().uri, future=True
    )
    start_mappers()
    upgrade_head(engine=resolved_engine)
    _STATE.engine = resolved_engine


def configured_engine() -> Engine | None:
    """Return the engine currently managed by the adapter (if any)."""

    return _STATE.engine


def is_started() -> bool:
    """Return whether the adapter has been initialised."""

    return _STATE.engine is not None


def shutdown() -> None:
    """Dispose the managed engine and reset state (primarily for tests)."""

    if _STATE.engine is not None:
        _STATE.engine.dispose()
    _STATE.engine = None


class BaseSqlAlchemyUnitOfWork[TRepositories: RepositoryCollection](ABC):
    """Generic SQLAlchemy unit of work with pluggable repository collections."""

    def __init__(self, session_factory: sessionmaker[Session] | None = None) -> None:
        self.session_factory: sessionmaker[Session] = session_factory or _STATE.session_factory
        self._session: Session | None = None

    @abstractmethod
    def _build_repositories(self, session: Session) -> TRepositories: ...

    def __enter__(self) -> BaseSqlAlchemyUnitOfWork[TRepositories]:
        self.session = self.session_factory()
        self._repositories = self._build_repositories(self.session)
        return self

    def __exit__(
        self,
        exc_type: type[BaseException] | None,
        exc_value: BaseException | None,
        traceback: TracebackType | None,
    ) -> Literal[False]:
        if exc_type is not None:
            self.rollback()
        self.session.close()
        self.session = None
        # Database errors raised by repository reads leave as domain errors.
        if isinstance(exc_value, IntegrityError):
            raise ConstraintViolation(str(exc_value.orig)) from exc_value
        if isinstance(exc_value, SQLAlchemyError):
            log.error("Storage failure: %s", exc_value)
            raise StorageError(str(exc_value)) from exc_value
        return False

    def flush(self) -> None:
        """Send pending writes to the database without committing."""

        self._translate_integrity_errors(self.session.flush)

    def commit(self) -> None:
        """Commit the session, translating uniqueness failures.

        Raises:
            ConstraintViolation: the database rejected the write; the session
                has been rolled back.
        """

        self._translate_integrity_errors(self.session.commit)

    def _translate_integrity_errors(self, operation: Callable[[], None]) -> None:
        try:
            operation()
        except IntegrityError as exc:
            self.session.rollback()
            log.debug("Write rejected by constraint: %s", exc.orig)
            raise ConstraintViolation(str(exc.orig)) from exc

    def rollback(self) -> None:
        self.session.rollback()

    @property
    def repositories(self) -> TRepositories:
        if self._session is None:
            raise StartupError("Unit of work session not initialised")
        return self._repositories

    @property
    def session(self) -> Session:
        if self._session is None:
            raise StartupError("Unit of work session not initialised")
        return self._session

    @session.setter
    def session(self, session: Session | None) -> None:
        if self._session is not None and session is not None:
            raise StartupError("Unit of work session already initialised")
        self._session = session


class SqlAlchemyUnitOfWork(BaseSqlAlchemyUnitOfWork[IngestRepositories]):
    """Unit of work for bookmark ingestion and tagging."""

    def _build_repositories(self, session: Session) -> IngestRepositories:
        return IngestRepositories(
            bookmarks=SqlAlchemyBookmarkRepository(session),
            tags=SqlAlchemyTagRepository(session),
            tag_associations=SqlAlchemyTagAssociationRepository(session),
        )

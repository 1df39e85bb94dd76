"""Unit-of-work abstractions for coordinating repositories."""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING, Protocol, runtime_checkable

if TYPE_CHECKING:
    from types import TracebackType

    from stashpy.domain.ports.persistence import (
        BookmarkRepository,
        TagAssociationRepository,
        TagRepository,
    )


@runtime_checkable
class RepositoryCollection(Protocol):
    """Marker protocol for groups of repositories managed together."""


@runtime_checkable
class UnitOfWork[TRepositories: RepositoryCollection](Protocol):
    """Generic unit-of-work boundary around a repository collection.

    ``flush`` and ``commit`` raise
    :class:`~stashpy.domain.errors.ConstraintViolation` when the store rejects a
    write on a uniqueness constraint; the transaction is rolled back before the
    error propagates. Any other storage failure inside the unit leaves it as
    :class:`~stashpy.domain.errors.StorageError`.
    """

    @property
    def repositories(self) -> TRepositories: ...

    def __enter__(self) -> UnitOfWork[TRepositories]: ...

    def __exit__(
        self,
        exc_type: type[BaseException] | None,
        exc_value: BaseException | None,
        traceback: TracebackType | None,
    ) -> bool: ...

    def flush(self) -> None: ...

    def commit(self) -> None: ...

    def rollback(self) -> None: ...


@dataclass(slots=True)
class IngestRepositories(RepositoryCollection):
    """Repositories required to ingest and tag bookmarks."""

    bookmarks: BookmarkRepository
    tags: TagRepository
    tag_associations: TagAssociationRepository


type IngestUnitOfWork = UnitOfWork[IngestRepositories]

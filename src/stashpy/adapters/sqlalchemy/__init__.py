"""SQLAlchemy adapter package for stashpy."""

from __future__ import annotations

from .mappings import create_all_tables, mapper_registry, start_mappers
from .repositories import (
    SqlAlchemyBookmarkRepository,
    SqlAlchemyTagAssociationRepository,
    SqlAlchemyTagRepository,
)
from .unit_of_work import SqlAlchemyUnitOfWork, StartupError, shutdown, startup

__all__ = [
    "SqlAlchemyBookmarkRepository",
    "SqlAlchemyTagAssociationRepository",
    "SqlAlchemyTagRepository",
    "SqlAlchemyUnitOfWork",
    "StartupError",
    "create_all_tables",
    "mapper_registry",
    "shutdown",
    "start_mappers",
    "startup",
]

"""Domain port definitions for adapters."""

from __future__ import annotations

from .fetching import FetchedContent, UrlContentFetcher
from .persistence import (
    BookmarkLookup,
    BookmarkRepository,
    Repository,
    TagAssociationRepository,
    TagCount,
    TagRepository,
)
from .unit_of_work import (
    RepositoryCollection,
    IngestRepositories,
    IngestUnitOfWork,
    UnitOfWork,
)

__all__ = [
    "BookmarkLookup",
    "BookmarkRepository",
    "FetchedContent",
    "Repository",
    "RepositoryCollection",
    "IngestRepositories",
    "IngestUnitOfWork",
    "TagAssociationRepository",
    "TagCount",
    "TagRepository",
    "UnitOfWork",
    "UrlContentFetcher",
]

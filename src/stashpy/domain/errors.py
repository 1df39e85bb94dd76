"""Domain error taxonomy.

Batch operations never let one of these abort the whole batch; they are
captured per item and reported alongside the successful outcomes.
"""

from __future__ import annotations


class StashError(RuntimeError):
    """Base class for domain errors raised by stashpy."""


class ValidationError(StashError):
    """Raised when an input record is malformed."""

    def __init__(self, message: str, *, field: str | None = None) -> None:
        super().__init__(message)
        self.field = field


class NotFoundError(StashError):
    """Raised when a referenced bookmark or tag does not exist."""

    def __init__(self, kind: str, key: object) -> None:
        super().__init__(f"Unknown {kind}: {key}")
        self.kind = kind
        self.key = key


class ConstraintViolation(StashError):
    """Raised when the store rejects a write because of a uniqueness constraint."""


class DuplicateTagError(ConstraintViolation):
    """Raised when creating a tag whose slug or name already exists."""


class StorageError(StashError):
    """Raised when the store fails for a reason other than a uniqueness constraint."""


class UpstreamFetchError(StashError):
    """Raised when fetching remote content fails."""

    def __init__(self, url: str, reason: str, *, status_code: int | None = None) -> None:
        super().__init__(f"Failed to fetch URL {url}: {reason}")
        self.url = url
        self.reason = reason
        self.status_code = status_code

"""SQLAlchemy mapping metadata for the stashpy domain model."""

from __future__ import annotations

import logging
import uuid
from datetime import UTC, datetime
from functools import cache
from typing import TYPE_CHECKING

from sqlalchemy import (
    Boolean,
    Column,
    DateTime,
    Dialect,
    Enum,
    Float,
    ForeignKey,
    String,
    Table,
    Text,
    TypeDecorator,
    UniqueConstraint,
    Uuid,
    orm,
)
from sqlalchemy.orm import configure_mappers, relationship

from stashpy.domain.model import Bookmark, Source, Tag, TagAssociation

if TYPE_CHECKING:
    from sqlalchemy.engine import Engine

log = logging.getLogger(__name__)

UUIDColumnType = Uuid[uuid.UUID]


class UTCDateTime(TypeDecorator[datetime]):
    impl = DateTime(timezone=True)
    cache_ok = True

    def process_bind_param(self, value: datetime | None, dialect: Dialect) -> datetime | None:
        _ = dialect
        if value is None:
            return None
        if value.tzinfo is None:
            value = value.replace(tzinfo=UTC)
        return value.astimezone(UTC)

    def process_result_value(self, value: datetime | None, dialect: Dialect) -> datetime | None:
        _ = dialect
        if value is None:
            return None
        return value if value.tzinfo else value.replace(tzinfo=UTC)


mapper_registry = orm.registry()
mapper_registry.metadata.naming_convention = {
    "ix": "ix_%(column_0_label)s",
    "uq": "uq_%(table_name)s_%(column_0_label)s",
    "ck": "ck_%(table_name)s_%(constraint_name)s",
    "fk": "fk_%(table_name)s_%(column_0_label)s_%(referred_table_name)s",
    "pk": "pk_%(table_name)s",
}

bookmark_table = Table(
    "bookmark",
    mapper_registry.metadata,
    Column("id", UUIDColumnType, primary_key=True, default=uuid.uuid4),
    Column("source", Enum(Source, native_enum=False), nullable=False),
    Column("external_id", String, nullable=True),
    Column("url", Text, nullable=True, index=True),
    Column("content", Text, nullable=True),
    Column("author", String, nullable=True),
    Column("source_created_at", UTCDateTime(), nullable=True),
    Column("first_ingested_at", UTCDateTime(), nullable=False),
    Column("last_ingested_at", UTCDateTime(), nullable=False),
    # NULL external ids never collide, so url-only and raw bookmarks are unconstrained.
    UniqueConstraint("source", "external_id"),
)

tag_table = Table(
    "tag",
    mapper_registry.metadata,
    Column("id", UUIDColumnType, primary_key=True, default=uuid.uuid4),
    Column("name", String(100), nullable=False, unique=True),
    Column("slug", String(100), nullable=False, unique=True),
    Column("description", String(500), nullable=True),
    Column("color", String(7), nullable=True),
    Column("created_at", UTCDateTime(), nullable=False),
    Column("updated_at", UTCDateTime(), nullable=False),
)

tag_association_table = Table(
    "tag_association",
    mapper_registry.metadata,
    Column("id", UUIDColumnType, primary_key=True, default=uuid.uuid4),
    Column(
        "bookmark_id",
        UUIDColumnType,
        ForeignKey("bookmark.id", ondelete="CASCADE"),
        nullable=False,
    ),
    Column(
        "tag_id",
        UUIDColumnType,
        ForeignKey("tag.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    ),
    Column("auto_tagged", Boolean, nullable=False, default=False),
    Column("confidence", Float, nullable=True),
    Column("created_at", UTCDateTime(), nullable=False),
    UniqueConstraint("bookmark_id", "tag_id"),
)


@cache
def start_mappers() -> orm.registry:
    """Configure SQLAlchemy mappers for the domain model."""

    log.info("Starting SQLAlchemy mappers")

    mapper_registry.map_imperatively(Bookmark, bookmark_table)
    mapper_registry.map_imperatively(Tag, tag_table)
    mapper_registry.map_imperatively(
        TagAssociation,
        tag_association_table,
        properties={
            "tag": relationship(Tag, lazy="joined", innerjoin=True),
        },
    )

    configure_mappers()
    return mapper_registry


def create_all_tables(engine: Engine) -> None:
    """Create database tables for the mapped metadata."""

    log.info("Creating all tables")
    mapper_registry.metadata.create_all(engine)

"""Repository implementations backed by SQLAlchemy sessions."""

from __future__ import annotations

from typing import TYPE_CHECKING

from sqlalchemy import func, select

from stashpy.adapters.sqlalchemy.mappings import (
    bookmark_table,
    tag_association_table,
    tag_table,
)
from stashpy.domain.model import Bookmark, Tag, TagAssociation
from stashpy.domain.ports import TagCount

if TYPE_CHECKING:
    import uuid

    from sqlalchemy.orm import Session

    from stashpy.domain.model import Source


class SqlAlchemyBookmarkRepository:
    def __init__(self, session: Session) -> None:
        self.session = session

    def add(self, entity: Bookmark) -> None:
        self.session.add(entity)

    def get(self, bookmark_id: uuid.UUID) -> Bookmark | None:
        return self.session.get(Bookmark, bookmark_id)

    def find_by_source_and_external_id(self, source: Source, external_id: str) -> Bookmark | None:
        stmt = (
            select(Bookmark)
            .where(bookmark_table.c.source == source)
            .where(bookmark_table.c.external_id == external_id)
        )
        return self.session.execute(stmt).scalar_one_or_none()

    def find_by_url(self, url: str) -> Bookmark | None:
        stmt = (
            select(Bookmark)
            .where(bookmark_table.c.url == url)
            .order_by(bookmark_table.c.first_ingested_at.asc(), bookmark_table.c.id.asc())
            .limit(1)
        )
        return self.session.execute(stmt).scalars().first()

    def list(self, *, source: Source | None = None) -> list[Bookmark]:
        stmt = select(Bookmark).order_by(
            bookmark_table.c.first_ingested_at.asc(), bookmark_table.c.id.asc()
        )
        if source is not None:
            stmt = stmt.where(bookmark_table.c.source == source)
        return list(self.session.execute(stmt).scalars())


class SqlAlchemyTagRepository:
    def __init__(self, session: Session) -> None:
        self.session = session

    def add(self, entity: Tag) -> None:
        self.session.add(entity)

    def get_by_slug(self, slug: str) -> Tag | None:
        stmt = select(Tag).where(tag_table.c.slug == slug)
        return self.session.execute(stmt).scalar_one_or_none()

    def get_by_name(self, name: str) -> Tag | None:
        stmt = select(Tag).where(tag_table.c.name == name)
        return self.session.execute(stmt).scalar_one_or_none()

    def list_with_counts(self) -> list[TagCount]:
        bookmark_count = func.count(tag_association_table.c.id)
        stmt = (
            select(Tag, bookmark_count)
            .outerjoin(tag_association_table, tag_association_table.c.tag_id == tag_table.c.id)
            .group_by(tag_table.c.id)
            .order_by(tag_table.c.name.asc())
        )
        rows = self.session.execute(stmt)
        return [TagCount(tag=tag, bookmark_count=count) for tag, count in rows]


class SqlAlchemyTagAssociationRepository:
    def __init__(self, session: Session) -> None:
        self.session = session

    def add(self, entity: TagAssociation) -> None:
        self.session.add(entity)

    def get(self, bookmark_id: uuid.UUID, tag_id: uuid.UUID) -> TagAssociation | None:
        stmt = (
            select(TagAssociation)
            .where(tag_association_table.c.bookmark_id == bookmark_id)
            .where(tag_association_table.c.tag_id == tag_id)
        )
        return self.session.execute(stmt).scalar_one_or_none()

    def for_bookmark(self, bookmark_id: uuid.UUID) -> list[TagAssociation]:
        stmt = (
            select(TagAssociation)
            .where(tag_association_table.c.bookmark_id == bookmark_id)
            .order_by(
                tag_association_table.c.auto_tagged.desc(),
                tag_association_table.c.confidence.desc(),
                tag_association_table.c.created_at.asc(),
            )
        )
        return list(self.session.execute(stmt).scalars())

    def remove(self, association: TagAssociation) -> None:
        self.session.delete(association)

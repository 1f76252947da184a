# mediable/database/repos/mediable_query.py
from __future__ import annotations

from typing import Any, Sequence

from sqlalchemy import ColumnElement, and_, distinct, func, select
from sqlalchemy.orm import aliased

from mediable.database.models.media import MediableLink as DBMediableLink


class MediableQuery:
    """
    SQL expression builders behind the Mediable query scopes.
    Every builder is correlated to the enclosing statement; nothing here executes.
    """

    @staticmethod
    def has_any_tag(mediable_type: str, mediable_key: Any, tags: Sequence[str]) -> ColumnElement[bool]:
        """EXISTS a pivot row of the outer mediable carrying one of `tags`."""
        L = aliased(DBMediableLink)
        return (
            select(L.media_id)
            .where(
                L.mediable_type == mediable_type,
                L.mediable_id == mediable_key,
                L.tag.in_(list(tags)),
            )
            .exists()
        )

    @staticmethod
    def has_all_tags(mediable_type: str, mediable_key: Any, tags: Sequence[str]) -> ColumnElement[bool]:
        """
        EXISTS a media attached to the outer mediable under every one of
        `tags` at once: its pivot rows, restricted to `tags` and grouped by
        media, cover the whole tag set.
        """
        tags = list(dict.fromkeys(tags))
        L = aliased(DBMediableLink)
        return (
            select(L.media_id)
            .where(
                L.mediable_type == mediable_type,
                L.mediable_id == mediable_key,
                L.tag.in_(tags),
            )
            .group_by(L.media_id)
            .having(func.count(distinct(L.tag)) == len(tags))
            .exists()
        )

    @staticmethod
    def link_has_tags(tags: Sequence[str]) -> ColumnElement[bool]:
        """Criteria on MediableLink itself: tag is one of `tags` (eager-load filter)."""
        return DBMediableLink.tag.in_(list(tags))

    @staticmethod
    def link_media_has_all_tags(tags: Sequence[str]) -> ColumnElement[bool]:
        """
        Criteria on MediableLink: tag is one of `tags` and the link's media is
        attached to the same mediable under every tag in `tags`.
        Correlates on the outer MediableLink row.
        """
        tags = list(dict.fromkeys(tags))
        inner = aliased(DBMediableLink)
        matching_media = (
            select(inner.media_id)
            .where(
                inner.mediable_type == DBMediableLink.mediable_type,
                inner.mediable_id == DBMediableLink.mediable_id,
                inner.tag.in_(tags),
            )
            .group_by(inner.media_id)
            .having(func.count(distinct(inner.tag)) == len(tags))
            .correlate_except(inner)
        )
        return and_(DBMediableLink.tag.in_(tags), DBMediableLink.media_id.in_(matching_media))

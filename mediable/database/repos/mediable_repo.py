# mediable/database/repos/mediable_repo.py
from __future__ import annotations

from typing import Dict, List, Optional, Sequence, Union
from uuid import UUID

from sqlalchemy import delete, func, insert, select
from sqlalchemy.engine import Connection
from sqlalchemy.orm import Session

from mediable.common.iter import chunked
from mediable.common.logging import get_logger
from mediable.database.models.media import MediableLink as DBMediableLink
from mediable.database.repos._mapping import to_domain_link
from mediable.domain.entities.links.media_link import MediaLink

logger = get_logger(__name__)

INSERT_BATCH_SIZE = 500

Executor = Union[Session, Connection]


class SqlAlchemyMediableRepo:
    """
    SQLAlchemy-backed relation provider for the mediables pivot table.
    Satisfies MediaRelationPort via structural typing.

    Works on a Session (normal use) or a bare Connection (mapper events run
    inside a flush and only hand out the Connection). Statements are Core
    statements against the pivot Table so both executors behave the same;
    the caller owns flush/commit.
    """

    def __init__(self, db: Executor) -> None:
        self.db = db
        self.table = DBMediableLink.__table__

    def _owned_by(self, mediable_type: str, mediable_id: UUID):
        c = self.table.c
        return (c.mediable_type == mediable_type, c.mediable_id == mediable_id)

    # -------------------------------------------------------------------------
    # Reads
    # -------------------------------------------------------------------------
    def max_order_by_tag(self, mediable_type: str, mediable_id: UUID, tags: Sequence[str]) -> Dict[str, int]:
        """Highest `order` per tag for one mediable; tags without rows map to 0."""
        tags = [str(t) for t in tags]
        out = {t: 0 for t in tags}
        if not tags:
            return out
        c = self.table.c
        stmt = (
            select(c.tag, func.max(c["order"]).label("aggregate"))
            .where(*self._owned_by(mediable_type, mediable_id), c.tag.in_(tags))
            .group_by(c.tag)
        )
        for tag, aggregate in self.db.execute(stmt):
            out[tag] = int(aggregate or 0)
        return out

    def list_links(
        self,
        mediable_type: str,
        mediable_id: UUID,
        tags: Optional[Sequence[str]] = None,
    ) -> List[MediaLink]:
        c = self.table.c
        stmt = select(self.table).where(*self._owned_by(mediable_type, mediable_id))
        if tags is not None:
            stmt = stmt.where(c.tag.in_(list(tags)))
        stmt = stmt.order_by(c["order"].asc(), c.tag.asc())
        return [to_domain_link(row) for row in self.db.execute(stmt)]

    # -------------------------------------------------------------------------
    # Mutations
    # -------------------------------------------------------------------------
    def insert_links(self, links: Sequence[MediaLink]) -> int:
        rows = [link.as_row() for link in links]
        for batch in chunked(rows, INSERT_BATCH_SIZE):
            self.db.execute(insert(self.table), batch)
        return len(rows)

    def delete_links(
        self,
        mediable_type: str,
        mediable_id: UUID,
        *,
        media_ids: Optional[Sequence[UUID]] = None,
        tags: Optional[Sequence[str]] = None,
    ) -> int:
        """
        Delete pivot rows of one mediable, optionally narrowed to media ids
        and/or tags. An explicitly empty filter matches nothing.
        """
        c = self.table.c
        if (media_ids is not None and not media_ids) or (tags is not None and not tags):
            return 0
        stmt = delete(self.table).where(*self._owned_by(mediable_type, mediable_id))
        if media_ids is not None:
            stmt = stmt.where(c.media_id.in_(list(media_ids)))
        if tags is not None:
            stmt = stmt.where(c.tag.in_([str(t) for t in tags]))
        result = self.db.execute(stmt)
        deleted = result.rowcount or 0
        logger.debug("deleted %s pivot rows for %s:%s", deleted, mediable_type, mediable_id)
        return deleted

# mediable/database/repos/_mapping.py
from __future__ import annotations

from typing import Any

from mediable.database.models.media import MediableLink as DBMediableLink
from mediable.domain.entities.links.media_link import MediaLink


def to_domain_link(row: DBMediableLink | Any) -> MediaLink:
    """Map an ORM pivot object or a Core row (same column names) to the domain link."""
    return MediaLink(
        mediable_type=row.mediable_type,
        mediable_id=row.mediable_id,
        media_id=row.media_id,
        tag=row.tag,
        order=int(row.order),
    )

from __future__ import annotations

from typing import Dict, List, Optional, Protocol, Sequence
from uuid import UUID

from mediable.domain.entities.links.media_link import MediaLink


class MediaRelationPort(Protocol):
    """Pivot-table primitives the Mediable mixin is written against."""

    def max_order_by_tag(self, mediable_type: str, mediable_id: UUID, tags: Sequence[str]) -> Dict[str, int]: ...

    def insert_links(self, links: Sequence[MediaLink]) -> int: ...

    def delete_links(
        self,
        mediable_type: str,
        mediable_id: UUID,
        *,
        media_ids: Optional[Sequence[UUID]] = None,
        tags: Optional[Sequence[str]] = None,
    ) -> int: ...

    def list_links(
        self,
        mediable_type: str,
        mediable_id: UUID,
        tags: Optional[Sequence[str]] = None,
    ) -> List[MediaLink]: ...

# mediable/domain/entities/links/media_link.py
from __future__ import annotations

from dataclasses import dataclass, asdict
from uuid import UUID


@dataclass(frozen=True)
class MediaLink:
    """
    Join entity connecting a mediable (type + id) with a Media under a tag.
    `order` is a 1-based position within (mediable, tag).
    The store enforces that (media_id, mediable_type, mediable_id, tag) is unique.
    """
    mediable_type: str
    mediable_id: UUID
    media_id: UUID
    tag: str
    order: int

    def __post_init__(self) -> None:
        if not self.tag:
            raise ValueError("tag must be a non-empty string")
        if self.order < 1:
            raise ValueError("order must be >= 1")

    def as_row(self) -> dict:
        return asdict(self)

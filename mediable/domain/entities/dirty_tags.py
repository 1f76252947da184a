# mediable/domain/entities/dirty_tags.py
from __future__ import annotations

from typing import Iterable, Optional, Set


class DirtyTagTracker:
    """
    Tags whose associations changed since the media relation was last loaded.

    mark(tags)   after attach / sync / detach-by-tag
    mark_all()   after a detach that did not name its tags; every tag counts as dirty
    clear()      exactly when the relation is reloaded
    """

    __slots__ = ("_tags", "_all")

    def __init__(self) -> None:
        self._tags: Set[str] = set()
        self._all = False

    def mark(self, tags: Iterable[str]) -> None:
        self._tags.update(str(t) for t in tags)

    def mark_all(self) -> None:
        self._all = True

    def clear(self) -> None:
        self._tags.clear()
        self._all = False

    def is_dirty(self, tags: Optional[Iterable[str]] = None) -> bool:
        """
        With no tags: is anything dirty at all.
        With tags: is any of them dirty.
        """
        if self._all:
            return True
        if tags is None:
            return bool(self._tags)
        return any(str(t) in self._tags for t in tags)

    @property
    def tags(self) -> frozenset[str]:
        return frozenset(self._tags)

    def __bool__(self) -> bool:
        return self.is_dirty()

    def __repr__(self) -> str:
        if self._all:
            return "<DirtyTagTracker all>"
        return f"<DirtyTagTracker {sorted(self._tags)!r}>"

from __future__ import annotations

from datetime import datetime, timezone
from typing import Optional

from sqlalchemy import ColumnElement, DateTime
from sqlalchemy.orm import Mapped, Session, declared_attr, mapped_column, object_session


class SoftDeletes:
    """
    Mixin for rows that are stamped with `deleted_at` instead of removed.

    soft_delete()  stamp + notify the association layer (soft=True)
    force_delete() real DELETE; mapper events treat it as a hard delete
    restore()      clear the stamp

    Queries opt in to hiding trashed rows with `Model.without_trashed()`.
    """

    @declared_attr
    def deleted_at(cls) -> Mapped[Optional[datetime]]:
        return mapped_column(DateTime(timezone=True), nullable=True, index=True)

    @property
    def trashed(self) -> bool:
        return self.deleted_at is not None

    def _soft_delete_session(self) -> Session:
        session = object_session(self)
        if session is None:
            raise ValueError(f"{type(self).__name__} must belong to a Session to be deleted")
        return session

    def soft_delete(self) -> None:
        session = self._soft_delete_session()
        self.deleted_at = datetime.now(timezone.utc)
        session.flush()
        notify = getattr(self, "handle_mediable_deletion", None)
        if notify is not None:
            notify(session, soft=True)

    def restore(self) -> None:
        session = self._soft_delete_session()
        self.deleted_at = None
        session.flush()

    def force_delete(self) -> None:
        session = self._soft_delete_session()
        session.delete(self)
        session.flush()

    @classmethod
    def without_trashed(cls) -> ColumnElement[bool]:
        return cls.deleted_at.is_(None)

    @classmethod
    def only_trashed(cls) -> ColumnElement[bool]:
        return cls.deleted_at.is_not(None)

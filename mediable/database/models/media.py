from __future__ import annotations

from typing import Optional
from uuid import UUID as UUID_t

from sqlalchemy import BigInteger, ForeignKey, Index, Integer, String, Text, UniqueConstraint, Uuid, text
from sqlalchemy.orm import Mapped, mapped_column, relationship

from mediable.common.settings import get_settings
from mediable.database.core.main import Base
from mediable.database.core.service_object import ServiceObject

_mediable_cfg = get_settings().mediable
_pivot = _mediable_cfg.mediables_table
_schema = get_settings().db_schema
_media_fk = f"{_schema}.media.id" if _schema else "media.id"


class Media(ServiceObject, Base):
    """
    A stored file. The association layer only cares about `id`; the rest
    describes where the file lives and what it is.
    """
    __tablename__ = "media"
    __table_args__ = (
        UniqueConstraint("disk", "directory", "filename", "extension", name="uq_media_disk_path"),
        Index("ix_media_aggregate_type", "aggregate_type"),
    )

    disk: Mapped[str] = mapped_column(String(32), nullable=False, default="local", server_default=text("'local'"))
    directory: Mapped[str] = mapped_column(Text, nullable=False, default="", server_default=text("''"))
    filename: Mapped[str] = mapped_column(String(255), nullable=False)
    extension: Mapped[str] = mapped_column(String(32), nullable=False)
    mime_type: Mapped[Optional[str]] = mapped_column(String(128))
    aggregate_type: Mapped[Optional[str]] = mapped_column(String(32))  # image|video|audio|document|...
    size: Mapped[int] = mapped_column(BigInteger, nullable=False, default=0, server_default=text("0"))

    @property
    def basename(self) -> str:
        return f"{self.filename}.{self.extension}" if self.extension else self.filename

    @property
    def disk_path(self) -> str:
        directory = (self.directory or "").strip("/")
        return f"{directory}/{self.basename}" if directory else self.basename

    def __repr__(self) -> str:
        return f"<Media id={self.id} path={self.disk_path!r}>"


class MediableLink(Base):
    """
    Pivot row of the polymorphic, tagged media relation.
    (media_id, mediable_type, mediable_id, tag) identifies a row; `order`
    is the 1-based attach position within (mediable, tag).
    """
    __tablename__ = _pivot
    __table_args__ = (
        Index(f"ix_{_pivot}_mediable", "mediable_type", "mediable_id"),
        Index(f"ix_{_pivot}_tag", "tag"),
    )

    media_id: Mapped[UUID_t] = mapped_column(
        Uuid(as_uuid=True),
        ForeignKey(_media_fk, ondelete="CASCADE"),
        primary_key=True,
    )
    mediable_type: Mapped[str] = mapped_column(String(255), primary_key=True)
    mediable_id: Mapped[UUID_t] = mapped_column(Uuid(as_uuid=True), primary_key=True)
    tag: Mapped[str] = mapped_column(String(255), primary_key=True)
    order: Mapped[int] = mapped_column(Integer, nullable=False)

    media: Mapped["Media"] = relationship(_mediable_cfg.model, lazy="joined", innerjoin=True, viewonly=True)

    def __repr__(self) -> str:
        return (
            f"<MediableLink {self.mediable_type}:{self.mediable_id} "
            f"media={self.media_id} tag={self.tag!r} order={self.order}>"
        )

# mediable/database/models/mediable.py
"""
Mediable mixin: tagged, ordered media associations for any mapped model.

    class Post(Mediable, ServiceObject, Base):
        __tablename__ = "posts"

    post.attach_media([m1, m2], "gallery")
    post.get_media("gallery")                               # [m1, m2]
    select(Post).where(Post.where_has_media(["cover", "gallery"], match_all=True))
    select(Post).options(Post.with_media("cover"))

Associations live in the polymorphic pivot table (see MediableLink); rows are
keyed by the mediable's discriminator (`__mediable_type__`, defaulting to the
table name) and its `id`.
"""
from __future__ import annotations

from typing import Any, ClassVar, Dict, Iterable, List, Optional, TYPE_CHECKING, Union
from uuid import UUID

from sqlalchemy import ColumnElement, event, inspect, select
from sqlalchemy.engine import Connection
from sqlalchemy.orm import Mapped, Session, declared_attr, foreign, object_session, relationship, selectinload
from sqlalchemy.orm.interfaces import LoaderOption

from mediable.common.logging import get_logger
from mediable.common.settings import get_settings
from mediable.common.strings.splitters import unique_strings
from mediable.database.models.media import Media, MediableLink
from mediable.database.models.soft_delete import SoftDeletes
from mediable.database.repos.mediable_query import MediableQuery
from mediable.database.repos.mediable_repo import SqlAlchemyMediableRepo
from mediable.domain.entities.dirty_tags import DirtyTagTracker
from mediable.domain.entities.links.media_link import MediaLink

if TYPE_CHECKING:
    from mediable.domain.ports.media_relation import MediaRelationPort

logger = get_logger(__name__)

TagsArg = Union[str, Iterable[str], None]
MediaArg = Union[Media, UUID, str, Iterable[Union[Media, UUID, str]]]

_MEDIABLE_TYPES: Dict[str, type] = {}


def _as_tags(tags: TagsArg) -> List[str]:
    if tags is None:
        return []
    if isinstance(tags, str):
        return [tags]
    return unique_strings(tags)


def _as_key(value: Any) -> UUID:
    if isinstance(value, Media):
        if value.id is None:
            raise ValueError("Media must be flushed before it can be attached")
        return value.id
    if isinstance(value, UUID):
        return value
    if isinstance(value, str):
        return UUID(value)
    raise TypeError(f"Unsupported media reference: {type(value).__name__}")


def extract_media_ids(media: MediaArg) -> List[UUID]:
    """
    Normalize a media reference into de-duplicated keys, first-seen order.
    Accepts a key (UUID or UUID string), a Media, or a list/tuple/set of those.
    """
    if isinstance(media, (Media, UUID, str)):
        return [_as_key(media)]
    if isinstance(media, (list, tuple, set, frozenset)):
        keys: Dict[UUID, None] = {}
        for item in media:
            keys.setdefault(_as_key(item), None)
        return list(keys)
    raise TypeError(f"Unsupported media reference: {type(media).__name__}")


def _unique_media(items: Iterable[Media]) -> List[Media]:
    by_id: Dict[Any, Media] = {}
    for m in items:
        by_id.setdefault(m.id, m)
    return list(by_id.values())


def resolve_mediable(mediable_type: str) -> type:
    """Mapped class registered under a discriminator; KeyError if unknown."""
    return _MEDIABLE_TYPES[mediable_type]


def mediable_types() -> List[str]:
    return sorted(_MEDIABLE_TYPES)


class Mediable:
    """
    Mix into a mapped class with an `id` primary key to give it tagged media.

    Class attributes:
      __mediable_type__   discriminator stored in the pivot (default: __tablename__)
      rehydrates_media    per-model override of settings.mediable.rehydrate_media
    """

    __mediable_type__: ClassVar[Optional[str]] = None
    rehydrates_media: ClassVar[Optional[bool]] = None

    def __init_subclass__(cls, **kw: Any) -> None:
        super().__init_subclass__(**kw)
        if cls.__dict__.get("__tablename__"):
            _MEDIABLE_TYPES[cls.get_mediable_type()] = cls

    @classmethod
    def get_mediable_type(cls) -> str:
        return cls.__mediable_type__ or cls.__tablename__  # type: ignore[attr-defined]

    @declared_attr
    def media_links(cls) -> Mapped[List[MediableLink]]:
        # Pivot rows with their Media, ordered by attach position.
        return relationship(
            MediableLink,
            primaryjoin=lambda: (foreign(MediableLink.mediable_id) == cls.id)
            & (MediableLink.mediable_type == cls.get_mediable_type()),
            order_by=lambda: [MediableLink.order.asc(), MediableLink.tag.asc()],
            viewonly=True,
            lazy="select",
        )

    # ------------------------------------------------------------------
    # Plumbing
    # ------------------------------------------------------------------
    @property
    def media_dirty_tags(self) -> DirtyTagTracker:
        tracker = self.__dict__.get("_media_dirty_tags")
        if tracker is None:
            tracker = DirtyTagTracker()
            self.__dict__["_media_dirty_tags"] = tracker
        return tracker

    def _media_session(self) -> Session:
        session = object_session(self)
        if session is None:
            raise ValueError(f"{type(self).__name__} must belong to a Session to manage media")
        if self.id is None or self in session.new:  # type: ignore[attr-defined]
            session.flush()
        return session

    def _media_repo(self, db: Union[Session, Connection, None] = None) -> "MediaRelationPort":
        return SqlAlchemyMediableRepo(db if db is not None else self._media_session())

    def _rehydrates_media(self) -> bool:
        if self.rehydrates_media is not None:
            return bool(self.rehydrates_media)
        return get_settings().mediable.rehydrate_media

    def _rehydrate_media_if_necessary(self, tags: Optional[List[str]] = None) -> None:
        if self._rehydrates_media() and self.media_dirty_tags.is_dirty(tags):
            logger.debug("rehydrating media for %s:%s", self.get_mediable_type(), self.id)  # type: ignore[attr-defined]
            self.load_media()

    def _reload_media(self, option: LoaderOption) -> None:
        session = self._media_session()
        session.flush()
        cls = type(self)
        stmt = (
            select(cls)
            .where(cls.id == self.id)  # type: ignore[attr-defined]
            .options(option)
            .execution_options(populate_existing=True)
        )
        session.execute(stmt).scalars().one()
        self.media_dirty_tags.clear()

    # ------------------------------------------------------------------
    # Mutations
    # ------------------------------------------------------------------
    def attach_media(self, media: MediaArg, tags: TagsArg) -> List[MediaLink]:
        """
        Attach media under each tag. Orders continue from the current maximum
        of each (mediable, tag), in input order. Duplicate (media, tag) pairs
        are not pre-checked; the pivot primary key rejects them.
        """
        tags = _as_tags(tags)
        ids = extract_media_ids(media)
        repo = self._media_repo()
        mediable_type = self.get_mediable_type()

        increments = repo.max_order_by_tag(mediable_type, self.id, tags)  # type: ignore[attr-defined]
        links: List[MediaLink] = []
        for tag in tags:
            for media_id in ids:
                increments[tag] += 1
                links.append(MediaLink(
                    mediable_type=mediable_type,
                    mediable_id=self.id,  # type: ignore[attr-defined]
                    media_id=media_id,
                    tag=tag,
                    order=increments[tag],
                ))
        repo.insert_links(links)
        self.media_dirty_tags.mark(tags)
        logger.debug("attached %d media under %s to %s:%s", len(ids), tags, mediable_type, self.id)  # type: ignore[attr-defined]
        return links

    def sync_media(self, media: MediaArg, tags: TagsArg) -> List[MediaLink]:
        """Replace the media under the given tag(s)."""
        self.detach_media_tags(tags)
        return self.attach_media(media, tags)

    def detach_media(self, media: MediaArg, tags: TagsArg = None) -> int:
        """
        Detach media from the given tag(s), or from every tag when tags are
        omitted or empty. Unknown associations are ignored.
        """
        ids = extract_media_ids(media)
        if not ids:
            return 0
        tag_list = _as_tags(tags) or None
        deleted = self._media_repo().delete_links(
            self.get_mediable_type(), self.id, media_ids=ids, tags=tag_list,  # type: ignore[attr-defined]
        )
        if tag_list is None:
            self.media_dirty_tags.mark_all()
        else:
            self.media_dirty_tags.mark(tag_list)
        return deleted

    def detach_media_tags(self, tags: TagsArg) -> int:
        """Remove every association carrying one of the tags."""
        tag_list = _as_tags(tags)
        deleted = self._media_repo().delete_links(
            self.get_mediable_type(), self.id, tags=tag_list,  # type: ignore[attr-defined]
        )
        self.media_dirty_tags.mark(tag_list)
        return deleted

    def handle_mediable_deletion(self, db: Union[Session, Connection, None] = None, *, soft: bool = False) -> int:
        """
        Deletion hook. Hard deletes always drop the associations; soft deletes
        only when settings.mediable.detach_on_soft_delete is on.
        """
        if soft and isinstance(self, SoftDeletes) and not get_settings().mediable.detach_on_soft_delete:
            return 0
        deleted = self._media_repo(db).delete_links(self.get_mediable_type(), self.id)  # type: ignore[attr-defined]
        self.media_dirty_tags.mark_all()
        logger.info(
            "detached %s media associations from %s %s:%s",
            deleted, "soft-deleted" if soft else "deleted", self.get_mediable_type(), self.id,  # type: ignore[attr-defined]
        )
        return deleted

    # ------------------------------------------------------------------
    # Reads
    # ------------------------------------------------------------------
    def has_media(self, tags: TagsArg, match_all: bool = False) -> bool:
        return len(self.get_media(tags, match_all)) > 0

    def get_media(self, tags: TagsArg, match_all: bool = False) -> List[Media]:
        """
        Media attached under any of the tags (or all of them with match_all),
        each media once, in attach order.
        """
        tags = _as_tags(tags)
        if match_all:
            return self.get_media_match_all(tags)

        self._rehydrate_media_if_necessary(tags)
        wanted = set(tags)
        return _unique_media(link.media for link in self.media_links if link.tag in wanted)

    def get_media_match_all(self, tags: TagsArg) -> List[Media]:
        """Media attached under every one of the tags simultaneously."""
        tags = _as_tags(tags)
        self._rehydrate_media_if_necessary(tags)

        tags_by_media: Dict[Any, set] = {}
        for link in self.media_links:
            tags_by_media.setdefault(link.media_id, set()).add(link.tag)

        wanted = set(tags)
        return _unique_media(
            link.media for link in self.media_links if wanted <= tags_by_media[link.media_id]
        )

    def first_media(self, tags: TagsArg, match_all: bool = False) -> Optional[Media]:
        found = self.get_media(tags, match_all)
        return found[0] if found else None

    def last_media(self, tags: TagsArg, match_all: bool = False) -> Optional[Media]:
        found = self.get_media(tags, match_all)
        return found[-1] if found else None

    def get_all_media_by_tag(self) -> Dict[str, List[Media]]:
        self._rehydrate_media_if_necessary()
        grouped: Dict[str, List[Media]] = {}
        for link in self.media_links:
            grouped.setdefault(link.tag, []).append(link.media)
        return grouped

    def get_tags_for_media(self, media: Union[Media, UUID, str]) -> List[str]:
        self._rehydrate_media_if_necessary()
        key = _as_key(media)
        if "media_links" in inspect(self).unloaded:
            # answer from the pivot instead of loading the whole relation
            links = self._media_repo().list_links(self.get_mediable_type(), self.id)  # type: ignore[attr-defined]
            return [link.tag for link in links if link.media_id == key]
        return [link.tag for link in self.media_links if link.media_id == key]

    # ------------------------------------------------------------------
    # Loading
    # ------------------------------------------------------------------
    def load_media(self, tags: TagsArg = None, match_all: bool = False):
        """
        (Re)load media_links, optionally only the links for the given tags.
        Clears the dirty tags. Returns self.
        """
        tags = _as_tags(tags)
        if tags and match_all:
            return self.load_media_match_all(tags)
        self._reload_media(type(self).with_media(tags))
        return self

    def load_media_match_all(self, tags: TagsArg = None):
        self._reload_media(type(self).with_media_match_all(tags))
        return self

    # ------------------------------------------------------------------
    # Query scopes
    # ------------------------------------------------------------------
    @classmethod
    def where_has_media(cls, tags: TagsArg, match_all: bool = False) -> ColumnElement[bool]:
        """Filter clause: mediables having any (or, with match_all, every) of the tags."""
        tags = _as_tags(tags)
        if match_all and len(tags) > 1:
            return cls.where_has_media_match_all(tags)
        return MediableQuery.has_any_tag(cls.get_mediable_type(), cls.id, tags)  # type: ignore[attr-defined]

    @classmethod
    def where_has_media_match_all(cls, tags: TagsArg) -> ColumnElement[bool]:
        return MediableQuery.has_all_tags(cls.get_mediable_type(), cls.id, _as_tags(tags))  # type: ignore[attr-defined]

    @classmethod
    def with_media(cls, tags: TagsArg = None, match_all: bool = False) -> LoaderOption:
        """Loader option: eager load media_links, restricted to the tags when given."""
        tags = _as_tags(tags)
        if not tags:
            return selectinload(cls.media_links)
        if match_all:
            return cls.with_media_match_all(tags)
        return selectinload(cls.media_links.and_(MediableQuery.link_has_tags(tags)))

    @classmethod
    def with_media_match_all(cls, tags: TagsArg = None) -> LoaderOption:
        tags = _as_tags(tags)
        return selectinload(cls.media_links.and_(MediableQuery.link_media_has_all_tags(tags)))


@event.listens_for(Mediable, "after_delete", propagate=True)
def _detach_media_after_delete(mapper, connection, target) -> None:
    target.handle_mediable_deletion(connection)


@event.listens_for(Mediable, "refresh", propagate=True)
def _clean_media_after_refresh(target, context, attrs) -> None:
    if attrs is None or "media_links" in attrs:
        target.media_dirty_tags.clear()

from __future__ import annotations

from http import HTTPStatus
from typing import Dict, List, Optional
from uuid import UUID

from fastapi import APIRouter, Depends, HTTPException, Query
from sqlalchemy import func, select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from mediable.common.logging import get_logger
from mediable.common.settings import get_settings
from mediable.common.strings.splitters import csv_to_list
from mediable.database.models.media import Media
from mediable.database.models.mediable import Mediable, mediable_types, resolve_mediable
from mediable.database.models.soft_delete import SoftDeletes
from mediable.services.api.deps import transactional_session
from mediable.services.schemas import MediaAttach, MediaDetach, MediaLinkRead, MediaRead, MediaSync

cfg = get_settings()
logger = get_logger(__name__)
router = APIRouter(prefix=f"{cfg.api.prefix}/mediables", tags=["mediables"])


def _get_mediable_or_404(db: Session, mediable_type: str, mediable_id: UUID) -> Mediable:
    try:
        cls = resolve_mediable(mediable_type)
    except KeyError:
        raise HTTPException(status_code=HTTPStatus.NOT_FOUND, detail=f"Unknown mediable type '{mediable_type}'") from None
    obj = db.get(cls, mediable_id)
    if not obj or (isinstance(obj, SoftDeletes) and obj.trashed):
        raise HTTPException(status_code=HTTPStatus.NOT_FOUND, detail="Mediable not found")
    return obj


def _ensure_media_exist(db: Session, media_ids: List[UUID]) -> None:
    if not media_ids:
        return
    found = db.execute(select(func.count()).select_from(Media).where(Media.id.in_(media_ids))).scalar_one()
    if found != len(set(media_ids)):
        raise HTTPException(status_code=HTTPStatus.NOT_FOUND, detail="One or more media not found")


def _media_out(items: List[Media]) -> List[MediaRead]:
    return [MediaRead.model_validate(m) for m in items]


@router.get("", response_model=List[str])
def list_mediable_types() -> List[str]:
    return mediable_types()


@router.get("/{mediable_type}/{mediable_id}/media", response_model=List[MediaRead])
def list_media(
    mediable_type: str,
    mediable_id: UUID,
    tags: Optional[str] = Query(None, description="Comma-separated tags; omitted returns every attached media"),
    match_all: bool = Query(False),
    db: Session = Depends(transactional_session),
) -> List[MediaRead]:
    obj = _get_mediable_or_404(db, mediable_type, mediable_id)
    tag_list = csv_to_list(tags)
    if tag_list:
        return _media_out(obj.get_media(tag_list, match_all=match_all))

    seen: Dict[UUID, Media] = {}
    for items in obj.get_all_media_by_tag().values():
        for m in items:
            seen.setdefault(m.id, m)
    return _media_out(list(seen.values()))


@router.get("/{mediable_type}/{mediable_id}/media/by-tag", response_model=Dict[str, List[MediaRead]])
def list_media_by_tag(
    mediable_type: str,
    mediable_id: UUID,
    db: Session = Depends(transactional_session),
) -> Dict[str, List[MediaRead]]:
    obj = _get_mediable_or_404(db, mediable_type, mediable_id)
    return {tag: _media_out(items) for tag, items in obj.get_all_media_by_tag().items()}


@router.get("/{mediable_type}/{mediable_id}/media/{media_id}/tags", response_model=List[str])
def list_tags_for_media(
    mediable_type: str,
    mediable_id: UUID,
    media_id: UUID,
    db: Session = Depends(transactional_session),
) -> List[str]:
    obj = _get_mediable_or_404(db, mediable_type, mediable_id)
    return obj.get_tags_for_media(media_id)


@router.post(
    "/{mediable_type}/{mediable_id}/media",
    response_model=List[MediaLinkRead],
    status_code=HTTPStatus.CREATED,
)
def attach_media(
    mediable_type: str,
    mediable_id: UUID,
    payload: MediaAttach,
    db: Session = Depends(transactional_session),
) -> List[MediaLinkRead]:
    obj = _get_mediable_or_404(db, mediable_type, mediable_id)
    _ensure_media_exist(db, payload.media_ids)
    try:
        # savepoint: a duplicate only undoes this attach
        with db.begin_nested():
            links = obj.attach_media(payload.media_ids, payload.tags)
    except IntegrityError as e:
        logger.info("duplicate attach on %s:%s tags=%s", mediable_type, mediable_id, payload.tags)
        raise HTTPException(status_code=HTTPStatus.CONFLICT, detail="Media already attached under this tag") from e
    return [MediaLinkRead.model_validate(link) for link in links]


@router.put("/{mediable_type}/{mediable_id}/media", response_model=List[MediaLinkRead])
def sync_media(
    mediable_type: str,
    mediable_id: UUID,
    payload: MediaSync,
    db: Session = Depends(transactional_session),
) -> List[MediaLinkRead]:
    obj = _get_mediable_or_404(db, mediable_type, mediable_id)
    _ensure_media_exist(db, payload.media_ids)
    links = obj.sync_media(payload.media_ids, payload.tags)
    return [MediaLinkRead.model_validate(link) for link in links]


@router.delete("/{mediable_type}/{mediable_id}/media", status_code=HTTPStatus.NO_CONTENT)
def detach_media(
    mediable_type: str,
    mediable_id: UUID,
    payload: MediaDetach,
    db: Session = Depends(transactional_session),
) -> None:
    obj = _get_mediable_or_404(db, mediable_type, mediable_id)
    obj.detach_media(payload.media_ids, payload.tags)


@router.delete("/{mediable_type}/{mediable_id}/tags", status_code=HTTPStatus.NO_CONTENT)
def detach_media_tags(
    mediable_type: str,
    mediable_id: UUID,
    tags: str = Query(..., description="Comma-separated tags to clear"),
    db: Session = Depends(transactional_session),
) -> None:
    tag_list = csv_to_list(tags)
    if not tag_list:
        raise HTTPException(status_code=HTTPStatus.UNPROCESSABLE_ENTITY, detail="Provide at least one tag")
    obj = _get_mediable_or_404(db, mediable_type, mediable_id)
    obj.detach_media_tags(tag_list)

from __future__ import annotations

from http import HTTPStatus
from typing import List
from uuid import UUID

from fastapi import APIRouter, Depends, HTTPException, Query
from sqlalchemy import select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from mediable.common.logging import get_logger
from mediable.common.settings import get_settings
from mediable.database.models.media import Media
from mediable.services.api.deps import transactional_session
from mediable.services.schemas import MediaCreate, MediaRead

cfg = get_settings()
logger = get_logger(__name__)
router = APIRouter(prefix=f"{cfg.api.prefix}/media", tags=["media"])


def _to_out(m: Media) -> MediaRead:
    return MediaRead.model_validate(m)


@router.post("", response_model=MediaRead, status_code=HTTPStatus.CREATED)
def create_media(payload: MediaCreate, db: Session = Depends(transactional_session)) -> MediaRead:
    obj = Media(**payload.model_dump())
    try:
        # savepoint: a conflict leaves the request session usable
        with db.begin_nested():
            db.add(obj)
    except IntegrityError as e:
        logger.info("duplicate media path %s/%s.%s", payload.directory, payload.filename, payload.extension)
        raise HTTPException(status_code=HTTPStatus.CONFLICT, detail="Media already exists at this path") from e
    db.refresh(obj)
    return _to_out(obj)


@router.get("", response_model=List[MediaRead])
def list_media(
    limit: int = Query(50, ge=1, le=500),
    offset: int = Query(0, ge=0),
    db: Session = Depends(transactional_session),
) -> List[MediaRead]:
    stmt = select(Media).order_by(Media.directory.asc(), Media.filename.asc()).offset(offset).limit(limit)
    return [_to_out(m) for m in db.execute(stmt).scalars().all()]


@router.get("/{media_id}", response_model=MediaRead)
def get_media(media_id: UUID, db: Session = Depends(transactional_session)) -> MediaRead:
    obj = db.get(Media, media_id)
    if not obj:
        raise HTTPException(status_code=HTTPStatus.NOT_FOUND, detail="Media not found")
    return _to_out(obj)


@router.delete("/{media_id}", status_code=HTTPStatus.NO_CONTENT)
def delete_media(media_id: UUID, db: Session = Depends(transactional_session)) -> None:
    obj = db.get(Media, media_id)
    if not obj:
        return
    db.delete(obj)
    db.flush()

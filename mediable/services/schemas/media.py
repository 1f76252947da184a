# mediable/services/schemas/media.py
from __future__ import annotations

from datetime import datetime
from typing import Optional
from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field


class MediaBase(BaseModel):
    disk: str = "local"
    directory: str = ""
    filename: str = Field(..., min_length=1, max_length=255)
    extension: str = Field(..., max_length=32)
    mime_type: Optional[str] = None
    aggregate_type: Optional[str] = None
    size: int = Field(0, ge=0)


class MediaCreate(MediaBase):
    pass


class MediaRead(MediaBase):
    id: UUID
    date_created: Optional[datetime] = None
    last_updated: Optional[datetime] = None

    model_config = ConfigDict(from_attributes=True)

from __future__ import annotations

from typing import List, Optional, Union
from uuid import UUID

from pydantic import BaseModel, ConfigDict, field_validator

from mediable.common.strings.splitters import csv_to_list, unique_strings


def _tag_list(v: Union[str, List[str], None]) -> List[str]:
    return unique_strings(csv_to_list(v))


class MediaAttach(BaseModel):
    media_ids: List[UUID]
    tags: List[str]

    @field_validator("tags", mode="before")
    @classmethod
    def _split_tags(cls, v):
        return _tag_list(v)

    @field_validator("tags")
    @classmethod
    def _require_tags(cls, v: List[str]) -> List[str]:
        if not v:
            raise ValueError("at least one tag is required")
        return v


class MediaSync(MediaAttach):
    """Same payload as attach; an empty media_ids list clears the tags."""


class MediaDetach(BaseModel):
    media_ids: List[UUID]
    # omitted -> detach from every tag
    tags: Optional[List[str]] = None

    @field_validator("tags", mode="before")
    @classmethod
    def _split_tags(cls, v):
        return None if v is None else _tag_list(v)


class MediaLinkRead(BaseModel):
    mediable_type: str
    mediable_id: UUID
    media_id: UUID
    tag: str
    order: int

    model_config = ConfigDict(from_attributes=True)

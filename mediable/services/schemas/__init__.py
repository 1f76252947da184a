from mediable.services.schemas.media import (
    MediaRead,
    MediaCreate,
)
from mediable.services.schemas.mediables import (
    MediaAttach,
    MediaSync,
    MediaDetach,
    MediaLinkRead,
)

__all__ = [
    "MediaRead",
    "MediaCreate",
    "MediaAttach",
    "MediaSync",
    "MediaDetach",
    "MediaLinkRead",
]

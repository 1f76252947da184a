# mediable/database/models/__init__.py
# The Mediable mixin lives in mediable.database.models.mediable; it depends on
# the repos, which import these models, so it is not re-exported here.

from mediable.database.core.main import Base
from mediable.database.models.media import (
    Media,
    MediableLink,
)
from mediable.database.models.soft_delete import SoftDeletes

__all__ = [
    "Base",
    "Media",
    "MediableLink",
    "SoftDeletes",
]

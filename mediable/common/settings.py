# mediable/common/settings.py
from __future__ import annotations

from functools import lru_cache
from typing import List, Optional
from pydantic import BaseModel, Field, AliasChoices, field_validator, computed_field
from pydantic_settings import BaseSettings, SettingsConfigDict


def _to_bool(v: str | bool | int | None, default: bool = False) -> bool:
    if isinstance(v, bool):
        return v
    if v is None:
        return default
    s = str(v).strip().lower()
    return s in {"1", "true", "yes", "y", "on"}


class APIConfig(BaseModel):
    host: str = "0.0.0.0"
    port: int = 8000
    prefix: str = "/api"

    cors_allow_origins: List[str] = Field(default_factory=lambda: ["http://localhost:5173"])
    cors_allow_methods: List[str] = Field(default_factory=lambda: ["GET", "POST", "PUT", "PATCH", "DELETE", "OPTIONS"])
    cors_allow_headers: List[str] = Field(default_factory=lambda: ["*"])
    cors_allow_credentials: bool = False


class DBConfig(BaseModel):
    driver: str = "postgresql+psycopg"
    host: str = "localhost"
    port: int = 5432
    name: str = "mediable"
    user: str = "mediable"
    password: str = "mediable"
    # "public" (or empty) keeps tables unqualified
    schema_name: str = Field(default="public", alias="DB_SCHEMA")
    echo: bool = False
    pool_size: int = 10
    max_overflow: int = 20
    pool_pre_ping: bool = True
    pool_recycle: int = 1800

    # Optional single URL (if set, it takes precedence)
    url: Optional[str] = Field(
        default=None,
        validation_alias=AliasChoices("DATABASE_URL", "database_url", "url"),
    )

    model_config = {"populate_by_name": True}

    @computed_field  # type: ignore[misc]
    @property
    def effective_url(self) -> str:
        if self.url:
            return self.url
        return f"{self.driver}://{self.user}:{self.password}@{self.host}:{self.port}/{self.name}"


class MediableConfig(BaseModel):
    """
    Behaviour of the media association layer.

    model                  mapped class name of the media entity
    mediables_table        pivot table holding (media, mediable, tag, order)
    rehydrate_media        reload the media relation on read after a mutation
    detach_on_soft_delete  drop associations when a mediable is soft deleted
    """
    model: str = "Media"
    mediables_table: str = "mediables"
    rehydrate_media: bool = True
    detach_on_soft_delete: bool = False

    @field_validator("rehydrate_media", mode="before")
    @classmethod
    def _boolify_rehydrate(cls, v):
        return _to_bool(v, default=True)

    @field_validator("detach_on_soft_delete", mode="before")
    @classmethod
    def _boolify_detach(cls, v):
        return _to_bool(v)


class Settings(BaseSettings):
    # -------- App / Env --------
    app_name: str = "mediable"
    app_env: str = "development"  # development|test|staging|production
    log_level: str = "INFO"

    # -------- Sub-configs --------
    api: APIConfig = APIConfig()
    db: DBConfig = DBConfig()
    mediable: MediableConfig = MediableConfig()

    # -------- Direct URL override --------
    database_url_env: Optional[str] = Field(default=None, validation_alias=AliasChoices("DATABASE_URL"))

    # -------- Alembic / migrations --------
    alembic_script_location: str = "mediable/database/alembic"
    alembic_version_table_schema: str = "public"

    # -------- Testcontainers / CI toggles --------
    use_testcontainers: bool = False
    test_db_image: str = "postgres:15-alpine"

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        env_nested_delimiter="__",
        case_sensitive=False,
        extra="ignore",
    )

    @field_validator("use_testcontainers", mode="before")
    @classmethod
    def _boolify(cls, v):
        return _to_bool(v)

    # ===== Convenience: DB URL & schema =====
    @computed_field  # type: ignore[misc]
    @property
    def database_url(self) -> str:
        return self.database_url_env or self.db.effective_url

    @computed_field  # type: ignore[misc]
    @property
    def db_schema(self) -> Optional[str]:
        schema = (self.db.schema_name or "").strip()
        if not schema or schema.lower() == "public":
            return None
        return schema


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    """
    Global settings accessor (cached). Use this everywhere you need config:
        from mediable.common.settings import get_settings
        cfg = get_settings()
    """
    return Settings()  # pydantic_settings will read from .env automatically

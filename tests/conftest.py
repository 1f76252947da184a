# tests/conftest.py
from __future__ import annotations

import pytest
from sqlalchemy import text
from sqlalchemy.engine import Engine
from sqlalchemy.pool import StaticPool
from testcontainers.postgres import PostgresContainer

from mediable.common.settings import get_settings
from mediable.database.core.main import build_engine
from mediable.database.models import Base  # <-- imports media + pivot metadata

import mediable_models  # noqa: F401  registers the test mediables on Base.metadata

cfg = get_settings()


def _sqlite_engine() -> Engine:
    # One shared in-memory connection so every Session sees the same tables
    return build_engine(
        "sqlite+pysqlite:///:memory:",
        poolclass=StaticPool,
        connect_args={"check_same_thread": False},
    )


def _prepare_schema(engine: Engine) -> None:
    if engine.dialect.name != "postgresql" or not cfg.db_schema:
        return
    with engine.begin() as conn:
        conn.execute(text(f'create schema if not exists "{cfg.db_schema}"'))


@pytest.fixture(scope="session")
def db_engine():
    """
    SQLite in memory by default; USE_TESTCONTAINERS=true runs the suite
    against a throwaway Postgres instead.
    """
    if cfg.use_testcontainers:
        with PostgresContainer(cfg.test_db_image) as pg:
            # testcontainers hands out a psycopg2 URL; we ship psycopg (v3)
            url = pg.get_connection_url().replace("psycopg2", "psycopg")
            engine = build_engine(url)
            _prepare_schema(engine)
            # Skip Alembic here; just create tables from models
            Base.metadata.create_all(bind=engine)
            try:
                yield engine
            finally:
                Base.metadata.drop_all(bind=engine)
                engine.dispose()
    else:
        engine = _sqlite_engine()
        Base.metadata.create_all(bind=engine)
        try:
            yield engine
        finally:
            engine.dispose()

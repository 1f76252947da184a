# tests/database/conftest.py
from __future__ import annotations

import pytest
from sqlalchemy.orm import Session

from mediable.database.models.media import Media


@pytest.fixture()
def db(db_engine) -> Session:
    """
    Per-test SQLAlchemy Session bound to a transaction (rolled back after each test).
    Session-level commits only release a SAVEPOINT.
    """
    connection = db_engine.connect()
    trans = connection.begin()

    session = Session(bind=connection, join_transaction_mode="create_savepoint")
    try:
        yield session
    finally:
        session.close()
        trans.rollback()
        connection.close()


@pytest.fixture()
def make_media(db):
    """Factory: make_media("a") -> flushed Media a.jpg."""
    def _make(name: str, ext: str = "jpg", directory: str = "uploads", **kw) -> Media:
        m = Media(directory=directory, filename=name, extension=ext, **kw)
        db.add(m)
        db.flush()
        return m
    return _make

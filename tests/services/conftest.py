# tests/services/conftest.py
from __future__ import annotations

import pytest
from sqlalchemy.orm import Session
from starlette.testclient import TestClient

from mediable.services.api.app import create_app
from mediable.services.api.deps import transactional_session


@pytest.fixture()
def api_session(db_engine):
    """One connection/transaction for the whole test, rolled back at the end."""
    conn = db_engine.connect()
    trans = conn.begin()
    session = Session(bind=conn, join_transaction_mode="create_savepoint")
    try:
        yield session
    finally:
        session.close()
        trans.rollback()
        conn.close()


@pytest.fixture()
def api_client(api_session):
    """
    A TestClient whose FastAPI dependency `transactional_session` is overridden
    to yield `api_session`. All API calls in one test share the same session
    (so POST -> GET works), and everything is rolled back at the end of the test.
    """
    app = create_app()

    def _override():
        # yield the same session for every request in this test
        yield api_session

    app.dependency_overrides[transactional_session] = _override

    try:
        with TestClient(app) as client:
            yield client
    finally:
        app.dependency_overrides.clear()

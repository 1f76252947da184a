# mediable/services/api/deps.py
from __future__ import annotations
from typing import Generator
from fastapi import Depends
from sqlalchemy.orm import Session

from mediable.database.core.main import SessionLocal


def get_db() -> Generator[Session, None, None]:
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()


def transactional_session(db: Session = Depends(get_db)) -> Generator[Session, None, None]:
    """
    Request-scoped transaction. Attach/detach/sync and the reads that follow
    them in one request share this Session.

    Usage in routers:
      def endpoint(session: Session = Depends(transactional_session)):
          ...
    """
    # COMMIT on normal exit, ROLLBACK if an exception bubbles out.
    with db.begin():
        yield db

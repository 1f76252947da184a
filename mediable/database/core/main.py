# mediable/database/core/main.py
from __future__ import annotations

from typing import Any, Dict, Iterator, List

from sqlalchemy import MetaData, create_engine, event, Column, Table
from sqlalchemy.engine import Engine
from sqlalchemy.engine import make_url
from sqlalchemy.orm import DeclarativeBase, Session, sessionmaker

from mediable.common.settings import get_settings

_settings = get_settings()

NAMING_CONVENTION = {
    "ix": "ix_%(column_0_label)s",
    "uq": "uq_%(table_name)s_%(column_0_name)s",
    "ck": "ck_%(table_name)s_%(constraint_name)s",
    "fk": "fk_%(table_name)s_%(column_0_name)s_%(referred_table_name)s",
    "pk": "pk_%(table_name)s",
}

_serviceobject_first = ("id", "date_created", "last_updated", "data_origin", "meta_data")


class Base(DeclarativeBase):
    metadata = MetaData(
        schema=_settings.db_schema,
        naming_convention=NAMING_CONVENTION,
    )

    @classmethod
    def __table_cls__(cls, *args, **kw):
        """Reorder columns so ServiceObject fields come first."""
        if not args:
            return super().__table_cls__(*args, **kw)

        # Positional args are (name, metadata, *columns_and_constraints)
        name, metadata, *rest = args

        cols: List[Column] = [x for x in rest if isinstance(x, Column)]
        others = [x for x in rest if not isinstance(x, Column)]

        priority = {n: i for i, n in enumerate(_serviceobject_first)}
        original_index = {c: i for i, c in enumerate(cols)}
        cols.sort(key=lambda c: (priority.get(c.name, 10_000), original_index[c]))

        return Table(name, metadata, *(cols + others), **kw)


def build_engine(url: str | None = None, **overrides: Any) -> Engine:
    """
    Engine from settings. Pool sizing only applies to server databases;
    SQLite (tests, local tooling) keeps SQLAlchemy's default pool.
    """
    url = url or _settings.database_url
    kw: Dict[str, Any] = {"echo": _settings.db.echo, "future": True}
    if make_url(url).get_backend_name() != "sqlite":
        kw.update(
            pool_size=_settings.db.pool_size,
            max_overflow=_settings.db.max_overflow,
            pool_pre_ping=_settings.db.pool_pre_ping,
            pool_recycle=_settings.db.pool_recycle,
        )
    kw.update(overrides)
    eng = create_engine(url, **kw)

    if eng.dialect.name == "sqlite":
        # pysqlite defers BEGIN on its own; take it over so SAVEPOINTs nest
        # and ON DELETE CASCADE on the pivot is honoured.
        @event.listens_for(eng, "connect")
        def _sqlite_connect(dbapi_conn, _):
            dbapi_conn.isolation_level = None
            cur = dbapi_conn.cursor()
            cur.execute("PRAGMA foreign_keys=ON")
            cur.close()

        @event.listens_for(eng, "begin")
        def _sqlite_begin(conn):
            conn.exec_driver_sql("BEGIN")

    # Ensure the app schema is first, then public (so extensions remain visible)
    if _settings.db_schema and eng.dialect.name == "postgresql":
        @event.listens_for(eng, "connect")
        def _set_search_path(dbapi_conn, _):
            with dbapi_conn.cursor() as cur:
                cur.execute(f'SET search_path TO "{_settings.db_schema}", public')

    return eng


engine = build_engine()

SessionLocal = sessionmaker(bind=engine, expire_on_commit=False, future=True, autoflush=False)


def get_session() -> Iterator[Session]:
    """
    Transaction-scoped Session for scripts and workers.
    Commits on success, rolls back on error.
    """
    session: Session = SessionLocal()
    try:
        yield session
        session.commit()
    except Exception:
        session.rollback()
        raise
    finally:
        session.close()

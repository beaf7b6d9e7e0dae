from collections.abc import Iterator

from sqlalchemy import create_engine, event
from sqlalchemy.engine import Engine
from sqlalchemy.orm import Session, sessionmaker
from sqlalchemy.pool import StaticPool

from coursehub.core.config import settings


def build_engine(database_url: str, echo: bool = False) -> Engine:
    if not database_url.startswith("sqlite"):
        return create_engine(database_url, echo=echo, pool_pre_ping=True, future=True)

    kwargs: dict = {"connect_args": {"check_same_thread": False}}
    # in-memory sqlite lives on a single connection; share it
    if ":memory:" in database_url or database_url.endswith("://"):
        kwargs["poolclass"] = StaticPool
    eng = create_engine(database_url, echo=echo, future=True, **kwargs)

    # sqlite ignores ON DELETE CASCADE unless asked per connection
    @event.listens_for(eng, "connect")
    def _enable_foreign_keys(dbapi_conn, _record):
        cur = dbapi_conn.cursor()
        cur.execute("PRAGMA foreign_keys=ON")
        cur.close()

    return eng


engine = build_engine(settings.database_url, echo=settings.sql_echo)
SessionLocal = sessionmaker(bind=engine, autoflush=False, autocommit=False, expire_on_commit=False)


def get_db() -> Iterator[Session]:
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()

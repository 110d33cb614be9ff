"""Database engine, session factory and the per-request session dependency."""

from collections.abc import Generator

from fastapi import Request
from sqlalchemy import create_engine, event, text
from sqlalchemy.engine import Engine
from sqlalchemy.orm import Session, sessionmaker
from sqlalchemy.pool import StaticPool

from medadmin.core.config import Settings


def build_engine(settings: Settings) -> Engine:
    """
    Create the engine for DATABASE_URL.

    Postgres gets a bounded pool; exhausting it surfaces as a pool timeout on
    the request rather than blocking forever. In-memory sqlite shares a single
    connection so every session sees the same database.
    """
    if settings.is_sqlite:
        kwargs: dict = {"connect_args": {"check_same_thread": False}}
        if ":memory:" in settings.DATABASE_URL or settings.DATABASE_URL.rstrip("/") in (
            "sqlite:",
            "sqlite+pysqlite:",
        ):
            kwargs["poolclass"] = StaticPool
        engine = create_engine(settings.DATABASE_URL, echo=settings.DEBUG, **kwargs)

        @event.listens_for(engine, "connect")
        def _enable_foreign_keys(dbapi_connection, _record) -> None:
            cursor = dbapi_connection.cursor()
            cursor.execute("PRAGMA foreign_keys=ON")
            cursor.close()

        return engine

    return create_engine(
        settings.DATABASE_URL,
        pool_pre_ping=True,
        pool_size=settings.DB_POOL_SIZE,
        max_overflow=settings.DB_MAX_OVERFLOW,
        pool_timeout=settings.DB_POOL_TIMEOUT_SEC,
        pool_recycle=settings.DB_POOL_RECYCLE_SEC,
        echo=settings.DEBUG,
    )


def build_session_factory(engine: Engine) -> sessionmaker[Session]:
    return sessionmaker(autocommit=False, autoflush=False, bind=engine)


def get_db(request: Request) -> Generator[Session, None, None]:
    """Dependency that yields a DB session from the app's factory and closes it when done."""
    db = request.app.state.session_factory()
    try:
        yield db
    finally:
        db.close()


def check_db_connected(db: Session) -> bool:
    """Run a trivial query to verify the database is reachable."""
    try:
        db.execute(text("SELECT 1"))
        return True
    except Exception:
        return False

"""
Engine and session handling for the FamilyLinX document store.

SQLite is the default for local use and tests; PostgreSQL is expected in
production. Every unit of work commits on success and rolls back on error.
"""

import logging
from contextlib import contextmanager
from pathlib import Path
from typing import Generator

from sqlalchemy import create_engine, event, text
from sqlalchemy.engine import Engine
from sqlalchemy.orm import Session, sessionmaker
from sqlalchemy.pool import StaticPool

from familylinx.config import get_settings

logger = logging.getLogger(__name__)

settings = get_settings()
settings.validate_production_config()


@event.listens_for(Engine, "connect")
def _enable_sqlite_foreign_keys(dbapi_conn, connection_record):
    # Group parents and family cascades rely on enforced foreign keys.
    if type(dbapi_conn).__module__.startswith("sqlite3"):
        cursor = dbapi_conn.cursor()
        cursor.execute("PRAGMA foreign_keys=ON")
        cursor.close()


def _build_engine(url: str) -> Engine:
    echo = settings.log_level == "DEBUG"
    if url.lower().startswith("sqlite"):
        # Sync routes run in a threadpool, so the connection is shared across threads
        return create_engine(
            url,
            connect_args={"check_same_thread": False},
            poolclass=StaticPool,
            echo=echo,
        )
    return create_engine(url, pool_size=5, pool_recycle=3600, pool_pre_ping=True, echo=echo)


engine = _build_engine(settings.database_url)

SessionLocal = sessionmaker(bind=engine, autocommit=False, autoflush=False)


def _unit_of_work() -> Generator[Session, None, None]:
    db = SessionLocal()
    try:
        yield db
        db.commit()
    except Exception:
        db.rollback()
        raise
    finally:
        db.close()


def get_db() -> Generator[Session, None, None]:
    """
    FastAPI dependency yielding one session per request.

    Example:
        @router.get("/families")
        def list_families_endpoint(db: Session = Depends(get_db)):
            ...
    """
    yield from _unit_of_work()


@contextmanager
def get_db_context() -> Generator[Session, None, None]:
    """
    Session for the command line tool and one-off scripts.

    Example:
        with get_db_context() as db:
            group = get_group(db, "1712345678901-abc123xyz")
    """
    yield from _unit_of_work()


def init_db() -> None:
    """Create missing tables. Deployed databases are managed with Alembic."""
    from familylinx.models.base import Base

    database = engine.url.database
    if engine.url.get_backend_name() == "sqlite" and database and database != ":memory:":
        Path(database).parent.mkdir(parents=True, exist_ok=True)

    Base.metadata.create_all(bind=engine)
    logger.info(f"Tables ready on {engine.url.get_backend_name()}")


def check_connection() -> bool:
    """Return True when the database answers a trivial query."""
    try:
        with engine.connect() as conn:
            conn.execute(text("SELECT 1"))
    except Exception as e:
        logger.error(f"Database connection failed: {e}")
        return False
    return True

"""Engine and session factory for the back office database."""

import logging
import time
from collections.abc import Generator

from sqlalchemy import create_engine, text
from sqlalchemy.engine import Engine, make_url
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session, sessionmaker

from backoffice.core.config import settings

logger = logging.getLogger(__name__)


def build_engine(database_url: str) -> Engine:
    """Create the engine for ``DATABASE_URL``.

    SQLite connections are shared across the threadpool FastAPI runs sync
    routes in; server databases get pre-ping so dropped connections are
    replaced before a menu transaction starts.
    """

    url = make_url(database_url)
    if url.get_backend_name() == "sqlite":
        return create_engine(url, future=True, connect_args={"check_same_thread": False})
    return create_engine(url, future=True, pool_pre_ping=True)


engine = build_engine(settings.database_url)
SessionLocal = sessionmaker(
    bind=engine,
    autocommit=False,
    autoflush=False,
    future=True,
)


def get_db() -> Generator[Session, None, None]:
    """Request-scoped session; one request is at most one menu transaction."""

    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()


def verify_connection(max_attempts: int = 20, delay_seconds: float = 1.0) -> None:
    """Block until the database answers ``SELECT 1``.

    Waits ``delay_seconds * attempt`` between tries and re-raises the last
    error once ``max_attempts`` is exhausted.
    """

    last_exc: SQLAlchemyError | None = None
    for attempt in range(1, max_attempts + 1):
        try:
            with engine.connect() as connection:
                connection.execute(text("SELECT 1"))
        except SQLAlchemyError as exc:
            last_exc = exc
            logger.warning(
                "Back office database unavailable (attempt %d/%d): %s",
                attempt,
                max_attempts,
                type(exc).__name__,
            )
            if attempt < max_attempts:
                time.sleep(delay_seconds * attempt)
            continue

        if attempt > 1:
            logger.info("Back office database reachable after %d attempt(s)", attempt)
        return

    logger.error("Giving up on the back office database after %d attempts", max_attempts)
    if last_exc is None:
        raise RuntimeError("Database connection verification was not attempted")
    raise last_exc


__all__ = ["SessionLocal", "build_engine", "engine", "get_db", "verify_connection"]

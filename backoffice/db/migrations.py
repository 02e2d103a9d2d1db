"""Run the Alembic migrations shipped with the back office from application code."""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Optional

from alembic import command
from alembic.config import Config
from alembic.runtime.migration import MigrationContext
from alembic.script import ScriptDirectory
from sqlalchemy.engine import Engine

from backoffice.core.config import settings

logger = logging.getLogger(__name__)

PROJECT_ROOT = Path(__file__).resolve().parents[2]


def _alembic_config(database_url: Optional[str] = None) -> Config:
    """Alembic config pointing at the project's ``alembic/`` scripts."""

    alembic_cfg = Config(str(PROJECT_ROOT / "alembic.ini"))
    alembic_cfg.set_main_option("script_location", str(PROJECT_ROOT / "alembic"))
    alembic_cfg.set_main_option("sqlalchemy.url", database_url or settings.database_url)
    return alembic_cfg


def _schema_is_current(cfg: Config, engine: Engine) -> bool:
    heads = set(ScriptDirectory.from_config(cfg).get_heads() or [])
    with engine.connect() as connection:
        current = MigrationContext.configure(connection).get_current_revision()
    logger.info("Schema revision %s (heads: %s)", current, ",".join(sorted(heads)))
    return current is not None and current in heads


def run_migrations(revision: str = "heads") -> None:
    """Upgrade the menu schema, skipping the work when it is already current.

    Pooled application connections are released first so the upgrade never
    queues behind an idle transaction holding a lock on ``categories``.
    """
    from backoffice.db.session import engine as app_engine

    app_engine.dispose()
    cfg = _alembic_config()

    try:
        if revision == "heads" and _schema_is_current(cfg, app_engine):
            logger.info("Menu schema already up to date")
            return
    except Exception as e:
        logger.warning("Could not read the schema revision (%s); upgrading anyway", e)

    logger.info("Upgrading menu schema to %s", revision)
    try:
        command.upgrade(cfg, revision)
    except Exception:
        logger.exception("Alembic upgrade failed")
        raise
    logger.info("Menu schema upgraded")


__all__ = ["PROJECT_ROOT", "run_migrations"]

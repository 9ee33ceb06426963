from __future__ import annotations

import logging
from pathlib import Path

from alembic import command
from alembic.config import Config
from alembic.script import ScriptDirectory
from sqlalchemy import inspect
from sqlalchemy.engine import Engine

from orders_api.core import config

logger = logging.getLogger(__name__)
MIGRATIONS_PREFIX = "[MIGRATIONS]"


def _alembic_config(alembic_config_path: Path) -> Config:
    if not alembic_config_path.exists():
        logger.critical("%s alembic config not found path=%s", MIGRATIONS_PREFIX, alembic_config_path)
        raise RuntimeError("alembic config not found")
    alembic_cfg = Config(str(alembic_config_path))
    alembic_cfg.attributes["configure_logger"] = False
    alembic_cfg.set_main_option("script_location", str(alembic_config_path.parent / "alembic"))
    alembic_cfg.set_main_option("sqlalchemy.url", config.DATABASE_URL)
    return alembic_cfg


def validate_runtime_environment() -> None:
    """Refuse to start production with a development database or signing key."""
    if not config.IS_PROD:
        return
    if config.DATABASE_URL.startswith("sqlite"):
        logger.critical("%s SQLite is forbidden in production", MIGRATIONS_PREFIX)
        raise RuntimeError("SQLite is forbidden in production environment")
    if not config.JWT_SECRET_KEY:
        logger.critical("JWT_SECRET_KEY is required in production")
        raise RuntimeError("JWT_SECRET_KEY is required in production environment")


def apply_migrations(*, alembic_config_path: Path) -> None:
    if not config.AUTO_APPLY_MIGRATIONS:
        logger.info("%s auto migration skipped env=%s", MIGRATIONS_PREFIX, config.ENV_NORMALIZED)
        return

    alembic_cfg = _alembic_config(alembic_config_path)
    logger.info("%s applying migrations to head", MIGRATIONS_PREFIX)
    try:
        command.upgrade(alembic_cfg, "head")
    except Exception as exc:
        logger.critical("%s migration apply failed: %s", MIGRATIONS_PREFIX, exc)
        raise RuntimeError("Automatic migration failed") from exc
    logger.info("%s migrations applied", MIGRATIONS_PREFIX)


def ensure_migrations_applied(*, engine: Engine, alembic_config_path: Path) -> None:
    if config.IS_TEST:
        logger.info("%s skipped migration check in test environment", MIGRATIONS_PREFIX)
        return

    script_directory = ScriptDirectory.from_config(_alembic_config(alembic_config_path))
    expected_heads = set(script_directory.get_heads())

    with engine.connect() as connection:
        inspector = inspect(connection)
        if "alembic_version" not in inspector.get_table_names():
            logger.critical("%s alembic_version table missing", MIGRATIONS_PREFIX)
            raise RuntimeError("Database has no migration state")

        current_rows = connection.exec_driver_sql("SELECT version_num FROM alembic_version").fetchall()

    current_heads = {row[0] for row in current_rows if row and row[0]}
    if current_heads != expected_heads:
        logger.critical(
            "%s pending migration detected current=%s expected=%s",
            MIGRATIONS_PREFIX,
            sorted(current_heads),
            sorted(expected_heads),
        )
        raise RuntimeError("Pending migrations detected")

    logger.info("%s migration state verified", MIGRATIONS_PREFIX)

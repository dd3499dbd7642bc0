from __future__ import annotations

import logging
from pathlib import Path

from alembic import command
from alembic.config import Config

from infra.path import APP_NAME, database_url

logger = logging.getLogger(__name__)

_PROJECT_ROOT = Path(__file__).resolve().parents[1]


def migration_dir_candidates(root: Path = _PROJECT_ROOT) -> list[Path]:
    # Installed layouts may nest resources under the application name.
    return [root / "migration", root / APP_NAME / "migration"]


def _resolve_migration_dir(root: Path = _PROJECT_ROOT) -> Path:
    candidates = migration_dir_candidates(root)
    for candidate in candidates:
        if (candidate / "alembic.ini").exists():
            return candidate
    raise RuntimeError(
        "Alembic migrations not found. Tried: " + ", ".join(str(p) for p in candidates)
    )


def alembic_config(db_url: str | None = None) -> Config:
    script_location = _resolve_migration_dir()
    cfg = Config(str(script_location / "alembic.ini"))
    cfg.set_main_option("script_location", str(script_location))
    cfg.set_main_option("sqlalchemy.url", db_url or database_url())
    return cfg


def run_migrations(db_url: str | None = None) -> None:
    cfg = alembic_config(db_url)
    logger.info("Upgrading schema at %s", cfg.get_main_option("script_location"))
    command.upgrade(cfg, "head")

from __future__ import annotations

import logging

import pytest
from sqlalchemy import create_engine, inspect

from infra.db.base import Base
from infra.migrate import alembic_config, migration_dir_candidates, run_migrations
import infra.db.models  # noqa


@pytest.fixture
def restore_root_logging():
    # alembic.ini carries its own logging config
    root = logging.getLogger()
    saved_handlers, saved_level = list(root.handlers), root.level
    yield
    root.handlers[:] = saved_handlers
    root.setLevel(saved_level)


def test_alembic_config_points_at_bundled_scripts(tmp_path):
    db_url = f"sqlite:///{(tmp_path / 'cfg.db').as_posix()}"

    cfg = alembic_config(db_url)

    assert cfg.get_main_option("sqlalchemy.url") == db_url
    assert cfg.get_main_option("script_location").endswith("migration")
    assert migration_dir_candidates(tmp_path)[0] == tmp_path / "migration"


def test_migrations_build_the_mapped_schema(tmp_path, restore_root_logging):
    db_url = f"sqlite:///{(tmp_path / 'migrated.db').as_posix()}"

    run_migrations(db_url)

    engine = create_engine(db_url, future=True)
    try:
        inspector = inspect(engine)
        tables = set(inspector.get_table_names()) - {"alembic_version"}
        assert tables == set(Base.metadata.tables)
        for name, table in Base.metadata.tables.items():
            migrated_columns = {col["name"] for col in inspector.get_columns(name)}
            assert migrated_columns == {col.name for col in table.columns}, name
            migrated_indexes = {ix["name"] for ix in inspector.get_indexes(name)}
            assert {ix.name for ix in table.indexes} <= migrated_indexes, name
    finally:
        engine.dispose()

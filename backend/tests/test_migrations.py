from pathlib import Path

from alembic import command
from alembic.config import Config
from sqlalchemy import create_engine

from srs_scheduler.db.bootstrap import missing_schema

MIGRATIONS_DIR = Path(__file__).resolve().parents[2] / "database" / "migrations"


def test_upgrade_head_builds_the_schema_at_database_url(tmp_path, monkeypatch):
    url = f"sqlite+pysqlite:///{tmp_path / 'migrated.db'}"
    monkeypatch.setenv("DATABASE_URL", url)
    config = Config()
    config.set_main_option("script_location", str(MIGRATIONS_DIR))

    command.upgrade(config, "head")

    engine = create_engine(url)
    try:
        assert missing_schema(engine) == ([], {})
    finally:
        engine.dispose()

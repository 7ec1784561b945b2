import os
import sys
from logging.config import fileConfig

from alembic import context
from sqlalchemy import engine_from_config, pool

REPO_ROOT = os.path.abspath(os.path.join(os.path.dirname(__file__), "..", ".."))
sys.path.append(os.path.join(REPO_ROOT, "backend"))

from srs_scheduler.core.config import get_settings  # noqa: E402
from srs_scheduler.db.base import Base  # noqa: E402
import srs_scheduler.models  # noqa: E402,F401

config = context.config
if config.config_file_name is not None:
    fileConfig(config.config_file_name)


def database_url() -> str:
    """DATABASE_URL wins over backend/.env so one-off upgrades can target another database."""
    return os.getenv("DATABASE_URL") or get_settings().database_url


def _run(**options) -> None:
    # SQLite needs batch mode for ALTER.
    url = options.get("url") or str(options["connection"].engine.url)
    context.configure(
        target_metadata=Base.metadata,
        render_as_batch=url.startswith("sqlite"),
        compare_type=True,
        **options,
    )
    with context.begin_transaction():
        context.run_migrations()


def run_offline(url: str) -> None:
    _run(url=url, literal_binds=True, dialect_opts={"paramstyle": "named"})


def run_online(url: str) -> None:
    section = config.get_section(config.config_ini_section, {})
    section["sqlalchemy.url"] = url
    engine = engine_from_config(section, prefix="sqlalchemy.", poolclass=pool.NullPool)
    with engine.connect() as connection:
        _run(connection=connection)


if context.is_offline_mode():
    run_offline(database_url())
else:
    run_online(database_url())

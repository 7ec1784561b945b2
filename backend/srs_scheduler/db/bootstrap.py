from __future__ import annotations

import logging

from sqlalchemy import inspect
from sqlalchemy.engine import Engine

from srs_scheduler.db.base import Base
from srs_scheduler.db.session import engine as default_engine

logger = logging.getLogger(__name__)

REQUIRED_COLUMNS: dict[str, set[str]] = {
    "teachers": {"id", "name", "email"},
    "courses": {"id", "code", "name"},
    "students": {"id", "class_name", "section"},
    "schedule_entries": {"id", "teacher_id", "course_id", "class_name", "section", "created_at"},
    "schedule_sessions": {"id", "entry_id", "position", "day_kind", "day", "start_minute", "end_minute"},
}


def missing_schema(engine: Engine) -> tuple[list[str], dict[str, list[str]]]:
    missing_tables: list[str] = []
    missing_columns: dict[str, list[str]] = {}
    with engine.connect() as connection:
        inspector = inspect(connection)
        table_names = set(inspector.get_table_names())
        for table_name, columns in REQUIRED_COLUMNS.items():
            if table_name not in table_names:
                missing_tables.append(table_name)
                continue
            existing = {item["name"] for item in inspector.get_columns(table_name)}
            missing = sorted(columns - existing)
            if missing:
                missing_columns[table_name] = missing
    return missing_tables, missing_columns


def ensure_schema(engine: Engine | None = None) -> None:
    import srs_scheduler.models  # noqa: F401

    bind = engine or default_engine
    Base.metadata.create_all(bind=bind)
    missing_tables, missing_columns = missing_schema(bind)
    if missing_tables or missing_columns:
        # create_all never alters existing tables; those need an alembic upgrade.
        logger.warning(
            "Database schema is out of date (missing tables: %s, missing columns: %s); run `alembic upgrade head`",
            missing_tables,
            missing_columns,
        )

"""create schedule entries and sessions

Revision ID: 20261019_0002
Revises: 20261019_0001
Create Date: 2026-10-19 00:00:00.000000

"""
from alembic import op
import sqlalchemy as sa

revision = "20261019_0002"
down_revision = "20261019_0001"
branch_labels = None
depends_on = None


def upgrade() -> None:
    day_kind = sa.Enum("weekday", "date", name="day_kind")

    op.create_table(
        "schedule_entries",
        sa.Column("id", sa.String(length=36), primary_key=True, nullable=False),
        sa.Column("teacher_id", sa.String(length=36), nullable=False),
        sa.Column("course_id", sa.String(length=36), nullable=False),
        sa.Column("class_name", sa.String(length=50), nullable=False),
        sa.Column("section", sa.String(length=20), nullable=False),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False),
        sa.Column("updated_at", sa.DateTime(timezone=True), nullable=True),
    )
    op.create_index("ix_schedule_entries_teacher_id", "schedule_entries", ["teacher_id"])
    op.create_index("ix_schedule_entries_course_id", "schedule_entries", ["course_id"])
    op.create_index("ix_schedule_entries_class_section", "schedule_entries", ["class_name", "section"])

    op.create_table(
        "schedule_sessions",
        sa.Column("id", sa.Integer(), primary_key=True, autoincrement=True, nullable=False),
        sa.Column(
            "entry_id",
            sa.String(length=36),
            sa.ForeignKey("schedule_entries.id", ondelete="CASCADE"),
            nullable=False,
        ),
        sa.Column("position", sa.Integer(), nullable=False, server_default="0"),
        sa.Column("day_kind", day_kind, nullable=False),
        sa.Column("day", sa.String(length=20), nullable=False),
        sa.Column("start_time", sa.String(length=10), nullable=False),
        sa.Column("end_time", sa.String(length=10), nullable=False),
        sa.Column("start_minute", sa.Integer(), nullable=False),
        sa.Column("end_minute", sa.Integer(), nullable=False),
    )
    op.create_index("ix_schedule_sessions_entry_id", "schedule_sessions", ["entry_id"])
    op.create_index(
        "ix_schedule_sessions_day",
        "schedule_sessions",
        ["day_kind", "day", "start_minute", "end_minute"],
    )


def downgrade() -> None:
    op.drop_index("ix_schedule_sessions_day", table_name="schedule_sessions")
    op.drop_index("ix_schedule_sessions_entry_id", table_name="schedule_sessions")
    op.drop_table("schedule_sessions")
    op.drop_index("ix_schedule_entries_class_section", table_name="schedule_entries")
    op.drop_index("ix_schedule_entries_course_id", table_name="schedule_entries")
    op.drop_index("ix_schedule_entries_teacher_id", table_name="schedule_entries")
    op.drop_table("schedule_entries")
    sa.Enum(name="day_kind").drop(op.get_bind(), checkfirst=True)

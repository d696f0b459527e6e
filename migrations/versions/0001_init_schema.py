"""init schema (categories, tasks, time_blocks, habit_history)

Revision ID: 0001_init_schema
Revises:
Create Date: 2026-10-18 00:00:00.000000

"""

from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa


# revision identifiers, used by Alembic.
revision: str = "0001_init_schema"
down_revision: Union[str, Sequence[str], None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


DEFAULT_CATEGORIES = [
    {"name": "work", "color": "bg-indigo-500", "text_color": "text-indigo-500"},
    {"name": "personal", "color": "bg-pink-500", "text_color": "text-pink-500"},
    {"name": "health", "color": "bg-emerald-500", "text_color": "text-emerald-500"},
    {"name": "learning", "color": "bg-amber-500", "text_color": "text-amber-500"},
    {"name": "other", "color": "bg-slate-500", "text_color": "text-slate-500"},
]


def upgrade() -> None:
    """Create the four tables with indexes, FK rules and seed categories."""
    # categories
    categories = op.create_table(
        "categories",
        sa.Column("id", sa.Integer(), nullable=False),
        sa.Column("name", sa.String(length=50), nullable=False),
        sa.Column("color", sa.String(length=50), nullable=False),
        sa.Column("text_color", sa.String(length=50), nullable=False),
        sa.Column("created_at", sa.DateTime(), nullable=True),
        sa.Column("updated_at", sa.DateTime(), nullable=True),
        sa.PrimaryKeyConstraint("id"),
        sa.UniqueConstraint("name"),
    )
    op.create_index(op.f("ix_categories_id"), "categories", ["id"], unique=False)

    # tasks
    op.create_table(
        "tasks",
        sa.Column("id", sa.Integer(), nullable=False),
        sa.Column("title", sa.String(length=255), nullable=False),
        sa.Column("description", sa.Text(), nullable=True),
        sa.Column("completed", sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column("category_id", sa.Integer(), nullable=True),
        sa.Column("is_habit", sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column("created_at", sa.DateTime(), nullable=True),
        sa.Column("updated_at", sa.DateTime(), nullable=True),
        sa.ForeignKeyConstraint(["category_id"], ["categories.id"], ondelete="RESTRICT"),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index(op.f("ix_tasks_id"), "tasks", ["id"], unique=False)
    op.create_index("ix_tasks_completed", "tasks", ["completed"], unique=False)
    op.create_index("ix_tasks_is_habit", "tasks", ["is_habit"], unique=False)
    op.create_index("ix_tasks_category_id", "tasks", ["category_id"], unique=False)
    op.create_index("ix_tasks_created_at", "tasks", ["created_at"], unique=False)

    # time_blocks
    op.create_table(
        "time_blocks",
        sa.Column("id", sa.Integer(), nullable=False),
        sa.Column("task_id", sa.Integer(), nullable=False),
        sa.Column("start_time", sa.String(length=8), nullable=False),
        sa.Column("end_time", sa.String(length=8), nullable=False),
        sa.Column("date", sa.Date(), nullable=False),
        sa.ForeignKeyConstraint(["task_id"], ["tasks.id"], ondelete="CASCADE"),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index(op.f("ix_time_blocks_id"), "time_blocks", ["id"], unique=False)
    op.create_index("ix_time_blocks_task_id", "time_blocks", ["task_id"], unique=False)

    # habit_history: one row per (task, day)
    op.create_table(
        "habit_history",
        sa.Column("id", sa.Integer(), nullable=False),
        sa.Column("task_id", sa.Integer(), nullable=False),
        sa.Column("date", sa.Date(), nullable=False),
        sa.Column("completed", sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column("created_at", sa.DateTime(), nullable=True),
        sa.Column("updated_at", sa.DateTime(), nullable=True),
        sa.ForeignKeyConstraint(["task_id"], ["tasks.id"], ondelete="CASCADE"),
        sa.PrimaryKeyConstraint("id"),
        sa.UniqueConstraint("task_id", "date", name="uq_habit_history_task_date"),
    )
    op.create_index(op.f("ix_habit_history_id"), "habit_history", ["id"], unique=False)
    op.create_index("ix_habit_history_date", "habit_history", ["date"], unique=False)

    op.bulk_insert(categories, DEFAULT_CATEGORIES)


def downgrade() -> None:
    op.drop_index("ix_habit_history_date", table_name="habit_history")
    op.drop_index(op.f("ix_habit_history_id"), table_name="habit_history")
    op.drop_table("habit_history")
    op.drop_index("ix_time_blocks_task_id", table_name="time_blocks")
    op.drop_index(op.f("ix_time_blocks_id"), table_name="time_blocks")
    op.drop_table("time_blocks")
    op.drop_index("ix_tasks_created_at", table_name="tasks")
    op.drop_index("ix_tasks_category_id", table_name="tasks")
    op.drop_index("ix_tasks_is_habit", table_name="tasks")
    op.drop_index("ix_tasks_completed", table_name="tasks")
    op.drop_index(op.f("ix_tasks_id"), table_name="tasks")
    op.drop_table("tasks")
    op.drop_index(op.f("ix_categories_id"), table_name="categories")
    op.drop_table("categories")

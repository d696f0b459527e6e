# PURPOSE: define how categories, tasks, time blocks and habit entries look in the database.

from datetime import UTC, datetime

from sqlalchemy import (
    Boolean,
    Column,
    Date,
    DateTime,
    ForeignKey,
    Index,
    Integer,
    String,
    Text,
    UniqueConstraint,
)
from sqlalchemy.orm import relationship

from .db import Base


def now_utc():
    """Return timezone-aware UTC datetime (stored in DB)."""
    return datetime.now(UTC)


def today_utc():
    """Return the current calendar date in UTC (habit entries are keyed by it)."""
    return now_utc().date()


class CategoryDB(Base):
    __tablename__ = "categories"

    id = Column(Integer, primary_key=True, index=True)
    name = Column(String(50), unique=True, nullable=False)
    color = Column(String(50), nullable=False, default="bg-slate-500")
    text_color = Column(String(50), nullable=False, default="text-slate-500")
    created_at = Column(DateTime, default=now_utc)
    updated_at = Column(DateTime, default=now_utc)


class TaskDB(Base):
    __tablename__ = "tasks"

    id = Column(Integer, primary_key=True, index=True)
    title = Column(String(255), nullable=False)
    description = Column(Text, nullable=True)
    completed = Column(Boolean, nullable=False, default=False)
    # RESTRICT: a category cannot disappear from under its tasks
    category_id = Column(Integer, ForeignKey("categories.id", ondelete="RESTRICT"), nullable=True)
    is_habit = Column(Boolean, nullable=False, default=False)
    created_at = Column(DateTime, default=now_utc)
    updated_at = Column(DateTime, default=now_utc)

    category = relationship("CategoryDB")
    # Children are removed by the FK cascade, not by the ORM
    time_blocks = relationship(
        "TimeBlockDB", back_populates="task", cascade="all, delete-orphan", passive_deletes=True
    )
    habit_history = relationship(
        "HabitHistoryDB", back_populates="task", cascade="all, delete-orphan", passive_deletes=True
    )


class TimeBlockDB(Base):
    __tablename__ = "time_blocks"

    id = Column(Integer, primary_key=True, index=True)
    task_id = Column(Integer, ForeignKey("tasks.id", ondelete="CASCADE"), nullable=False)
    start_time = Column(String(8), nullable=False)  # HH:MM
    end_time = Column(String(8), nullable=False)
    date = Column(Date, nullable=False)

    task = relationship("TaskDB", back_populates="time_blocks")


class HabitHistoryDB(Base):
    __tablename__ = "habit_history"
    __table_args__ = (UniqueConstraint("task_id", "date", name="uq_habit_history_task_date"),)

    id = Column(Integer, primary_key=True, index=True)
    task_id = Column(Integer, ForeignKey("tasks.id", ondelete="CASCADE"), nullable=False)
    date = Column(Date, nullable=False)
    completed = Column(Boolean, nullable=False, default=False)
    created_at = Column(DateTime, default=now_utc)
    updated_at = Column(DateTime, default=now_utc)

    task = relationship("TaskDB", back_populates="habit_history")


# Helpful indexes for filtering/sorting
Index("ix_tasks_completed", TaskDB.completed)
Index("ix_tasks_is_habit", TaskDB.is_habit)
Index("ix_tasks_category_id", TaskDB.category_id)
Index("ix_tasks_created_at", TaskDB.created_at)
Index("ix_time_blocks_task_id", TimeBlockDB.task_id)
Index("ix_habit_history_date", HabitHistoryDB.date)

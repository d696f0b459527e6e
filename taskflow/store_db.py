# PURPOSE: write side for tasks, categories and habit entries.
# Every multi-statement write runs inside unit_of_work(): one commit at the end,
# rollback on any failure. Reads of the joined task shape live in views.py.

from __future__ import annotations

import logging
import re
from contextlib import contextmanager
from datetime import date
from typing import Iterator, List, Optional

from sqlalchemy import func, not_
from sqlalchemy.dialects.postgresql import insert as pg_insert
from sqlalchemy.dialects.sqlite import insert as sqlite_insert
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm import Session

from .config import settings
from .db_models import CategoryDB, HabitHistoryDB, TaskDB, TimeBlockDB, now_utc, today_utc
from .errors import CategoryInUseError, ConflictError, NotFoundError, StoreError, ValidationError
from .models import (
    CategoryCreate,
    CategoryOut,
    CategoryUpdate,
    HabitHistoryRow,
    TaskCreate,
    TaskRow,
    TaskUpdate,
    TaskView,
    TimeBlockIn,
)
from .views import get_task_view

logger = logging.getLogger(__name__)

_DATE_RE = re.compile(r"\d{4}-\d{2}-\d{2}")


# --- Session dependency ----------------------------------------------------


def get_db():
    """Yield a SQLAlchemy session (used as a FastAPI dependency)."""
    from .db import SessionLocal

    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()


@contextmanager
def unit_of_work(db: Session, action: str) -> Iterator[Session]:
    """Commit everything done in the block at once, or nothing at all."""
    try:
        yield db
        db.commit()
    except SQLAlchemyError as exc:
        db.rollback()
        logger.exception("store failure action=%s", action)
        raise StoreError(f"Failed to {action}", message=str(exc)) from exc
    except Exception:
        db.rollback()
        raise


# --- Helpers ---------------------------------------------------------------


def parse_habit_date(value: Optional[str]) -> date:
    """Validate a YYYY-MM-DD string (and that it is a real calendar day)."""
    if not value or not _DATE_RE.fullmatch(value):
        raise ValidationError("Valid date (YYYY-MM-DD) is required")
    try:
        return date.fromisoformat(value)
    except ValueError:
        raise ValidationError("Valid date (YYYY-MM-DD) is required") from None


def _resolve_category_id(db: Session, name: Optional[str]) -> Optional[int]:
    """Category id for `name`; unknown or empty names resolve to None."""
    if not name:
        return None
    return db.query(CategoryDB.id).filter(CategoryDB.name == name).scalar()


def _add_time_block(db: Session, task_id: int, block: Optional[TimeBlockIn]) -> None:
    if block is None or not block.is_complete():
        return
    db.add(
        TimeBlockDB(
            task_id=task_id,
            start_time=block.start,
            end_time=block.end,
            date=block.date,
        )
    )


def _get_task_row(db: Session, task_id: int) -> Optional[TaskDB]:
    return db.query(TaskDB).filter(TaskDB.id == task_id).one_or_none()


def _get_habit_row(db: Session, task_id: int) -> TaskDB:
    row = db.query(TaskDB).filter(TaskDB.id == task_id, TaskDB.is_habit.is_(True)).one_or_none()
    if row is None:
        raise NotFoundError("Habit not found")
    return row


# --- Tasks -----------------------------------------------------------------


def create_task(db: Session, data: TaskCreate) -> TaskView:
    """Create a task with its optional time block and, for habits, today's entry."""
    if not data.title:
        raise ValidationError("Title is required")

    with unit_of_work(db, "create task"):
        now = now_utc()
        row = TaskDB(
            title=data.title,
            description=data.description,
            category_id=_resolve_category_id(db, data.category),
            is_habit=bool(data.is_habit),
            completed=False,
            created_at=now,
            updated_at=now,
        )
        db.add(row)
        db.flush()
        task_id = row.id

        _add_time_block(db, task_id, data.time_block)
        if data.is_habit:
            db.add(
                HabitHistoryDB(
                    task_id=task_id,
                    date=today_utc(),
                    completed=False,
                    created_at=now,
                    updated_at=now,
                )
            )

    logger.info("task created id=%s is_habit=%s", task_id, bool(data.is_habit))
    return get_task_view(db, task_id)


def update_task(db: Session, task_id: int, data: TaskUpdate) -> TaskView:
    """Partial update; empty values keep what is stored. A time block replaces all."""
    with unit_of_work(db, "update task"):
        row = _get_task_row(db, task_id)
        if row is None:
            raise NotFoundError("Task not found")

        if data.title:
            row.title = data.title
        if data.description:
            row.description = data.description
        category_id = _resolve_category_id(db, data.category)
        if category_id is not None:
            row.category_id = category_id
        if data.is_habit is not None:
            row.is_habit = data.is_habit
        row.updated_at = now_utc()

        if data.time_block is not None:
            db.query(TimeBlockDB).filter(TimeBlockDB.task_id == task_id).delete(
                synchronize_session=False
            )
            _add_time_block(db, task_id, data.time_block)

    logger.info("task updated id=%s", task_id)
    return get_task_view(db, task_id)


def toggle_task(db: Session, task_id: int) -> TaskView:
    """Flip `completed` in a single UPDATE statement."""
    with unit_of_work(db, "toggle task"):
        updated = (
            db.query(TaskDB)
            .filter(TaskDB.id == task_id)
            .update(
                {TaskDB.completed: not_(TaskDB.completed), TaskDB.updated_at: now_utc()},
                synchronize_session=False,
            )
        )
        if not updated:
            raise NotFoundError("Task not found")
    return get_task_view(db, task_id)


def delete_task(db: Session, task_id: int) -> TaskRow:
    """Delete a task; its time blocks and habit entries go with it (FK cascade)."""
    with unit_of_work(db, "delete task"):
        row = _get_task_row(db, task_id)
        if row is None:
            raise NotFoundError("Task not found")
        snapshot = TaskRow.model_validate(row)
        db.delete(row)
    logger.info("task deleted id=%s", task_id)
    return snapshot


# --- Habit entries ---------------------------------------------------------


def _upsert_habit_entry(db: Session, task_id: int, day: date, completed: bool) -> None:
    now = now_utc()
    dialect = db.get_bind().dialect.name
    if dialect in ("postgresql", "sqlite"):
        insert = pg_insert if dialect == "postgresql" else sqlite_insert
        stmt = insert(HabitHistoryDB).values(
            task_id=task_id, date=day, completed=completed, created_at=now, updated_at=now
        )
        stmt = stmt.on_conflict_do_update(
            index_elements=["task_id", "date"],
            set_={"completed": stmt.excluded.completed, "updated_at": stmt.excluded.updated_at},
        )
        db.execute(stmt)
        return

    # Other backends: fall back to read-then-write inside the same transaction
    row = (
        db.query(HabitHistoryDB)
        .filter(HabitHistoryDB.task_id == task_id, HabitHistoryDB.date == day)
        .one_or_none()
    )
    if row is None:
        db.add(
            HabitHistoryDB(
                task_id=task_id, date=day, completed=completed, created_at=now, updated_at=now
            )
        )
    else:
        row.completed = completed
        row.updated_at = now


def set_habit_entry(db: Session, task_id: int, raw_date: Optional[str], completed: bool = True) -> HabitHistoryRow:
    """Record (or overwrite) a habit's completion for one day."""
    day = parse_habit_date(raw_date)
    with unit_of_work(db, "update habit completion"):
        _get_habit_row(db, task_id)
        _upsert_habit_entry(db, task_id, day, completed)
        db.flush()
        row = (
            db.query(HabitHistoryDB)
            .populate_existing()
            .filter(HabitHistoryDB.task_id == task_id, HabitHistoryDB.date == day)
            .one()
        )
        result = HabitHistoryRow.model_validate(row)
    logger.info("habit entry set task_id=%s date=%s completed=%s", task_id, day, completed)
    return result


def delete_habit_entry(db: Session, task_id: int, raw_date: Optional[str]) -> HabitHistoryRow:
    with unit_of_work(db, "delete habit history"):
        _get_habit_row(db, task_id)
        day = parse_habit_date(raw_date)
        row = (
            db.query(HabitHistoryDB)
            .filter(HabitHistoryDB.task_id == task_id, HabitHistoryDB.date == day)
            .one_or_none()
        )
        if row is None:
            raise NotFoundError("Habit history entry not found")
        snapshot = HabitHistoryRow.model_validate(row)
        db.delete(row)
    return snapshot


def ensure_habit(db: Session, task_id: int) -> None:
    """Raise NotFoundError unless `task_id` is a habit."""
    _get_habit_row(db, task_id)


# --- Categories ------------------------------------------------------------


def list_categories(db: Session) -> List[CategoryDB]:
    return db.query(CategoryDB).order_by(CategoryDB.name.asc()).all()


def get_category(db: Session, category_id: int) -> Optional[CategoryDB]:
    return db.query(CategoryDB).filter(CategoryDB.id == category_id).one_or_none()


def _name_taken(db: Session, name: str, *, exclude_id: Optional[int] = None) -> bool:
    query = db.query(CategoryDB.id).filter(CategoryDB.name == name)
    if exclude_id is not None:
        query = query.filter(CategoryDB.id != exclude_id)
    return query.first() is not None


def create_category(db: Session, data: CategoryCreate) -> CategoryDB:
    if not data.name:
        raise ValidationError("Category name is required")

    with unit_of_work(db, "create category"):
        if _name_taken(db, data.name):
            raise ConflictError("Category with this name already exists")
        now = now_utc()
        row = CategoryDB(
            name=data.name,
            color=data.color or settings.DEFAULT_CATEGORY_COLOR,
            text_color=data.text_color or settings.DEFAULT_CATEGORY_TEXT_COLOR,
            created_at=now,
            updated_at=now,
        )
        db.add(row)
        try:
            db.flush()
        except IntegrityError as exc:
            # lost a race with a concurrent insert of the same name
            raise ConflictError("Category with this name already exists") from exc
    db.refresh(row)
    return row


def update_category(db: Session, category_id: int, data: CategoryUpdate) -> CategoryDB:
    with unit_of_work(db, "update category"):
        row = get_category(db, category_id)
        if row is None:
            raise NotFoundError("Category not found")
        if data.name and data.name != row.name and _name_taken(db, data.name, exclude_id=category_id):
            raise ConflictError("Category with this name already exists")

        if data.name:
            row.name = data.name
        if data.color:
            row.color = data.color
        if data.text_color:
            row.text_color = data.text_color
        row.updated_at = now_utc()
        try:
            db.flush()
        except IntegrityError as exc:
            raise ConflictError("Category with this name already exists") from exc
    db.refresh(row)
    return row


def count_category_tasks(db: Session, category_id: int) -> int:
    query = db.query(func.count(TaskDB.id)).filter(TaskDB.category_id == category_id)
    return int(query.scalar() or 0)


def delete_category(db: Session, category_id: int) -> CategoryOut:
    """Delete an unused category; refuses while any task still references it."""
    with unit_of_work(db, "delete category"):
        in_use = count_category_tasks(db, category_id)
        if in_use > 0:
            raise CategoryInUseError(in_use)
        row = get_category(db, category_id)
        if row is None:
            raise NotFoundError("Category not found")
        snapshot = CategoryOut.model_validate(row)
        db.delete(row)
    logger.info("category deleted id=%s", category_id)
    return snapshot

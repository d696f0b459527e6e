"""Read side: denormalized task/habit views assembled from the normalized tables.

A task is joined (outer joins only) with its category, time blocks and habit
history in one query; the fan-out is folded back into one view per task here.
Sub-lists are never None, so a task without blocks or history still shows up
with empty lists.
"""

from __future__ import annotations

from datetime import date
from typing import Dict, List, Optional

from sqlalchemy import and_, case, func, or_
from sqlalchemy.orm import Session

from .db_models import CategoryDB, HabitHistoryDB, TaskDB, TimeBlockDB
from .models import (
    HabitEntryOut,
    HabitOverviewRow,
    HabitView,
    TaskFilter,
    TaskView,
    TimeBlockOut,
)
from .stats import entry_completion_rate

_TASK_FIELDS = (
    "id",
    "title",
    "description",
    "completed",
    "is_habit",
    "created_at",
    "updated_at",
    "category_id",
    "category",
    "category_color",
    "category_text_color",
)


# --- Query building --------------------------------------------------------


def _view_query(db: Session, *, with_time_blocks: bool = True):
    """Task LEFT JOIN category LEFT JOIN time blocks LEFT JOIN habit history."""
    columns = [
        TaskDB.id,
        TaskDB.title,
        TaskDB.description,
        TaskDB.completed,
        TaskDB.is_habit,
        TaskDB.created_at,
        TaskDB.updated_at,
        CategoryDB.id.label("category_id"),
        CategoryDB.name.label("category"),
        CategoryDB.color.label("category_color"),
        CategoryDB.text_color.label("category_text_color"),
        HabitHistoryDB.id.label("hh_id"),
        HabitHistoryDB.date.label("hh_date"),
        HabitHistoryDB.completed.label("hh_completed"),
    ]
    if with_time_blocks:
        columns += [
            TimeBlockDB.id.label("tb_id"),
            TimeBlockDB.start_time.label("tb_start_time"),
            TimeBlockDB.end_time.label("tb_end_time"),
            TimeBlockDB.date.label("tb_date"),
        ]

    query = db.query(*columns).select_from(TaskDB)
    query = query.outerjoin(CategoryDB, TaskDB.category_id == CategoryDB.id)
    if with_time_blocks:
        query = query.outerjoin(TimeBlockDB, TimeBlockDB.task_id == TaskDB.id)
    query = query.outerjoin(HabitHistoryDB, HabitHistoryDB.task_id == TaskDB.id)
    return query


def _apply_ordering(query, *, with_time_blocks: bool = True):
    # newest task first; stable secondary ordering on id
    order = [TaskDB.created_at.desc(), TaskDB.id.desc()]
    if with_time_blocks:
        order.append(TimeBlockDB.id.asc())
    order.append(HabitHistoryDB.date.asc())
    return query.order_by(*order)


def _apply_task_filter(query, task_filter: TaskFilter):
    """Translate the closed set of list filters into WHERE clauses."""
    if task_filter is TaskFilter.ALL:
        return query
    if task_filter is TaskFilter.ACTIVE:
        return query.filter(TaskDB.completed.is_(False))
    if task_filter is TaskFilter.COMPLETED:
        return query.filter(TaskDB.completed.is_(True))
    if task_filter is TaskFilter.HABITS:
        return query.filter(TaskDB.is_habit.is_(True))
    if task_filter is TaskFilter.TIME_BLOCKED:
        return query.filter(TaskDB.time_blocks.any())
    raise ValueError(f"unhandled task filter: {task_filter!r}")


def _apply_common_filters(
    query,
    *,
    task_filter: TaskFilter = TaskFilter.ALL,
    category: Optional[str] = None,
    search: Optional[str] = None,
):
    """Apply the list filters; they combine with AND."""
    query = _apply_task_filter(query, task_filter)
    if category and category != "all":
        query = query.filter(CategoryDB.name == category)
    if search:
        like = f"%{search}%"
        query = query.filter(or_(TaskDB.title.ilike(like), TaskDB.description.ilike(like)))
    return query


# --- Folding ---------------------------------------------------------------


def _fold(rows, *, with_time_blocks: bool = True) -> List[HabitView]:
    """Collapse joined rows into one view per task, keeping task order."""
    grouped: Dict[int, dict] = {}
    for row in rows:
        item = grouped.get(row.id)
        if item is None:
            item = {name: getattr(row, name) for name in _TASK_FIELDS}
            item["habit_history"] = {}
            if with_time_blocks:
                item["time_blocks"] = {}
            grouped[row.id] = item

        # the double outer join repeats each sub-row; dedupe by id
        if with_time_blocks and row.tb_id is not None and row.tb_id not in item["time_blocks"]:
            item["time_blocks"][row.tb_id] = TimeBlockOut(
                id=row.tb_id,
                start_time=row.tb_start_time,
                end_time=row.tb_end_time,
                date=row.tb_date,
            )
        if row.hh_id is not None and row.hh_id not in item["habit_history"]:
            item["habit_history"][row.hh_id] = HabitEntryOut(
                id=row.hh_id, date=row.hh_date, completed=row.hh_completed
            )

    views: List[HabitView] = []
    for item in grouped.values():
        item["habit_history"] = sorted(item["habit_history"].values(), key=lambda h: h.date)
        if with_time_blocks:
            item["time_blocks"] = sorted(item["time_blocks"].values(), key=lambda b: b.id)
            views.append(TaskView(**item))
        else:
            views.append(HabitView(**item))
    return views


# --- Task views ------------------------------------------------------------


def list_task_views(
    db: Session,
    *,
    task_filter: TaskFilter = TaskFilter.ALL,
    category: Optional[str] = None,
    search: Optional[str] = None,
) -> List[TaskView]:
    """Return every task matching the filters, newest first."""
    query = _view_query(db)
    query = _apply_common_filters(query, task_filter=task_filter, category=category, search=search)
    return _fold(_apply_ordering(query).all())


def get_task_view(db: Session, task_id: int) -> Optional[TaskView]:
    query = _view_query(db).filter(TaskDB.id == task_id)
    views = _fold(_apply_ordering(query).all())
    return views[0] if views else None


def list_category_task_views(db: Session, category_id: int) -> List[TaskView]:
    query = _view_query(db).filter(TaskDB.category_id == category_id)
    return _fold(_apply_ordering(query).all())


# --- Habit views -----------------------------------------------------------


def list_habit_views(db: Session) -> List[HabitView]:
    query = _view_query(db, with_time_blocks=False).filter(TaskDB.is_habit.is_(True))
    rows = _apply_ordering(query, with_time_blocks=False).all()
    return _fold(rows, with_time_blocks=False)


def get_habit_view(db: Session, task_id: int) -> Optional[HabitView]:
    query = _view_query(db, with_time_blocks=False).filter(
        TaskDB.id == task_id, TaskDB.is_habit.is_(True)
    )
    views = _fold(_apply_ordering(query, with_time_blocks=False).all(), with_time_blocks=False)
    return views[0] if views else None


def habit_history_in_window(
    db: Session, task_id: int, start: date, end: date
) -> List[HabitHistoryDB]:
    """History rows of one habit inside [start, end], date ascending."""
    return (
        db.query(HabitHistoryDB)
        .filter(
            HabitHistoryDB.task_id == task_id,
            HabitHistoryDB.date >= start,
            HabitHistoryDB.date <= end,
        )
        .order_by(HabitHistoryDB.date.asc())
        .all()
    )


def habit_overview_rows(db: Session, start: date, end: date) -> List[HabitOverviewRow]:
    """Per-habit entry counts inside [start, end], best completion rate first.

    The window is part of the join condition so habits without entries in it
    are still listed (with zero counts and no rate).
    """
    total = func.count(HabitHistoryDB.id)
    done = func.count(case((HabitHistoryDB.completed.is_(True), 1)))
    rows = (
        db.query(
            TaskDB.id,
            TaskDB.title,
            TaskDB.category_id,
            CategoryDB.name.label("category_name"),
            total.label("total_entries"),
            done.label("completed_entries"),
        )
        .select_from(TaskDB)
        .outerjoin(CategoryDB, TaskDB.category_id == CategoryDB.id)
        .outerjoin(
            HabitHistoryDB,
            and_(
                HabitHistoryDB.task_id == TaskDB.id,
                HabitHistoryDB.date >= start,
                HabitHistoryDB.date <= end,
            ),
        )
        .filter(TaskDB.is_habit.is_(True))
        .group_by(TaskDB.id, TaskDB.title, TaskDB.category_id, CategoryDB.name)
        .all()
    )

    items = [
        HabitOverviewRow(
            id=r.id,
            title=r.title,
            category_id=r.category_id,
            category_name=r.category_name,
            total_entries=int(r.total_entries or 0),
            completed_entries=int(r.completed_entries or 0),
            completion_rate=entry_completion_rate(
                int(r.completed_entries or 0), int(r.total_entries or 0)
            ),
        )
        for r in rows
    ]
    # completion_rate DESC NULLS LAST
    items.sort(key=lambda i: (i.completion_rate is None, -(i.completion_rate or 0), i.id))
    return items

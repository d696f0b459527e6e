"""Conversion between backend rows (snake_case JSON) and the UI task shape."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import UTC, date, datetime
from typing import Any, Dict, List, Optional

DEFAULT_CATEGORY = "other"


@dataclass
class UiTimeBlock:
    start: str
    end: str


@dataclass
class UiHabitEntry:
    date: str
    completed: bool


@dataclass
class UiTask:
    title: str
    id: Optional[int] = None
    description: str = ""
    completed: bool = False
    is_habit: bool = False
    category: str = DEFAULT_CATEGORY
    created_at: Optional[str] = None
    time_block: Optional[UiTimeBlock] = None
    habit_history: List[UiHabitEntry] = field(default_factory=list)


@dataclass
class UiCategory:
    id: int
    name: str
    color: str
    text_color: str


def _iso(value: Optional[str]) -> Optional[str]:
    if not value:
        return None
    return datetime.fromisoformat(value).isoformat()


def task_from_backend(row: Dict[str, Any]) -> UiTask:
    """Backend task view -> UI task. Only the first time block is surfaced."""
    blocks = row.get("time_blocks") or []
    time_block = None
    if blocks:
        time_block = UiTimeBlock(start=blocks[0]["start_time"], end=blocks[0]["end_time"])
    return UiTask(
        id=row["id"],
        title=row["title"],
        description=row.get("description") or "",
        completed=bool(row.get("completed")),
        is_habit=bool(row.get("is_habit")),
        category=row.get("category") or DEFAULT_CATEGORY,
        created_at=_iso(row.get("created_at")),
        time_block=time_block,
        habit_history=[habit_entry_from_backend(h) for h in row.get("habit_history") or []],
    )


def task_to_backend(task: UiTask, *, today: Optional[date] = None) -> Dict[str, Any]:
    """UI task -> request body for POST/PUT /tasks.

    The UI time block has no date; it is scheduled for today.
    """
    payload: Dict[str, Any] = {
        "title": task.title,
        "description": task.description,
        "completed": task.completed,
        "isHabit": task.is_habit,
        "category": task.category or DEFAULT_CATEGORY,
    }
    if task.time_block is not None:
        payload["timeBlock"] = {
            "start": task.time_block.start,
            "end": task.time_block.end,
            "date": (today or datetime.now(UTC).date()).isoformat(),
        }
    return payload


def habit_entry_from_backend(row: Dict[str, Any]) -> UiHabitEntry:
    return UiHabitEntry(date=str(row["date"]), completed=bool(row["completed"]))


def category_from_backend(row: Dict[str, Any]) -> UiCategory:
    return UiCategory(
        id=row["id"],
        name=row["name"],
        color=row["color"],
        text_color=row["text_color"],
    )


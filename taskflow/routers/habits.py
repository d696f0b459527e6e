from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from ..api.deps import parse_overview_days, parse_stats_days
from ..db_models import today_utc
from ..errors import NotFoundError
from ..models import HabitEntryIn
from ..stats import average_completion_rate, compute_habit_stats, stats_window
from ..store_db import (
    get_db,
    ensure_habit,
    set_habit_entry as db_set_habit_entry,
    delete_habit_entry as db_delete_habit_entry,
)
from ..views import get_habit_view, habit_history_in_window, habit_overview_rows, list_habit_views

router = APIRouter(prefix="/habits", tags=["habits"])


@router.get("")
async def list_habits(db: Session = Depends(get_db)):
    items = list_habit_views(db)
    return {"success": True, "data": items, "count": len(items)}


# Declared before /{habit_id} routes so "stats" is never taken for an id
@router.get("/stats/overview")
async def habits_overview(days: int = Depends(parse_overview_days), db: Session = Depends(get_db)):
    start, end = stats_window(days, today_utc())
    rows = habit_overview_rows(db, start, end)
    average = average_completion_rate([r.completion_rate for r in rows])
    return {
        "success": True,
        "data": {
            "period": f"{days} days",
            "totalHabits": len(rows),
            "activeHabits": sum(1 for r in rows if r.total_entries > 0),
            "averageCompletionRate": f"{average}%",
            "habits": rows,
        },
    }


@router.get("/{habit_id}")
async def get_habit(habit_id: int, db: Session = Depends(get_db)):
    habit = get_habit_view(db, habit_id)
    if habit is None:
        raise NotFoundError("Habit not found")
    return {"success": True, "data": habit}


@router.post("/{habit_id}/complete")
async def complete_habit(habit_id: int, item: HabitEntryIn, db: Session = Depends(get_db)):
    entry = db_set_habit_entry(db, habit_id, item.date, item.completed)
    state = "completed" if item.completed else "uncompleted"
    return {"success": True, "data": entry, "message": f"Habit {state} for {item.date}"}


@router.get("/{habit_id}/stats")
async def habit_stats(habit_id: int, days: int = Depends(parse_stats_days), db: Session = Depends(get_db)):
    ensure_habit(db, habit_id)
    start, end = stats_window(days, today_utc())
    stats = compute_habit_stats(habit_history_in_window(db, habit_id, start, end))
    return {
        "success": True,
        "data": {
            "habitId": habit_id,
            "period": f"{days} days",
            "totalDays": stats.total_days,
            "completedDays": stats.completed_days,
            "completionRate": f"{stats.completion_rate}%",
            "currentStreak": stats.current_streak,
            "longestStreak": stats.longest_streak,
            "history": [
                {"date": h.date, "completed": h.completed, "completion_value": 1 if h.completed else 0}
                for h in stats.history
            ],
        },
    }


@router.delete("/{habit_id}/history/{entry_date}")
async def delete_habit_history(habit_id: int, entry_date: str, db: Session = Depends(get_db)):
    deleted = db_delete_habit_entry(db, habit_id, entry_date)
    return {
        "success": True,
        "message": f"Habit history entry for {entry_date} deleted successfully",
        "data": deleted,
    }

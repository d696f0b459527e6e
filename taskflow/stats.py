"""Habit statistics: completion rate and streaks over a window of history rows.

Everything here is a pure function over a snapshot of rows already sorted by
date ascending. The longest streak counts existing rows only, so a missing
calendar day is not synthesized as an incomplete one there. The current streak
ends at the first incomplete row or the first skipped day.
"""

from __future__ import annotations

import math
from dataclasses import dataclass, field
from datetime import date, timedelta
from decimal import ROUND_HALF_UP, Decimal
from typing import Iterable, List, Optional, Protocol, Sequence, Tuple


class HistoryEntry(Protocol):
    date: date
    completed: bool


def round_half_up(value: float) -> int:
    """Round .5 away from zero for positive values (Math.round semantics)."""
    return int(math.floor(value + 0.5))


def stats_window(days: int, today: Optional[date] = None) -> Tuple[date, date]:
    """Return the inclusive window [today - days, today]."""
    end = today or date.today()
    return end - timedelta(days=days), end


def completion_rate(completed: int, total: int) -> int:
    """Percentage of completed entries; 0 when there are no entries."""
    if total <= 0:
        return 0
    return round_half_up(completed / total * 100)


def current_streak(entries: Sequence[HistoryEntry]) -> int:
    """Completed run ending at the most recent row; a false row or a skipped day ends it."""
    streak = 0
    later: Optional[HistoryEntry] = None
    for entry in reversed(entries):
        if not entry.completed:
            break
        if later is not None and entry.date != later.date - timedelta(days=1):
            break
        streak += 1
        later = entry
    return streak


def longest_streak(entries: Iterable[HistoryEntry]) -> int:
    longest = run = 0
    for entry in entries:
        if entry.completed:
            run += 1
            longest = max(longest, run)
        else:
            run = 0
    return longest


@dataclass
class HabitStats:
    total_days: int
    completed_days: int
    completion_rate: int
    current_streak: int
    longest_streak: int
    history: List[HistoryEntry] = field(default_factory=list)


def compute_habit_stats(entries: Sequence[HistoryEntry]) -> HabitStats:
    total = len(entries)
    done = sum(1 for e in entries if e.completed)
    return HabitStats(
        total_days=total,
        completed_days=done,
        completion_rate=completion_rate(done, total),
        current_streak=current_streak(entries),
        longest_streak=longest_streak(entries),
        history=list(entries),
    )


def entry_completion_rate(completed: int, total: int) -> Optional[float]:
    """Per-habit overview rate: one decimal, None when the habit has no entries."""
    if total <= 0:
        return None
    rate = Decimal(completed) / Decimal(total) * 100
    return float(rate.quantize(Decimal("0.1"), rounding=ROUND_HALF_UP))


def average_completion_rate(rates: Sequence[Optional[float]]) -> int:
    """Mean over every habit; habits without entries count as 0, not as absent."""
    if not rates:
        return 0
    return round_half_up(sum(r or 0 for r in rates) / len(rates))

from fastapi import Query

from ..config import settings
from ..errors import ValidationError
from ..models import TaskFilter

_FILTER_VALUES = ", ".join(f.value for f in TaskFilter)


def parse_filter(filter: str | None = Query(None)) -> TaskFilter:
    if filter is None or filter == "":
        return TaskFilter.ALL
    try:
        return TaskFilter(filter)
    except ValueError as err:
        raise ValidationError(
            "Invalid filter",
            message=f"filter must be one of: {_FILTER_VALUES}",
        ) from err


def _parse_days(raw: str | None, default: int) -> int:
    if raw is None or raw == "":
        return default
    try:
        days = int(raw)
    except (TypeError, ValueError) as err:
        raise ValidationError("Invalid days", message="days must be a positive integer") from err
    if days < 1:
        raise ValidationError("Invalid days", message="days must be a positive integer")
    return days


def parse_stats_days(days: str | None = Query(None)) -> int:
    return _parse_days(days, settings.HABIT_STATS_DAYS)


def parse_overview_days(days: str | None = Query(None)) -> int:
    return _parse_days(days, settings.HABIT_OVERVIEW_DAYS)

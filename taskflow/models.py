# PURPOSE: request/response schemas (Pydantic v2) and the task list filter.
# Request bodies accept the camelCase keys the web client sends (isHabit,
# timeBlock, textColor) as well as snake_case.

import datetime as dt
from enum import Enum

from pydantic import AliasChoices, BaseModel, ConfigDict, Field


class TaskFilter(str, Enum):
    ALL = "all"
    ACTIVE = "active"
    COMPLETED = "completed"
    HABITS = "habits"
    TIME_BLOCKED = "timeBlocked"


# --- Request bodies ---


class TimeBlockIn(BaseModel):
    start: str | None = None
    end: str | None = None
    date: dt.date | None = None
    model_config = ConfigDict(extra="ignore")

    def is_complete(self) -> bool:
        """A block is only stored when start, end and date are all given."""
        return bool(self.start and self.end and self.date)


class TaskCreate(BaseModel):
    # title is checked by the service so a missing title answers 400, not 422
    title: str | None = None
    description: str | None = None
    category: str | None = None
    is_habit: bool | None = Field(default=None, validation_alias=AliasChoices("isHabit", "is_habit"))
    time_block: TimeBlockIn | None = Field(
        default=None, validation_alias=AliasChoices("timeBlock", "time_block")
    )
    model_config = ConfigDict(
        extra="ignore",
        json_schema_extra={
            "examples": [
                {"title": "Read", "isHabit": True, "category": "learning"},
                {
                    "title": "Write report",
                    "category": "work",
                    "timeBlock": {"start": "09:00", "end": "10:00", "date": "2024-01-01"},
                },
            ]
        },
    )


class TaskUpdate(BaseModel):
    title: str | None = None
    description: str | None = None
    category: str | None = None
    is_habit: bool | None = Field(default=None, validation_alias=AliasChoices("isHabit", "is_habit"))
    time_block: TimeBlockIn | None = Field(
        default=None, validation_alias=AliasChoices("timeBlock", "time_block")
    )
    model_config = ConfigDict(
        extra="ignore",
        json_schema_extra={
            "examples": [
                {"title": "New title"},
                {"timeBlock": {"start": "09:00", "end": "10:00", "date": "2024-01-01"}},
            ]
        },
    )


class CategoryCreate(BaseModel):
    name: str | None = None
    color: str | None = None
    text_color: str | None = Field(
        default=None, validation_alias=AliasChoices("textColor", "text_color")
    )
    model_config = ConfigDict(
        extra="ignore",
        json_schema_extra={
            "examples": [{"name": "work", "color": "bg-indigo-500", "textColor": "text-indigo-500"}]
        },
    )


class CategoryUpdate(CategoryCreate):
    pass


class HabitEntryIn(BaseModel):
    # Raw string: the YYYY-MM-DD check lives in the service
    date: str | None = None
    completed: bool = True
    model_config = ConfigDict(extra="ignore")


# --- Read models ---


class TimeBlockOut(BaseModel):
    id: int
    start_time: str
    end_time: str
    date: dt.date

    model_config = ConfigDict(from_attributes=True)


class HabitEntryOut(BaseModel):
    id: int
    date: dt.date
    completed: bool

    model_config = ConfigDict(from_attributes=True)


class HabitHistoryRow(BaseModel):
    id: int
    task_id: int
    date: dt.date
    completed: bool
    created_at: dt.datetime | None
    updated_at: dt.datetime | None

    model_config = ConfigDict(from_attributes=True)


class TaskRow(BaseModel):
    """Plain task row (no joins), e.g. the payload of a delete."""

    id: int
    title: str
    description: str | None
    completed: bool
    category_id: int | None
    is_habit: bool
    created_at: dt.datetime | None
    updated_at: dt.datetime | None

    model_config = ConfigDict(from_attributes=True)


class HabitView(BaseModel):
    """Denormalized habit: task + flattened category + habit history."""

    id: int
    title: str
    description: str | None
    completed: bool
    is_habit: bool
    created_at: dt.datetime | None
    updated_at: dt.datetime | None
    category_id: int | None = None
    category: str | None = None
    category_color: str | None = None
    category_text_color: str | None = None
    habit_history: list[HabitEntryOut] = Field(default_factory=list)


class TaskView(HabitView):
    """Denormalized task: HabitView plus its time blocks."""

    time_blocks: list[TimeBlockOut] = Field(default_factory=list)


class CategoryOut(BaseModel):
    id: int
    name: str
    color: str
    text_color: str
    created_at: dt.datetime | None
    updated_at: dt.datetime | None

    model_config = ConfigDict(from_attributes=True)


class HabitOverviewRow(BaseModel):
    id: int
    title: str
    category_id: int | None
    category_name: str | None
    total_entries: int
    completed_entries: int
    completion_rate: float | None

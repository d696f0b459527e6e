# Client-side state synchronization for the TaskFlow API

from .api import ApiError, TaskApi
from .sync import EntitySync, SyncStatus, TaskSynchronizer
from .transformers import (
    UiCategory,
    UiHabitEntry,
    UiTask,
    UiTimeBlock,
    category_from_backend,
    task_from_backend,
    task_to_backend,
)

__all__ = [
    "ApiError",
    "TaskApi",
    "EntitySync",
    "SyncStatus",
    "TaskSynchronizer",
    "UiCategory",
    "UiHabitEntry",
    "UiTask",
    "UiTimeBlock",
    "category_from_backend",
    "task_from_backend",
    "task_to_backend",
]

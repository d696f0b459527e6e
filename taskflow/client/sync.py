"""Client-side mirror of the task collection.

Every mutation is request-then-reconcile: local state only changes from the
entity the server sends back, never from a local guess. Each command gets a
request id; when two commands for the same task are in flight, only the
response for the most recent one is applied and older ones are dropped.
Failures are kept in `error` until the next successful call; no method raises.
"""

from __future__ import annotations

import itertools
import logging
from dataclasses import dataclass
from enum import Enum
from typing import Any, Awaitable, Callable, Dict, List, Optional

from ..models import TaskFilter
from .api import ApiError, TaskApi
from .transformers import (
    UiCategory,
    UiTask,
    category_from_backend,
    habit_entry_from_backend,
    task_from_backend,
    task_to_backend,
)

logger = logging.getLogger(__name__)


class SyncStatus(str, Enum):
    IDLE = "idle"
    PENDING = "pending"
    RECONCILED = "reconciled"
    FAILED = "failed"


@dataclass(frozen=True)
class EntitySync:
    status: SyncStatus = SyncStatus.IDLE
    request_id: Optional[int] = None
    error: Optional[str] = None


_IDLE = EntitySync()


class TaskSynchronizer:
    def __init__(self, api: TaskApi):
        self.api = api
        self.tasks: List[UiTask] = []
        self.categories: List[UiCategory] = []
        self.filter: TaskFilter = TaskFilter.ALL
        self.loading = False
        self.error: Optional[str] = None
        self._sync: Dict[int, EntitySync] = {}
        self._ids = itertools.count(1)
        self._refresh_id: Optional[int] = None

    # --- State inspection ---

    def status_of(self, task_id: int) -> EntitySync:
        return self._sync.get(task_id, _IDLE)

    def find(self, task_id: int) -> Optional[UiTask]:
        return next((t for t in self.tasks if t.id == task_id), None)

    def visible_tasks(self) -> List[UiTask]:
        """Tasks passing the current filter, in server order."""
        f = self.filter
        if f is TaskFilter.ALL:
            return list(self.tasks)
        if f is TaskFilter.ACTIVE:
            return [t for t in self.tasks if not t.completed]
        if f is TaskFilter.COMPLETED:
            return [t for t in self.tasks if t.completed]
        if f is TaskFilter.HABITS:
            return [t for t in self.tasks if t.is_habit]
        if f is TaskFilter.TIME_BLOCKED:
            return [t for t in self.tasks if t.time_block is not None]
        raise ValueError(f"unhandled task filter: {f!r}")

    # --- Local-only transitions ---

    def set_filter(self, task_filter: TaskFilter | str) -> None:
        self.filter = TaskFilter(task_filter)

    # --- Remote commands ---

    async def refresh(self) -> bool:
        """Replace the whole collection with the server's; keep it on failure."""
        request_id = next(self._ids)
        self._refresh_id = request_id
        self.loading = True
        try:
            body = await self.api.list_tasks()
        except ApiError as exc:
            if request_id == self._refresh_id:
                self.loading = False
                self.error = exc.message
            return False

        if request_id != self._refresh_id:
            logger.debug("dropping stale refresh request_id=%s", request_id)
            return False
        self.tasks = [task_from_backend(row) for row in body.get("data", [])]
        self.loading = False
        self.error = None
        return True

    async def load_categories(self) -> bool:
        try:
            body = await self.api.list_categories()
        except ApiError as exc:
            self.error = exc.message
            return False
        self.categories = [category_from_backend(row) for row in body.get("data", [])]
        self.error = None
        return True

    async def reload_task(self, task_id: int) -> Optional[UiTask]:
        """Re-fetch one task and replace the local copy."""
        return await self._run(task_id, lambda: self.api.get_task(task_id), self._replace_from)

    async def add_category(
        self, name: str, color: Optional[str] = None, text_color: Optional[str] = None
    ) -> Optional[UiCategory]:
        payload = {"name": name, "color": color, "textColor": text_color}
        try:
            body = await self.api.create_category({k: v for k, v in payload.items() if v})
        except ApiError as exc:
            self.error = exc.message
            return None
        category = category_from_backend(body["data"])
        self.categories = sorted([*self.categories, category], key=lambda c: c.name)
        self.error = None
        return category

    async def update_category(self, category: UiCategory) -> Optional[UiCategory]:
        payload = {"name": category.name, "color": category.color, "textColor": category.text_color}
        try:
            body = await self.api.update_category(category.id, payload)
        except ApiError as exc:
            self.error = exc.message
            return None
        fresh = category_from_backend(body["data"])
        others = [c for c in self.categories if c.id != fresh.id]
        self.categories = sorted([*others, fresh], key=lambda c: c.name)
        self.error = None
        return fresh

    async def delete_category(self, category_id: int) -> bool:
        """Remove a category; refused by the server while tasks still use it."""
        try:
            await self.api.delete_category(category_id)
        except ApiError as exc:
            self.error = exc.message
            return False
        self.categories = [c for c in self.categories if c.id != category_id]
        self.error = None
        return True

    async def add_task(self, draft: UiTask) -> Optional[UiTask]:
        try:
            body = await self.api.create_task(task_to_backend(draft))
        except ApiError as exc:
            self.error = exc.message
            return None
        task = task_from_backend(body["data"])
        self.tasks.insert(0, task)
        self._sync[task.id] = EntitySync(SyncStatus.RECONCILED, next(self._ids))
        self.error = None
        return task

    async def update_task(self, task: UiTask) -> Optional[UiTask]:
        return await self._run(
            task.id,
            lambda: self.api.update_task(task.id, task_to_backend(task)),
            self._replace_from,
        )

    async def toggle_task(self, task_id: int) -> Optional[UiTask]:
        return await self._run(task_id, lambda: self.api.toggle_task(task_id), self._replace_from)

    async def delete_task(self, task_id: int) -> bool:
        def _remove(body: Dict[str, Any]) -> bool:
            self.tasks = [t for t in self.tasks if t.id != task_id]
            return True

        removed = await self._run(task_id, lambda: self.api.delete_task(task_id), _remove)
        if removed:
            self._sync.pop(task_id, None)
        return bool(removed)

    async def set_habit_entry(self, task_id: int, date: str, completed: bool) -> Optional[UiTask]:
        def _apply(body: Dict[str, Any]) -> Optional[UiTask]:
            task = self.find(task_id)
            if task is None:
                return None
            entry = habit_entry_from_backend(body["data"])
            history = [h for h in task.habit_history if h.date != entry.date]
            history.append(entry)
            history.sort(key=lambda h: h.date)
            task.habit_history = history
            return task

        return await self._run(
            task_id, lambda: self.api.complete_habit(task_id, date, completed), _apply
        )

    # --- Internals ---

    def _replace_from(self, body: Dict[str, Any]) -> UiTask:
        fresh = task_from_backend(body["data"])
        self.tasks = [fresh if t.id == fresh.id else t for t in self.tasks]
        if self.find(fresh.id) is None:
            self.tasks.insert(0, fresh)
        return fresh

    async def _run(
        self,
        task_id: int,
        call: Callable[[], Awaitable[Dict[str, Any]]],
        apply: Callable[[Dict[str, Any]], Any],
    ) -> Any:
        """Issue `call` for `task_id`; apply its result unless a newer call superseded it."""
        request_id = next(self._ids)
        self._sync[task_id] = EntitySync(SyncStatus.PENDING, request_id)
        try:
            body = await call()
        except ApiError as exc:
            if self.status_of(task_id).request_id != request_id:
                logger.debug("dropping stale failure task_id=%s request_id=%s", task_id, request_id)
                return None
            self._sync[task_id] = EntitySync(SyncStatus.FAILED, request_id, exc.message)
            self.error = exc.message
            return None

        if self.status_of(task_id).request_id != request_id:
            logger.info("dropping stale response task_id=%s request_id=%s", task_id, request_id)
            return None
        result = apply(body)
        self._sync[task_id] = EntitySync(SyncStatus.RECONCILED, request_id)
        self.error = None
        return result

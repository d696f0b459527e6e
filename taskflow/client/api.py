# PURPOSE: thin async wrapper over the /api JSON endpoints.
# Every call returns the decoded envelope or raises ApiError.

import logging
from typing import Any, Dict, Optional

import httpx

from ..config import settings

logger = logging.getLogger(__name__)


class ApiError(Exception):
    """A request failed: transport error, HTTP error or {"success": false}."""

    def __init__(self, message: str, status_code: Optional[int] = None):
        super().__init__(message)
        self.message = message
        self.status_code = status_code


class TaskApi:
    def __init__(self, client: httpx.AsyncClient):
        self._client = client

    @classmethod
    def from_settings(cls) -> "TaskApi":
        client = httpx.AsyncClient(
            base_url=settings.API_BASE_URL,
            timeout=settings.API_TIMEOUT_SECONDS,
        )
        return cls(client)

    async def aclose(self) -> None:
        await self._client.aclose()

    async def _request(self, method: str, path: str, **kwargs: Any) -> Dict[str, Any]:
        try:
            response = await self._client.request(method, path, **kwargs)
        except httpx.HTTPError as exc:
            logger.error("api request failed method=%s path=%s error=%s", method, path, exc)
            raise ApiError(str(exc)) from exc

        try:
            body = response.json()
        except ValueError:
            body = {}
        if response.is_error or body.get("success") is False:
            message = (
                body.get("message")
                or body.get("error")
                or f"HTTP error! status: {response.status_code}"
            )
            logger.warning(
                "api request rejected method=%s path=%s status=%s message=%s",
                method, path, response.status_code, message,
            )
            raise ApiError(message, status_code=response.status_code)
        return body

    # --- Tasks ---

    async def list_tasks(
        self,
        *,
        filter: Optional[str] = None,
        category: Optional[str] = None,
        search: Optional[str] = None,
    ) -> Dict[str, Any]:
        params = {k: v for k, v in (("filter", filter), ("category", category), ("search", search)) if v}
        return await self._request("GET", "/tasks", params=params)

    async def get_task(self, task_id: int) -> Dict[str, Any]:
        return await self._request("GET", f"/tasks/{task_id}")

    async def create_task(self, payload: Dict[str, Any]) -> Dict[str, Any]:
        return await self._request("POST", "/tasks", json=payload)

    async def update_task(self, task_id: int, payload: Dict[str, Any]) -> Dict[str, Any]:
        return await self._request("PUT", f"/tasks/{task_id}", json=payload)

    async def toggle_task(self, task_id: int) -> Dict[str, Any]:
        return await self._request("PATCH", f"/tasks/{task_id}/toggle")

    async def delete_task(self, task_id: int) -> Dict[str, Any]:
        return await self._request("DELETE", f"/tasks/{task_id}")

    # --- Categories ---

    async def list_categories(self) -> Dict[str, Any]:
        return await self._request("GET", "/categories")

    async def get_category(self, category_id: int) -> Dict[str, Any]:
        return await self._request("GET", f"/categories/{category_id}")

    async def create_category(self, payload: Dict[str, Any]) -> Dict[str, Any]:
        return await self._request("POST", "/categories", json=payload)

    async def update_category(self, category_id: int, payload: Dict[str, Any]) -> Dict[str, Any]:
        return await self._request("PUT", f"/categories/{category_id}", json=payload)

    async def delete_category(self, category_id: int) -> Dict[str, Any]:
        return await self._request("DELETE", f"/categories/{category_id}")

    async def list_category_tasks(self, category_id: int) -> Dict[str, Any]:
        return await self._request("GET", f"/categories/{category_id}/tasks")

    # --- Habits ---

    async def list_habits(self) -> Dict[str, Any]:
        return await self._request("GET", "/habits")

    async def get_habit(self, habit_id: int) -> Dict[str, Any]:
        return await self._request("GET", f"/habits/{habit_id}")

    async def complete_habit(self, task_id: int, date: str, completed: bool = True) -> Dict[str, Any]:
        return await self._request(
            "POST", f"/habits/{task_id}/complete", json={"date": date, "completed": completed}
        )

    async def delete_habit_entry(self, task_id: int, date: str) -> Dict[str, Any]:
        return await self._request("DELETE", f"/habits/{task_id}/history/{date}")

    async def habit_stats(self, task_id: int, days: Optional[int] = None) -> Dict[str, Any]:
        params = {"days": days} if days else {}
        return await self._request("GET", f"/habits/{task_id}/stats", params=params)

    async def habits_overview(self, days: Optional[int] = None) -> Dict[str, Any]:
        params = {"days": days} if days else {}
        return await self._request("GET", "/habits/stats/overview", params=params)

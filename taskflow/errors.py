"""Domain errors raised by the store/service layer.

Each error carries the HTTP status it maps to; `api.errors` turns them into the
`{"success": false, "error": ...}` envelope.
"""

from typing import Any, Dict, Optional


class TaskFlowError(Exception):
    status_code: int = 500

    def __init__(self, error: str, *, message: Optional[str] = None, **extra: Any):
        super().__init__(error)
        self.error = error
        self.message = message
        self.extra: Dict[str, Any] = extra

    def to_payload(self) -> Dict[str, Any]:
        payload: Dict[str, Any] = {"success": False, "error": self.error}
        if self.message:
            payload["message"] = self.message
        payload.update(self.extra)
        return payload


class ValidationError(TaskFlowError):
    """Malformed or missing required input."""

    status_code = 400


class NotFoundError(TaskFlowError):
    """Referenced entity does not exist."""

    status_code = 404


class ConflictError(TaskFlowError):
    """Uniqueness or referential conflict."""

    status_code = 409


class CategoryInUseError(ConflictError):
    # Kept at 400 for compatibility with existing clients
    status_code = 400

    def __init__(self, task_count: int):
        super().__init__(
            "Cannot delete category that is being used by tasks",
            taskCount=task_count,
        )
        self.task_count = task_count


class StoreError(TaskFlowError):
    """Underlying persistence failure."""

    status_code = 500

from typing import Optional

from fastapi import APIRouter, Depends, Response, status
from sqlalchemy.orm import Session

from ..api.deps import parse_filter
from ..errors import NotFoundError
from ..models import TaskCreate, TaskFilter, TaskUpdate
from ..store_db import (
    get_db,
    create_task as db_create_task,
    update_task as db_update_task,
    toggle_task as db_toggle_task,
    delete_task as db_delete_task,
)
from ..views import get_task_view, list_task_views

router = APIRouter(prefix="/tasks", tags=["tasks"])


@router.get("")
async def list_tasks(
    task_filter: TaskFilter = Depends(parse_filter),
    category: Optional[str] = None,
    search: Optional[str] = None,
    db: Session = Depends(get_db),
):
    items = list_task_views(db, task_filter=task_filter, category=category, search=search)
    return {"success": True, "data": items, "count": len(items)}


@router.post("", status_code=status.HTTP_201_CREATED)
async def create_task(
    item: TaskCreate,
    response: Response,
    db: Session = Depends(get_db),
):
    task = db_create_task(db, item)
    response.headers["Location"] = f"/api/tasks/{task.id}"
    return {"success": True, "data": task, "message": "Task created successfully"}


@router.get("/{task_id}")
async def get_task(task_id: int, db: Session = Depends(get_db)):
    task = get_task_view(db, task_id)
    if task is None:
        raise NotFoundError("Task not found")
    return {"success": True, "data": task}


@router.put("/{task_id}")
async def update_task(
    task_id: int,
    item: TaskUpdate,
    db: Session = Depends(get_db),
):
    task = db_update_task(db, task_id, item)
    return {"success": True, "data": task, "message": "Task updated successfully"}


@router.patch("/{task_id}/toggle")
async def toggle_task(task_id: int, db: Session = Depends(get_db)):
    task = db_toggle_task(db, task_id)
    return {"success": True, "data": task, "message": "Task completion toggled successfully"}


@router.delete("/{task_id}")
async def delete_task(task_id: int, db: Session = Depends(get_db)):
    deleted = db_delete_task(db, task_id)
    return {"success": True, "message": "Task deleted successfully", "data": deleted}

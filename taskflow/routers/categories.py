from fastapi import APIRouter, Depends, status
from sqlalchemy.orm import Session

from ..errors import NotFoundError
from ..models import CategoryCreate, CategoryOut, CategoryUpdate
from ..store_db import (
    get_db,
    list_categories as db_list_categories,
    get_category as db_get_category,
    create_category as db_create_category,
    update_category as db_update_category,
    delete_category as db_delete_category,
)
from ..views import list_category_task_views

router = APIRouter(prefix="/categories", tags=["categories"])


@router.get("")
async def list_categories(db: Session = Depends(get_db)):
    items = [CategoryOut.model_validate(row) for row in db_list_categories(db)]
    return {"success": True, "data": items, "count": len(items)}


@router.get("/{category_id}")
async def get_category(category_id: int, db: Session = Depends(get_db)):
    row = db_get_category(db, category_id)
    if row is None:
        raise NotFoundError("Category not found")
    return {"success": True, "data": CategoryOut.model_validate(row)}


@router.post("", status_code=status.HTTP_201_CREATED)
async def create_category(item: CategoryCreate, db: Session = Depends(get_db)):
    row = db_create_category(db, item)
    return {
        "success": True,
        "data": CategoryOut.model_validate(row),
        "message": "Category created successfully",
    }


@router.put("/{category_id}")
async def update_category(category_id: int, item: CategoryUpdate, db: Session = Depends(get_db)):
    row = db_update_category(db, category_id, item)
    return {
        "success": True,
        "data": CategoryOut.model_validate(row),
        "message": "Category updated successfully",
    }


@router.delete("/{category_id}")
async def delete_category(category_id: int, db: Session = Depends(get_db)):
    deleted = db_delete_category(db, category_id)
    return {"success": True, "message": "Category deleted successfully", "data": deleted}


@router.get("/{category_id}/tasks")
async def list_category_tasks(category_id: int, db: Session = Depends(get_db)):
    items = list_category_task_views(db, category_id)
    return {"success": True, "data": items, "count": len(items)}

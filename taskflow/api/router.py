from fastapi import APIRouter

from ..routers import categories as categories_router
from ..routers import habits as habits_router
from ..routers import tasks as tasks_router


api_router = APIRouter(prefix="/api")

# Endpoints are available at /api/tasks, /api/categories and /api/habits
api_router.include_router(tasks_router.router)
api_router.include_router(categories_router.router)
api_router.include_router(habits_router.router)


@api_router.get("", tags=["meta"])  # lightweight meta endpoint
def api_info():
    return {
        "name": "TaskFlow API",
        "docs": "/docs",
        "tasks": "/api/tasks",
        "categories": "/api/categories",
        "habits": "/api/habits",
        "health": "/health",
    }

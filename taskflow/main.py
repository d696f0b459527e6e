import logging
from contextlib import asynccontextmanager

from fastapi import Depends, FastAPI
from prometheus_fastapi_instrumentator import Instrumentator
from slowapi.errors import RateLimitExceeded
from slowapi.middleware import SlowAPIMiddleware
from sqlalchemy import text
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from .api.errors import register_exception_handlers
from .api.middleware import install_middleware
from .api.router import api_router
from .config import settings
from .db import engine
from .db_models import now_utc
from .logging_utils import setup_logging
from .rate_limit import limiter, rate_limit_exceeded_handler
from .store_db import get_db

logger = logging.getLogger("taskflow")


@asynccontextmanager
async def lifespan(app: FastAPI):
    # Schema comes from `alembic upgrade head`; nothing is created here
    setup_logging(settings.LOG_LEVEL, sql_echo=settings.DB_ECHO)
    logger.info("starting api=/api health=/health metrics=/metrics")
    try:
        yield
    finally:
        logger.info("shutting down, disposing connection pool")
        engine.dispose()


tags_metadata = [
    {"name": "tasks", "description": "Tasks: CRUD, filters, completion toggle."},
    {"name": "categories", "description": "Categories shared by tasks."},
    {"name": "habits", "description": "Habit history, statistics and overview."},
]

app = FastAPI(
    title="TaskFlow API",
    version="1.0.0",
    description="JSON API for tasks, categories and habits, exposed under /api.",
    openapi_tags=tags_metadata,
    lifespan=lifespan,
)


@app.get("/health")
@limiter.exempt
def health(db: Session = Depends(get_db)):
    """Liveness plus a database round trip."""
    timestamp = now_utc().isoformat()
    try:
        db_time = db.execute(text("SELECT CURRENT_TIMESTAMP")).scalar()
    except SQLAlchemyError as exc:
        logger.error("health check database error: %s", exc)
        return {"status": "ERROR", "timestamp": timestamp, "database": "disconnected", "error": str(exc)}
    return {"status": "OK", "timestamp": timestamp, "database": "connected", "dbTime": str(db_time)}


app.include_router(api_router)
register_exception_handlers(app)

app.state.limiter = limiter
app.add_exception_handler(RateLimitExceeded, rate_limit_exceeded_handler)
app.add_middleware(SlowAPIMiddleware)

install_middleware(app)

Instrumentator().instrument(app).expose(app, include_in_schema=False)

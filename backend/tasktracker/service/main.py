import logging
import sys
from contextlib import asynccontextmanager

import uvicorn
from fastapi import FastAPI

from tasktracker.core.tasks.repository import TaskRepository
from tasktracker.db.migrate import run_migrations
from tasktracker.db.session import Database
from tasktracker.errors import MigrationError
from tasktracker.logging_setup import setup_logging
from tasktracker.service.router import register_exception_handlers, router
from tasktracker.service.servicer import TaskServicer
from tasktracker.settings import get_settings

log = logging.getLogger(__name__)


def _bind(app: FastAPI, db: Database) -> None:
    app.state.db = db
    app.state.servicer = TaskServicer(TaskRepository(db))


def create_app(db: Database | None = None) -> FastAPI:
    """Build the task service. When ``db`` is omitted one is opened from settings for the app's lifetime."""
    settings = get_settings()

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        owned = None
        if getattr(app.state, "db", None) is None:
            owned = Database.from_settings(settings)
            _bind(app, owned)
        log.info("[TaskService] Ready")
        try:
            yield
        finally:
            if owned is not None:
                await owned.dispose()

    app = FastAPI(
        title="Task Service",
        version="0.1.0",
        docs_url=None,
        redoc_url=None,
        lifespan=lifespan,
    )
    if db is not None:
        _bind(app, db)

    register_exception_handlers(app)
    app.include_router(router)
    return app


def run() -> None:
    settings = get_settings()
    setup_logging(level=settings.LOG_LEVEL, log_dir=settings.LOG_DIR, log_name="task-service.log")

    try:
        run_migrations(settings.DATABASE_SYNC_URL)
    except MigrationError as e:
        log.critical("[Migrations] %s", e)
        sys.exit(1)

    log.info("[TaskService] Starting on %s:%s", settings.TASK_SERVICE_HOST, settings.TASK_SERVICE_PORT)
    uvicorn.run(
        create_app(),
        host=settings.TASK_SERVICE_HOST,
        port=settings.TASK_SERVICE_PORT,
        log_config=None,
    )


if __name__ == "__main__":
    run()

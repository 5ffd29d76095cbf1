import logging
from contextlib import asynccontextmanager

import uvicorn
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from tasktracker.gateway.router import register_exception_handlers, router
from tasktracker.logging_setup import setup_logging
from tasktracker.rpc.client import TaskServiceClient
from tasktracker.settings import get_settings

log = logging.getLogger(__name__)


def create_app(task_client: TaskServiceClient | None = None) -> FastAPI:
    settings = get_settings()

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        owned = None
        if getattr(app.state, "task_client", None) is None:
            owned = TaskServiceClient.connect(settings.TASK_SERVICE_URL)
            app.state.task_client = owned
        try:
            yield
        finally:
            if owned is not None:
                await owned.close()

    app = FastAPI(
        title="Task Tracker API",
        version="0.1.0",
        docs_url=None,
        redoc_url=None,
        lifespan=lifespan,
    )
    if task_client is not None:
        app.state.task_client = task_client

    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"] if settings.APP_DEBUG else [],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    register_exception_handlers(app)
    app.include_router(router)
    return app


def run() -> None:
    settings = get_settings()
    setup_logging(level=settings.LOG_LEVEL, log_dir=settings.LOG_DIR, log_name="gateway.log")
    log.info("[Gateway] API Gateway is running on port %s", settings.GATEWAY_PORT)
    uvicorn.run(
        create_app(),
        host=settings.GATEWAY_HOST,
        port=settings.GATEWAY_PORT,
        log_config=None,
    )


if __name__ == "__main__":
    run()

import asyncio
import logging
from typing import Annotated, Awaitable, TypeVar

from fastapi import APIRouter, Depends, FastAPI, Header, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse

from tasktracker.dependencies import get_servicer
from tasktracker.errors import TaskError
from tasktracker.rpc.messages import (
    CreateTaskRequest,
    CreateTaskResponse,
    DeleteTaskRequest,
    DeleteTaskResponse,
    GetTaskRequest,
    GetTaskResponse,
    ListTasksRequest,
    ListTasksResponse,
    UpdateTaskRequest,
    UpdateTaskResponse,
)
from tasktracker.rpc.status import (
    HTTP_STATUS,
    KIND_TO_STATUS,
    RPC_PATH_PREFIX,
    TIMEOUT_HEADER,
    RpcError,
    RpcStatus,
    StatusCode,
)
from tasktracker.service.servicer import TaskServicer

log = logging.getLogger(__name__)

T = TypeVar("T")

router = APIRouter(prefix=RPC_PATH_PREFIX, tags=["rpc"])

Deadline = Annotated[float | None, Header(alias=TIMEOUT_HEADER, gt=0)]


async def with_deadline(call: Awaitable[T], timeout: float | None) -> T:
    if timeout is None:
        return await call
    try:
        return await asyncio.wait_for(call, timeout)
    except asyncio.TimeoutError:
        raise RpcError(StatusCode.DEADLINE_EXCEEDED, "context deadline exceeded")


@router.post("/CreateTask", response_model=CreateTaskResponse)
async def create_task(request: CreateTaskRequest, deadline: Deadline = None, servicer: TaskServicer = Depends(get_servicer)):
    return await with_deadline(servicer.CreateTask(request), deadline)


@router.post("/GetTask", response_model=GetTaskResponse)
async def get_task(request: GetTaskRequest, deadline: Deadline = None, servicer: TaskServicer = Depends(get_servicer)):
    return await with_deadline(servicer.GetTask(request), deadline)


@router.post("/ListTasks", response_model=ListTasksResponse)
async def list_tasks(request: ListTasksRequest, deadline: Deadline = None, servicer: TaskServicer = Depends(get_servicer)):
    return await with_deadline(servicer.ListTasks(request), deadline)


@router.post("/UpdateTask", response_model=UpdateTaskResponse)
async def update_task(request: UpdateTaskRequest, deadline: Deadline = None, servicer: TaskServicer = Depends(get_servicer)):
    return await with_deadline(servicer.UpdateTask(request), deadline)


@router.post("/DeleteTask", response_model=DeleteTaskResponse)
async def delete_task(request: DeleteTaskRequest, deadline: Deadline = None, servicer: TaskServicer = Depends(get_servicer)):
    return await with_deadline(servicer.DeleteTask(request), deadline)


def status_response(code: StatusCode, details: str) -> JSONResponse:
    return JSONResponse(
        status_code=HTTP_STATUS[code],
        content=RpcStatus(code=code, details=details).model_dump(mode="json"),
    )


def register_exception_handlers(app: FastAPI) -> None:
    @app.exception_handler(TaskError)
    async def task_error_handler(request: Request, exc: TaskError):
        code = KIND_TO_STATUS[exc.kind]
        if code is StatusCode.INTERNAL:
            log.error("[TaskService] %s failed: %s", request.url.path, exc)
        return status_response(code, str(exc))

    @app.exception_handler(RpcError)
    async def rpc_error_handler(request: Request, exc: RpcError):
        log.warning("[TaskService] %s aborted: %s", request.url.path, exc.details)
        return status_response(exc.code, exc.details)

    @app.exception_handler(RequestValidationError)
    async def validation_error_handler(request: Request, exc: RequestValidationError):
        return status_response(StatusCode.INVALID_ARGUMENT, f"malformed request message: {exc.errors()}")

import logging

from fastapi import APIRouter, Depends, FastAPI, Request, Response, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse

from tasktracker.dependencies import get_task_client
from tasktracker.gateway.schemas import ErrorResponse, TaskListResponse, TaskRequest, TaskResponse
from tasktracker.rpc.client import TaskServiceClient
from tasktracker.rpc.messages import (
    CreateTaskRequest,
    DeleteTaskRequest,
    GetTaskRequest,
    ListTasksRequest,
    UpdateTaskRequest,
)
from tasktracker.rpc.status import RpcError, StatusCode

log = logging.getLogger(__name__)

LIST_TIMEOUT = 10.0
CALL_TIMEOUT = 5.0

INVALID_PAYLOAD = "Invalid request payload. Please review the request body and try again"

router = APIRouter(tags=["tasks"])


def error_response(status_code: int, error: str, error_message: str) -> JSONResponse:
    return JSONResponse(
        status_code=status_code,
        content=ErrorResponse(error=error, error_message=error_message).model_dump(),
    )


CLIENT_ERRORS = {
    StatusCode.INVALID_ARGUMENT: status.HTTP_400_BAD_REQUEST,
    StatusCode.NOT_FOUND: status.HTTP_404_NOT_FOUND,
}


def rpc_failure(
    exc: RpcError,
    error: str,
    default_status: int,
    mapped: dict[StatusCode, int] | None = None,
) -> JSONResponse:
    status_code = (mapped or {}).get(exc.code, default_status)
    log.warning("[Gateway] %s (%s): %s", error, exc.code.value, exc.details)
    return error_response(status_code, error, str(exc))


@router.get("/tasks", response_model=TaskListResponse)
async def list_tasks(client: TaskServiceClient = Depends(get_task_client)):
    try:
        resp = await client.ListTasks(ListTasksRequest(), timeout=LIST_TIMEOUT)
    except RpcError as e:
        return rpc_failure(e, "Failed to list tasks", status.HTTP_500_INTERNAL_SERVER_ERROR)
    return TaskListResponse(tasks=[TaskResponse.from_message(t) for t in resp.tasks])


@router.post("/tasks", response_model=TaskResponse, status_code=201)
async def create_task(data: TaskRequest, client: TaskServiceClient = Depends(get_task_client)):
    try:
        resp = await client.CreateTask(
            CreateTaskRequest(title=data.title, description=data.description),
            timeout=CALL_TIMEOUT,
        )
    except RpcError as e:
        return rpc_failure(e, "Failed to create task", status.HTTP_500_INTERNAL_SERVER_ERROR, CLIENT_ERRORS)
    return TaskResponse.from_message(resp.task)


@router.get("/tasks/{task_id}", response_model=TaskResponse)
async def get_task(task_id: str, client: TaskServiceClient = Depends(get_task_client)):
    try:
        resp = await client.GetTask(GetTaskRequest(id=task_id), timeout=CALL_TIMEOUT)
    except RpcError as e:
        return rpc_failure(e, "Task not found", status.HTTP_404_NOT_FOUND)
    return TaskResponse.from_message(resp.task)


@router.put("/tasks/{task_id}", response_model=TaskResponse)
async def update_task(task_id: str, data: TaskRequest, client: TaskServiceClient = Depends(get_task_client)):
    try:
        resp = await client.UpdateTask(
            UpdateTaskRequest(id=task_id, title=data.title, description=data.description),
            timeout=CALL_TIMEOUT,
        )
    except RpcError as e:
        return rpc_failure(e, "Internal Server Error. Failed to update task", status.HTTP_500_INTERNAL_SERVER_ERROR, CLIENT_ERRORS)
    return TaskResponse.from_message(resp.task)


@router.delete("/tasks/{task_id}", status_code=204)
async def delete_task(task_id: str, client: TaskServiceClient = Depends(get_task_client)):
    try:
        await client.DeleteTask(DeleteTaskRequest(id=task_id), timeout=CALL_TIMEOUT)
    except RpcError as e:
        return rpc_failure(e, "Internal Server Error. Failed to delete task", status.HTTP_500_INTERNAL_SERVER_ERROR)
    log.info("[Gateway] Task %s deleted successfully", task_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)


def register_exception_handlers(app: FastAPI) -> None:
    @app.exception_handler(RequestValidationError)
    async def invalid_payload_handler(request: Request, exc: RequestValidationError):
        details = "; ".join(err.get("msg", "") for err in exc.errors())
        return error_response(status.HTTP_400_BAD_REQUEST, INVALID_PAYLOAD, details)

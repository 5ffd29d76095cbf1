import asyncio
import logging
from typing import TypeVar

import httpx
from pydantic import BaseModel, ValidationError

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
from tasktracker.rpc.status import RPC_PATH_PREFIX, TIMEOUT_HEADER, RpcError, RpcStatus, StatusCode

log = logging.getLogger(__name__)

ResponseT = TypeVar("ResponseT", bound=BaseModel)

DEFAULT_TIMEOUT = 5.0


def _status_error(response: httpx.Response) -> RpcError:
    try:
        status = RpcStatus.model_validate_json(response.content)
    except ValidationError:
        return RpcError(
            StatusCode.INTERNAL,
            f"unexpected HTTP status {response.status_code}: {response.text[:200]}",
        )
    return RpcError(status.code, status.details)


class TaskServiceClient:
    """
    Client stub for the task service.

    Every call is bounded by ``timeout`` seconds. The deadline is sent to the
    server and also enforced locally, so a stalled backend never blocks the
    caller past it. Calls are never retried.
    """

    def __init__(self, http_client: httpx.AsyncClient):
        self.http_client = http_client

    @classmethod
    def connect(cls, address: str) -> "TaskServiceClient":
        log.info("[RPC] Task service client targeting %s", address)
        return cls(httpx.AsyncClient(base_url=address))

    async def close(self) -> None:
        await self.http_client.aclose()

    async def _call(
        self,
        method: str,
        request: BaseModel,
        response_type: type[ResponseT],
        timeout: float,
    ) -> ResponseT:
        try:
            response = await asyncio.wait_for(
                self.http_client.post(
                    f"{RPC_PATH_PREFIX}/{method}",
                    json=request.model_dump(),
                    headers={TIMEOUT_HEADER: f"{timeout:.3f}"},
                    timeout=timeout,
                ),
                timeout=timeout,
            )
        except (asyncio.TimeoutError, httpx.TimeoutException) as e:
            log.warning("[RPC] %s exceeded its %.1fs deadline", method, timeout)
            raise RpcError(StatusCode.DEADLINE_EXCEEDED, "context deadline exceeded") from e
        except httpx.TransportError as e:
            log.warning("[RPC] %s failed to reach the task service: %s", method, e)
            raise RpcError(StatusCode.UNAVAILABLE, str(e) or type(e).__name__) from e

        if response.status_code != 200:
            raise _status_error(response)
        try:
            return response_type.model_validate_json(response.content)
        except ValidationError as e:
            raise RpcError(StatusCode.INTERNAL, f"malformed {method} response: {e}") from e

    async def CreateTask(self, request: CreateTaskRequest, *, timeout: float = DEFAULT_TIMEOUT) -> CreateTaskResponse:
        return await self._call("CreateTask", request, CreateTaskResponse, timeout)

    async def GetTask(self, request: GetTaskRequest, *, timeout: float = DEFAULT_TIMEOUT) -> GetTaskResponse:
        return await self._call("GetTask", request, GetTaskResponse, timeout)

    async def ListTasks(self, request: ListTasksRequest, *, timeout: float = DEFAULT_TIMEOUT) -> ListTasksResponse:
        return await self._call("ListTasks", request, ListTasksResponse, timeout)

    async def UpdateTask(self, request: UpdateTaskRequest, *, timeout: float = DEFAULT_TIMEOUT) -> UpdateTaskResponse:
        return await self._call("UpdateTask", request, UpdateTaskResponse, timeout)

    async def DeleteTask(self, request: DeleteTaskRequest, *, timeout: float = DEFAULT_TIMEOUT) -> DeleteTaskResponse:
        return await self._call("DeleteTask", request, DeleteTaskResponse, timeout)

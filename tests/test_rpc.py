import asyncio
import uuid

import httpx
import pytest

from tasktracker.rpc.client import TaskServiceClient
from tasktracker.rpc.messages import (
    CreateTaskRequest,
    DeleteTaskRequest,
    GetTaskRequest,
    GetTaskResponse,
    ListTasksRequest,
    UpdateTaskRequest,
)
from tasktracker.rpc.status import TIMEOUT_HEADER, RpcError, StatusCode
from tasktracker.service.servicer import TaskServicer


class SlowServicer(TaskServicer):
    async def GetTask(self, request: GetTaskRequest) -> GetTaskResponse:
        await asyncio.sleep(2)
        return await super().GetTask(request)


@pytest.mark.asyncio
async def test_round_trip_over_rpc(rpc_client):
    created = await rpc_client.CreateTask(CreateTaskRequest(title="Buy milk", description="2%"))
    listed = await rpc_client.ListTasks(ListTasksRequest())
    assert [t.id for t in listed.tasks] == [created.task.id]

    updated = await rpc_client.UpdateTask(UpdateTaskRequest(id=created.task.id, title="Buy oat milk"))
    assert updated.task.title == "Buy oat milk"
    assert updated.task.created_at == (await rpc_client.GetTask(GetTaskRequest(id=created.task.id))).task.created_at

    deleted = await rpc_client.DeleteTask(DeleteTaskRequest(id=created.task.id))
    assert deleted.success is True


@pytest.mark.asyncio
async def test_empty_title_is_invalid_argument(rpc_client):
    with pytest.raises(RpcError) as exc:
        await rpc_client.CreateTask(CreateTaskRequest(title=""))
    assert exc.value.code is StatusCode.INVALID_ARGUMENT
    assert "Title is required" in exc.value.details


@pytest.mark.asyncio
async def test_missing_task_is_not_found(rpc_client):
    with pytest.raises(RpcError) as exc:
        await rpc_client.GetTask(GetTaskRequest(id=str(uuid.uuid4())))
    assert exc.value.code is StatusCode.NOT_FOUND

    with pytest.raises(RpcError) as exc:
        await rpc_client.UpdateTask(UpdateTaskRequest(id=str(uuid.uuid4()), title="ghost"))
    assert exc.value.code is StatusCode.NOT_FOUND


@pytest.mark.asyncio
async def test_storage_failure_is_internal(rpc_client, db):
    async with db.engine.begin() as conn:
        await conn.exec_driver_sql("DROP TABLE tasks")
    with pytest.raises(RpcError) as exc:
        await rpc_client.ListTasks(ListTasksRequest())
    assert exc.value.code is StatusCode.INTERNAL


@pytest.mark.asyncio
async def test_malformed_request_message(service_app):
    async with httpx.AsyncClient(transport=httpx.ASGITransport(app=service_app), base_url="http://task-service") as http:
        resp = await http.post("/rpc/TaskService/GetTask", json={"wrong": "field"})
    assert resp.status_code == 400
    assert resp.json()["code"] == "INVALID_ARGUMENT"


@pytest.mark.asyncio
async def test_client_deadline(service_app, repo, rpc_client):
    service_app.state.servicer = SlowServicer(repo)
    with pytest.raises(RpcError) as exc:
        await rpc_client.GetTask(GetTaskRequest(id=str(uuid.uuid4())), timeout=0.05)
    assert exc.value.code is StatusCode.DEADLINE_EXCEEDED


@pytest.mark.asyncio
async def test_server_enforces_sent_deadline(service_app, repo):
    service_app.state.servicer = SlowServicer(repo)
    async with httpx.AsyncClient(transport=httpx.ASGITransport(app=service_app), base_url="http://task-service") as http:
        resp = await http.post(
            "/rpc/TaskService/GetTask",
            json={"id": str(uuid.uuid4())},
            headers={TIMEOUT_HEADER: "0.05"},
        )
    assert resp.status_code == 504
    assert resp.json()["code"] == "DEADLINE_EXCEEDED"


@pytest.mark.asyncio
async def test_unreachable_service_is_unavailable():
    def refuse(request: httpx.Request) -> httpx.Response:
        raise httpx.ConnectError("connection refused", request=request)

    client = TaskServiceClient(httpx.AsyncClient(transport=httpx.MockTransport(refuse), base_url="http://task-service"))
    with pytest.raises(RpcError) as exc:
        await client.ListTasks(ListTasksRequest())
    await client.close()
    assert exc.value.code is StatusCode.UNAVAILABLE
    assert "connection refused" in exc.value.details


@pytest.mark.asyncio
async def test_non_rpc_error_body_is_internal():
    def bad_gateway(request: httpx.Request) -> httpx.Response:
        return httpx.Response(502, text="<html>Bad Gateway</html>")

    client = TaskServiceClient(httpx.AsyncClient(transport=httpx.MockTransport(bad_gateway), base_url="http://task-service"))
    with pytest.raises(RpcError) as exc:
        await client.ListTasks(ListTasksRequest())
    await client.close()
    assert exc.value.code is StatusCode.INTERNAL
    assert "502" in exc.value.details


@pytest.mark.asyncio
async def test_client_sends_deadline_header():
    seen = {}

    def record(request: httpx.Request) -> httpx.Response:
        seen["timeout"] = request.headers[TIMEOUT_HEADER]
        seen["path"] = request.url.path
        return httpx.Response(200, json={"tasks": []})

    client = TaskServiceClient(httpx.AsyncClient(transport=httpx.MockTransport(record), base_url="http://task-service"))
    resp = await client.ListTasks(ListTasksRequest(), timeout=10)
    await client.close()
    assert resp.tasks == []
    assert seen == {"timeout": "10.000", "path": "/rpc/TaskService/ListTasks"}


@pytest.mark.asyncio
async def test_over_long_title_is_invalid_argument(rpc_client):
    with pytest.raises(RpcError) as exc:
        await rpc_client.CreateTask(CreateTaskRequest(title="x" * 600))
    assert exc.value.code is StatusCode.INVALID_ARGUMENT
    listed = await rpc_client.ListTasks(ListTasksRequest())
    assert listed.tasks == []

import logging
from datetime import datetime, timezone

from tasktracker.core.tasks.models import TITLE_MAX_LENGTH, Task
from tasktracker.core.tasks.repository import TaskRepository
from tasktracker.errors import InvalidArgumentError
from tasktracker.rpc.messages import (
    CreateTaskRequest,
    CreateTaskResponse,
    DeleteTaskRequest,
    DeleteTaskResponse,
    GetTaskRequest,
    GetTaskResponse,
    ListTasksRequest,
    ListTasksResponse,
    TaskMessage,
    UpdateTaskRequest,
    UpdateTaskResponse,
)

log = logging.getLogger(__name__)


def format_timestamp(value: datetime | None) -> str | None:
    if value is None:
        return None
    if value.tzinfo is None:
        value = value.replace(tzinfo=timezone.utc)
    return value.isoformat()


def task_to_message(task: Task) -> TaskMessage:
    return TaskMessage(
        id=task.id,
        title=task.title,
        description=task.description,
        created_at=format_timestamp(task.created_at),
        updated_at=format_timestamp(task.updated_at),
    )


def _require_title(title: str) -> None:
    if not title or not title.strip():
        raise InvalidArgumentError("Title is required")
    if len(title) > TITLE_MAX_LENGTH:
        raise InvalidArgumentError(f"Title must be at most {TITLE_MAX_LENGTH} characters")


class TaskServicer:
    """Implements the TaskService RPC methods on top of the repository."""

    def __init__(self, repo: TaskRepository):
        self.repo = repo

    async def CreateTask(self, request: CreateTaskRequest) -> CreateTaskResponse:
        _require_title(request.title)
        task = await self.repo.create(Task(title=request.title, description=request.description))
        log.info("[TaskService] Created task %s", task.id)
        return CreateTaskResponse(task=task_to_message(task))

    async def GetTask(self, request: GetTaskRequest) -> GetTaskResponse:
        task = await self.repo.get(request.id)
        return GetTaskResponse(task=task_to_message(task))

    async def ListTasks(self, request: ListTasksRequest) -> ListTasksResponse:
        found = await self.repo.list()
        return ListTasksResponse(tasks=[task_to_message(t) for t in found])

    async def UpdateTask(self, request: UpdateTaskRequest) -> UpdateTaskResponse:
        _require_title(request.title)
        task = await self.repo.get(request.id)
        task.title = request.title
        task.description = request.description
        task = await self.repo.update(task)
        log.info("[TaskService] Updated task %s", task.id)
        return UpdateTaskResponse(task=task_to_message(task))

    async def DeleteTask(self, request: DeleteTaskRequest) -> DeleteTaskResponse:
        await self.repo.delete(request.id)
        log.info("[TaskService] Deleted task %s", request.id)
        return DeleteTaskResponse(success=True)

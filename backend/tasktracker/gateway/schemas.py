from pydantic import BaseModel, Field

from tasktracker.core.tasks.models import TITLE_MAX_LENGTH
from tasktracker.rpc.messages import TaskMessage


class TaskRequest(BaseModel):
    title: str = Field("", max_length=TITLE_MAX_LENGTH, examples=["Buy groceries"])
    description: str = Field("", examples=["Milk, Bread, Eggs"])


class TaskResponse(BaseModel):
    id: str
    title: str
    description: str
    created_at: str
    updated_at: str | None

    @classmethod
    def from_message(cls, task: TaskMessage) -> "TaskResponse":
        return cls(
            id=task.id,
            title=task.title,
            description=task.description,
            created_at=task.created_at,
            updated_at=task.updated_at,
        )


class TaskListResponse(BaseModel):
    tasks: list[TaskResponse]


class ErrorResponse(BaseModel):
    error: str
    error_message: str

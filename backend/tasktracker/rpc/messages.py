from pydantic import BaseModel


class TaskMessage(BaseModel):
    id: str
    title: str
    description: str = ""
    created_at: str
    updated_at: str | None = None


class CreateTaskRequest(BaseModel):
    title: str = ""
    description: str = ""


class CreateTaskResponse(BaseModel):
    task: TaskMessage


class GetTaskRequest(BaseModel):
    id: str


class GetTaskResponse(BaseModel):
    task: TaskMessage


class ListTasksRequest(BaseModel):
    pass


class ListTasksResponse(BaseModel):
    tasks: list[TaskMessage] = []


class UpdateTaskRequest(BaseModel):
    id: str
    title: str = ""
    description: str = ""


class UpdateTaskResponse(BaseModel):
    task: TaskMessage


class DeleteTaskRequest(BaseModel):
    id: str


class DeleteTaskResponse(BaseModel):
    success: bool

from fastapi import Request

from tasktracker.rpc.client import TaskServiceClient
from tasktracker.service.servicer import TaskServicer


def get_servicer(request: Request) -> TaskServicer:
    return request.app.state.servicer


def get_task_client(request: Request) -> TaskServiceClient:
    return request.app.state.task_client

import enum

from pydantic import BaseModel

from tasktracker.errors import ErrorKind

SERVICE_NAME = "TaskService"
RPC_PATH_PREFIX = f"/rpc/{SERVICE_NAME}"
TIMEOUT_HEADER = "Rpc-Timeout"


class StatusCode(str, enum.Enum):
    OK = "OK"
    INVALID_ARGUMENT = "INVALID_ARGUMENT"
    NOT_FOUND = "NOT_FOUND"
    DEADLINE_EXCEEDED = "DEADLINE_EXCEEDED"
    UNAVAILABLE = "UNAVAILABLE"
    INTERNAL = "INTERNAL"


HTTP_STATUS = {
    StatusCode.OK: 200,
    StatusCode.INVALID_ARGUMENT: 400,
    StatusCode.NOT_FOUND: 404,
    StatusCode.DEADLINE_EXCEEDED: 504,
    StatusCode.UNAVAILABLE: 503,
    StatusCode.INTERNAL: 500,
}

KIND_TO_STATUS = {
    ErrorKind.INVALID_ARGUMENT: StatusCode.INVALID_ARGUMENT,
    ErrorKind.NOT_FOUND: StatusCode.NOT_FOUND,
    ErrorKind.STORAGE: StatusCode.INTERNAL,
}


class RpcStatus(BaseModel):
    code: StatusCode
    details: str = ""


class RpcError(Exception):
    """A failed call, as seen by the caller."""

    def __init__(self, code: StatusCode, details: str = ""):
        super().__init__(details)
        self.code = code
        self.details = details

    def __str__(self) -> str:
        return f"rpc error: code = {self.code.value} desc = {self.details}"

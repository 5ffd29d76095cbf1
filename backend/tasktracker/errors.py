"""
Error taxonomy shared by the repository and the task service.

Callers branch on ``TaskError.kind`` (or the subclass), never on the message.
"""

import enum


class ErrorKind(str, enum.Enum):
    INVALID_ARGUMENT = "invalid_argument"
    NOT_FOUND = "not_found"
    STORAGE = "storage"


class TaskError(Exception):
    kind: ErrorKind = ErrorKind.STORAGE

    def __init__(self, message: str, *, cause: BaseException | None = None):
        super().__init__(message)
        self.message = message
        self.cause = cause

    def __str__(self) -> str:
        if self.cause is not None:
            return f"{self.message}: {self.cause}"
        return self.message


class InvalidArgumentError(TaskError):
    kind = ErrorKind.INVALID_ARGUMENT


class NotFoundError(TaskError):
    kind = ErrorKind.NOT_FOUND


class StorageError(TaskError):
    kind = ErrorKind.STORAGE


class MigrationError(StorageError):
    """Schema could not be brought up to date."""

"""Request-local error types. None of them are fatal to the process."""

from __future__ import annotations


class TaskboardError(Exception):
    """Base error; carries the HTTP status the router should answer with."""

    status_code = 500

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class InvalidRequestError(TaskboardError):
    """Malformed JSON, a bad id, or a title that fails validation."""

    status_code = 400


class TaskNotFoundError(TaskboardError):
    status_code = 404

    def __init__(self, task_id: int):
        super().__init__(f"Task {task_id} not found")
        self.task_id = task_id

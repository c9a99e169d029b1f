from __future__ import annotations


class TaskStoreError(Exception):
    """Base class for failures raised by task store operations.

    Every subclass terminates only the operation that raised it; the store is
    left exactly as it was before the call.
    """


class ValidationError(TaskStoreError):
    """Invalid input to a mutation, e.g. an empty title."""


class ParseError(TaskStoreError):
    """Import payload is not a JSON array of records."""


class NotFoundError(TaskStoreError):
    def __init__(self, task_id: str) -> None:
        super().__init__(f"task {task_id!r} not found")
        self.task_id = task_id


class ExportError(TaskStoreError):
    """The share collaborator rejected an export."""


class StoreDisposedError(TaskStoreError):
    """A state-changing operation was called after dispose()."""


__all__ = [
    "TaskStoreError",
    "ValidationError",
    "ParseError",
    "NotFoundError",
    "ExportError",
    "StoreDisposedError",
]

"""Exceptions raised by the todo handlers."""

from __future__ import annotations


class TodoError(Exception):
    """Base class for todo service errors."""


class TodoNotFoundError(TodoError):
    """Raised when an operation needs a todo row that does not exist."""

    def __init__(self, todo_id: int) -> None:
        self.todo_id = todo_id
        super().__init__(f"Todo with id {todo_id} not found")

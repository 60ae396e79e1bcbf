from __future__ import annotations

from datetime import date, datetime
from typing import Any, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator

from .models import Priority
from .utils import parse_date_like, parse_timestamp


def _clean_title(v: str) -> str:
    s = v.strip()
    if not s:
        raise ValueError("Title cannot be empty")
    return s


# PUBLIC_INTERFACE
class CreateTodoInput(BaseModel):
    """
    Input for creating a new Todo item.
    """

    model_config = ConfigDict(
        json_schema_extra={
            "example": {
                "title": "Buy groceries",
                "description": "Milk, eggs, bread",
                "due_date": "2025-02-01",
                "priority": "Medium",
            }
        }
    )

    title: str = Field(..., description="Short title for the todo item", min_length=1)
    description: Optional[str] = Field(default=None, description="Optional detailed description")
    due_date: Optional[date] = Field(
        default=None,
        description="Due date of the todo item. Accepts an ISO8601 date or datetime; only the day is kept",
    )
    priority: Optional[Priority] = Field(default=None, description="Priority level: Low, Medium or High")

    @field_validator("title")
    @classmethod
    def validate_title(cls, v: str) -> str:
        """
        Strip whitespace and reject titles that end up empty.
        """
        return _clean_title(v)

    @field_validator("due_date", mode="before")
    @classmethod
    def parse_due_date(cls, v: Any) -> Optional[date]:
        """
        Normalize due_date from str/date/datetime to date.
        """
        return parse_date_like(v)


# PUBLIC_INTERFACE
class TodoPatch(BaseModel):
    """
    Partial changes to a Todo item.

    Only fields that were actually supplied are applied. A nullable field
    supplied as null is cleared; a field that was left out stays as it is.
    Whether a field was supplied is read from ``model_fields_set``.
    """

    model_config = ConfigDict(
        json_schema_extra={
            "example": {
                "title": "Buy groceries and supplies",
                "description": None,
                "completed": True,
                "priority": "High",
            }
        }
    )

    title: Optional[str] = Field(default=None, description="Short title for the todo item", min_length=1)
    description: Optional[str] = Field(default=None, description="Detailed description; null clears it")
    due_date: Optional[date] = Field(default=None, description="Due date; null clears it")
    completed: Optional[bool] = Field(default=None, description="Completion status flag")
    priority: Optional[Priority] = Field(default=None, description="Priority level; null clears it")

    @field_validator("title")
    @classmethod
    def validate_title(cls, v: Optional[str]) -> str:
        """
        If title is provided it must be a non-empty string; it cannot be cleared.
        """
        if v is None:
            raise ValueError("Title cannot be null")
        return _clean_title(v)

    @field_validator("completed")
    @classmethod
    def validate_completed(cls, v: Optional[bool]) -> bool:
        if v is None:
            raise ValueError("completed cannot be null")
        return v

    @field_validator("due_date", mode="before")
    @classmethod
    def parse_due_date(cls, v: Any) -> Optional[date]:
        return parse_date_like(v)

    # PUBLIC_INTERFACE
    def changes(self) -> dict[str, Any]:
        """Return only the supplied fields, explicit nulls included."""
        return {name: getattr(self, name) for name in self.model_fields_set if name != "id"}


# PUBLIC_INTERFACE
class UpdateTodoInput(TodoPatch):
    """
    Input for updating an existing Todo item: its id plus a TodoPatch.
    """

    id: int = Field(..., description="Identifier of the todo item to update")


# PUBLIC_INTERFACE
class FilterTodosInput(BaseModel):
    """
    Conjunctive filter over todos. A field left out (or null) imposes no constraint.
    """

    completed: Optional[bool] = Field(default=None, description="Match on completion status")
    priority: Optional[Priority] = Field(default=None, description="Match on priority level")


# PUBLIC_INTERFACE
class DeleteTodoInput(BaseModel):
    """Input for deleting a Todo item."""

    id: int = Field(..., description="Identifier of the todo item to delete")


# PUBLIC_INTERFACE
class Todo(BaseModel):
    """
    Normalized Todo item returned by every handler.

    Whatever representation the store used, ``due_date`` comes out as a
    ``date`` and both timestamps as aware UTC ``datetime`` values.
    """

    model_config = ConfigDict(
        json_schema_extra={
            "example": {
                "id": 123,
                "title": "Buy groceries",
                "description": "Milk, eggs, bread",
                "due_date": "2025-02-01",
                "completed": False,
                "priority": "Medium",
                "created_at": "2025-01-25T10:15:30.123456Z",
                "updated_at": "2025-01-26T09:00:00.000001Z",
            }
        }
    )

    id: int = Field(..., description="Unique identifier of the todo item")
    title: str = Field(..., description="Short title for the todo item")
    description: Optional[str] = Field(default=None, description="Optional detailed description")
    due_date: Optional[date] = Field(default=None, description="Due date of the todo item")
    completed: bool = Field(..., description="Completion status flag")
    priority: Optional[Priority] = Field(default=None, description="Priority level")
    created_at: datetime = Field(..., description="Creation timestamp (UTC)")
    updated_at: datetime = Field(..., description="Last update timestamp (UTC)")

    @field_validator("due_date", mode="before")
    @classmethod
    def normalize_due_date(cls, v: Any) -> Optional[date]:
        return parse_date_like(v)

    @field_validator("created_at", "updated_at", mode="before")
    @classmethod
    def normalize_timestamp(cls, v: Any) -> Any:
        if isinstance(v, (str, datetime)):
            return parse_timestamp(v)
        return v


# PUBLIC_INTERFACE
class DeleteResult(BaseModel):
    """Outcome of a delete; a missing row is reported, not raised."""

    success: bool = Field(..., description="True if a row was deleted")
    message: str = Field(..., description="Human-readable status message")


# PUBLIC_INTERFACE
class TodoStats(BaseModel):
    """Summary counts over all todos."""

    total: int = Field(..., description="Number of todos")
    completed: int = Field(..., description="Number of completed todos")
    pending: int = Field(..., description="Number of todos not yet completed")
    high_priority: int = Field(..., description="Number of open todos with High priority")

from __future__ import annotations

from datetime import date, datetime
from enum import Enum
from typing import Optional, TypedDict, Union


# PUBLIC_INTERFACE
class Priority(str, Enum):
    """Closed set of priority levels a todo may carry."""

    LOW = "Low"
    MEDIUM = "Medium"
    HIGH = "High"


# PUBLIC_INTERFACE
class TodoEntity(TypedDict):
    """
    Raw todo row as handed back by a storage backend.

    Backends are free to keep dates in their native form: the SQLite store
    returns ``due_date`` as a ``YYYY-MM-DD`` string and timestamps as ISO8601
    strings, while the in-memory store keeps ``date``/``datetime`` objects.
    Handlers normalize rows through ``schemas.Todo`` before returning them.

    Fields:
    - id: Unique integer identifier, assigned by the store
    - title: Non-empty title (trimmed on input via schemas)
    - description: Optional detailed description
    - due_date: Optional calendar date
    - completed: Boolean completion flag
    - priority: Optional priority value (Low/Medium/High)
    - created_at: UTC creation timestamp
    - updated_at: UTC last update timestamp
    """

    id: int
    title: str
    description: Optional[str]
    due_date: Union[date, str, None]
    completed: bool
    priority: Union[Priority, str, None]
    created_at: Union[datetime, str]
    updated_at: Union[datetime, str]

from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass
from functools import lru_cache
from threading import RLock
from typing import Any, Dict, Iterable, List, Optional

from .models import Priority, TodoEntity
from .settings import get_settings
from .utils import next_timestamp, utcnow

# Columns an update is allowed to touch
MUTABLE_FIELDS = frozenset({"title", "description", "due_date", "completed", "priority"})


@dataclass(frozen=True)
class TodoQuery:
    """
    Equality constraints for listing todos. None means "any value".
    """
    completed: Optional[bool] = None
    priority: Optional[Priority] = None


# PUBLIC_INTERFACE
class Repository(ABC):
    """Abstract repository contract for todo storage backends."""

    @abstractmethod
    def create(
        self,
        title: str,
        description: Optional[str] = None,
        due_date: Any = None,
        priority: Optional[Priority] = None,
    ) -> TodoEntity:
        """Insert a new, not yet completed todo and return the stored row."""

    @abstractmethod
    def get(self, todo_id: int) -> Optional[TodoEntity]:
        """Return a TodoEntity by id, or None if not found."""

    @abstractmethod
    def update(self, todo_id: int, changes: Dict[str, Any]) -> Optional[TodoEntity]:
        """
        Apply ``changes`` (a subset of MUTABLE_FIELDS) to an existing row and
        always refresh ``updated_at``. Return the updated row, or None if not found.
        """

    @abstractmethod
    def delete(self, todo_id: int) -> bool:
        """Delete a TodoEntity by id. Return True if deleted, False if not found."""

    @abstractmethod
    def list(self, query: Optional[TodoQuery] = None) -> List[TodoEntity]:
        """
        Return todos matching every constraint in ``query``, newest first:
        ordered by created_at descending, then id descending.
        """


def _check_changes(changes: Dict[str, Any]) -> None:
    unknown = set(changes) - MUTABLE_FIELDS
    if unknown:
        raise ValueError(f"Cannot update fields: {', '.join(sorted(unknown))}")


class InMemoryRepository(Repository):
    """
    Thread-safe in-memory repository suitable for testing and default runtime.
    """

    def __init__(self) -> None:
        self._lock = RLock()
        self._items: dict[int, TodoEntity] = {}
        self._next_id = 1

    def _allocate_id(self) -> int:
        with self._lock:
            i = self._next_id
            self._next_id += 1
            return i

    def create(
        self,
        title: str,
        description: Optional[str] = None,
        due_date: Any = None,
        priority: Optional[Priority] = None,
    ) -> TodoEntity:
        now = utcnow()
        with self._lock:
            entity: TodoEntity = {
                "id": self._allocate_id(),
                "title": title,
                "description": description,
                "due_date": due_date,
                "completed": False,
                "priority": priority,
                "created_at": now,
                "updated_at": now,
            }
            self._items[entity["id"]] = entity
            return entity.copy()

    def get(self, todo_id: int) -> Optional[TodoEntity]:
        with self._lock:
            item = self._items.get(todo_id)
            return None if item is None else item.copy()

    def update(self, todo_id: int, changes: Dict[str, Any]) -> Optional[TodoEntity]:
        _check_changes(changes)
        with self._lock:
            existing = self._items.get(todo_id)
            if existing is None:
                return None

            updated = existing.copy()
            updated.update(changes)  # type: ignore[typeddict-item]
            updated["updated_at"] = next_timestamp(existing["updated_at"])

            self._items[todo_id] = updated
            return updated.copy()

    def delete(self, todo_id: int) -> bool:
        with self._lock:
            return self._items.pop(todo_id, None) is not None

    def list(self, query: Optional[TodoQuery] = None) -> List[TodoEntity]:
        q = query or TodoQuery()
        with self._lock:
            items: Iterable[TodoEntity] = self._items.values()

            if q.completed is not None:
                items = [t for t in items if t["completed"] == q.completed]

            if q.priority is not None:
                items = [t for t in items if t["priority"] == q.priority]

            items_sorted = sorted(items, key=lambda t: (t["created_at"], t["id"]), reverse=True)

            # Return copies to avoid external mutation
            return [t.copy() for t in items_sorted]


# PUBLIC_INTERFACE
@lru_cache(maxsize=1)
def get_repository() -> Repository:
    """
    Return the process-wide repository configured in settings.
    - memory: InMemoryRepository
    - sqlite: SQLiteRepository
    """
    settings = get_settings()
    if settings.persistence_backend == "sqlite":
        from .db import SQLiteRepository

        return SQLiteRepository(settings.sqlite_db_path)
    return InMemoryRepository()

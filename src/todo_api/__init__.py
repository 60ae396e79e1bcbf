"""
FastAPI Todo Backend package.

The handler functions are the programmatic surface of the service; the HTTP
app lives in ``todo_api.main`` (imported on demand, since building it
configures logging).
"""

from .errors import TodoError, TodoNotFoundError  # noqa: F401
from .handlers import (  # noqa: F401
    create_todo,
    delete_todo,
    filter_todos,
    get_todo_by_id,
    get_todo_stats,
    get_todos,
    update_todo,
)
from .models import Priority  # noqa: F401

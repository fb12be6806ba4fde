"""Todo management with a time-limited recycle bin."""

from .exceptions import NotFoundError, PersistenceError, TodoError, ValidationError
from .lifecycle import DEFAULT_RETENTION, TodoLifecycleManager
from .models import TodoFilter, TodoItem
from .repository import TodoRepository
from .stores import UNSET, ActiveSet, RecycleSet

__all__ = [
    "ActiveSet",
    "DEFAULT_RETENTION",
    "NotFoundError",
    "PersistenceError",
    "RecycleSet",
    "TodoError",
    "TodoFilter",
    "TodoItem",
    "TodoLifecycleManager",
    "TodoRepository",
    "UNSET",
    "ValidationError",
]

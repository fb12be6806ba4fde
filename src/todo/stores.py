"""In-memory task sets.

Both sets are identifier-keyed and keep insertion order for listing. They
hold no persistence logic: the lifecycle manager loads them from storage,
mutates them, and saves them back inside one transaction.
"""

from __future__ import annotations

import uuid
from dataclasses import replace
from datetime import datetime
from typing import Any, Callable, Dict, Iterable, Iterator, List, Optional

from .exceptions import NotFoundError
from .models import TodoItem

UNSET: Any = object()


class _TodoSet:
    location = "active"

    def __init__(self, items: Iterable[TodoItem] = ()) -> None:
        self._items: Dict[str, TodoItem] = {}
        for item in items:
            self._put(item)

    def __len__(self) -> int:
        return len(self._items)

    def __contains__(self, todo_id: object) -> bool:
        return todo_id in self._items

    def __iter__(self) -> Iterator[TodoItem]:
        return iter(list(self._items.values()))

    def _put(self, item: TodoItem) -> None:
        if item.id in self._items:
            raise ValueError(f"duplicate todo id in {self.location} set: {item.id}")
        self._items[item.id] = item

    def get(self, todo_id: str) -> TodoItem:
        try:
            return self._items[todo_id]
        except KeyError:
            raise NotFoundError(todo_id, self.location) from None

    def remove(self, todo_id: str) -> TodoItem:
        """Detach and return the record so the caller can transfer it."""
        try:
            return self._items.pop(todo_id)
        except KeyError:
            raise NotFoundError(todo_id, self.location) from None

    def list(self) -> List[TodoItem]:
        return list(self._items.values())


class ActiveSet(_TodoSet):
    """Live tasks."""

    location = "active"

    def insert(
        self,
        title: str,
        *,
        now: datetime,
        due_date: Optional[str] = None,
        category: Optional[str] = None,
    ) -> TodoItem:
        item = TodoItem(
            id=str(uuid.uuid4()),
            title=title,
            created_at=now,
            due_date=due_date,
            category=category,
        )
        self._put(item)
        return item

    def add(self, item: TodoItem) -> TodoItem:
        """Append an existing record (restore path)."""
        if item.is_recycled:
            raise ValueError(f"todo {item.id} still carries deleted_at")
        self._put(item)
        return item

    def update(
        self,
        todo_id: str,
        *,
        now: datetime,
        title: Optional[str] = None,
        completed: Optional[bool] = None,
        due_date: Any = UNSET,
        category: Any = UNSET,
    ) -> TodoItem:
        item = self.get(todo_id)
        changes: Dict[str, Any] = {"updated_at": now}
        if title is not None:
            changes["title"] = title
        if completed is not None:
            changes["completed"] = completed
        if due_date is not UNSET:
            changes["due_date"] = due_date
        if category is not UNSET:
            changes["category"] = category
        updated = replace(item, **changes)
        self._items[todo_id] = updated
        return updated


class RecycleSet(_TodoSet):
    """Soft-deleted tasks waiting for purge."""

    location = "recycled"

    def _put(self, item: TodoItem) -> None:
        if not item.is_recycled:
            raise ValueError(f"todo {item.id} has no deleted_at")
        super()._put(item)

    def insert(self, item: TodoItem) -> TodoItem:
        self._put(item)
        return item

    def replace_where(self, keep: Callable[[TodoItem], bool]) -> List[TodoItem]:
        """Keep the records matching ``keep``; return the discarded ones."""
        kept: Dict[str, TodoItem] = {}
        discarded: List[TodoItem] = []
        for todo_id, item in self._items.items():
            if keep(item):
                kept[todo_id] = item
            else:
                discarded.append(item)
        self._items = kept
        return discarded

"""Recycle-bin lifecycle for todos.

The manager is the only writer of the active and recycled sets. Every public
operation loads both sets, mutates them in memory and saves them back inside
a single storage transaction while holding the manager lock, so a delete,
restore or sweep never interleaves with another operation.

Retention boundary: a recycled task whose age (``now - deleted_at``) is
greater than or equal to the retention window is purged; only tasks strictly
younger than the window survive a sweep.
"""

from __future__ import annotations

import contextlib
import logging
import threading
from dataclasses import replace
from datetime import date, datetime, timedelta, timezone
from typing import Any, Callable, Iterator, List, Optional, Protocol, Sequence, Tuple

from .exceptions import ValidationError
from .models import TodoFilter, TodoItem
from .stores import UNSET, ActiveSet, RecycleSet

logger = logging.getLogger(__name__)

DEFAULT_RETENTION = timedelta(days=30)


class TodoStorage(Protocol):
    def transaction(self) -> contextlib.AbstractContextManager: ...

    def load_active(self) -> Sequence[TodoItem]: ...

    def save_active(self, items: Sequence[TodoItem]) -> None: ...

    def load_recycled(self) -> Sequence[TodoItem]: ...

    def save_recycled(self, items: Sequence[TodoItem]) -> None: ...


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


def _clean_title(title: Optional[str]) -> str:
    cleaned = (title or "").strip()
    if not cleaned:
        raise ValidationError("title must not be empty")
    return cleaned


def _clean_due_date(due_date: Optional[str]) -> Optional[str]:
    if due_date is None or not str(due_date).strip():
        return None
    try:
        return date.fromisoformat(str(due_date).strip()).isoformat()
    except ValueError:
        raise ValidationError(f"invalid due date (expected YYYY-MM-DD): {due_date}") from None


def _clean_category(category: Optional[str]) -> Optional[str]:
    if category is None:
        return None
    cleaned = category.strip()
    if not cleaned or cleaned.lower() == "none":
        return None
    return cleaned


class TodoLifecycleManager:
    """Mediates every transition between the active set and the recycle bin."""

    def __init__(
        self,
        storage: TodoStorage,
        *,
        retention: timedelta = DEFAULT_RETENTION,
        clock: Callable[[], datetime] = utcnow,
        sweep_on_view: bool = True,
    ) -> None:
        if retention <= timedelta(0):
            raise ValidationError("retention must be positive")
        self._storage = storage
        self.retention = retention
        self.clock = clock
        self.sweep_on_view = sweep_on_view
        self._lock = threading.RLock()

    @contextlib.contextmanager
    def _session(self, *, write: bool = True) -> Iterator[Tuple[ActiveSet, RecycleSet]]:
        with self._lock, self._storage.transaction():
            active = ActiveSet(self._storage.load_active())
            recycled = RecycleSet(self._storage.load_recycled())
            yield active, recycled
            if write:
                self._storage.save_active(active.list())
                self._storage.save_recycled(recycled.list())

    # ---- active tasks ----

    def create(
        self,
        title: str,
        due_date: Optional[str] = None,
        category: Optional[str] = None,
    ) -> TodoItem:
        title = _clean_title(title)
        due_date = _clean_due_date(due_date)
        category = _clean_category(category)
        with self._session() as (active, _):
            item = active.insert(title, now=self.clock(), due_date=due_date, category=category)
        logger.info("Created todo id=%s", item.id)
        return item

    def get(self, todo_id: str) -> TodoItem:
        with self._session(write=False) as (active, _):
            return active.get(todo_id)

    def list_active(
        self,
        status: TodoFilter = TodoFilter.ALL,
        category: Optional[str] = None,
        due_date: Optional[str] = None,
    ) -> List[TodoItem]:
        status = TodoFilter(status)
        category = _clean_category(category)
        due_date = _clean_due_date(due_date)
        with self._session(write=False) as (active, _):
            items = active.list()

        if status is TodoFilter.COMPLETED:
            items = [item for item in items if item.completed]
        elif status is TodoFilter.ACTIVE:
            items = [item for item in items if not item.completed]
        if category is not None:
            items = [item for item in items if item.category == category]
        if due_date is not None:
            items = [item for item in items if item.due_date == due_date]
        return items

    def dates_with_tasks(self) -> List[str]:
        with self._session(write=False) as (active, _):
            return sorted({item.due_date for item in active if item.due_date})

    def edit(
        self,
        todo_id: str,
        *,
        title: Optional[str] = None,
        completed: Optional[bool] = None,
        due_date: Any = UNSET,
        category: Any = UNSET,
    ) -> TodoItem:
        """Update fields in place. ``None`` clears due date / category; UNSET leaves them."""
        if title is not None:
            title = _clean_title(title)
        if due_date is not UNSET:
            due_date = _clean_due_date(due_date)
        if category is not UNSET:
            category = _clean_category(category)

        with self._session() as (active, _):
            return active.update(
                todo_id,
                now=self.clock(),
                title=title,
                completed=completed,
                due_date=due_date,
                category=category,
            )

    def toggle_complete(self, todo_id: str) -> TodoItem:
        with self._session() as (active, _):
            current = active.get(todo_id)
            return active.update(todo_id, now=self.clock(), completed=not current.completed)

    # ---- recycle bin ----

    def delete(self, todo_id: str) -> TodoItem:
        """Move a task into the recycle bin."""
        with self._session() as (active, recycled):
            item = active.remove(todo_id)
            recycled_item = replace(item, deleted_at=self.clock(), restored_at=None)
            recycled.insert(recycled_item)
        logger.info("Moved todo id=%s to recycle bin", todo_id)
        return recycled_item

    def restore(self, todo_id: str) -> TodoItem:
        """Move a task from the recycle bin back to the active set."""
        with self._session() as (active, recycled):
            item = recycled.remove(todo_id)
            restored = replace(item, deleted_at=None, restored_at=self.clock())
            active.add(restored)
        logger.info("Restored todo id=%s", todo_id)
        return restored

    def purge_one(self, todo_id: str) -> TodoItem:
        """Permanently delete one recycled task. Irreversible."""
        with self._session() as (_, recycled):
            item = recycled.remove(todo_id)
        logger.info("Permanently deleted todo id=%s", todo_id)
        return item

    def empty_bin(self) -> int:
        with self._session() as (_, recycled):
            removed = recycled.replace_where(lambda item: False)
        logger.info("Emptied recycle bin removed=%d", len(removed))
        return len(removed)

    def list_recycled(self) -> List[TodoItem]:
        """Recycle bin view; expired entries are swept first when sweep_on_view is set."""
        with self._session(write=self.sweep_on_view) as (_, recycled):
            if self.sweep_on_view:
                self._expire(recycled, self.clock(), self.retention)
            return recycled.list()

    def sweep(
        self,
        now: Optional[datetime] = None,
        retention: Optional[timedelta] = None,
    ) -> int:
        """Discard recycled tasks aged at least ``retention``; return the count."""
        now = now if now is not None else self.clock()
        window = retention if retention is not None else self.retention
        if window <= timedelta(0):
            raise ValidationError("retention must be positive")

        with self._session() as (_, recycled):
            return self._expire(recycled, now, window)

    @staticmethod
    def _expire(recycled: RecycleSet, now: datetime, window: timedelta) -> int:
        if now.tzinfo is None:
            now = now.replace(tzinfo=timezone.utc)
        cutoff = now - window
        removed = recycled.replace_where(lambda item: item.deleted_at > cutoff)
        if removed:
            logger.info(
                "Swept recycle bin removed=%d cutoff=%s",
                len(removed),
                cutoff.isoformat(),
            )
        else:
            logger.debug("Swept recycle bin, nothing expired (cutoff=%s)", cutoff.isoformat())
        return len(removed)

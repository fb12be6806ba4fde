"""Dependency helpers shared across FastAPI routes."""

from __future__ import annotations

import logging
from datetime import date
from functools import lru_cache
from pathlib import Path
from typing import Optional

from src.task_tracker.config import Config
from src.task_tracker.logger import setup_logger
from src.task_tracker.sweeper import RecycleBinSweeper
from src.todo import TodoItem, TodoLifecycleManager, TodoRepository

from .schemas import TodoResponse

logger = logging.getLogger(__name__)

config = Config.from_yaml()
setup_logger(log_level=config.log_level, log_file=config.log_file)


@lru_cache(maxsize=1)
def get_lifecycle_manager() -> TodoLifecycleManager:
    """Singleton TodoLifecycleManager over the configured SQLite store.

    TASK_TRACKER_DB_PATH wins over the configured path.
    """
    db_path = TodoRepository.env_db_path() or config.resolve_db_path()
    repository = TodoRepository(db_path=Path(db_path))
    return TodoLifecycleManager(
        repository,
        retention=config.recycle_bin.retention,
        sweep_on_view=config.recycle_bin.sweep_on_view,
    )


@lru_cache(maxsize=1)
def get_sweeper() -> Optional[RecycleBinSweeper]:
    """Lazily create and start the background sweeper (None when disabled)."""
    interval = config.recycle_bin.sweep_interval_seconds
    if interval < 1:
        logger.info("Background recycle bin sweep disabled")
        return None
    sweeper = RecycleBinSweeper(get_lifecycle_manager(), interval_seconds=interval)
    sweeper.start()
    return sweeper


def serialize_todo(item: TodoItem) -> TodoResponse:
    """Convert domain TodoItem to API response."""
    due_date_value = None
    if item.due_date:
        try:
            due_date_value = date.fromisoformat(item.due_date)
        except ValueError:
            due_date_value = None
    return TodoResponse(
        id=item.id,
        title=item.title,
        completed=item.completed,
        due_date=due_date_value,
        category=item.category,
        created_at=item.created_at,
        updated_at=item.updated_at,
        deleted_at=item.deleted_at,
        restored_at=item.restored_at,
    )

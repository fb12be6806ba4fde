from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from enum import Enum
from typing import Optional


class TodoFilter(str, Enum):
    """一覧表示のフィルタ（フィルタタブ相当）"""

    ALL = "all"
    ACTIVE = "active"
    COMPLETED = "completed"


@dataclass(slots=True)
class TodoItem:
    """タスク1件の表現。

    ``deleted_at`` is set only while the item sits in the recycle bin;
    ``restored_at`` records the most recent restore and is cleared again on
    the next delete.
    """

    id: str
    title: str
    created_at: datetime
    completed: bool = False
    due_date: Optional[str] = None  # YYYY-MM-DD
    category: Optional[str] = None
    updated_at: Optional[datetime] = None
    deleted_at: Optional[datetime] = None
    restored_at: Optional[datetime] = None

    @property
    def is_recycled(self) -> bool:
        return self.deleted_at is not None

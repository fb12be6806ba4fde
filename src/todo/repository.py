from __future__ import annotations

import contextlib
import logging
import os
import sqlite3
import threading
from datetime import datetime, timezone
from pathlib import Path
from typing import Iterable, Iterator, List, Optional

from .exceptions import PersistenceError
from .models import TodoItem

logger = logging.getLogger(__name__)

ACTIVE_TABLE = "todo_items"
RECYCLED_TABLE = "recycled_items"
ENV_DB_PATH = "TASK_TRACKER_DB_PATH"
BUSY_TIMEOUT_SECONDS = 30.0

_COLUMNS = (
    "id",
    "position",
    "title",
    "completed",
    "due_date",
    "category",
    "created_at",
    "updated_at",
    "deleted_at",
    "restored_at",
)


def _to_text(value: Optional[datetime]) -> Optional[str]:
    return value.isoformat() if value is not None else None


def _from_text(value: Optional[str]) -> Optional[datetime]:
    if not value:
        return None
    parsed = datetime.fromisoformat(value)
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed


class TodoRepository:
    """SQLiteベースのタスク永続化。

    Active and recycled tasks live in two tables of the same database. Each
    ``save_*`` call replaces the whole table; ``position`` keeps list order.
    Loads and saves issued inside :meth:`transaction` share one connection
    and are committed together, so a task moved between the two tables is
    never persisted half-way, even when several processes share the file.
    """

    def __init__(self, db_path: Optional[Path] = None):
        root = Path(__file__).resolve().parents[2]
        default_path = root / "data" / "task_tracker.db"
        env_path = self.env_db_path()
        if db_path:
            self.db_path = Path(db_path)
        elif env_path:
            self.db_path = Path(env_path)
        else:
            self.db_path = default_path
        self._local = threading.local()
        self.initialize()

    @staticmethod
    def env_db_path() -> Optional[str]:
        return os.getenv(ENV_DB_PATH) or None

    def _connect(self) -> sqlite3.Connection:
        # トランザクションは transaction() で明示的に開始する
        conn = sqlite3.connect(self.db_path, timeout=BUSY_TIMEOUT_SECONDS, isolation_level=None)
        conn.row_factory = sqlite3.Row
        return conn

    def initialize(self) -> None:
        """データベースとテーブルを作成（存在しない場合のみ）"""
        try:
            self.db_path.parent.mkdir(parents=True, exist_ok=True)
            with contextlib.closing(self._connect()) as conn:
                for table in (ACTIVE_TABLE, RECYCLED_TABLE):
                    conn.execute(
                        f"""
                        CREATE TABLE IF NOT EXISTS {table} (
                            id TEXT PRIMARY KEY,
                            position INTEGER NOT NULL,
                            title TEXT NOT NULL,
                            completed INTEGER NOT NULL DEFAULT 0,
                            due_date TEXT,
                            category TEXT,
                            created_at TEXT NOT NULL,
                            updated_at TEXT,
                            deleted_at TEXT,
                            restored_at TEXT
                        )
                        """
                    )
                    conn.execute(
                        f"CREATE INDEX IF NOT EXISTS idx_{table}_position ON {table}(position)"
                    )
                conn.commit()
        except (OSError, sqlite3.Error) as exc:
            raise PersistenceError(f"Failed to initialize {self.db_path}: {exc}") from exc
        logger.debug("TodoRepository ready db=%s", self.db_path)

    @contextlib.contextmanager
    def transaction(self) -> Iterator[None]:
        """Group loads and saves into one commit; nested calls join the outer one.

        The write lock is taken before the first load (``BEGIN IMMEDIATE``), so
        another connection to the same file waits until this one commits.
        """
        if getattr(self._local, "conn", None) is not None:
            yield
            return

        try:
            conn = self._connect()
        except sqlite3.Error as exc:
            raise PersistenceError(f"Failed to open {self.db_path}: {exc}") from exc
        try:
            conn.execute("BEGIN IMMEDIATE")
        except sqlite3.Error as exc:
            conn.close()
            raise PersistenceError(f"Failed to lock {self.db_path}: {exc}") from exc

        self._local.conn = conn
        try:
            yield
            conn.commit()
        except sqlite3.Error as exc:
            conn.rollback()
            raise PersistenceError(f"Transaction failed on {self.db_path}: {exc}") from exc
        except BaseException:
            conn.rollback()
            raise
        finally:
            self._local.conn = None
            conn.close()

    @contextlib.contextmanager
    def _cursor(self) -> Iterator[sqlite3.Connection]:
        conn = getattr(self._local, "conn", None)
        if conn is not None:
            try:
                yield conn
            except sqlite3.Error as exc:
                raise PersistenceError(f"Storage error on {self.db_path}: {exc}") from exc
            return

        with self.transaction():
            yield self._local.conn

    @staticmethod
    def _row_to_item(row: sqlite3.Row) -> TodoItem:
        return TodoItem(
            id=row["id"],
            title=row["title"],
            completed=bool(row["completed"]),
            due_date=row["due_date"],
            category=row["category"],
            created_at=_from_text(row["created_at"]),
            updated_at=_from_text(row["updated_at"]),
            deleted_at=_from_text(row["deleted_at"]),
            restored_at=_from_text(row["restored_at"]),
        )

    @staticmethod
    def _item_to_row(position: int, item: TodoItem) -> tuple:
        return (
            item.id,
            position,
            item.title,
            int(item.completed),
            item.due_date,
            item.category,
            _to_text(item.created_at),
            _to_text(item.updated_at),
            _to_text(item.deleted_at),
            _to_text(item.restored_at),
        )

    def _load(self, table: str) -> List[TodoItem]:
        with self._cursor() as conn:
            rows = conn.execute(f"SELECT * FROM {table} ORDER BY position ASC").fetchall()
        return [self._row_to_item(row) for row in rows]

    def _save(self, table: str, items: Iterable[TodoItem]) -> None:
        rows = [self._item_to_row(position, item) for position, item in enumerate(items)]
        placeholders = ", ".join("?" for _ in _COLUMNS)
        with self._cursor() as conn:
            conn.execute(f"DELETE FROM {table}")
            conn.executemany(
                f"INSERT INTO {table} ({', '.join(_COLUMNS)}) VALUES ({placeholders})",
                rows,
            )

    def load_active(self) -> List[TodoItem]:
        return self._load(ACTIVE_TABLE)

    def save_active(self, items: Iterable[TodoItem]) -> None:
        self._save(ACTIVE_TABLE, items)

    def load_recycled(self) -> List[TodoItem]:
        return self._load(RECYCLED_TABLE)

    def save_recycled(self, items: Iterable[TodoItem]) -> None:
        self._save(RECYCLED_TABLE, items)

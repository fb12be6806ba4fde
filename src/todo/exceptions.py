"""Todo管理のカスタム例外定義

Lifecycle manager, storage and the request layers (HTTP / CLI) all raise and
catch these; nothing else crosses the module boundary.
"""

from __future__ import annotations


class TodoError(Exception):
    """Todo管理の基底例外"""

    pass


class NotFoundError(TodoError):
    """指定IDのタスクが対象の集合に存在しない"""

    def __init__(self, todo_id: str, location: str = "active") -> None:
        self.todo_id = todo_id
        self.location = location
        if location == "recycled":
            message = f"Recycled todo not found: {todo_id}"
        else:
            message = f"Todo not found: {todo_id}"
        super().__init__(message)


class ValidationError(TodoError):
    """入力値エラー（空タイトル、不正な期限日など）"""

    pass


class PersistenceError(TodoError):
    """ストレージの読み書きエラー"""

    pass

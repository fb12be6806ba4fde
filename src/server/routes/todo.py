"""Todo and recycle bin endpoints."""

from __future__ import annotations

import asyncio
import logging
from datetime import date
from typing import Any, List, Optional

from fastapi import FastAPI, HTTPException

from src.todo import UNSET, NotFoundError, PersistenceError, TodoFilter, ValidationError

from ..dependencies import get_lifecycle_manager, serialize_todo
from ..schemas import (
    DatesResponse,
    SweepResponse,
    TodoCreateRequest,
    TodoResponse,
    TodoUpdateRequest,
)

logger = logging.getLogger(__name__)


async def _run(action: str, method: str, *args: Any, **kwargs: Any) -> Any:
    """Run a manager call off the event loop and map domain errors to HTTP errors.

    The manager is resolved inside the mapping so storage setup failures
    surface as a logged 500 as well.
    """
    try:
        func = getattr(get_lifecycle_manager(), method)
        return await asyncio.to_thread(func, *args, **kwargs)
    except NotFoundError as exc:
        raise HTTPException(status_code=404, detail=str(exc)) from exc
    except ValidationError as exc:
        raise HTTPException(status_code=422, detail=str(exc)) from exc
    except PersistenceError as exc:
        logger.exception("Storage failure while trying to %s: %s", action, exc)
        raise HTTPException(status_code=500, detail=f"Failed to {action}") from exc
    except Exception as exc:
        logger.exception("Failed to %s: %s", action, exc)
        raise HTTPException(status_code=500, detail=f"Failed to {action}") from exc


def register_todo_routes(app: FastAPI) -> None:
    """Register todo CRUD and recycle bin endpoints."""

    @app.get("/api/todos", response_model=List[TodoResponse])
    async def list_todos(
        status: TodoFilter = TodoFilter.ALL,
        category: Optional[str] = None,
        due_date: Optional[date] = None,
    ) -> List[TodoResponse]:
        """List active todos in insertion order."""
        todos = await _run(
            "list todos",
            "list_active",
            status,
            category,
            due_date.isoformat() if due_date else None,
        )
        return [serialize_todo(todo) for todo in todos]

    @app.post("/api/todos", response_model=TodoResponse, status_code=201)
    async def create_todo(request: TodoCreateRequest) -> TodoResponse:
        """Create a new todo."""
        todo = await _run(
            "create todo",
            "create",
            request.title,
            request.due_date.isoformat() if request.due_date else None,
            request.category,
        )
        return serialize_todo(todo)

    @app.get("/api/todos/dates", response_model=DatesResponse)
    async def list_due_dates() -> DatesResponse:
        """Due dates that have at least one active todo."""
        dates = await _run("list due dates", "dates_with_tasks")
        return DatesResponse(dates=[date.fromisoformat(value) for value in dates])

    @app.get("/api/todos/recycled", response_model=List[TodoResponse])
    async def list_recycled() -> List[TodoResponse]:
        """Recycle bin contents; expired entries are swept before listing."""
        todos = await _run("list recycled todos", "list_recycled")
        return [serialize_todo(todo) for todo in todos]

    @app.delete("/api/todos/recycled", response_model=SweepResponse)
    async def empty_recycle_bin() -> SweepResponse:
        """Permanently delete everything in the recycle bin."""
        removed = await _run("empty recycle bin", "empty_bin")
        return SweepResponse(
            message=f"Emptied recycle bin. Removed {removed} items.",
            removed_count=removed,
        )

    @app.delete("/api/todos/cleanup", response_model=SweepResponse)
    async def cleanup_recycle_bin() -> SweepResponse:
        """Purge recycled todos older than the retention window."""
        removed = await _run("clean up recycle bin", "sweep")
        return SweepResponse(
            message=f"Cleaned up recycle bin. Removed {removed} items.",
            removed_count=removed,
        )

    @app.get("/api/todos/{todo_id}", response_model=TodoResponse)
    async def get_todo(todo_id: str) -> TodoResponse:
        return serialize_todo(await _run("get todo", "get", todo_id))

    @app.patch("/api/todos/{todo_id}", response_model=TodoResponse)
    async def update_todo(todo_id: str, request: TodoUpdateRequest) -> TodoResponse:
        """Update an existing todo."""
        payload = request.model_dump(exclude_unset=True)
        if "due_date" in payload:
            due_date = payload["due_date"].isoformat() if payload["due_date"] else None
        else:
            due_date = UNSET
        todo = await _run(
            "update todo",
            "edit",
            todo_id,
            title=payload.get("title"),
            completed=payload.get("completed"),
            due_date=due_date,
            category=payload["category"] if "category" in payload else UNSET,
        )
        return serialize_todo(todo)

    @app.patch("/api/todos/{todo_id}/toggle", response_model=TodoResponse)
    async def toggle_todo(todo_id: str) -> TodoResponse:
        return serialize_todo(await _run("toggle todo", "toggle_complete", todo_id))

    @app.patch("/api/todos/{todo_id}/recycle", response_model=TodoResponse)
    async def recycle_todo(todo_id: str) -> TodoResponse:
        """Move a todo to the recycle bin."""
        return serialize_todo(await _run("recycle todo", "delete", todo_id))

    @app.patch("/api/todos/{todo_id}/restore", response_model=TodoResponse)
    async def restore_todo(todo_id: str) -> TodoResponse:
        """Restore a todo from the recycle bin."""
        return serialize_todo(await _run("restore todo", "restore", todo_id))

    @app.delete("/api/todos/{todo_id}", response_model=TodoResponse)
    async def purge_todo(todo_id: str) -> TodoResponse:
        """Permanently delete a todo that is in the recycle bin."""
        return serialize_todo(await _run("permanently delete todo", "purge_one", todo_id))

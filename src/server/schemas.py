"""Pydantic schemas for the FastAPI server."""

from __future__ import annotations

from datetime import date, datetime
from typing import Optional

from pydantic import BaseModel, Field


class HealthResponse(BaseModel):
    """Response for health check endpoint."""

    status: str


class TodoCreateRequest(BaseModel):
    """Request body for creating a todo."""

    title: str = Field(..., description="Short task text (must not be blank)")
    due_date: Optional[date] = Field(default=None, description="Due date (YYYY-MM-DD)")
    category: Optional[str] = Field(default=None, description="Category label, e.g. home")


class TodoUpdateRequest(BaseModel):
    """Partial update; omitted fields stay unchanged, null clears due_date/category."""

    title: Optional[str] = None
    due_date: Optional[date] = None
    category: Optional[str] = None
    completed: Optional[bool] = None


class TodoResponse(BaseModel):
    """Serialized todo item."""

    id: str
    title: str
    completed: bool
    due_date: Optional[date] = None
    category: Optional[str] = None
    created_at: datetime
    updated_at: Optional[datetime] = None
    deleted_at: Optional[datetime] = None
    restored_at: Optional[datetime] = None


class SweepResponse(BaseModel):
    """Result of a recycle bin cleanup."""

    message: str
    removed_count: int


class DatesResponse(BaseModel):
    """Due dates that have at least one active todo."""

    dates: list[date]

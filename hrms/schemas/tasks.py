"""Schemas for the task board and work logs."""

from datetime import date, datetime
from typing import Literal, Optional

from pydantic import Field, field_validator

from .base import CamelModel, strip_required

Priority = Literal["low", "medium", "high"]


class TaskCreate(CamelModel):
    title: str = Field(..., max_length=255)
    description: Optional[str] = None
    assigned_to: str
    priority: Priority = "medium"
    due_date: Optional[date] = None

    @field_validator("title")
    @classmethod
    def required_text(cls, v: str) -> str:
        return strip_required(v)


class TaskUpdate(CamelModel):
    title: Optional[str] = Field(None, max_length=255)
    description: Optional[str] = None
    assigned_to: Optional[str] = None
    priority: Optional[Priority] = None
    due_date: Optional[date] = None


class TaskStatusUpdate(CamelModel):
    status: str


class TaskResponse(CamelModel):
    id: str
    title: str
    description: Optional[str] = None
    assigned_to: str
    assignee_name: Optional[str] = None
    assigned_by: Optional[str] = None
    priority: str
    due_date: Optional[date] = None
    status: str
    created_at: datetime
    updated_at: Optional[datetime] = None


class BoardColumn(CamelModel):
    status: str
    label: str
    tasks: list[TaskResponse]


class TaskBoardResponse(CamelModel):
    view: str
    columns: list[BoardColumn]


class WorkLogCreate(CamelModel):
    hours_spent: float = Field(..., gt=0, le=24)
    summary: str
    log_date: Optional[date] = None

    @field_validator("summary")
    @classmethod
    def required_text(cls, v: str) -> str:
        return strip_required(v)


class WorkLogResponse(CamelModel):
    id: str
    task_id: str
    employee_id: str
    log_date: date
    hours_spent: float
    summary: str
    created_at: datetime

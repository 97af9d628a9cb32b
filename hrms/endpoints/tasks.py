"""Task board endpoints."""

import structlog
from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from hrms.config.database import get_db
from hrms.schemas.base import ListResponse
from hrms.schemas.employees import EmployeeResponse
from hrms.schemas.tasks import (
    TaskBoardResponse,
    TaskCreate,
    TaskResponse,
    TaskStatusUpdate,
    TaskUpdate,
    WorkLogCreate,
    WorkLogResponse,
)
from hrms.services.rbac import MANAGER_ROLES, SessionContext, require_employee, require_role
from hrms.services.tasks import VIEW_MY, TaskService, group_by_column, task_row

logger = structlog.get_logger()
router = APIRouter()


@router.get("", response_model=TaskBoardResponse)
async def get_board(
    view: str = Query(VIEW_MY, description="my_tasks or team_tasks"),
    db: Session = Depends(get_db),
    ctx: SessionContext = Depends(require_employee),
):
    """Tasks grouped into board columns."""
    tasks = TaskService(db).board(ctx, view)
    return TaskBoardResponse(view=view, columns=group_by_column(tasks))


@router.get("/assignees", response_model=ListResponse[EmployeeResponse])
async def list_assignees(
    db: Session = Depends(get_db),
    ctx: SessionContext = Depends(require_role(MANAGER_ROLES)),
):
    employees = TaskService(db).assignable_employees(ctx)
    return ListResponse[EmployeeResponse](
        data=[EmployeeResponse.model_validate(e) for e in employees],
        total=len(employees),
    )


@router.post("", response_model=TaskResponse, status_code=201)
async def create_task(
    request: TaskCreate,
    db: Session = Depends(get_db),
    ctx: SessionContext = Depends(require_role(MANAGER_ROLES)),
):
    return TaskResponse(**task_row(TaskService(db).create(request, ctx)))


@router.put("/{task_id}", response_model=TaskResponse)
async def update_task(
    task_id: str,
    request: TaskUpdate,
    db: Session = Depends(get_db),
    ctx: SessionContext = Depends(require_role(MANAGER_ROLES)),
):
    return TaskResponse(**task_row(TaskService(db).update(task_id, request, ctx)))


@router.patch("/{task_id}/status", response_model=TaskResponse)
async def move_task(
    task_id: str,
    request: TaskStatusUpdate,
    db: Session = Depends(get_db),
    ctx: SessionContext = Depends(require_employee),
):
    """Drag a card to another column."""
    return TaskResponse(**task_row(TaskService(db).move(task_id, request.status, ctx)))


@router.post("/{task_id}/work-logs", response_model=WorkLogResponse, status_code=201)
async def log_work(
    task_id: str,
    request: WorkLogCreate,
    db: Session = Depends(get_db),
    ctx: SessionContext = Depends(require_employee),
):
    """Log hours; a pending task moves to ongoing."""
    return WorkLogResponse.model_validate(TaskService(db).log_work(task_id, request, ctx))


@router.get("/{task_id}/work-logs", response_model=ListResponse[WorkLogResponse])
async def list_work_logs(
    task_id: str,
    db: Session = Depends(get_db),
    ctx: SessionContext = Depends(require_employee),
):
    logs = TaskService(db).work_logs(task_id, ctx)
    return ListResponse[WorkLogResponse](
        data=[WorkLogResponse.model_validate(log) for log in logs],
        total=len(logs),
    )

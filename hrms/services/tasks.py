"""Task board operations and work logging."""

from typing import Optional

import structlog
from sqlalchemy.orm import Session, joinedload

from hrms.middleware.error_handler import ForbiddenError, NotFoundError, ValidationAPIError
from hrms.models import Employee, Task, WorkLog
from hrms.models.base import utcnow
from hrms.schemas.tasks import TaskCreate, TaskUpdate, WorkLogCreate
from hrms.services.rbac import SessionContext, scope_query
from hrms.services.workflow import TASK_COLUMNS, TaskStatus, validate_task_transition

logger = structlog.get_logger()

VIEW_MY = "my_tasks"
VIEW_TEAM = "team_tasks"


def task_row(task: Task) -> dict:
    return {
        "id": task.id,
        "title": task.title,
        "description": task.description,
        "assigned_to": task.assigned_to,
        "assignee_name": task.assignee.full_name if task.assignee else None,
        "assigned_by": task.assigned_by,
        "priority": task.priority,
        "due_date": task.due_date,
        "status": task.status,
        "created_at": task.created_at,
        "updated_at": task.updated_at,
    }


def group_by_column(tasks: list[Task]) -> list[dict]:
    columns = []
    for status, label in TASK_COLUMNS.items():
        columns.append({
            "status": status.value,
            "label": label,
            "tasks": [task_row(t) for t in tasks if t.status == status.value],
        })
    return columns


class TaskService:
    def __init__(self, db: Session):
        self.db = db

    def get(self, task_id: str, ctx: SessionContext, lock: bool = False) -> Task:
        query = self.db.query(Task).filter(Task.id == task_id)
        if lock:
            query = query.with_for_update()
        task = query.first()
        if not task or not ctx.can_see_employee(task.assigned_to):
            raise NotFoundError("Task", task_id)
        return task

    def _check_assignee(self, employee_id: str, ctx: SessionContext) -> None:
        employee = (
            self.db.query(Employee)
            .filter(Employee.id == employee_id, Employee.status == "active")
            .first()
        )
        if not employee or not ctx.can_see_employee(employee.id):
            raise ValidationAPIError("Assignee is not an active member of your team", field="assigned_to")

    def assignable_employees(self, ctx: SessionContext) -> list[Employee]:
        query = self.db.query(Employee).filter(Employee.status == "active")
        return scope_query(query, Employee.id, ctx).order_by(Employee.first_name).all()

    def board(self, ctx: SessionContext, view: str = VIEW_MY) -> list[Task]:
        query = self.db.query(Task).options(joinedload(Task.assignee))
        if view == VIEW_TEAM:
            if not ctx.has_role("team_manager"):
                raise ForbiddenError("Team view requires a manager role")
            query = scope_query(query, Task.assigned_to, ctx)
        elif view == VIEW_MY:
            query = query.filter(Task.assigned_to == ctx.employee_id)
        else:
            raise ValidationAPIError(f"Unknown view '{view}'", field="view")
        return query.order_by(Task.due_date.is_(None), Task.due_date, Task.created_at.desc()).all()

    def create(self, data: TaskCreate, ctx: SessionContext) -> Task:
        self._check_assignee(data.assigned_to, ctx)
        task = Task(
            title=data.title,
            description=data.description,
            assigned_to=data.assigned_to,
            assigned_by=ctx.employee_id,
            priority=data.priority,
            due_date=data.due_date,
            status=TaskStatus.PENDING.value,
        )
        self.db.add(task)
        self.db.commit()
        self.db.refresh(task)
        logger.info("Task created", task_id=task.id, assigned_to=task.assigned_to, by=ctx.employee_id)
        return task

    def update(self, task_id: str, data: TaskUpdate, ctx: SessionContext) -> Task:
        task = self.get(task_id, ctx, lock=True)
        changes = data.model_dump(exclude_unset=True)
        if "assigned_to" in changes:
            self._check_assignee(changes["assigned_to"], ctx)
        if "title" in changes and not (changes["title"] or "").strip():
            raise ValidationAPIError("Title cannot be empty", field="title")
        for key, value in changes.items():
            setattr(task, key, value)
        self.db.commit()
        self.db.refresh(task)
        return task

    def move(self, task_id: str, status: str, ctx: SessionContext) -> Task:
        """Move a card to another column (assignee or a manager of the assignee)."""
        task = self.get(task_id, ctx, lock=True)
        if task.assigned_to != ctx.employee_id and not ctx.has_role("team_manager"):
            raise ForbiddenError("Only the assignee or a manager can move this task")
        target = validate_task_transition(task.status, status)
        previous = task.status
        task.status = target.value
        self.db.commit()
        self.db.refresh(task)
        logger.info("Task moved", task_id=task_id, from_status=previous, to_status=task.status)
        return task

    def log_work(self, task_id: str, data: WorkLogCreate, ctx: SessionContext) -> WorkLog:
        """Append a work log; the first log on a pending task starts it."""
        task = self.get(task_id, ctx, lock=True)
        if task.assigned_to != ctx.employee_id:
            raise ForbiddenError("Only the assignee can log work on this task")

        log = WorkLog(
            task_id=task.id,
            employee_id=ctx.employee_id,
            log_date=data.log_date or utcnow().date(),
            hours_spent=data.hours_spent,
            summary=data.summary,
        )
        self.db.add(log)
        if task.status == TaskStatus.PENDING.value:
            task.status = validate_task_transition(task.status, TaskStatus.ONGOING.value).value
        self.db.commit()
        self.db.refresh(log)
        logger.info("Work logged", task_id=task_id, hours=data.hours_spent, task_status=task.status)
        return log

    def work_logs(self, task_id: str, ctx: SessionContext) -> list[WorkLog]:
        task = self.get(task_id, ctx)
        return (
            self.db.query(WorkLog)
            .filter(WorkLog.task_id == task.id)
            .order_by(WorkLog.created_at.desc())
            .all()
        )

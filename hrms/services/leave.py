"""Leave requests and their single review."""

from datetime import date
from typing import Optional

import structlog
from sqlalchemy import or_
from sqlalchemy.orm import Session, joinedload

from hrms.middleware.error_handler import ForbiddenError, NotFoundError
from hrms.models import Employee, LeaveRequest
from hrms.models.base import utcnow
from hrms.schemas.attendance import LeaveCreate
from hrms.services.rbac import SessionContext, scope_query
from hrms.services.workflow import LeaveStatus, parse_status, validate_leave_transition

logger = structlog.get_logger()

RECENT_REQUESTS_LIMIT = 5


def leave_day_count(start: date, end: date) -> int:
    """Inclusive number of calendar days covered by a leave request."""
    return abs((end - start).days) + 1


def leave_row(request: LeaveRequest) -> dict:
    employee = request.employee
    return {
        "id": request.id,
        "employee_id": request.employee_id,
        "employee_name": employee.full_name if employee else None,
        "employee_code": employee.employee_code if employee else None,
        "leave_type": request.leave_type,
        "start_date": request.start_date,
        "end_date": request.end_date,
        "days": leave_day_count(request.start_date, request.end_date),
        "reason": request.reason,
        "status": request.status,
        "manager_comment": request.manager_comment,
        "reviewed_by": request.reviewed_by,
        "reviewed_at": request.reviewed_at,
        "created_at": request.created_at,
    }


class LeaveService:
    def __init__(self, db: Session):
        self.db = db

    def submit(self, employee_id: str, data: LeaveCreate) -> LeaveRequest:
        request = LeaveRequest(
            employee_id=employee_id,
            leave_type=data.leave_type,
            start_date=data.start_date,
            end_date=data.end_date,
            reason=data.reason,
            status=LeaveStatus.PENDING.value,
        )
        self.db.add(request)
        self.db.commit()
        self.db.refresh(request)
        logger.info(
            "Leave requested",
            leave_id=request.id,
            employee_id=employee_id,
            days=leave_day_count(data.start_date, data.end_date),
        )
        return request

    def recent_for(self, employee_id: str, limit: int = RECENT_REQUESTS_LIMIT) -> list[LeaveRequest]:
        return (
            self.db.query(LeaveRequest)
            .options(joinedload(LeaveRequest.employee))
            .filter(LeaveRequest.employee_id == employee_id)
            .order_by(LeaveRequest.created_at.desc())
            .limit(limit)
            .all()
        )

    def list_requests(
        self,
        ctx: SessionContext,
        status: Optional[str] = None,
        search: Optional[str] = None,
    ) -> list[LeaveRequest]:
        query = self.db.query(LeaveRequest).join(Employee, LeaveRequest.employee_id == Employee.id)
        query = scope_query(query, LeaveRequest.employee_id, ctx)
        if status and status != "all":
            query = query.filter(LeaveRequest.status == parse_status(LeaveStatus, status).value)
        if search:
            term = f"%{search.strip()}%"
            query = query.filter(
                or_(
                    Employee.first_name.ilike(term),
                    Employee.last_name.ilike(term),
                    Employee.employee_code.ilike(term),
                    LeaveRequest.leave_type.ilike(term),
                )
            )
        return query.order_by(LeaveRequest.created_at.desc()).all()

    def review(
        self,
        leave_id: str,
        decision: str,
        ctx: SessionContext,
        comment: Optional[str] = None,
    ) -> LeaveRequest:
        request = (
            self.db.query(LeaveRequest)
            .filter(LeaveRequest.id == leave_id)
            .with_for_update()
            .first()
        )
        if not request or not ctx.can_see_employee(request.employee_id):
            raise NotFoundError("Leave request", leave_id)
        if request.employee_id == ctx.employee_id:
            raise ForbiddenError("You cannot review your own leave request")

        target = validate_leave_transition(request.status, decision)
        request.status = target.value
        request.manager_comment = comment
        request.reviewed_by = ctx.employee_id
        request.reviewed_at = utcnow()
        self.db.commit()
        self.db.refresh(request)

        logger.info("Leave reviewed", leave_id=leave_id, status=request.status, reviewer=ctx.employee_id)
        return request

    def on_leave_count(self, day: date) -> int:
        return (
            self.db.query(LeaveRequest.employee_id)
            .filter(
                LeaveRequest.status == LeaveStatus.APPROVED.value,
                LeaveRequest.start_date <= day,
                LeaveRequest.end_date >= day,
            )
            .distinct()
            .count()
        )

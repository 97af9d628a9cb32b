"""Leave request endpoints."""

from typing import Optional

import structlog
from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from hrms.config.database import get_db
from hrms.schemas.attendance import LeaveCreate, LeaveResponse, LeaveReview
from hrms.schemas.base import ListResponse
from hrms.services.leave import LeaveService, leave_row
from hrms.services.rbac import MANAGER_ROLES, SessionContext, require_employee, require_role

logger = structlog.get_logger()
router = APIRouter()


def leave_list(requests) -> ListResponse[LeaveResponse]:
    return ListResponse[LeaveResponse](
        data=[LeaveResponse(**leave_row(r)) for r in requests],
        total=len(requests),
    )


@router.post("", response_model=LeaveResponse, status_code=201)
async def submit_leave(
    request: LeaveCreate,
    db: Session = Depends(get_db),
    ctx: SessionContext = Depends(require_employee),
):
    """Submit a leave request for the caller; it starts pending."""
    return LeaveResponse(**leave_row(LeaveService(db).submit(ctx.employee_id, request)))


@router.get("/mine", response_model=ListResponse[LeaveResponse])
async def my_recent_leave(db: Session = Depends(get_db), ctx: SessionContext = Depends(require_employee)):
    """The caller's most recent requests."""
    return leave_list(LeaveService(db).recent_for(ctx.employee_id))


@router.get("", response_model=ListResponse[LeaveResponse])
async def list_leave_requests(
    status: Optional[str] = Query(None, description="pending, approved, rejected or all"),
    search: Optional[str] = Query(None, description="Match name, code or leave type"),
    db: Session = Depends(get_db),
    ctx: SessionContext = Depends(require_role(MANAGER_ROLES)),
):
    return leave_list(LeaveService(db).list_requests(ctx, status, search))


@router.post("/{leave_id}/review", response_model=LeaveResponse)
async def review_leave(
    leave_id: str,
    request: LeaveReview,
    db: Session = Depends(get_db),
    ctx: SessionContext = Depends(require_role(MANAGER_ROLES)),
):
    """Approve or reject a pending request. A request is reviewed once."""
    result = LeaveService(db).review(leave_id, request.decision, ctx, request.comment)
    return LeaveResponse(**leave_row(result))

"""Attendance endpoints: clock in/out and the daily report."""

from datetime import date
from typing import Optional

import structlog
from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from hrms.config.database import get_db
from hrms.models import Employee
from hrms.models.base import utcnow
from hrms.schemas.attendance import AttendanceResponse
from hrms.schemas.base import ListResponse
from hrms.services.attendance import AttendanceService, attendance_row
from hrms.services.rbac import MANAGER_ROLES, SessionContext, require_employee, require_role

logger = structlog.get_logger()
router = APIRouter()


def my_row(db: Session, ctx: SessionContext, service: AttendanceService) -> AttendanceResponse:
    employee = db.query(Employee).filter(Employee.id == ctx.employee_id).one()
    today = utcnow().date()
    return AttendanceResponse(**attendance_row(employee, today, service.today(employee.id, today)))


@router.get("/today", response_model=AttendanceResponse)
async def get_today(db: Session = Depends(get_db), ctx: SessionContext = Depends(require_employee)):
    """Caller's attendance for today."""
    return my_row(db, ctx, AttendanceService(db))


@router.post("/clock-in", response_model=AttendanceResponse)
async def clock_in(db: Session = Depends(get_db), ctx: SessionContext = Depends(require_employee)):
    service = AttendanceService(db)
    service.clock_in(ctx.employee_id)
    return my_row(db, ctx, service)


@router.post("/clock-out", response_model=AttendanceResponse)
async def clock_out(db: Session = Depends(get_db), ctx: SessionContext = Depends(require_employee)):
    service = AttendanceService(db)
    service.clock_out(ctx.employee_id)
    return my_row(db, ctx, service)


@router.get("", response_model=ListResponse[AttendanceResponse])
async def daily_report(
    day: Optional[date] = Query(None, alias="date", description="Report date, defaults to today"),
    search: Optional[str] = Query(None, description="Match name or employee code"),
    db: Session = Depends(get_db),
    ctx: SessionContext = Depends(require_role(MANAGER_ROLES)),
):
    """Every visible active employee for the day, absent where nothing was recorded."""
    rows = AttendanceService(db).daily_report(ctx, day or utcnow().date(), search)
    return ListResponse[AttendanceResponse](
        data=[AttendanceResponse(**row) for row in rows],
        total=len(rows),
    )

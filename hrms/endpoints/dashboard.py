"""HR dashboard endpoint."""

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from hrms.config.database import get_db
from hrms.schemas.employees import DashboardStats
from hrms.services.employees import EmployeeService
from hrms.services.rbac import RECRUITER_ROLES, SessionContext, require_role

router = APIRouter()


@router.get("/stats", response_model=DashboardStats)
async def get_stats(
    db: Session = Depends(get_db),
    ctx: SessionContext = Depends(require_role(RECRUITER_ROLES)),
):
    """Headcount, attendance, leave and hiring counters for today."""
    return DashboardStats(**EmployeeService(db).dashboard_stats())

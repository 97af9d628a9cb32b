"""API endpoints for the HRMS portal."""

from fastapi import APIRouter

from .auth import router as auth_router
from .health import router as health_router
from .applications import router as applications_router
from .public_applications import router as public_applications_router
from .public_onboarding import router as public_onboarding_router
from .employees import router as employees_router
from .documents import router as documents_router
from .attendance import router as attendance_router
from .leave import router as leave_router
from .tasks import router as tasks_router
from .dashboard import router as dashboard_router

# Create main API router
api_router = APIRouter()

# Include all routers
api_router.include_router(auth_router, prefix="/auth", tags=["Authentication"])
api_router.include_router(health_router, prefix="/health", tags=["Health"])
api_router.include_router(applications_router, prefix="/applications", tags=["Recruitment"])
api_router.include_router(public_applications_router, prefix="/public/applications", tags=["Careers"])
api_router.include_router(public_onboarding_router, prefix="/public/onboarding", tags=["Onboarding"])
api_router.include_router(employees_router, prefix="/employees", tags=["Employees"])
api_router.include_router(documents_router, prefix="/documents", tags=["Documents"])
api_router.include_router(attendance_router, prefix="/attendance", tags=["Attendance"])
api_router.include_router(leave_router, prefix="/leave-requests", tags=["Leave"])
api_router.include_router(tasks_router, prefix="/tasks", tags=["Tasks"])
api_router.include_router(dashboard_router, prefix="/dashboard", tags=["Dashboard"])

__all__ = ["api_router"]

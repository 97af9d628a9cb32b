"""SQLAlchemy ORM models for the HRMS.

All models are imported here to ensure they're registered with Base.metadata
before any database operations.
"""

# Import base first
from hrms.config.database import Base

# Identity
from .users import User, AuthToken

# Recruitment
from .applications import Application, ApplicationStatusChange
from .onboarding import Onboarding

# Workforce
from .employees import Employee
from .attendance import Attendance
from .leave_requests import LeaveRequest
from .tasks import Task, WorkLog

# Documents
from .documents import GeneratedDocument

__all__ = [
    "Base",
    "User",
    "AuthToken",
    "Application",
    "ApplicationStatusChange",
    "Onboarding",
    "Employee",
    "Attendance",
    "LeaveRequest",
    "Task",
    "WorkLog",
    "GeneratedDocument",
]

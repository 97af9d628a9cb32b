"""Session context, role checks and data scoping for API endpoints."""

from dataclasses import dataclass, field
from enum import Enum
from typing import Callable, Optional

import structlog
from fastapi import Depends, Request
from sqlalchemy.orm import Query, Session

from hrms.config.database import get_db
from hrms.middleware.error_handler import AuthenticationError, ForbiddenError
from hrms.models import Employee

logger = structlog.get_logger()


class HrmsRole(str, Enum):
    SUPER_ADMIN = "super_admin"
    HR_ADMIN = "hr_admin"
    TEAM_MANAGER = "team_manager"
    EMPLOYEE = "employee"


# Role hierarchy - higher roles include permissions of lower roles
ROLE_HIERARCHY = {
    "super_admin": ["super_admin", "hr_admin", "team_manager", "employee"],
    "hr_admin": ["hr_admin", "team_manager", "employee"],
    "team_manager": ["team_manager", "employee"],
    "employee": ["employee"],
}

# Row visibility per role
SCOPE_SELF = "self"
SCOPE_TEAM = "team"
SCOPE_ALL = "all"

ROLE_SCOPE = {
    "super_admin": SCOPE_ALL,
    "hr_admin": SCOPE_ALL,
    "team_manager": SCOPE_TEAM,
    "employee": SCOPE_SELF,
}

RECRUITER_ROLES = ["hr_admin"]
MANAGER_ROLES = ["team_manager"]


@dataclass
class SessionContext:
    """Identity resolved once per request and shared by every endpoint."""

    user_id: str
    email: str
    employee_id: Optional[str] = None
    role: Optional[str] = None
    team_ids: list[str] = field(default_factory=list)

    @property
    def scope(self) -> str:
        return ROLE_SCOPE.get(self.role, SCOPE_SELF)

    def has_role(self, required_role: str) -> bool:
        return required_role in ROLE_HIERARCHY.get(self.role, [])

    def visible_employee_ids(self) -> Optional[list[str]]:
        """Employee ids this session may see; None means unrestricted."""
        if self.scope == SCOPE_ALL:
            return None
        ids = [self.employee_id] if self.employee_id else []
        if self.scope == SCOPE_TEAM:
            ids.extend(self.team_ids)
        return ids

    def can_see_employee(self, employee_id: str) -> bool:
        visible = self.visible_employee_ids()
        return visible is None or employee_id in visible


def build_session_context(db: Session, user_id: str, email: str) -> SessionContext:
    """Load the employee record and team membership for an auth user."""
    employee = (
        db.query(Employee)
        .filter(Employee.auth_id == user_id, Employee.status == "active")
        .first()
    )
    if not employee:
        return SessionContext(user_id=user_id, email=email)

    team_ids = []
    if employee.hrms_role == HrmsRole.TEAM_MANAGER.value:
        team_ids = [
            row.id
            for row in db.query(Employee.id).filter(Employee.manager_id == employee.id).all()
        ]
    return SessionContext(
        user_id=user_id,
        email=email,
        employee_id=employee.id,
        role=employee.hrms_role,
        team_ids=team_ids,
    )


def get_session_context(request: Request, db: Session = Depends(get_db)) -> SessionContext:
    """
    Dependency returning the current SessionContext.

    Usage:
        @router.get("/me")
        def get_me(ctx: SessionContext = Depends(get_session_context)):
            return ctx
    """
    cached = getattr(request.state, "session_context", None)
    if cached is not None:
        return cached

    user = getattr(request.state, "user", None)
    if not user:
        raise AuthenticationError()

    ctx = build_session_context(db, user.get("sub"), user.get("email"))
    request.state.session_context = ctx
    return ctx


def require_employee(ctx: SessionContext = Depends(get_session_context)) -> SessionContext:
    """Dependency for self-service endpoints that need an employee record."""
    if not ctx.employee_id:
        raise ForbiddenError("No active employee record for this account")
    return ctx


def require_role(allowed_roles: list[str]) -> Callable:
    """
    Dependency that requires the session to hold one of the roles (or higher).

    Usage:
        @router.post("/admin-only")
        def admin_endpoint(ctx: SessionContext = Depends(require_role(["hr_admin"]))):
            ...
    """
    def check_role(ctx: SessionContext = Depends(get_session_context)) -> SessionContext:
        for role in allowed_roles:
            if ctx.has_role(role):
                return ctx

        logger.warning(
            "Role check failed",
            user=ctx.user_id,
            required=allowed_roles,
            user_role=ctx.role,
        )
        raise ForbiddenError()

    return check_role


def scope_query(query: Query, employee_column, ctx: SessionContext) -> Query:
    """Restrict a query to the rows the session may see."""
    visible = ctx.visible_employee_ids()
    if visible is None:
        return query
    return query.filter(employee_column.in_(visible))

"""Employee provisioning from an approved application."""

import re
import secrets
from datetime import date
from typing import Any, Optional

import structlog
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from hrms.config.settings import settings
from hrms.integrations.ses import SESError, SESService
from hrms.middleware.error_handler import (
    ConflictError,
    ExternalServiceError,
    PreconditionFailedError,
    ValidationAPIError,
)
from hrms.models import Employee, User
from hrms.services import email_templates
from hrms.services.letters import title_case
from hrms.services.passwords import generate_temporary_password, hash_password
from hrms.services.recruitment import RecruitmentService
from hrms.services.workflow import ApplicationStatus, NdaStatus

logger = structlog.get_logger()

EMPLOYEE_CODE_ATTEMPTS = 10


def split_name(full_name: str) -> tuple[str, str]:
    parts = title_case(full_name).split()
    if not parts:
        return "Employee", ""
    return parts[0], " ".join(parts[1:])


def generate_employee_code(db: Session) -> str:
    """EMP-#### with a random 4-digit suffix, regenerated on collision."""
    for _ in range(EMPLOYEE_CODE_ATTEMPTS):
        code = f"EMP-{secrets.randbelow(9000) + 1000}"
        if not db.query(Employee.id).filter(Employee.employee_code == code).first():
            return code
    raise ConflictError("Could not allocate a unique employee code, try again")


def login_email_for(first_name: str, employee_code: str) -> str:
    """Synthetic login identifier: first name + code digits at the company domain."""
    local = re.sub(r"[^a-z0-9]", "", first_name.lower()) or "employee"
    digits = employee_code.split("-")[-1]
    return f"{local}.{digits}@{settings.EMPLOYEE_EMAIL_DOMAIN}"


def provision_employee_account(
    db: Session,
    *,
    email: str,
    password: str,
    employee_code: str,
    first_name: str,
    last_name: str,
    designation: str,
    photo_url: Optional[str] = None,
    application_id: Optional[str] = None,
    personal_email: Optional[str] = None,
    joining_date: Optional[date] = None,
) -> dict[str, Any]:
    """
    Create the auth account and employee row in one transaction.

    Returns {"success": True, "user_id", "employee_id"} or
    {"success": False, "error"}; never raises for expected failures so the
    caller decides how to surface them.
    """
    if db.query(User.id).filter(User.email == email).first():
        return {"success": False, "error": "User already registered"}

    try:
        user = User(email=email, password_hash=hash_password(password), provider="email")
        db.add(user)
        db.flush()
        employee = Employee(
            auth_id=user.id,
            application_id=application_id,
            employee_code=employee_code,
            first_name=first_name,
            last_name=last_name,
            email=email,
            personal_email=personal_email,
            designation=designation,
            joining_date=joining_date,
            photo_url=photo_url,
            hrms_role="employee",
            status="active",
        )
        db.add(employee)
        db.commit()
    except IntegrityError as e:
        db.rollback()
        logger.warning("Employee provisioning rejected", email=email, error=str(e.orig))
        return {"success": False, "error": f"Could not create employee: {e.orig}"}
    except ValidationAPIError as e:
        db.rollback()
        return {"success": False, "error": e.message}

    logger.info("Employee account provisioned", employee_id=employee.id, code=employee_code)
    return {"success": True, "user_id": user.id, "employee_id": employee.id}


class ProvisioningService:
    """Turns an approved candidate with a signed NDA into an employee."""

    def __init__(self, db: Session, mailer: Optional[SESService] = None):
        self.db = db
        self.mailer = mailer
        self.recruitment = RecruitmentService(db)

    def can_provision(self, application) -> bool:
        record = application.onboarding
        return (
            application.status == ApplicationStatus.APPROVED.value
            and record is not None
            and record.nda_status == NdaStatus.SIGNED.value
        )

    async def provision(self, application_id: str, user_id: str, confirm: bool) -> dict[str, Any]:
        """
        Create the account, email the credentials, then mark the candidate hired.

        The employee row for an application is created once. If the
        credentials email failed on an earlier attempt the application is
        still approved, and a retry issues a new temporary password to that
        employee instead of creating another one.
        """
        if not confirm:
            raise ValidationAPIError("Employee creation must be confirmed", field="confirm")

        application = self.recruitment.get_application(application_id)
        if application.status != ApplicationStatus.APPROVED.value:
            raise PreconditionFailedError("Only approved candidates can be provisioned")
        record = application.onboarding
        if record is None or record.nda_status != NdaStatus.SIGNED.value:
            raise PreconditionFailedError("The candidate has not signed the NDA yet")

        temporary_password = generate_temporary_password()
        employee = self.db.query(Employee).filter(Employee.application_id == application.id).first()
        if employee is None:
            employee = self._create_employee(application, record, temporary_password)
        else:
            self._reissue_password(employee, temporary_password)

        content = email_templates.employee_credentials(
            application.full_name, employee.employee_code, employee.email, temporary_password
        )
        recipient = record.personal_email or application.email
        try:
            await self.mailer.send_email(to=recipient, subject=content.subject, html_body=content.html)
        except SESError as e:
            logger.error(
                "Employee created but credentials email failed",
                application_id=application.id,
                employee_id=employee.id,
                error=str(e),
            )
            raise ExternalServiceError(
                "email", f"Employee created, but the credentials email failed: {e}. Retry to send new credentials"
            ) from e

        application = self.recruitment.get_application(application_id, lock=True)
        self.recruitment.apply_action(application, "hire", user_id, f"Employee {employee.employee_code} created")
        self.db.commit()

        return {
            "employee_id": employee.id,
            "employee_code": employee.employee_code,
            "login_email": employee.email,
            "status": application.status,
        }

    def _create_employee(self, application, record, temporary_password: str) -> Employee:
        first_name, last_name = split_name(application.full_name)
        employee_code = generate_employee_code(self.db)
        result = provision_employee_account(
            self.db,
            email=login_email_for(first_name, employee_code),
            password=temporary_password,
            employee_code=employee_code,
            first_name=first_name,
            last_name=last_name,
            designation=title_case(record.custom_position or application.position),
            photo_url=record.photo_url,
            application_id=application.id,
            personal_email=record.personal_email or application.email,
            joining_date=record.joining_date,
        )
        if not result.get("success"):
            raise ExternalServiceError("provisioning", result.get("error") or "Provisioning failed")
        return self.db.get(Employee, result["employee_id"])

    def _reissue_password(self, employee: Employee, temporary_password: str) -> None:
        if employee.user is None:
            raise ConflictError(
                "An employee without a login account already exists for this application",
                details={"employee_id": employee.id},
            )
        employee.user.password_hash = hash_password(temporary_password)
        self.db.commit()
        logger.info("Temporary password reissued", employee_id=employee.id, code=employee.employee_code)

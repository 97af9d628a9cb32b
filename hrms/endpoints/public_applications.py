"""Public careers endpoint (no authentication required)."""

import secrets
import time
from typing import Optional

import structlog
from fastapi import APIRouter, Depends, File, Form, UploadFile
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from hrms.config.database import get_db
from hrms.config.settings import settings
from hrms.integrations.s3 import S3Error, StorageService, get_storage_service
from hrms.integrations.ses import SESError, SESService, get_email_service
from hrms.middleware.error_handler import ConflictError, ExternalServiceError, ValidationAPIError
from hrms.models import Application, Employee
from hrms.schemas.applications import ApplicationCreate, ApplicationSubmitted
from hrms.services import email_templates
from hrms.services.rbac import HrmsRole

logger = structlog.get_logger()
router = APIRouter()

RESUME_TYPES = {"pdf", "doc", "docx"}


def hr_recipients(db: Session) -> list[str]:
    """Configured HR inboxes plus every active HR or super admin."""
    rows = (
        db.query(Employee.email)
        .filter(
            Employee.status == "active",
            Employee.hrms_role.in_([HrmsRole.HR_ADMIN.value, HrmsRole.SUPER_ADMIN.value]),
        )
        .all()
    )
    return sorted(set(settings.HR_NOTIFICATION_EMAILS) | {row.email for row in rows})


async def notify_new_application(db: Session, mailer: SESService, application: Application) -> None:
    """Acknowledge the candidate and notify HR; failures are logged, not raised."""
    ack = email_templates.application_received(application.full_name, application.position)
    try:
        await mailer.send_email(to=application.email, subject=ack.subject, html_body=ack.html)
    except SESError as e:
        logger.warning("Application acknowledgement failed", application_id=application.id, error=str(e))

    recipients = hr_recipients(db)
    if not recipients:
        return
    notice = email_templates.new_application_notice(
        application.full_name, application.email, application.position, application.university
    )
    try:
        await mailer.send_email(
            to=recipients[0], subject=notice.subject, html_body=notice.html, bcc=recipients[1:] or None
        )
    except SESError as e:
        logger.warning("HR notification failed", application_id=application.id, error=str(e))


@router.post("", response_model=ApplicationSubmitted, status_code=201)
async def submit_application(
    full_name: str = Form(...),
    email: str = Form(...),
    phone: str = Form(...),
    position: str = Form(...),
    university: str = Form(...),
    linkedin_url: Optional[str] = Form(None),
    portfolio_url: Optional[str] = Form(None),
    graduation_year: Optional[int] = Form(None),
    skills: Optional[str] = Form(None),
    motivation: Optional[str] = Form(None),
    resume: UploadFile = File(...),
    db: Session = Depends(get_db),
    storage: StorageService = Depends(get_storage_service),
    mailer: SESService = Depends(get_email_service),
):
    """Careers form submission with resume upload."""
    data = ApplicationCreate(
        full_name=full_name,
        email=email,
        phone=phone,
        position=position,
        university=university,
        linkedin_url=linkedin_url,
        portfolio_url=portfolio_url,
        graduation_year=graduation_year,
        skills=skills,
        motivation=motivation,
    )

    filename = resume.filename or ""
    ext = filename.rsplit(".", 1)[-1].lower() if "." in filename else ""
    if ext not in RESUME_TYPES:
        raise ValidationAPIError("Resume must be a PDF, DOC or DOCX file", field="resume")
    content = await resume.read()
    if not content:
        raise ValidationAPIError("Resume file is empty", field="resume")
    if len(content) > settings.MAX_RESUME_SIZE_MB * 1024 * 1024:
        raise ValidationAPIError(f"Resume must be smaller than {settings.MAX_RESUME_SIZE_MB}MB", field="resume")

    if db.query(Application.id).filter(Application.email == data.email, Application.position == data.position).first():
        raise ConflictError("You have already applied for this position")

    path = f"{int(time.time() * 1000)}_{secrets.token_hex(4)}.{ext}"
    try:
        resume_link = await storage.upload(settings.RESUMES_BUCKET, path, content, resume.content_type)
    except S3Error as e:
        raise ExternalServiceError("storage", str(e)) from e

    application = Application(**data.model_dump(), resume_link=resume_link, status="new")
    db.add(application)
    try:
        db.commit()
    except IntegrityError:
        db.rollback()
        raise ConflictError("You have already applied for this position")
    db.refresh(application)

    logger.info("Application submitted", application_id=application.id, position=application.position)
    await notify_new_application(db, mailer, application)

    return ApplicationSubmitted(id=application.id, message="Application submitted successfully")

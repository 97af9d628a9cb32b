"""Recruitment workflow: status changes, interviews, decisions and offer letters."""

from typing import Optional, Union

import structlog
from sqlalchemy import func, or_
from sqlalchemy.orm import Session

from hrms.config.settings import settings
from hrms.integrations.s3 import S3Error, StorageService
from hrms.integrations.ses import SESError, SESService
from hrms.middleware.error_handler import (
    ExternalServiceError,
    NotFoundError,
    PreconditionFailedError,
    ValidationAPIError,
)
from hrms.models import Application, ApplicationStatusChange, Onboarding
from hrms.schemas.applications import InterviewScheduleRequest
from hrms.services import email_templates
from hrms.services.document_registry import DocumentRegistry
from hrms.services.documents import DocumentError, DocumentGenerator, RenderedDocument
from hrms.services.letters import OfferOptions, default_offer_body, offer_position, resolve_offer_body
from hrms.services.workflow import (
    PLAIN_ACTIONS,
    ApplicationStatus,
    DocType,
    action_for_target,
    parse_status,
    resolve_action,
)

logger = structlog.get_logger()

# Statuses from which an offer letter can be shared
SHAREABLE_STATUSES = {ApplicationStatus.INTERVIEWED.value, ApplicationStatus.APPROVED.value}


def onboarding_link(onboarding_id: str) -> str:
    return f"{settings.FRONTEND_URL.rstrip('/')}/onboarding/{onboarding_id}"


class RecruitmentService:
    """Recruiter-side operations on applications."""

    def __init__(
        self,
        db: Session,
        storage: Optional[StorageService] = None,
        mailer: Optional[SESService] = None,
        generator: Optional[DocumentGenerator] = None,
    ):
        self.db = db
        self.storage = storage
        self.mailer = mailer
        self.generator = generator

    # Queries

    def list_applications(
        self,
        search: Optional[str] = None,
        status: Optional[str] = None,
    ) -> tuple[list[Application], dict[str, int]]:
        """Applications newest first, plus per-status counts over all applications."""
        query = self.db.query(Application)
        if status and status != "all":
            query = query.filter(Application.status == parse_status(ApplicationStatus, status).value)
        if search:
            term = f"%{search.strip()}%"
            query = query.filter(
                or_(
                    Application.full_name.ilike(term),
                    Application.email.ilike(term),
                    Application.position.ilike(term),
                )
            )
        applications = query.order_by(Application.created_at.desc()).all()

        counts = dict(
            self.db.query(Application.status, func.count(Application.id)).group_by(Application.status).all()
        )
        stats = {s.value: counts.get(s.value, 0) for s in ApplicationStatus}
        stats["total"] = sum(counts.values())
        return applications, stats

    def get_application(self, application_id: str, lock: bool = False) -> Application:
        query = self.db.query(Application).filter(Application.id == application_id)
        if lock:
            query = query.with_for_update()
        application = query.first()
        if not application:
            raise NotFoundError("Application", application_id)
        return application

    # Status writes

    def apply_action(
        self,
        application: Application,
        action: str,
        user_id: Optional[str],
        comment: Optional[str] = None,
    ) -> ApplicationStatusChange:
        """Validate and apply a workflow action. Caller commits."""
        target = resolve_action(application.status, action)
        change = ApplicationStatusChange(
            application_id=application.id,
            action=action,
            from_status=application.status,
            to_status=target.value,
            comment=comment,
            user_id=user_id,
        )
        application.status = target.value
        self.db.add(change)

        logger.info(
            "Application status changed",
            application_id=application.id,
            action=action,
            from_status=change.from_status,
            to_status=change.to_status,
            user=user_id,
        )
        return change

    def update_status(
        self,
        application_id: str,
        target: str,
        user_id: str,
        comment: Optional[str] = None,
    ) -> Application:
        """Status change with no side effect (review, shortlist, interviewed, hold, reject)."""
        application = self.get_application(application_id, lock=True)
        action = action_for_target(application.status, target)
        if action not in PLAIN_ACTIONS:
            raise PreconditionFailedError(
                f"Status '{target}' can only be set through the {action.replace('_', ' ')} operation",
                details={"action": action},
            )
        self.apply_action(application, action, user_id, comment)
        self.db.commit()
        self.db.refresh(application)
        return application

    def save_notes(self, application_id: str, notes: str) -> Application:
        application = self.get_application(application_id)
        application.notes = notes
        self.db.commit()
        self.db.refresh(application)
        return application

    async def resume_url(self, application_id: str) -> str:
        application = self.get_application(application_id)
        if not application.resume_link:
            raise NotFoundError("Resume", application_id)
        try:
            return await self.storage.create_signed_url(settings.RESUMES_BUCKET, application.resume_link)
        except S3Error as e:
            raise ExternalServiceError("storage", str(e)) from e

    # Email-gated transitions

    async def _send(self, to: str, content: email_templates.EmailContent) -> str:
        try:
            return await self.mailer.send_email(to=to, subject=content.subject, html_body=content.html)
        except SESError as e:
            raise ExternalServiceError("email", str(e)) from e

    async def schedule_interview(
        self,
        application_id: str,
        request: InterviewScheduleRequest,
        user_id: str,
    ) -> Application:
        """Send the invite; the status advances only if the send succeeds."""
        application = self.get_application(application_id)
        # Validate before any external call
        resolve_action(application.status, "schedule_interview")

        content = email_templates.interview_invite(
            full_name=application.full_name,
            position=application.position,
            interview_date=request.interview_date,
            interview_time=request.interview_time,
            mode=request.mode,
            location=request.location,
            interviewer=request.interviewer,
        )
        await self._send(application.email, content)

        application = self.get_application(application_id, lock=True)
        summary = (
            f"{request.interview_date.isoformat()} {request.interview_time} ({request.mode}) "
            f"at {request.location} with {request.interviewer}"
        )
        self.apply_action(application, "schedule_interview", user_id, summary)
        self.db.commit()
        self.db.refresh(application)
        return application

    async def decide(
        self,
        application_id: str,
        decision: str,
        user_id: str,
        comment: Optional[str] = None,
    ) -> Application:
        """Post-interview decision. Approval emails the candidate before the write."""
        application = self.get_application(application_id)
        resolve_action(application.status, decision)

        if decision == "approve":
            content = email_templates.selection_congratulations(application.full_name, application.position)
            await self._send(application.email, content)

        application = self.get_application(application_id, lock=True)
        self.apply_action(application, decision, user_id, comment)
        self.db.commit()
        self.db.refresh(application)
        return application

    # Offer letter

    def get_onboarding(self, application_id: str) -> Optional[Onboarding]:
        return self.db.query(Onboarding).filter(Onboarding.application_id == application_id).first()

    def ensure_onboarding(self, application: Application) -> Onboarding:
        """Lazily create the single onboarding record for an application."""
        record = (
            self.db.query(Onboarding)
            .filter(Onboarding.application_id == application.id)
            .with_for_update()
            .first()
        )
        if record:
            return record
        record = Onboarding(
            application_id=application.id,
            personal_email=application.email,
            joining_date=OfferOptions().joining_date,
        )
        self.db.add(record)
        self.db.flush()
        logger.info("Onboarding record created", application_id=application.id, onboarding_id=record.id)
        return record

    def save_offer_details(self, application_id: str, changes: dict) -> Onboarding:
        """Write offer edits. Keys missing from ``changes`` keep their saved values."""
        application = self.get_application(application_id)
        if application.status not in SHAREABLE_STATUSES:
            raise PreconditionFailedError("Offer details can be edited once the candidate is interviewed")

        record = self.ensure_onboarding(application)
        if "personal_email" in changes:
            record.personal_email = changes["personal_email"] or record.personal_email or application.email
        if changes.get("joining_date"):
            record.joining_date = changes["joining_date"]
        for key in ("period_count", "period_unit", "letter_type"):
            value = changes.get(key)
            if value is not None:
                setattr(record, key, getattr(value, "value", value))
        if "custom_position" in changes:
            record.custom_position = (changes["custom_position"] or "").strip() or None
        if "offer_letter_body" in changes:
            body = changes["offer_letter_body"]
            record.offer_letter_body = body if body and body.strip() else None
        self.db.commit()
        self.db.refresh(record)
        return record

    def offer_bodies(self, application: Application, record: Optional[Onboarding]) -> tuple[str, str]:
        """(default body, body that would be rendered)."""
        options = OfferOptions.from_onboarding(record)
        default_body = default_offer_body(application, options)
        custom = record.offer_letter_body if record else None
        return default_body, resolve_offer_body(application, options, custom)

    async def preview_offer_letter(self, application_id: str) -> Union[str, RenderedDocument]:
        """
        Signed URL of the current saved letter if there is one,
        otherwise a freshly rendered draft that is never persisted.
        """
        application = self.get_application(application_id)
        registry = DocumentRegistry(self.db, self.storage)
        saved = registry.current_offer_letter(application.id)
        if saved:
            return await registry.signed_url(saved)

        record = self.get_onboarding(application.id)
        options = OfferOptions.from_onboarding(record)
        try:
            return await self.generator.render_offer_letter(
                application,
                options,
                custom_body=record.offer_letter_body if record else None,
                draft=True,
            )
        except DocumentError as e:
            raise ExternalServiceError("documents", str(e)) from e

    async def share_offer_letter(
        self,
        application_id: str,
        changes: dict,
        user_id: str,
        confirm: bool,
    ) -> dict:
        """
        Apply any last edits, render and persist the final letter, email the
        onboarding link, then mark the application approved.
        """
        if not confirm:
            raise ValidationAPIError("Sharing the offer letter must be confirmed", field="confirm")

        record = self.save_offer_details(application_id, changes)
        application = record.application
        options = OfferOptions.from_onboarding(record)

        try:
            document = await self.generator.render_offer_letter(
                application, options, custom_body=record.offer_letter_body
            )
        except DocumentError as e:
            raise ExternalServiceError("documents", str(e)) from e

        registry = DocumentRegistry(self.db, self.storage)
        saved = await registry.save(
            document,
            DocType.OFFER_LETTER,
            candidate_id=application.id,
            issued_by=user_id,
        )

        link = onboarding_link(record.id)
        content = email_templates.offer_letter(application.full_name, offer_position(application, options), link)
        recipient = record.personal_email or application.email
        try:
            await self.mailer.send_email(to=recipient, subject=content.subject, html_body=content.html)
        except SESError as e:
            logger.error("Offer letter saved but email failed", application_id=application.id, error=str(e))
            raise ExternalServiceError("email", f"Letter saved, but the email failed: {e}") from e

        application = self.get_application(application_id, lock=True)
        if application.status != ApplicationStatus.APPROVED.value:
            self.apply_action(application, "approve", user_id, "Offer letter shared")
        self.db.commit()

        logger.info("Offer letter shared", application_id=application.id, document_id=saved.id, to=recipient)
        return {
            "document_id": saved.id,
            "onboarding_id": record.id,
            "onboarding_url": link,
            "status": application.status,
            "email_sent": True,
        }

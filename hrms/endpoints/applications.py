"""Recruitment endpoints: applications, interviews, decisions, offers, provisioning."""

from typing import Optional

import structlog
from fastapi import APIRouter, Depends, Query, Response
from fastapi.responses import RedirectResponse
from sqlalchemy.orm import Session

from hrms.config.database import get_db
from hrms.config.settings import settings
from hrms.integrations.s3 import StorageService, get_storage_service
from hrms.integrations.ses import SESService, get_email_service
from hrms.models import Application, Onboarding
from hrms.schemas.applications import (
    ApplicationDetailResponse,
    ApplicationListResponse,
    ApplicationResponse,
    DecisionRequest,
    InterviewScheduleRequest,
    NotesUpdate,
    StatusChangeResponse,
    StatusUpdate,
)
from hrms.schemas.base import ListResponse, SignedUrlResponse
from hrms.schemas.documents import DocumentResponse
from hrms.schemas.onboarding import (
    OfferDetails,
    OfferDetailsResponse,
    OnboardingSummary,
    ProvisionRequest,
    ProvisionResponse,
    ShareOfferRequest,
    ShareOfferResponse,
)
from hrms.services.document_registry import DocumentRegistry
from hrms.services.documents import DocumentGenerator, get_document_generator
from hrms.services.letters import OfferOptions
from hrms.services.onboarding import current_step
from hrms.services.provisioning import ProvisioningService
from hrms.services.rbac import RECRUITER_ROLES, SessionContext, require_role
from hrms.services.recruitment import RecruitmentService
from hrms.services.workflow import NdaStatus, available_actions

logger = structlog.get_logger()
router = APIRouter()


def build_detail(application: Application) -> ApplicationDetailResponse:
    record = application.onboarding
    nda_signed = record is not None and record.nda_status == NdaStatus.SIGNED.value
    actions = available_actions(application.status, nda_signed)

    onboarding = None
    if record is not None:
        onboarding = OnboardingSummary.model_validate({
            **{c.name: getattr(record, c.name) for c in record.__table__.columns},
            "step": current_step(record),
        })

    return ApplicationDetailResponse(
        **ApplicationResponse.model_validate(application).model_dump(),
        onboarding=onboarding,
        available_actions=actions,
        can_provision="provision_employee" in actions,
        status_history=[StatusChangeResponse.model_validate(c) for c in application.status_changes],
    )


def offer_details_response(
    service: RecruitmentService,
    application: Application,
    record: Optional[Onboarding],
) -> OfferDetailsResponse:
    """Saved offer options, or the defaults when no onboarding record exists yet."""
    default_body, resolved_body = service.offer_bodies(application, record)
    if record is None:
        options = OfferOptions()
        return OfferDetailsResponse(
            onboarding_id=None,
            personal_email=application.email,
            joining_date=options.joining_date,
            period_count=options.period_count,
            period_unit=options.period_unit,
            letter_type=options.letter_type,
            default_body=default_body,
            resolved_body=resolved_body,
        )
    return OfferDetailsResponse(
        onboarding_id=record.id,
        personal_email=record.personal_email,
        joining_date=record.joining_date,
        period_count=record.period_count,
        period_unit=record.period_unit,
        letter_type=record.letter_type,
        custom_position=record.custom_position,
        offer_letter_body=record.offer_letter_body,
        default_body=default_body,
        resolved_body=resolved_body,
    )


@router.get("", response_model=ApplicationListResponse)
async def list_applications(
    search: Optional[str] = Query(None, description="Match name, email or position"),
    status: Optional[str] = Query(None, description="Filter by status"),
    db: Session = Depends(get_db),
    ctx: SessionContext = Depends(require_role(RECRUITER_ROLES)),
):
    """List applications newest first with funnel counts."""
    applications, stats = RecruitmentService(db).list_applications(search, status)
    return ApplicationListResponse(
        data=[ApplicationResponse.model_validate(a) for a in applications],
        total=len(applications),
        stats=stats,
    )


@router.get("/{application_id}", response_model=ApplicationDetailResponse)
async def get_application(
    application_id: str,
    db: Session = Depends(get_db),
    ctx: SessionContext = Depends(require_role(RECRUITER_ROLES)),
):
    """Application with onboarding state and the actions available now."""
    return build_detail(RecruitmentService(db).get_application(application_id))


@router.patch("/{application_id}/status", response_model=ApplicationDetailResponse)
async def update_status(
    application_id: str,
    request: StatusUpdate,
    db: Session = Depends(get_db),
    ctx: SessionContext = Depends(require_role(RECRUITER_ROLES)),
):
    """Move an application along the workflow (side-effect-free steps only)."""
    application = RecruitmentService(db).update_status(application_id, request.status, ctx.user_id, request.comment)
    return build_detail(application)


@router.patch("/{application_id}/notes", response_model=ApplicationDetailResponse)
async def update_notes(
    application_id: str,
    request: NotesUpdate,
    db: Session = Depends(get_db),
    ctx: SessionContext = Depends(require_role(RECRUITER_ROLES)),
):
    return build_detail(RecruitmentService(db).save_notes(application_id, request.notes))


@router.get("/{application_id}/resume", response_model=SignedUrlResponse)
async def get_resume_url(
    application_id: str,
    db: Session = Depends(get_db),
    storage: StorageService = Depends(get_storage_service),
    ctx: SessionContext = Depends(require_role(RECRUITER_ROLES)),
):
    url = await RecruitmentService(db, storage=storage).resume_url(application_id)
    return SignedUrlResponse(url=url, expires_in=settings.SIGNED_URL_TTL_SECONDS)


@router.post("/{application_id}/interview", response_model=ApplicationDetailResponse)
async def schedule_interview(
    application_id: str,
    request: InterviewScheduleRequest,
    db: Session = Depends(get_db),
    mailer: SESService = Depends(get_email_service),
    ctx: SessionContext = Depends(require_role(RECRUITER_ROLES)),
):
    """Email the interview invite; status advances only when the email is sent."""
    application = await RecruitmentService(db, mailer=mailer).schedule_interview(
        application_id, request, ctx.user_id
    )
    return build_detail(application)


@router.post("/{application_id}/decision", response_model=ApplicationDetailResponse)
async def decide(
    application_id: str,
    request: DecisionRequest,
    db: Session = Depends(get_db),
    mailer: SESService = Depends(get_email_service),
    ctx: SessionContext = Depends(require_role(RECRUITER_ROLES)),
):
    """Approve, hold or reject after the interview."""
    application = await RecruitmentService(db, mailer=mailer).decide(
        application_id, request.decision, ctx.user_id, request.comment
    )
    return build_detail(application)


@router.get("/{application_id}/offer", response_model=OfferDetailsResponse)
async def get_offer_details(
    application_id: str,
    db: Session = Depends(get_db),
    ctx: SessionContext = Depends(require_role(RECRUITER_ROLES)),
):
    """Saved offer options plus the default and effective letter bodies. Read only."""
    service = RecruitmentService(db)
    application = service.get_application(application_id)
    return offer_details_response(service, application, service.get_onboarding(application.id))


@router.put("/{application_id}/offer", response_model=OfferDetailsResponse)
async def save_offer_details(
    application_id: str,
    request: OfferDetails,
    db: Session = Depends(get_db),
    ctx: SessionContext = Depends(require_role(RECRUITER_ROLES)),
):
    service = RecruitmentService(db)
    record = service.save_offer_details(application_id, request.model_dump())
    return offer_details_response(service, record.application, record)


@router.get("/{application_id}/offer/preview")
async def preview_offer_letter(
    application_id: str,
    db: Session = Depends(get_db),
    storage: StorageService = Depends(get_storage_service),
    generator: DocumentGenerator = Depends(get_document_generator),
    ctx: SessionContext = Depends(require_role(RECRUITER_ROLES)),
):
    """Redirect to the saved letter, or stream a draft that is not persisted."""
    result = await RecruitmentService(db, storage=storage, generator=generator).preview_offer_letter(application_id)
    if isinstance(result, str):
        return RedirectResponse(url=result, status_code=307)
    return Response(
        content=result.content,
        media_type="application/pdf",
        headers={"Content-Disposition": f'inline; filename="{result.filename}"'},
    )


@router.post("/{application_id}/offer/share", response_model=ShareOfferResponse)
async def share_offer_letter(
    application_id: str,
    request: ShareOfferRequest,
    db: Session = Depends(get_db),
    storage: StorageService = Depends(get_storage_service),
    mailer: SESService = Depends(get_email_service),
    generator: DocumentGenerator = Depends(get_document_generator),
    ctx: SessionContext = Depends(require_role(RECRUITER_ROLES)),
):
    """Generate, store and email the final offer letter with the onboarding link."""
    service = RecruitmentService(db, storage=storage, mailer=mailer, generator=generator)
    result = await service.share_offer_letter(application_id, request.changes(), ctx.user_id, request.confirm)
    return ShareOfferResponse(**result)


@router.get("/{application_id}/documents", response_model=ListResponse[DocumentResponse])
async def list_application_documents(
    application_id: str,
    db: Session = Depends(get_db),
    ctx: SessionContext = Depends(require_role(RECRUITER_ROLES)),
):
    application = RecruitmentService(db).get_application(application_id)
    documents = DocumentRegistry(db, None).list_documents(candidate_id=application.id)
    return ListResponse[DocumentResponse](
        data=[DocumentResponse.model_validate(d) for d in documents],
        total=len(documents),
    )


@router.post("/{application_id}/provision", response_model=ProvisionResponse)
async def provision_employee(
    application_id: str,
    request: ProvisionRequest,
    db: Session = Depends(get_db),
    mailer: SESService = Depends(get_email_service),
    ctx: SessionContext = Depends(require_role(RECRUITER_ROLES)),
):
    """Create the employee account for an approved candidate with a signed NDA."""
    result = await ProvisioningService(db, mailer).provision(application_id, ctx.user_id, request.confirm)
    return ProvisionResponse(**result)

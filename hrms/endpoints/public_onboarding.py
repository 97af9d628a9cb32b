"""Public onboarding wizard endpoints, addressed by onboarding id."""

from typing import Optional

import structlog
from fastapi import APIRouter, Depends, File, Request, Response, UploadFile
from sqlalchemy.orm import Session

from hrms.config.database import get_db
from hrms.integrations.s3 import StorageService, get_storage_service
from hrms.models import Onboarding
from hrms.schemas.onboarding import (
    AcknowledgeRequest,
    AddressRequest,
    NdaClause,
    NdaTextResponse,
    OnboardingState,
)
from hrms.services.documents import DocumentGenerator, get_document_generator
from hrms.services.letters import NDA_TITLE, OfferOptions, nda_clauses, offer_position
from hrms.services.onboarding import OnboardingService, UploadedFile, current_step

logger = structlog.get_logger()
router = APIRouter()


def onboarding_state(record: Onboarding) -> OnboardingState:
    application = record.application
    return OnboardingState(
        onboarding_id=record.id,
        step=current_step(record),
        candidate_name=application.full_name,
        position=offer_position(application, OfferOptions.from_onboarding(record)),
        personal_email=record.personal_email,
        joining_date=record.joining_date,
        residential_address=record.residential_address,
        photo_uploaded=bool(record.photo_url),
        id_proof_uploaded=bool(record.id_proof_url),
        certificates_uploaded=bool(record.certificates_url),
        offer_status=record.offer_status,
        offer_accepted_at=record.offer_accepted_at,
        nda_status=record.nda_status,
        nda_signed_at=record.nda_signed_at,
    )


async def read_upload(upload: Optional[UploadFile]) -> Optional[UploadedFile]:
    if upload is None or not upload.filename:
        return None
    return UploadedFile(
        filename=upload.filename,
        content=await upload.read(),
        content_type=upload.content_type,
    )


@router.get("/{onboarding_id}", response_model=OnboardingState)
async def get_onboarding(onboarding_id: str, db: Session = Depends(get_db)):
    """Wizard state; the step is derived from the saved fields."""
    return onboarding_state(OnboardingService(db).get(onboarding_id))


@router.post("/{onboarding_id}/address", response_model=OnboardingState)
async def save_address(onboarding_id: str, request: AddressRequest, db: Session = Depends(get_db)):
    record = OnboardingService(db).save_address(onboarding_id, request.residential_address)
    return onboarding_state(record)


@router.post("/{onboarding_id}/documents", response_model=OnboardingState)
async def upload_documents(
    onboarding_id: str,
    photo: Optional[UploadFile] = File(None),
    id_proof: Optional[UploadFile] = File(None),
    certificates: Optional[UploadFile] = File(None),
    db: Session = Depends(get_db),
    storage: StorageService = Depends(get_storage_service),
):
    """Photo and ID proof are required, certificates are optional."""
    record = await OnboardingService(db, storage=storage).upload_documents(
        onboarding_id,
        await read_upload(photo),
        await read_upload(id_proof),
        await read_upload(certificates),
    )
    return onboarding_state(record)


@router.get("/{onboarding_id}/offer-letter")
async def view_offer_letter(
    onboarding_id: str,
    db: Session = Depends(get_db),
    generator: DocumentGenerator = Depends(get_document_generator),
):
    document = await OnboardingService(db, generator=generator).preview_offer_letter(onboarding_id)
    return Response(
        content=document.content,
        media_type="application/pdf",
        headers={"Content-Disposition": f'inline; filename="{document.filename}"'},
    )


@router.post("/{onboarding_id}/accept-offer", response_model=OnboardingState)
async def accept_offer(onboarding_id: str, request: AcknowledgeRequest, db: Session = Depends(get_db)):
    return onboarding_state(OnboardingService(db).accept_offer(onboarding_id, request.agreed))


@router.get("/{onboarding_id}/nda", response_model=NdaTextResponse)
async def get_nda_text(onboarding_id: str, db: Session = Depends(get_db)):
    """Clauses shown to the candidate before signing."""
    record = OnboardingService(db).get(onboarding_id)
    return NdaTextResponse(
        title=NDA_TITLE,
        clauses=[NdaClause(heading=h, text=t) for h, t in nda_clauses(record.application.full_name)],
    )


@router.post("/{onboarding_id}/sign-nda", response_model=OnboardingState)
async def sign_nda(
    onboarding_id: str,
    body: AcknowledgeRequest,
    request: Request,
    db: Session = Depends(get_db),
    storage: StorageService = Depends(get_storage_service),
    generator: DocumentGenerator = Depends(get_document_generator),
):
    """Record the signature with the signer's IP address and user agent."""
    forwarded = request.headers.get("X-Forwarded-For")
    ip_address = forwarded.split(",")[0].strip() if forwarded else (request.client.host if request.client else None)
    record = await OnboardingService(db, storage=storage, generator=generator).sign_nda(
        onboarding_id,
        body.agreed,
        ip_address,
        request.headers.get("User-Agent"),
    )
    return onboarding_state(record)

"""Public onboarding wizard keyed by the onboarding record id."""

import time
from dataclasses import dataclass
from typing import Any, Optional

import structlog
from sqlalchemy.orm import Session

from hrms.config.settings import settings
from hrms.integrations.s3 import S3Error, StorageService
from hrms.middleware.error_handler import (
    ConflictError,
    ExternalServiceError,
    NotFoundError,
    PreconditionFailedError,
    ValidationAPIError,
)
from hrms.models import Onboarding
from hrms.models.base import utcnow
from hrms.services.document_registry import DocumentRegistry
from hrms.services.documents import DocumentError, DocumentGenerator, RenderedDocument
from hrms.services.letters import OfferOptions
from hrms.services.workflow import DocType, NdaStatus, OfferStatus

logger = structlog.get_logger()

STEP_ADDRESS = 1
STEP_DOCUMENTS = 2
STEP_OFFER = 3
STEP_NDA = 4
STEP_COMPLETE = 5

PHOTO_TYPES = {"jpg", "jpeg", "png", "webp"}
ID_PROOF_TYPES = {"pdf", "jpg", "jpeg", "png"}
CERTIFICATE_TYPES = {"pdf"}


@dataclass
class UploadedFile:
    """File received from a multipart form."""

    filename: str
    content: bytes
    content_type: Optional[str] = None

    @property
    def extension(self) -> str:
        return self.filename.rsplit(".", 1)[-1].lower() if "." in self.filename else ""


def resolve_step(record: Any) -> int:
    """
    Wizard step implied by an onboarding record's fields.

    NDA signed -> 5, offer accepted -> 4, photo and ID proof -> 3,
    address -> 2, otherwise 1.
    """
    if record.nda_status == NdaStatus.SIGNED.value:
        return STEP_COMPLETE
    if record.offer_status == OfferStatus.ACCEPTED.value:
        return STEP_NDA
    if record.photo_url and record.id_proof_url:
        return STEP_OFFER
    if record.residential_address and record.residential_address.strip():
        return STEP_DOCUMENTS
    return STEP_ADDRESS


def current_step(record: Onboarding) -> int:
    return max(resolve_step(record), record.furthest_step or STEP_ADDRESS)


def validate_upload(upload: UploadedFile, allowed: set[str], field: str) -> None:
    if upload.extension not in allowed:
        raise ValidationAPIError(
            f"Unsupported file type for {field}. Allowed: {', '.join(sorted(allowed))}",
            field=field,
        )
    if not upload.content:
        raise ValidationAPIError(f"{field} file is empty", field=field)
    if len(upload.content) > settings.MAX_UPLOAD_SIZE_MB * 1024 * 1024:
        raise ValidationAPIError(f"{field} exceeds {settings.MAX_UPLOAD_SIZE_MB}MB", field=field)


class OnboardingService:
    """Candidate-side wizard operations."""

    def __init__(
        self,
        db: Session,
        storage: Optional[StorageService] = None,
        generator: Optional[DocumentGenerator] = None,
    ):
        self.db = db
        self.storage = storage
        self.generator = generator

    def get(self, onboarding_id: str, lock: bool = False) -> Onboarding:
        query = self.db.query(Onboarding).filter(Onboarding.id == onboarding_id)
        if lock:
            query = query.with_for_update()
        record = query.first()
        if not record:
            raise NotFoundError("Onboarding", onboarding_id)
        return record

    def _require_step(self, record: Onboarding, step: int) -> None:
        """Reject actions for a step not reached yet or already completed."""
        at = current_step(record)
        if at == STEP_COMPLETE:
            raise ConflictError("Onboarding is already complete")
        if at < step:
            raise PreconditionFailedError(
                "Complete the previous onboarding steps first",
                details={"current_step": at, "requested_step": step},
            )

    def _apply(self, record: Onboarding, updates: dict[str, Any]) -> Onboarding:
        """Write updates only if the derived step does not move backwards."""
        floor = current_step(record)
        for key, value in updates.items():
            setattr(record, key, value)
        new_step = resolve_step(record)
        if new_step < floor:
            self.db.rollback()
            raise ConflictError(
                "Update would move onboarding backwards",
                details={"current_step": floor, "resulting_step": new_step},
            )
        record.furthest_step = max(floor, new_step)
        self.db.commit()
        self.db.refresh(record)
        logger.info("Onboarding updated", onboarding_id=record.id, step=record.furthest_step, fields=list(updates))
        return record

    def save_address(self, onboarding_id: str, address: str) -> Onboarding:
        address = (address or "").strip()
        if not address:
            raise ValidationAPIError("Residential address is required", field="residential_address")
        record = self.get(onboarding_id, lock=True)
        self._require_step(record, STEP_ADDRESS)
        return self._apply(record, {"residential_address": address})

    async def upload_documents(
        self,
        onboarding_id: str,
        photo: Optional[UploadedFile],
        id_proof: Optional[UploadedFile],
        certificates: Optional[UploadedFile] = None,
    ) -> Onboarding:
        """Upload photo, ID proof and optional certificates; record changes only after all succeed."""
        if photo is None:
            raise ValidationAPIError("Photo is required", field="photo")
        if id_proof is None:
            raise ValidationAPIError("ID proof is required", field="id_proof")
        validate_upload(photo, PHOTO_TYPES, "photo")
        validate_upload(id_proof, ID_PROOF_TYPES, "id_proof")
        if certificates is not None:
            validate_upload(certificates, CERTIFICATE_TYPES, "certificates")

        record = self.get(onboarding_id)
        self._require_step(record, STEP_DOCUMENTS)

        stamp = int(time.time() * 1000)
        uploads = [("photo_url", "photo", photo), ("id_proof_url", "id_proof", id_proof)]
        if certificates is not None:
            uploads.append(("certificates_url", "certificates", certificates))

        updates = {}
        for column, prefix, upload in uploads:
            path = f"{record.id}/{prefix}_{stamp}.{upload.extension}"
            try:
                updates[column] = await self.storage.upload(
                    settings.ONBOARDING_BUCKET, path, upload.content, upload.content_type
                )
            except S3Error as e:
                raise ExternalServiceError("storage", str(e)) from e

        record = self.get(onboarding_id, lock=True)
        return self._apply(record, updates)

    async def preview_offer_letter(self, onboarding_id: str) -> RenderedDocument:
        """Offer letter from the default template with the saved offer options."""
        record = self.get(onboarding_id)
        at = current_step(record)
        if at < STEP_OFFER:
            raise PreconditionFailedError(
                "Upload your documents to view the offer letter",
                details={"current_step": at, "requested_step": STEP_OFFER},
            )
        try:
            return await self.generator.render_offer_letter(
                record.application, OfferOptions.from_onboarding(record)
            )
        except DocumentError as e:
            raise ExternalServiceError("documents", str(e)) from e

    def accept_offer(self, onboarding_id: str, agreed: bool) -> Onboarding:
        if not agreed:
            raise ValidationAPIError("You must accept the offer terms to continue", field="agreed")
        record = self.get(onboarding_id, lock=True)
        self._require_step(record, STEP_OFFER)
        if record.offer_status == OfferStatus.ACCEPTED.value:
            raise ConflictError("Offer already accepted")
        return self._apply(
            record,
            {"offer_status": OfferStatus.ACCEPTED.value, "offer_accepted_at": utcnow()},
        )

    async def sign_nda(
        self,
        onboarding_id: str,
        agreed: bool,
        ip_address: Optional[str],
        user_agent: Optional[str],
    ) -> Onboarding:
        """Persist a signed NDA PDF, then mark the NDA signed."""
        if not agreed:
            raise ValidationAPIError("You must agree to the NDA to continue", field="agreed")
        record = self.get(onboarding_id)
        self._require_step(record, STEP_NDA)
        if record.offer_status != OfferStatus.ACCEPTED.value:
            raise PreconditionFailedError("The offer must be accepted before signing the NDA")

        signed_at = utcnow()
        try:
            document = await self.generator.render_nda(record.application, signed_at, ip_address, user_agent)
        except DocumentError as e:
            raise ExternalServiceError("documents", str(e)) from e
        await DocumentRegistry(self.db, self.storage).save(
            document,
            DocType.NDA,
            candidate_id=record.application_id,
        )

        record = self.get(onboarding_id, lock=True)
        return self._apply(
            record,
            {
                "nda_status": NdaStatus.SIGNED.value,
                "nda_signed_at": signed_at,
                "ip_address": ip_address,
                "user_agent": (user_agent or "")[:500] or None,
            },
        )

"""Signed download links for generated documents."""

import structlog
from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from hrms.config.database import get_db
from hrms.config.settings import settings
from hrms.integrations.s3 import StorageService, get_storage_service
from hrms.middleware.error_handler import NotFoundError
from hrms.models import Employee
from hrms.schemas.base import SignedUrlResponse
from hrms.services.document_registry import DocumentRegistry
from hrms.services.rbac import RECRUITER_ROLES, SessionContext, get_session_context

logger = structlog.get_logger()
router = APIRouter()


@router.get("/{document_id}/url", response_model=SignedUrlResponse)
async def get_document_url(
    document_id: str,
    db: Session = Depends(get_db),
    storage: StorageService = Depends(get_storage_service),
    ctx: SessionContext = Depends(get_session_context),
):
    """HR may open any document; employees only their own."""
    registry = DocumentRegistry(db, storage)
    document = registry.get(document_id)

    if not any(ctx.has_role(role) for role in RECRUITER_ROLES):
        owned = False
        if ctx.employee_id:
            employee = db.query(Employee).filter(Employee.id == ctx.employee_id).first()
            owned = document.employee_id == ctx.employee_id or (
                employee is not None
                and employee.application_id is not None
                and document.candidate_id == employee.application_id
            )
        if not owned:
            raise NotFoundError("Document", document_id)

    url = await registry.signed_url(document)
    logger.info("Issued document link", document_id=document.id, doc_type=document.doc_type, user=ctx.user_id)
    return SignedUrlResponse(url=url, expires_in=settings.SIGNED_URL_TTL_SECONDS)

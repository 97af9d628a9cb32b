"""Employee directory, self-service profile and certificates."""

from typing import Optional

import structlog
from fastapi import APIRouter, Depends, File, Query, UploadFile
from sqlalchemy.orm import Session

from hrms.config.database import get_db
from hrms.config.settings import settings
from hrms.integrations.s3 import StorageService, get_storage_service
from hrms.middleware.error_handler import ValidationAPIError
from hrms.schemas.base import ListResponse, SignedUrlResponse
from hrms.schemas.documents import DocumentResponse
from hrms.schemas.employees import EmployeeCreate, EmployeeResponse, EmployeeUpdate, ProfileUpdate
from hrms.services.documents import DocumentGenerator, get_document_generator
from hrms.services.employees import EmployeeService
from hrms.services.onboarding import UploadedFile
from hrms.services.rbac import RECRUITER_ROLES, SessionContext, require_employee, require_role

logger = structlog.get_logger()
router = APIRouter()


def document_list(documents) -> ListResponse[DocumentResponse]:
    return ListResponse[DocumentResponse](
        data=[DocumentResponse.model_validate(d) for d in documents],
        total=len(documents),
    )


@router.get("", response_model=ListResponse[EmployeeResponse])
async def list_employees(
    search: Optional[str] = Query(None, description="Match name, email, code or designation"),
    status: Optional[str] = Query(None, description="active or inactive"),
    db: Session = Depends(get_db),
    ctx: SessionContext = Depends(require_role(RECRUITER_ROLES)),
):
    employees = EmployeeService(db).list_employees(search, status)
    return ListResponse[EmployeeResponse](
        data=[EmployeeResponse.model_validate(e) for e in employees],
        total=len(employees),
    )


@router.post("", response_model=EmployeeResponse, status_code=201)
async def create_employee(
    request: EmployeeCreate,
    db: Session = Depends(get_db),
    ctx: SessionContext = Depends(require_role(RECRUITER_ROLES)),
):
    """Create an employee and their login account directly."""
    return EmployeeResponse.model_validate(EmployeeService(db).create(request))


@router.get("/me", response_model=EmployeeResponse)
async def get_my_profile(
    db: Session = Depends(get_db),
    ctx: SessionContext = Depends(require_employee),
):
    return EmployeeResponse.model_validate(EmployeeService(db).get(ctx.employee_id))


@router.patch("/me", response_model=EmployeeResponse)
async def update_my_profile(
    request: ProfileUpdate,
    db: Session = Depends(get_db),
    ctx: SessionContext = Depends(require_employee),
):
    """Edit contact details on the caller's own profile."""
    return EmployeeResponse.model_validate(EmployeeService(db).update_profile(ctx.employee_id, request))


@router.post("/me/photo", response_model=EmployeeResponse)
async def upload_my_photo(
    photo: UploadFile = File(...),
    db: Session = Depends(get_db),
    storage: StorageService = Depends(get_storage_service),
    ctx: SessionContext = Depends(require_employee),
):
    if not photo.filename:
        raise ValidationAPIError("Photo is required", field="photo")
    upload = UploadedFile(filename=photo.filename, content=await photo.read(), content_type=photo.content_type)
    employee = await EmployeeService(db, storage=storage).upload_photo(ctx.employee_id, upload)
    return EmployeeResponse.model_validate(employee)


@router.get("/me/photo", response_model=SignedUrlResponse)
async def get_my_photo(
    db: Session = Depends(get_db),
    storage: StorageService = Depends(get_storage_service),
    ctx: SessionContext = Depends(require_employee),
):
    service = EmployeeService(db, storage=storage)
    url = await service.photo_url(service.get(ctx.employee_id))
    if not url:
        raise ValidationAPIError("No profile photo uploaded", field="photo")
    return SignedUrlResponse(url=url, expires_in=settings.SIGNED_URL_TTL_SECONDS)


@router.get("/me/documents", response_model=ListResponse[DocumentResponse])
async def list_my_documents(
    db: Session = Depends(get_db),
    ctx: SessionContext = Depends(require_employee),
):
    service = EmployeeService(db)
    return document_list(service.documents(service.get(ctx.employee_id)))


@router.get("/{employee_id}", response_model=EmployeeResponse)
async def get_employee(
    employee_id: str,
    db: Session = Depends(get_db),
    ctx: SessionContext = Depends(require_role(RECRUITER_ROLES)),
):
    return EmployeeResponse.model_validate(EmployeeService(db).get(employee_id))


@router.patch("/{employee_id}", response_model=EmployeeResponse)
async def update_employee(
    employee_id: str,
    request: EmployeeUpdate,
    db: Session = Depends(get_db),
    ctx: SessionContext = Depends(require_role(RECRUITER_ROLES)),
):
    return EmployeeResponse.model_validate(EmployeeService(db).update(employee_id, request))


@router.post("/{employee_id}/certificate", response_model=DocumentResponse, status_code=201)
async def issue_certificate(
    employee_id: str,
    db: Session = Depends(get_db),
    storage: StorageService = Depends(get_storage_service),
    generator: DocumentGenerator = Depends(get_document_generator),
    ctx: SessionContext = Depends(require_role(RECRUITER_ROLES)),
):
    """Generate and store an experience certificate."""
    service = EmployeeService(db, storage=storage, generator=generator)
    document = await service.issue_certificate(employee_id, ctx.user_id)
    return DocumentResponse.model_validate(document)


@router.get("/{employee_id}/documents", response_model=ListResponse[DocumentResponse])
async def list_employee_documents(
    employee_id: str,
    db: Session = Depends(get_db),
    ctx: SessionContext = Depends(require_role(RECRUITER_ROLES)),
):
    service = EmployeeService(db)
    return document_list(service.documents(service.get(employee_id)))

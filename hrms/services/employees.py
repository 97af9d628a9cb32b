"""Employee directory, self-service profile, certificates and dashboard stats."""

import time
from typing import Optional

import structlog
from sqlalchemy import or_
from sqlalchemy.orm import Session

from hrms.config.settings import settings
from hrms.integrations.s3 import S3Error, StorageService
from hrms.middleware.error_handler import ConflictError, ExternalServiceError, NotFoundError, ValidationAPIError
from hrms.models import Application, Attendance, Employee, GeneratedDocument, LeaveRequest, User
from hrms.models.base import utcnow
from hrms.schemas.employees import EmployeeCreate, EmployeeUpdate, ProfileUpdate
from hrms.services.document_registry import DocumentRegistry
from hrms.services.documents import DocumentError, DocumentGenerator
from hrms.services.leave import LeaveService
from hrms.services.onboarding import PHOTO_TYPES, UploadedFile, validate_upload
from hrms.services.passwords import hash_password
from hrms.services.provisioning import generate_employee_code
from hrms.services.workflow import ApplicationStatus, DocType, LeaveStatus

logger = structlog.get_logger()

CLOSED_APPLICATION_STATUSES = {ApplicationStatus.HIRED.value, ApplicationStatus.REJECTED.value}


class EmployeeService:
    def __init__(
        self,
        db: Session,
        storage: Optional[StorageService] = None,
        generator: Optional[DocumentGenerator] = None,
    ):
        self.db = db
        self.storage = storage
        self.generator = generator

    def list_employees(self, search: Optional[str] = None, status: Optional[str] = None) -> list[Employee]:
        query = self.db.query(Employee)
        if status:
            query = query.filter(Employee.status == status)
        if search:
            term = f"%{search.strip()}%"
            query = query.filter(
                or_(
                    Employee.first_name.ilike(term),
                    Employee.last_name.ilike(term),
                    Employee.email.ilike(term),
                    Employee.employee_code.ilike(term),
                    Employee.designation.ilike(term),
                )
            )
        return query.order_by(Employee.created_at.desc()).all()

    def get(self, employee_id: str) -> Employee:
        employee = self.db.query(Employee).filter(Employee.id == employee_id).first()
        if not employee:
            raise NotFoundError("Employee", employee_id)
        return employee

    def _check_manager(self, manager_id: Optional[str], employee_id: Optional[str] = None) -> None:
        if not manager_id:
            return
        if manager_id == employee_id:
            raise ValidationAPIError("An employee cannot manage themselves", field="manager_id")
        self.get(manager_id)

    def create(self, data: EmployeeCreate) -> Employee:
        """HR-created employee with a login account."""
        if self.db.query(User.id).filter(User.email == data.email).first():
            raise ConflictError("An account with this email already exists")
        self._check_manager(data.manager_id)

        user = User(email=data.email, password_hash=hash_password(data.password), provider="email")
        self.db.add(user)
        self.db.flush()
        employee = Employee(
            auth_id=user.id,
            employee_code=generate_employee_code(self.db),
            first_name=data.first_name,
            last_name=data.last_name,
            email=data.email,
            phone_number=data.phone_number,
            gender=data.gender,
            department=data.department,
            designation=data.designation,
            joining_date=data.joining_date,
            hrms_role=data.hrms_role,
            manager_id=data.manager_id,
        )
        self.db.add(employee)
        self.db.commit()
        self.db.refresh(employee)
        logger.info("Employee created", employee_id=employee.id, role=employee.hrms_role)
        return employee

    def update(self, employee_id: str, data: EmployeeUpdate) -> Employee:
        employee = self.get(employee_id)
        changes = data.model_dump(exclude_unset=True)
        if "manager_id" in changes:
            self._check_manager(changes["manager_id"], employee.id)
        for key, value in changes.items():
            setattr(employee, key, value)
        self.db.commit()
        self.db.refresh(employee)
        logger.info("Employee updated", employee_id=employee.id, fields=list(changes))
        return employee

    def update_profile(self, employee_id: str, data: ProfileUpdate) -> Employee:
        employee = self.get(employee_id)
        for key, value in data.model_dump(exclude_unset=True).items():
            setattr(employee, key, value.strip() if isinstance(value, str) else value)
        self.db.commit()
        self.db.refresh(employee)
        return employee

    async def upload_photo(self, employee_id: str, photo: UploadedFile) -> Employee:
        validate_upload(photo, PHOTO_TYPES, "photo")
        employee = self.get(employee_id)
        path = f"avatars/{employee.employee_code}_{int(time.time() * 1000)}.{photo.extension}"
        try:
            employee.photo_url = await self.storage.upload(
                settings.ONBOARDING_BUCKET, path, photo.content, photo.content_type
            )
        except S3Error as e:
            raise ExternalServiceError("storage", str(e)) from e
        self.db.commit()
        self.db.refresh(employee)
        return employee

    async def photo_url(self, employee: Employee) -> Optional[str]:
        if not employee.photo_url:
            return None
        try:
            return await self.storage.create_signed_url(settings.ONBOARDING_BUCKET, employee.photo_url)
        except S3Error as e:
            raise ExternalServiceError("storage", str(e)) from e

    async def issue_certificate(self, employee_id: str, issued_by: str) -> GeneratedDocument:
        employee = self.get(employee_id)
        try:
            document = await self.generator.render_certificate(employee, utcnow())
        except DocumentError as e:
            raise ExternalServiceError("documents", str(e)) from e
        return await DocumentRegistry(self.db, self.storage).save(
            document,
            DocType.CERTIFICATE,
            candidate_id=employee.application_id,
            employee_id=employee.id,
            issued_by=issued_by,
        )

    def documents(self, employee: Employee) -> list[GeneratedDocument]:
        return DocumentRegistry(self.db, self.storage).list_documents(
            candidate_id=employee.application_id, employee_id=employee.id
        )

    def dashboard_stats(self) -> dict[str, int]:
        today = utcnow().date()
        return {
            "active_employees": self.db.query(Employee).filter(Employee.status == "active").count(),
            "present_today": self.db.query(Attendance)
            .filter(Attendance.date == today, Attendance.check_in.isnot(None))
            .count(),
            "on_leave_today": LeaveService(self.db).on_leave_count(today),
            "pending_leave_requests": self.db.query(LeaveRequest)
            .filter(LeaveRequest.status == LeaveStatus.PENDING.value)
            .count(),
            "open_applications": self.db.query(Application)
            .filter(Application.status.notin_(CLOSED_APPLICATION_STATUSES))
            .count(),
        }

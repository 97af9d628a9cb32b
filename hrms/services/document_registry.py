"""Persistence of generated PDFs: storage upload plus the hrms_documents registry."""

import time
from typing import Optional

import structlog
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm import Session

from hrms.config.settings import settings
from hrms.integrations.s3 import S3Error, StorageService
from hrms.middleware.error_handler import ExternalServiceError, NotFoundError
from hrms.models import GeneratedDocument
from hrms.models.base import utcnow
from hrms.services.documents import RenderedDocument
from hrms.services.workflow import DocType

logger = structlog.get_logger()


class DocumentRegistry:
    """Stores generated documents and keeps one current offer letter per candidate."""

    def __init__(self, db: Session, storage: StorageService):
        self.db = db
        self.storage = storage
        self.bucket = settings.GENERATED_DOCS_BUCKET

    async def save(
        self,
        document: RenderedDocument,
        doc_type: DocType,
        candidate_id: Optional[str] = None,
        employee_id: Optional[str] = None,
        issued_by: Optional[str] = None,
    ) -> GeneratedDocument:
        """
        Upload a rendered PDF and register it.

        Offer letters are upserted on (candidate_id, doc_type) and the
        replaced storage objects removed; other types always add a row.
        """
        owner_id = employee_id or candidate_id
        path = f"{owner_id}/{int(time.time() * 1000)}_{document.filename}"
        try:
            await self.storage.upload(self.bucket, path, document.content, "application/pdf")
        except S3Error as e:
            raise ExternalServiceError("storage", str(e)) from e

        replaced_paths: list[str] = []
        try:
            if doc_type == DocType.OFFER_LETTER and candidate_id:
                record, replaced_paths = self._register_offer_letter(candidate_id, employee_id, path, issued_by)
            else:
                record = GeneratedDocument(
                    candidate_id=candidate_id,
                    employee_id=employee_id,
                    doc_type=doc_type.value,
                    file_path=path,
                    issued_by=issued_by,
                )
                self.db.add(record)
                self.db.commit()
        except SQLAlchemyError:
            self.db.rollback()
            await self._discard([path])
            raise

        self.db.refresh(record)
        await self._discard(replaced_paths)

        logger.info(
            "Document registered",
            document_id=record.id,
            doc_type=doc_type.value,
            candidate_id=candidate_id,
            employee_id=employee_id,
            replaced=len(replaced_paths),
        )
        return record

    def _register_offer_letter(
        self,
        candidate_id: str,
        employee_id: Optional[str],
        path: str,
        issued_by: Optional[str],
    ) -> tuple[GeneratedDocument, list[str]]:
        """Upsert and commit. An insert that loses to a concurrent share is retried as an update."""
        try:
            result = self._upsert_offer_letter(candidate_id, employee_id, path, issued_by)
            self.db.commit()
            return result
        except IntegrityError:
            self.db.rollback()
            logger.info("Offer letter registered concurrently, updating it", candidate_id=candidate_id)

        result = self._upsert_offer_letter(candidate_id, employee_id, path, issued_by)
        self.db.commit()
        return result

    def _upsert_offer_letter(
        self,
        candidate_id: str,
        employee_id: Optional[str],
        path: str,
        issued_by: Optional[str],
    ) -> tuple[GeneratedDocument, list[str]]:
        record = (
            self.db.query(GeneratedDocument)
            .filter(
                GeneratedDocument.candidate_id == candidate_id,
                GeneratedDocument.doc_type == DocType.OFFER_LETTER.value,
            )
            .with_for_update()
            .one_or_none()
        )
        if record is None:
            record = GeneratedDocument(
                candidate_id=candidate_id,
                employee_id=employee_id,
                doc_type=DocType.OFFER_LETTER.value,
                file_path=path,
                issued_by=issued_by,
            )
            self.db.add(record)
            self.db.flush()
            return record, []

        replaced = [record.file_path] if record.file_path != path else []
        record.file_path = path
        record.issued_by = issued_by
        record.created_at = utcnow()
        if employee_id:
            record.employee_id = employee_id
        return record, replaced

    async def _discard(self, paths: list[str]) -> None:
        if not paths:
            return
        try:
            await self.storage.remove(self.bucket, paths)
        except S3Error as e:
            # Registry already points at the new object; leftovers are orphans only
            logger.warning("Failed to remove replaced documents", paths=paths, error=str(e))

    def current_offer_letter(self, candidate_id: str) -> Optional[GeneratedDocument]:
        return (
            self.db.query(GeneratedDocument)
            .filter(
                GeneratedDocument.candidate_id == candidate_id,
                GeneratedDocument.doc_type == DocType.OFFER_LETTER.value,
            )
            .order_by(GeneratedDocument.created_at.desc())
            .first()
        )

    def list_documents(self, candidate_id: Optional[str] = None, employee_id: Optional[str] = None) -> list[GeneratedDocument]:
        query = self.db.query(GeneratedDocument)
        if candidate_id and employee_id:
            query = query.filter(
                (GeneratedDocument.candidate_id == candidate_id) | (GeneratedDocument.employee_id == employee_id)
            )
        elif candidate_id:
            query = query.filter(GeneratedDocument.candidate_id == candidate_id)
        elif employee_id:
            query = query.filter(GeneratedDocument.employee_id == employee_id)
        return query.order_by(GeneratedDocument.created_at.desc()).all()

    def get(self, document_id: str) -> GeneratedDocument:
        document = self.db.query(GeneratedDocument).filter(GeneratedDocument.id == document_id).first()
        if not document:
            raise NotFoundError("Document", document_id)
        return document

    async def signed_url(self, document: GeneratedDocument) -> str:
        filename = document.file_path.rsplit("/", 1)[-1].split("_", 1)[-1]
        try:
            return await self.storage.create_signed_url(self.bucket, document.file_path, filename=filename)
        except S3Error as e:
            raise ExternalServiceError("storage", str(e)) from e

"""Generated document registry model."""

from sqlalchemy import Column, DateTime, ForeignKey, Index, String, text

from hrms.config.database import Base
from hrms.models.base import utcnow, uuid_pk


class GeneratedDocument(Base):
    """
    Registry row for a PDF stored in the generated-documents bucket.

    offer_letter rows are unique per candidate, enforced by a partial unique
    index and kept current by upsert; nda and certificate rows accumulate.
    """

    __tablename__ = "hrms_documents"

    id = uuid_pk()
    candidate_id = Column(
        String(36),
        ForeignKey("internship_applications.id", ondelete="CASCADE"),
        nullable=True,
    )
    employee_id = Column(String(36), ForeignKey("hrms_employees.id", ondelete="CASCADE"), nullable=True)
    doc_type = Column(String(20), nullable=False)  # offer_letter, nda, certificate
    file_path = Column(String(500), nullable=False)
    issued_by = Column(String(36), nullable=True)  # auth user id, None for self-service
    created_at = Column(DateTime, default=utcnow, nullable=False)

    __table_args__ = (
        Index("ix_hrms_documents_candidate_type", "candidate_id", "doc_type"),
        Index(
            "uq_hrms_documents_offer_letter",
            "candidate_id",
            unique=True,
            sqlite_where=text("doc_type = 'offer_letter'"),
            postgresql_where=text("doc_type = 'offer_letter'"),
        ),
        Index("ix_hrms_documents_employee", "employee_id"),
    )

    def __repr__(self) -> str:
        return f"<GeneratedDocument(id={self.id}, type={self.doc_type})>"

"""Internship application model and its status audit trail."""

from sqlalchemy import Column, DateTime, ForeignKey, Index, Integer, String, Text
from sqlalchemy import UniqueConstraint
from sqlalchemy.orm import relationship

from hrms.config.database import Base
from hrms.models.base import TimestampMixin, utcnow, uuid_pk


class Application(Base, TimestampMixin):
    """
    Candidate application submitted through the careers form.

    Status moves through the recruitment workflow; see
    hrms.services.workflow for the allowed transitions.
    """

    __tablename__ = "internship_applications"

    id = uuid_pk()

    # Candidate
    full_name = Column(String(255), nullable=False)
    email = Column(String(255), nullable=False)
    phone = Column(String(50), nullable=False)
    linkedin_url = Column(String(500), nullable=True)
    portfolio_url = Column(String(500), nullable=True)

    # Application
    position = Column(String(255), nullable=False)
    university = Column(String(255), nullable=False)
    graduation_year = Column(Integer, nullable=True)
    skills = Column(Text, nullable=True)
    motivation = Column(Text, nullable=True)
    resume_link = Column(String(500), nullable=True)  # path in the resumes bucket

    # Workflow
    # new, reviewing, shortlisted, interview_scheduled, interviewed,
    # approved, on_hold, rejected, hired
    status = Column(String(30), nullable=False, default="new")
    notes = Column(Text, nullable=True)

    __table_args__ = (
        UniqueConstraint("email", "position", name="uq_application_email_position"),
        Index("ix_internship_applications_status", "status"),
        Index("ix_internship_applications_created", "created_at"),
    )

    # Relationships
    onboarding = relationship(
        "Onboarding", back_populates="application", uselist=False, cascade="all, delete-orphan"
    )
    status_changes = relationship(
        "ApplicationStatusChange",
        back_populates="application",
        cascade="all, delete-orphan",
        order_by="ApplicationStatusChange.created_at",
    )

    def __repr__(self) -> str:
        return f"<Application(id={self.id}, name={self.full_name}, status={self.status})>"


class ApplicationStatusChange(Base):
    """Audit row written for every application status transition."""

    __tablename__ = "application_status_changes"

    id = uuid_pk()
    application_id = Column(
        String(36),
        ForeignKey("internship_applications.id", ondelete="CASCADE"),
        nullable=False,
    )

    action = Column(String(30), nullable=False)  # review, shortlist, schedule_interview, ...
    from_status = Column(String(30), nullable=False)
    to_status = Column(String(30), nullable=False)
    comment = Column(Text, nullable=True)

    # Who made the change (auth user id)
    user_id = Column(String(36), nullable=True)

    created_at = Column(DateTime, default=utcnow, nullable=False)

    __table_args__ = (
        Index("ix_application_status_changes_application", "application_id"),
    )

    application = relationship("Application", back_populates="status_changes")

    def __repr__(self) -> str:
        return f"<ApplicationStatusChange(id={self.id}, {self.from_status}->{self.to_status})>"

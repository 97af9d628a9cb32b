"""Leave request model."""

from sqlalchemy import Column, Date, DateTime, ForeignKey, Index, String, Text
from sqlalchemy.orm import relationship

from hrms.config.database import Base
from hrms.models.base import utcnow, uuid_pk


class LeaveRequest(Base):
    """Leave request; reviewed exactly once."""

    __tablename__ = "hrms_leave_requests"

    id = uuid_pk()
    employee_id = Column(String(36), ForeignKey("hrms_employees.id", ondelete="CASCADE"), nullable=False)
    leave_type = Column(String(50), nullable=False)  # casual, sick, earned, unpaid, ...
    start_date = Column(Date, nullable=False)
    end_date = Column(Date, nullable=False)
    reason = Column(Text, nullable=True)

    # pending, approved, rejected
    status = Column(String(20), nullable=False, default="pending")
    manager_comment = Column(Text, nullable=True)
    reviewed_by = Column(String(36), ForeignKey("hrms_employees.id", ondelete="SET NULL"), nullable=True)
    reviewed_at = Column(DateTime, nullable=True)

    created_at = Column(DateTime, default=utcnow, nullable=False)

    __table_args__ = (
        Index("ix_hrms_leave_requests_employee", "employee_id"),
        Index("ix_hrms_leave_requests_status", "status"),
    )

    employee = relationship("Employee", foreign_keys=[employee_id])

    def __repr__(self) -> str:
        return f"<LeaveRequest(id={self.id}, status={self.status})>"

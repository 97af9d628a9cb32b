"""Daily attendance model."""

from sqlalchemy import Column, Date, DateTime, ForeignKey, String, UniqueConstraint
from sqlalchemy.orm import relationship

from hrms.config.database import Base
from hrms.models.base import uuid_pk


class Attendance(Base):
    """One row per employee per calendar day."""

    __tablename__ = "hrms_attendance"

    id = uuid_pk()
    employee_id = Column(String(36), ForeignKey("hrms_employees.id", ondelete="CASCADE"), nullable=False)
    date = Column(Date, nullable=False)
    check_in = Column(DateTime, nullable=True)
    check_out = Column(DateTime, nullable=True)
    # present, partial, absent
    status = Column(String(20), nullable=False, default="absent")

    __table_args__ = (
        UniqueConstraint("employee_id", "date", name="uq_attendance_employee_date"),
    )

    employee = relationship("Employee")

    def __repr__(self) -> str:
        return f"<Attendance(employee={self.employee_id}, date={self.date}, status={self.status})>"

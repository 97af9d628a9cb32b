"""Employee model."""

from sqlalchemy import Column, Date, ForeignKey, Index, String, Text
from sqlalchemy.orm import relationship

from hrms.config.database import Base
from hrms.models.base import TimestampMixin, uuid_pk


class Employee(Base, TimestampMixin):
    """Staff member with an HRMS role, linked to an auth account."""

    __tablename__ = "hrms_employees"

    id = uuid_pk()
    auth_id = Column(String(36), ForeignKey("auth_users.id", ondelete="SET NULL"), nullable=True, unique=True)
    application_id = Column(
        String(36),
        ForeignKey("internship_applications.id", ondelete="SET NULL"),
        nullable=True,
        unique=True,
    )

    employee_code = Column(String(20), nullable=False, unique=True)  # EMP-####
    first_name = Column(String(100), nullable=False)
    last_name = Column(String(100), nullable=False, default="")
    email = Column(String(255), nullable=False, unique=True)  # login identifier
    personal_email = Column(String(255), nullable=True)
    phone_number = Column(String(50), nullable=True)
    gender = Column(String(20), nullable=True)

    department = Column(String(100), nullable=True)
    designation = Column(String(255), nullable=True)
    joining_date = Column(Date, nullable=True)

    # super_admin, hr_admin, team_manager, employee
    hrms_role = Column(String(20), nullable=False, default="employee")
    # active, inactive
    status = Column(String(20), nullable=False, default="active")

    # Direct manager; a team_manager's team is the set of their direct reports
    manager_id = Column(String(36), ForeignKey("hrms_employees.id", ondelete="SET NULL"), nullable=True)

    # Profile
    emergency_contact_name = Column(String(255), nullable=True)
    emergency_contact_phone = Column(String(50), nullable=True)
    residential_address = Column(Text, nullable=True)
    linkedin_url = Column(String(500), nullable=True)
    photo_url = Column(String(500), nullable=True)

    __table_args__ = (
        Index("ix_hrms_employees_manager", "manager_id"),
        Index("ix_hrms_employees_status", "status"),
    )

    user = relationship("User", back_populates="employee")
    manager = relationship("Employee", remote_side=[id], backref="reports")

    @property
    def full_name(self) -> str:
        return f"{self.first_name} {self.last_name}".strip()

    def __repr__(self) -> str:
        return f"<Employee(id={self.id}, code={self.employee_code}, role={self.hrms_role})>"

"""Task board and work log models."""

from sqlalchemy import Column, Date, DateTime, Float, ForeignKey, Index, String, Text
from sqlalchemy.orm import relationship

from hrms.config.database import Base
from hrms.models.base import TimestampMixin, utcnow, uuid_pk


class Task(Base, TimestampMixin):
    """Task assigned to an employee, shown as a card on the task board."""

    __tablename__ = "hrms_tasks"

    id = uuid_pk()
    title = Column(String(255), nullable=False)
    description = Column(Text, nullable=True)
    assigned_to = Column(String(36), ForeignKey("hrms_employees.id", ondelete="CASCADE"), nullable=False)
    assigned_by = Column(String(36), ForeignKey("hrms_employees.id", ondelete="SET NULL"), nullable=True)
    priority = Column(String(10), nullable=False, default="medium")  # low, medium, high
    due_date = Column(Date, nullable=True)

    # pending, ongoing, completed, reviewed
    status = Column(String(20), nullable=False, default="pending")

    __table_args__ = (
        Index("ix_hrms_tasks_assigned_to", "assigned_to"),
    )

    assignee = relationship("Employee", foreign_keys=[assigned_to])
    work_logs = relationship(
        "WorkLog",
        back_populates="task",
        cascade="all, delete-orphan",
        order_by="WorkLog.created_at.desc()",
    )

    def __repr__(self) -> str:
        return f"<Task(id={self.id}, status={self.status})>"


class WorkLog(Base):
    """Hours logged against a task."""

    __tablename__ = "hrms_work_logs"

    id = uuid_pk()
    task_id = Column(String(36), ForeignKey("hrms_tasks.id", ondelete="CASCADE"), nullable=False)
    employee_id = Column(String(36), ForeignKey("hrms_employees.id", ondelete="CASCADE"), nullable=False)
    log_date = Column(Date, nullable=False)
    hours_spent = Column(Float, nullable=False)
    summary = Column(Text, nullable=False)
    created_at = Column(DateTime, default=utcnow, nullable=False)

    __table_args__ = (
        Index("ix_hrms_work_logs_task", "task_id"),
    )

    task = relationship("Task", back_populates="work_logs")
    employee = relationship("Employee")

    def __repr__(self) -> str:
        return f"<WorkLog(task={self.task_id}, hours={self.hours_spent})>"

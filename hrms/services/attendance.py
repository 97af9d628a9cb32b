"""Clock-in/out and daily attendance reporting."""

from datetime import date, datetime
from typing import Optional

import structlog
from sqlalchemy import or_
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from hrms.middleware.error_handler import ConflictError
from hrms.models import Attendance, Employee
from hrms.models.base import utcnow
from hrms.services.rbac import SessionContext, scope_query

logger = structlog.get_logger()


def derive_day_status(check_in: Optional[datetime], check_out: Optional[datetime]) -> str:
    """present when both times exist, partial with only a check-in, otherwise absent."""
    if check_in and check_out:
        return "present"
    if check_in:
        return "partial"
    return "absent"


def format_worked(check_in: Optional[datetime], check_out: Optional[datetime]) -> Optional[str]:
    """Worked duration as 'Xh Ym', None until both times exist."""
    if not (check_in and check_out):
        return None
    minutes = max(int((check_out - check_in).total_seconds() // 60), 0)
    return f"{minutes // 60}h {minutes % 60}m"


def attendance_row(employee: Employee, day: date, record: Optional[Attendance]) -> dict:
    check_in = record.check_in if record else None
    check_out = record.check_out if record else None
    return {
        "id": record.id if record else None,
        "employee_id": employee.id,
        "employee_name": employee.full_name,
        "employee_code": employee.employee_code,
        "date": day,
        "check_in": check_in,
        "check_out": check_out,
        "status": derive_day_status(check_in, check_out),
        "worked": format_worked(check_in, check_out),
    }


class AttendanceService:
    def __init__(self, db: Session):
        self.db = db

    def today(self, employee_id: str, day: Optional[date] = None) -> Optional[Attendance]:
        day = day or utcnow().date()
        return (
            self.db.query(Attendance)
            .filter(Attendance.employee_id == employee_id, Attendance.date == day)
            .first()
        )

    def clock_in(self, employee_id: str) -> Attendance:
        now = utcnow()
        if self.today(employee_id, now.date()):
            raise ConflictError("Already clocked in today")

        record = Attendance(
            employee_id=employee_id,
            date=now.date(),
            check_in=now,
            status=derive_day_status(now, None),
        )
        self.db.add(record)
        try:
            self.db.commit()
        except IntegrityError:
            # concurrent clock-in hit the (employee_id, date) constraint
            self.db.rollback()
            raise ConflictError("Already clocked in today")
        self.db.refresh(record)
        logger.info("Clocked in", employee_id=employee_id, date=str(record.date))
        return record

    def clock_out(self, employee_id: str) -> Attendance:
        now = utcnow()
        record = (
            self.db.query(Attendance)
            .filter(Attendance.employee_id == employee_id, Attendance.date == now.date())
            .with_for_update()
            .first()
        )
        if not record or not record.check_in:
            raise ConflictError("You have not clocked in today")
        if record.check_out:
            raise ConflictError("Already clocked out today")

        record.check_out = now
        record.status = derive_day_status(record.check_in, record.check_out)
        self.db.commit()
        self.db.refresh(record)
        logger.info("Clocked out", employee_id=employee_id, worked=format_worked(record.check_in, record.check_out))
        return record

    def daily_report(self, ctx: SessionContext, day: date, search: Optional[str] = None) -> list[dict]:
        """One row per visible active employee for ``day``; absent when no record exists."""
        employees = self.db.query(Employee).filter(Employee.status == "active")
        employees = scope_query(employees, Employee.id, ctx)
        if search:
            term = f"%{search.strip()}%"
            employees = employees.filter(
                or_(
                    Employee.first_name.ilike(term),
                    Employee.last_name.ilike(term),
                    Employee.employee_code.ilike(term),
                )
            )
        employees = employees.order_by(Employee.first_name, Employee.last_name).all()

        records = {
            r.employee_id: r
            for r in self.db.query(Attendance)
            .filter(Attendance.date == day, Attendance.employee_id.in_([e.id for e in employees]))
            .all()
        }
        return [attendance_row(e, day, records.get(e.id)) for e in employees]

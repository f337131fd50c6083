"""SQLAlchemy ORM models."""

from habitat_payroll.models.base import Base, TimestampMixin
from habitat_payroll.models.payroll import PayrollRunRow, PayslipRow
from habitat_payroll.models.workforce import AttendanceRow, LeaveRow, WorkerRow

__all__ = [
    "Base",
    "TimestampMixin",
    "WorkerRow",
    "AttendanceRow",
    "LeaveRow",
    "PayrollRunRow",
    "PayslipRow",
]

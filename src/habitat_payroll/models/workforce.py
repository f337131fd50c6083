"""Worker, attendance and leave models."""

from __future__ import annotations

from datetime import date
from decimal import Decimal

from sqlalchemy import Boolean, Date, Numeric, String, Text, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column

from habitat_payroll.calculators.types import (
    AttendanceRecord,
    LeaveRecord,
    LeaveType,
    OvertimePolicy,
    PayModel,
    Worker,
    WorkerClass,
)
from habitat_payroll.models.base import Base, TimestampMixin


class WorkerRow(Base, TimestampMixin):
    """A worker on the payroll."""

    __tablename__ = "worker"

    id: Mapped[str] = mapped_column(String, primary_key=True)
    name: Mapped[str] = mapped_column(String, nullable=False)
    pay_model: Mapped[str] = mapped_column(String, nullable=False)
    worker_class: Mapped[str] = mapped_column(String, nullable=False)
    salary: Mapped[Decimal] = mapped_column(Numeric(12, 4), nullable=False, default=0)
    declared_fixed_salary: Mapped[Decimal | None] = mapped_column(Numeric(12, 4), nullable=True)
    overtime_policy: Mapped[str | None] = mapped_column(String, nullable=True)
    premium_day_flat_rate: Mapped[Decimal | None] = mapped_column(Numeric(12, 4), nullable=True)
    excluded_from_payroll: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    company: Mapped[str] = mapped_column(String, nullable=False, default="")
    designation: Mapped[str] = mapped_column(String, nullable=False, default="")
    employee_contribution: Mapped[Decimal] = mapped_column(Numeric(12, 4), nullable=False, default=0)
    employer_contribution: Mapped[Decimal] = mapped_column(Numeric(12, 4), nullable=False, default=0)
    date_joined: Mapped[date | None] = mapped_column(Date, nullable=True)

    def to_domain(self) -> Worker:
        return Worker(
            id=self.id,
            name=self.name,
            pay_model=PayModel(self.pay_model),
            worker_class=WorkerClass(self.worker_class),
            salary=self.salary,
            declared_fixed_salary=self.declared_fixed_salary,
            overtime_policy=OvertimePolicy(self.overtime_policy) if self.overtime_policy else None,
            premium_day_flat_rate=self.premium_day_flat_rate,
            excluded_from_payroll=self.excluded_from_payroll,
            company=self.company,
            designation=self.designation,
            employee_contribution=self.employee_contribution,
            employer_contribution=self.employer_contribution,
            date_joined=self.date_joined,
        )

    def apply(self, worker: Worker) -> None:
        """Copy every domain field onto this row."""
        self.name = worker.name
        self.pay_model = worker.pay_model.value
        self.worker_class = worker.worker_class.value
        self.salary = worker.salary
        self.declared_fixed_salary = worker.declared_fixed_salary
        self.overtime_policy = worker.overtime_policy.value if worker.overtime_policy else None
        self.premium_day_flat_rate = worker.premium_day_flat_rate
        self.excluded_from_payroll = worker.excluded_from_payroll
        self.company = worker.company
        self.designation = worker.designation
        self.employee_contribution = worker.employee_contribution
        self.employer_contribution = worker.employer_contribution
        self.date_joined = worker.date_joined

    @classmethod
    def from_domain(cls, worker: Worker) -> WorkerRow:
        row = cls(id=worker.id)
        row.apply(worker)
        return row


class AttendanceRow(Base, TimestampMixin):
    """One day's attendance log; at most one per worker and date."""

    __tablename__ = "attendance_record"

    id: Mapped[str] = mapped_column(String, primary_key=True)
    worker_id: Mapped[str] = mapped_column(String, nullable=False, index=True)
    work_date: Mapped[date] = mapped_column(Date, nullable=False)
    hours_worked: Mapped[Decimal] = mapped_column(Numeric(8, 2), nullable=False, default=0)
    overtime_hours: Mapped[Decimal] = mapped_column(Numeric(8, 2), nullable=False, default=0)
    has_meal_allowance: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    transport_claim: Mapped[Decimal] = mapped_column(Numeric(12, 4), nullable=False, default=0)
    project_id: Mapped[str | None] = mapped_column(String, nullable=True)
    remarks: Mapped[str | None] = mapped_column(Text, nullable=True)

    __table_args__ = (
        UniqueConstraint("worker_id", "work_date", name="attendance_worker_date_unique"),
    )

    def to_domain(self) -> AttendanceRecord:
        return AttendanceRecord(
            id=self.id,
            worker_id=self.worker_id,
            work_date=self.work_date,
            hours_worked=self.hours_worked,
            overtime_hours=self.overtime_hours,
            has_meal_allowance=self.has_meal_allowance,
            transport_claim=self.transport_claim,
            project_id=self.project_id,
            remarks=self.remarks,
        )

    def apply(self, record: AttendanceRecord) -> None:
        """Copy every domain field except the id onto this row."""
        self.worker_id = record.worker_id
        self.work_date = record.work_date
        self.hours_worked = record.hours_worked
        self.overtime_hours = record.overtime_hours
        self.has_meal_allowance = record.has_meal_allowance
        self.transport_claim = record.transport_claim
        self.project_id = record.project_id
        self.remarks = record.remarks

    @classmethod
    def from_domain(cls, record: AttendanceRecord) -> AttendanceRow:
        row = cls(id=record.id)
        row.apply(record)
        return row


class LeaveRow(Base, TimestampMixin):
    """A leave or absence span."""

    __tablename__ = "leave_record"

    id: Mapped[str] = mapped_column(String, primary_key=True)
    worker_id: Mapped[str] = mapped_column(String, nullable=False, index=True)
    start_date: Mapped[date] = mapped_column(Date, nullable=False)
    end_date: Mapped[date] = mapped_column(Date, nullable=False)
    leave_type: Mapped[str] = mapped_column(String, nullable=False)
    total_days: Mapped[Decimal] = mapped_column(Numeric(6, 1), nullable=False)
    reason: Mapped[str] = mapped_column(Text, nullable=False, default="")
    is_payable: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)

    def to_domain(self) -> LeaveRecord:
        return LeaveRecord(
            id=self.id,
            worker_id=self.worker_id,
            start_date=self.start_date,
            end_date=self.end_date,
            leave_type=LeaveType(self.leave_type),
            total_days=self.total_days,
            reason=self.reason,
            is_payable=self.is_payable,
        )

    def apply(self, record: LeaveRecord) -> None:
        """Copy every domain field except the id onto this row."""
        self.worker_id = record.worker_id
        self.start_date = record.start_date
        self.end_date = record.end_date
        self.leave_type = record.leave_type.value
        self.total_days = record.total_days
        self.reason = record.reason
        self.is_payable = record.is_payable

    @classmethod
    def from_domain(cls, record: LeaveRecord) -> LeaveRow:
        row = cls(id=record.id)
        row.apply(record)
        return row

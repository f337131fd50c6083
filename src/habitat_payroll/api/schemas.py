"""Pydantic schemas for API request/response models."""

from __future__ import annotations

from datetime import date, datetime
from decimal import Decimal
from typing import Annotated, Any
from uuid import uuid4

from pydantic import BaseModel, BeforeValidator, ConfigDict, Field

from habitat_payroll.calculators.types import (
    AttendanceRecord,
    ComputationBasis,
    LeaveRecord,
    LeaveType,
    OvertimePolicy,
    PaymentMode,
    PaymentStatus,
    PayModel,
    PayrollRun,
    Payslip,
    Worker,
    WorkerClass,
    to_decimal,
)


def _optional_amount(value: Any) -> Decimal | None:
    if value is None or value == "":
        return None
    return to_decimal(value)


# Source-record numbers are coerced (bad input becomes 0), never rejected
Amount = Annotated[Decimal, BeforeValidator(to_decimal)]
OptionalAmount = Annotated[Decimal | None, BeforeValidator(_optional_amount)]


def _new_id() -> str:
    return str(uuid4())


# ============================================================================
# Source records
# ============================================================================


class WorkerSchema(BaseModel):
    """Worker profile."""

    model_config = ConfigDict(from_attributes=True)

    id: str = Field(default_factory=_new_id)
    name: str
    pay_model: PayModel
    worker_class: WorkerClass
    salary: Amount = Decimal("0")
    declared_fixed_salary: OptionalAmount = None
    overtime_policy: OvertimePolicy | None = None
    premium_day_flat_rate: OptionalAmount = None
    excluded_from_payroll: bool = False
    company: str = ""
    designation: str = ""
    employee_contribution: Amount = Decimal("0")
    employer_contribution: Amount = Decimal("0")
    date_joined: date | None = None

    def to_domain(self) -> Worker:
        return Worker(**self.model_dump())


class AttendanceSchema(BaseModel):
    """One day's attendance log."""

    model_config = ConfigDict(from_attributes=True)

    id: str = Field(default_factory=_new_id)
    worker_id: str
    work_date: date
    hours_worked: Amount = Decimal("0")
    overtime_hours: Amount = Decimal("0")
    has_meal_allowance: bool = False
    transport_claim: Amount = Decimal("0")
    project_id: str | None = None
    remarks: str | None = None

    def to_domain(self) -> AttendanceRecord:
        return AttendanceRecord(**self.model_dump())


class LeaveSchema(BaseModel):
    """Stored leave record."""

    model_config = ConfigDict(from_attributes=True)

    id: str
    worker_id: str
    start_date: date
    end_date: date
    leave_type: LeaveType
    total_days: Decimal
    reason: str = ""
    is_payable: bool = False


class LeaveRequest(BaseModel):
    """Schema for recording (or editing) a leave span."""

    id: str = Field(default_factory=_new_id)
    worker_id: str
    start_date: date
    end_date: date
    leave_type: LeaveType
    reason: str = ""
    is_payable: bool = False
    confirm: bool = False

    def to_domain(self) -> LeaveRecord:
        return LeaveRecord(
            id=self.id,
            worker_id=self.worker_id,
            start_date=self.start_date,
            end_date=self.end_date,
            leave_type=self.leave_type,
            total_days=Decimal("0"),
            reason=self.reason,
            is_payable=self.is_payable,
        )


class LeaveResponse(BaseModel):
    """Schema for a saved leave record."""

    record: LeaveSchema
    reclassified: bool = False


# ============================================================================
# Payslips and drafts
# ============================================================================


class PayslipSchema(BaseModel):
    """Schema for a computed payslip."""

    model_config = ConfigDict(from_attributes=True)

    id: str
    worker_id: str
    worker_name: str
    worker_class: WorkerClass
    pay_model: PayModel
    designation: str = ""
    company: str = ""

    basic_salary: Decimal = Decimal("0")
    hourly_rate: Decimal = Decimal("0")
    days_worked: int = 0
    standard_hours: Decimal = Decimal("0")

    ot1_hours: Decimal = Decimal("0")
    ot1_pay: Decimal = Decimal("0")
    ot2_hours: Decimal = Decimal("0")
    ot2_pay: Decimal = Decimal("0")
    premium_days_worked: int = 0
    premium_day_flat_rate: Decimal = Decimal("0")
    overtime_policy: OvertimePolicy = OvertimePolicy.STANDARD

    meal_allowance: Decimal = Decimal("0")
    transport_allowance: Decimal = Decimal("0")
    allowance: Decimal = Decimal("0")
    allowance_remarks: str = ""
    deduction: Decimal = Decimal("0")
    deduction_remarks: str = ""

    employer_cpf: Decimal = Decimal("0")
    employee_cpf: Decimal = Decimal("0")
    net_salary: Decimal = Decimal("0")

    mode_of_payment: PaymentMode = PaymentMode.BANK_TRANSFER
    remarks: str = ""

    def to_domain(self) -> Payslip:
        return Payslip(**self.model_dump())


class RunTotalsSchema(BaseModel):
    """Aggregated pay components."""

    model_config = ConfigDict(from_attributes=True)

    basic: Decimal
    ot1: Decimal
    ot2: Decimal
    allowances: Decimal
    deductions: Decimal
    employer_cpf: Decimal
    employee_cpf: Decimal
    net: Decimal


class DraftRequest(BaseModel):
    """Schema for computing draft payslips."""

    start_date: date
    end_date: date
    basis: ComputationBasis = ComputationBasis.ACTUAL
    entity_filter: str = "ALL"


class DraftResponse(BaseModel):
    """Schema for computed draft payslips."""

    period: str
    basis: ComputationBasis
    payslips: list[PayslipSchema]
    totals: RunTotalsSchema


class HoursEditRequest(BaseModel):
    """Schema for overriding an overtime quantity on a draft payslip."""

    payslip: PayslipSchema
    field: str
    value: Any = None


class AmountEditRequest(BaseModel):
    """Schema for overriding an allowance, deduction or remark."""

    payslip: PayslipSchema
    field: str
    value: Any = None


# ============================================================================
# Payroll runs
# ============================================================================


class FinalizeRequest(BaseModel):
    """Schema for finalizing draft payslips into a run."""

    start_date: date
    end_date: date
    payment_date: date
    basis: ComputationBasis = ComputationBasis.ACTUAL
    entity_scope: str = "ALL"
    payslips: list[PayslipSchema]
    confirm: bool = False


class PaymentUpdateRequest(BaseModel):
    """Schema for settling a run.

    With a status the run transitions; with only an amount the status is
    derived from it.
    """

    payment_status: PaymentStatus | None = None
    paid_amount: Decimal | None = None


class PayrollRunResponse(BaseModel):
    """Schema for payroll run response."""

    id: str
    period: str
    start_date: date
    end_date: date
    payment_date: date
    basis: ComputationBasis
    entity_scope: str
    payment_status: PaymentStatus
    paid_amount: Decimal
    outstanding_amount: Decimal
    processed_at: datetime | None = None
    totals: RunTotalsSchema
    payslips: list[PayslipSchema]

    @classmethod
    def from_domain(cls, run: PayrollRun) -> PayrollRunResponse:
        return cls(
            id=run.id,
            period=run.period,
            start_date=run.start_date,
            end_date=run.end_date,
            payment_date=run.payment_date,
            basis=run.basis,
            entity_scope=run.entity_scope,
            payment_status=run.payment_status,
            paid_amount=run.paid_amount,
            outstanding_amount=run.outstanding_amount,
            processed_at=run.processed_at,
            totals=RunTotalsSchema.model_validate(run.totals),
            payslips=[PayslipSchema.model_validate(p) for p in run.payslips],
        )


class PayrollRunListResponse(BaseModel):
    """Schema for listing payroll runs."""

    items: list[PayrollRunResponse]
    total: int


class ConfirmationResponse(BaseModel):
    """Returned instead of acting when the caller must confirm first."""

    detail: str
    code: str = "CONFIRMATION_REQUIRED"
    totals: RunTotalsSchema | None = None


# ============================================================================
# Error schemas
# ============================================================================


class ErrorResponse(BaseModel):
    """Schema for error response."""

    detail: str
    code: str | None = None
    context: dict[str, Any] | None = None

"""Type definitions for the payroll calculation pipeline."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date, datetime
from decimal import ROUND_HALF_UP, Decimal, InvalidOperation
from enum import Enum
from typing import Any

ZERO = Decimal("0")
CENTS = Decimal("0.01")
RATE_PRECISION = Decimal("0.0001")  # 4 decimal places for internal rates


def to_decimal(value: Any) -> Decimal:
    """Coerce a loosely-typed source value to a non-negative Decimal.

    Missing, non-numeric, non-finite and negative values all become 0.
    """
    if value is None or isinstance(value, bool):
        return ZERO
    if isinstance(value, Decimal):
        result = value
    else:
        try:
            result = Decimal(str(value).strip())
        except (InvalidOperation, ValueError):
            return ZERO
    if not result.is_finite() or result < 0:
        return ZERO
    return result


def round_to_cents(amount: Decimal) -> Decimal:
    """Round amount to 2 decimal places."""
    return amount.quantize(CENTS, rounding=ROUND_HALF_UP)


class PayModel(str, Enum):
    """How a worker's base pay is derived."""

    MONTHLY = "MONTHLY"
    DAILY = "DAILY"
    HOURLY = "HOURLY"


class WorkerClass(str, Enum):
    """Nationality classification (drives statutory contributions)."""

    LOCAL = "LOCAL"
    FOREIGN = "FOREIGN"


class OvertimePolicy(str, Enum):
    """Contractual overtime arrangements."""

    STANDARD = "STANDARD"
    NONE = "NONE"
    FIXED_INCL_7PM = "FIXED_INCL_7PM"
    FIXED_7PM_SUN_FLAT = "FIXED_7PM_SUN_FLAT"


class ComputationBasis(str, Enum):
    """Which salary figure a payroll run is computed on."""

    ACTUAL = "ACTUAL"
    DECLARED_FIXED = "DECLARED_FIXED"


class LeaveType(str, Enum):
    """Leave / absence categories."""

    ANNUAL = "ANNUAL"
    HALF_DAY_ANNUAL = "HALF_DAY_ANNUAL"
    MC = "MC"
    HOSPITALIZATION = "HOSPITALIZATION"
    UNPAID_LEAVE = "UNPAID_LEAVE"
    OFF_DAY = "OFF_DAY"
    HALF_DAY_OFF_DAY = "HALF_DAY_OFF_DAY"
    UNPAID_MC = "UNPAID_MC"


PAID_LEAVE_TYPES = frozenset(
    {LeaveType.ANNUAL, LeaveType.HALF_DAY_ANNUAL, LeaveType.MC, LeaveType.HOSPITALIZATION}
)
UNPAID_LEAVE_TYPES = frozenset(
    {LeaveType.UNPAID_LEAVE, LeaveType.UNPAID_MC, LeaveType.OFF_DAY, LeaveType.HALF_DAY_OFF_DAY}
)
HALF_DAY_LEAVE_TYPES = frozenset({LeaveType.HALF_DAY_ANNUAL, LeaveType.HALF_DAY_OFF_DAY})


class PaymentStatus(str, Enum):
    """Settlement status of a finalized payroll run."""

    UNPAID = "UNPAID"
    PARTIAL = "PARTIAL"
    PAID = "PAID"


class PaymentMode(str, Enum):
    """How a payslip is paid out."""

    BANK_TRANSFER = "BANK_TRANSFER"
    CASH = "CASH"
    CHEQUE = "CHEQUE"


# ===== Source records =====


@dataclass
class Worker:
    """A person being paid."""

    id: str
    name: str
    pay_model: PayModel
    worker_class: WorkerClass
    salary: Decimal = ZERO  # monthly salary, daily rate or hourly rate
    declared_fixed_salary: Decimal | None = None
    overtime_policy: OvertimePolicy | None = None
    premium_day_flat_rate: Decimal | None = None
    excluded_from_payroll: bool = False
    company: str = ""
    designation: str = ""

    # Fixed monthly contributions, used as-is for FOREIGN workers
    employee_contribution: Decimal = ZERO
    employer_contribution: Decimal = ZERO

    date_joined: date | None = None

    @property
    def is_monthly(self) -> bool:
        return self.pay_model == PayModel.MONTHLY

    @property
    def effective_overtime_policy(self) -> OvertimePolicy:
        """Overtime policies only apply to monthly-rated workers."""
        if self.is_monthly and self.overtime_policy is not None:
            return self.overtime_policy
        return OvertimePolicy.STANDARD

    @property
    def effective_premium_day_rate(self) -> Decimal:
        if not self.is_monthly:
            return ZERO
        return to_decimal(self.premium_day_flat_rate)


@dataclass
class AttendanceRecord:
    """One calendar day's work log for one worker."""

    id: str
    worker_id: str
    work_date: date
    hours_worked: Decimal = ZERO
    overtime_hours: Decimal = ZERO
    has_meal_allowance: bool = False
    transport_claim: Decimal = ZERO
    project_id: str | None = None
    remarks: str | None = None


@dataclass
class LeaveRecord:
    """One leave/absence span for one worker."""

    id: str
    worker_id: str
    start_date: date
    end_date: date
    leave_type: LeaveType
    total_days: Decimal
    reason: str = ""
    is_payable: bool = False


@dataclass(frozen=True)
class PayrollPeriod:
    """Inclusive date range a payroll is computed for."""

    start: date
    end: date

    def __post_init__(self) -> None:
        if self.end < self.start:
            raise ValueError(f"Period end {self.end} is before start {self.start}")

    def contains(self, day: date) -> bool:
        return self.start <= day <= self.end

    @property
    def label(self) -> str:
        """Period identifier, e.g. '2026-03'."""
        return self.start.strftime("%Y-%m")

    @property
    def year_start(self) -> date:
        return date(self.end.year, 1, 1)


# ===== Intermediate results =====


@dataclass
class AttendanceSummary:
    """Attendance folded over a payroll period."""

    standard_hours: Decimal = ZERO
    ot1_hours: Decimal = ZERO
    ot2_hours: Decimal = ZERO
    work_days: int = 0
    meal_allowance_total: Decimal = ZERO
    transport_claim_total: Decimal = ZERO
    premium_days_worked: int = 0


@dataclass(frozen=True)
class LeaveEntitlement:
    """Yearly leave caps for a worker."""

    annual: Decimal = Decimal("7")
    medical: Decimal = Decimal("14")
    hospitalization: Decimal = Decimal("60")


@dataclass
class LeaveSummary:
    """Leave aggregated for one payslip plus year-to-date usage."""

    paid_absence_days: Decimal = ZERO
    unpaid_deductible_days: Decimal = ZERO

    annual_used: Decimal = ZERO
    medical_used: Decimal = ZERO
    hospitalization_used: Decimal = ZERO
    unpaid_used: Decimal = ZERO
    entitlement: LeaveEntitlement = field(default_factory=LeaveEntitlement)

    @property
    def annual_remaining(self) -> Decimal:
        return self.entitlement.annual - self.annual_used

    @property
    def medical_remaining(self) -> Decimal:
        return self.entitlement.medical - self.medical_used


@dataclass(frozen=True)
class ContributionEstimate:
    """Employee and employer statutory contribution amounts."""

    employee: Decimal = ZERO
    employer: Decimal = ZERO

    @property
    def total(self) -> Decimal:
        return self.employee + self.employer


# ===== Outputs =====


@dataclass(frozen=True)
class Payslip:
    """One worker's computed pay for one period.

    Draft payslips are replaced (never mutated) on manual edits; once embedded
    in a PayrollRun they are historical record.
    """

    id: str
    worker_id: str
    worker_name: str
    worker_class: WorkerClass
    pay_model: PayModel
    designation: str = ""
    company: str = ""

    basic_salary: Decimal = ZERO
    hourly_rate: Decimal = ZERO
    days_worked: int = 0
    standard_hours: Decimal = ZERO

    ot1_hours: Decimal = ZERO
    ot1_pay: Decimal = ZERO
    ot2_hours: Decimal = ZERO
    ot2_pay: Decimal = ZERO
    premium_days_worked: int = 0
    premium_day_flat_rate: Decimal = ZERO
    overtime_policy: OvertimePolicy = OvertimePolicy.STANDARD

    meal_allowance: Decimal = ZERO
    transport_allowance: Decimal = ZERO
    allowance: Decimal = ZERO
    allowance_remarks: str = ""
    deduction: Decimal = ZERO
    deduction_remarks: str = ""

    employer_cpf: Decimal = ZERO
    employee_cpf: Decimal = ZERO
    net_salary: Decimal = ZERO

    mode_of_payment: PaymentMode = PaymentMode.BANK_TRANSFER
    remarks: str = ""

    @property
    def cpf_wage_base(self) -> Decimal:
        """Formula-driven wage base for statutory contributions."""
        base = (
            self.basic_salary
            + self.ot1_pay
            + self.ot2_pay
            + self.meal_allowance
            + self.transport_allowance
            - self.deduction
        )
        return max(ZERO, base)


@dataclass(frozen=True)
class RunTotals:
    """Aggregate pay components across a set of payslips."""

    basic: Decimal = ZERO
    ot1: Decimal = ZERO
    ot2: Decimal = ZERO
    allowances: Decimal = ZERO
    deductions: Decimal = ZERO
    employer_cpf: Decimal = ZERO
    employee_cpf: Decimal = ZERO
    net: Decimal = ZERO


@dataclass(frozen=True)
class PayrollRun:
    """Immutable snapshot of one payroll cycle."""

    id: str
    period: str
    start_date: date
    end_date: date
    payment_date: date
    basis: ComputationBasis
    payslips: tuple[Payslip, ...]
    totals: RunTotals
    payment_status: PaymentStatus = PaymentStatus.UNPAID
    paid_amount: Decimal = ZERO
    entity_scope: str = "ALL"
    processed_at: datetime | None = None

    @property
    def total_net(self) -> Decimal:
        return self.totals.net

    @property
    def outstanding_amount(self) -> Decimal:
        return max(ZERO, self.totals.net - self.paid_amount)

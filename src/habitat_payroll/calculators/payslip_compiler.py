"""Payslip compiler - main orchestrator for draft payroll computation."""

from __future__ import annotations

import hashlib
import json
import logging
from collections.abc import Iterable, Sequence
from dataclasses import replace
from decimal import Decimal
from typing import Any
from uuid import UUID

from habitat_payroll.calculators.attendance import AttendanceAggregator
from habitat_payroll.calculators.calendar import PREMIUM_OT_MULTIPLIER, STANDARD_OT_MULTIPLIER
from habitat_payroll.calculators.contribution import ContributionEstimator, ContributionTable
from habitat_payroll.calculators.leave_ledger import LeaveLedgerAggregator
from habitat_payroll.calculators.policy import PayrollPolicy
from habitat_payroll.calculators.rate_resolver import HOURS_PER_DAY, RateResolver
from habitat_payroll.calculators.types import (
    CENTS,
    ZERO,
    AttendanceRecord,
    ComputationBasis,
    LeaveRecord,
    PayModel,
    PayrollPeriod,
    Payslip,
    Worker,
    WorkerClass,
    round_to_cents,
    to_decimal,
)

logger = logging.getLogger(__name__)

ALL_ENTITIES = "ALL"

HOURS_FIELDS = frozenset({"ot1_hours", "ot2_hours", "premium_days_worked"})
AMOUNT_FIELDS = frozenset({"allowance", "deduction"})
REMARK_FIELDS = frozenset({"allowance_remarks", "deduction_remarks"})


def compute_net_salary(payslip: Payslip) -> Decimal:
    """NET = basic + OT + meal + transport + allowance - deduction - employee CPF, floored at 0."""
    net = (
        payslip.basic_salary
        + payslip.ot1_pay
        + payslip.ot2_pay
        + payslip.meal_allowance
        + payslip.transport_allowance
        + payslip.allowance
        - payslip.deduction
        - payslip.employee_cpf
    )
    return max(ZERO, round_to_cents(net))


def compute_overtime_pay(
    ot1_hours: Decimal,
    ot2_hours: Decimal,
    premium_days_worked: int,
    premium_day_flat_rate: Decimal,
    hourly_rate: Decimal,
) -> tuple[Decimal, Decimal]:
    """Pay for both overtime tiers.

    A flat premium-day rate replaces the hourly 2.0x tier whenever premium days
    were counted.
    """
    ot1_pay = ot1_hours * hourly_rate * STANDARD_OT_MULTIPLIER
    if premium_days_worked > 0:
        ot2_pay = Decimal(premium_days_worked) * premium_day_flat_rate
    else:
        ot2_pay = ot2_hours * hourly_rate * PREMIUM_OT_MULTIPLIER
    return round_to_cents(ot1_pay), round_to_cents(ot2_pay)


def _format_days(days: Decimal) -> str:
    return f"{days.normalize():f}"


class PayslipCompiler:
    """Builds one draft payslip per eligible worker.

    Calculation pipeline (stable order per worker):
    1) Resolve salary figure and effective hourly rate
    2) Aggregate attendance under the worker's overtime policy
    3) Aggregate leave for the period (paid absence / unpaid days)
    4) Basic salary and unpaid-leave deduction
    5) Overtime pay for both tiers
    6) Statutory contributions (LOCAL formula, FOREIGN pass-through)
    7) Net salary

    The result depends only on the inputs, so recomputing with unchanged
    source data yields identical payslips.
    """

    def __init__(self, policy: PayrollPolicy | None = None):
        self.policy = policy or PayrollPolicy()
        self.attendance = AttendanceAggregator(
            holidays=self.policy.public_holidays,
            meal_allowance_unit=self.policy.meal_allowance_unit,
        )
        self.leave_ledger = LeaveLedgerAggregator()
        self.contributions = ContributionEstimator(self.policy.contribution_table)

    def compute_draft_payslips(
        self,
        workers: Iterable[Worker],
        attendance: Sequence[AttendanceRecord],
        leaves: Sequence[LeaveRecord],
        period: PayrollPeriod,
        basis: ComputationBasis = ComputationBasis.ACTUAL,
        entity_filter: str | None = ALL_ENTITIES,
    ) -> list[Payslip]:
        """Compute fresh draft payslips for every eligible worker."""
        payslips = [
            self.compile_worker(worker, attendance, leaves, period, basis)
            for worker in workers
            if self.is_eligible(worker, basis, entity_filter)
        ]
        logger.info(
            "Computed %d draft payslips for %s to %s (basis=%s, entity=%s)",
            len(payslips),
            period.start,
            period.end,
            basis.value,
            entity_filter or ALL_ENTITIES,
        )
        return payslips

    @staticmethod
    def is_eligible(
        worker: Worker, basis: ComputationBasis, entity_filter: str | None
    ) -> bool:
        """Entity scope always applies; the exclusion flag only under ACTUAL."""
        if entity_filter and entity_filter != ALL_ENTITIES and worker.company != entity_filter:
            return False
        if basis == ComputationBasis.DECLARED_FIXED:
            return True
        return not worker.excluded_from_payroll

    def compile_worker(
        self,
        worker: Worker,
        attendance: Sequence[AttendanceRecord],
        leaves: Sequence[LeaveRecord],
        period: PayrollPeriod,
        basis: ComputationBasis,
    ) -> Payslip:
        """Compute a single worker's payslip."""
        declared = basis == ComputationBasis.DECLARED_FIXED

        # 1) Rates
        figure = RateResolver.salary_figure(worker, basis)
        hourly_rate = RateResolver.effective_hourly_rate(worker, basis)
        ot_policy = worker.effective_overtime_policy
        flat_rate = worker.effective_premium_day_rate

        # 2) Attendance
        hours = self.attendance.aggregate(worker.id, period, attendance, ot_policy, flat_rate)

        # 3) Leave
        entitlement = self.policy.entitlements.for_worker(worker, period.end)
        leave = self.leave_ledger.aggregate(worker, period, leaves, entitlement)

        # 4) Basic salary and deduction
        if declared or worker.is_monthly:
            basic = figure
        else:
            if worker.pay_model == PayModel.DAILY:
                basic = hours.standard_hours * (figure / HOURS_PER_DAY)
            else:
                basic = hours.standard_hours * figure
            if leave.paid_absence_days > 0:
                basic += leave.paid_absence_days * RateResolver.day_rate(worker, basis)

        deduction = ZERO
        if worker.is_monthly:
            deduction = leave.unpaid_deductible_days * RateResolver.monthly_day_rate(figure)

        # 5) Overtime
        ot1_hours = hours.ot1_hours.quantize(CENTS)
        ot2_hours = hours.ot2_hours.quantize(CENTS)
        ot1_pay, ot2_pay = compute_overtime_pay(
            ot1_hours, ot2_hours, hours.premium_days_worked, flat_rate, hourly_rate
        )

        payslip = Payslip(
            id=self._payslip_id(worker.id, period, basis),
            worker_id=worker.id,
            worker_name=worker.name,
            worker_class=worker.worker_class,
            pay_model=worker.pay_model,
            designation=worker.designation,
            company=worker.company,
            basic_salary=round_to_cents(basic),
            hourly_rate=hourly_rate,
            days_worked=hours.work_days,
            standard_hours=hours.standard_hours.quantize(CENTS),
            ot1_hours=ot1_hours,
            ot1_pay=ot1_pay,
            ot2_hours=ot2_hours,
            ot2_pay=ot2_pay,
            premium_days_worked=hours.premium_days_worked,
            premium_day_flat_rate=flat_rate,
            overtime_policy=ot_policy,
            meal_allowance=round_to_cents(hours.meal_allowance_total),
            transport_allowance=round_to_cents(hours.transport_claim_total),
            deduction=round_to_cents(deduction),
            deduction_remarks=self._deduction_remarks(worker, leave.unpaid_deductible_days),
            remarks=self._remarks(worker, declared, leave.paid_absence_days),
        )

        # 6) Contributions
        estimate = self.contributions.for_worker(
            worker.worker_class,
            payslip.cpf_wage_base,
            fixed_employee=worker.employee_contribution,
            fixed_employer=worker.employer_contribution,
        )
        payslip = replace(
            payslip,
            employee_cpf=round_to_cents(estimate.employee),
            employer_cpf=round_to_cents(estimate.employer),
        )

        # 7) Net
        return replace(payslip, net_salary=compute_net_salary(payslip))

    @staticmethod
    def _deduction_remarks(worker: Worker, unpaid_days: Decimal) -> str:
        if unpaid_days <= 0:
            return ""
        if worker.is_monthly:
            return f"Unpaid/Off ({_format_days(unpaid_days)} days)"
        return f"Log: {_format_days(unpaid_days)} days off (No pay)"

    @staticmethod
    def _remarks(worker: Worker, declared: bool, paid_absence_days: Decimal) -> str:
        if declared:
            return "Calculated on MOM Declared Monthly"
        if worker.is_monthly:
            return "Fixed Monthly Payout"
        if paid_absence_days > 0:
            return f"Inc. {_format_days(paid_absence_days)}d Paid Absence"
        return ""

    @staticmethod
    def _payslip_id(worker_id: str, period: PayrollPeriod, basis: ComputationBasis) -> str:
        """Generate deterministic payslip ID."""
        data = {
            "worker_id": worker_id,
            "period_start": period.start.isoformat(),
            "period_end": period.end.isoformat(),
            "basis": basis.value,
        }
        json_str = json.dumps(data, sort_keys=True)
        hash_bytes = hashlib.sha256(json_str.encode()).digest()
        return str(UUID(bytes=hash_bytes[:16]))


def compute_draft_payslips(
    workers: Iterable[Worker],
    attendance: Sequence[AttendanceRecord],
    leaves: Sequence[LeaveRecord],
    period: PayrollPeriod,
    basis: ComputationBasis = ComputationBasis.ACTUAL,
    entity_filter: str | None = ALL_ENTITIES,
    policy: PayrollPolicy | None = None,
) -> list[Payslip]:
    """Compute draft payslips with the given (or default) payroll policy."""
    return PayslipCompiler(policy).compute_draft_payslips(
        workers, attendance, leaves, period, basis, entity_filter
    )


def apply_manual_hours_edit(
    payslip: Payslip,
    field: str,
    value: Any,
    contribution_table: ContributionTable | None = None,
) -> Payslip:
    """Override an overtime quantity and re-derive dependent amounts.

    Recomputes both overtime pay fields, re-estimates CPF for LOCAL workers
    from the new wage base, then recomputes net salary.
    """
    if field not in HOURS_FIELDS:
        raise ValueError(f"Cannot edit hours field '{field}'")

    if field == "premium_days_worked":
        # Without a flat rate, premium days are paid by the hour as ot2_hours
        if payslip.premium_day_flat_rate <= 0:
            raise ValueError("Cannot edit premium days without a premium-day flat rate")
        updated = replace(payslip, premium_days_worked=int(to_decimal(value)))
    else:
        updated = replace(payslip, **{field: to_decimal(value).quantize(CENTS)})

    ot1_pay, ot2_pay = compute_overtime_pay(
        updated.ot1_hours,
        updated.ot2_hours,
        updated.premium_days_worked,
        updated.premium_day_flat_rate,
        updated.hourly_rate,
    )
    updated = replace(updated, ot1_pay=ot1_pay, ot2_pay=ot2_pay)

    if updated.worker_class == WorkerClass.LOCAL:
        estimate = ContributionEstimator(contribution_table).estimate(updated.cpf_wage_base)
        updated = replace(
            updated,
            employee_cpf=estimate.employee,
            employer_cpf=estimate.employer,
        )

    return replace(updated, net_salary=compute_net_salary(updated))


def apply_manual_amount_edit(payslip: Payslip, field: str, value: Any) -> Payslip:
    """Override a discretionary allowance/deduction or its remark.

    Amount edits only recompute net salary; contributions are left as they
    were. Remark edits change nothing else.
    """
    if field in REMARK_FIELDS:
        return replace(payslip, **{field: "" if value is None else str(value)})
    if field not in AMOUNT_FIELDS:
        raise ValueError(f"Cannot edit amount field '{field}'")

    updated = replace(payslip, **{field: round_to_cents(to_decimal(value))})
    return replace(updated, net_salary=compute_net_salary(updated))

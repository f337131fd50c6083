"""Payroll run finalization and payment settlement."""

from __future__ import annotations

import logging
from collections.abc import Sequence
from dataclasses import dataclass, replace
from datetime import date, datetime, timezone
from decimal import Decimal, InvalidOperation
from typing import Any
from uuid import uuid4

from habitat_payroll.calculators.payslip_compiler import compute_net_salary
from habitat_payroll.calculators.types import (
    ZERO,
    ComputationBasis,
    PaymentStatus,
    PayrollPeriod,
    PayrollRun,
    Payslip,
    RunTotals,
    round_to_cents,
)
from habitat_payroll.services.state_machine import PaymentStatusMachine

logger = logging.getLogger(__name__)


class EmptyPayrollRunError(Exception):
    """Raised when finalizing a run with no payslips."""

    def __init__(self, period: str):
        self.period = period
        super().__init__(f"Cannot finalize payroll run for {period}: no payslips")


class InvalidPaymentAmountError(Exception):
    """Raised when a paid amount is outside the range allowed for a run."""

    def __init__(self, amount: Any, total_net: Decimal, reason: str | None = None):
        self.amount = amount
        self.total_net = total_net
        self.reason = reason
        msg = f"Invalid paid amount {amount} for run total {total_net}"
        if reason:
            msg += f": {reason}"
        super().__init__(msg)


@dataclass(frozen=True)
class RunMeta:
    """Period metadata stamped onto a finalized run."""

    period: PayrollPeriod
    payment_date: date
    basis: ComputationBasis = ComputationBasis.ACTUAL
    entity_scope: str = "ALL"
    run_id: str | None = None
    processed_at: datetime | None = None


def summarize_payslips(payslips: Sequence[Payslip]) -> RunTotals:
    """Sum pay components across payslips.

    Allowances fold the discretionary allowance together with meal and
    transport allowances. Net is re-derived from each payslip's components
    rather than taken as given.
    """
    basic = ot1 = ot2 = allowances = deductions = ZERO
    employer_cpf = employee_cpf = net = ZERO

    for p in payslips:
        basic += p.basic_salary
        ot1 += p.ot1_pay
        ot2 += p.ot2_pay
        allowances += p.allowance + p.meal_allowance + p.transport_allowance
        deductions += p.deduction
        employer_cpf += p.employer_cpf
        employee_cpf += p.employee_cpf
        net += compute_net_salary(p)

    return RunTotals(
        basic=round_to_cents(basic),
        ot1=round_to_cents(ot1),
        ot2=round_to_cents(ot2),
        allowances=round_to_cents(allowances),
        deductions=round_to_cents(deductions),
        employer_cpf=round_to_cents(employer_cpf),
        employee_cpf=round_to_cents(employee_cpf),
        net=round_to_cents(net),
    )


def finalize_run(payslips: Sequence[Payslip], meta: RunMeta) -> PayrollRun:
    """Freeze draft payslips into an immutable, unpaid payroll run."""
    label = meta.period.label
    if not payslips:
        raise EmptyPayrollRunError(label)

    payslips = [replace(p, net_salary=compute_net_salary(p)) for p in payslips]

    run = PayrollRun(
        id=meta.run_id or str(uuid4()),
        period=label,
        start_date=meta.period.start,
        end_date=meta.period.end,
        payment_date=meta.payment_date,
        basis=meta.basis,
        payslips=tuple(payslips),
        totals=summarize_payslips(payslips),
        payment_status=PaymentStatus.UNPAID,
        paid_amount=ZERO,
        entity_scope=meta.entity_scope,
        processed_at=meta.processed_at or datetime.now(timezone.utc),
    )
    logger.info(
        "Finalized payroll run %s for %s: %d payslips, net %s",
        run.id,
        label,
        len(run.payslips),
        run.total_net,
    )
    return run


def _parse_amount(value: Any, total_net: Decimal) -> Decimal:
    """Parse a caller-supplied amount; unlike source data it is never coerced."""
    try:
        amount = value if isinstance(value, Decimal) else Decimal(str(value))
    except (InvalidOperation, ValueError) as exc:
        raise InvalidPaymentAmountError(value, total_net, "not a number") from exc
    if not amount.is_finite():
        raise InvalidPaymentAmountError(value, total_net, "not a number")
    if amount < 0:
        raise InvalidPaymentAmountError(value, total_net, "amount cannot be negative")
    if amount > total_net:
        raise InvalidPaymentAmountError(value, total_net, "amount exceeds run total")
    return round_to_cents(amount)


def update_run_payment_status(
    run: PayrollRun,
    status: PaymentStatus | str,
    paid_amount: Any = None,
) -> PayrollRun:
    """Move a run to a new payment status.

    PAID snaps the paid amount to the run total and UNPAID resets it to zero.
    PARTIAL requires 0 < paid_amount < total; when no amount is given the
    current paid amount is kept.
    """
    to_status = PaymentStatus(status)
    PaymentStatusMachine.validate_transition(run.payment_status, to_status)

    total = run.total_net
    amount = _parse_amount(paid_amount, total) if paid_amount is not None else None

    if to_status == PaymentStatus.PAID:
        new_amount = total
    elif to_status == PaymentStatus.UNPAID:
        new_amount = ZERO
    else:
        new_amount = amount if amount is not None else run.paid_amount
        if not (ZERO < new_amount < total):
            raise InvalidPaymentAmountError(
                new_amount, total, "partial payment must be between 0 and the run total"
            )

    logger.info(
        "Run %s payment status %s -> %s (paid %s of %s)",
        run.id,
        run.payment_status.value,
        to_status.value,
        new_amount,
        total,
    )
    return replace(run, payment_status=to_status, paid_amount=new_amount)


def status_for_amount(amount: Decimal, total_net: Decimal) -> PaymentStatus:
    """Payment status implied by a paid amount."""
    if amount <= 0:
        return PaymentStatus.UNPAID
    if amount < total_net:
        return PaymentStatus.PARTIAL
    return PaymentStatus.PAID


def record_run_payment(run: PayrollRun, paid_amount: Any) -> PayrollRun:
    """Correct the paid amount of a run and derive its status from it.

    This is an amount correction rather than a status transition, so a PAID
    run corrected to a smaller amount becomes PARTIAL.
    """
    amount = _parse_amount(paid_amount, run.total_net)
    status = status_for_amount(amount, run.total_net)
    logger.info("Run %s paid amount set to %s (%s)", run.id, amount, status.value)
    return replace(run, payment_status=status, paid_amount=amount)

"""Tests for run finalization and settlement."""

from dataclasses import replace
from datetime import date
from decimal import Decimal

import pytest

from habitat_payroll.calculators.types import (
    ComputationBasis,
    PaymentStatus,
    PayModel,
    Payslip,
    WorkerClass,
)
from habitat_payroll.services.run_finalizer import (
    EmptyPayrollRunError,
    InvalidPaymentAmountError,
    RunMeta,
    finalize_run,
    record_run_payment,
    summarize_payslips,
    update_run_payment_status,
)
from habitat_payroll.services.state_machine import InvalidTransitionError


def _payslip(worker_id: str, net: str, **fields) -> Payslip:
    return Payslip(
        id=f"slip-{worker_id}",
        worker_id=worker_id,
        worker_name=worker_id.title(),
        worker_class=WorkerClass.FOREIGN,
        pay_model=PayModel.MONTHLY,
        net_salary=Decimal(net),
        **fields,
    )


@pytest.fixture
def meta(period) -> RunMeta:
    return RunMeta(period=period, payment_date=date(2026, 4, 7))


@pytest.fixture
def run(meta):
    """A finalized run with total net 5000."""
    payslips = [
        _payslip("alice", "3000", basic_salary=Decimal("3000")),
        _payslip("bob", "2000", basic_salary=Decimal("2000")),
    ]
    return finalize_run(payslips, meta)


class TestSummarize:
    """Test run totals."""

    def test_totals(self):
        payslips = [
            _payslip(
                "alice",
                "1155.00",
                basic_salary=Decimal("1000"),
                ot1_pay=Decimal("100"),
                ot2_pay=Decimal("50"),
                allowance=Decimal("20"),
                meal_allowance=Decimal("10"),
                transport_allowance=Decimal("5"),
                deduction=Decimal("30"),
                employee_cpf=Decimal("0"),
                employer_cpf=Decimal("17"),
            ),
            _payslip("bob", "500.00", basic_salary=Decimal("500")),
        ]

        totals = summarize_payslips(payslips)

        assert totals.basic == Decimal("1500.00")
        assert totals.ot1 == Decimal("100.00")
        assert totals.ot2 == Decimal("50.00")
        assert totals.allowances == Decimal("35.00")
        assert totals.deductions == Decimal("30.00")
        assert totals.employer_cpf == Decimal("17.00")
        assert totals.net == Decimal("1655.00")

    def test_empty(self):
        assert summarize_payslips([]).net == 0


class TestFinalize:
    """Test freezing drafts into a run."""

    def test_finalized_run(self, run, period):
        assert run.period == "2026-03"
        assert run.start_date == period.start
        assert run.end_date == period.end
        assert run.payment_date == date(2026, 4, 7)
        assert run.basis == ComputationBasis.ACTUAL
        assert run.payment_status == PaymentStatus.UNPAID
        assert run.paid_amount == 0
        assert run.total_net == Decimal("5000.00")
        assert run.processed_at is not None
        assert len(run.payslips) == 2

    def test_empty_rejected(self, meta):
        with pytest.raises(EmptyPayrollRunError):
            finalize_run([], meta)

    def test_net_rederived_from_components(self, meta):
        """A stale or altered net never reaches the frozen run."""
        tampered = _payslip("alice", "99999", basic_salary=Decimal("80"))

        run = finalize_run([tampered], meta)

        assert run.payslips[0].net_salary == Decimal("80.00")
        assert run.total_net == Decimal("80.00")

    def test_explicit_run_id(self, meta):
        run = finalize_run([_payslip("alice", "1")], replace(meta, run_id="run-1"))
        assert run.id == "run-1"


class TestPaymentStatus:
    """Test settlement transitions."""

    def test_finalize_then_settle(self, run):
        partial = update_run_payment_status(run, PaymentStatus.PARTIAL, Decimal("2000"))
        assert partial.payment_status == PaymentStatus.PARTIAL
        assert partial.paid_amount == Decimal("2000")
        assert partial.outstanding_amount == Decimal("3000")

        paid = update_run_payment_status(partial, PaymentStatus.PAID)
        assert paid.payment_status == PaymentStatus.PAID
        assert paid.paid_amount == Decimal("5000.00")

        reset = update_run_payment_status(paid, PaymentStatus.UNPAID)
        assert reset.payment_status == PaymentStatus.UNPAID
        assert reset.paid_amount == 0

        # The original run is untouched
        assert run.payment_status == PaymentStatus.UNPAID

    def test_partial_amount_change(self, run):
        partial = update_run_payment_status(run, "PARTIAL", "1000")
        again = update_run_payment_status(partial, "PARTIAL", "2500")
        assert again.paid_amount == Decimal("2500")

    def test_partial_keeps_current_amount(self, run):
        partial = update_run_payment_status(run, PaymentStatus.PARTIAL, Decimal("1000"))
        assert update_run_payment_status(partial, PaymentStatus.PARTIAL).paid_amount == 1000

    @pytest.mark.parametrize("amount", ["0", "5000", "-1", "5000.01"])
    def test_partial_out_of_range(self, run, amount):
        with pytest.raises(InvalidPaymentAmountError):
            update_run_payment_status(run, PaymentStatus.PARTIAL, Decimal(amount))

    def test_partial_requires_amount(self, run):
        with pytest.raises(InvalidPaymentAmountError):
            update_run_payment_status(run, PaymentStatus.PARTIAL)

    def test_paid_with_excess_amount(self, run):
        with pytest.raises(InvalidPaymentAmountError):
            update_run_payment_status(run, PaymentStatus.PAID, Decimal("6000"))

    def test_non_numeric_amount(self, run):
        with pytest.raises(InvalidPaymentAmountError):
            update_run_payment_status(run, PaymentStatus.PARTIAL, "lots")

    def test_paid_to_partial_rejected(self, run):
        paid = update_run_payment_status(run, PaymentStatus.PAID)
        with pytest.raises(InvalidTransitionError):
            update_run_payment_status(paid, PaymentStatus.PARTIAL, Decimal("100"))


class TestRecordPayment:
    """Test amount-driven settlement."""

    @pytest.mark.parametrize(
        "amount,status",
        [
            ("0", PaymentStatus.UNPAID),
            ("1000", PaymentStatus.PARTIAL),
            ("5000", PaymentStatus.PAID),
        ],
    )
    def test_status_derived(self, run, amount, status):
        updated = record_run_payment(run, Decimal(amount))
        assert updated.payment_status == status
        assert updated.paid_amount == Decimal(amount)

    def test_corrects_paid_run(self, run):
        paid = update_run_payment_status(run, PaymentStatus.PAID)
        corrected = record_run_payment(paid, "4000")
        assert corrected.payment_status == PaymentStatus.PARTIAL

    @pytest.mark.parametrize("amount", ["-1", "5000.01"])
    def test_out_of_range(self, run, amount):
        with pytest.raises(InvalidPaymentAmountError):
            record_run_payment(run, Decimal(amount))

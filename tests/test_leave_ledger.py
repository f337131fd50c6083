"""Tests for leave aggregation and entitlements."""

from datetime import date
from decimal import Decimal

from habitat_payroll.calculators.leave_ledger import (
    EntitlementPolicy,
    LeaveLedgerAggregator,
    leave_days,
)
from habitat_payroll.calculators.types import (
    LeaveEntitlement,
    LeaveType,
    PayModel,
    PayrollPeriod,
)


class TestLeaveDays:
    """Test leave span day counts."""

    def test_inclusive_span(self):
        assert leave_days(date(2026, 3, 2), date(2026, 3, 4), LeaveType.ANNUAL) == 3

    def test_half_day_types(self):
        for leave_type in (LeaveType.HALF_DAY_ANNUAL, LeaveType.HALF_DAY_OFF_DAY):
            assert leave_days(date(2026, 3, 2), date(2026, 3, 4), leave_type) == Decimal("0.5")

    def test_minimum_one_day(self):
        """An end date before the start still counts as one day."""
        assert leave_days(date(2026, 3, 4), date(2026, 3, 2), LeaveType.MC) == 1


class TestEntitlementPolicy:
    """Test service-length based leave caps."""

    def test_first_year(self, make_worker):
        entitlement = EntitlementPolicy().for_worker(make_worker(), date(2026, 3, 31))
        assert entitlement == LeaveEntitlement(
            annual=Decimal("7"), medical=Decimal("14"), hospitalization=Decimal("60")
        )

    def test_grows_per_completed_year(self, make_worker):
        worker = make_worker(date_joined=date(2020, 6, 1))
        # Five full years completed by March 2026
        assert EntitlementPolicy().for_worker(worker, date(2026, 3, 31)).annual == 12

    def test_capped(self, make_worker):
        worker = make_worker(date_joined=date(2010, 1, 1))
        assert EntitlementPolicy().for_worker(worker, date(2026, 3, 31)).annual == 14


class TestLeaveLedgerAggregator:
    """Test paid/unpaid leave aggregation."""

    def test_monthly_worker(self, make_worker, make_leave, period):
        worker = make_worker(pay_model=PayModel.MONTHLY, salary=Decimal("2600"))
        leaves = [
            make_leave(worker.id, date(2026, 3, 2), date(2026, 3, 3), LeaveType.ANNUAL),
            make_leave(worker.id, date(2026, 3, 9), date(2026, 3, 10), LeaveType.UNPAID_LEAVE),
            make_leave(worker.id, date(2026, 2, 10), leave_type=LeaveType.MC),
        ]

        summary = LeaveLedgerAggregator().aggregate(worker, period, leaves)

        assert summary.paid_absence_days == 2
        assert summary.unpaid_deductible_days == 2
        assert summary.annual_used == 2
        assert summary.medical_used == 1
        assert summary.unpaid_used == 2
        assert summary.annual_remaining == 5

    def test_reclassified_leave_is_unpaid(self, make_worker, make_leave, period):
        """Leave stored as UNPAID_LEAVE never counts as paid, whatever the balance."""
        worker = make_worker(pay_model=PayModel.MONTHLY, salary=Decimal("2600"))
        leaves = [
            make_leave(worker.id, date(2026, 1, 5), date(2026, 1, 24), LeaveType.ANNUAL),
            make_leave(worker.id, date(2026, 3, 16), leave_type=LeaveType.UNPAID_LEAVE),
        ]

        summary = LeaveLedgerAggregator().aggregate(worker, period, leaves)

        assert summary.annual_remaining < 0
        assert summary.unpaid_deductible_days == 1
        assert summary.paid_absence_days == 0

    def test_non_monthly_uses_payable_flag(self, make_worker, make_leave, period):
        worker = make_worker(pay_model=PayModel.DAILY, salary=Decimal("120"))
        leaves = [
            make_leave(worker.id, date(2026, 3, 2), leave_type=LeaveType.MC, is_payable=True),
            make_leave(worker.id, date(2026, 3, 3), leave_type=LeaveType.ANNUAL),
        ]

        summary = LeaveLedgerAggregator().aggregate(worker, period, leaves)

        assert summary.paid_absence_days == 1

    def test_other_workers_ignored(self, make_worker, make_leave, period):
        worker = make_worker(pay_model=PayModel.MONTHLY)
        leaves = [make_leave("someone-else", date(2026, 3, 2), leave_type=LeaveType.UNPAID_LEAVE)]

        summary = LeaveLedgerAggregator().aggregate(worker, period, leaves)

        assert summary.unpaid_deductible_days == 0

    def test_period_spanning_new_year(self, make_worker, make_leave):
        """December leave in a Dec-Jan period is payable/deductible but not this year's usage."""
        worker = make_worker(pay_model=PayModel.MONTHLY, salary=Decimal("2600"))
        period = PayrollPeriod(date(2025, 12, 16), date(2026, 1, 15))
        leaves = [
            make_leave(worker.id, date(2025, 12, 22), date(2025, 12, 23), LeaveType.UNPAID_LEAVE),
            make_leave(worker.id, date(2025, 12, 29), leave_type=LeaveType.ANNUAL),
            make_leave(worker.id, date(2026, 1, 5), leave_type=LeaveType.ANNUAL),
        ]

        summary = LeaveLedgerAggregator().aggregate(worker, period, leaves)

        assert summary.unpaid_deductible_days == 2
        assert summary.paid_absence_days == 2
        assert summary.annual_used == 1
        assert summary.unpaid_used == 0

"""Leave ledger aggregation for a payroll period."""

from __future__ import annotations

from collections.abc import Iterable
from datetime import date
from decimal import Decimal

from habitat_payroll.calculators.types import (
    HALF_DAY_LEAVE_TYPES,
    PAID_LEAVE_TYPES,
    UNPAID_LEAVE_TYPES,
    LeaveEntitlement,
    LeaveRecord,
    LeaveSummary,
    LeaveType,
    PayrollPeriod,
    Worker,
    to_decimal,
)

HALF_DAY = Decimal("0.5")


def leave_days(start: date, end: date, leave_type: LeaveType) -> Decimal:
    """Days a leave span consumes: 0.5 for half-day types, else inclusive count."""
    if leave_type in HALF_DAY_LEAVE_TYPES:
        return HALF_DAY
    return Decimal(max(1, (end - start).days + 1))


class EntitlementPolicy:
    """Yearly leave caps keyed on length of service.

    Annual leave starts at 7 days in the first year of service and grows by one
    day per completed year up to 14. Medical and hospitalization caps are flat.
    Workers without a join date get first-year figures.
    """

    def __init__(
        self,
        base_annual: Decimal = Decimal("7"),
        max_annual: Decimal = Decimal("14"),
        medical: Decimal = Decimal("14"),
        hospitalization: Decimal = Decimal("60"),
    ):
        self.base_annual = base_annual
        self.max_annual = max_annual
        self.medical = medical
        self.hospitalization = hospitalization

    def for_worker(self, worker: Worker, as_of: date) -> LeaveEntitlement:
        years = 0
        if worker.date_joined is not None and worker.date_joined <= as_of:
            years = as_of.year - worker.date_joined.year
            if (as_of.month, as_of.day) < (worker.date_joined.month, worker.date_joined.day):
                years -= 1
        annual = min(self.max_annual, self.base_annual + Decimal(years))
        return LeaveEntitlement(
            annual=annual,
            medical=self.medical,
            hospitalization=self.hospitalization,
        )


def is_paid_absence(record: LeaveRecord, worker: Worker) -> bool:
    """Monthly workers are paid by leave type; others by explicit choice."""
    if worker.is_monthly:
        return record.leave_type in PAID_LEAVE_TYPES
    return bool(record.is_payable)


class LeaveLedgerAggregator:
    """Aggregates leave records into paid and deductible days.

    Entitlement usage is tracked per calendar year, so year-to-date usage is
    summed over records starting between 1 January and the period end, while
    the payable/deductible figures only count records starting inside the
    payroll period. Leave types are trusted as stored: reclassification past
    the entitlement cap happens when leave is recorded, never here.
    """

    def aggregate(
        self,
        worker: Worker,
        period: PayrollPeriod,
        leaves: Iterable[LeaveRecord],
        entitlement: LeaveEntitlement | None = None,
    ) -> LeaveSummary:
        summary = LeaveSummary(entitlement=entitlement or LeaveEntitlement())

        for record in leaves:
            if record.worker_id != worker.id:
                continue
            days = to_decimal(record.total_days)

            # Year-to-date usage
            if period.year_start <= record.start_date <= period.end:
                if record.leave_type in (LeaveType.ANNUAL, LeaveType.HALF_DAY_ANNUAL):
                    summary.annual_used += days
                elif record.leave_type == LeaveType.MC:
                    summary.medical_used += days
                elif record.leave_type == LeaveType.HOSPITALIZATION:
                    summary.hospitalization_used += days
                elif record.leave_type in UNPAID_LEAVE_TYPES:
                    summary.unpaid_used += days

            # A period may start in the previous calendar year
            if not period.contains(record.start_date):
                continue

            if is_paid_absence(record, worker):
                summary.paid_absence_days += days
            if record.leave_type in UNPAID_LEAVE_TYPES:
                summary.unpaid_deductible_days += days

        return summary

"""Attendance aggregation with overtime-policy rules."""

from __future__ import annotations

from collections.abc import Collection, Iterable
from datetime import date
from decimal import Decimal

from habitat_payroll.calculators.calendar import STANDARD_OT_MULTIPLIER, overtime_multiplier
from habitat_payroll.calculators.types import (
    ZERO,
    AttendanceRecord,
    AttendanceSummary,
    OvertimePolicy,
    PayrollPeriod,
    to_decimal,
)

MEAL_ALLOWANCE_UNIT = Decimal("5")
OVERTIME_GRACE_HOURS = Decimal("2")

GRACE_POLICIES = frozenset(
    {OvertimePolicy.FIXED_INCL_7PM, OvertimePolicy.FIXED_7PM_SUN_FLAT}
)
FLAT_PREMIUM_POLICIES = frozenset(
    {OvertimePolicy.STANDARD, OvertimePolicy.FIXED_7PM_SUN_FLAT}
)


def latest_per_day(records: Iterable[AttendanceRecord]) -> list[AttendanceRecord]:
    """Keep one record per (worker, date); later entries supersede earlier ones."""
    by_day: dict[tuple[str, date], AttendanceRecord] = {}
    for record in records:
        by_day[(record.worker_id, record.work_date)] = record
    return sorted(by_day.values(), key=lambda r: (r.worker_id, r.work_date))


class AttendanceAggregator:
    """Folds daily attendance logs into payable hour buckets.

    Per record:
    - 1.5x day: normal hours count as standard hours; overtime goes to the
      first tier (less a 2-hour grace under the FIXED_* policies, nothing
      under NONE); the day counts as worked if any hours were logged.
    - 2.0x (premium) day: NONE pays nothing; with a flat premium-day rate
      under STANDARD or FIXED_7PM_SUN_FLAT the day is counted instead of its
      hours; otherwise raw overtime goes to the second tier. The grace period
      never applies to premium days.
    - Always: meal allowance unit when flagged, transport claim summed.
    """

    def __init__(
        self,
        holidays: Collection[date] | None = None,
        meal_allowance_unit: Decimal = MEAL_ALLOWANCE_UNIT,
    ):
        self.holidays = holidays
        self.meal_allowance_unit = meal_allowance_unit

    def aggregate(
        self,
        worker_id: str,
        period: PayrollPeriod,
        records: Iterable[AttendanceRecord],
        policy: OvertimePolicy = OvertimePolicy.STANDARD,
        premium_day_rate: Decimal = ZERO,
    ) -> AttendanceSummary:
        summary = AttendanceSummary()
        premium_day_rate = to_decimal(premium_day_rate)

        matching = [
            r for r in records
            if r.worker_id == worker_id and period.contains(r.work_date)
        ]

        for record in latest_per_day(matching):
            normal = to_decimal(record.hours_worked)
            raw_ot = to_decimal(record.overtime_hours)
            worked = normal > 0 or raw_ot > 0

            if record.has_meal_allowance:
                summary.meal_allowance_total += self.meal_allowance_unit
            summary.transport_claim_total += to_decimal(record.transport_claim)

            if overtime_multiplier(record.work_date, self.holidays) == STANDARD_OT_MULTIPLIER:
                summary.standard_hours += normal
                summary.ot1_hours += self._first_tier_hours(raw_ot, policy)
                if worked:
                    summary.work_days += 1
                continue

            if policy == OvertimePolicy.NONE:
                continue
            if premium_day_rate > 0 and policy in FLAT_PREMIUM_POLICIES:
                if worked:
                    summary.premium_days_worked += 1
            else:
                summary.ot2_hours += raw_ot

        return summary

    @staticmethod
    def _first_tier_hours(raw_ot: Decimal, policy: OvertimePolicy) -> Decimal:
        if policy == OvertimePolicy.NONE:
            return ZERO
        if policy in GRACE_POLICIES:
            return max(ZERO, raw_ot - OVERTIME_GRACE_HOURS)
        return raw_ot

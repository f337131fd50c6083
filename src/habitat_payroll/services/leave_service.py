"""Leave entry with entitlement-cap enforcement."""

from __future__ import annotations

import logging
from collections.abc import Sequence
from dataclasses import dataclass, replace
from datetime import date
from decimal import Decimal

from habitat_payroll.calculators.leave_ledger import (
    EntitlementPolicy,
    LeaveLedgerAggregator,
    leave_days,
)
from habitat_payroll.calculators.types import (
    LeaveEntitlement,
    LeaveRecord,
    LeaveType,
    PayrollPeriod,
    Worker,
)

logger = logging.getLogger(__name__)

# Leave type each capped type becomes once its entitlement is exhausted
RECLASSIFICATION: dict[LeaveType, LeaveType] = {
    LeaveType.ANNUAL: LeaveType.UNPAID_LEAVE,
    LeaveType.HALF_DAY_ANNUAL: LeaveType.HALF_DAY_OFF_DAY,
    LeaveType.MC: LeaveType.UNPAID_MC,
}


class EntitlementConfirmationRequired(Exception):
    """Raised when a leave request exceeds its cap and was not confirmed."""

    def __init__(self, plan: LeavePlan):
        self.plan = plan
        super().__init__(plan.message)


@dataclass(frozen=True)
class LeavePlan:
    """Outcome of checking a leave request against the worker's caps."""

    record: LeaveRecord
    requested_days: Decimal
    used: Decimal
    cap: Decimal | None
    exceeds_cap: bool
    final_type: LeaveType
    message: str = ""

    @property
    def reclassified(self) -> bool:
        return self.final_type != self.record.leave_type


class LeaveService:
    """Checks leave requests against year-to-date usage.

    Annual leave (full and half day) and MC are capped per calendar year of
    the request's start date. A request that would take usage past the cap is
    stored as the corresponding unpaid type, but only after the caller
    confirms. Hospitalization and unpaid types are never reclassified.
    """

    def __init__(self, entitlements: EntitlementPolicy | None = None):
        self.entitlements = entitlements or EntitlementPolicy()
        self.ledger = LeaveLedgerAggregator()

    def plan(
        self,
        worker: Worker,
        request: LeaveRecord,
        existing: Sequence[LeaveRecord],
        as_of: date | None = None,
    ) -> LeavePlan:
        """Compute days, usage and the type the request would be stored as.

        When ``request.id`` matches an existing record (an edit), that record
        is left out of the usage figures.
        """
        requested = leave_days(request.start_date, request.end_date, request.leave_type)
        record = replace(request, worker_id=worker.id, total_days=requested)

        year = request.start_date.year
        entitlement = self.entitlements.for_worker(worker, as_of or request.start_date)
        others = [leave for leave in existing if leave.id != request.id]
        usage = self.ledger.aggregate(
            worker,
            PayrollPeriod(date(year, 1, 1), date(year, 12, 31)),
            others,
            entitlement,
        )

        used, cap = self._usage_and_cap(
            request.leave_type, usage.annual_used, usage.medical_used, entitlement
        )
        if cap is None or used + requested <= cap:
            return LeavePlan(
                record=record,
                requested_days=requested,
                used=used,
                cap=cap,
                exceeds_cap=False,
                final_type=request.leave_type,
            )

        final_type = RECLASSIFICATION[request.leave_type]
        label = "MC days" if request.leave_type == LeaveType.MC else "days"
        message = (
            f"Employee has already used {used.normalize():f}/{cap.normalize():f} {label}. "
            f"Exceeding limit will convert this to {final_type.value}. Proceed?"
        )
        return LeavePlan(
            record=record,
            requested_days=requested,
            used=used,
            cap=cap,
            exceeds_cap=True,
            final_type=final_type,
            message=message,
        )

    @staticmethod
    def _usage_and_cap(
        leave_type: LeaveType,
        annual_used: Decimal,
        medical_used: Decimal,
        entitlement: LeaveEntitlement,
    ) -> tuple[Decimal, Decimal | None]:
        if leave_type in (LeaveType.ANNUAL, LeaveType.HALF_DAY_ANNUAL):
            return annual_used, entitlement.annual
        if leave_type == LeaveType.MC:
            return medical_used, entitlement.medical
        return Decimal("0"), None

    def accept(self, plan: LeavePlan, confirmed: bool = False) -> LeaveRecord:
        """Return the record to persist for a plan.

        Raises:
            EntitlementConfirmationRequired: If the request exceeds its cap
                and the caller has not confirmed the reclassification.
        """
        if not plan.exceeds_cap:
            return plan.record
        if not confirmed:
            raise EntitlementConfirmationRequired(plan)
        logger.info(
            "Leave %s for worker %s reclassified %s -> %s (used %s of %s)",
            plan.record.id,
            plan.record.worker_id,
            plan.record.leave_type.value,
            plan.final_type.value,
            plan.used,
            plan.cap,
        )
        return replace(plan.record, leave_type=plan.final_type)

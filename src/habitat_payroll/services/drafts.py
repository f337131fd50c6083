"""Draft payroll session: recompute from source, then patch by hand."""

from __future__ import annotations

import logging
from collections.abc import Sequence
from typing import Any

from habitat_payroll.calculators.payslip_compiler import (
    PayslipCompiler,
    apply_manual_amount_edit,
    apply_manual_hours_edit,
)
from habitat_payroll.calculators.policy import PayrollPolicy
from habitat_payroll.calculators.types import (
    AttendanceRecord,
    ComputationBasis,
    LeaveRecord,
    PayrollPeriod,
    Payslip,
    Worker,
)

logger = logging.getLogger(__name__)


class DraftPayroll:
    """Holds the most recently computed draft payslips for one period.

    ``reset`` always replaces the whole list with a fresh computation; manual
    edits are explicit patches applied to a single payslip of that list.
    """

    def __init__(
        self,
        period: PayrollPeriod,
        basis: ComputationBasis = ComputationBasis.ACTUAL,
        entity_filter: str = "ALL",
        policy: PayrollPolicy | None = None,
    ):
        self.period = period
        self.basis = basis
        self.entity_filter = entity_filter
        self.compiler = PayslipCompiler(policy)
        self.payslips: list[Payslip] = []

    def reset(
        self,
        workers: Sequence[Worker],
        attendance: Sequence[AttendanceRecord],
        leaves: Sequence[LeaveRecord],
    ) -> list[Payslip]:
        """Discard all edits and recompute from source records."""
        self.payslips = self.compiler.compute_draft_payslips(
            workers, attendance, leaves, self.period, self.basis, self.entity_filter
        )
        return self.payslips

    def _index_of(self, payslip_id: str) -> int:
        for i, payslip in enumerate(self.payslips):
            if payslip.id == payslip_id:
                return i
        raise KeyError(payslip_id)

    def edit_hours(self, payslip_id: str, field: str, value: Any) -> Payslip:
        """Patch an overtime quantity on one payslip."""
        i = self._index_of(payslip_id)
        self.payslips[i] = apply_manual_hours_edit(
            self.payslips[i], field, value, self.compiler.policy.contribution_table
        )
        logger.debug("Edited %s on payslip %s", field, payslip_id)
        return self.payslips[i]

    def edit_amount(self, payslip_id: str, field: str, value: Any) -> Payslip:
        """Patch an allowance, deduction or remark on one payslip."""
        i = self._index_of(payslip_id)
        self.payslips[i] = apply_manual_amount_edit(self.payslips[i], field, value)
        logger.debug("Edited %s on payslip %s", field, payslip_id)
        return self.payslips[i]

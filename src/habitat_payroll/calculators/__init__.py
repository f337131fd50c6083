"""Payroll calculation core."""

from habitat_payroll.calculators.attendance import AttendanceAggregator
from habitat_payroll.calculators.calendar import is_premium_day, overtime_multiplier
from habitat_payroll.calculators.contribution import (
    SG_CPF_TABLE,
    ContributionEstimator,
    ContributionTable,
)
from habitat_payroll.calculators.leave_ledger import EntitlementPolicy, LeaveLedgerAggregator
from habitat_payroll.calculators.payslip_compiler import (
    PayslipCompiler,
    apply_manual_amount_edit,
    apply_manual_hours_edit,
    compute_draft_payslips,
)
from habitat_payroll.calculators.policy import PayrollPolicy
from habitat_payroll.calculators.rate_resolver import RateResolver

__all__ = [
    "AttendanceAggregator",
    "is_premium_day",
    "overtime_multiplier",
    "SG_CPF_TABLE",
    "ContributionEstimator",
    "ContributionTable",
    "EntitlementPolicy",
    "LeaveLedgerAggregator",
    "PayslipCompiler",
    "apply_manual_amount_edit",
    "apply_manual_hours_edit",
    "compute_draft_payslips",
    "PayrollPolicy",
    "RateResolver",
]

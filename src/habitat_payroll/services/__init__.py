"""Payroll services."""

from habitat_payroll.services.drafts import DraftPayroll
from habitat_payroll.services.leave_service import (
    EntitlementConfirmationRequired,
    LeavePlan,
    LeaveService,
)
from habitat_payroll.services.repository import PayrollRepository, PayrollRunNotFoundError
from habitat_payroll.services.run_finalizer import (
    EmptyPayrollRunError,
    InvalidPaymentAmountError,
    RunMeta,
    finalize_run,
    record_run_payment,
    summarize_payslips,
    update_run_payment_status,
)
from habitat_payroll.services.state_machine import InvalidTransitionError, PaymentStatusMachine

__all__ = [
    "DraftPayroll",
    "EntitlementConfirmationRequired",
    "LeavePlan",
    "LeaveService",
    "PayrollRepository",
    "PayrollRunNotFoundError",
    "EmptyPayrollRunError",
    "InvalidPaymentAmountError",
    "RunMeta",
    "finalize_run",
    "record_run_payment",
    "summarize_payslips",
    "update_run_payment_status",
    "InvalidTransitionError",
    "PaymentStatusMachine",
]

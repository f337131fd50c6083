"""Payment status state machine for finalized payroll runs."""

from __future__ import annotations

from habitat_payroll.calculators.types import PaymentStatus


def _label(status: str) -> str:
    return status.value if isinstance(status, PaymentStatus) else str(status)


class InvalidTransitionError(Exception):
    """Raised when an invalid payment status transition is attempted."""

    def __init__(self, from_status: str, to_status: str, reason: str | None = None):
        self.from_status = from_status
        self.to_status = to_status
        self.reason = reason
        msg = f"Invalid transition from '{from_status}' to '{to_status}'"
        if reason:
            msg += f": {reason}"
        super().__init__(msg)


class PaymentStatusMachine:
    """State machine for run payment status.

    Allowed transitions:
    - UNPAID → PARTIAL, PAID
    - PARTIAL → PARTIAL (amount change), PAID
    - any → UNPAID (reset)
    - PAID → PAID (no-op)

    PAID → PARTIAL is rejected: a settled run must be reset to UNPAID before
    a partial amount is recorded again.
    """

    VALID_TRANSITIONS: dict[str, list[str]] = {
        PaymentStatus.UNPAID: [PaymentStatus.UNPAID, PaymentStatus.PARTIAL, PaymentStatus.PAID],
        PaymentStatus.PARTIAL: [PaymentStatus.UNPAID, PaymentStatus.PARTIAL, PaymentStatus.PAID],
        PaymentStatus.PAID: [PaymentStatus.UNPAID, PaymentStatus.PAID],
    }

    @classmethod
    def can_transition(cls, from_status: str, to_status: str) -> bool:
        """Check if a transition is valid."""
        allowed = cls.VALID_TRANSITIONS.get(from_status, [])
        return to_status in allowed

    @classmethod
    def validate_transition(cls, from_status: str, to_status: str) -> None:
        """Validate a transition, raising InvalidTransitionError if invalid."""
        if not cls.can_transition(from_status, to_status):
            raise InvalidTransitionError(_label(from_status), _label(to_status))

    @classmethod
    def get_next_statuses(cls, current_status: str) -> list[str]:
        """Get list of valid next statuses from current status."""
        return cls.VALID_TRANSITIONS.get(current_status, [])

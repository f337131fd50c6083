"""Tests for the run payment status state machine."""

import pytest

from habitat_payroll.calculators.types import PaymentStatus
from habitat_payroll.services.state_machine import InvalidTransitionError, PaymentStatusMachine


class TestPaymentStatusMachine:
    """Test state machine transitions."""

    def test_valid_transitions(self):
        """Test that valid transitions are allowed."""
        # UNPAID → PARTIAL / PAID
        assert PaymentStatusMachine.can_transition("UNPAID", "PARTIAL") is True
        assert PaymentStatusMachine.can_transition("UNPAID", "PAID") is True

        # PARTIAL → PARTIAL (amount change) / PAID
        assert PaymentStatusMachine.can_transition("PARTIAL", "PARTIAL") is True
        assert PaymentStatusMachine.can_transition("PARTIAL", "PAID") is True

        # Reset from anywhere
        assert PaymentStatusMachine.can_transition("PARTIAL", "UNPAID") is True
        assert PaymentStatusMachine.can_transition("PAID", "UNPAID") is True

    def test_paid_to_partial_blocked(self):
        """A settled run must be reset before a partial payment."""
        assert PaymentStatusMachine.can_transition("PAID", "PARTIAL") is False

    def test_unknown_status(self):
        assert PaymentStatusMachine.can_transition("VOID", "PAID") is False
        assert PaymentStatusMachine.get_next_statuses("VOID") == []

    def test_validate_transition_raises(self):
        """Test that validate_transition raises for invalid transitions."""
        with pytest.raises(InvalidTransitionError) as exc_info:
            PaymentStatusMachine.validate_transition(PaymentStatus.PAID, PaymentStatus.PARTIAL)

        assert exc_info.value.from_status == "PAID"
        assert exc_info.value.to_status == "PARTIAL"
        assert "Invalid transition from 'PAID' to 'PARTIAL'" in str(exc_info.value)

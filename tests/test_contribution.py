"""Tests for CPF contribution estimation."""

from decimal import Decimal

import pytest

from habitat_payroll.calculators.contribution import (
    SG_CPF_TABLE,
    ContributionEstimator,
    ContributionTable,
)
from habitat_payroll.calculators.types import WorkerClass


@pytest.fixture
def estimator() -> ContributionEstimator:
    return ContributionEstimator()


class TestBracketTable:
    """Test the default CPF bracket table."""

    @pytest.mark.parametrize(
        "wage,employee,employer",
        [
            ("0", "0", "0"),
            ("40", "0", "0"),
            ("400", "0", "68.00"),
            ("600", "60.00", "102.00"),
            ("750", "150.00", "127.50"),
            ("1000", "200.00", "170.00"),
            ("3216.35", "643.27", "546.78"),
        ],
    )
    def test_brackets(self, estimator, wage, employee, employer):
        estimate = estimator.estimate(Decimal(wage))
        assert estimate.employee == Decimal(employee)
        assert estimate.employer == Decimal(employer)

    def test_wage_ceiling(self, estimator):
        """Wages above the ceiling contribute as if at the ceiling."""
        estimate = estimator.estimate(Decimal("10000"))
        assert estimate.employee == Decimal("1600.00")
        assert estimate.employer == Decimal("1360.00")
        assert estimate.total == Decimal("2960.00")

    def test_custom_ceiling(self):
        table = SG_CPF_TABLE.with_ceiling(Decimal("6000"))
        estimate = ContributionEstimator(table).estimate(Decimal("10000"))
        assert estimate.employee == Decimal("1200.00")

    def test_dirty_wage(self, estimator):
        """Non-numeric or negative wages estimate to zero."""
        assert estimator.estimate("abc").total == 0
        assert estimator.estimate(Decimal("-100")).total == 0


class TestForWorker:
    """Test classification-based estimation."""

    def test_local_uses_table(self, estimator):
        estimate = estimator.for_worker(WorkerClass.LOCAL, Decimal("1000"))
        assert estimate.employee == Decimal("200.00")

    def test_foreign_passes_fixed_amounts(self, estimator):
        """FOREIGN workers carry their configured amounts regardless of wage."""
        estimate = estimator.for_worker(
            WorkerClass.FOREIGN,
            Decimal("1000"),
            fixed_employee=Decimal("50"),
            fixed_employer=Decimal("30"),
        )
        assert estimate.employee == Decimal("50")
        assert estimate.employer == Decimal("30")

    def test_foreign_defaults_to_zero(self, estimator):
        assert estimator.for_worker(WorkerClass.FOREIGN, Decimal("5000")).total == 0


class TestTablePayload:
    """Test table configuration parsing."""

    def test_from_payload(self):
        table = ContributionTable.from_payload(
            {
                "wage_ceiling": 1000,
                "brackets": [
                    {"min": 0, "max": None, "employer_rate": 0.1, "employee_rate": 0.05},
                ],
            }
        )
        estimate = ContributionEstimator(table).estimate(Decimal("2000"))
        assert estimate.employer == Decimal("100.00")
        assert estimate.employee == Decimal("50.00")

    def test_empty_table_rejected(self):
        with pytest.raises(ValueError):
            ContributionTable(brackets=())

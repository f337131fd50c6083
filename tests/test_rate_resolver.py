"""Tests for rate resolution."""

from decimal import Decimal

from habitat_payroll.calculators.rate_resolver import RateResolver
from habitat_payroll.calculators.types import ComputationBasis, PayModel

ACTUAL = ComputationBasis.ACTUAL
DECLARED = ComputationBasis.DECLARED_FIXED


class TestEffectiveHourlyRate:
    """Test hourly rate derivation per pay model."""

    def test_monthly(self, make_worker):
        """Monthly salary is spread over 26 days of 8 hours."""
        worker = make_worker(pay_model=PayModel.MONTHLY, salary=Decimal("2600"))
        assert RateResolver.effective_hourly_rate(worker, ACTUAL) == Decimal("12.5000")

    def test_daily(self, make_worker):
        """Daily rate is divided by 8 hours."""
        worker = make_worker(pay_model=PayModel.DAILY, salary=Decimal("120"))
        assert RateResolver.effective_hourly_rate(worker, ACTUAL) == Decimal("15.0000")

    def test_hourly(self, make_worker):
        """Hourly rate is used as-is."""
        worker = make_worker(salary=Decimal("10"))
        assert RateResolver.effective_hourly_rate(worker, ACTUAL) == Decimal("10.0000")

    def test_rounded_to_four_places(self, make_worker):
        """Internal rates keep 4 decimal places."""
        worker = make_worker(pay_model=PayModel.MONTHLY, salary=Decimal("1000"))
        assert RateResolver.effective_hourly_rate(worker, ACTUAL) == Decimal("4.8077")

    def test_declared_fixed_for_any_pay_model(self, make_worker):
        """Declared-fixed basis always uses salary / 26 / 8."""
        worker = make_worker(salary=Decimal("10"), declared_fixed_salary=Decimal("2080"))
        assert RateResolver.effective_hourly_rate(worker, DECLARED) == Decimal("10.0000")

    def test_declared_fixed_falls_back_to_salary(self, make_worker):
        """Without a declared figure the regular salary is used."""
        worker = make_worker(pay_model=PayModel.MONTHLY, salary=Decimal("2600"))
        assert RateResolver.salary_figure(worker, DECLARED) == Decimal("2600")
        assert RateResolver.effective_hourly_rate(worker, DECLARED) == Decimal("12.5000")

    def test_missing_salary_is_zero(self, make_worker):
        """Dirty salary input resolves to a zero rate."""
        assert RateResolver.effective_hourly_rate(make_worker(salary=None), ACTUAL) == 0
        assert RateResolver.effective_hourly_rate(make_worker(salary="abc"), ACTUAL) == 0
        assert RateResolver.effective_hourly_rate(make_worker(salary="-5"), ACTUAL) == 0


class TestDayRate:
    """Test one-day pay per pay model."""

    def test_day_rates(self, make_worker):
        monthly = make_worker(pay_model=PayModel.MONTHLY, salary=Decimal("2600"))
        daily = make_worker(pay_model=PayModel.DAILY, salary=Decimal("120"))
        hourly = make_worker(salary=Decimal("10"))

        assert RateResolver.day_rate(monthly, ACTUAL) == Decimal("100")
        assert RateResolver.day_rate(daily, ACTUAL) == Decimal("120")
        assert RateResolver.day_rate(hourly, ACTUAL) == Decimal("80")

    def test_monthly_day_rate_of_zero(self):
        assert RateResolver.monthly_day_rate(Decimal("0")) == 0

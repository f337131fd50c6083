"""Pay rate resolution from a worker's pay-model configuration."""

from __future__ import annotations

from decimal import ROUND_HALF_UP, Decimal

from habitat_payroll.calculators.types import (
    RATE_PRECISION,
    ZERO,
    ComputationBasis,
    PayModel,
    Worker,
    to_decimal,
)

WORKING_DAYS_PER_MONTH = Decimal("26")
HOURS_PER_DAY = Decimal("8")


class RateResolver:
    """Derives the salary figure, hourly rate and day rate for a worker.

    Rate selection:
    1. DECLARED_FIXED basis: declared-fixed salary / 26 / 8 for every pay model
    2. MONTHLY: monthly salary / 26 / 8 (only used for overtime)
    3. DAILY: daily rate / 8
    4. HOURLY: stored hourly rate

    Missing or zero salary inputs resolve to 0, never an error.
    """

    @staticmethod
    def salary_figure(worker: Worker, basis: ComputationBasis) -> Decimal:
        """The raw salary value a payslip is computed from."""
        if basis == ComputationBasis.DECLARED_FIXED and worker.declared_fixed_salary is not None:
            return to_decimal(worker.declared_fixed_salary)
        return to_decimal(worker.salary)

    @staticmethod
    def effective_hourly_rate(worker: Worker, basis: ComputationBasis) -> Decimal:
        """Hourly rate used for overtime pay."""
        figure = RateResolver.salary_figure(worker, basis)

        if basis == ComputationBasis.DECLARED_FIXED or worker.pay_model == PayModel.MONTHLY:
            rate = figure / WORKING_DAYS_PER_MONTH / HOURS_PER_DAY
        elif worker.pay_model == PayModel.DAILY:
            rate = figure / HOURS_PER_DAY
        else:
            rate = figure

        return rate.quantize(RATE_PRECISION, rounding=ROUND_HALF_UP)

    @staticmethod
    def day_rate(worker: Worker, basis: ComputationBasis) -> Decimal:
        """Pay for one full working day."""
        figure = RateResolver.salary_figure(worker, basis)

        if worker.pay_model == PayModel.DAILY:
            return figure
        if worker.pay_model == PayModel.HOURLY:
            return figure * HOURS_PER_DAY
        return figure / WORKING_DAYS_PER_MONTH

    @staticmethod
    def monthly_day_rate(figure: Decimal) -> Decimal:
        """Daily rate used to prorate a monthly salary."""
        if figure <= ZERO:
            return ZERO
        return figure / WORKING_DAYS_PER_MONTH

"""Business rules passed explicitly into the calculators."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date
from decimal import Decimal

from habitat_payroll.calculators.attendance import MEAL_ALLOWANCE_UNIT
from habitat_payroll.calculators.calendar import DEFAULT_PUBLIC_HOLIDAYS
from habitat_payroll.calculators.contribution import SG_CPF_TABLE, ContributionTable
from habitat_payroll.calculators.leave_ledger import EntitlementPolicy


@dataclass(frozen=True)
class PayrollPolicy:
    """
    Payroll computation rules.

    Attributes:
        public_holidays: Dates paid at the premium (2.0x) overtime tier in
            addition to Sundays.
        meal_allowance_unit: Amount paid per late-meal flag.
        contribution_table: CPF bracket table for LOCAL workers.
        entitlements: Leave-cap lookup keyed on length of service.
    """

    public_holidays: frozenset[date] = DEFAULT_PUBLIC_HOLIDAYS
    meal_allowance_unit: Decimal = MEAL_ALLOWANCE_UNIT
    contribution_table: ContributionTable = SG_CPF_TABLE
    entitlements: EntitlementPolicy = field(default_factory=EntitlementPolicy, compare=False)

    def __post_init__(self) -> None:
        """Validate configuration."""
        if self.meal_allowance_unit < 0:
            raise ValueError("meal_allowance_unit cannot be negative")

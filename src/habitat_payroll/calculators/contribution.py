"""Statutory (CPF) contribution estimation from a bracket table."""

from __future__ import annotations

from dataclasses import dataclass
from decimal import Decimal
from typing import Any

from habitat_payroll.calculators.types import (
    ZERO,
    ContributionEstimate,
    WorkerClass,
    round_to_cents,
    to_decimal,
)


@dataclass(frozen=True)
class ContributionBracket:
    """Contribution rates for wages in (min_wage, max_wage].

    The employee share is ``employee_rate * (wage - employee_offset)``, which
    expresses both flat percentages and the phased-in band just above the
    employee threshold.
    """

    min_wage: Decimal
    max_wage: Decimal | None  # None = no upper limit
    employer_rate: Decimal
    employee_rate: Decimal
    employee_offset: Decimal = ZERO

    def contains(self, wage: Decimal) -> bool:
        if wage <= self.min_wage:
            return False
        return self.max_wage is None or wage <= self.max_wage


@dataclass(frozen=True)
class ContributionTable:
    """Bracket table for one jurisdiction and age band.

    Payload structure accepted by ``from_payload``:
    {
        "wage_ceiling": 8000,
        "brackets": [
            {"min": 0, "max": 50, "employer_rate": 0, "employee_rate": 0},
            {"min": 500, "max": 750, "employer_rate": 0.17,
             "employee_rate": 0.6, "employee_offset": 500},
            ...
        ]
    }
    """

    brackets: tuple[ContributionBracket, ...]
    wage_ceiling: Decimal | None = None

    def __post_init__(self) -> None:
        if not self.brackets:
            raise ValueError("Contribution table requires at least one bracket")

    def bracket_for(self, wage: Decimal) -> ContributionBracket | None:
        for bracket in sorted(self.brackets, key=lambda b: b.min_wage):
            if bracket.contains(wage):
                return bracket
        return None

    def with_ceiling(self, wage_ceiling: Decimal | None) -> ContributionTable:
        return ContributionTable(brackets=self.brackets, wage_ceiling=wage_ceiling)

    @classmethod
    def from_payload(cls, payload: dict[str, Any]) -> ContributionTable:
        """Parse a table from its JSON configuration."""
        brackets = []
        for b in payload.get("brackets", []):
            brackets.append(
                ContributionBracket(
                    min_wage=Decimal(str(b["min"])),
                    max_wage=Decimal(str(b["max"])) if b.get("max") is not None else None,
                    employer_rate=Decimal(str(b.get("employer_rate", 0))),
                    employee_rate=Decimal(str(b.get("employee_rate", 0))),
                    employee_offset=Decimal(str(b.get("employee_offset", 0))),
                )
            )
        ceiling = payload.get("wage_ceiling")
        return cls(
            brackets=tuple(brackets),
            wage_ceiling=Decimal(str(ceiling)) if ceiling else None,
        )


# CPF contribution rates for private-sector employees aged 55 and below
# (Singapore citizens and 3rd-year PRs), ordinary wage ceiling from 2026.
SG_CPF_TABLE = ContributionTable(
    brackets=(
        ContributionBracket(
            min_wage=Decimal("0"),
            max_wage=Decimal("50"),
            employer_rate=Decimal("0"),
            employee_rate=Decimal("0"),
        ),
        ContributionBracket(
            min_wage=Decimal("50"),
            max_wage=Decimal("500"),
            employer_rate=Decimal("0.17"),
            employee_rate=Decimal("0"),
        ),
        ContributionBracket(
            min_wage=Decimal("500"),
            max_wage=Decimal("750"),
            employer_rate=Decimal("0.17"),
            employee_rate=Decimal("0.6"),
            employee_offset=Decimal("500"),
        ),
        ContributionBracket(
            min_wage=Decimal("750"),
            max_wage=None,
            employer_rate=Decimal("0.17"),
            employee_rate=Decimal("0.20"),
        ),
    ),
    wage_ceiling=Decimal("8000"),
)


class ContributionEstimator:
    """Estimates employee/employer CPF for a period's wage.

    LOCAL workers are computed from the bracket table; FOREIGN workers carry
    manually configured fixed amounts that are passed through unchanged.
    """

    def __init__(self, table: ContributionTable | None = None):
        self.table = table or SG_CPF_TABLE

    def estimate(self, wage: Decimal) -> ContributionEstimate:
        """Apply the bracket table to a total wage."""
        wage = to_decimal(wage)
        if wage <= 0:
            return ContributionEstimate()

        if self.table.wage_ceiling is not None:
            wage = min(wage, self.table.wage_ceiling)

        bracket = self.table.bracket_for(wage)
        if bracket is None:
            return ContributionEstimate()

        employer = wage * bracket.employer_rate
        employee = (wage - bracket.employee_offset) * bracket.employee_rate

        return ContributionEstimate(
            employee=round_to_cents(max(ZERO, employee)),
            employer=round_to_cents(max(ZERO, employer)),
        )

    def for_worker(
        self,
        worker_class: WorkerClass,
        wage: Decimal,
        fixed_employee: Decimal = ZERO,
        fixed_employer: Decimal = ZERO,
    ) -> ContributionEstimate:
        """Estimate by classification."""
        if worker_class == WorkerClass.LOCAL:
            return self.estimate(wage)
        return ContributionEstimate(
            employee=to_decimal(fixed_employee),
            employer=to_decimal(fixed_employer),
        )

"""Configuration management for the payroll service."""

from __future__ import annotations

import logging
import os
from dataclasses import dataclass
from datetime import date
from decimal import Decimal
from functools import lru_cache

from dotenv import load_dotenv

from habitat_payroll.calculators.calendar import DEFAULT_PUBLIC_HOLIDAYS
from habitat_payroll.calculators.contribution import SG_CPF_TABLE
from habitat_payroll.calculators.policy import PayrollPolicy

LOG_FORMAT = "%(asctime)s %(levelname)s [%(name)s] %(message)s"


def _parse_holidays(raw: str) -> tuple[date, ...]:
    """Parse a comma-separated list of ISO dates."""
    holidays = []
    for part in raw.split(","):
        part = part.strip()
        if part:
            holidays.append(date.fromisoformat(part))
    return tuple(holidays)


@dataclass(frozen=True)
class Settings:
    """Application settings loaded from environment."""

    database_url: str
    engine_version: str
    host: str
    port: int
    debug: bool
    log_level: str
    extra_public_holidays: tuple[date, ...] = ()
    cpf_wage_ceiling: Decimal | None = None

    @classmethod
    def from_env(cls) -> Settings:
        """Load settings from environment variables."""
        load_dotenv()

        ceiling = os.getenv("CPF_WAGE_CEILING")
        return cls(
            database_url=os.getenv(
                "DATABASE_URL",
                "sqlite+aiosqlite:///./habitat_payroll.db",
            ),
            engine_version=os.getenv("ENGINE_VERSION", "1.0.0"),
            host=os.getenv("HOST", "0.0.0.0"),
            port=int(os.getenv("PORT", "8000")),
            debug=os.getenv("DEBUG", "false").lower() == "true",
            log_level=os.getenv("LOG_LEVEL", "INFO").upper(),
            extra_public_holidays=_parse_holidays(os.getenv("PAYROLL_PUBLIC_HOLIDAYS", "")),
            cpf_wage_ceiling=Decimal(ceiling) if ceiling else None,
        )

    def payroll_policy(self) -> PayrollPolicy:
        """Build the computation rules these settings describe."""
        table = SG_CPF_TABLE
        if self.cpf_wage_ceiling is not None:
            table = table.with_ceiling(self.cpf_wage_ceiling)
        return PayrollPolicy(
            public_holidays=DEFAULT_PUBLIC_HOLIDAYS | frozenset(self.extra_public_holidays),
            contribution_table=table,
        )


def configure_logging(level: str = "INFO") -> None:
    """Configure root logging for the service."""
    logging.basicConfig(level=level, format=LOG_FORMAT)


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings.from_env()

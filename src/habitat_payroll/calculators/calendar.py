"""Premium-day calendar and overtime multiplier rules."""

from __future__ import annotations

from collections.abc import Collection
from datetime import date
from decimal import Decimal

STANDARD_OT_MULTIPLIER = Decimal("1.5")
PREMIUM_OT_MULTIPLIER = Decimal("2.0")

# Gazetted public holidays (Singapore, 2025)
DEFAULT_PUBLIC_HOLIDAYS: frozenset[date] = frozenset(
    {
        date(2025, 1, 1),
        date(2025, 1, 29),
        date(2025, 1, 30),
        date(2025, 3, 31),
        date(2025, 4, 18),
        date(2025, 5, 1),
        date(2025, 5, 12),
        date(2025, 6, 7),
        date(2025, 8, 9),
        date(2025, 10, 20),
        date(2025, 12, 25),
    }
)


def _as_date(day: date | str) -> date:
    if isinstance(day, str):
        return date.fromisoformat(day)
    return day


def is_premium_day(
    day: date | str, holidays: Collection[date] | None = None
) -> bool:
    """Return True for Sundays and public holidays."""
    day = _as_date(day)
    if holidays is None:
        holidays = DEFAULT_PUBLIC_HOLIDAYS
    return day.weekday() == 6 or day in holidays


def overtime_multiplier(
    day: date | str, holidays: Collection[date] | None = None
) -> Decimal:
    """Overtime multiplier for a work date: 2.0 on premium days, else 1.5."""
    if is_premium_day(day, holidays):
        return PREMIUM_OT_MULTIPLIER
    return STANDARD_OT_MULTIPLIER

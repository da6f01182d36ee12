"""
Calendar providers.

The engine only needs "today" as an integer day number and the length of each
period unit in days. Month, quarter and year lengths come from the world's
calendar; the resin week is always seven days.
"""

from collections.abc import Mapping
from enum import Enum
from typing import Protocol

from pydantic import BaseModel, ConfigDict, Field

RESIN_WEEK_DAYS = 7


class PeriodUnit(Enum):
    """Period units accepted in query offsets, keyed by their query letter."""

    DAY = "d"
    RESIN_WEEK = "w"
    MONTH = "m"
    QUARTER = "q"
    YEAR = "y"


class Calendar(Protocol):
    """What the engine needs from the game calendar."""

    def today(self) -> int: ...

    def days_per_unit(self, unit: PeriodUnit) -> int: ...


def day_lengths(calendar: Calendar) -> dict[PeriodUnit, int]:
    """Snapshot every unit length of ``calendar`` into a plain table."""
    return {unit: calendar.days_per_unit(unit) for unit in PeriodUnit}


DEFAULT_DAY_LENGTHS: Mapping[PeriodUnit, int] = {
    PeriodUnit.DAY: 1,
    PeriodUnit.RESIN_WEEK: RESIN_WEEK_DAYS,
    PeriodUnit.MONTH: 30,
    PeriodUnit.QUARTER: 120,
    PeriodUnit.YEAR: 360,
}


class FixedCalendar(BaseModel):
    """A calendar frozen at a given day, for hosts without a live game clock."""

    model_config = ConfigDict(frozen=True, extra="forbid")

    current_day: int = 0
    days_per_month: int = Field(default=30, gt=0)
    days_per_year: int | None = Field(default=None, gt=0)  # None = 12 months

    def today(self) -> int:
        return self.current_day

    def days_per_unit(self, unit: PeriodUnit) -> int:
        if unit is PeriodUnit.DAY:
            return 1
        if unit is PeriodUnit.RESIN_WEEK:
            return RESIN_WEEK_DAYS
        if unit is PeriodUnit.MONTH:
            return self.days_per_month
        if unit is PeriodUnit.QUARTER:
            return self.days_per_month * 4
        return self.days_per_year or self.days_per_month * 12

"""Reference month model used by the calendar grid."""

import calendar
from datetime import date
from typing import Optional

from pydantic import BaseModel, Field

from ..utils.date_utils import date_key, local_today

MIN_YEAR = 1
MAX_YEAR = 9999


class Month(BaseModel):
    """A year/month pair. Always stands for day 1 of that month."""

    year: int = Field(ge=MIN_YEAR, le=MAX_YEAR)
    month: int = Field(ge=1, le=12)

    model_config = {"frozen": True}

    @classmethod
    def current(cls, today: Optional[date] = None) -> "Month":
        """Month containing ``today`` (wall-clock local date by default)."""
        today = today or local_today()
        return cls(year=today.year, month=today.month)

    @classmethod
    def parse(cls, value: str) -> "Month":
        """
        Parse a ``YYYY-MM`` string.

        Raises:
            ValueError: If the string is not a valid year/month
        """
        try:
            year_str, month_str = value.strip().split("-")
            return cls(year=int(year_str), month=int(month_str))
        except ValueError as e:
            raise ValueError(f"Invalid month '{value}', expected YYYY-MM") from e

    @property
    def first_day(self) -> date:
        return date(self.year, self.month, 1)

    @property
    def days_in_month(self) -> int:
        return calendar.monthrange(self.year, self.month)[1]

    @property
    def first_weekday(self) -> int:
        """Weekday of day 1, 0=Sunday..6=Saturday."""
        # calendar counts Monday as 0
        return (calendar.monthrange(self.year, self.month)[0] + 1) % 7

    @property
    def label(self) -> str:
        return f"{calendar.month_name[self.month]} {self.year}"

    def day_key(self, day: int) -> str:
        """``YYYY-MM-DD`` key for a day of this month."""
        return date_key(self.year, self.month, day)

    def shift(self, months: int) -> "Month":
        """
        Month ``months`` away, rolling over year boundaries.

        Raises:
            ValueError: If the result falls outside years 1..9999
        """
        year, index = divmod(self.year * 12 + (self.month - 1) + months, 12)
        if not MIN_YEAR <= year <= MAX_YEAR:
            raise ValueError(f"No month {months:+d} from {self}: years run {MIN_YEAR}..{MAX_YEAR}")
        return Month(year=year, month=index + 1)

    def previous(self) -> "Month":
        return self.shift(-1)

    def next(self) -> "Month":
        return self.shift(1)

    def __str__(self) -> str:
        return f"{self.year:04d}-{self.month:02d}"

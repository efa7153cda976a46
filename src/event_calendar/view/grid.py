"""Month grid view model."""

from dataclasses import dataclass, field
from datetime import date
from typing import Iterable, Optional

from ..models.event import Event
from ..models.month import Month
from ..utils.date_utils import local_today

WEEKDAY_LABELS = ("Su", "Mo", "Tu", "We", "Th", "Fr", "Sa")


@dataclass(frozen=True)
class MonthGrid:
    """Day cells of one month plus the events that fall on each day."""

    month: Month
    leading_blanks: int
    days: tuple[int, ...]
    events: tuple[Event, ...] = ()
    today: date = field(default_factory=local_today)

    def events_for_day(self, day: int) -> list[Event]:
        """Events whose date is exactly this day's ``YYYY-MM-DD`` key, in snapshot order."""
        key = self.month.day_key(day)
        return [event for event in self.events if event.date == key]

    def is_today(self, day: int) -> bool:
        return (
            self.today.year == self.month.year
            and self.today.month == self.month.month
            and self.today.day == day
        )

    @property
    def cell_count(self) -> int:
        return self.leading_blanks + len(self.days)

    def weeks(self) -> list[list[Optional[int]]]:
        """Sunday-first rows of seven cells; None marks a blank."""
        cells: list[Optional[int]] = [None] * self.leading_blanks + list(self.days)
        cells += [None] * (-len(cells) % 7)
        return [cells[i:i + 7] for i in range(0, len(cells), 7)]

    def days_with_events(self) -> list[tuple[int, list[Event]]]:
        """Days that have at least one event, in day order."""
        result = []
        for day in self.days:
            events = self.events_for_day(day)
            if events:
                result.append((day, events))
        return result


def compute_month_grid(
    reference_month: Month,
    events: Iterable[Event],
    today: Optional[date] = None,
) -> MonthGrid:
    """
    Build the grid for a month.

    Args:
        reference_month: Month to display
        events: Current full event snapshot
        today: Date to highlight; read from the wall clock when omitted

    Returns:
        MonthGrid for ``reference_month``
    """
    return MonthGrid(
        month=reference_month,
        leading_blanks=reference_month.first_weekday,
        days=tuple(range(1, reference_month.days_in_month + 1)),
        events=tuple(events),
        today=today or local_today(),
    )

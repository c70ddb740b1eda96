"""
Roster scheduling window: the full weeks covering next calendar month.

Administrators plan working times one month ahead at week granularity.
The window runs from the week start on/before the 1st of next month to
the week end on/after its last day. Today and earlier dates are never
inside the window, even when the padded first week reaches back into
the current month.
"""

from dataclasses import dataclass
from datetime import date, timedelta
from typing import Iterable, List

import pendulum

from .models import WorkingTime


MONDAY = 0
SUNDAY = 6


@dataclass(frozen=True)
class SchedulingWindow:
    """Inclusive date range in which working times may be created or edited."""
    start: date
    end: date
    today: date

    def includes(self, day: date) -> bool:
        """Check if a date may be rostered."""
        return day > self.today and self.start <= day <= self.end

    def __contains__(self, day: date) -> bool:
        return self.includes(day)

    @property
    def first_open_day(self) -> date:
        """Earliest date that may be rostered: the window start or tomorrow."""
        return max(self.start, self.today + timedelta(days=1))

    def __str__(self) -> str:
        return f"{self.first_open_day.isoformat()} - {self.end.isoformat()}"


def next_month_start(today: date) -> pendulum.Date:
    """First day of the calendar month after ``today``."""
    return pendulum.date(today.year, today.month, 1).add(months=1)


def scheduling_window(today: date, week_start: int = MONDAY) -> SchedulingWindow:
    """
    Compute the scheduling window relative to ``today``.

    Args:
        today: Current date in the business timezone
        week_start: First day of the week (0=Monday, 6=Sunday)

    Returns:
        SchedulingWindow padded to full weeks
    """
    if week_start not in range(7):
        raise ValueError(f"week_start must be between 0 and 6, got {week_start}")

    first = next_month_start(today)
    last = first.end_of("month")
    week_end = (week_start + 6) % 7

    start = first.subtract(days=(first.weekday() - week_start) % 7)
    end = last.add(days=(week_end - last.weekday()) % 7)

    return SchedulingWindow(start=start, end=end, today=pendulum.date(today.year, today.month, today.day))


def next_month_roster(working_times: Iterable[WorkingTime], today: date) -> List[WorkingTime]:
    """
    Working times dated inside next calendar month.

    Sorted by date, then by start time.
    """
    first = next_month_start(today)
    last = first.end_of("month")

    roster = [wt for wt in working_times if first <= wt.date <= last]
    return sorted(roster, key=lambda wt: (wt.date, wt.interval.start))

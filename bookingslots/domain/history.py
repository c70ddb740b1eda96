"""
Reporting views over bookings: past/future history and month listings.
"""

from dataclasses import dataclass, field
from datetime import date, datetime
from typing import Iterable, List

import pendulum
from pendulum import DateTime

from .models import Booking


@dataclass
class HistoryPartition:
    """Bookings split around a reference instant, each side in start order."""
    past: List[Booking] = field(default_factory=list)
    future: List[Booking] = field(default_factory=list)


class HistoryQuery:
    """
    Orders and partitions bookings for reporting.

    Booking dates and times are wall-clock values in the business
    timezone. A booking starting exactly at the reference instant counts
    as past.
    """

    def __init__(self, timezone: str = "Australia/Melbourne"):
        self.timezone = timezone

    def starts_at(self, booking: Booking) -> DateTime:
        """Booking start as an aware datetime in the business timezone."""
        start = booking.interval.start
        return pendulum.datetime(
            booking.date.year,
            booking.date.month,
            booking.date.day,
            start.hour,
            start.minute,
            tz=self.timezone,
        )

    def _reference(self, now: datetime) -> DateTime:
        return pendulum.instance(now, tz=self.timezone)

    def ordered(self, bookings: Iterable[Booking]) -> List[Booking]:
        """Sort bookings by date and start time, keeping input order on ties."""
        return sorted(bookings, key=self.starts_at)

    def partition(self, bookings: Iterable[Booking], now: datetime) -> HistoryPartition:
        """
        Split bookings into past and future.

        Args:
            bookings: Bookings to split
            now: Reference instant; naive values are read in the business timezone

        Returns:
            HistoryPartition with both lists ordered ascending
        """
        reference = self._reference(now)
        result = HistoryPartition()

        for booking in self.ordered(bookings):
            if self.starts_at(booking) <= reference:
                result.past.append(booking)
            else:
                result.future.append(booking)

        return result

    def history(self, bookings: Iterable[Booking], now: datetime) -> List[Booking]:
        """Bookings that have already started."""
        return self.partition(bookings, now).past


def partition_history(
    bookings: Iterable[Booking],
    now: datetime,
    timezone: str = "Australia/Melbourne",
) -> HistoryPartition:
    return HistoryQuery(timezone).partition(bookings, now)


def bookings_in_month(bookings: Iterable[Booking], month: date) -> List[Booking]:
    """Bookings dated in the calendar month of ``month``, in start order."""
    selected = [
        booking for booking in bookings
        if (booking.date.year, booking.date.month) == (month.year, month.month)
    ]
    return sorted(selected, key=lambda booking: booking.starts_at)


def customer_bookings(bookings: Iterable[Booking], customer_id: int) -> List[Booking]:
    """A customer's bookings ordered by date and start time."""
    own = [booking for booking in bookings if booking.customer_id == customer_id]
    return sorted(own, key=lambda booking: booking.starts_at)


def month_range(anchor: date, span: int = 6) -> List[pendulum.Date]:
    """
    Months around ``anchor`` for a month picker.

    Returns ``span`` months before the anchor month, the anchor month and
    ``span - 1`` months after it, each as the first day of the month.
    """
    if span < 1:
        raise ValueError(f"span must be at least 1, got {span}")

    first = pendulum.date(anchor.year, anchor.month, 1)
    return [first.add(months=offset) for offset in range(-span, span)]

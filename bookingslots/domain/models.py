"""
Domain models for time intervals, roster entries and bookings.

All records are immutable value objects. Persistence hands the domain
transient copies and gets new copies back (``dataclasses.replace``).
"""

from dataclasses import dataclass, replace
from datetime import date, datetime, time, timedelta
from typing import Optional

import pendulum

from .exceptions import InvalidDuration, MalformedInput


TIME_FORMAT = "HH:mm"
DATE_FORMAT = "YYYY-MM-DD"


@dataclass(frozen=True)
class TimeInterval:
    """
    Half-open time-of-day range ``[start, end)`` within a single day.

    Invariant: start must be before end.
    """
    start: time
    end: time

    def __post_init__(self):
        if self.start >= self.end:
            raise ValueError(f"Start time {self.start} must be before end time {self.end}")

    @classmethod
    def parse(cls, start: str, end: str) -> "TimeInterval":
        """Build an interval from two "HH:MM" strings."""
        return cls(
            start=parse_time_of_day(start, "start_time"),
            end=parse_time_of_day(end, "end_time"),
        )

    def duration(self) -> timedelta:
        """Return the length of the interval."""
        return _on_any_day(self.end) - _on_any_day(self.start)

    def duration_minutes(self) -> int:
        """Return the duration in minutes."""
        return int(self.duration().total_seconds() / 60)

    def overlaps(self, other: "TimeInterval") -> bool:
        """Check if this interval overlaps another. Touching endpoints do not overlap."""
        return self.start < other.end and other.start < self.end

    def contains(self, other: "TimeInterval") -> bool:
        """Check if ``other`` lies completely inside this interval."""
        return self.start <= other.start and other.end <= self.end

    def gap_to(self, other: "TimeInterval") -> Optional["TimeInterval"]:
        """
        Return the interval strictly between this interval and a later one.

        Returns None when the two touch, overlap or are out of order.
        """
        if self.end >= other.start:
            return None
        return TimeInterval(start=self.end, end=other.start)

    def format_range(self) -> str:
        return f"{format_time(self.start)} - {format_time(self.end)}"

    def __str__(self) -> str:
        return self.format_range()


def overlaps(a: TimeInterval, b: TimeInterval) -> bool:
    """True iff ``a`` and ``b`` share any instant."""
    return a.overlaps(b)


def contains(outer: TimeInterval, inner: TimeInterval) -> bool:
    """True iff ``inner`` lies completely inside ``outer``."""
    return outer.contains(inner)


def gap_between(a: TimeInterval, b: TimeInterval) -> Optional[TimeInterval]:
    """Return the free interval between ``a`` and a later ``b``, if any."""
    return a.gap_to(b)


def _on_any_day(value: time) -> datetime:
    return datetime.combine(date.min, value)


def format_time(value: time) -> str:
    """Format a time of day as "HH:MM"."""
    return value.strftime("%H:%M")


def parse_time_of_day(value: str, field: str = "start_time") -> time:
    """
    Parse a 24 hour "HH:MM" string.

    Raises:
        MalformedInput: If the value is not a valid time of day
    """
    try:
        return pendulum.from_format(value, TIME_FORMAT).time().replace(second=0, microsecond=0)
    except (TypeError, ValueError) as exc:
        raise MalformedInput(field) from exc


def parse_calendar_date(value: str, field: str = "date") -> date:
    """
    Parse a "YYYY-MM-DD" string.

    Raises:
        MalformedInput: If the value is not a valid calendar date
    """
    try:
        return pendulum.from_format(value, DATE_FORMAT).date()
    except (TypeError, ValueError) as exc:
        raise MalformedInput(field) from exc


def parse_duration(value: str) -> timedelta:
    """Parse an "HH:MM" duration such as an activity length."""
    try:
        parsed = pendulum.from_format(value, TIME_FORMAT)
    except (TypeError, ValueError) as exc:
        raise ValueError(f"Duration must be in HH:MM format, got {value!r}") from exc
    return pendulum.duration(hours=parsed.hour, minutes=parsed.minute)


def format_duration(value: timedelta) -> str:
    """Format a duration as "H:MM" (e.g. ``2:00``)."""
    minutes = int(value.total_seconds() // 60)
    return f"{minutes // 60}:{minutes % 60:02d}"


def compute_end_time(on_date: date, start: time, duration: timedelta) -> time:
    """
    Derive the end of a booking from its start and the activity duration.

    Raises:
        InvalidDuration: If the booking would end on the next day or has no length
    """
    start_at = datetime.combine(on_date, start)
    end_at = start_at + duration
    if end_at <= start_at or end_at.date() != on_date:
        raise InvalidDuration()
    return end_at.time()


@dataclass(frozen=True)
class Employee:
    id: int
    name: str = ""


@dataclass(frozen=True)
class Customer:
    id: int
    name: str = ""


@dataclass(frozen=True)
class Activity:
    """Bookable activity. The duration is fixed reference data."""
    id: int
    name: str
    duration: timedelta
    description: str = ""

    def __post_init__(self):
        if self.duration <= timedelta(0):
            raise ValueError(f"Activity duration must be positive, got {self.duration}")

    @property
    def duration_text(self) -> str:
        return format_duration(self.duration)


@dataclass(frozen=True)
class WorkingTime:
    """An employee's single availability window for one calendar date."""
    employee_id: int
    date: date
    interval: TimeInterval
    id: Optional[int] = None

    @property
    def start_time(self) -> time:
        return self.interval.start

    @property
    def end_time(self) -> time:
        return self.interval.end

    def with_id(self, working_time_id: int) -> "WorkingTime":
        return replace(self, id=working_time_id)


@dataclass(frozen=True)
class Booking:
    """
    A scheduled activity for a customer.

    ``employee_id`` stays None until an employee is assigned.
    """
    customer_id: int
    activity_id: int
    date: date
    interval: TimeInterval
    employee_id: Optional[int] = None
    id: Optional[int] = None

    @property
    def start_time(self) -> time:
        return self.interval.start

    @property
    def end_time(self) -> time:
        return self.interval.end

    @property
    def starts_at(self) -> datetime:
        """Naive datetime combining date and start time."""
        return datetime.combine(self.date, self.interval.start)

    def duration(self, as_text: bool = False) -> int | str:
        """
        Get the length of the booking.

        Args:
            as_text: Return an "H:MM" string instead of seconds

        Returns:
            Seconds as int, or the formatted duration
        """
        length = self.interval.duration()
        if as_text:
            return format_duration(length)
        return int(length.total_seconds())

    def with_id(self, booking_id: int) -> "Booking":
        return replace(self, id=booking_id)

    def with_employee(self, employee_id: Optional[int]) -> "Booking":
        return replace(self, employee_id=employee_id)


@dataclass(frozen=True)
class BookingRequest:
    """Raw booking input as submitted by a customer or an administrator."""
    customer_id: int
    activity_id: int
    date: str
    start_time: str
    employee_id: Optional[int] = None


@dataclass(frozen=True)
class WorkingTimeRequest:
    """Raw working time input from a roster form."""
    employee_id: int
    date: str
    start_time: str
    end_time: str

"""
Tests for domain models.
"""

from datetime import date, time, timedelta

import pytest

from bookingslots.domain.exceptions import (
    EmployeeUnavailable,
    InvalidDuration,
    MalformedInput,
    ReferenceNotFound,
)
from bookingslots.domain.models import (
    Activity,
    Booking,
    TimeInterval,
    compute_end_time,
    contains,
    format_duration,
    gap_between,
    overlaps,
    parse_calendar_date,
    parse_duration,
    parse_time_of_day,
)


def _interval(start: str, end: str) -> TimeInterval:
    return TimeInterval.parse(start, end)


class TestTimeInterval:
    """Tests for TimeInterval model."""

    def test_create_valid_interval(self):
        """Test creating a valid time interval."""
        interval = TimeInterval(start=time(9, 0), end=time(17, 0))

        assert interval.start == time(9, 0)
        assert interval.end == time(17, 0)
        assert interval.duration_minutes() == 480  # 8 hours

    def test_inverted_interval_raises_error(self):
        """Test that an interval ending before it starts raises ValueError."""
        with pytest.raises(ValueError, match="Start time .* must be before end time"):
            TimeInterval(start=time(17, 0), end=time(9, 0))

    def test_zero_length_interval_raises_error(self):
        """Test that a zero-length interval is invalid."""
        with pytest.raises(ValueError):
            TimeInterval(start=time(9, 0), end=time(9, 0))

    def test_overlaps(self):
        """Test overlap detection."""
        morning = _interval("09:00", "12:00")
        midday = _interval("11:00", "14:00")
        afternoon = _interval("14:00", "17:00")

        assert overlaps(morning, midday)
        assert overlaps(midday, morning)
        assert not overlaps(morning, afternoon)

    def test_touching_intervals_do_not_overlap(self):
        """Test that shared endpoints are not an overlap."""
        assert not overlaps(_interval("09:00", "12:00"), _interval("12:00", "13:00"))
        assert not overlaps(_interval("12:00", "13:00"), _interval("09:00", "12:00"))

    def test_contains(self):
        """Test containment including equal endpoints."""
        working = _interval("09:00", "17:00")

        assert contains(working, _interval("09:00", "10:00"))
        assert contains(working, _interval("16:00", "17:00"))
        assert contains(working, working)
        assert not contains(working, _interval("08:30", "10:00"))
        assert not contains(working, _interval("16:30", "17:30"))

    def test_gap_between(self):
        """Test the gap between two ordered intervals."""
        gap = gap_between(_interval("09:00", "12:00"), _interval("13:30", "15:00"))

        assert gap == _interval("12:00", "13:30")

    def test_gap_between_touching_intervals_is_none(self):
        """Test that adjacent intervals have no gap."""
        assert gap_between(_interval("09:00", "12:00"), _interval("12:00", "15:00")) is None

    def test_gap_between_overlapping_intervals_is_none(self):
        """Test that overlapping intervals have no gap."""
        assert gap_between(_interval("09:00", "12:00"), _interval("11:00", "15:00")) is None

    def test_format_range(self):
        """Test display formatting."""
        assert str(_interval("09:05", "17:00")) == "09:05 - 17:00"


class TestParsing:
    """Tests for time, date and duration parsing."""

    def test_parse_time_of_day(self):
        """Test parsing a valid 24 hour time."""
        assert parse_time_of_day("19:21") == time(19, 21)
        assert parse_time_of_day("00:00") == time(0, 0)
        assert parse_time_of_day("23:59") == time(23, 59)

    def test_parse_time_of_day_rejects_text(self):
        """Test that a non-time string is malformed input for its field."""
        with pytest.raises(MalformedInput) as excinfo:
            parse_time_of_day("johndoe", "end_time")

        assert excinfo.value.field == "end_time"
        assert excinfo.value.message == "The end time field must be in the correct time format."

    def test_parse_time_of_day_rejects_out_of_range(self):
        """Test that hours past 23 are rejected."""
        with pytest.raises(MalformedInput):
            parse_time_of_day("25:00")

    def test_parse_calendar_date(self):
        """Test parsing a valid date."""
        assert parse_calendar_date("2024-06-03") == date(2024, 6, 3)

    def test_parse_calendar_date_rejects_impossible_date(self):
        """Test that an impossible date is malformed input."""
        with pytest.raises(MalformedInput) as excinfo:
            parse_calendar_date("2024-02-30")

        assert excinfo.value.field == "date"
        assert excinfo.value.message == "The date is not a valid date."

    def test_parse_duration(self):
        """Test parsing an activity duration."""
        assert parse_duration("02:00") == timedelta(hours=2)
        assert parse_duration("00:45") == timedelta(minutes=45)

    def test_parse_duration_rejects_text(self):
        """Test that a malformed duration raises ValueError."""
        with pytest.raises(ValueError, match="HH:MM"):
            parse_duration("two hours")

    def test_format_duration(self):
        """Test "H:MM" duration formatting."""
        assert format_duration(timedelta(hours=2)) == "2:00"
        assert format_duration(timedelta(hours=1, minutes=5)) == "1:05"


class TestEndTime:
    """Tests for deriving a booking's end time."""

    def test_end_time_is_start_plus_duration(self):
        """Test the end time derivation."""
        assert compute_end_time(date(2024, 6, 3), time(10, 30), timedelta(hours=2)) == time(12, 30)

    def test_end_time_at_last_minute_is_valid(self):
        """Test that a booking may end at 23:59."""
        assert compute_end_time(date(2024, 6, 3), time(21, 59), timedelta(hours=2)) == time(23, 59)

    def test_end_time_at_midnight_is_invalid(self):
        """Test that ending at midnight crosses into the next day."""
        with pytest.raises(InvalidDuration):
            compute_end_time(date(2024, 6, 3), time(22, 0), timedelta(hours=2))

    def test_end_time_past_midnight_is_invalid(self):
        """Test that a booking may not run into the next day."""
        with pytest.raises(InvalidDuration) as excinfo:
            compute_end_time(date(2024, 6, 3), time(23, 30), timedelta(hours=1))

        assert excinfo.value.field == "activity_id"


class TestBookingAndActivity:
    """Tests for Booking and Activity records."""

    def test_booking_duration_in_seconds(self):
        """Test the total duration of a booking."""
        booking = Booking(
            customer_id=1,
            activity_id=1,
            date=date(2024, 6, 3),
            interval=_interval("10:00", "12:00"),
        )

        assert booking.duration() == 7200

    def test_booking_duration_as_text(self):
        """Test the duration of a booking as a time string."""
        booking = Booking(
            customer_id=1,
            activity_id=1,
            date=date(2024, 6, 3),
            interval=_interval("10:00", "12:00"),
        )

        assert booking.duration(as_text=True) == "2:00"

    def test_booking_employee_is_optional(self):
        """Test that bookings start unassigned and can be assigned."""
        booking = Booking(customer_id=1, activity_id=1, date=date(2024, 6, 3), interval=_interval("10:00", "11:00"))

        assert booking.employee_id is None
        assert booking.with_employee(4).employee_id == 4
        assert booking.employee_id is None

    def test_activity_requires_positive_duration(self):
        """Test that an activity without length is rejected."""
        with pytest.raises(ValueError):
            Activity(id=1, name="Nothing", duration=timedelta(0))

    def test_activity_duration_text(self):
        """Test activity duration formatting."""
        assert Activity(id=1, name="Colour", duration=timedelta(hours=2)).duration_text == "2:00"


class TestRejections:
    """Tests for rejection messages."""

    def test_reference_not_found_names_the_field(self):
        """Test the message for a missing reference."""
        rejection = ReferenceNotFound("customer_id")

        assert rejection.kind == "ReferenceNotFound"
        assert rejection.message == "The customer does not exist."

    def test_errors_maps_field_to_message(self):
        """Test the field to message mapping."""
        rejection = EmployeeUnavailable()

        assert rejection.errors() == {
            "employee_id": [
                "The employee either has a conflict with another booking "
                "or employee is not working on that time."
            ]
        }

"""
Tests for the RosterService orchestration layer.
"""

from datetime import date, time

import pytest

from bookingslots.adapters.memory_repository import InMemoryRepository
from bookingslots.domain.exceptions import (
    DuplicateWorkingTime,
    OutOfSchedulingWindow,
    RecordNotFound,
)
from bookingslots.domain.models import (
    Booking,
    Customer,
    Employee,
    TimeInterval,
    WorkingTime,
    WorkingTimeRequest,
)
from bookingslots.domain.results import ValidationStatus
from bookingslots.services.roster_service import RosterService

TODAY = date(2024, 5, 15)
DAY = date(2024, 6, 3)


def _build_service() -> tuple[RosterService, InMemoryRepository]:
    repository = InMemoryRepository(
        employees=[Employee(id=1, name="Olivia"), Employee(id=2, name="Jack")],
        customers=[Customer(id=1), Customer(id=2), Customer(id=3)],
    )
    return RosterService(repository, timezone="Australia/Melbourne"), repository


def _request(**overrides) -> WorkingTimeRequest:
    values = {
        "employee_id": 1,
        "date": DAY.isoformat(),
        "start_time": "09:00",
        "end_time": "17:00",
    }
    values.update(overrides)
    return WorkingTimeRequest(**values)


def _book(repository, customer_id, start, end, day=DAY, employee_id=1) -> Booking:
    return repository.persist_booking(Booking(
        customer_id=customer_id,
        activity_id=1,
        employee_id=employee_id,
        date=day,
        interval=TimeInterval.parse(start, end),
    ))


class TestAddWorkingTime:
    """Tests for adding working times."""

    def test_add_working_time(self):
        """Test that a valid working time is stored."""
        service, repository = _build_service()

        working_time = service.add_working_time(_request(), today=TODAY)

        assert working_time.id == 1
        assert repository.list_working_time(1, DAY) == working_time

    def test_duplicate_is_not_stored(self):
        """Test that a second working time on the same day is rejected."""
        service, repository = _build_service()
        service.add_working_time(_request(), today=TODAY)

        with pytest.raises(DuplicateWorkingTime):
            service.add_working_time(_request(start_time="13:00", end_time="15:00"), today=TODAY)

        assert len(repository.list_working_times()) == 1

    def test_validate_roster_result(self):
        """Test the result-returning validation surface."""
        service, repository = _build_service()

        accepted = service.validate_roster(_request(), today=TODAY)
        rejected = service.validate_roster(_request(date="2024-07-01"), today=TODAY)

        assert accepted.status is ValidationStatus.ACCEPTED
        assert accepted.value.interval == TimeInterval(time(9, 0), time(17, 0))
        assert rejected.status is ValidationStatus.REJECTED
        assert isinstance(rejected.rejection, OutOfSchedulingWindow)
        assert repository.list_working_times() == []

    def test_validate_roster_for_an_edit(self):
        """Test that checking an edit does not count the edited record as a duplicate."""
        service, repository = _build_service()
        working_time = service.add_working_time(_request(), today=TODAY)
        shorter = _request(end_time="12:00")

        as_new = service.validate_roster(shorter, today=TODAY)
        as_edit = service.validate_roster(shorter, today=TODAY, editing=working_time)

        assert isinstance(as_new.rejection, DuplicateWorkingTime)
        assert as_edit.status is ValidationStatus.ACCEPTED
        assert as_edit.value.id == working_time.id
        assert as_edit.value.interval == TimeInterval(time(9, 0), time(12, 0))
        assert repository.find_working_time(working_time.id) == working_time

    def test_window(self):
        """Test the window exposed by the service."""
        service, _ = _build_service()

        window = service.window(today=TODAY)

        assert (window.start, window.end) == (date(2024, 5, 27), date(2024, 6, 30))

    def test_delete_working_time(self):
        """Test deleting a working time and an unknown one."""
        service, repository = _build_service()
        working_time = service.add_working_time(_request(), today=TODAY)

        service.delete_working_time(working_time.id)

        assert repository.list_working_times() == []
        with pytest.raises(RecordNotFound):
            service.delete_working_time(working_time.id)


class TestEditWorkingTime:
    """Tests for editing working times and the booking cascade."""

    def test_edit_unassigns_bookings_no_longer_covered(self):
        """Test that shrinking a working time unassigns only bookings that no longer fit."""
        service, repository = _build_service()
        working_time = service.add_working_time(_request(), today=TODAY)
        fitting = _book(repository, 1, "10:00", "11:00")
        displaced = _book(repository, 2, "11:00", "14:00")

        result = service.edit_working_time(
            working_time.id,
            _request(start_time="09:00", end_time="12:00"),
            today=TODAY,
        )

        assert result.working_time.interval == TimeInterval(time(9, 0), time(12, 0))
        assert result.unassigned_count == 1
        assert [booking.id for booking in result.unassigned] == [displaced.id]
        assert repository.find_booking(displaced.id).employee_id is None
        assert repository.find_booking(fitting.id).employee_id == 1

    def test_edit_keeping_everything_covered(self):
        """Test that widening a working time unassigns nothing."""
        service, repository = _build_service()
        working_time = service.add_working_time(_request(), today=TODAY)
        booking = _book(repository, 1, "10:00", "11:00")

        result = service.edit_working_time(working_time.id, _request(end_time="20:00"), today=TODAY)

        assert result.unassigned == []
        assert repository.find_booking(booking.id).employee_id == 1

    def test_edit_moving_date_unassigns_old_day(self):
        """Test that moving a working time to another day unassigns that day's bookings."""
        service, repository = _build_service()
        working_time = service.add_working_time(_request(), today=TODAY)
        booking = _book(repository, 1, "10:00", "11:00")

        result = service.edit_working_time(working_time.id, _request(date="2024-06-04"), today=TODAY)

        assert result.working_time.date == date(2024, 6, 4)
        assert [b.id for b in result.unassigned] == [booking.id]
        assert repository.list_working_time(1, DAY) is None

    def test_edit_changing_employee_unassigns_previous_employee(self):
        """Test that handing a working time to another employee unassigns the old bookings."""
        service, repository = _build_service()
        working_time = service.add_working_time(_request(), today=TODAY)
        booking = _book(repository, 1, "10:00", "11:00")

        result = service.edit_working_time(working_time.id, _request(employee_id=2), today=TODAY)

        assert [b.id for b in result.unassigned] == [booking.id]
        assert repository.find_booking(booking.id).employee_id is None

    def test_other_employees_bookings_untouched(self):
        """Test that the cascade is limited to the edited employee."""
        service, repository = _build_service()
        working_time = service.add_working_time(_request(), today=TODAY)
        service.add_working_time(_request(employee_id=2), today=TODAY)
        other = _book(repository, 3, "15:00", "16:00", employee_id=2)

        result = service.edit_working_time(working_time.id, _request(end_time="12:00"), today=TODAY)

        assert result.unassigned == []
        assert repository.find_booking(other.id).employee_id == 2

    def test_rejected_edit_changes_nothing(self):
        """Test that a rejected edit neither stores nor cascades."""
        service, repository = _build_service()
        working_time = service.add_working_time(_request(), today=TODAY)
        booking = _book(repository, 1, "15:00", "16:00")

        with pytest.raises(OutOfSchedulingWindow):
            service.edit_working_time(working_time.id, _request(date="2024-07-01", end_time="12:00"), today=TODAY)

        assert repository.find_working_time(working_time.id) == working_time
        assert repository.find_booking(booking.id).employee_id == 1

    def test_edit_unknown_working_time(self):
        """Test that editing an unknown id fails."""
        service, _ = _build_service()

        with pytest.raises(RecordNotFound):
            service.edit_working_time(42, _request(), today=TODAY)


class TestRosterForNextMonth:
    """Tests for the roster listing."""

    def test_roster_of_next_month(self):
        """Test that only next month's working times are listed in order."""
        service, repository = _build_service()
        last = repository.persist_working_time(
            WorkingTime(employee_id=1, date=date(2024, 6, 30), interval=TimeInterval.parse("09:00", "17:00"))
        )
        first = repository.persist_working_time(
            WorkingTime(employee_id=1, date=date(2024, 6, 1), interval=TimeInterval.parse("09:00", "17:00"))
        )
        repository.persist_working_time(
            WorkingTime(employee_id=1, date=date(2024, 5, 28), interval=TimeInterval.parse("09:00", "17:00"))
        )

        assert service.roster_for_next_month(today=TODAY) == [first, last]

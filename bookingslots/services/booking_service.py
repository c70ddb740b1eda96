"""
Application service for bookings and availability.

The service coordinates the repository and the domain-level validators and
calculators. Validation runs inside the repository transaction so the
"no overlap" check and the write cannot be interleaved with a competing
request.
"""

from __future__ import annotations

import logging
from datetime import date, datetime
from typing import Iterable, List, Optional, Sequence

from ..domain.availability import AvailabilityCalculator
from ..domain.booking_validator import BookingValidator
from ..domain.exceptions import RecordNotFound, ReferenceNotFound
from ..domain.history import HistoryPartition, HistoryQuery, bookings_in_month, customer_bookings
from ..domain.models import Booking, BookingRequest, TimeInterval
from ..domain.results import ValidationResult
from .repository import SchedulingRepository

logger = logging.getLogger(__name__)


class BookingService:
    """
    Orchestrates booking validation, persistence and availability queries.
    """

    def __init__(
        self,
        repository: SchedulingRepository,
        calculator: Optional[AvailabilityCalculator] = None,
        history_query: Optional[HistoryQuery] = None,
    ) -> None:
        self._repository = repository
        self._validator = BookingValidator(repository)
        self._calculator = calculator or AvailabilityCalculator()
        self._history = history_query or HistoryQuery()

    def validate_booking(self, request: BookingRequest) -> ValidationResult[Booking]:
        """Validate a booking request without storing anything."""
        return ValidationResult.run(lambda: self._validator.validate(request))

    def create_booking(self, request: BookingRequest) -> Booking:
        """
        Validate and store a booking.

        Raises:
            Rejection: If the request is not valid
        """
        with self._repository.transaction():
            booking = self._validator.validate(request)
            saved = self._repository.persist_booking(booking)

        logger.info(
            "Booking %s created for customer %s on %s %s",
            saved.id,
            saved.customer_id,
            saved.date.isoformat(),
            saved.interval,
        )
        return saved

    def compute_free_slots(
        self,
        working_time: TimeInterval,
        bookings: Iterable[TimeInterval],
    ) -> List[TimeInterval]:
        """Free slots of a working time given its booked intervals."""
        return self._calculator.free_slots(working_time, bookings)

    def available_times(self, employee_id: int, on_date: date) -> List[TimeInterval]:
        """
        Free slots of an employee on a date.

        Returns an empty list when the employee is not working that day.
        """
        working_time = self._repository.list_working_time(employee_id, on_date)
        if working_time is None:
            return []

        booked = [
            booking.interval
            for booking in self._repository.list_bookings(employee_id=employee_id, on_date=on_date)
        ]
        return self.compute_free_slots(working_time.interval, booked)

    def partition_history(
        self,
        now: datetime,
        bookings: Optional[Iterable[Booking]] = None,
    ) -> HistoryPartition:
        """Split bookings (all stored ones by default) into past and future."""
        if bookings is None:
            bookings = self._repository.list_bookings()
        return self._history.partition(bookings, now)

    def history(self, now: datetime) -> List[Booking]:
        """Stored bookings that have already started, oldest first."""
        return self.partition_history(now).past

    def customer_bookings(self, customer_id: int) -> List[Booking]:
        return customer_bookings(self._repository.list_bookings(customer_id=customer_id), customer_id)

    def bookings_in_month(self, month: date) -> List[Booking]:
        return bookings_in_month(self._repository.list_bookings(), month)

    def assign_employee(self, booking_ids: Sequence[int], employee_id: int) -> List[Booking]:
        """
        Assign one employee to many bookings at once.

        Every booking must fit the employee's working time and must not
        overlap the employee's other bookings or the rest of the batch.
        Nothing is changed unless the whole batch passes.

        Raises:
            ReferenceNotFound: If the employee does not exist
            RecordNotFound: If any booking id is unknown
            EmployeeUnavailable: If the employee cannot take one of the bookings
        """
        with self._repository.transaction():
            if self._repository.find_employee(employee_id) is None:
                raise ReferenceNotFound("employee_id")

            bookings = [self._repository.find_booking(booking_id) for booking_id in booking_ids]
            missing = [
                booking_id for booking_id, booking in zip(booking_ids, bookings)
                if booking is None
            ]
            if missing:
                raise RecordNotFound(f"Unknown booking id(s): {', '.join(map(str, missing))}")

            self._validator.validate_assignment(bookings, employee_id)

            assigned = [
                self._repository.assign_booking_employee(booking_id, employee_id)
                for booking_id in booking_ids
            ]

        logger.info("Assigned %d booking(s) to employee %s", len(assigned), employee_id)
        return assigned

    def delete_booking(self, booking_id: int) -> None:
        """
        Raises:
            RecordNotFound: If the booking does not exist
        """
        with self._repository.transaction():
            if not self._repository.delete_booking(booking_id):
                raise RecordNotFound(f"Unknown booking id: {booking_id}")
        logger.info("Booking %s deleted", booking_id)

"""
Validation of booking requests.

Checks run in a fixed order and stop at the first failure, matching the
priority in which errors are shown to users:

1. referenced customer, activity and (optional) employee exist
2. start time and date parse
3. start + activity duration stays within the day
4. the employee works at that time and is not booked already
5. the customer has no other booking at that time
"""

import logging
from typing import Iterable, List, Sequence

from .exceptions import (
    CustomerDoubleBooked,
    EmployeeUnavailable,
    ReferenceNotFound,
    Rejection,
)
from .models import (
    Booking,
    BookingRequest,
    TimeInterval,
    compute_end_time,
    parse_calendar_date,
    parse_time_of_day,
)
from .ports import SchedulingLookup

logger = logging.getLogger(__name__)


def _conflicts(interval: TimeInterval, bookings: Iterable[Booking]) -> bool:
    return any(booking.interval.overlaps(interval) for booking in bookings)


class BookingValidator:
    """
    Validates a proposed booking against existing data.

    The validator never writes. On success it returns the resolved
    ``Booking`` (end time derived from the activity duration) ready to be
    persisted by the caller.
    """

    def __init__(self, lookup: SchedulingLookup):
        self._lookup = lookup

    def validate(self, request: BookingRequest) -> Booking:
        """
        Validate a booking request.

        Raises:
            Rejection: The first rule the request violates
        """
        try:
            return self._validate(request)
        except Rejection as rejection:
            logger.debug(
                "Booking rejected (%s on %s): %s",
                rejection.kind,
                rejection.field,
                rejection.message,
            )
            raise

    def validate_assignment(self, bookings: Sequence[Booking], employee_id: int) -> List[Booking]:
        """
        Check that an employee can take over a batch of stored bookings.

        Each booking must lie inside the employee's working time on its date
        and must not overlap the employee's other bookings, including the
        ones earlier in the same batch.

        Returns:
            The bookings with the employee assigned, in input order

        Raises:
            ReferenceNotFound: If the employee does not exist
            EmployeeUnavailable: For the first booking the employee cannot take
        """
        if self._lookup.find_employee(employee_id) is None:
            raise ReferenceNotFound("employee_id")

        assigned: List[Booking] = []
        for booking in bookings:
            working_time = self._lookup.list_working_time(employee_id, booking.date)
            if working_time is None or not working_time.interval.contains(booking.interval):
                logger.debug("Booking %s is outside the working time of employee %s", booking.id, employee_id)
                raise EmployeeUnavailable()

            batch_ids = {other.id for other in assigned} | {booking.id}
            existing = [
                other for other in self._lookup.list_bookings(employee_id=employee_id, on_date=booking.date)
                if other.id not in batch_ids
            ]
            same_day = [other for other in assigned if other.date == booking.date and other.id != booking.id]
            if _conflicts(booking.interval, existing + same_day):
                logger.debug("Booking %s overlaps another booking of employee %s", booking.id, employee_id)
                raise EmployeeUnavailable()

            assigned.append(booking.with_employee(employee_id))
        return assigned

    def _validate(self, request: BookingRequest) -> Booking:
        lookup = self._lookup

        if lookup.find_customer(request.customer_id) is None:
            raise ReferenceNotFound("customer_id")

        activity = lookup.find_activity(request.activity_id)
        if activity is None:
            raise ReferenceNotFound("activity_id")

        if request.employee_id is not None and lookup.find_employee(request.employee_id) is None:
            raise ReferenceNotFound("employee_id")

        start = parse_time_of_day(request.start_time, "start_time")
        day = parse_calendar_date(request.date, "date")

        end = compute_end_time(day, start, activity.duration)
        interval = TimeInterval(start=start, end=end)

        if request.employee_id is not None:
            working_time = lookup.list_working_time(request.employee_id, day)
            if working_time is None or not working_time.interval.contains(interval):
                raise EmployeeUnavailable()

            if _conflicts(interval, lookup.list_bookings(employee_id=request.employee_id, on_date=day)):
                raise EmployeeUnavailable()

        if _conflicts(interval, lookup.list_bookings(customer_id=request.customer_id, on_date=day)):
            raise CustomerDoubleBooked()

        return Booking(
            customer_id=request.customer_id,
            activity_id=request.activity_id,
            employee_id=request.employee_id,
            date=day,
            interval=interval,
        )

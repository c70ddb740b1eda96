"""
Validation of roster (working time) requests and the edit cascade.
"""

import logging
from datetime import date
from typing import Iterable, List, Optional

from .exceptions import (
    DuplicateWorkingTime,
    InvalidRange,
    OutOfSchedulingWindow,
    ReferenceNotFound,
    Rejection,
)
from .models import (
    Booking,
    TimeInterval,
    WorkingTime,
    WorkingTimeRequest,
    parse_calendar_date,
    parse_time_of_day,
)
from .ports import SchedulingLookup
from .scheduling_window import MONDAY, scheduling_window

logger = logging.getLogger(__name__)


class RosterValidator:
    """
    Validates a proposed working time.

    Order: employee exists, times parse and start < end, date parses and
    lies in the scheduling window, no other working time that day.
    """

    def __init__(self, lookup: SchedulingLookup, week_start: int = MONDAY):
        self._lookup = lookup
        self.week_start = week_start

    def validate(
        self,
        request: WorkingTimeRequest,
        today: date,
        editing: Optional[WorkingTime] = None,
    ) -> WorkingTime:
        """
        Validate a working time request.

        Args:
            request: The submitted working time
            today: Current date in the business timezone
            editing: The stored record when this is an edit

        Returns:
            The resolved WorkingTime (keeping the id of ``editing``)

        Raises:
            Rejection: The first rule the request violates
        """
        try:
            return self._validate(request, today, editing)
        except Rejection as rejection:
            logger.debug(
                "Working time rejected (%s on %s): %s",
                rejection.kind,
                rejection.field,
                rejection.message,
            )
            raise

    def _validate(
        self,
        request: WorkingTimeRequest,
        today: date,
        editing: Optional[WorkingTime],
    ) -> WorkingTime:
        if self._lookup.find_employee(request.employee_id) is None:
            raise ReferenceNotFound("employee_id")

        start = parse_time_of_day(request.start_time, "start_time")
        end = parse_time_of_day(request.end_time, "end_time")
        if start >= end:
            raise InvalidRange()

        day = parse_calendar_date(request.date, "date")
        if day not in scheduling_window(today, self.week_start):
            raise OutOfSchedulingWindow()

        existing = self._lookup.list_working_time(request.employee_id, day)
        if existing is not None and (editing is None or existing.id != editing.id):
            raise DuplicateWorkingTime()

        return WorkingTime(
            employee_id=request.employee_id,
            date=day,
            interval=TimeInterval(start=start, end=end),
            id=editing.id if editing is not None else None,
        )


def displaced_bookings(working_time: WorkingTime, bookings: Iterable[Booking]) -> List[Booking]:
    """
    Bookings of the working time's employee that it no longer covers.

    A booking is displaced when it is on another date or its interval is
    not contained in the working time. Bookings of other employees are
    never displaced.
    """
    return [
        booking for booking in bookings
        if booking.employee_id == working_time.employee_id
        and (booking.date != working_time.date or not working_time.interval.contains(booking.interval))
    ]

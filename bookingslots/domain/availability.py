"""
Core business logic for calculating free slots in a working time.

Pure domain logic without any external dependencies (no database, no I/O).
"""

import logging
from typing import Iterable, List

from .models import TimeInterval

logger = logging.getLogger(__name__)


class AvailabilityCalculator:
    """
    Calculates the free slots of one employee on one date.

    Algorithm:
    1. Sort bookings by start time (stable)
    2. Walk the bookings with a cursor starting at the working time start
    3. Emit the gap before every booking that starts after the cursor
    4. Emit the trailing gap up to the working time end
    """

    def free_slots(
        self,
        working_time: TimeInterval,
        bookings: Iterable[TimeInterval],
    ) -> List[TimeInterval]:
        """
        Subtract booked intervals from a working time.

        Example:
        Working: 09:00 - 17:00
        Booked: [10:00-11:00, 14:00-15:00]
        Result: [09:00-10:00, 11:00-14:00, 15:00-17:00]

        Args:
            working_time: The employee's working time on the date
            bookings: Booked intervals of the employee on the date

        Returns:
            Chronologically ordered, non-overlapping free intervals
        """
        free: List[TimeInterval] = []
        cursor = working_time.start

        for booked in sorted(bookings, key=lambda interval: interval.start):
            if not working_time.contains(booked):
                logger.debug("Ignoring booking %s outside working time %s", booked, working_time)
                continue

            if booked.start > cursor:
                free.append(TimeInterval(start=cursor, end=booked.start))

            cursor = max(cursor, booked.end)

        if cursor < working_time.end:
            free.append(TimeInterval(start=cursor, end=working_time.end))

        return free


def compute_free_slots(
    working_time: TimeInterval,
    bookings: Iterable[TimeInterval],
) -> List[TimeInterval]:
    """Module-level shortcut for ``AvailabilityCalculator().free_slots``."""
    return AvailabilityCalculator().free_slots(working_time, bookings)

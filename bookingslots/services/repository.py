"""
Persistence protocol the application services depend on.
"""

from typing import ContextManager, List, Optional, Protocol

from ..domain.models import Booking, WorkingTime
from ..domain.ports import SchedulingLookup


class SchedulingRepository(SchedulingLookup, Protocol):
    """
    Lookups plus the writes the services perform after acceptance.

    ``transaction()`` must serialize validate-then-write sequences so two
    concurrent requests for the same slot cannot both be accepted.
    """

    def transaction(self) -> ContextManager[None]:
        """Context in which reads and writes are not interleaved with other requests."""

    def find_booking(self, booking_id: int) -> Optional[Booking]:
        """Return the booking or None."""

    def find_working_time(self, working_time_id: int) -> Optional[WorkingTime]:
        """Return the working time or None."""

    def list_working_times(self) -> List[WorkingTime]:
        """Return every working time."""

    def persist_booking(self, booking: Booking) -> Booking:
        """Store a booking, returning it with its id."""

    def persist_working_time(self, working_time: WorkingTime) -> WorkingTime:
        """Insert or replace a working time, returning it with its id."""

    def clear_booking_employee(self, booking_id: int) -> Booking:
        """Unassign the employee of a booking."""

    def assign_booking_employee(self, booking_id: int, employee_id: int) -> Booking:
        """Assign an employee to a booking."""

    def delete_booking(self, booking_id: int) -> bool:
        """Delete a booking, returning whether it existed."""

    def delete_working_time(self, working_time_id: int) -> bool:
        """Delete a working time, returning whether it existed."""

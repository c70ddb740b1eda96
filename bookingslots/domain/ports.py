"""
Read-only lookups the validators consult.

The persistence layer implements these; validators only ever read through
them, so a rejected request leaves no trace.
"""

from datetime import date
from typing import List, Optional, Protocol

from .models import Activity, Booking, Customer, Employee, WorkingTime


class SchedulingLookup(Protocol):
    """Protocol describing the data access needed by the validators."""

    def find_employee(self, employee_id: int) -> Optional[Employee]:
        """Return the employee or None."""

    def find_customer(self, customer_id: int) -> Optional[Customer]:
        """Return the customer or None."""

    def find_activity(self, activity_id: int) -> Optional[Activity]:
        """Return the activity or None."""

    def list_working_time(self, employee_id: int, on_date: date) -> Optional[WorkingTime]:
        """Return the employee's working time on a date, if any."""

    def list_bookings(
        self,
        employee_id: Optional[int] = None,
        customer_id: Optional[int] = None,
        on_date: Optional[date] = None,
    ) -> List[Booking]:
        """Return bookings matching every given filter."""

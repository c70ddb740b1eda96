"""
In-memory scheduling repository, optionally backed by a JSON data file.
"""

import json
import logging
import threading
from contextlib import contextmanager
from datetime import date
from pathlib import Path
from typing import Any, Dict, Iterator, List, Optional

from ..domain.exceptions import DataFileError, MalformedInput, RecordNotFound
from ..domain.models import (
    Activity,
    Booking,
    Customer,
    Employee,
    TimeInterval,
    WorkingTime,
    format_time,
    parse_calendar_date,
    parse_duration,
    parse_time_of_day,
)

logger = logging.getLogger(__name__)


class InMemoryRepository:
    """
    Keeps employees, customers, activities, working times and bookings in dicts.

    All access goes through one re-entrant lock. ``transaction()`` holds it
    across a whole validate-then-write sequence, which serializes competing
    booking and roster requests.
    """

    def __init__(
        self,
        employees: Optional[List[Employee]] = None,
        customers: Optional[List[Customer]] = None,
        activities: Optional[List[Activity]] = None,
    ):
        self._lock = threading.RLock()
        self._employees: Dict[int, Employee] = {e.id: e for e in employees or []}
        self._customers: Dict[int, Customer] = {c.id: c for c in customers or []}
        self._activities: Dict[int, Activity] = {a.id: a for a in activities or []}
        self._working_times: Dict[int, WorkingTime] = {}
        self._bookings: Dict[int, Booking] = {}
        self._next_working_time_id = 1
        self._next_booking_id = 1

    @contextmanager
    def transaction(self) -> Iterator[None]:
        with self._lock:
            yield

    # Reference data

    def add_employee(self, employee: Employee) -> Employee:
        with self._lock:
            self._employees[employee.id] = employee
        return employee

    def add_customer(self, customer: Customer) -> Customer:
        with self._lock:
            self._customers[customer.id] = customer
        return customer

    def add_activity(self, activity: Activity) -> Activity:
        with self._lock:
            self._activities[activity.id] = activity
        return activity

    def find_employee(self, employee_id: int) -> Optional[Employee]:
        return self._employees.get(employee_id)

    def find_customer(self, customer_id: int) -> Optional[Customer]:
        return self._customers.get(customer_id)

    def find_activity(self, activity_id: int) -> Optional[Activity]:
        return self._activities.get(activity_id)

    def list_employees(self) -> List[Employee]:
        return sorted(self._employees.values(), key=lambda e: e.id)

    # Working times

    def find_working_time(self, working_time_id: int) -> Optional[WorkingTime]:
        return self._working_times.get(working_time_id)

    def list_working_time(self, employee_id: int, on_date: date) -> Optional[WorkingTime]:
        with self._lock:
            for working_time in self._working_times.values():
                if working_time.employee_id == employee_id and working_time.date == on_date:
                    return working_time
        return None

    def list_working_times(self) -> List[WorkingTime]:
        with self._lock:
            return list(self._working_times.values())

    def persist_working_time(self, working_time: WorkingTime) -> WorkingTime:
        with self._lock:
            if working_time.id is None:
                working_time = working_time.with_id(self._next_working_time_id)
            self._next_working_time_id = max(self._next_working_time_id, working_time.id + 1)
            self._working_times[working_time.id] = working_time
        return working_time

    def delete_working_time(self, working_time_id: int) -> bool:
        with self._lock:
            return self._working_times.pop(working_time_id, None) is not None

    # Bookings

    def find_booking(self, booking_id: int) -> Optional[Booking]:
        return self._bookings.get(booking_id)

    def list_bookings(
        self,
        employee_id: Optional[int] = None,
        customer_id: Optional[int] = None,
        on_date: Optional[date] = None,
    ) -> List[Booking]:
        with self._lock:
            return [
                booking for booking in self._bookings.values()
                if (employee_id is None or booking.employee_id == employee_id)
                and (customer_id is None or booking.customer_id == customer_id)
                and (on_date is None or booking.date == on_date)
            ]

    def persist_booking(self, booking: Booking) -> Booking:
        with self._lock:
            if booking.id is None:
                booking = booking.with_id(self._next_booking_id)
            self._next_booking_id = max(self._next_booking_id, booking.id + 1)
            self._bookings[booking.id] = booking
        return booking

    def _set_booking_employee(self, booking_id: int, employee_id: Optional[int]) -> Booking:
        with self._lock:
            booking = self._bookings.get(booking_id)
            if booking is None:
                raise RecordNotFound(f"Unknown booking id: {booking_id}")
            updated = booking.with_employee(employee_id)
            self._bookings[booking_id] = updated
        return updated

    def clear_booking_employee(self, booking_id: int) -> Booking:
        return self._set_booking_employee(booking_id, None)

    def assign_booking_employee(self, booking_id: int, employee_id: int) -> Booking:
        return self._set_booking_employee(booking_id, employee_id)

    def delete_booking(self, booking_id: int) -> bool:
        with self._lock:
            return self._bookings.pop(booking_id, None) is not None

    # Data file

    @classmethod
    def load(cls, data_file: Path) -> "InMemoryRepository":
        """
        Load a repository from a JSON data file.

        Raises:
            FileNotFoundError: If the data file doesn't exist
            DataFileError: If the file is not valid JSON or a record is malformed
        """
        if not data_file.exists():
            raise FileNotFoundError(f"Data file not found: {data_file}")

        try:
            with open(data_file, "r", encoding="utf-8") as f:
                data = json.load(f)
        except json.JSONDecodeError as exc:
            raise DataFileError(f"Invalid JSON in {data_file}: {exc}") from exc

        if not isinstance(data, dict):
            raise DataFileError("Data file must contain an object at the root level.")

        try:
            return cls.from_dict(data)
        except (KeyError, TypeError, ValueError, MalformedInput) as exc:
            raise DataFileError(f"Malformed record in {data_file}: {exc}") from exc

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "InMemoryRepository":
        repository = cls(
            employees=[Employee(id=int(e["id"]), name=e.get("name", "")) for e in data.get("employees", [])],
            customers=[Customer(id=int(c["id"]), name=c.get("name", "")) for c in data.get("customers", [])],
            activities=[
                Activity(
                    id=int(a["id"]),
                    name=a["name"],
                    duration=parse_duration(a["duration"]),
                    description=a.get("description", ""),
                )
                for a in data.get("activities", [])
            ],
        )

        for record in data.get("working_times", []):
            repository.persist_working_time(WorkingTime(
                id=record.get("id"),
                employee_id=int(record["employee_id"]),
                date=parse_calendar_date(record["date"]),
                interval=_interval(record),
            ))

        for record in data.get("bookings", []):
            employee_id = record.get("employee_id")
            repository.persist_booking(Booking(
                id=record.get("id"),
                customer_id=int(record["customer_id"]),
                activity_id=int(record["activity_id"]),
                employee_id=int(employee_id) if employee_id is not None else None,
                date=parse_calendar_date(record["date"]),
                interval=_interval(record),
            ))

        logger.debug(
            "Loaded %d working time(s) and %d booking(s)",
            len(repository._working_times),
            len(repository._bookings),
        )
        return repository

    def to_dict(self) -> Dict[str, Any]:
        with self._lock:
            return {
                "employees": [{"id": e.id, "name": e.name} for e in self._employees.values()],
                "customers": [{"id": c.id, "name": c.name} for c in self._customers.values()],
                "activities": [
                    {
                        "id": a.id,
                        "name": a.name,
                        "description": a.description,
                        "duration": _format_duration_hhmm(a),
                    }
                    for a in self._activities.values()
                ],
                "working_times": [
                    {
                        "id": wt.id,
                        "employee_id": wt.employee_id,
                        "date": wt.date.isoformat(),
                        "start_time": format_time(wt.interval.start),
                        "end_time": format_time(wt.interval.end),
                    }
                    for wt in self._working_times.values()
                ],
                "bookings": [
                    {
                        "id": b.id,
                        "customer_id": b.customer_id,
                        "employee_id": b.employee_id,
                        "activity_id": b.activity_id,
                        "date": b.date.isoformat(),
                        "start_time": format_time(b.interval.start),
                        "end_time": format_time(b.interval.end),
                    }
                    for b in self._bookings.values()
                ],
            }

    def save(self, data_file: Path) -> None:
        """Write the repository back to a JSON data file."""
        with open(data_file, "w", encoding="utf-8") as f:
            json.dump(self.to_dict(), f, indent=2, ensure_ascii=False)
        logger.debug("Saved data file %s", data_file)


def _interval(record: Dict[str, Any]) -> TimeInterval:
    return TimeInterval(
        start=parse_time_of_day(record["start_time"], "start_time"),
        end=parse_time_of_day(record["end_time"], "end_time"),
    )


def _format_duration_hhmm(activity: Activity) -> str:
    minutes = int(activity.duration.total_seconds() // 60)
    return f"{minutes // 60:02d}:{minutes % 60:02d}"

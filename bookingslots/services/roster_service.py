"""
Application service for the roster of working times.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from datetime import date
from typing import List, Optional

import pendulum

from ..domain.exceptions import RecordNotFound
from ..domain.models import Booking, WorkingTime, WorkingTimeRequest
from ..domain.results import ValidationResult
from ..domain.roster_validator import RosterValidator, displaced_bookings
from ..domain.scheduling_window import MONDAY, SchedulingWindow, next_month_roster, scheduling_window
from .repository import SchedulingRepository

logger = logging.getLogger(__name__)


@dataclass
class RosterEditResult:
    """An edited working time and the bookings that lost their employee."""
    working_time: WorkingTime
    unassigned: List[Booking] = field(default_factory=list)

    @property
    def unassigned_count(self) -> int:
        return len(self.unassigned)


class RosterService:
    """
    Orchestrates working time validation, persistence and roster views.

    ``today`` defaults to the current date in the business timezone.
    """

    def __init__(
        self,
        repository: SchedulingRepository,
        week_start: int = MONDAY,
        timezone: str = "Australia/Melbourne",
    ) -> None:
        self._repository = repository
        self._validator = RosterValidator(repository, week_start=week_start)
        self.week_start = week_start
        self.timezone = timezone

    def _today(self, today: Optional[date]) -> date:
        return today if today is not None else pendulum.now(self.timezone).date()

    def window(self, today: Optional[date] = None) -> SchedulingWindow:
        return scheduling_window(self._today(today), self.week_start)

    def validate_roster(
        self,
        request: WorkingTimeRequest,
        today: Optional[date] = None,
        editing: Optional[WorkingTime] = None,
    ) -> ValidationResult[WorkingTime]:
        """
        Validate a working time without storing anything.

        Pass the stored record as ``editing`` to check an edit of it.
        """
        current = self._today(today)
        return ValidationResult.run(lambda: self._validator.validate(request, current, editing=editing))

    def add_working_time(
        self,
        request: WorkingTimeRequest,
        today: Optional[date] = None,
    ) -> WorkingTime:
        """
        Validate and store a new working time.

        Raises:
            Rejection: If the request is not valid
        """
        current = self._today(today)
        with self._repository.transaction():
            working_time = self._validator.validate(request, current)
            saved = self._repository.persist_working_time(working_time)

        logger.info(
            "Working time %s added for employee %s on %s %s",
            saved.id,
            saved.employee_id,
            saved.date.isoformat(),
            saved.interval,
        )
        return saved

    def edit_working_time(
        self,
        working_time_id: int,
        request: WorkingTimeRequest,
        today: Optional[date] = None,
    ) -> RosterEditResult:
        """
        Replace a working time and unassign bookings it no longer covers.

        Raises:
            RecordNotFound: If the working time does not exist
            Rejection: If the request is not valid
        """
        current = self._today(today)
        with self._repository.transaction():
            stored = self._repository.find_working_time(working_time_id)
            if stored is None:
                raise RecordNotFound(f"Unknown working time id: {working_time_id}")

            working_time = self._validator.validate(request, current, editing=stored)
            saved = self._repository.persist_working_time(working_time)

            candidates = self._repository.list_bookings(employee_id=stored.employee_id, on_date=stored.date)
            if saved.date != stored.date or saved.employee_id != stored.employee_id:
                candidates += self._repository.list_bookings(employee_id=saved.employee_id, on_date=saved.date)

            # bookings of the previous employee are displaced whenever the employee changes
            displaced = [
                booking for booking in candidates
                if booking.employee_id != saved.employee_id
            ] + displaced_bookings(saved, candidates)

            unassigned = [
                self._repository.clear_booking_employee(booking.id)
                for booking in displaced
            ]

        logger.info("Working time %s edited", saved.id)
        if unassigned:
            logger.info(
                "Unassigned %d booking(s) no longer covered by working time %s: %s",
                len(unassigned),
                saved.id,
                ", ".join(str(booking.id) for booking in unassigned),
            )
        return RosterEditResult(working_time=saved, unassigned=unassigned)

    def delete_working_time(self, working_time_id: int) -> None:
        """
        Raises:
            RecordNotFound: If the working time does not exist
        """
        with self._repository.transaction():
            if not self._repository.delete_working_time(working_time_id):
                raise RecordNotFound(f"Unknown working time id: {working_time_id}")
        logger.info("Working time %s deleted", working_time_id)

    def roster_for_next_month(self, today: Optional[date] = None) -> List[WorkingTime]:
        """Working times of next calendar month, by date and start time."""
        return next_month_roster(self._repository.list_working_times(), self._today(today))

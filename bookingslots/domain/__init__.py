"""
Domain layer - Pure scheduling logic without external dependencies.
"""

from .availability import AvailabilityCalculator, compute_free_slots
from .booking_validator import BookingValidator
from .history import HistoryPartition, HistoryQuery, partition_history
from .models import (
    Activity,
    Booking,
    BookingRequest,
    Customer,
    Employee,
    TimeInterval,
    WorkingTime,
    WorkingTimeRequest,
)
from .results import ValidationResult, ValidationStatus
from .roster_validator import RosterValidator, displaced_bookings
from .scheduling_window import SchedulingWindow, scheduling_window

__all__ = [
    "Activity",
    "AvailabilityCalculator",
    "Booking",
    "BookingRequest",
    "BookingValidator",
    "Customer",
    "Employee",
    "HistoryPartition",
    "HistoryQuery",
    "RosterValidator",
    "SchedulingWindow",
    "TimeInterval",
    "ValidationResult",
    "ValidationStatus",
    "WorkingTime",
    "WorkingTimeRequest",
    "compute_free_slots",
    "displaced_bookings",
    "partition_history",
    "scheduling_window",
]

"""
Service layer helpers that orchestrate the repository and domain logic.
"""

from .booking_service import BookingService
from .repository import SchedulingRepository
from .roster_service import RosterEditResult, RosterService

__all__ = ["BookingService", "RosterEditResult", "RosterService", "SchedulingRepository"]

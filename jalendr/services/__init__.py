"""
Service layer helpers that orchestrate adapters and domain logic.
"""

from .availability_service import AvailabilityService, CalendarClientProtocol, failure_payload
from .booking_service import BookingService

__all__ = ["AvailabilityService", "BookingService", "CalendarClientProtocol", "failure_payload"]

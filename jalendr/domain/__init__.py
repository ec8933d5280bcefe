"""
Domain layer - Pure business logic without external dependencies.
"""

from .availability_calculator import AvailabilityCalculator, compute_availability
from .models import AvailabilityResult, BusinessHoursConfig, BusyInterval, CandidateSlot

__all__ = [
    "AvailabilityCalculator",
    "AvailabilityResult",
    "BusinessHoursConfig",
    "BusyInterval",
    "CandidateSlot",
    "compute_availability",
]

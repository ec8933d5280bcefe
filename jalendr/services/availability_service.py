"""
Application service for checking a client's bookable slots.

The service fetches busy intervals via a calendar client adapter and
delegates the availability calculation to the domain-level
``AvailabilityCalculator``. The calendar dependency is a protocol so tests
and the mock mode can plug in their own implementation.
"""

from __future__ import annotations

import logging
from typing import Any, Dict, Iterable, List, Protocol

from pendulum import DateTime

from ..config import ClientConfig
from ..domain.availability_calculator import AvailabilityCalculator
from ..domain.exceptions import JalendrError
from ..domain.models import AvailabilityResult, BusyInterval

logger = logging.getLogger(__name__)


class CalendarClientProtocol(Protocol):
    """Protocol describing the calendar client behaviour needed by the services."""

    def get_busy_intervals(
        self,
        calendar_id: str,
        start_time: DateTime,
        end_time: DateTime,
        timezone: str,
    ) -> List[BusyInterval]:
        """Return busy intervals overlapping the window."""

    def insert_event(
        self,
        calendar_id: str,
        summary: str,
        start: DateTime,
        end: DateTime,
        description: str = "",
        timezone: str = "UTC",
    ) -> Dict[str, Any]:
        """Create an event; the result carries its "id"."""

    def update_event(
        self,
        calendar_id: str,
        event_id: str,
        start: DateTime,
        end: DateTime,
        timezone: str = "UTC",
    ) -> Dict[str, Any]:
        """Move an event."""

    def delete_event(self, calendar_id: str, event_id: str) -> None:
        """Remove an event."""


class AvailabilityService:
    """
    Orchestrates busy-interval retrieval and slot calculation for one client.
    """

    def __init__(self, calendar_client: CalendarClientProtocol, locale: str = "en") -> None:
        self._calendar_client = calendar_client
        self.locale = locale

    def check_availability(
        self,
        client: ClientConfig,
        target_date: object = None,
        now: DateTime | None = None,
        ignore: Iterable[BusyInterval] = (),
    ) -> AvailabilityResult:
        """
        Fetch the client's busy intervals for the day and compute open slots.

        Busy intervals equal to one in ``ignore`` are dropped, which lets a
        reschedule treat the appointment being moved as free.

        Raises:
            InvalidInputError: If the target date is malformed
            InvalidConfigurationError: If the client's business hours are unusable
            UpstreamUnavailableError: If the calendar cannot be queried
        """
        calculator = AvailabilityCalculator(client.to_business_hours(), locale=self.locale)
        day = calculator.resolve_target_date(target_date, now)
        day_start, day_end = calculator.day_bounds(day)

        busy = self._calendar_client.get_busy_intervals(
            calendar_id=client.calendar_id,
            start_time=day_start,
            end_time=day_end,
            timezone=calculator.tz.name,
        )
        ignored = set(ignore)
        if ignored:
            busy = [interval for interval in busy if interval not in ignored]

        return calculator.compute(busy, day)

    def check_availability_payload(
        self,
        client: ClientConfig,
        target_date: object = None,
        now: DateTime | None = None,
    ) -> Dict[str, Any]:
        """
        Run an availability check and render it for the calling agent.

        Failures are reported with an ``error`` category instead of an
        empty slot list, so "no openings" stays distinguishable.
        """
        try:
            result = self.check_availability(client, target_date, now)
        except JalendrError as exc:
            logger.warning("Availability check for %s failed: %s", client.client_id, exc)
            return failure_payload(exc)

        return result.to_payload()


def failure_payload(exc: JalendrError) -> Dict[str, Any]:
    """Render an application error as the agent-facing JSON shape."""
    return {
        "success": False,
        "error": exc.category,
        "message": str(exc),
    }

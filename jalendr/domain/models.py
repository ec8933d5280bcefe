"""
Domain models for business hours, busy intervals and bookable slots.
"""

from dataclasses import dataclass, field
from datetime import date, time
from typing import Any, Dict, List, Tuple

import pendulum
from pendulum import DateTime

from .exceptions import InvalidConfigurationError, InvalidInputError

# e.g. "Tuesday, March 12 at 9:00 AM"
DISPLAY_FORMAT = "dddd, MMMM D [at] h:mm A"


@dataclass(frozen=True)
class BusinessHoursConfig:
    """
    A client's bookable day: local opening window, timezone and slot length.

    Invariant: day_start is before day_end and slot_duration_minutes is positive.
    """
    timezone: str
    day_start: time
    day_end: time
    slot_duration_minutes: int

    def __post_init__(self):
        if (
            not isinstance(self.slot_duration_minutes, int)
            or isinstance(self.slot_duration_minutes, bool)
            or self.slot_duration_minutes <= 0
        ):
            raise InvalidConfigurationError(
                f"slot_duration_minutes must be a positive integer, got {self.slot_duration_minutes!r}"
            )
        if self.day_start >= self.day_end:
            raise InvalidConfigurationError(
                f"Day start {self.day_start:%H:%M} must be before day end {self.day_end:%H:%M}"
            )


@dataclass(frozen=True)
class BusyInterval:
    """
    An occupied period reported by a calendar provider.

    Invariant: start must be before end.
    """
    start: DateTime
    end: DateTime

    def __post_init__(self):
        if self.start >= self.end:
            raise InvalidInputError(f"Start time {self.start} must be before end time {self.end}")

    @classmethod
    def from_iso(cls, start: str, end: str) -> "BusyInterval":
        """Build an interval from two ISO 8601 strings."""
        try:
            parsed_start = pendulum.parse(start)
            parsed_end = pendulum.parse(end)
        except ValueError as exc:
            raise InvalidInputError(f"Could not parse busy interval {start!r} - {end!r}: {exc}") from exc

        if not isinstance(parsed_start, DateTime) or not isinstance(parsed_end, DateTime):
            raise InvalidInputError(f"Busy interval bounds must be datetimes: {start!r} - {end!r}")

        return cls(start=parsed_start, end=parsed_end)

    def overlaps(self, start: DateTime, end: DateTime) -> bool:
        """Half-open overlap test; a shared boundary is not an overlap."""
        return start < self.end and end > self.start

    def __str__(self) -> str:
        return f"{self.start.to_iso8601_string()} - {self.end.to_iso8601_string()}"


@dataclass(frozen=True)
class CandidateSlot:
    """A fixed-length window considered for booking."""
    start: DateTime
    end: DateTime
    locale: str = field(default="en", compare=False)

    def overlaps(self, busy: BusyInterval) -> bool:
        return busy.overlaps(self.start, self.end)

    @property
    def start_formatted(self) -> str:
        return self.start.format(DISPLAY_FORMAT, locale=self.locale)

    def duration_minutes(self) -> int:
        """Return the duration in minutes."""
        return int((self.end - self.start).total_seconds() / 60)

    def to_payload(self) -> Dict[str, str]:
        return {
            "start": self.start.to_iso8601_string(),
            "startFormatted": self.start_formatted,
        }

    def __str__(self) -> str:
        return f"{self.start.format('YYYY-MM-DD HH:mm')} - {self.end.format('HH:mm')}"


@dataclass(frozen=True)
class AvailabilityResult:
    """
    Available slots for one calendar date in the business's timezone.
    """
    date: date
    timezone: str
    slots: Tuple[CandidateSlot, ...] = ()

    @property
    def is_empty(self) -> bool:
        return not self.slots

    def slot_starting_at(self, start: DateTime) -> CandidateSlot | None:
        """Find the slot beginning at the given instant, if it is available."""
        for slot in self.slots:
            if slot.start == start:
                return slot
        return None

    def message(self) -> str:
        day = self.date.isoformat()
        if self.is_empty:
            return f"No available slots on {day}."
        return f"Found {len(self.slots)} available slot(s) on {day}."

    def to_payload(self) -> Dict[str, Any]:
        """Render the check-availability JSON contract."""
        available: List[Dict[str, str]] = [slot.to_payload() for slot in self.slots]
        return {
            "success": True,
            "date": self.date.isoformat(),
            "timezone": self.timezone,
            "availableSlots": available,
            "message": self.message(),
        }

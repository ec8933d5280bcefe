"""
Core business logic for calculating bookable appointment slots.

Pure domain logic: no API calls, no database, no I/O. Callers fetch busy
intervals from a calendar provider and pass them in.
"""

import logging
from datetime import date, datetime
from typing import Iterable, List, Tuple

import pendulum
from pendulum import DateTime

from .exceptions import InvalidInputError
from .models import AvailabilityResult, BusinessHoursConfig, BusyInterval, CandidateSlot

logger = logging.getLogger(__name__)

# Used when a client's timezone identifier cannot be resolved.
FALLBACK_TIMEZONE = "UTC"


def resolve_timezone(identifier: str) -> pendulum.Timezone:
    """
    Resolve an IANA timezone identifier, falling back to FALLBACK_TIMEZONE.
    """
    try:
        return pendulum.timezone(identifier)
    except (ValueError, KeyError, TypeError):
        logger.warning(
            "Unknown timezone %r, falling back to %s", identifier, FALLBACK_TIMEZONE
        )
        return pendulum.timezone(FALLBACK_TIMEZONE)


def parse_target_date(value: object, tz: pendulum.Timezone | None = None) -> date:
    """
    Normalise a caller-supplied target date.

    Accepts ``datetime.date``/``datetime`` objects and ``YYYY-MM-DD`` strings.
    An aware datetime is converted to ``tz`` before taking its date; a naive
    one keeps its wall date.
    """
    if isinstance(value, datetime):
        if tz is not None and value.tzinfo is not None:
            return pendulum.instance(value).in_timezone(tz).date()
        return value.date()
    if isinstance(value, date):
        return date(value.year, value.month, value.day)
    if isinstance(value, str):
        try:
            parsed = pendulum.from_format(value.strip(), "YYYY-MM-DD")
        except ValueError as exc:
            raise InvalidInputError(f"Invalid date {value!r}, expected YYYY-MM-DD") from exc
        return date(parsed.year, parsed.month, parsed.day)

    raise InvalidInputError(f"Invalid date {value!r}, expected YYYY-MM-DD")


class AvailabilityCalculator:
    """
    Calculates bookable slots for one day of a client's business hours.

    Algorithm:
    1. Resolve the local opening window for the date (DST-aware)
    2. Partition the window into consecutive fixed-length candidate slots
    3. Drop every candidate that overlaps a busy interval
    4. Return the remaining slots in chronological order
    """

    def __init__(self, config: BusinessHoursConfig, locale: str = "en"):
        self.config = config
        self.locale = locale
        self.tz = resolve_timezone(config.timezone)

    def resolve_target_date(
        self,
        target_date: object = None,
        now: DateTime | None = None,
    ) -> date:
        """Default to tomorrow (now + 24h) in the business timezone."""
        if target_date is not None:
            return parse_target_date(target_date, self.tz)

        current = pendulum.instance(now) if now is not None else pendulum.now("UTC")
        return current.in_timezone(self.tz).add(hours=24).date()

    def day_bounds(self, day: date) -> Tuple[DateTime, DateTime]:
        """
        Return the opening and closing instants for a local calendar date.
        """
        start = pendulum.datetime(
            day.year, day.month, day.day,
            self.config.day_start.hour, self.config.day_start.minute,
            tz=self.tz,
        )
        end = pendulum.datetime(
            day.year, day.month, day.day,
            self.config.day_end.hour, self.config.day_end.minute,
            tz=self.tz,
        )
        return start, end

    def candidate_slots(self, day: date) -> List[CandidateSlot]:
        """
        Partition the opening window into whole slots.

        A trailing window shorter than one slot is discarded.
        """
        day_start, day_end = self.day_bounds(day)
        duration = self.config.slot_duration_minutes

        candidates: List[CandidateSlot] = []
        current = day_start

        while True:
            slot_end = current.add(minutes=duration)
            if slot_end > day_end:
                break
            candidates.append(CandidateSlot(start=current, end=slot_end, locale=self.locale))
            current = slot_end

        return candidates

    def compute(
        self,
        busy: Iterable[BusyInterval],
        target_date: object = None,
        now: DateTime | None = None,
    ) -> AvailabilityResult:
        """
        Compute the available slots for a date.

        Args:
            busy: Busy intervals from the calendar, not merged or validated further
            target_date: Date, datetime or YYYY-MM-DD string; defaults to tomorrow
            now: Reference instant for the default date

        Returns:
            AvailabilityResult with slots in chronological order

        Raises:
            InvalidInputError: If the target date is malformed
        """
        day = self.resolve_target_date(target_date, now)
        busy_intervals = list(busy)

        available = [
            slot for slot in self.candidate_slots(day)
            if not any(slot.overlaps(interval) for interval in busy_intervals)
        ]

        logger.debug(
            "Computed %d available slot(s) for %s in %s against %d busy interval(s)",
            len(available), day, self.tz.name, len(busy_intervals),
        )

        return AvailabilityResult(date=day, timezone=self.tz.name, slots=tuple(available))


def compute_availability(
    config: BusinessHoursConfig,
    busy: Iterable[BusyInterval],
    target_date: object = None,
    *,
    now: DateTime | None = None,
    locale: str = "en",
) -> AvailabilityResult:
    """Compute available slots for ``target_date`` (see AvailabilityCalculator)."""
    return AvailabilityCalculator(config, locale=locale).compute(busy, target_date, now=now)

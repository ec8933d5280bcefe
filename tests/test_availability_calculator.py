"""
Tests for the availability calculator.
"""

from datetime import date, datetime, time

import pendulum
import pytest

from jalendr.domain.availability_calculator import (
    AvailabilityCalculator,
    compute_availability,
    parse_target_date,
)
from jalendr.domain.exceptions import InvalidConfigurationError, InvalidInputError
from jalendr.domain.models import BusinessHoursConfig, BusyInterval

TZ = "America/Chicago"


def _busy(start: str, end: str, tz: str = TZ) -> BusyInterval:
    return BusyInterval(start=pendulum.parse(start, tz=tz), end=pendulum.parse(end, tz=tz))


def _local_hours(result) -> list:
    return [slot.start.format("HH:mm") for slot in result.slots]


class TestAvailabilityCalculator:
    """Tests for AvailabilityCalculator."""

    def test_full_day_no_busy_times(self, business_hours):
        """08:00-17:00 with hourly slots and an empty calendar yields nine slots."""
        result = compute_availability(business_hours, [], "2026-10-20")

        assert len(result.slots) == 9
        assert result.slots[0].start == pendulum.parse("2026-10-20 08:00", tz=TZ)
        assert result.slots[-1].start == pendulum.parse("2026-10-20 16:00", tz=TZ)
        assert result.slots[-1].end == pendulum.parse("2026-10-20 17:00", tz=TZ)
        assert result.date == date(2026, 10, 20)
        assert result.timezone == TZ

    def test_busy_hour_removes_slot(self, business_hours):
        busy = [_busy("2026-10-20 09:00", "2026-10-20 10:00")]

        result = compute_availability(business_hours, busy, "2026-10-20")

        assert len(result.slots) == 8
        assert "09:00" not in _local_hours(result)

    def test_touching_busy_interval_does_not_block(self, business_hours):
        """A busy interval ending exactly at slot start leaves the slot open."""
        busy = [_busy("2026-10-20 07:00", "2026-10-20 08:00")]

        result = compute_availability(business_hours, busy, "2026-10-20")

        assert len(result.slots) == 9
        assert _local_hours(result)[0] == "08:00"

    def test_partial_overlap_blocks_every_touched_slot(self, business_hours):
        busy = [_busy("2026-10-20 11:30", "2026-10-20 12:30")]

        result = compute_availability(business_hours, busy, "2026-10-20")

        assert _local_hours(result) == ["08:00", "09:00", "10:00", "13:00", "14:00", "15:00", "16:00"]

    def test_overlapping_busy_intervals_are_handled_individually(self, business_hours):
        busy = [
            _busy("2026-10-20 13:00", "2026-10-20 14:30"),
            _busy("2026-10-20 14:00", "2026-10-20 15:00"),
        ]

        result = compute_availability(business_hours, busy, "2026-10-20")

        assert _local_hours(result) == ["08:00", "09:00", "10:00", "11:00", "12:00", "15:00", "16:00"]

    def test_busy_intervals_in_other_timezones(self, business_hours):
        """Busy data reported in UTC is compared as instants."""
        busy = [BusyInterval.from_iso("2026-10-20T15:00:00Z", "2026-10-20T16:00:00Z")]

        result = compute_availability(business_hours, busy, "2026-10-20")

        assert "10:00" not in _local_hours(result)
        assert len(result.slots) == 8

    def test_window_smaller_than_one_slot(self):
        """08:00-08:30 cannot hold a 60 minute slot: empty but valid."""
        config = BusinessHoursConfig(
            timezone=TZ,
            day_start=time(8, 0),
            day_end=time(8, 30),
            slot_duration_minutes=60,
        )

        result = compute_availability(config, [], "2026-10-20")

        assert result.is_empty
        assert result.to_payload()["success"] is True

    def test_trailing_partial_slot_is_discarded(self):
        config = BusinessHoursConfig(
            timezone=TZ,
            day_start=time(9, 0),
            day_end=time(10, 40),
            slot_duration_minutes=25,
        )

        result = compute_availability(config, [], "2026-10-20")

        assert _local_hours(result) == ["09:00", "09:25", "09:50", "10:15"]
        assert result.slots[-1].end == pendulum.parse("2026-10-20 10:40", tz=TZ)

    def test_zero_duration_is_a_configuration_error(self):
        with pytest.raises(InvalidConfigurationError):
            compute_availability(
                BusinessHoursConfig(
                    timezone=TZ,
                    day_start=time(8, 0),
                    day_end=time(17, 0),
                    slot_duration_minutes=0,
                ),
                [],
                "2026-10-20",
            )

    @pytest.mark.parametrize("bad_date", ["2026-13-45", "tomorrow", "20/10/2026", 20261020])
    def test_malformed_date_is_invalid_input(self, business_hours, bad_date):
        with pytest.raises(InvalidInputError):
            compute_availability(business_hours, [], bad_date)

    def test_is_deterministic(self, business_hours):
        busy = [_busy("2026-10-20 09:00", "2026-10-20 10:00")]

        first = compute_availability(business_hours, busy, "2026-10-20")
        second = compute_availability(business_hours, list(busy), "2026-10-20")

        assert first == second
        assert [slot.to_payload() for slot in first.slots] == [slot.to_payload() for slot in second.slots]


class TestTargetDate:
    """Tests for target date resolution."""

    def test_defaults_to_tomorrow_in_business_timezone(self, business_hours):
        calculator = AvailabilityCalculator(business_hours)

        # 23:30 UTC on Oct 19 is 18:30 in Chicago; +24h lands on Oct 20
        evening = pendulum.datetime(2026, 10, 19, 23, 30, tz="UTC")
        # 03:00 UTC on Oct 19 is still Oct 18 in Chicago
        early = pendulum.datetime(2026, 10, 19, 3, 0, tz="UTC")

        assert calculator.resolve_target_date(now=evening) == date(2026, 10, 20)
        assert calculator.resolve_target_date(now=early) == date(2026, 10, 19)

    def test_compute_without_date_uses_now(self, business_hours):
        now = pendulum.datetime(2026, 10, 19, 12, 0, tz=TZ)

        result = compute_availability(business_hours, [], now=now)

        assert result.date == date(2026, 10, 20)

    def test_accepts_date_and_datetime_objects(self):
        assert parse_target_date(date(2026, 10, 20)) == date(2026, 10, 20)
        assert parse_target_date(pendulum.datetime(2026, 10, 20, 15, 0)) == date(2026, 10, 20)
        assert parse_target_date(" 2026-10-20 ") == date(2026, 10, 20)

    def test_aware_datetime_uses_business_local_date(self, business_hours):
        """03:00 UTC on Oct 20 is still the evening of Oct 19 in Chicago."""
        target = pendulum.datetime(2026, 10, 20, 3, 0, tz="UTC")

        calculator = AvailabilityCalculator(business_hours)
        result = compute_availability(business_hours, [], target)

        assert calculator.resolve_target_date(target) == date(2026, 10, 19)
        assert result.date == date(2026, 10, 19)
        assert result.slots[0].start.to_iso8601_string() == "2026-10-19T08:00:00-05:00"

    def test_naive_datetime_keeps_wall_date(self, business_hours):
        calculator = AvailabilityCalculator(business_hours)

        assert calculator.resolve_target_date(datetime(2026, 10, 20, 3, 0)) == date(2026, 10, 20)


class TestTimezones:
    """Timezone-database resolution, including DST transitions."""

    def test_spring_forward_day_keeps_local_hours(self):
        config = BusinessHoursConfig(
            timezone="America/New_York",
            day_start=time(8, 0),
            day_end=time(17, 0),
            slot_duration_minutes=60,
        )

        result = compute_availability(config, [], "2026-03-08")

        assert len(result.slots) == 9
        assert result.slots[0].start.to_iso8601_string() == "2026-03-08T08:00:00-04:00"

    def test_window_across_dst_gap_uses_elapsed_time(self):
        """00:00 EST to 05:00 EDT is four real hours."""
        config = BusinessHoursConfig(
            timezone="America/New_York",
            day_start=time(0, 0),
            day_end=time(5, 0),
            slot_duration_minutes=60,
        )

        result = compute_availability(config, [], "2026-03-08")

        assert _local_hours(result) == ["00:00", "01:00", "03:00", "04:00"]

    def test_fall_back_day(self):
        config = BusinessHoursConfig(
            timezone="America/New_York",
            day_start=time(8, 0),
            day_end=time(17, 0),
            slot_duration_minutes=60,
        )

        before = compute_availability(config, [], "2026-10-31")
        after = compute_availability(config, [], "2026-11-01")

        assert before.slots[0].start.to_iso8601_string() == "2026-10-31T08:00:00-04:00"
        assert after.slots[0].start.to_iso8601_string() == "2026-11-01T08:00:00-05:00"

    def test_repeated_hour_keeps_distinct_instants(self):
        """Both 01:00 slots on a fall-back day share a label but not an instant."""
        config = BusinessHoursConfig(
            timezone="America/New_York",
            day_start=time(0, 0),
            day_end=time(3, 0),
            slot_duration_minutes=60,
        )

        result = compute_availability(config, [], "2026-11-01")
        payload = [slot.to_payload() for slot in result.slots]

        assert [entry["start"] for entry in payload] == [
            "2026-11-01T00:00:00-04:00",
            "2026-11-01T01:00:00-04:00",
            "2026-11-01T01:00:00-05:00",
            "2026-11-01T02:00:00-05:00",
        ]
        assert payload[1]["startFormatted"] == payload[2]["startFormatted"] == "Sunday, November 1 at 1:00 AM"

    def test_unknown_timezone_falls_back_to_utc(self):
        config = BusinessHoursConfig(
            timezone="Mars/Olympus_Mons",
            day_start=time(8, 0),
            day_end=time(17, 0),
            slot_duration_minutes=60,
        )

        result = compute_availability(config, [], "2026-10-20")

        assert result.timezone == "UTC"
        assert result.slots[0].start == pendulum.datetime(2026, 10, 20, 8, 0, tz="UTC")


BUSY_DAY = [
    ("2026-10-20 08:10", "2026-10-20 08:40"),
    ("2026-10-20 10:00", "2026-10-20 10:05"),
    ("2026-10-20 12:00", "2026-10-20 13:30"),
    ("2026-10-20 12:45", "2026-10-20 14:00"),
    ("2026-10-20 16:55", "2026-10-20 18:00"),
]


@pytest.mark.parametrize("duration", [15, 25, 45, 60, 90])
def test_slot_properties_hold(duration):
    """Slots stay in the window, never overlap busy time, and every dropped candidate is busy."""
    config = BusinessHoursConfig(
        timezone=TZ,
        day_start=time(8, 0),
        day_end=time(17, 0),
        slot_duration_minutes=duration,
    )
    busy = [_busy(start, end) for start, end in BUSY_DAY]
    calculator = AvailabilityCalculator(config)
    day_start, day_end = calculator.day_bounds(date(2026, 10, 20))

    result = calculator.compute(busy, "2026-10-20")

    assert len(result.slots) <= (9 * 60) // duration
    for slot in result.slots:
        assert day_start <= slot.start and slot.end <= day_end
        assert slot.duration_minutes() == duration
        assert not any(slot.overlaps(interval) for interval in busy)

    starts = [slot.start for slot in result.slots]
    assert starts == sorted(starts)

    for candidate in calculator.candidate_slots(date(2026, 10, 20)):
        if candidate not in result.slots:
            assert any(candidate.overlaps(interval) for interval in busy)

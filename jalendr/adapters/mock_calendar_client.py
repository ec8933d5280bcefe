"""
Mock Google Calendar client for running without Google credentials.
"""

import json
import uuid
from pathlib import Path
from typing import Any, Dict, List

import pendulum
from pendulum import DateTime

from ..domain.exceptions import UpstreamUnavailableError
from ..domain.models import BusyInterval


class MockCalendarClient:
    """
    Mock client that simulates Google Calendar responses.

    Busy times are loaded from mock_calendar_data.json; events created
    through this client are kept in memory and reported as busy afterwards.
    """

    def __init__(self, data_file: Path | None = None):
        """
        Initialize the mock client.

        Args:
            data_file: Optional JSON file with {"calendarId", "start", "end"} entries
        """
        self.data_file = data_file or Path(__file__).parent / "mock_calendar_data.json"
        self.events: Dict[str, Dict[str, Any]] = {}
        self._load_calendar_data()

    def _load_calendar_data(self):
        """Load mock calendar data from JSON file."""
        if self.data_file.exists():
            with open(self.data_file, "r", encoding="utf-8") as f:
                self.calendar_events = json.load(f)
        else:
            # Fallback to empty if file doesn't exist
            self.calendar_events = []

    def get_busy_intervals(
        self,
        calendar_id: str,
        start_time: DateTime,
        end_time: DateTime,
        timezone: str = "UTC"
    ) -> List[BusyInterval]:
        """
        Load busy times from mock calendar data and in-memory events.

        Returns:
            List of BusyInterval objects overlapping the window
        """
        busy_intervals: List[BusyInterval] = []

        entries = list(self.calendar_events) + list(self.events.values())

        for event in entries:
            if event.get("calendarId") != calendar_id:
                continue

            try:
                event_start = pendulum.parse(event["start"], tz=timezone)
                event_end = pendulum.parse(event["end"], tz=timezone)
                interval = BusyInterval(start=event_start, end=event_end)
            except (KeyError, ValueError):
                # Skip invalid events
                continue

            # Check if event overlaps with requested time window
            if interval.overlaps(start_time, end_time):
                busy_intervals.append(interval)

        return busy_intervals

    def insert_event(
        self,
        calendar_id: str,
        summary: str,
        start: DateTime,
        end: DateTime,
        description: str = "",
        timezone: str = "UTC"
    ) -> Dict[str, Any]:
        event = {
            "id": uuid.uuid4().hex,
            "calendarId": calendar_id,
            "summary": summary,
            "description": description,
            "start": start.to_iso8601_string(),
            "end": end.to_iso8601_string(),
        }
        self.events[event["id"]] = event
        return dict(event)

    def update_event(
        self,
        calendar_id: str,
        event_id: str,
        start: DateTime,
        end: DateTime,
        timezone: str = "UTC"
    ) -> Dict[str, Any]:
        event = self.events.get(event_id)
        if event is None:
            raise UpstreamUnavailableError(f"Mock event {event_id} not found")
        event["start"] = start.to_iso8601_string()
        event["end"] = end.to_iso8601_string()
        return dict(event)

    def delete_event(self, calendar_id: str, event_id: str) -> None:
        self.events.pop(event_id, None)

"""
Google Calendar API client for busy-time queries and event management.
"""

import logging
from typing import Any, Dict, List

import requests
from pendulum import DateTime
from requests.utils import quote

from ..domain.exceptions import InvalidInputError, UpstreamUnavailableError
from ..domain.models import BusyInterval

logger = logging.getLogger(__name__)


class GoogleCalendarClient:
    """
    Client for Google Calendar v3 REST operations.

    Uses the /freeBusy endpoint for availability and the events collection
    for booking, rescheduling and cancelling.
    """

    CALENDAR_API_ENDPOINT = "https://www.googleapis.com/calendar/v3"

    def __init__(self, access_token: str, timeout: float = 30):
        """
        Initialize the Calendar API client.

        Args:
            access_token: Valid Google OAuth access token for the tenant
            timeout: Seconds to wait for each API call
        """
        self.access_token = access_token
        self.timeout = timeout
        self.headers = {
            "Authorization": f"Bearer {access_token}",
            "Content-Type": "application/json"
        }

    def get_busy_intervals(
        self,
        calendar_id: str,
        start_time: DateTime,
        end_time: DateTime,
        timezone: str = "UTC"
    ) -> List[BusyInterval]:
        """
        Get busy intervals for one calendar.

        Args:
            calendar_id: Google calendar identifier ("primary" or an address)
            start_time: Start of the time window
            end_time: End of the time window
            timezone: IANA timezone identifier for the response

        Returns:
            List of BusyInterval objects

        Raises:
            UpstreamUnavailableError: If the API call fails
        """
        payload = {
            "timeMin": start_time.to_iso8601_string(),
            "timeMax": end_time.to_iso8601_string(),
            "timeZone": timezone,
            "items": [{"id": calendar_id}],
        }

        data = self._request("POST", "/freeBusy", json=payload)
        return self._parse_free_busy_response(data, calendar_id)

    def _parse_free_busy_response(
        self,
        response_data: Dict[str, Any],
        calendar_id: str
    ) -> List[BusyInterval]:
        """
        Parse the freeBusy API response into our domain model.

        Response format:
        {
            "calendars": {
                "primary": {
                    "busy": [{"start": "...", "end": "..."}],
                    "errors": [{"domain": "global", "reason": "notFound"}]
                }
            }
        }
        """
        calendar = response_data.get("calendars", {}).get(calendar_id)
        if calendar is None:
            raise UpstreamUnavailableError(f"Calendar {calendar_id} missing from freeBusy response")

        errors = calendar.get("errors") or []
        if errors:
            reasons = ", ".join(error.get("reason", "unknown") for error in errors)
            raise UpstreamUnavailableError(f"Calendar {calendar_id} busy query failed: {reasons}")

        busy_intervals: List[BusyInterval] = []

        for item in calendar.get("busy", []):
            try:
                busy_intervals.append(BusyInterval.from_iso(item["start"], item["end"]))
            except (KeyError, InvalidInputError) as e:
                logger.warning("Could not parse busy item %s: %s", item, e)
                continue

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
        """Create an event and return the API representation (including "id")."""
        body = {
            "summary": summary,
            "description": description,
            "start": {"dateTime": start.to_iso8601_string(), "timeZone": timezone},
            "end": {"dateTime": end.to_iso8601_string(), "timeZone": timezone},
        }
        return self._request("POST", f"/calendars/{quote(calendar_id, safe='')}/events", json=body)

    def update_event(
        self,
        calendar_id: str,
        event_id: str,
        start: DateTime,
        end: DateTime,
        timezone: str = "UTC"
    ) -> Dict[str, Any]:
        """Move an existing event to a new time."""
        body = {
            "start": {"dateTime": start.to_iso8601_string(), "timeZone": timezone},
            "end": {"dateTime": end.to_iso8601_string(), "timeZone": timezone},
        }
        path = f"/calendars/{quote(calendar_id, safe='')}/events/{quote(event_id, safe='')}"
        return self._request("PATCH", path, json=body)

    def delete_event(self, calendar_id: str, event_id: str) -> None:
        """Delete an event. Deleting an already-removed event is not an error."""
        path = f"/calendars/{quote(calendar_id, safe='')}/events/{quote(event_id, safe='')}"
        self._request("DELETE", path, allowed_statuses=(404, 410))

    def _request(
        self,
        method: str,
        path: str,
        json: Dict[str, Any] | None = None,
        allowed_statuses: tuple = (),
    ) -> Dict[str, Any]:
        url = f"{self.CALENDAR_API_ENDPOINT}{path}"

        try:
            response = requests.request(
                method,
                url,
                headers=self.headers,
                json=json,
                timeout=self.timeout
            )
            if response.status_code in allowed_statuses:
                return {}
            response.raise_for_status()
        except requests.exceptions.RequestException as e:
            raise UpstreamUnavailableError(f"Google Calendar {method} {path} failed: {e}") from e

        if not response.content:
            return {}

        try:
            return response.json()
        except ValueError as e:
            raise UpstreamUnavailableError(f"Google Calendar returned invalid JSON: {e}") from e

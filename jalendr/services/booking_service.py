"""
Booking, rescheduling and cancelling appointments on a client's calendar.
"""

from __future__ import annotations

import logging
from typing import Protocol

import pendulum
from pendulum import DateTime

from ..adapters.lead_store import LeadRecord
from ..config import E164_PATTERN, ClientConfig
from ..domain.availability_calculator import resolve_timezone
from ..domain.exceptions import (
    InvalidInputError,
    LeadNotFoundError,
    SlotUnavailableError,
    SmsDeliveryError,
)
from ..domain.models import DISPLAY_FORMAT, BusyInterval, CandidateSlot
from .availability_service import AvailabilityService, CalendarClientProtocol

logger = logging.getLogger(__name__)


class SmsSenderProtocol(Protocol):
    def send_sms(self, to_number: str, body: str) -> str:
        """Send a message and return the provider's id."""


class LeadStoreProtocol(Protocol):
    def save(self, lead: LeadRecord) -> LeadRecord: ...

    def get(self, lead_id: str) -> LeadRecord: ...

    def update(self, lead_id: str, **changes) -> LeadRecord: ...


class BookingService:
    """
    Turns an available slot into a calendar event, a lead record and an SMS.

    Every booking re-checks availability against the live calendar so a slot
    offered earlier in a call cannot be double-booked.
    """

    def __init__(
        self,
        calendar_client: CalendarClientProtocol,
        sms_sender: SmsSenderProtocol,
        lead_store: LeadStoreProtocol,
        availability_service: AvailabilityService | None = None,
    ) -> None:
        self._calendar_client = calendar_client
        self._sms_sender = sms_sender
        self._lead_store = lead_store
        self._availability = availability_service or AvailabilityService(calendar_client)

    def book(self, client: ClientConfig, name: str, phone: str, slot_start: object) -> LeadRecord:
        """
        Book the slot starting at ``slot_start`` for a caller.

        Raises:
            InvalidInputError: If the phone number or start time is malformed
            SlotUnavailableError: If the slot is not currently available
            UpstreamUnavailableError: If the calendar cannot be read or written
        """
        _validate_phone(phone)
        if not name or not name.strip():
            raise InvalidInputError("A name is required to book an appointment")

        slot = self._find_open_slot(client, slot_start)

        event = self._calendar_client.insert_event(
            calendar_id=client.calendar_id,
            summary=f"Appointment: {name.strip()}",
            start=slot.start,
            end=slot.end,
            description=f"Booked by phone for {name.strip()} ({phone})",
            timezone=resolve_timezone(client.timezone).name,
        )

        lead = self._lead_store.save(
            LeadRecord(
                client_id=client.client_id,
                name=name.strip(),
                phone=phone,
                slot_start=slot.start,
                event_id=event.get("id", ""),
            )
        )
        logger.info("Booked %s for %s at %s", lead.lead_id, client.client_id, slot.start)

        sent = self._notify(
            client,
            phone,
            f"{client.name}: your appointment is confirmed for {slot.start_formatted}.",
        )
        return self._lead_store.update(lead.lead_id, sms_sent=sent)

    def reschedule(self, client: ClientConfig, lead_id: str, new_start: object) -> LeadRecord:
        """
        Move a booked appointment to another available slot.

        The appointment's current slot counts as free while checking.
        """
        lead = self._get_active_lead(client, lead_id)
        current = BusyInterval(
            start=lead.slot_start,
            end=lead.slot_start.add(minutes=client.slot_duration_minutes),
        )

        slot = self._find_open_slot(client, new_start, ignore=(current,))

        self._calendar_client.update_event(
            calendar_id=client.calendar_id,
            event_id=lead.event_id,
            start=slot.start,
            end=slot.end,
            timezone=resolve_timezone(client.timezone).name,
        )
        logger.info("Rescheduled %s for %s to %s", lead_id, client.client_id, slot.start)

        sent = self._notify(
            client,
            lead.phone,
            f"{client.name}: your appointment has been moved to {slot.start_formatted}.",
        )
        return self._lead_store.update(lead_id, slot_start=slot.start, status="rescheduled", sms_sent=sent)

    def cancel(self, client: ClientConfig, lead_id: str) -> LeadRecord:
        """Delete the calendar event and mark the lead cancelled."""
        lead = self._get_active_lead(client, lead_id)

        self._calendar_client.delete_event(calendar_id=client.calendar_id, event_id=lead.event_id)
        logger.info("Cancelled %s for %s", lead_id, client.client_id)

        when = lead.slot_start.format(DISPLAY_FORMAT, locale=self._availability.locale)
        sent = self._notify(
            client,
            lead.phone,
            f"{client.name}: your appointment on {when} has been cancelled.",
        )
        return self._lead_store.update(lead_id, status="cancelled", sms_sent=sent)

    def _find_open_slot(
        self,
        client: ClientConfig,
        slot_start: object,
        ignore: tuple = (),
    ) -> CandidateSlot:
        start = _parse_slot_start(slot_start, client.timezone)
        local_day = start.in_timezone(resolve_timezone(client.timezone)).date()

        result = self._availability.check_availability(client, local_day, ignore=ignore)
        slot = result.slot_starting_at(start)
        if slot is None:
            raise SlotUnavailableError(
                f"{start.to_iso8601_string()} is not an available slot for {client.name}"
            )
        return slot

    def _get_active_lead(self, client: ClientConfig, lead_id: str) -> LeadRecord:
        lead = self._lead_store.get(lead_id)
        if lead.client_id != client.client_id:
            raise LeadNotFoundError(f"Unknown lead id for {client.client_id}: '{lead_id}'")
        if lead.status == "cancelled":
            raise InvalidInputError(f"Appointment {lead_id} is already cancelled")
        return lead

    def _notify(self, client: ClientConfig, phone: str, body: str) -> bool:
        """
        Text the caller (and the business, if configured).

        SMS failures never undo a calendar change; they are logged and
        reported through the lead's sms_sent flag. The business copy is sent
        whether or not the caller's message went through.
        """
        sent = True
        try:
            self._sms_sender.send_sms(phone, body)
        except SmsDeliveryError as exc:
            logger.error("SMS confirmation to %s failed: %s", phone, exc)
            sent = False

        if client.notify_phone:
            try:
                self._sms_sender.send_sms(client.notify_phone, f"[Jalendr] {body}")
            except SmsDeliveryError as exc:
                logger.error("Owner notification to %s failed: %s", client.notify_phone, exc)

        return sent


def _validate_phone(phone: str) -> None:
    if not E164_PATTERN.match(phone or ""):
        raise InvalidInputError(f"Phone number must be in E.164 format, got {phone!r}")


def _parse_slot_start(value: object, timezone: str) -> DateTime:
    """Parse an ISO start time; strings without an offset are read in the client's timezone."""
    if isinstance(value, DateTime):
        return value
    if not isinstance(value, str):
        raise InvalidInputError(f"Invalid slot start {value!r}, expected an ISO 8601 datetime")

    try:
        parsed = pendulum.parse(value.strip(), tz=resolve_timezone(timezone))
    except ValueError as exc:
        raise InvalidInputError(f"Invalid slot start {value!r}, expected an ISO 8601 datetime") from exc

    if not isinstance(parsed, DateTime):
        raise InvalidInputError(f"Invalid slot start {value!r}, expected an ISO 8601 datetime")
    return parsed

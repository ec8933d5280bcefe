"""
Lead records created by bookings.
"""

import uuid
from dataclasses import dataclass, field, replace
from typing import Dict, List

import pendulum
from pendulum import DateTime

from ..domain.exceptions import LeadNotFoundError


@dataclass(frozen=True)
class LeadRecord:
    """A caller who booked (or tried to book) an appointment."""
    client_id: str
    name: str
    phone: str
    slot_start: DateTime
    event_id: str = ""
    status: str = "booked"
    sms_sent: bool = False
    lead_id: str = field(default_factory=lambda: uuid.uuid4().hex)
    created_at: DateTime = field(default_factory=lambda: pendulum.now("UTC"))


class InMemoryLeadStore:
    """
    Keeps lead records in process memory.

    Suitable for the CLI and tests; a database-backed store only needs to
    offer the same four methods.
    """

    def __init__(self):
        self._records: Dict[str, LeadRecord] = {}

    def save(self, lead: LeadRecord) -> LeadRecord:
        self._records[lead.lead_id] = lead
        return lead

    def get(self, lead_id: str) -> LeadRecord:
        try:
            return self._records[lead_id]
        except KeyError:
            raise LeadNotFoundError(f"Unknown lead id: '{lead_id}'") from None

    def update(self, lead_id: str, **changes) -> LeadRecord:
        """Replace fields on an existing record and return the new version."""
        updated = replace(self.get(lead_id), **changes)
        self._records[lead_id] = updated
        return updated

    def list_for_client(self, client_id: str) -> List[LeadRecord]:
        """Return a client's leads, oldest first."""
        leads = [lead for lead in self._records.values() if lead.client_id == client_id]
        return sorted(leads, key=lambda lead: lead.created_at)

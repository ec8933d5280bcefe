"""
Adapters layer - External integrations (Google Calendar, Twilio, lead storage).
"""

from .google_authenticator import GoogleTokenProvider
from .google_calendar_client import GoogleCalendarClient
from .lead_store import InMemoryLeadStore, LeadRecord
from .mock_calendar_client import MockCalendarClient
from .sms_sender import ConsoleSmsSender, TwilioSmsSender

__all__ = [
    "ConsoleSmsSender",
    "GoogleCalendarClient",
    "GoogleTokenProvider",
    "InMemoryLeadStore",
    "LeadRecord",
    "MockCalendarClient",
    "TwilioSmsSender",
]

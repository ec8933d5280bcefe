"""
Domain-specific exception hierarchy for the scheduling bridge.
"""


class JalendrError(Exception):
    """Base class for all application-level errors."""

    #: Machine-readable category used in JSON payloads.
    category = "internal_error"


class InvalidInputError(JalendrError, ValueError):
    """Raised when a caller supplies a malformed date, timezone, phone or slot."""

    category = "invalid_input"


class InvalidConfigurationError(JalendrError, ValueError):
    """Raised when business-hours configuration cannot produce slots."""

    category = "invalid_configuration"


class UpstreamUnavailableError(JalendrError):
    """Raised when calendar data cannot be fetched or written."""

    category = "upstream_unavailable"


class AuthenticationError(UpstreamUnavailableError):
    """Raised when OAuth token exchange fails."""


class SmsDeliveryError(JalendrError):
    """Raised when an SMS could not be handed to the provider."""

    category = "sms_delivery_failed"


class ClientNotFoundError(JalendrError):
    """Raised when no client configuration matches an identifier."""

    category = "client_not_found"


class LeadNotFoundError(JalendrError):
    """Raised when a lead record does not exist."""

    category = "lead_not_found"


class SlotUnavailableError(JalendrError):
    """Raised when a requested slot is not among the available slots."""

    category = "slot_unavailable"

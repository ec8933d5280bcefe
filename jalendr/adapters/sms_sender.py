"""
Twilio SMS sender for booking confirmations.
"""

import logging

import requests

from ..config import E164_PATTERN
from ..domain.exceptions import InvalidInputError, SmsDeliveryError

logger = logging.getLogger(__name__)


class TwilioSmsSender:
    """
    Sends SMS messages through the Twilio Messages REST endpoint.
    """

    TWILIO_API_ENDPOINT = "https://api.twilio.com/2010-04-01"

    def __init__(self, account_sid: str, auth_token: str, from_number: str, timeout: float = 20):
        self.account_sid = account_sid
        self.auth_token = auth_token
        self.from_number = from_number
        self.timeout = timeout

    def send_sms(self, to_number: str, body: str) -> str:
        """
        Send a text message.

        Args:
            to_number: Recipient in E.164 format
            body: Message text

        Returns:
            Twilio message SID

        Raises:
            InvalidInputError: If the recipient number is not E.164
            SmsDeliveryError: If Twilio rejects the message or is unreachable
        """
        if not E164_PATTERN.match(to_number or ""):
            raise InvalidInputError(f"Phone number must be in E.164 format, got {to_number!r}")

        url = f"{self.TWILIO_API_ENDPOINT}/Accounts/{self.account_sid}/Messages.json"

        try:
            response = requests.post(
                url,
                auth=(self.account_sid, self.auth_token),
                data={"To": to_number, "From": self.from_number, "Body": body},
                timeout=self.timeout
            )
            response.raise_for_status()
            data = response.json()
        except requests.exceptions.RequestException as e:
            raise SmsDeliveryError(f"Failed to send SMS to {to_number}: {e}") from e
        except ValueError as e:
            raise SmsDeliveryError(f"Twilio returned invalid JSON: {e}") from e

        sid = data.get("sid", "")
        logger.info("Sent SMS %s to %s", sid, to_number)
        return sid


class ConsoleSmsSender:
    """
    Records messages instead of sending them; used in mock mode.
    """

    def __init__(self):
        self.sent: list[tuple[str, str]] = []

    def send_sms(self, to_number: str, body: str) -> str:
        if not E164_PATTERN.match(to_number or ""):
            raise InvalidInputError(f"Phone number must be in E.164 format, got {to_number!r}")
        self.sent.append((to_number, body))
        logger.info("Mock SMS to %s: %s", to_number, body)
        return f"mock-{len(self.sent)}"

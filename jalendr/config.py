"""
Configuration management using Pydantic models loaded from YAML.
"""

import re
from datetime import time
from pathlib import Path
from typing import List

import yaml
from pydantic import BaseModel, Field, field_validator, model_validator

from .domain.exceptions import ClientNotFoundError
from .domain.models import BusinessHoursConfig

E164_PATTERN = re.compile(r"^\+[1-9]\d{7,14}$")


class GoogleConfig(BaseModel):
    """OAuth application credentials for Google Calendar."""
    client_id: str = ""
    client_secret: str = ""
    token_uri: str = "https://oauth2.googleapis.com/token"


class TwilioConfig(BaseModel):
    """Twilio account used for SMS confirmations."""
    account_sid: str = ""
    auth_token: str = ""
    from_number: str = ""


class ClientConfig(BaseModel):
    """A tenant: one business with its own calendar and hours."""
    client_id: str
    name: str
    calendar_id: str = "primary"
    timezone: str = "America/New_York"
    day_start: time = time(9, 0)
    day_end: time = time(17, 0)
    slot_duration_minutes: int = 60
    refresh_token: str = ""
    notify_phone: str = ""  # Optional: business owner gets booking copies

    @field_validator("day_start", "day_end", mode="before")
    @classmethod
    def parse_local_time(cls, value):
        """
        Accept HH:MM strings.

        PyYAML reads unquoted values like 17:00 as base-60 integers (1020),
        so those are mapped back to hours and minutes.
        """
        if isinstance(value, int) and not isinstance(value, bool):
            if not 0 <= value < 24 * 60:
                raise ValueError(f"Invalid local time: {value}")
            return time(hour=value // 60, minute=value % 60)
        return value

    @field_validator("slot_duration_minutes")
    @classmethod
    def validate_duration(cls, value: int) -> int:
        """Ensure appointment duration is positive."""
        if value <= 0:
            raise ValueError("slot_duration_minutes must be greater than zero")
        return value

    @field_validator("notify_phone")
    @classmethod
    def validate_notify_phone(cls, value: str) -> str:
        if value and not E164_PATTERN.match(value):
            raise ValueError(f"notify_phone must be in E.164 format, got {value!r}")
        return value

    @model_validator(mode="after")
    def validate_hours_order(self) -> "ClientConfig":
        """Ensure the configured window opens before it closes."""
        if self.day_end <= self.day_start:
            raise ValueError("day_end must be later than day_start")
        return self

    def to_business_hours(self) -> BusinessHoursConfig:
        """Build the domain configuration for the availability calculator."""
        return BusinessHoursConfig(
            timezone=self.timezone,
            day_start=self.day_start,
            day_end=self.day_end,
            slot_duration_minutes=self.slot_duration_minutes,
        )


class AppConfig(BaseModel):
    """Application configuration."""
    default_timezone: str = "America/New_York"
    locale: str = "en"
    google: GoogleConfig = Field(default_factory=GoogleConfig)
    twilio: TwilioConfig = Field(default_factory=TwilioConfig)
    clients: List[ClientConfig] = Field(default_factory=list)

    @field_validator("clients")
    @classmethod
    def validate_clients(cls, value: List[ClientConfig]) -> List[ClientConfig]:
        """Ensure client ids are unique."""
        seen_ids: set[str] = set()
        for client in value:
            key = client.client_id.lower()
            if key in seen_ids:
                raise ValueError(f"Duplicate client id detected: {client.client_id}")
            seen_ids.add(key)
        return value

    @classmethod
    def load_from_yaml(cls, config_path: Path) -> "AppConfig":
        """
        Load configuration from YAML file.

        Args:
            config_path: Path to the YAML config file

        Returns:
            AppConfig instance

        Raises:
            FileNotFoundError: If config file doesn't exist
            ValueError: If config is invalid
        """
        if not config_path.exists():
            raise FileNotFoundError(
                f"Config file not found: {config_path}\n"
                f"Please create a config.yaml file. See config.example.yaml for reference."
            )

        try:
            with open(config_path, "r", encoding="utf-8") as f:
                data = yaml.safe_load(f) or {}
        except yaml.YAMLError as exc:
            raise ValueError(f"Invalid YAML in {config_path}: {exc}") from exc

        if not isinstance(data, dict):
            raise ValueError("Config file must contain a mapping at the root level.")

        return cls(**data)

    def find_client(self, client_id: str) -> ClientConfig | None:
        """Find a client by id (case-insensitive)."""
        for client in self.clients:
            if client.client_id.lower() == client_id.lower():
                return client
        return None

    def get_client(self, client_id: str) -> ClientConfig:
        """
        Resolve a client id to its configuration.

        Raises:
            ClientNotFoundError: If no client is configured under that id
        """
        client = self.find_client(client_id)
        if client is None:
            raise ClientNotFoundError(f"Unknown client id: '{client_id}'")
        return client


def get_default_config_path() -> Path:
    """Get the default configuration file path."""
    # Look for config.yaml in current directory
    current_dir = Path.cwd()
    config_path = current_dir / "config.yaml"

    if not config_path.exists():
        # Try in the project root (parent of the package)
        project_root = Path(__file__).parent.parent
        config_path = project_root / "config.yaml"

    return config_path

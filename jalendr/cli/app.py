"""
Main CLI application using Typer.
"""

import json
import logging
from pathlib import Path
from typing import Annotated, Optional

import typer
from rich.console import Console
from rich.logging import RichHandler
from rich.table import Table

from ..adapters.google_authenticator import GoogleTokenProvider
from ..adapters.google_calendar_client import GoogleCalendarClient
from ..adapters.lead_store import InMemoryLeadStore
from ..adapters.mock_calendar_client import MockCalendarClient
from ..adapters.sms_sender import ConsoleSmsSender, TwilioSmsSender
from ..config import AppConfig, ClientConfig, get_default_config_path
from ..domain.exceptions import JalendrError
from ..services.availability_service import AvailabilityService, failure_payload
from ..services.booking_service import BookingService

app = typer.Typer(
    name="jalendr",
    help="Check availability and book appointments on clients' Google Calendars",
    add_completion=False
)

console = Console()

ConfigOption = Annotated[
    Optional[Path],
    typer.Option("--config", "-c", help="Path to config file. Defaults to ./config.yaml"),
]
MockOption = Annotated[
    bool,
    typer.Option("--mock", help="Use mock calendar data and print SMS instead of sending."),
]


@app.callback()
def main(
    verbose: Annotated[bool, typer.Option("--verbose", "-v", help="Enable debug logging.")] = False,
):
    """Configure logging for every command."""
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(message)s",
        handlers=[RichHandler(console=Console(stderr=True), show_path=False)],
    )


def _load_config(config_file: Optional[Path]) -> AppConfig:
    config_path = config_file or get_default_config_path()
    return AppConfig.load_from_yaml(config_path)


def _build_calendar_client(config: AppConfig, client: ClientConfig, mock: bool):
    """Create the calendar adapter for a client, authenticating unless mocked."""
    if mock:
        return MockCalendarClient()

    provider = GoogleTokenProvider(
        client_id=config.google.client_id,
        client_secret=config.google.client_secret,
        token_uri=config.google.token_uri,
    )
    access_token = provider.get_access_token(client.client_id, client.refresh_token)
    return GoogleCalendarClient(access_token=access_token)


def _build_sms_sender(config: AppConfig, mock: bool):
    if mock:
        return ConsoleSmsSender()
    return TwilioSmsSender(
        account_sid=config.twilio.account_sid,
        auth_token=config.twilio.auth_token,
        from_number=config.twilio.from_number,
    )


@app.command()
def availability(
    client_id: Annotated[str, typer.Argument(help="Client id from the config file")],
    date: Annotated[Optional[str], typer.Option("--date", "-d", help="Date (YYYY-MM-DD). Defaults to tomorrow.")] = None,
    config_file: ConfigOption = None,
    mock: MockOption = False,
    as_json: Annotated[bool, typer.Option("--json", help="Print the agent-facing JSON payload.")] = False,
):
    """
    Show the bookable slots for a client on one day.

    Examples:

        jalendr availability acme-dental
        jalendr availability acme-dental --date 2026-10-20 --json
        jalendr availability acme-dental --mock
    """
    try:
        config = _load_config(config_file)
        client = config.get_client(client_id)
        service = AvailabilityService(
            _build_calendar_client(config, client, mock),
            locale=config.locale,
        )

        if as_json:
            payload = service.check_availability_payload(client, date)
            console.print_json(json.dumps(payload))
            if not payload["success"]:
                raise typer.Exit(1)
            return

        result = service.check_availability(client, date)

    except (FileNotFoundError, ValueError, JalendrError) as e:
        if as_json and isinstance(e, JalendrError):
            console.print_json(json.dumps(failure_payload(e)))
        else:
            console.print(f"[bold red]Error:[/bold red] {e}")
        raise typer.Exit(1)

    console.print()
    console.print(f"[bold cyan]{client.name}[/bold cyan] - {result.date.isoformat()} ({result.timezone})")

    if result.is_empty:
        console.print("[yellow]⚠ No available slots on this day.[/yellow]\n")
        return

    console.print(f"[bold green]✓ {len(result.slots)} available slot(s):[/bold green]\n")
    for slot in result.slots:
        console.print(f"  {slot.start_formatted}  [dim]{slot.start.to_iso8601_string()}[/dim]")
    console.print()


@app.command()
def book(
    client_id: Annotated[str, typer.Argument(help="Client id from the config file")],
    name: Annotated[str, typer.Option("--name", help="Caller's name")],
    phone: Annotated[str, typer.Option("--phone", help="Caller's phone number (E.164)")],
    start: Annotated[str, typer.Option("--start", help="Slot start (ISO 8601, e.g. 2026-10-20T09:00)")],
    config_file: ConfigOption = None,
    mock: MockOption = False,
):
    """
    Book an available slot and text a confirmation to the caller.
    """
    try:
        config = _load_config(config_file)
        client = config.get_client(client_id)
        calendar_client = _build_calendar_client(config, client, mock)

        service = BookingService(
            calendar_client=calendar_client,
            sms_sender=_build_sms_sender(config, mock),
            lead_store=InMemoryLeadStore(),
            availability_service=AvailabilityService(calendar_client, locale=config.locale),
        )
        lead = service.book(client, name=name, phone=phone, slot_start=start)

    except (FileNotFoundError, ValueError, JalendrError) as e:
        console.print(f"[bold red]Error:[/bold red] {e}")
        raise typer.Exit(1)

    console.print(f"\n[bold green]✓ Booked[/bold green] {lead.name} at {lead.slot_start.to_iso8601_string()}")
    console.print(f"   Lead: {lead.lead_id}")
    console.print(f"   Event: {lead.event_id or 'n/a'}")
    if not lead.sms_sent:
        console.print("[yellow]⚠ Confirmation SMS could not be sent.[/yellow]")
    console.print()


@app.command()
def clients(config_file: ConfigOption = None):
    """
    List all configured clients.
    """
    try:
        config = _load_config(config_file)
    except (FileNotFoundError, ValueError) as e:
        console.print(f"[bold red]Error:[/bold red] {e}")
        raise typer.Exit(1)

    if not config.clients:
        console.print("[yellow]No clients defined in the config file.[/yellow]")
        return

    table = Table(
        title="Configured clients",
        show_header=True,
        header_style="bold cyan"
    )
    table.add_column("Client id", style="bold yellow")
    table.add_column("Name")
    table.add_column("Calendar", style="dim")
    table.add_column("Timezone")
    table.add_column("Hours")
    table.add_column("Slot")

    for client in config.clients:
        table.add_row(
            client.client_id,
            client.name,
            client.calendar_id,
            client.timezone,
            f"{client.day_start:%H:%M} - {client.day_end:%H:%M}",
            f"{client.slot_duration_minutes} min",
        )

    console.print()
    console.print(table)
    console.print()


@app.command()
def health():
    """
    Print a health status for process supervisors.
    """
    console.print_json(json.dumps({"status": "ok"}))


@app.command()
def version():
    """
    Show version information.
    """
    from .. import __version__
    console.print(f"\n[bold cyan]jalendr[/bold cyan] version [bold]{__version__}[/bold]\n")


if __name__ == "__main__":
    app()

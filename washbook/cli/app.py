"""
Main CLI application using Typer.
"""

import logging
from pathlib import Path
from typing import Annotated, Optional

import pendulum
import typer
from rich.console import Console
from rich.logging import RichHandler
from rich.panel import Panel
from rich.table import Table

from ..adapters.json_data_source import JsonFileDataSource
from ..adapters.rest_client import RestDataClient
from ..config import AppConfig, get_default_config_path
from ..domain.exceptions import WashbookError
from ..services.booking_slots import BookingSlotService
from ..services.reservation_history import ReservationHistoryService

app = typer.Typer(
    name="washbook",
    help="Booking windows, time slots and reservation history for car-wash instances",
    add_completion=False
)

console = Console()

logger = logging.getLogger(__name__)

SLOTS_PER_ROW = 8


class _ConfigHoursSource:
    """Serves the working hours written directly in the config file."""

    def __init__(self, config: AppConfig):
        self._config = config

    def get_working_hours(self, instance_id: str):
        return self._config.weekly_hours()


def _load_config(config_file: Optional[Path]) -> AppConfig:
    config_path = config_file or get_default_config_path()
    if config_file is None and not config_path.exists():
        logger.debug("No config file at %s, using defaults", config_path)
        return AppConfig()
    return AppConfig.load_from_yaml(config_path)


def _build_data_source(config: AppConfig, data_file: Optional[Path]):
    """
    Pick the data source: an explicit data file, then the configured
    backend, then the working hours from the config itself.
    """
    path = data_file or config.data_file
    if path is not None:
        return JsonFileDataSource(path)

    if config.backend is not None:
        return RestDataClient(
            base_url=config.backend.base_url,
            api_key=config.backend.api_key,
            timeout=config.backend.timeout_seconds
        )

    return None


@app.callback()
def main(
    verbose: Annotated[bool, typer.Option("--verbose", "-v", help="Enable debug logging.")] = False,
):
    """
    Booking windows, time slots and reservation history.
    """
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(message)s",
        handlers=[RichHandler(console=Console(stderr=True), show_path=False)],
        force=True,
    )


@app.command()
def slots(
    date: Annotated[Optional[str], typer.Argument(help="Date (YYYY-MM-DD). Defaults to today.")] = None,
    instance: Annotated[Optional[str], typer.Option("--instance", "-i", help="Instance id. Defaults to the configured one.")] = None,
    step: Annotated[Optional[int], typer.Option("--step", "-s", help="Slot step in minutes.")] = None,
    config_file: Annotated[Optional[Path], typer.Option("--config", "-c", help="Path to config file. Defaults to ./config.yaml")] = None,
    data_file: Annotated[Optional[Path], typer.Option("--data", "-d", help="JSON export to read working hours from.")] = None,
):
    """
    Show the bookable window and time slots for a date.

    Examples:

        washbook slots

        washbook slots 2024-11-25 --step 30

        washbook slots 2024-11-25 --data export.json --instance abc
    """
    try:
        config = _load_config(config_file)
        tz = config.timezone

        if step is not None and step <= 0:
            console.print("[bold red]Błąd:[/bold red] --step musi być większy od zera.")
            raise typer.Exit(1)

        if date:
            try:
                target_date = pendulum.from_format(date, "YYYY-MM-DD", tz=tz).date()
            except ValueError as e:
                console.print(f"[red]Błąd parsowania daty: {e}[/red]")
                raise typer.Exit(1)
        else:
            target_date = pendulum.now(tz).date()

        source = _build_data_source(config, data_file) or _ConfigHoursSource(config)
        service = BookingSlotService(hours_source=source)

        result = service.slots_for_date(
            instance_id=instance or config.instance_id,
            date=target_date,
            step_minutes=step or config.slot_step_minutes
        )

        day_label = pendulum.date(
            target_date.year, target_date.month, target_date.day
        ).format("dddd, D MMMM YYYY", locale="pl")

        console.print()
        console.print(Panel.fit(
            f"[bold]Data:[/bold] {day_label}\n"
            f"[bold]Zakres:[/bold] {result.window}\n"
            f"[bold]Sloty:[/bold] {len(result.slots)}",
            title="🗓️  Dostępne godziny"
        ))

        if not result.slots:
            console.print("[yellow]⚠ Brak dostępnych godzin.[/yellow]")
        else:
            table = Table(show_header=False, box=None, padding=(0, 2))
            for start in range(0, len(result.slots), SLOTS_PER_ROW):
                table.add_row(*result.slots[start:start + SLOTS_PER_ROW])
            console.print(table)

        console.print()

    except (WashbookError, FileNotFoundError, ValueError) as e:
        console.print(f"[bold red]Błąd:[/bold red] {e}")
        raise typer.Exit(1)


@app.command()
def history(
    reservation_id: Annotated[str, typer.Argument(help="Reservation id.")],
    config_file: Annotated[Optional[Path], typer.Option("--config", "-c", help="Path to config file. Defaults to ./config.yaml")] = None,
    data_file: Annotated[Optional[Path], typer.Option("--data", "-d", help="JSON export to read change history from.")] = None,
):
    """
    Show the change history of a reservation, grouped by edit.
    """
    try:
        config = _load_config(config_file)

        source = _build_data_source(config, data_file)
        if source is None:
            console.print(
                "[bold red]Błąd:[/bold red] Brak źródła danych. "
                "Podaj --data albo skonfiguruj 'backend' w config.yaml."
            )
            raise typer.Exit(1)

        service = ReservationHistoryService(
            history_source=source,
            services=config.services,
            stations=config.stations,
            employees=config.employees,
            timezone=config.timezone
        )

        entries = service.history_entries(reservation_id)

        console.print()
        if not entries:
            console.print(f"[yellow]Brak historii zmian dla rezerwacji {reservation_id}.[/yellow]\n")
            return

        console.print(f"[bold cyan]Historia zmian ({len(entries)}):[/bold cyan]\n")
        for entry in entries:
            console.print(f"[dim]{entry.header}[/dim]")
            for line in entry.lines:
                console.print(f"  {line}", markup=False)
            console.print()

    except (WashbookError, FileNotFoundError, ValueError) as e:
        console.print(f"[bold red]Błąd:[/bold red] {e}")
        raise typer.Exit(1)


@app.command()
def version():
    """
    Show version information.
    """
    from .. import __version__
    console.print(f"\n[bold cyan]washbook[/bold cyan] version [bold]{__version__}[/bold]\n")


if __name__ == "__main__":
    app()

"""
Main CLI application using Typer.
"""

import logging
from pathlib import Path
from typing import Annotated, List, Optional, Tuple

import pendulum
import typer
from rich.console import Console
from rich.logging import RichHandler
from rich.panel import Panel
from rich.table import Table

from ..adapters.json_store import JsonRecordStore
from ..config import AppConfig, get_default_config_path
from ..domain.exceptions import BookingSlotsError
from ..domain.models import TimeWindow, WeeklyAvailabilityRule
from ..services.availability import AvailabilityService

app = typer.Typer(
    name="bookingslots",
    help="Compute bookable time slots for providers, members and locations",
    add_completion=False
)

console = Console()

ConfigOption = Annotated[
    Optional[Path],
    typer.Option("--config", "-c", help="Path to config file. Defaults to ./config.yaml"),
]
DataOption = Annotated[
    Optional[Path],
    typer.Option("--data", help="Path to the JSON record export. Overrides the config file."),
]
VerboseOption = Annotated[
    bool,
    typer.Option("--verbose", "-v", help="Show debug logging."),
]


def _configure_logging(level: str, verbose: bool) -> None:
    logging.basicConfig(
        level=logging.DEBUG if verbose else level,
        format="%(message)s",
        datefmt="[%X]",
        handlers=[RichHandler(console=Console(stderr=True), show_path=False)],
        force=True,
    )


def _load_config(config_file: Optional[Path]) -> AppConfig:
    """Load the YAML config, or fall back to defaults when none exists."""
    config_path = config_file or get_default_config_path()
    if config_file is None and not config_path.exists():
        return AppConfig()
    return AppConfig.load_from_yaml(config_path)


def _build_service(
    config_file: Optional[Path],
    data_file: Optional[Path],
    verbose: bool,
) -> Tuple[AppConfig, AvailabilityService]:
    config = _load_config(config_file)
    _configure_logging(config.log_level, verbose)

    store = JsonRecordStore.from_file(
        config.resolve_data_file(data_file),
        timezone=config.timezone,
        defaults=config.defaults.to_settings(),
    )
    service = AvailabilityService(
        record_source=store,
        timezone=config.timezone,
        next_available_horizon_days=config.defaults.next_available_horizon_days,
    )
    return config, service


def _parse_date(value: str, tz: str, label: str):
    try:
        return pendulum.from_format(value, "YYYY-MM-DD", tz=tz).date()
    except ValueError as e:
        console.print(f"[red]Could not parse {label}: {e}[/red]")
        raise typer.Exit(1)


def _parse_windows(values: List[str]) -> Tuple[TimeWindow, ...]:
    windows = []
    for value in values:
        start, _, end = value.partition("-")
        window = TimeWindow(start=start.strip(), end=end.strip())
        if window.to_interval() is None:
            console.print(f"[red]Invalid window '{value}', expected HH:MM-HH:MM[/red]")
            raise typer.Exit(1)
        windows.append(window)
    return tuple(windows)


def _slots_table(title: str, slots) -> Table:
    table = Table(title=title, show_header=True, header_style="bold cyan")
    table.add_column("Date", style="bold yellow")
    table.add_column("Start")
    table.add_column("End")
    table.add_column("Member", style="dim")
    table.add_column("Location", style="dim")

    for slot in slots:
        table.add_row(
            slot.date.strftime("%a %d.%m.%Y"),
            slot.start,
            slot.end,
            slot.member_id or "-",
            slot.location_id or "-",
        )
    return table


@app.command()
def slots(
    provider: Annotated[str, typer.Argument(help="Provider id")],
    service: Annotated[str, typer.Argument(help="Service id")],
    member: Annotated[Optional[str], typer.Option("--member", "-m", help="Member id")] = None,
    location: Annotated[Optional[str], typer.Option("--location", "-l", help="Location id")] = None,
    start: Annotated[Optional[str], typer.Option("--start", help="Start date (YYYY-MM-DD)")] = None,
    end: Annotated[Optional[str], typer.Option("--end", help="End date (YYYY-MM-DD)")] = None,
    config_file: ConfigOption = None,
    data_file: DataOption = None,
    verbose: VerboseOption = False,
):
    """
    List the bookable slots of a service.

    Examples:

        bookingslots slots prov-1 haircut --start 2025-03-03 --end 2025-03-07

        bookingslots slots prov-1 haircut --member alice --location paris-11
    """
    try:
        config, availability = _build_service(config_file, data_file, verbose)
        tz = config.timezone

        start_date = _parse_date(start, tz, "start date") if start else pendulum.today(tz).date()
        end_date = _parse_date(end, tz, "end date") if end else start_date.add(days=6)

        found = availability.get_available_slots(
            provider_id=provider,
            service_id=service,
            start_date=start_date,
            end_date=end_date,
            member_id=member,
            location_id=location,
        )

        console.print()
        if not found:
            console.print(
                "[yellow]⚠ No available slots found.[/yellow]\n"
                "Try a longer date range or another member/location."
            )
        else:
            console.print(_slots_table(f"{len(found)} available slot(s)", found))
        console.print()

    except (FileNotFoundError, BookingSlotsError, ValueError) as e:
        console.print(f"[bold red]Error:[/bold red] {e}")
        raise typer.Exit(1)


@app.command()
def check(
    provider: Annotated[str, typer.Argument(help="Provider id")],
    service: Annotated[str, typer.Argument(help="Service id")],
    at: Annotated[str, typer.Option("--at", help="Start time (YYYY-MM-DD HH:mm)")],
    location: Annotated[str, typer.Option("--location", "-l", help="Location id")],
    member: Annotated[Optional[str], typer.Option("--member", "-m", help="Member id")] = None,
    config_file: ConfigOption = None,
    data_file: DataOption = None,
    verbose: VerboseOption = False,
):
    """
    Check whether one start time can still be booked.
    """
    try:
        config, availability = _build_service(config_file, data_file, verbose)

        try:
            start_at = pendulum.from_format(at, "YYYY-MM-DD HH:mm", tz=config.timezone)
        except ValueError as e:
            console.print(f"[red]Could not parse start time: {e}[/red]")
            raise typer.Exit(1)

        available = availability.is_slot_available(
            provider_id=provider,
            service_id=service,
            member_id=member,
            location_id=location,
            start_at=start_at,
        )

        if available:
            console.print(f"\n[green]✓ {start_at.format('DD.MM.YYYY HH:mm')} is available[/green]\n")
        else:
            console.print(f"\n[red]✗ {start_at.format('DD.MM.YYYY HH:mm')} is not available[/red]\n")
            raise typer.Exit(2)

    except (FileNotFoundError, BookingSlotsError, ValueError) as e:
        console.print(f"[bold red]Error:[/bold red] {e}")
        raise typer.Exit(1)


@app.command("next")
def next_available(
    provider: Annotated[str, typer.Argument(help="Provider id")],
    service: Annotated[str, typer.Argument(help="Service id")],
    member: Annotated[Optional[str], typer.Option("--member", "-m", help="Member id")] = None,
    location: Annotated[Optional[str], typer.Option("--location", "-l", help="Location id")] = None,
    per_member: Annotated[bool, typer.Option("--per-member", help="One result per member.")] = False,
    config_file: ConfigOption = None,
    data_file: DataOption = None,
    verbose: VerboseOption = False,
):
    """
    Show the first available slot, overall or per member.
    """
    try:
        _, availability = _build_service(config_file, data_file, verbose)

        if per_member:
            results = availability.next_available_by_member(
                provider_id=provider, service_id=service, location_id=location
            )
            table = Table(title="Next available slot per member", header_style="bold cyan")
            table.add_column("Member", style="bold yellow")
            table.add_column("Next slot")
            for member_id, slot in results.items():
                table.add_row(member_id or "-", slot.format_display() if slot else "none")
            console.print()
            console.print(table)
            console.print()
            return

        slot = availability.find_next_available(
            provider_id=provider,
            service_id=service,
            member_id=member,
            location_id=location,
        )
        if slot is None:
            console.print("\n[yellow]⚠ Nothing available within the search horizon.[/yellow]\n")
        else:
            console.print(f"\n[bold green]✓ Next available:[/bold green] {slot.format_display()}\n")

    except (FileNotFoundError, BookingSlotsError, ValueError) as e:
        console.print(f"[bold red]Error:[/bold red] {e}")
        raise typer.Exit(1)


@app.command()
def conflicts(
    provider: Annotated[str, typer.Argument(help="Provider id")],
    day: Annotated[int, typer.Option("--day", help="Day of week (0=Sunday ... 6=Saturday)")],
    location: Annotated[str, typer.Option("--location", "-l", help="Location id")],
    effective_from: Annotated[str, typer.Option("--from", help="Effective date (YYYY-MM-DD)")],
    window: Annotated[Optional[List[str]], typer.Option("--window", "-w", help="Opening window HH:MM-HH:MM")] = None,
    member: Annotated[Optional[str], typer.Option("--member", "-m", help="Member id")] = None,
    closed: Annotated[bool, typer.Option("--closed", help="The change closes the day.")] = False,
    config_file: ConfigOption = None,
    data_file: DataOption = None,
    verbose: VerboseOption = False,
):
    """
    List bookings that a scheduled weekly change would no longer cover.
    """
    try:
        config, availability = _build_service(config_file, data_file, verbose)

        if not 0 <= day <= 6:
            console.print("[red]--day must be between 0 and 6[/red]")
            raise typer.Exit(1)

        rule = WeeklyAvailabilityRule(
            member_id=member,
            location_id=location,
            day_of_week=day,
            windows=_parse_windows(window or []),
            is_open=not closed,
            effective_from=_parse_date(effective_from, config.timezone, "effective date"),
        )

        found = availability.get_schedule_conflicts(provider_id=provider, rule=rule)

        if not found:
            console.print(Panel.fit("[bold green]✓ No booking is affected.[/bold green]", title="Conflicts"))
            return

        table = Table(title=f"{len(found)} affected booking(s)", header_style="bold cyan")
        table.add_column("Booking", style="bold yellow")
        table.add_column("Starts")
        table.add_column("Reason")
        for conflict in found:
            table.add_row(
                conflict.booking_id or "-",
                conflict.booking_start.format("DD.MM.YYYY HH:mm"),
                conflict.conflict_type.value,
            )
        console.print()
        console.print(table)
        console.print()

    except (FileNotFoundError, BookingSlotsError, ValueError) as e:
        console.print(f"[bold red]Error:[/bold red] {e}")
        raise typer.Exit(1)


@app.command()
def version():
    """
    Show version information.
    """
    from .. import __version__
    console.print(f"\n[bold cyan]bookingslots[/bold cyan] version [bold]{__version__}[/bold]\n")


if __name__ == "__main__":
    app()

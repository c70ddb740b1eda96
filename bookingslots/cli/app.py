"""
Main CLI application using Typer.
"""

import logging
from dataclasses import dataclass
from datetime import date
from pathlib import Path
from typing import Annotated, List, Optional

import pendulum
import typer
from rich.console import Console
from rich.logging import RichHandler
from rich.table import Table

from ..adapters.memory_repository import InMemoryRepository
from ..config import AppConfig, get_default_config_path
from ..domain.exceptions import BookingSlotsError, Rejection
from ..domain.history import HistoryQuery, month_range
from ..domain.models import (
    Booking,
    BookingRequest,
    WorkingTimeRequest,
    format_time,
    parse_calendar_date,
)
from ..domain.scheduling_window import scheduling_window
from ..services.booking_service import BookingService
from ..services.roster_service import RosterService

app = typer.Typer(
    name="bookingslots",
    help="Manage rosters, bookings and free appointment slots",
    add_completion=False
)

console = Console()

state = {"verbose": False}

ConfigOption = Annotated[Optional[Path], typer.Option("--config", "-c", help="Path to config file. Defaults to ./config.yaml")]
DataOption = Annotated[Optional[Path], typer.Option("--data", "-D", help="JSON data file. Overrides data_file from the config")]


@dataclass
class Context:
    config: AppConfig
    data_file: Path
    repository: InMemoryRepository

    @property
    def bookings(self) -> BookingService:
        return BookingService(self.repository, history_query=HistoryQuery(self.config.timezone))

    @property
    def roster(self) -> RosterService:
        return RosterService(self.repository, week_start=self.config.week_start, timezone=self.config.timezone)

    def save(self) -> None:
        self.repository.save(self.data_file)


def _configure_logging(level: str) -> None:
    logging.basicConfig(
        level="DEBUG" if state["verbose"] else level,
        format="%(message)s",
        handlers=[RichHandler(console=console, show_path=False)],
        force=True,
    )


def _load_context(config_file: Optional[Path], data_file: Optional[Path]) -> Context:
    """
    Load configuration and the data file, exiting with a message on failure.
    """
    try:
        config_path = config_file or get_default_config_path()
        if config_file is None and not config_path.exists():
            config = AppConfig()
        else:
            config = AppConfig.load_from_yaml(config_path)

        _configure_logging(config.log_level)

        data_path = data_file or config.data_file
        if data_path is None:
            console.print("[bold red]Error:[/bold red] No data file given. Use --data or set data_file in the config.")
            raise typer.Exit(1)

        return Context(config=config, data_file=data_path, repository=InMemoryRepository.load(data_path))

    except (FileNotFoundError, ValueError, BookingSlotsError) as e:
        console.print(f"[bold red]Error:[/bold red] {e}")
        raise typer.Exit(1)


def _parse_date_option(value: str) -> date:
    try:
        return parse_calendar_date(value)
    except Rejection as e:
        console.print(f"[bold red]Error:[/bold red] {e.message}")
        raise typer.Exit(1)


def _print_rejection(rejection: Rejection) -> None:
    console.print(f"[bold red]Rejected ({rejection.kind}):[/bold red] {rejection.message}")


def _bookings_table(title: str, bookings: List[Booking]) -> Table:
    table = Table(title=title, show_header=True, header_style="bold cyan")
    table.add_column("ID", style="dim")
    table.add_column("Date")
    table.add_column("Time", style="bold yellow")
    table.add_column("Customer")
    table.add_column("Employee")
    table.add_column("Activity")

    for booking in bookings:
        table.add_row(
            str(booking.id),
            booking.date.isoformat(),
            booking.interval.format_range(),
            str(booking.customer_id),
            str(booking.employee_id) if booking.employee_id is not None else "-",
            str(booking.activity_id),
        )
    return table


@app.callback()
def main(
    verbose: Annotated[bool, typer.Option("--verbose", "-v", help="Enable debug logging")] = False,
):
    """
    Roster and booking management for a small business.
    """
    state["verbose"] = verbose


@app.command("free-slots")
def free_slots(
    employee_id: Annotated[int, typer.Argument(help="Employee ID")],
    on_date: Annotated[str, typer.Argument(metavar="DATE", help="Date (YYYY-MM-DD)")],
    config_file: ConfigOption = None,
    data_file: DataOption = None,
):
    """
    Show the free slots of an employee on a date.
    """
    ctx = _load_context(config_file, data_file)
    day = _parse_date_option(on_date)

    slots = ctx.bookings.available_times(employee_id, day)

    if not slots:
        console.print(f"[yellow]No free slots for employee {employee_id} on {day.isoformat()}.[/yellow]")
        return

    table = Table(title=f"Free slots - employee {employee_id}, {day.isoformat()}", header_style="bold cyan")
    table.add_column("From", style="bold green")
    table.add_column("To", style="bold green")
    table.add_column("Minutes", justify="right", style="dim")
    for slot in slots:
        table.add_row(format_time(slot.start), format_time(slot.end), str(slot.duration_minutes()))

    console.print()
    console.print(table)
    console.print()


@app.command()
def book(
    customer_id: Annotated[int, typer.Argument(help="Customer ID")],
    activity_id: Annotated[int, typer.Argument(help="Activity ID")],
    on_date: Annotated[str, typer.Argument(metavar="DATE", help="Date (YYYY-MM-DD)")],
    start: Annotated[str, typer.Argument(help="Start time (HH:MM)")],
    employee: Annotated[Optional[int], typer.Option("--employee", "-e", help="Assign an employee right away")] = None,
    config_file: ConfigOption = None,
    data_file: DataOption = None,
):
    """
    Create a booking. The end time follows from the activity duration.
    """
    ctx = _load_context(config_file, data_file)
    request = BookingRequest(
        customer_id=customer_id,
        activity_id=activity_id,
        date=on_date,
        start_time=start,
        employee_id=employee,
    )

    try:
        booking = ctx.bookings.create_booking(request)
    except Rejection as rejection:
        _print_rejection(rejection)
        raise typer.Exit(1)

    ctx.save()
    console.print(
        f"[green]✓ Booking {booking.id} created:[/green] "
        f"{booking.date.isoformat()} {booking.interval.format_range()}"
    )


@app.command("roster-add")
def roster_add(
    employee_id: Annotated[int, typer.Argument(help="Employee ID")],
    on_date: Annotated[str, typer.Argument(metavar="DATE", help="Date (YYYY-MM-DD)")],
    start: Annotated[Optional[str], typer.Option("--start", help="Start time (HH:MM). Defaults to the config")] = None,
    end: Annotated[Optional[str], typer.Option("--end", help="End time (HH:MM). Defaults to the config")] = None,
    today: Annotated[Optional[str], typer.Option("--today", help="Override today's date (YYYY-MM-DD)")] = None,
    config_file: ConfigOption = None,
    data_file: DataOption = None,
):
    """
    Add a working time for an employee.
    """
    ctx = _load_context(config_file, data_file)
    request = WorkingTimeRequest(
        employee_id=employee_id,
        date=on_date,
        start_time=start or ctx.config.defaults.working_start,
        end_time=end or ctx.config.defaults.working_end,
    )
    current = _parse_date_option(today) if today else None

    try:
        working_time = ctx.roster.add_working_time(request, today=current)
    except Rejection as rejection:
        _print_rejection(rejection)
        raise typer.Exit(1)

    ctx.save()
    console.print(
        f"[green]✓ Working time {working_time.id} added:[/green] "
        f"{working_time.date.isoformat()} {working_time.interval.format_range()}"
    )


@app.command("roster-edit")
def roster_edit(
    working_time_id: Annotated[int, typer.Argument(help="Working time ID")],
    employee_id: Annotated[int, typer.Argument(help="Employee ID")],
    on_date: Annotated[str, typer.Argument(metavar="DATE", help="Date (YYYY-MM-DD)")],
    start: Annotated[str, typer.Argument(help="Start time (HH:MM)")],
    end: Annotated[str, typer.Argument(help="End time (HH:MM)")],
    today: Annotated[Optional[str], typer.Option("--today", help="Override today's date (YYYY-MM-DD)")] = None,
    config_file: ConfigOption = None,
    data_file: DataOption = None,
):
    """
    Change a working time. Bookings it no longer covers lose their employee.
    """
    ctx = _load_context(config_file, data_file)
    request = WorkingTimeRequest(employee_id=employee_id, date=on_date, start_time=start, end_time=end)
    current = _parse_date_option(today) if today else None

    try:
        result = ctx.roster.edit_working_time(working_time_id, request, today=current)
    except Rejection as rejection:
        _print_rejection(rejection)
        raise typer.Exit(1)
    except BookingSlotsError as e:
        console.print(f"[bold red]Error:[/bold red] {e}")
        raise typer.Exit(1)

    ctx.save()
    console.print(f"[green]✓ Working time {result.working_time.id} updated.[/green]")

    if result.unassigned:
        console.print(f"[yellow]⚠ {result.unassigned_count} booking(s) need a new employee:[/yellow]")
        console.print(_bookings_table("Unassigned bookings", result.unassigned))


@app.command()
def roster(
    today: Annotated[Optional[str], typer.Option("--today", help="Override today's date (YYYY-MM-DD)")] = None,
    config_file: ConfigOption = None,
    data_file: DataOption = None,
):
    """
    List next month's roster.
    """
    ctx = _load_context(config_file, data_file)
    current = _parse_date_option(today) if today else None
    working_times = ctx.roster.roster_for_next_month(today=current)

    if not working_times:
        console.print("[yellow]No working times rostered for next month.[/yellow]")
        return

    table = Table(title="Roster - next month", show_header=True, header_style="bold cyan")
    table.add_column("ID", style="dim")
    table.add_column("Date")
    table.add_column("Employee", style="bold yellow")
    table.add_column("Time")
    for working_time in working_times:
        table.add_row(
            str(working_time.id),
            working_time.date.isoformat(),
            str(working_time.employee_id),
            working_time.interval.format_range(),
        )

    console.print()
    console.print(table)
    console.print()


@app.command()
def assign(
    employee_id: Annotated[int, typer.Argument(help="Employee ID")],
    booking_ids: Annotated[List[int], typer.Argument(help="Booking IDs")],
    config_file: ConfigOption = None,
    data_file: DataOption = None,
):
    """
    Assign an employee to one or more bookings.
    """
    ctx = _load_context(config_file, data_file)

    try:
        assigned = ctx.bookings.assign_employee(booking_ids, employee_id)
    except Rejection as rejection:
        _print_rejection(rejection)
        raise typer.Exit(1)
    except BookingSlotsError as e:
        console.print(f"[bold red]Error:[/bold red] {e}")
        raise typer.Exit(1)

    ctx.save()
    console.print(f"[green]✓ {len(assigned)} booking(s) have been assigned to employee {employee_id}.[/green]")


@app.command()
def history(
    now: Annotated[Optional[str], typer.Option("--now", help="Reference instant (ISO 8601). Defaults to now")] = None,
    config_file: ConfigOption = None,
    data_file: DataOption = None,
):
    """
    List bookings that have already started.
    """
    ctx = _load_context(config_file, data_file)
    tz = ctx.config.timezone

    try:
        reference = pendulum.parse(now, tz=tz) if now else pendulum.now(tz)
    except Exception as e:
        console.print(f"[bold red]Error:[/bold red] Could not parse --now: {e}")
        raise typer.Exit(1)

    past = ctx.bookings.history(reference)

    if not past:
        console.print("[yellow]No past bookings.[/yellow]")
        return

    console.print()
    console.print(_bookings_table("Booking history", past))
    console.print()


@app.command()
def month(
    month_year: Annotated[Optional[str], typer.Argument(metavar="MM-YYYY", help="Month to list. Defaults to this month")] = None,
    config_file: ConfigOption = None,
    data_file: DataOption = None,
):
    """
    List the bookings of a month and the neighbouring months.
    """
    ctx = _load_context(config_file, data_file)
    tz = ctx.config.timezone

    try:
        anchor = pendulum.from_format(month_year, "MM-YYYY", tz=tz).date() if month_year else pendulum.now(tz).date()
    except ValueError as e:
        console.print(f"[bold red]Error:[/bold red] Month must be given as MM-YYYY: {e}")
        raise typer.Exit(1)

    months = month_range(anchor, ctx.config.history_months)
    console.print(
        "\n[dim]Months:[/dim] "
        + " ".join(
            f"[bold]{m.format('MM-YYYY')}[/bold]" if (m.year, m.month) == (anchor.year, anchor.month) else m.format("MM-YYYY")
            for m in months
        )
    )

    bookings = ctx.bookings.bookings_in_month(anchor)
    if not bookings:
        console.print(f"[yellow]No bookings in {anchor.strftime('%m-%Y')}.[/yellow]\n")
        return

    console.print()
    console.print(_bookings_table(f"Bookings {anchor.strftime('%m-%Y')}", bookings))
    console.print()


@app.command()
def window(
    today: Annotated[Optional[str], typer.Option("--today", help="Override today's date (YYYY-MM-DD)")] = None,
    config_file: ConfigOption = None,
):
    """
    Show the dates in which working times may currently be rostered.
    """
    config_path = config_file or get_default_config_path()
    try:
        config = AppConfig.load_from_yaml(config_path) if config_path.exists() or config_file else AppConfig()
    except (FileNotFoundError, ValueError) as e:
        console.print(f"[bold red]Error:[/bold red] {e}")
        raise typer.Exit(1)

    current = _parse_date_option(today) if today else pendulum.now(config.timezone).date()
    console.print(f"\n[bold cyan]Scheduling window:[/bold cyan] {scheduling_window(current, config.week_start)}\n")


@app.command()
def version():
    """
    Show version information.
    """
    from .. import __version__
    console.print(f"\n[bold cyan]bookingslots[/bold cyan] version [bold]{__version__}[/bold]\n")


if __name__ == "__main__":
    app()

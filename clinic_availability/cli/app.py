"""
Main CLI application using Typer.
"""

import asyncio
import logging
from pathlib import Path
from typing import Optional, Annotated, Tuple

import pendulum
import typer
from rich.console import Console
from rich.logging import RichHandler
from rich.table import Table

from ..adapters.json_store import JsonScheduleStore
from ..config import AppConfig, get_default_config_path
from ..domain.editing import add_day as add_day_to_rules, add_exception
from ..domain.exceptions import ClinicAvailabilityError
from ..domain.models import ExceptionPeriod, format_clock, get_day_name, is_valid_day_of_week
from ..domain.validator import validate_schedule
from ..services.availability_service import AvailabilityService

app = typer.Typer(
    name="clinic-availability",
    help="Resolve and maintain professionals' bookable availability",
    add_completion=False
)

console = Console()

ConfigOption = Annotated[Optional[Path], typer.Option("--config", "-c", help="Path to config file. Defaults to ./config.yaml")]


@app.callback()
def main(
    verbose: Annotated[bool, typer.Option("--verbose", "-v", help="Show debug logging.")] = False,
):
    """
    Availability engine for the clinic console.
    """
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(message)s",
        handlers=[RichHandler(console=console, show_path=False)],
    )


def _load(config_file: Optional[Path]) -> Tuple[AppConfig, JsonScheduleStore, AvailabilityService]:
    config_path = config_file or get_default_config_path()
    config = AppConfig.load_from_yaml(config_path)
    store = JsonScheduleStore(config.data_dir)
    service = AvailabilityService(
        store,
        max_range_days=config.max_range_days,
        default_timezone=config.timezone,
        default_buffer_minutes=config.buffer_minutes,
        locale=config.locale,
    )
    return config, store, service


def _parse_date(value: str, label: str) -> pendulum.Date:
    try:
        return pendulum.from_format(value, "YYYY-MM-DD").date()
    except ValueError as e:
        console.print(f"[red]Could not parse {label} '{value}': {e}[/red]")
        raise typer.Exit(1)


def _determine_date_range(
    *,
    tz: str,
    this_week: bool,
    next_week: bool,
    start_option: Optional[str],
    end_option: Optional[str]
) -> Tuple[pendulum.Date, pendulum.Date]:
    """
    Resolve the requested dates from shortcut flags or explicit dates.
    """
    if this_week and next_week:
        console.print("[red]Error: --this-week and --next-week cannot be combined.[/red]")
        raise typer.Exit(1)

    today = pendulum.now(tz).date()

    if this_week:
        return today, today.end_of("week")

    if next_week:
        next_monday = today.next(pendulum.MONDAY)
        return next_monday, next_monday.add(days=6)

    start_date = _parse_date(start_option, "start date") if start_option else today
    end_date = _parse_date(end_option, "end date") if end_option else start_date.add(days=7)

    return start_date, end_date


@app.command()
def windows(
    professional: Annotated[str, typer.Argument(help="Professional id")],
    config_file: ConfigOption = None,
    start: Annotated[Optional[str], typer.Option("--start", help="Start date (YYYY-MM-DD)")] = None,
    end: Annotated[Optional[str], typer.Option("--end", help="End date (YYYY-MM-DD), inclusive")] = None,
    this_week: Annotated[bool, typer.Option("--this-week", help="From today to the end of this week.")] = False,
    next_week: Annotated[bool, typer.Option("--next-week", help="Next week, Monday to Sunday.")] = False,
):
    """
    List bookable windows of a professional.

    Examples:

        clinic-availability windows dr-garcia --next-week

        clinic-availability windows dr-garcia --start 2024-11-25 --end 2024-11-29
    """
    try:
        config, _, service = _load(config_file)

        start_date, end_date = _determine_date_range(
            tz=config.timezone,
            this_week=this_week,
            next_week=next_week,
            start_option=start,
            end_option=end
        )

        found = asyncio.run(service.find_windows(professional, start_date, end_date))

        console.print()
        if not found:
            console.print(
                f"[yellow]No bookable windows for {professional} between "
                f"{start_date.isoformat()} and {end_date.isoformat()}.[/yellow]"
            )
        else:
            console.print(f"[bold green]{len(found)} bookable window(s):[/bold green]\n")
            for window in found:
                console.print(f"  {window.format_display(config.locale)}")
        console.print()

    except (ClinicAvailabilityError, FileNotFoundError, ValueError) as e:
        console.print(f"[bold red]Error:[/bold red] {e}")
        raise typer.Exit(1)


@app.command()
def schedule(
    professional: Annotated[str, typer.Argument(help="Professional id")],
    config_file: ConfigOption = None,
):
    """
    Show a professional's weekly schedule and vacations.
    """
    try:
        config, _, service = _load(config_file)
        editable = asyncio.run(service.load_editable(professional))

        table = Table(
            title=f"Weekly availability - {professional}",
            show_header=True,
            header_style="bold cyan"
        )
        table.add_column("Day", style="bold yellow")
        table.add_column("Time slots")

        for rule in editable.rules:
            slots = ", ".join(str(interval) for interval in rule.intervals) or "[dim]unavailable[/dim]"
            table.add_row(get_day_name(rule.day_of_week, config.locale), slots)

        console.print()
        console.print(table)
        console.print(
            f"Time zone: {editable.config.timezone} | "
            f"Buffer: {editable.config.buffer_minutes} min"
        )

        if editable.exceptions:
            vacations = Table(title="Vacations", show_header=True, header_style="bold cyan")
            vacations.add_column("From")
            vacations.add_column("To")
            vacations.add_column("Reason", style="dim")
            vacations.add_column("Yearly")
            for period in editable.exceptions:
                vacations.add_row(
                    period.start_date.isoformat(),
                    period.end_date.isoformat(),
                    period.reason,
                    "yes" if period.is_recurring_annually else "no",
                )
            console.print(vacations)
        console.print()

    except (ClinicAvailabilityError, FileNotFoundError, ValueError) as e:
        console.print(f"[bold red]Error:[/bold red] {e}")
        raise typer.Exit(1)


@app.command()
def validate(
    professional: Annotated[str, typer.Argument(help="Professional id")],
    config_file: ConfigOption = None,
):
    """
    Check a stored schedule and report every problem found.
    """
    try:
        config, _, service = _load(config_file)
        editable = asyncio.run(service.load_editable(professional))
    except (ClinicAvailabilityError, FileNotFoundError, ValueError) as e:
        console.print(f"[bold red]Error:[/bold red] {e}")
        raise typer.Exit(1)

    errors = validate_schedule(editable.rules, editable.exceptions, locale=config.locale)

    if not errors:
        console.print(f"\n[green]✓ Schedule of {professional} is valid.[/green]\n")
        return

    table = Table(title=f"{len(errors)} problem(s)", show_header=True, header_style="bold red")
    table.add_column("Field")
    table.add_column("Position")
    table.add_column("Slots")
    table.add_column("Message")
    for error in errors:
        table.add_row(
            error.field,
            str(error.index),
            ", ".join(str(i) for i in error.slot_indices),
            error.message,
        )
    console.print()
    console.print(table)
    console.print()
    raise typer.Exit(1)


@app.command()
def add_day(
    professional: Annotated[str, typer.Argument(help="Professional id")],
    day: Annotated[int, typer.Argument(help="Day of week (0=Sunday .. 6=Saturday)")],
    editor: Annotated[str, typer.Option("--editor", "-e", help="Id of the user making the change")],
    config_file: ConfigOption = None,
):
    """
    Add a working day with the configured default time slot.
    """
    if not is_valid_day_of_week(day):
        console.print(f"[red]Error: day must be between 0 and 6, got {day}.[/red]")
        raise typer.Exit(1)

    try:
        config, _, service = _load(config_file)
        editable = asyncio.run(service.load_editable_or_new(professional))

        rules = add_day_to_rules(editable.rules, day, config.default_slot.to_interval())
        errors = asyncio.run(
            service.save_editable(professional, rules, editable.exceptions, editor_id=editor)
        )
    except (ClinicAvailabilityError, FileNotFoundError, ValueError) as e:
        console.print(f"[bold red]Error:[/bold red] {e}")
        raise typer.Exit(1)

    if errors:
        for error in errors:
            console.print(f"[red]{error}[/red]")
        raise typer.Exit(1)

    console.print(
        f"\n[green]✓ {get_day_name(day, config.locale)} "
        f"{format_clock(config.default_slot.get_start_time())}-"
        f"{format_clock(config.default_slot.get_end_time())} saved.[/green]\n"
    )


@app.command()
def add_vacation(
    professional: Annotated[str, typer.Argument(help="Professional id")],
    start: Annotated[str, typer.Argument(help="First day (YYYY-MM-DD)")],
    end: Annotated[str, typer.Argument(help="Last day (YYYY-MM-DD), inclusive")],
    editor: Annotated[str, typer.Option("--editor", "-e", help="Id of the user making the change")],
    reason: Annotated[str, typer.Option("--reason", help="Reason shown in the schedule")] = "",
    recurring: Annotated[bool, typer.Option("--recurring", help="Repeat every year")] = False,
    config_file: ConfigOption = None,
):
    """
    Add a vacation or absence period.
    """
    period = ExceptionPeriod(
        start_date=_parse_date(start, "start date"),
        end_date=_parse_date(end, "end date"),
        reason=reason.strip(),
        is_recurring_annually=recurring,
        recurrence_pattern="annual" if recurring else None,
    )

    try:
        _, _, service = _load(config_file)
        editable = asyncio.run(service.load_editable_or_new(professional))
        errors = asyncio.run(
            service.save_editable(
                professional,
                editable.rules,
                add_exception(editable.exceptions, period),
                editor_id=editor,
            )
        )
    except (ClinicAvailabilityError, FileNotFoundError, ValueError) as e:
        console.print(f"[bold red]Error:[/bold red] {e}")
        raise typer.Exit(1)

    if errors:
        for error in errors:
            console.print(f"[red]{error}[/red]")
        raise typer.Exit(1)

    console.print(f"\n[green]✓ Vacation {start} - {end} saved.[/green]\n")


@app.command()
def professionals(
    config_file: ConfigOption = None,
):
    """
    List professionals with a stored schedule.
    """
    try:
        _, store, _ = _load(config_file)
    except (FileNotFoundError, ValueError) as e:
        console.print(f"[bold red]Error:[/bold red] {e}")
        raise typer.Exit(1)

    ids = store.list_professionals()
    if not ids:
        console.print("[yellow]No schedules stored yet.[/yellow]")
        return

    table = Table(title="Professionals", show_header=True, header_style="bold cyan")
    table.add_column("Id", style="bold yellow")
    for professional_id in ids:
        table.add_row(professional_id)

    console.print()
    console.print(table)
    console.print()


@app.command()
def version():
    """
    Show version information.
    """
    from .. import __version__
    console.print(f"\n[bold cyan]clinic-availability[/bold cyan] version [bold]{__version__}[/bold]\n")


if __name__ == "__main__":
    app()

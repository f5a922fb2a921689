"""
Main CLI application using Typer.

Commands are grouped the way the booking backend exposes its resources:
customers, services, timeslots and bookings. Domain errors are reported with
the status code the error carries (404, 409, 400, 500) and exit code 1.
"""

import logging
from dataclasses import dataclass
from pathlib import Path
from typing import List, NoReturn, Optional, Annotated

import pendulum
import typer
from pendulum import DateTime
from rich.console import Console
from rich.logging import RichHandler
from rich.markup import escape
from rich.table import Table

from ..adapters.sql_storage import SqlStorage
from ..config import AppConfig
from ..domain.conflict_checker import OverlapScope
from ..domain.exceptions import CarWashError, NotFoundError
from ..domain.models import Booking, Customer, Service, Timeslot
from ..domain.result import Err, Result
from ..services.factory import Services, build_services

logger = logging.getLogger(__name__)

app = typer.Typer(
    name="carwash",
    help="Manage car-wash customers, services, timeslots and bookings",
    add_completion=False,
    no_args_is_help=True,
)
customers_app = typer.Typer(help="Manage customers", no_args_is_help=True)
services_app = typer.Typer(help="Manage the service catalog", no_args_is_help=True)
timeslots_app = typer.Typer(help="Manage advertised timeslots", no_args_is_help=True)
bookings_app = typer.Typer(help="Create, move and cancel bookings", no_args_is_help=True)

app.add_typer(customers_app, name="customers")
app.add_typer(services_app, name="services")
app.add_typer(timeslots_app, name="timeslots")
app.add_typer(bookings_app, name="bookings")

console = Console()
err_console = Console(stderr=True)

PositiveId = Annotated[int, typer.Argument(min=1, help="Positive numeric id")]


@dataclass
class CliState:
    config: AppConfig
    services: Services


def _configure_logging(level: str) -> None:
    logging.basicConfig(
        level=level,
        format="%(message)s",
        datefmt="[%X]",
        handlers=[RichHandler(console=err_console, show_path=False)],
        force=True,
    )


def _state(ctx: typer.Context) -> CliState:
    return ctx.obj


def _fail(error: CarWashError) -> NoReturn:
    console.print(f"[bold red]Error [{error.status_code}]:[/bold red] {escape(error.message)}")
    raise typer.Exit(1)


def _unwrap(result: Result):
    if isinstance(result, Err):
        _fail(result.error)
    return result.value


def _parse_datetime(value: str, tz: str, param: str) -> DateTime:
    try:
        parsed = pendulum.parse(value, tz=tz)
    except Exception as exc:
        raise typer.BadParameter(f"Could not parse '{value}': {exc}", param_hint=param) from exc
    if not isinstance(parsed, DateTime):
        raise typer.BadParameter(f"'{value}' is not a date and time", param_hint=param)
    return parsed


def _fmt(value: DateTime, tz: str) -> str:
    return value.in_timezone(tz).format("YYYY-MM-DD HH:mm")


@app.callback()
def main(
    ctx: typer.Context,
    config_file: Annotated[Optional[Path], typer.Option("--config", "-c", help="Path to config file. Defaults to ./config.yaml")] = None,
):
    """
    Car-wash booking backend.
    """
    if ctx.resilient_parsing or ctx.invoked_subcommand == "version":
        return

    try:
        config = AppConfig.load_or_default(config_file)
    except (FileNotFoundError, ValueError) as e:
        console.print(f"[bold red]Error:[/bold red] {escape(str(e))}")
        raise typer.Exit(1)

    _configure_logging(config.log_level)

    try:
        storage = SqlStorage(config.database_url)
        storage.create_schema()
    except CarWashError as e:
        _fail(e)

    logger.debug("Using %s with %s overlap scope", config.database_url, config.overlap_scope.value)
    ctx.obj = CliState(config=config, services=build_services(storage, config.overlap_scope))


# --------------------------------------------------------------------------- customers


def _customer_table(customers: List[Customer], title: str = "Customers") -> Table:
    table = Table(title=title, show_header=True, header_style="bold cyan")
    table.add_column("ID", style="bold yellow")
    table.add_column("Name")
    table.add_column("Phone", style="dim")
    for customer in customers:
        table.add_row(str(customer.id), customer.name, customer.phone_number)
    return table


@customers_app.command("create")
def create_customer(
    ctx: typer.Context,
    name: Annotated[str, typer.Argument(help="Customer name")],
    phone_number: Annotated[str, typer.Argument(help="Phone number")],
):
    """Register a new customer."""
    try:
        customer = _state(ctx).services.customers.create_customer(name, phone_number)
    except CarWashError as e:
        _fail(e)
    console.print(f"[green]✓ Customer {customer.id} created[/green]")


@customers_app.command("get")
def get_customer(ctx: typer.Context, customer_id: PositiveId):
    """Show one customer."""
    try:
        customer = _state(ctx).services.customers.get_customer(customer_id)
    except CarWashError as e:
        _fail(e)
    console.print(_customer_table([customer], title=f"Customer {customer_id}"))


@customers_app.command("find")
def find_customer(ctx: typer.Context, phone_number: str):
    """Find a customer by phone number."""
    try:
        customer = _state(ctx).services.customers.get_customer_by_phone(phone_number)
    except CarWashError as e:
        _fail(e)
    console.print(_customer_table([customer], title=f"Customer {customer.id}"))


@customers_app.command("list")
def list_customers(ctx: typer.Context):
    """List all customers."""
    try:
        customers = _state(ctx).services.bookings.list_customers()
    except CarWashError as e:
        _fail(e)
    if not customers:
        console.print("[yellow]No customers registered.[/yellow]")
        return
    console.print(_customer_table(customers))


@customers_app.command("update")
def update_customer(
    ctx: typer.Context,
    customer_id: PositiveId,
    name: str,
    phone_number: str,
):
    """Change a customer's name and phone number."""
    try:
        _state(ctx).services.customers.update_customer(customer_id, name, phone_number)
    except CarWashError as e:
        _fail(e)
    console.print(f"[green]✓ Customer {customer_id} updated[/green]")


@customers_app.command("delete")
def delete_customer(ctx: typer.Context, customer_id: PositiveId):
    """Delete a customer."""
    try:
        _state(ctx).services.customers.delete_customer(customer_id)
    except CarWashError as e:
        _fail(e)
    console.print(f"[green]✓ Customer {customer_id} deleted[/green]")


@customers_app.command("remaining-time")
def remaining_time(ctx: typer.Context, phone_number: str):
    """Minutes until the next booking of the customer with this phone number."""
    try:
        minutes = _state(ctx).services.customers.minutes_until_next_booking_by_phone(phone_number)
    except CarWashError as e:
        _fail(e)
    if minutes is None:
        console.print(f"[yellow]No upcoming booking for {escape(phone_number)}.[/yellow]")
        raise typer.Exit(1)
    console.print(f"{minutes} minutes until the next booking")


# --------------------------------------------------------------------------- services


def _service_table(services: List[Service], title: str = "Services") -> Table:
    table = Table(title=title, show_header=True, header_style="bold cyan")
    table.add_column("ID", style="bold yellow")
    table.add_column("Name")
    table.add_column("Price", justify="right")
    for service in services:
        table.add_row(str(service.id), service.name, f"{service.price:.2f}")
    return table


@services_app.command("add")
def add_service(ctx: typer.Context, name: str, price: float):
    """Add a service to the catalog."""
    try:
        service = _state(ctx).services.catalog.add_service(name, price)
    except CarWashError as e:
        _fail(e)
    console.print(f"[green]✓ Service {service.id} added[/green]")


@services_app.command("get")
def get_service(ctx: typer.Context, service_id: PositiveId):
    """Show one service."""
    try:
        service = _state(ctx).services.catalog.get_service(service_id)
    except CarWashError as e:
        _fail(e)
    console.print(_service_table([service], title=f"Service {service_id}"))


@services_app.command("list")
def list_services(ctx: typer.Context):
    """List the service catalog."""
    try:
        services = _state(ctx).services.bookings.list_services()
    except CarWashError as e:
        _fail(e)
    if not services:
        console.print("[yellow]No services in the catalog.[/yellow]")
        return
    console.print(_service_table(services))


@services_app.command("update")
def update_service(ctx: typer.Context, service_id: PositiveId, name: str, price: float):
    """Rename or reprice a service."""
    try:
        _state(ctx).services.catalog.update_service(service_id, name, price)
    except CarWashError as e:
        _fail(e)
    console.print(f"[green]✓ Service {service_id} updated[/green]")


@services_app.command("delete")
def delete_service(ctx: typer.Context, service_id: PositiveId):
    """Remove a service from the catalog."""
    try:
        _state(ctx).services.catalog.delete_service(service_id)
    except CarWashError as e:
        _fail(e)
    console.print(f"[green]✓ Service {service_id} deleted[/green]")


# --------------------------------------------------------------------------- timeslots


def _timeslot_table(timeslots: List[Timeslot], tz: str, title: str = "Timeslots") -> Table:
    table = Table(title=title, show_header=True, header_style="bold cyan")
    table.add_column("ID", style="bold yellow")
    table.add_column("Service")
    table.add_column("Start")
    table.add_column("End")
    table.add_column("Open")
    for slot in timeslots:
        table.add_row(
            str(slot.id),
            str(slot.service_id),
            _fmt(slot.start_time, tz),
            _fmt(slot.end_time, tz),
            "yes" if slot.available else "no",
        )
    return table


@timeslots_app.command("add")
def add_timeslot(
    ctx: typer.Context,
    service_id: PositiveId,
    start: Annotated[str, typer.Argument(help="Start, e.g. '2024-11-25 10:00'")],
    end: Annotated[str, typer.Argument(help="End, e.g. '2024-11-25 11:00'")],
    available: Annotated[bool, typer.Option("--available/--unavailable", help="Whether the slot is open")] = True,
):
    """Advertise a timeslot for a service."""
    state = _state(ctx)
    tz = state.config.timezone
    try:
        slot = state.services.timeslots.add_timeslot(
            service_id,
            _parse_datetime(start, tz, "START"),
            _parse_datetime(end, tz, "END"),
            available=available,
        )
    except CarWashError as e:
        _fail(e)
    console.print(f"[green]✓ Timeslot {slot.id} added[/green]")


@timeslots_app.command("get")
def get_timeslot(ctx: typer.Context, timeslot_id: PositiveId):
    """Show one timeslot."""
    state = _state(ctx)
    try:
        slot = state.services.timeslots.get_timeslot(timeslot_id)
    except CarWashError as e:
        _fail(e)
    console.print(_timeslot_table([slot], state.config.timezone, title=f"Timeslot {timeslot_id}"))


@timeslots_app.command("list")
def list_timeslots(ctx: typer.Context):
    """List all timeslots."""
    state = _state(ctx)
    try:
        slots = state.services.timeslots.list_timeslots()
    except CarWashError as e:
        _fail(e)
    if not slots:
        console.print("[yellow]No timeslots defined.[/yellow]")
        return
    console.print(_timeslot_table(slots, state.config.timezone))


@timeslots_app.command("update")
def update_timeslot(
    ctx: typer.Context,
    timeslot_id: PositiveId,
    service_id: PositiveId,
    start: str,
    end: str,
    available: Annotated[bool, typer.Option("--available/--unavailable", help="Whether the slot is open")] = True,
):
    """Replace a timeslot's service, interval and availability."""
    state = _state(ctx)
    tz = state.config.timezone
    try:
        state.services.timeslots.update_timeslot(
            timeslot_id,
            service_id,
            _parse_datetime(start, tz, "START"),
            _parse_datetime(end, tz, "END"),
            available,
        )
    except CarWashError as e:
        _fail(e)
    console.print(f"[green]✓ Timeslot {timeslot_id} updated[/green]")


@timeslots_app.command("delete")
def delete_timeslot(ctx: typer.Context, timeslot_id: PositiveId):
    """Delete a timeslot."""
    try:
        _state(ctx).services.timeslots.delete_timeslot(timeslot_id)
    except CarWashError as e:
        _fail(e)
    console.print(f"[green]✓ Timeslot {timeslot_id} deleted[/green]")


# --------------------------------------------------------------------------- bookings


def _booking_table(bookings: List[Booking], tz: str, title: str = "Bookings") -> Table:
    table = Table(title=title, show_header=True, header_style="bold cyan")
    table.add_column("ID", style="bold yellow")
    table.add_column("Customer")
    table.add_column("Service")
    table.add_column("Start")
    table.add_column("End")
    for booking in bookings:
        table.add_row(
            str(booking.id),
            str(booking.customer_id),
            str(booking.service_id),
            _fmt(booking.start_time, tz),
            _fmt(booking.end_time, tz),
        )
    return table


@bookings_app.command("create")
def create_booking(
    ctx: typer.Context,
    customer_id: PositiveId,
    service_id: PositiveId,
    start: Annotated[str, typer.Argument(help="Start, e.g. '2024-11-25 10:00'")],
    end: Annotated[str, typer.Argument(help="End, e.g. '2024-11-25 11:00'")],
):
    """Book a service for a customer."""
    state = _state(ctx)
    tz = state.config.timezone
    booking = _unwrap(
        state.services.bookings.create_booking(
            customer_id,
            service_id,
            _parse_datetime(start, tz, "START"),
            _parse_datetime(end, tz, "END"),
        )
    )
    console.print(f"[green]✓ Booking {booking.id} created[/green]")


@bookings_app.command("get")
def get_booking(ctx: typer.Context, booking_id: PositiveId):
    """Show one booking."""
    state = _state(ctx)
    try:
        booking = state.services.bookings.get_booking(booking_id)
    except CarWashError as e:
        _fail(e)
    if booking is None:
        _fail(NotFoundError("booking", booking_id))
    console.print(_booking_table([booking], state.config.timezone, title=f"Booking {booking_id}"))


@bookings_app.command("update")
def update_booking(ctx: typer.Context, booking_id: PositiveId, start: str, end: str):
    """Move a booking to a new interval."""
    state = _state(ctx)
    tz = state.config.timezone
    _unwrap(
        state.services.bookings.update_booking(
            booking_id,
            _parse_datetime(start, tz, "START"),
            _parse_datetime(end, tz, "END"),
        )
    )
    console.print(f"[green]✓ Booking {booking_id} updated[/green]")


@bookings_app.command("delete")
def delete_booking(ctx: typer.Context, booking_id: PositiveId):
    """Cancel a booking. Unknown ids are ignored."""
    try:
        _state(ctx).services.bookings.delete_booking(booking_id)
    except CarWashError as e:
        _fail(e)
    console.print(f"[green]✓ Booking {booking_id} deleted[/green]")


@bookings_app.command("list")
def list_bookings(ctx: typer.Context):
    """List all bookings."""
    state = _state(ctx)
    try:
        bookings = state.services.bookings.list_bookings()
    except CarWashError as e:
        _fail(e)
    if not bookings:
        console.print("[yellow]No bookings yet.[/yellow]")
        return
    console.print(_booking_table(bookings, state.config.timezone))


@bookings_app.command("availability")
def availability(ctx: typer.Context, service_id: PositiveId):
    """Show the open timeslots advertised for a service."""
    state = _state(ctx)
    slots = _unwrap(state.services.bookings.get_available_timeslots(service_id))
    if not slots:
        console.print("[yellow]No open timeslots for this service.[/yellow]")
        return
    console.print(_timeslot_table(slots, state.config.timezone, title=f"Open timeslots for service {service_id}"))


@bookings_app.command("check")
def check(
    ctx: typer.Context,
    start: str,
    end: str,
    service_id: Annotated[Optional[int], typer.Option("--service", "-s", min=1, help="Service to check for. Required when overlap_scope is 'service', ignored otherwise")] = None,
):
    """Check whether an interval is free and list what blocks it."""
    state = _state(ctx)
    tz = state.config.timezone
    start_time = _parse_datetime(start, tz, "START")
    end_time = _parse_datetime(end, tz, "END")
    if end_time <= start_time:
        raise typer.BadParameter("END must be after START", param_hint="END")
    if state.config.overlap_scope is OverlapScope.SERVICE and service_id is None:
        raise typer.BadParameter("required when overlap_scope is 'service'", param_hint="--service")

    try:
        conflicts = state.services.bookings.find_conflicts(start_time, end_time, service_id=service_id)
    except CarWashError as e:
        _fail(e)
    if not conflicts:
        console.print("[green]✓ Time slot is available[/green]")
        return
    console.print(_booking_table(conflicts, tz, title="Conflicting bookings"))
    raise typer.Exit(1)


@app.command()
def version():
    """
    Show version information.
    """
    from .. import __version__
    console.print(f"\n[bold cyan]carwash[/bold cyan] version [bold]{__version__}[/bold]\n")


if __name__ == "__main__":
    app()

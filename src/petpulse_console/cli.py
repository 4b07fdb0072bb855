"""
Command-line front end of the console.

Usage examples::

    petpulse-console login admin --email admin@petpulse.lk
    petpulse-console inventory --stock-status low --pdf inventory.pdf
    petpulse-console appointments --view next7
    petpulse-console price grooming "Full Grooming"
"""

import argparse
import asyncio
import getpass
import json
import logging
import sys
from pathlib import Path
from typing import Optional, Sequence

from .api.client import PetPulseClient
from .dashboards import CaretakerDashboard, DoctorDashboard, InventoryDashboard
from .exceptions import (
    AuthenticationException,
    PetPulseException,
    create_error_response,
    log_exception_context,
)
from .models.appointment import AppointmentView, ServiceType
from .models.inventory import ExpiryStatus, StockStatus
from .notifications import Notifier
from .pricing import UNRESOLVED, resolve_price
from .session import Role, SessionStore
from .utils.config import ConfigError, ConsoleConfig, LoggingConfigurator
from .utils.datetime_utils import format_display_date

logger = logging.getLogger(__name__)


def _print_notifications(notifier: Notifier) -> None:
    for notification in notifier.drain():
        print(f"[{notification.level.value}] {notification.message}", file=sys.stderr)


def _make_client(config: ConsoleConfig) -> PetPulseClient:
    return PetPulseClient(config, SessionStore(config.session_file))


async def cmd_login(config: ConsoleConfig, args: argparse.Namespace) -> int:
    password = args.password or getpass.getpass("Password: ")
    async with _make_client(config) as client:
        session = await client.login(Role(args.role), args.email, password)
    print(f"Logged in as {session.role.value}")
    return 0


def cmd_logout(config: ConsoleConfig, args: argparse.Namespace) -> int:
    SessionStore(config.session_file).clear()
    print("Logged out")
    return 0


def cmd_whoami(config: ConsoleConfig, args: argparse.Namespace) -> int:
    session = SessionStore(config.session_file).load()
    if not session.is_authenticated:
        print("Not logged in")
        return 1
    print(session.role.value)
    return 0


async def cmd_inventory(config: ConsoleConfig, args: argparse.Namespace) -> int:
    notifier = Notifier()
    async with _make_client(config) as client:
        dashboard = InventoryDashboard(client, notifier)
        dashboard.filter.search = args.search
        dashboard.filter.category = args.category
        dashboard.filter.stock_status = args.stock_status
        dashboard.filter.expiry_status = args.expiry_status
        await dashboard.load_products()
    _print_notifications(notifier)

    products = dashboard.low_stock if args.low_stock else dashboard.visible_products
    if args.json:
        print(
            json.dumps(
                {
                    "stats": dashboard.stats.to_dict(),
                    "products": [p.model_dump(mode="json", by_alias=True) for p in products],
                },
                indent=2,
            )
        )
    else:
        for product in products:
            print(
                f"{product.name:<30} {product.category or '-':<15} "
                f"{product.quantity:>6}  {product.stock_label:<12} "
                f"{format_display_date(product.expiry_date)}"
            )
        stats = dashboard.stats
        print(
            f"\nTotal: {stats.total}  Low stock: {stats.low_stock}  "
            f"Out of stock: {stats.out_of_stock}  Near expiry: {stats.near_expiry}  "
            f"Value: {stats.total_value:.2f}"
        )

    if args.pdf:
        written = dashboard.report().save(args.pdf)
        print(f"Wrote {args.pdf} ({written} bytes)")
    return 0


async def cmd_low_stock(config: ConsoleConfig, args: argparse.Namespace) -> int:
    args.low_stock = True
    for name in ("search", "category", "stock_status", "expiry_status", "pdf"):
        setattr(args, name, None)
    return await cmd_inventory(config, args)


async def cmd_appointments(config: ConsoleConfig, args: argparse.Namespace) -> int:
    notifier = Notifier()
    async with _make_client(config) as client:
        role = client.session.role
        if role is Role.DOCTOR:
            dashboard = DoctorDashboard(client, notifier)
            dashboard.view = AppointmentView(args.view)
            dashboard.pet_type = args.pet_type
            dashboard.query = args.search or ""
        elif role is Role.CARETAKER:
            dashboard = CaretakerDashboard(client, notifier)
            dashboard.filter.service = args.service
            dashboard.filter.status = args.status
            dashboard.filter.payment_status = args.payment
            dashboard.filter.month = args.month
            dashboard.filter.pet_type = args.pet_type
            dashboard.filter.search = args.search
        else:
            print("Log in as a doctor or caretaker to list appointments", file=sys.stderr)
            return 1
        await dashboard.load()
    _print_notifications(notifier)

    for appointment in dashboard.visible_appointments:
        date_label = appointment.date_iso.isoformat() if appointment.date_iso else "-"
        print(
            f"{date_label:<11} {appointment.time_label:<20} "
            f"{appointment.display_title:<25} {appointment.owner_name or '-':<20} "
            f"{appointment.status:<9} {appointment.payment_status}"
        )
    for line in dashboard.summary().lines():
        print(line)

    if args.pdf:
        written = dashboard.report().save(args.pdf)
        print(f"Wrote {args.pdf} ({written} bytes)")
    return 0


def cmd_price(config: ConsoleConfig, args: argparse.Namespace) -> int:
    price = resolve_price({"service": args.service, "packageName": args.package})
    if price is UNRESOLVED:
        print(f"No price for {args.service} package '{args.package}'", file=sys.stderr)
        return 1
    print(f"{price:.2f}")
    return 0


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="petpulse-console", description="PetPulse administrative console"
    )
    parser.add_argument(
        "--verbose", "-v", action="store_true", help="Enable debug logging"
    )

    subparsers = parser.add_subparsers(dest="command", help="Available commands")

    # Login command
    login_parser = subparsers.add_parser("login", help="Log in as a console role")
    login_parser.add_argument(
        "role",
        choices=[r.value for r in Role if r is not Role.NONE],
        help="Role to log in as",
    )
    login_parser.add_argument("--email", "-e", required=True, help="Account email")
    login_parser.add_argument(
        "--password", "-p", help="Account password (prompted when omitted)"
    )

    subparsers.add_parser("logout", help="Forget the stored session")
    subparsers.add_parser("whoami", help="Show the signed-in role")

    # Inventory command
    inventory_parser = subparsers.add_parser("inventory", help="List products")
    inventory_parser.add_argument("--search", "-s", help="Search name or category")
    inventory_parser.add_argument("--category", "-c", help="Exact category")
    inventory_parser.add_argument(
        "--stock-status", choices=[s.value for s in StockStatus]
    )
    inventory_parser.add_argument(
        "--expiry-status", choices=[s.value for s in ExpiryStatus]
    )
    inventory_parser.add_argument(
        "--json", action="store_true", help="Print products and stats as JSON"
    )
    inventory_parser.add_argument("--pdf", type=Path, help="Export the list as PDF")
    inventory_parser.set_defaults(low_stock=False)

    low_stock_parser = subparsers.add_parser(
        "low-stock", help="List products at or below their threshold"
    )
    low_stock_parser.add_argument("--json", action="store_true")

    # Appointments command
    appointments_parser = subparsers.add_parser(
        "appointments", help="List appointments of the signed-in doctor or caretaker"
    )
    appointments_parser.add_argument(
        "--view",
        choices=[v.value for v in AppointmentView],
        default=AppointmentView.ALL.value,
        help="Doctor view",
    )
    appointments_parser.add_argument(
        "--service",
        choices=[ServiceType.GROOMING.value, ServiceType.DAYCARE.value],
        help="Caretaker service",
    )
    appointments_parser.add_argument("--status", help="Caretaker status filter")
    appointments_parser.add_argument(
        "--payment", choices=["paid", "unpaid"], help="Caretaker payment filter"
    )
    appointments_parser.add_argument("--month", help="Caretaker month, YYYY-MM")
    appointments_parser.add_argument("--pet-type", help="Pet type")
    appointments_parser.add_argument("--search", "-s", help="Free-text search")
    appointments_parser.add_argument("--pdf", type=Path, help="Export as PDF")

    # Price command
    price_parser = subparsers.add_parser("price", help="Look up a package price")
    price_parser.add_argument("service", help="vet, grooming or daycare")
    price_parser.add_argument("package", help="Package name or id")

    return parser


_ASYNC_COMMANDS = {
    "login": cmd_login,
    "inventory": cmd_inventory,
    "low-stock": cmd_low_stock,
    "appointments": cmd_appointments,
}

_SYNC_COMMANDS = {
    "logout": cmd_logout,
    "whoami": cmd_whoami,
    "price": cmd_price,
}


def main(argv: Optional[Sequence[str]] = None) -> int:
    """Main CLI function."""
    parser = build_parser()
    args = parser.parse_args(argv)

    if not args.command:
        parser.print_help()
        return 0

    try:
        config = ConsoleConfig.from_environment()
    except ConfigError as e:
        print(f"Configuration error: {e.message}", file=sys.stderr)
        return 2

    LoggingConfigurator.configure_basic_logging(
        "DEBUG" if args.verbose else config.log_level
    )

    try:
        if args.command in _SYNC_COMMANDS:
            return _SYNC_COMMANDS[args.command](config, args)
        return asyncio.run(_ASYNC_COMMANDS[args.command](config, args))
    except AuthenticationException as e:
        print(f"{e.message}. Please log in again.", file=sys.stderr)
        return 1
    except PetPulseException as e:
        log_exception_context(e, {"command": args.command}, logger, logging.DEBUG)
        if getattr(args, "json", False):
            print(json.dumps(create_error_response(e), default=str))
        else:
            print(f"Error: {e.message}", file=sys.stderr)
        return 1


if __name__ == "__main__":
    sys.exit(main())

"""CLI entrypoint for the dealer inventory and rental shell."""

from __future__ import annotations

import argparse
from collections.abc import Callable
from dataclasses import dataclass

from .config import Settings, load_settings
from .errors import ConflictError, InvalidFormatError, NotFoundError, StorageError
from .logger import configure_logging, get_logger
from .models import Car, CarDealer
from .service import DealerService
from .session import SessionManager
from .store import DealersStore, SessionStore
from .validation import is_valid_plate, is_valid_year

InputFn = Callable[[str], str]
PrintFn = Callable[[str], None]
MENU_QUIT_COMMANDS = {"q"}
FLOW_EXIT_COMMANDS = {":quit", ":exit", ":q"}
USER_ERRORS = (InvalidFormatError, NotFoundError, ConflictError)

logger = get_logger(__name__)


@dataclass(frozen=True)
class AppContext:
    """Collaborators shared by every menu flow."""

    settings: Settings
    dealers: DealerService
    sessions: SessionManager


def _context(settings: Settings) -> AppContext:
    """Wire the service and session manager to the configured data files."""
    return AppContext(
        settings=settings,
        dealers=DealerService(DealersStore(settings.dealers_path)),
        sessions=SessionManager(SessionStore(settings.session_path)),
    )


def run(argv: list[str] | None = None) -> int:
    """Run the CLI application."""
    parser = argparse.ArgumentParser(prog="carlot", description="Dealer vehicle inventory and rentals")
    parser.add_argument("command", nargs="?", default="play", choices=["play"])
    parser.add_argument("--data-dir", default=None, help="Directory holding Dealers.json and Session.json")
    args = parser.parse_args(argv)
    settings = load_settings(data_dir=args.data_dir)
    configure_logging(settings)
    return play_shell(settings)


def play_shell(settings: Settings | None = None, input_fn: InputFn = input, print_fn: PrintFn = print) -> int:
    """Run persistent menu-driven shell."""
    context = _context(settings if settings is not None else load_settings())
    try:
        return _main_menu(context, input_fn, print_fn)
    except StorageError as exc:
        logger.error("Aborting shell: %s", exc)
        print_fn(f"Storage error: {exc}")
        return 1


def _main_menu(context: AppContext, input_fn: InputFn, print_fn: PrintFn) -> int:
    """Pick the dealer, then loop over the main menu until quit."""
    dealer = _resume_dealer(context)
    if dealer is None:
        dealer = _select_dealer(context, input_fn, print_fn)
        if dealer is None:
            return 0
    else:
        print_fn(f"Welcome back, {dealer.name}.")

    while True:
        session = context.sessions.get_active_session()
        presence = "Enabled" if session is not None and session.presence else "Disabled"
        print_fn("\n=== Dealer Manager ===")
        print_fn(f"Logged in as {dealer.name}")
        print_fn("1) Show all vehicles")
        print_fn("2) Manage vehicle")
        print_fn("3) Add a vehicle")
        print_fn("4) Remove a vehicle")
        print_fn(f"5) Session presence ({presence})")
        print_fn("q) Quit")
        choice = input_fn("Choose: ").strip().lower()

        if choice == "1":
            _show_vehicles_flow(context, dealer.id, print_fn)
        elif choice == "2":
            _manage_vehicle_flow(context, dealer.id, input_fn, print_fn)
        elif choice == "3":
            _add_vehicle_flow(context, dealer.id, input_fn, print_fn)
        elif choice == "4":
            _remove_vehicle_flow(context, dealer.id, input_fn, print_fn)
        elif choice == "5":
            _presence_flow(context, input_fn, print_fn)
        elif choice in MENU_QUIT_COMMANDS:
            _end_session(context)
            return 0
        else:
            print_fn("Invalid choice.")


def _resume_dealer(context: AppContext) -> CarDealer | None:
    """Return the pinned dealer when presence is enabled for the stored session."""
    session = context.sessions.get_active_session()
    if session is None or not session.presence or session.dealer_id is None:
        return None
    dealer = context.dealers.find_dealer(session.dealer_id)
    if dealer is None:
        logger.warning("Session points at unknown dealer %s, clearing it", session.dealer_id)
        context.sessions.log_out()
    return dealer


def _select_dealer(context: AppContext, input_fn: InputFn, print_fn: PrintFn) -> CarDealer | None:
    """Load an existing dealer by name or create a new one."""
    while True:
        print_fn("\n=== Dealer ===")
        name = input_fn("Enter car dealer's name (:q to quit): ").strip()
        if name.lower() in FLOW_EXIT_COMMANDS:
            return None
        if not name:
            print_fn("Dealer name cannot be empty. Try again.")
            continue

        dealer = context.dealers.find_dealer_by_name(name)
        if dealer is None:
            if not _confirm(input_fn, f"Dealer '{name}' does not exist. Create it? (y/n): "):
                continue
            dealer = context.dealers.create_dealer(name)
            print_fn(f"Dealer '{dealer.name}' created successfully!")
        else:
            print_fn(f"Dealer '{dealer.name}' loaded successfully!")
        context.sessions.log_in(dealer, presence=False)
        return dealer


def _end_session(context: AppContext) -> None:
    """Log out on exit unless presence keeps the dealer pinned."""
    session = context.sessions.get_active_session()
    if session is None or not session.presence:
        context.sessions.log_out()


def _show_vehicles_flow(context: AppContext, dealer_id: str, print_fn: PrintFn) -> None:
    """Print available and rented vehicles."""
    try:
        listing = context.dealers.list_vehicles(dealer_id)
    except NotFoundError as exc:
        print_fn(f"Error: {exc}")
        return
    if listing.is_empty:
        print_fn("No cars found.")
        return
    _print_vehicle_table("AVAILABLE VEHICLES", listing.available, "No available cars.", print_fn)
    _print_vehicle_table("RENTED VEHICLES", listing.rented, "No rented cars.", print_fn)


def _print_vehicle_table(title: str, cars: list[Car], empty_message: str, print_fn: PrintFn) -> None:
    """Print one partition of the vehicle listing."""
    print_fn(f"\n=== {title} ===")
    if not cars:
        print_fn(empty_message)
        return
    idx_width = max(len("#"), len(str(len(cars))))
    plate_width = max(len("Plate"), max(len(car.plate) for car in cars))
    brand_width = max(len("Brand"), max(len(car.brand) for car in cars))
    model_width = max(len("Model"), max(len(car.model) for car in cars))
    year_width = len("Year")
    header = (
        f"{'#':>{idx_width}} "
        f"{'Plate':<{plate_width}} "
        f"{'Brand':<{brand_width}} "
        f"{'Model':<{model_width}} "
        f"{'Year':<{year_width}} "
        "In use"
    )
    print_fn(header)
    print_fn("-" * len(header))
    for idx, car in enumerate(cars, start=1):
        print_fn(
            f"{idx:>{idx_width}} "
            f"{car.plate:<{plate_width}} "
            f"{car.brand:<{brand_width}} "
            f"{car.model:<{model_width}} "
            f"{car.year:<{year_width}} "
            f"{'Yes' if car.is_in_use else 'No'}"
        )


def _manage_vehicle_flow(context: AppContext, dealer_id: str, input_fn: InputFn, print_fn: PrintFn) -> None:
    """Show one vehicle, then offer to rent or return it."""
    plate = input_fn("Enter vehicle plate (XXX-000): ").strip().upper()
    if not is_valid_plate(plate):
        print_fn("Invalid plate format. Use XXX-000.")
        return
    try:
        car = context.dealers.get_vehicle(dealer_id, plate)
    except NotFoundError as exc:
        print_fn(f"Error: {exc}")
        return

    _print_vehicle_info(car, context.settings.history_display_limit, print_fn)

    if not car.is_in_use:
        if not _confirm(input_fn, "Do you want to rent this car? (y/n): "):
            return
        user_id = input_fn("Enter numeric user ID: ").strip()
        try:
            context.dealers.rent_car(dealer_id, plate, user_id)
        except USER_ERRORS as exc:
            print_fn(f"Error: {exc}")
            return
        print_fn("Car successfully rented!")
    else:
        if not _confirm(input_fn, "Do you want to return this car? (y/n): "):
            return
        try:
            context.dealers.return_car(dealer_id, plate)
        except USER_ERRORS as exc:
            print_fn(f"Error: {exc}")
            return
        print_fn("Car successfully returned!")


def _print_vehicle_info(car: Car, history_limit: int, print_fn: PrintFn) -> None:
    """Print vehicle details and recent renters, newest first."""
    print_fn("\n=== Vehicle Info ===")
    rows = [
        ("Plate:", car.plate),
        ("Brand:", car.brand),
        ("Model:", car.model),
        ("Year:", car.year),
        ("Color:", car.color),
        ("VIN:", car.vin),
        ("In use:", "Yes" if car.is_in_use else "No"),
    ]
    if car.is_in_use and car.current_user:
        rows.append(("Current user:", car.current_user))
    for label, value in rows:
        print_fn(f"{label:<15} {value}")

    recent = car.recent_users(history_limit)
    if not recent:
        print_fn("\nNo rental history available.")
        return
    print_fn(f"\nLast {history_limit} users who rented this car:")
    for user in recent:
        print_fn(f"   - {user}")


def _add_vehicle_flow(context: AppContext, dealer_id: str, input_fn: InputFn, print_fn: PrintFn) -> None:
    """Prompt for vehicle details, review, and register the vehicle."""
    print_fn("\n=== Add Vehicle ===")
    plate = input_fn("Vehicle plate (XXX-000): ").strip().upper()
    if not is_valid_plate(plate):
        print_fn("Plate format must be XXX-000.")
        return
    vin = input_fn("Vehicle VIN: ").strip()
    brand = input_fn("Vehicle brand: ").strip()
    model = input_fn("Vehicle model: ").strip()
    year = input_fn("Vehicle year: ").strip()
    if not is_valid_year(year):
        print_fn("Year must contain 4 digits.")
        return
    color = input_fn("Vehicle color: ").strip()

    print_fn("\nReview the vehicle details:")
    print_fn(f"Plate: {plate}")
    print_fn(f"VIN: {vin}")
    print_fn(f"Brand: {brand}")
    print_fn(f"Model: {model}")
    print_fn(f"Year: {year}")
    print_fn(f"Color: {color}")
    if not _confirm(input_fn, "Add this vehicle? (y/n): "):
        print_fn("Operation canceled.")
        return
    try:
        context.dealers.add_vehicle(plate, vin, brand, model, year, color, dealer_id)
    except USER_ERRORS as exc:
        print_fn(f"Error: {exc}")
        return
    print_fn("Vehicle successfully registered.")


def _remove_vehicle_flow(context: AppContext, dealer_id: str, input_fn: InputFn, print_fn: PrintFn) -> None:
    """Remove a vehicle by plate after confirmation."""
    print_fn("\n=== Remove Vehicle ===")
    plate = input_fn("Vehicle plate to remove (XXX-000): ").strip().upper()
    if not is_valid_plate(plate):
        print_fn("Plate format must be XXX-000.")
        return
    if not _confirm(input_fn, f"Are you sure you want to remove vehicle with plate {plate}? (y/n): "):
        print_fn("Operation canceled.")
        return
    try:
        context.dealers.remove_vehicle(plate, dealer_id)
    except USER_ERRORS as exc:
        print_fn(f"Error: {exc}")
        return
    print_fn("Vehicle successfully removed.")


def _presence_flow(context: AppContext, input_fn: InputFn, print_fn: PrintFn) -> None:
    """Enable or disable automatic login of the current dealer."""
    print_fn("\n=== Session Presence ===")
    print_fn("When presence is enabled, the current dealer is loaded automatically on the next start.")
    while True:
        choice = input_fn("Enter e to enable or d to disable: ").strip().lower()
        if choice in {"e", "d"}:
            break
    context.sessions.set_presence(choice == "e")
    print_fn("Presence successfully changed.")


def _confirm(input_fn: InputFn, prompt: str) -> bool:
    """Ask until the answer is y or n."""
    while True:
        answer = input_fn(prompt).strip().lower()
        if answer in {"y", "n"}:
            return answer == "y"


def main_entry() -> None:
    """Console script entrypoint."""
    raise SystemExit(run())


if __name__ == "__main__":  # pragma: no cover
    main_entry()

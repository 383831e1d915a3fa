"""Application service for dealers, their vehicles and rentals."""

from __future__ import annotations

from typing import NamedTuple

from .errors import ConflictError, InvalidFormatError, NotFoundError
from .logger import get_logger
from .models import Car, CarDealer
from .store import DealersDocument, DealersStore
from .validation import is_numeric, is_valid_plate, is_valid_year

logger = get_logger(__name__)


class VehicleListing(NamedTuple):
    """A dealer's cars split by rental state, each in insertion order."""

    available: list[Car]
    rented: list[Car]

    @property
    def is_empty(self) -> bool:
        """True when the dealer has no cars at all."""
        return not self.available and not self.rented


class DealerService:
    """Coordinates dealer lookups, vehicle mutations and persistence.

    Every call reloads the dealers document; mutating calls save the whole
    document before returning.
    """

    def __init__(self, store: DealersStore) -> None:
        """Initialize service with the dealers document store."""
        self.store = store

    def list_dealers(self) -> list[CarDealer]:
        """Return all dealers in stored order."""
        return self.store.load().dealers

    def find_dealer(self, dealer_id: str) -> CarDealer | None:
        """Get one dealer by id."""
        return _find_dealer(self.store.load(), dealer_id)

    def find_dealer_by_name(self, name: str) -> CarDealer | None:
        """Get one dealer by case-insensitive name."""
        for dealer in self.store.load().dealers:
            if dealer.matches_name(name):
                return dealer
        return None

    def create_dealer(self, name: str) -> CarDealer:
        """Create and persist a dealer with a unique name."""
        name = name.strip()
        if not name:
            raise InvalidFormatError("Dealer name cannot be empty.")
        document = self.store.load()
        if any(dealer.matches_name(name) for dealer in document.dealers):
            raise ConflictError(f"Dealer '{name}' already exists.")
        dealer = CarDealer(name=name)
        document.dealers.append(dealer)
        self.store.save(document)
        logger.info("Created dealer %s (%s)", dealer.name, dealer.id)
        return dealer

    def add_vehicle(
        self,
        plate: str,
        vin: str,
        brand: str,
        model: str,
        year: str,
        color: str,
        dealer_id: str,
    ) -> Car:
        """Register a new car for a dealer.

        All text fields are uppercased before validation. The plate must be
        ``XXX-000`` and the year four digits; plates are unique per dealer.
        """
        plate = plate.strip().upper()
        vin = vin.strip().upper()
        brand = brand.strip().upper()
        model = model.strip().upper()
        year = year.strip().upper()
        color = color.strip().upper()

        _check_plate(plate)
        _check_year(year)

        document = self.store.load()
        dealer = _require_dealer(document, dealer_id)
        if dealer.find_car(plate) is not None:
            raise ConflictError("Car already exists.")

        car = Car(plate=plate, vin=vin, brand=brand, model=model, year=year, color=color)
        dealer.cars.append(car)
        self.store.save(document)
        logger.info("Added car %s to dealer %s", car.plate, dealer.id)
        return car

    def remove_vehicle(self, plate: str, dealer_id: str) -> None:
        """Delete a car from a dealer by plate."""
        plate = plate.strip().upper()
        document = self.store.load()
        dealer = _require_dealer(document, dealer_id)
        car = _require_car(dealer, plate)
        dealer.cars.remove(car)
        self.store.save(document)
        logger.info("Removed car %s from dealer %s", plate, dealer.id)

    def get_vehicle(self, dealer_id: str, plate: str) -> Car:
        """Return one car of a dealer by plate."""
        plate = plate.strip().upper()
        dealer = _require_dealer(self.store.load(), dealer_id)
        return _require_car(dealer, plate)

    def list_vehicles(self, dealer_id: str) -> VehicleListing:
        """Return the dealer's cars partitioned into available and rented."""
        dealer = _require_dealer(self.store.load(), dealer_id)
        available = [car for car in dealer.cars if not car.is_in_use]
        rented = [car for car in dealer.cars if car.is_in_use]
        return VehicleListing(available=available, rented=rented)

    def rent_car(self, dealer_id: str, plate: str, user_id: str) -> Car:
        """Rent an available car to a numeric user id."""
        plate = plate.strip().upper()
        user_id = user_id.strip()
        if not is_numeric(user_id):
            raise InvalidFormatError("User ID must contain only numbers.")

        document = self.store.load()
        dealer = _require_dealer(document, dealer_id)
        car = _require_car(dealer, plate)
        car.rent(user_id)
        self.store.save(document)
        logger.info("Rented car %s of dealer %s to user %s", plate, dealer.id, user_id)
        return car

    def return_car(self, dealer_id: str, plate: str) -> Car:
        """Take back a rented car, keeping its renter history."""
        plate = plate.strip().upper()
        document = self.store.load()
        dealer = _require_dealer(document, dealer_id)
        car = _require_car(dealer, plate)
        previous_user = car.current_user
        car.release()
        self.store.save(document)
        logger.info("Returned car %s of dealer %s from user %s", plate, dealer.id, previous_user)
        return car

    def update_vehicle(
        self,
        dealer_id: str,
        plate: str,
        *,
        new_plate: str | None = None,
        brand: str | None = None,
        model: str | None = None,
        year: str | None = None,
        color: str | None = None,
    ) -> Car:
        """Change descriptive fields of a car; None keeps the current value."""
        plate = plate.strip().upper()
        new_plate = _normalize_optional(new_plate)
        brand = _normalize_optional(brand)
        model = _normalize_optional(model)
        year = _normalize_optional(year)
        color = _normalize_optional(color)

        if new_plate is not None:
            _check_plate(new_plate)
        if year is not None:
            _check_year(year)

        document = self.store.load()
        dealer = _require_dealer(document, dealer_id)
        car = _require_car(dealer, plate)
        if new_plate is not None and new_plate != car.plate:
            if dealer.find_car(new_plate) is not None:
                raise ConflictError("Car already exists.")

        car.change_information(plate=new_plate, brand=brand, model=model, year=year, color=color)
        self.store.save(document)
        logger.info("Updated car %s of dealer %s", car.plate, dealer.id)
        return car


def _find_dealer(document: DealersDocument, dealer_id: str) -> CarDealer | None:
    """Linear scan for a dealer id."""
    for dealer in document.dealers:
        if dealer.id == dealer_id:
            return dealer
    return None


def _require_dealer(document: DealersDocument, dealer_id: str) -> CarDealer:
    dealer = _find_dealer(document, dealer_id)
    if dealer is None:
        raise NotFoundError("Dealer not found.")
    return dealer


def _require_car(dealer: CarDealer, plate: str) -> Car:
    car = dealer.find_car(plate)
    if car is None:
        raise NotFoundError("Car not found.")
    return car


def _check_plate(plate: str) -> None:
    if not is_valid_plate(plate):
        raise InvalidFormatError("Plate is not valid. (Use format XXX-000)")


def _check_year(year: str) -> None:
    if not is_valid_year(year):
        raise InvalidFormatError("Year must contain 4 digits.")


def _normalize_optional(value: str | None) -> str | None:
    """Strip and uppercase a value when given."""
    if value is None:
        return None
    return value.strip().upper()

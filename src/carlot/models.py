"""Core domain models for dealers and the cars they rent out."""

from __future__ import annotations

from uuid import uuid4

from pydantic import BaseModel, ConfigDict, Field, model_validator
from pydantic.alias_generators import to_pascal

from .errors import ConflictError


def _new_id() -> str:
    return str(uuid4())


class Record(BaseModel):
    """Base for everything persisted: PascalCase keys on disk, snake_case in Python."""

    model_config = ConfigDict(alias_generator=to_pascal, populate_by_name=True)


class Car(Record):
    """One tracked vehicle with its rental state and renter history."""

    id: str = Field(default_factory=_new_id, frozen=True)
    plate: str
    brand: str
    model: str
    year: str
    color: str
    vin: str
    is_in_use: bool = False
    current_user: str | None = None
    last_users: list[str] = Field(default_factory=list)

    @model_validator(mode="after")
    def _check_rental_state(self) -> Car:
        if self.is_in_use and self.current_user is None:
            raise ValueError("A rented car must have a current user.")
        if not self.is_in_use and self.current_user is not None:
            raise ValueError("An available car cannot have a current user.")
        return self

    def rent(self, user_id: str) -> None:
        """Move from available to rented, recording the renter in history."""
        if self.is_in_use:
            raise ConflictError("Car is already rented.")
        self.is_in_use = True
        self.current_user = user_id
        self.last_users.append(user_id)

    def release(self) -> None:
        """Move from rented back to available. History is left as is."""
        if not self.is_in_use:
            raise ConflictError("Car is not currently rented.")
        self.is_in_use = False
        self.current_user = None

    def change_information(
        self,
        plate: str | None = None,
        brand: str | None = None,
        model: str | None = None,
        year: str | None = None,
        color: str | None = None,
    ) -> None:
        """Replace the given fields, keeping current values for the ones left as None."""
        self.plate = plate if plate is not None else self.plate
        self.brand = brand if brand is not None else self.brand
        self.model = model if model is not None else self.model
        self.year = year if year is not None else self.year
        self.color = color if color is not None else self.color

    def recent_users(self, limit: int = 5) -> list[str]:
        """Return up to `limit` most recent renters, newest first."""
        if limit <= 0:
            return []
        return list(reversed(self.last_users[-limit:]))


class CarDealer(Record):
    """A dealer and the cars it owns."""

    id: str = Field(default_factory=_new_id, frozen=True)
    name: str
    cars: list[Car] = Field(default_factory=list)

    def find_car(self, plate: str) -> Car | None:
        """Return the car with exactly this plate, if any."""
        for car in self.cars:
            if car.plate == plate:
                return car
        return None

    def matches_name(self, name: str) -> bool:
        """Case-insensitive name comparison."""
        return self.name.casefold() == name.strip().casefold()

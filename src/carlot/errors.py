"""Error kinds raised by the dealer/vehicle core."""

from __future__ import annotations


class CarLotError(Exception):
    """Base class for every error the core raises to its caller."""


class InvalidFormatError(CarLotError, ValueError):
    """A plate, year, user id or dealer name failed its format check."""


class NotFoundError(CarLotError):
    """A dealer or vehicle lookup missed."""


class ConflictError(CarLotError):
    """The operation clashes with current state (duplicate plate, double rent, double return)."""


class StorageError(CarLotError):
    """Reading or writing a JSON document failed."""


class CorruptDocumentError(StorageError):
    """A JSON document exists but cannot be parsed into its schema."""

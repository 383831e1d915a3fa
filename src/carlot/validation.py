"""Format checks for plates, model years and user identifiers."""

from __future__ import annotations

import re

PLATE_PATTERN = re.compile(r"[A-Z]{3}-[0-9]{3}")
YEAR_PATTERN = re.compile(r"[0-9]{4}")
NUMERIC_PATTERN = re.compile(r"[0-9]+")


def is_valid_plate(plate: str) -> bool:
    """Return whether plate is three uppercase letters, a hyphen and three digits.

    No normalization happens here, callers uppercase first.
    """
    return PLATE_PATTERN.fullmatch(plate) is not None


def is_valid_year(year: str) -> bool:
    """Return whether year is exactly four ASCII digits.

    This is a format check only: "0000" is accepted.
    """
    return YEAR_PATTERN.fullmatch(year) is not None


def is_numeric(value: str) -> bool:
    """Return whether value is one or more ASCII digits."""
    return NUMERIC_PATTERN.fullmatch(value) is not None

"""Harvest entry entities.

This module contains the records kept during a session:
- HarvestEntry: One picker delivering a quantity of coffee at a given price
- LedgerTotals: Aggregate kilograms and payment over a list of entries
"""

import math
from collections.abc import Iterable
from dataclasses import dataclass
from typing import Any


def round_half_up(value: float) -> int:
    """Round to the nearest integer with halves rounded up.

    Payment totals round ``x.5`` up (``2.5 -> 3``), unlike the built-in
    ``round`` which rounds halves to even.
    """
    return math.floor(value + 0.5)


@dataclass(frozen=True)
class HarvestEntry:
    """A recorded harvest delivery.

    Attributes:
        id: Unique identifier, strictly increasing within a session
        name: Picker name
        kg: Kilograms collected (non-negative)
        price_per_kg: Price per kilogram in COP
        total: Payment, always round_half_up(kg * price_per_kg)
        date: Entry date, pre-formatted for display (e.g. "15/03/2024")
    """

    id: int
    name: str
    kg: float
    price_per_kg: float
    total: int
    date: str

    @classmethod
    def create(
        cls,
        *,
        entry_id: int,
        name: str,
        kg: float,
        price_per_kg: float,
        date: str,
    ) -> "HarvestEntry":
        """Create an entry with its total derived from kg and price.

        Raises:
            ValueError: If kg or price is negative or not finite
        """
        for label, value in (("kg", kg), ("price_per_kg", price_per_kg)):
            if not math.isfinite(value):
                raise ValueError(f"{label} must be a finite number (got {value})")
            if value < 0:
                raise ValueError(f"{label} must be non-negative (got {value})")

        return cls(
            id=entry_id,
            name=name,
            kg=kg,
            price_per_kg=price_per_kg,
            total=round_half_up(kg * price_per_kg),
            date=date,
        )

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for serialization and template context."""
        return {
            "id": self.id,
            "name": self.name,
            "kg": self.kg,
            "price_per_kg": self.price_per_kg,
            "total": self.total,
            "date": self.date,
        }


@dataclass(frozen=True)
class LedgerTotals:
    """Aggregate totals over a list of entries.

    Always derived from entries, never stored alongside them.

    Attributes:
        total_kg: Sum of kilograms
        total_payment: Sum of entry totals (COP)
    """

    total_kg: float = 0.0
    total_payment: int = 0

    @classmethod
    def from_entries(cls, entries: Iterable[HarvestEntry]) -> "LedgerTotals":
        """Sum kilograms and payments over ``entries``."""
        total_kg = 0.0
        total_payment = 0
        for entry in entries:
            total_kg += entry.kg
            total_payment += entry.total
        return cls(total_kg=total_kg, total_payment=total_payment)

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for serialization and template context."""
        return {"total_kg": self.total_kg, "total_payment": self.total_payment}

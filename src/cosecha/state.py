"""Session state container for harvest entries.

State is an immutable LedgerState snapshot. It only changes through
``reduce(state, action)``, a pure function; LedgerStore holds the current
snapshot and supplies the impure inputs (entry ids and dates) to the actions
it dispatches.

The entry log is append-only. ``LedgerState.entries`` exposes it most recent
first, which is the order every list and report displays.
"""

import logging
import math
from collections.abc import Callable
from dataclasses import dataclass, field, replace
from datetime import datetime
from typing import cast

from cosecha.models import HarvestEntry, LedgerTotals

logger = logging.getLogger(__name__)

FORM_FIELDS = ("name", "kg", "price_per_kg")


class EntryValidationError(ValueError):
    """Raised when the entry form cannot be turned into a HarvestEntry.

    Attributes:
        errors: Field name -> problem description
    """

    def __init__(self, errors: dict[str, str]) -> None:
        self.errors = errors
        details = "; ".join(f"{name}: {problem}" for name, problem in errors.items())
        super().__init__(f"Invalid harvest entry ({details})")


# =============================================================================
# State
# =============================================================================


@dataclass(frozen=True)
class FormState:
    """Raw text of the entry form fields."""

    name: str = ""
    kg: str = ""
    price_per_kg: str = "3000"


@dataclass(frozen=True)
class LedgerState:
    """Snapshot of a session.

    Attributes:
        form: Current form contents
        log: Entries in submission order (oldest first)
    """

    form: FormState = field(default_factory=FormState)
    log: tuple[HarvestEntry, ...] = ()

    @property
    def entries(self) -> tuple[HarvestEntry, ...]:
        """Entries most recent first."""
        return tuple(reversed(self.log))

    @property
    def totals(self) -> LedgerTotals:
        """Aggregate totals, recomputed on every read."""
        return LedgerTotals.from_entries(self.log)


# =============================================================================
# Actions
# =============================================================================


@dataclass(frozen=True)
class SetField:
    """Replace the text of one form field."""

    field: str
    value: str


@dataclass(frozen=True)
class SubmitEntry:
    """Turn the form into a new entry.

    Attributes:
        entry_id: Identifier for the new entry
        date: Pre-formatted entry date
    """

    entry_id: int
    date: str


@dataclass(frozen=True)
class ResetForm:
    """Clear the form, restoring the given default price."""

    price_per_kg: str = "3000"


Action = SetField | SubmitEntry | ResetForm


# =============================================================================
# Reducer
# =============================================================================


def _parse_number(text: str, label: str, errors: dict[str, str]) -> float | None:
    text = text.strip()
    if not text:
        errors[label] = "required"
        return None
    try:
        value = float(text.replace(",", "."))
    except ValueError:
        errors[label] = f"not a number: {text!r}"
        return None
    if not math.isfinite(value):
        errors[label] = f"not a finite number: {text!r}"
        return None
    if value < 0:
        errors[label] = "must be non-negative"
        return None
    return value


def parse_form(form: FormState) -> tuple[str, float, float]:
    """Validate the form and return ``(name, kg, price_per_kg)``.

    Raises:
        EntryValidationError: If any field is missing or invalid
    """
    errors: dict[str, str] = {}

    name = form.name.strip()
    if not name:
        errors["name"] = "required"

    kg = _parse_number(form.kg, "kg", errors)
    price = _parse_number(form.price_per_kg, "price_per_kg", errors)

    if errors:
        raise EntryValidationError(errors)

    return name, cast(float, kg), cast(float, price)


def reduce(state: LedgerState, action: Action) -> LedgerState:
    """Apply ``action`` to ``state`` and return the new state.

    Raises:
        EntryValidationError: If a SubmitEntry finds the form invalid
        ValueError: If the action is unknown or names an unknown field
    """
    if isinstance(action, SetField):
        if action.field not in FORM_FIELDS:
            raise ValueError(f"Unknown form field: {action.field}")
        return replace(state, form=replace(state.form, **{action.field: action.value}))

    if isinstance(action, SubmitEntry):
        name, kg, price = parse_form(state.form)
        if any(entry.id == action.entry_id for entry in state.log):
            raise ValueError(f"Duplicate entry id: {action.entry_id}")
        entry = HarvestEntry.create(
            entry_id=action.entry_id,
            name=name,
            kg=kg,
            price_per_kg=price,
            date=action.date,
        )
        # Name and kg are cleared, the price carries over to the next entry
        form = replace(state.form, name="", kg="")
        return LedgerState(form=form, log=state.log + (entry,))

    if isinstance(action, ResetForm):
        return replace(state, form=FormState(price_per_kg=action.price_per_kg))

    raise ValueError(f"Unknown action: {action!r}")


# =============================================================================
# Store
# =============================================================================


def _format_price(value: float) -> str:
    return str(int(value)) if float(value).is_integer() else str(value)


class LedgerStore:
    """Holds the current session state and dispatches actions to it.

    Usage:
        store = LedgerStore()
        entry = store.add_entry("Juan Pérez", 50, 3000)
        store.totals.total_payment  # 150000
    """

    def __init__(
        self,
        default_price_per_kg: float = 3000,
        date_format: str = "%d/%m/%Y",
        clock: Callable[[], datetime] = datetime.now,
    ) -> None:
        """Initialize an empty session.

        Args:
            default_price_per_kg: Price pre-filled in the form
            date_format: strftime format for entry dates
            clock: Source of the current time (entry ids and dates)
        """
        self.default_price = _format_price(default_price_per_kg)
        self.date_format = date_format
        self._clock = clock
        self._last_id = 0
        self._state = LedgerState(form=FormState(price_per_kg=self.default_price))

    @property
    def state(self) -> LedgerState:
        """Current snapshot."""
        return self._state

    @property
    def entries(self) -> tuple[HarvestEntry, ...]:
        """Entries most recent first."""
        return self._state.entries

    @property
    def totals(self) -> LedgerTotals:
        """Aggregate totals over the current entries."""
        return self._state.totals

    def dispatch(self, action: Action) -> LedgerState:
        """Apply an action; the state is unchanged if the reducer raises."""
        self._state = reduce(self._state, action)
        return self._state

    def set_field(self, name: str, value: str) -> None:
        """Update one form field."""
        self.dispatch(SetField(field=name, value=value))

    def submit(self) -> HarvestEntry:
        """Submit the form and return the created entry.

        Raises:
            EntryValidationError: If the form is incomplete or invalid
        """
        now = self._clock()
        action = SubmitEntry(entry_id=self._next_id(now), date=now.strftime(self.date_format))
        self.dispatch(action)
        self._last_id = action.entry_id
        entry = self._state.log[-1]
        logger.debug("Registered entry %d for %s (%s COP)", entry.id, entry.name, entry.total)
        return entry

    def add_entry(self, name: str, kg: float | str, price_per_kg: float | str | None = None) -> HarvestEntry:
        """Fill the form and submit it in one step.

        Args:
            name: Picker name
            kg: Kilograms collected
            price_per_kg: Price per kilogram (defaults to the form's current price)
        """
        self.set_field("name", name)
        self.set_field("kg", str(kg))
        if price_per_kg is not None:
            self.set_field("price_per_kg", str(price_per_kg))
        return self.submit()

    def reset_form(self) -> None:
        """Clear the form back to its defaults."""
        self.dispatch(ResetForm(price_per_kg=self.default_price))

    def get_entry(self, entry_id: int) -> HarvestEntry:
        """Look up an entry by id.

        Raises:
            KeyError: If no entry has that id
        """
        for entry in self._state.log:
            if entry.id == entry_id:
                return entry
        raise KeyError(f"Entry not found: {entry_id}")

    def _next_id(self, now: datetime) -> int:
        # Millisecond timestamp, bumped when two entries land in the same millisecond
        return max(int(now.timestamp() * 1000), self._last_id + 1)

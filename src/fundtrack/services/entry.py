"""Reactive position entry: keeps amount, shares, unit cost and gain consistent.

The four fields form a fixed, acyclic derivation graph:

* ``amount`` <-> ``shares`` through the current NAV
* ``unit_cost`` <-> ``gain`` through ``amount`` and ``shares``

Each handler stores the edited text verbatim (so partial input such as
``"-"`` or ``"1."`` is never overwritten) and recomputes only the fields
whose inputs currently parse. Fields whose inputs do not parse keep their
last value.
"""

from __future__ import annotations

import math
from dataclasses import dataclass, replace
from typing import Optional

from ..errors import InvalidNav, InvalidShares
from ..models.position import Position

AMOUNT_PLACES = 2
SHARES_PLACES = 2
COST_PLACES = 4
GAIN_PLACES = 2


@dataclass(frozen=True, slots=True)
class FieldValue:
    """Raw form text plus its numeric reading (``None`` while unparsable)."""

    raw: str = ""
    parsed: Optional[float] = None

    @classmethod
    def parse(cls, raw: object) -> "FieldValue":
        text = "" if raw is None else str(raw)
        stripped = text.strip().replace(",", "")
        if not stripped:
            return cls(text, None)
        try:
            value = float(stripped)
        except ValueError:
            return cls(text, None)
        if not math.isfinite(value):
            return cls(text, None)
        return cls(text, value)

    @classmethod
    def derived(cls, value: float, places: int) -> "FieldValue":
        """A computed value: rounded text for display, full precision kept."""
        return cls(f"{value:.{places}f}", value)

    @property
    def valid(self) -> bool:
        return self.parsed is not None


@dataclass(frozen=True, slots=True)
class CommittedEntry:
    """What gets persisted; amount and gain are always re-derivable from it."""

    holding_shares: float
    cost_price: float
    current_nav: float

    @property
    def amount(self) -> float:
        return self.holding_shares * self.current_nav

    @property
    def gain(self) -> float:
        return self.amount - self.holding_shares * self.cost_price


@dataclass(frozen=True, slots=True)
class EntryForm:
    """Immutable form state; every handler returns a new form."""

    current_nav: float
    amount: FieldValue = FieldValue()
    shares: FieldValue = FieldValue()
    unit_cost: FieldValue = FieldValue()
    gain: FieldValue = FieldValue()

    @classmethod
    def for_new_position(cls, current_nav: float) -> "EntryForm":
        """Blank form whose unit cost assumes a same-day purchase at ``current_nav``."""
        unit_cost = FieldValue.derived(current_nav, COST_PLACES) if current_nav > 0 else FieldValue()
        return cls(current_nav=current_nav, unit_cost=unit_cost)

    @classmethod
    def for_existing(cls, holding_shares: float, cost_price: float, current_nav: float) -> "EntryForm":
        """Derive all four fields once from a stored (shares, cost, nav) triple."""
        amount = holding_shares * current_nav
        gain = amount - holding_shares * cost_price
        return cls(
            current_nav=current_nav,
            amount=FieldValue.derived(amount, AMOUNT_PLACES),
            shares=FieldValue.derived(holding_shares, SHARES_PLACES),
            unit_cost=FieldValue.derived(cost_price, COST_PLACES),
            gain=FieldValue.derived(gain, GAIN_PLACES),
        )

    @classmethod
    def from_position(cls, position: Position) -> "EntryForm":
        return cls.for_existing(position.holding_shares, position.cost_price, position.current_nav)

    def on_amount_change(self, raw: object) -> "EntryForm":
        amount = FieldValue.parse(raw)
        form = replace(self, amount=amount)
        if self.current_nav > 0 and amount.valid:
            shares = amount.parsed / self.current_nav
            form = replace(form, shares=FieldValue.derived(shares, SHARES_PLACES))
            if self.unit_cost.valid:
                gain = amount.parsed - self.unit_cost.parsed * shares
                form = replace(form, gain=FieldValue.derived(gain, GAIN_PLACES))
        return form

    def on_shares_change(self, raw: object) -> "EntryForm":
        shares = FieldValue.parse(raw)
        form = replace(self, shares=shares)
        if self.current_nav > 0 and shares.valid:
            amount = shares.parsed * self.current_nav
            form = replace(form, amount=FieldValue.derived(amount, AMOUNT_PLACES))
            if self.unit_cost.valid:
                gain = amount - self.unit_cost.parsed * shares.parsed
                form = replace(form, gain=FieldValue.derived(gain, GAIN_PLACES))
        return form

    def on_unit_cost_change(self, raw: object) -> "EntryForm":
        unit_cost = FieldValue.parse(raw)
        form = replace(self, unit_cost=unit_cost)
        if unit_cost.valid and self.shares.valid and self.amount.valid:
            gain = self.amount.parsed - unit_cost.parsed * self.shares.parsed
            form = replace(form, gain=FieldValue.derived(gain, GAIN_PLACES))
        return form

    def on_gain_change(self, raw: object) -> "EntryForm":
        gain = FieldValue.parse(raw)
        form = replace(self, gain=gain)
        if gain.valid and self.shares.valid and self.shares.parsed > 0 and self.amount.valid:
            unit_cost = (self.amount.parsed - gain.parsed) / self.shares.parsed
            form = replace(form, unit_cost=FieldValue.derived(unit_cost, COST_PLACES))
        return form

    def commit(self) -> CommittedEntry:
        """Validate the form and return the (shares, cost, nav) triple to persist.

        Raises:
            InvalidNav: the NAV is not positive.
            InvalidShares: shares do not parse to a finite number greater than 0.
        """
        if not self.current_nav > 0:
            raise InvalidNav(self.current_nav)
        if not self.shares.valid or self.shares.parsed <= 0:
            raise InvalidShares(self.shares.raw)
        # Missing cost means break-even.
        cost = self.unit_cost.parsed if self.unit_cost.valid else self.current_nav
        return CommittedEntry(
            holding_shares=self.shares.parsed,
            cost_price=cost,
            current_nav=self.current_nav,
        )


_HANDLERS = {
    "amount": EntryForm.on_amount_change,
    "shares": EntryForm.on_shares_change,
    "unit_cost": EntryForm.on_unit_cost_change,
    "gain": EntryForm.on_gain_change,
}


def apply_edit(form: EntryForm, field: str, raw: object) -> EntryForm:
    """Dispatch a single-field edit by field name."""
    try:
        handler = _HANDLERS[field]
    except KeyError:
        raise ValueError(f"Unknown entry field {field!r}") from None
    return handler(form, raw)

"""Portfolio summary aggregation."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Iterable, Protocol


class ValuedPosition(Protocol):
    """Anything carrying the four numbers the aggregator reads."""

    holding_shares: float
    cost_price: float
    current_nav: float
    day_change_val: float


@dataclass(frozen=True, slots=True)
class PortfolioSummary:
    """Derived portfolio metrics; never persisted."""

    total_assets: float = 0.0
    total_cost: float = 0.0
    total_day_gain: float = 0.0
    total_day_gain_pct: float = 0.0
    holding_gain: float = 0.0
    holding_gain_pct: float = 0.0


def _number(value: object) -> float:
    return float(value) if value is not None else 0.0


def calculate_summary(positions: Iterable[ValuedPosition]) -> PortfolioSummary:
    """Reduce positions into totals.

    Day gain is the sum of each position's stored ``day_change_val``. The
    day-gain percentage backs out yesterday's total as
    ``total_assets - total_day_gain``. Percentages over a zero (or negative)
    base are 0.
    """
    total_assets = 0.0
    total_cost = 0.0
    total_day_gain = 0.0

    for position in positions:
        shares = _number(getattr(position, "holding_shares", 0.0))
        total_assets += shares * _number(getattr(position, "current_nav", 0.0))
        total_cost += shares * _number(getattr(position, "cost_price", 0.0))
        total_day_gain += _number(getattr(position, "day_change_val", 0.0))

    holding_gain = total_assets - total_cost
    holding_gain_pct = holding_gain / total_cost * 100 if total_cost > 0 else 0.0
    previous_total = total_assets - total_day_gain
    total_day_gain_pct = total_day_gain / previous_total * 100 if previous_total > 0 else 0.0

    return PortfolioSummary(
        total_assets=total_assets,
        total_cost=total_cost,
        total_day_gain=total_day_gain,
        total_day_gain_pct=total_day_gain_pct,
        holding_gain=holding_gain,
        holding_gain_pct=holding_gain_pct,
    )

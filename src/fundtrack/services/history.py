"""Historical NAV reconstruction from cumulative-return series."""

from __future__ import annotations

import calendar
from dataclasses import dataclass
from datetime import date, timedelta
from enum import Enum
from typing import Optional, Sequence

from ..errors import DegenerateReturnSeries
from ..logging_config import get_logger

logger = get_logger(__name__)


@dataclass(frozen=True, slots=True)
class HistoryRow:
    """One reconstructed day: implied NAV and percent change versus the prior point."""

    date: str
    nav: float
    change_pct: float


def _growth_factor(cumulative_pct: float) -> float:
    return 1 + cumulative_pct / 100


def _clean_points(
    dates: Sequence[str], returns: Sequence[Optional[float]]
) -> list[tuple[str, float]]:
    """Pair dates with returns, dropping gaps; extra trailing items on either side are ignored."""
    return [(d, float(r)) for d, r in zip(dates, returns) if r is not None]


def reconstruct_history(
    dates: Sequence[str], returns: Sequence[Optional[float]], current_nav: float
) -> list[HistoryRow]:
    """Rebuild per-day NAVs so the last point equals ``current_nav``.

    ``returns`` are cumulative percentages from a common (unknown) base. Each
    implied NAV is ``current_nav * (1 + r[i]/100) / (1 + r[-1]/100)`` and the
    day change is the ratio of consecutive growth factors. Rows come back
    most recent first.

    Raises:
        DegenerateReturnSeries: the terminal growth factor is not positive
            (a cumulative return of -100% or worse).
    """
    points = _clean_points(dates, returns)
    if not points:
        return []

    terminal = _growth_factor(points[-1][1])
    if terminal <= 0:
        raise DegenerateReturnSeries(
            f"terminal cumulative return {points[-1][1]}% on {points[-1][0]} cannot be rescaled"
        )

    rows: list[HistoryRow] = []
    for i in range(len(points) - 1, -1, -1):
        day, cumulative = points[i]
        factor = _growth_factor(cumulative)
        change_pct = 0.0
        if i > 0:
            previous = _growth_factor(points[i - 1][1])
            if previous != 0:
                change_pct = (factor / previous - 1) * 100
        rows.append(HistoryRow(date=day, nav=current_nav * (factor / terminal), change_pct=change_pct))
    return rows


def build_history_table(series, current_nav: float) -> list[HistoryRow]:
    """Reconstruct history for a fetched return series, empty when unavailable.

    ``series`` needs ``dates`` and ``fund`` sequences (see
    :class:`fundtrack.services.market_data.ReturnSeries`).
    """
    if series is None or current_nav <= 0:
        return []
    try:
        return reconstruct_history(series.dates, series.fund, current_nav)
    except DegenerateReturnSeries as exc:
        logger.warning("History unavailable: %s", exc)
        return []


def visible_history(rows: Sequence[HistoryRow], *, show_all: bool = False, preview_rows: int = 10) -> list[HistoryRow]:
    if show_all:
        return list(rows)
    return list(rows[: max(preview_rows, 0)])


class TimeRange(str, Enum):
    ONE_MONTH = "1M"
    THREE_MONTHS = "3M"
    SIX_MONTHS = "6M"
    ONE_YEAR = "1Y"
    THREE_YEARS = "3Y"
    FIVE_YEARS = "5Y"

    @property
    def months(self) -> int:
        count = int(self.value[:-1])
        return count if self.value.endswith("M") else count * 12


def _shift_months(value: date, months: int) -> date:
    """Move ``value`` back by ``months``, clamping to the last day of the target month."""
    index = value.year * 12 + (value.month - 1) - months
    year, month = divmod(index, 12)
    month += 1
    last_day = calendar.monthrange(year, month)[1]
    return date(year, month, min(value.day, last_day))


def range_start_date(time_range: TimeRange | str, end_date: date | str) -> date:
    """Start of the chart/history window ending at ``end_date``."""
    span = TimeRange(time_range)
    end = date.fromisoformat(end_date) if isinstance(end_date, str) else end_date
    return _shift_months(end, span.months)


def last_weekday(today: date | None = None) -> date:
    """Previous calendar day that is not a Saturday or Sunday.

    Used as the last trading day when no NAV date is known; holidays are not
    considered.
    """
    day = (today or date.today()) - timedelta(days=1)
    while day.weekday() >= 5:
        day -= timedelta(days=1)
    return day


def _row_day(value: str) -> Optional[date]:
    try:
        return date.fromisoformat(value[:10])
    except ValueError:
        return None


def rows_in_range(
    rows: Sequence[HistoryRow], time_range: TimeRange | str, end_date: date | str | None = None
) -> list[HistoryRow]:
    """Keep the rows dated inside the ``time_range`` window ending at ``end_date``.

    Without ``end_date`` the window ends at the newest row, or at the last
    weekday when that row's date is not ISO formatted. Rows whose date does
    not parse are dropped.
    """
    if not rows:
        return []
    if end_date is None:
        end = _row_day(rows[0].date) or last_weekday()
    else:
        end = date.fromisoformat(end_date) if isinstance(end_date, str) else end_date
    start = range_start_date(time_range, end)

    kept = []
    for row in rows:
        day = _row_day(row.date)
        if day is not None and start <= day <= end:
            kept.append(row)
    return kept

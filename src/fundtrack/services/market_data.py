"""Market-data boundary: vendor payload parsing, quote application and bulk refresh.

No network I/O happens here. Callers fetch JSON however they like and hand
the decoded payloads (or a ``fetch_quote`` callable) to these helpers.
"""

from __future__ import annotations

import math
from dataclasses import dataclass, field
from datetime import datetime, timezone
from threading import Lock
from typing import Any, Callable, Iterable, Mapping, Optional

from ..domain.repositories import PositionRepository
from ..logging_config import get_logger
from ..models.position import Position

logger = get_logger(__name__)


@dataclass(frozen=True, slots=True)
class NavQuote:
    """Latest NAV for one fund code."""

    nav: float
    nav_date: Optional[str] = None
    change_pct: float = 0.0


@dataclass(slots=True)
class ReturnSeries:
    """Parallel cumulative-return arrays (percent) over ``dates``."""

    dates: list[str] = field(default_factory=list)
    fund: list[Optional[float]] = field(default_factory=list)
    category_avg: list[Optional[float]] = field(default_factory=list)
    benchmark: list[Optional[float]] = field(default_factory=list)

    def __len__(self) -> int:
        return min(len(self.dates), len(self.fund))


def _as_float(value: Any) -> Optional[float]:
    if value is None or isinstance(value, bool):
        return None
    try:
        number = float(value)
    except (TypeError, ValueError):
        return None
    return number if math.isfinite(number) else None


def _data_section(payload: Any) -> Mapping[str, Any]:
    if not isinstance(payload, Mapping):
        return {}
    data = payload.get("data")
    return data if isinstance(data, Mapping) else {}


def parse_common_data(payload: Any) -> Optional[NavQuote]:
    """Read ``data.nav``/``data.navDate``/``data.navChangePercent``.

    Returns ``None`` when the payload carries no positive NAV.
    """
    data = _data_section(payload)
    nav = _as_float(data.get("nav"))
    if nav is None or nav <= 0:
        logger.warning("Common-data payload without a usable NAV", extra={"nav": data.get("nav")})
        return None
    nav_date = data.get("navDate")
    return NavQuote(
        nav=nav,
        nav_date=str(nav_date)[:10] if nav_date else None,
        change_pct=_as_float(data.get("navChangePercent")) or 0.0,
    )


def _series(values: Any) -> list[Optional[float]]:
    if not isinstance(values, (list, tuple)):
        return []
    return [_as_float(v) for v in values]


def parse_growth_data(payload: Any) -> ReturnSeries:
    """Read ``data.tsData``: dates, first fund series, category average, benchmark."""
    ts_data = _data_section(payload).get("tsData")
    if not isinstance(ts_data, Mapping):
        logger.warning("Growth-data payload without tsData")
        return ReturnSeries()

    funds = ts_data.get("funds")
    first_fund = funds[0] if isinstance(funds, (list, tuple)) and funds else []
    dates = ts_data.get("dates")
    return ReturnSeries(
        dates=[str(d) for d in dates] if isinstance(dates, (list, tuple)) else [],
        fund=_series(first_fund),
        category_avg=_series(ts_data.get("catAvg")),
        benchmark=_series(ts_data.get("bmk1")),
    )


@dataclass(frozen=True, slots=True)
class FundSearchResult:
    code: str
    name: str
    fund_class_id: str = ""
    fund_type: str = ""


def _text(value: Any) -> str:
    return "" if value is None else str(value).strip()


def parse_fund_search(payload: Any) -> list[FundSearchResult]:
    """Read the fund-cache search list; ``data`` is an array of funds.

    The display name prefers ``fundNameArr`` over ``fundName``. Entries
    without a ``symbol`` cannot be added as positions and are dropped.
    """
    items = payload.get("data") if isinstance(payload, Mapping) else None
    if not isinstance(items, (list, tuple)):
        return []
    results = []
    for item in items:
        if not isinstance(item, Mapping) or not _text(item.get("symbol")):
            continue
        results.append(
            FundSearchResult(
                code=_text(item.get("symbol")),
                name=_text(item.get("fundNameArr")) or _text(item.get("fundName")),
                fund_class_id=_text(item.get("fundClassId")),
                fund_type=_text(item.get("fundType")),
            )
        )
    return results


@dataclass(frozen=True, slots=True)
class EquityHolding:
    ticker: str
    name: str
    weight: float = 0.0
    sector: str = ""
    style_box: str = ""


@dataclass(frozen=True, slots=True)
class BondHolding:
    ticker: str
    name: str
    weight: float = 0.0


@dataclass(slots=True)
class FundHoldings:
    """Top holdings as of ``portfolio_date``; weights are percent of net assets."""

    sec_id: str = ""
    portfolio_date: Optional[str] = None
    equity: list[EquityHolding] = field(default_factory=list)
    bonds: list[BondHolding] = field(default_factory=list)


def _mappings(values: Any) -> list[Mapping[str, Any]]:
    if not isinstance(values, (list, tuple)):
        return []
    return [v for v in values if isinstance(v, Mapping)]


def parse_holdings(payload: Any) -> FundHoldings:
    data = _data_section(payload)
    portfolio_date = data.get("portfolioDate")
    return FundHoldings(
        sec_id=_text(data.get("secId")),
        portfolio_date=str(portfolio_date)[:10] if portfolio_date else None,
        equity=[
            EquityHolding(
                ticker=_text(h.get("ticker")),
                name=_text(h.get("name")),
                weight=_as_float(h.get("weight")) or 0.0,
                sector=_text(h.get("sector")),
                style_box=_text(h.get("styleBox")),
            )
            for h in _mappings(data.get("equityHoldings"))
        ],
        bonds=[
            BondHolding(
                ticker=_text(h.get("ticker")),
                name=_text(h.get("name")),
                weight=_as_float(h.get("weight")) or 0.0,
            )
            for h in _mappings(data.get("bondHoldings"))
        ],
    )


def quote_symbol(ticker: str) -> Optional[str]:
    """Exchange-prefixed quote code for a stock ticker, ``None`` when unknown.

    Five characters are Hong Kong listings. Six-digit codes route by prefix:
    ``6`` Shanghai, ``0``/``3`` Shenzhen, ``83``/``87``/``43`` Beijing.
    """
    code = (ticker or "").strip()
    if len(code) == 5:
        return f"hk{code}"
    if len(code) == 6:
        if code.startswith("6"):
            return f"sh{code}"
        if code.startswith(("0", "3")):
            return f"sz{code}"
        if code.startswith(("83", "87", "43")):
            return f"bj{code}"
    return None


def stock_quote_query(tickers: Iterable[str]) -> str:
    """Comma-joined ``s_<symbol>`` list for the quote endpoint; unknown tickers are skipped."""
    symbols = [quote_symbol(t) for t in tickers]
    return ",".join(f"s_{s}" for s in symbols if s)


@dataclass(frozen=True, slots=True)
class StockQuote:
    price: Optional[float]
    change_pct: Optional[float]


def parse_stock_quotes(text: str) -> dict[str, StockQuote]:
    """Parse ``v_s_sh600519="1~Name~600519~1700.00~-5.00~-0.29~...";`` records by ticker."""
    quotes: dict[str, StockQuote] = {}
    for record in (text or "").split(";"):
        if "=" not in record:
            continue
        parts = record.split("=", 1)[1].replace('"', "").split("~")
        if len(parts) <= 5:
            continue
        ticker = parts[2].strip()
        if ticker:
            quotes[ticker] = StockQuote(price=_as_float(parts[3]), change_pct=_as_float(parts[5]))
    return quotes


@dataclass(frozen=True, slots=True)
class PeriodReturn:
    period: str
    return_pct: Optional[float]


@dataclass(slots=True)
class FundPerformance:
    """Trailing, quarterly and calendar-year returns (percent) as of ``end_date``."""

    end_date: Optional[str] = None
    nav: Optional[float] = None
    change: Optional[float] = None
    change_pct: Optional[float] = None
    trailing: dict[str, float] = field(default_factory=dict)
    quarterly: list[PeriodReturn] = field(default_factory=list)
    annual: list[PeriodReturn] = field(default_factory=list)


def _period_returns(section: Any) -> list[PeriodReturn]:
    if not isinstance(section, Mapping):
        return []
    return [
        PeriodReturn(period=_text(item.get("k")), return_pct=_as_float(item.get("v")))
        for item in _mappings(section.get("returns"))
        if _text(item.get("k"))
    ]


def parse_performance(payload: Any) -> FundPerformance:
    """Read ``data.dayEnd`` (NAV snapshot plus trailing returns) and the period tables.

    Trailing returns keep only keys with a numeric value, e.g. ``YTD``,
    ``Y1``, ``Y3`` and ``sinceInception``.
    """
    data = _data_section(payload)
    day_end = data.get("dayEnd")
    if not isinstance(day_end, Mapping):
        day_end = {}
    returns = day_end.get("returns")
    trailing = {}
    if isinstance(returns, Mapping):
        for key, value in returns.items():
            number = _as_float(value)
            if number is not None:
                trailing[str(key)] = number
    end_date = day_end.get("endDate")
    nav = _as_float(day_end.get("nav"))
    return FundPerformance(
        end_date=str(end_date)[:10] if end_date else None,
        nav=nav if nav is not None and nav > 0 else None,
        change=_as_float(day_end.get("change")),
        change_pct=_as_float(day_end.get("changeP")),
        trailing=trailing,
        quarterly=_period_returns(data.get("quarterly")),
        annual=_period_returns(data.get("annual")),
    )


@dataclass(frozen=True, slots=True)
class MarketIndex:
    name: str
    value: float
    change: float
    change_pct: float


def parse_market_indices(payload: Any) -> list[MarketIndex]:
    """Read the China index board at ``data.watchData.data.china``.

    The vendor's ``changeAmount`` is the point change and its ``change`` is
    the percentage. A malformed payload gives an empty board.
    """
    node: Any = payload
    for key in ("data", "watchData", "data", "china"):
        node = node.get(key) if isinstance(node, Mapping) else None
    if not isinstance(node, (list, tuple)):
        logger.warning("Market-index payload without data.watchData.data.china")
        return []
    return [
        MarketIndex(
            name=_text(item.get("name")),
            value=_as_float(item.get("totalAmount")) or 0.0,
            change=_as_float(item.get("changeAmount")) or 0.0,
            change_pct=_as_float(item.get("change")) or 0.0,
        )
        for item in _mappings(node)
    ]


def day_change_value(shares: float, nav: float, change_pct: float) -> float:
    """Absolute day gain for a position, backed out from today's market value.

    ``shares * nav * pct / (100 + pct)`` equals today's value minus
    yesterday's value when today's NAV is ``nav``.
    """
    if change_pct <= -100:
        return 0.0
    return shares * nav * change_pct / (100 + change_pct)


def apply_quote(position: Position, quote: NavQuote) -> Position:
    """Copy a quote onto a position and re-derive its absolute day gain."""
    position.current_nav = quote.nav
    position.day_change_pct = quote.change_pct
    position.last_update = quote.nav_date or datetime.now(timezone.utc).date().isoformat()
    position.day_change_val = day_change_value(position.holding_shares, quote.nav, quote.change_pct)
    return position


class RefreshCoordinator:
    """Runs at most one bulk NAV refresh at a time."""

    def __init__(self) -> None:
        self._lock = Lock()

    @property
    def running(self) -> bool:
        return self._lock.locked()

    def refresh_all(self, repo: PositionRepository, fetch_quote: Callable[[str], Optional[NavQuote]]) -> Optional[int]:
        """Fetch a quote per distinct fund code and update every matching position.

        Returns the number of positions updated, or ``None`` when another
        refresh is already in flight. A failing fetch for one code is logged
        and skipped.
        """
        if not self._lock.acquire(blocking=False):
            logger.info("Refresh already in progress; skipping")
            return None
        try:
            positions = repo.list_all()
            quotes: dict[str, Optional[NavQuote]] = {}
            for code in {p.code for p in positions}:
                try:
                    quotes[code] = fetch_quote(code)
                except Exception:
                    logger.exception("Quote fetch failed", extra={"code": code})
                    quotes[code] = None

            updated = 0
            for position in positions:
                quote = quotes.get(position.code)
                if quote is None or position.id is None:
                    continue
                apply_quote(position, quote)
                repo.update_fields(
                    position.id,
                    current_nav=position.current_nav,
                    day_change_pct=position.day_change_pct,
                    day_change_val=position.day_change_val,
                    last_update=position.last_update,
                )
                updated += 1
            logger.info("Refresh finished", extra={"updated": updated, "codes": len(quotes)})
            return updated
        finally:
            self._lock.release()

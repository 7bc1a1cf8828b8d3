"""Position persistence helpers built on the entry form."""

from __future__ import annotations

from datetime import date
from typing import Iterable, Optional

from ..domain.repositories import AccountRepository, PositionRepository
from ..errors import AccountError
from ..logging_config import get_logger
from ..models.position import Position
from .accounts import ALL_PLATFORMS
from .entry import EntryForm
from .market_data import day_change_value

logger = get_logger(__name__)


def filter_by_platform(positions: Iterable[Position], platform: Optional[str]) -> list[Position]:
    if not platform or platform == ALL_PLATFORMS:
        return list(positions)
    return [p for p in positions if p.platform == platform]


def save_entry(
    repo: PositionRepository,
    form: EntryForm,
    *,
    accounts: AccountRepository,
    code: str,
    platform: str,
    name: str = "",
    position_id: Optional[int] = None,
    day_change_pct: Optional[float] = None,
    nav_date: Optional[str] = None,
) -> Position:
    """Validate ``form`` and create or update the stored position.

    Only shares and unit cost (plus the NAV snapshot) are written; the
    absolute day gain is re-derived from the day-change percentage so it
    tracks the new share count.

    Raises:
        InvalidNav, InvalidShares: from :meth:`EntryForm.commit`; nothing is written.
        AccountError: ``platform`` names no account; nothing is written.
        LookupError: ``position_id`` does not exist.
    """
    entry = form.commit()
    account = accounts.get_by_name(platform)
    if account is None:
        raise AccountError(f"Account {platform!r} does not exist.")
    platform = account.name

    if position_id is not None:
        existing = repo.get_by_id(position_id)
        if existing is None:
            raise LookupError(f"Position {position_id} not found")
        pct = existing.day_change_pct if day_change_pct is None else day_change_pct
        saved = repo.update_fields(
            position_id,
            holding_shares=entry.holding_shares,
            cost_price=entry.cost_price,
            current_nav=entry.current_nav,
            platform=platform,
            day_change_pct=pct,
            day_change_val=day_change_value(entry.holding_shares, entry.current_nav, pct),
            last_update=nav_date or existing.last_update,
        )
        logger.info("Position updated", extra={"position_id": position_id, "code": existing.code})
        return saved

    pct = day_change_pct or 0.0
    position = Position(
        code=code,
        name=name,
        platform=platform,
        holding_shares=entry.holding_shares,
        cost_price=entry.cost_price,
        current_nav=entry.current_nav,
        last_update=nav_date or date.today().isoformat(),
        day_change_pct=pct,
        day_change_val=day_change_value(entry.holding_shares, entry.current_nav, pct),
    )
    created = repo.create(position)
    logger.info("Position added", extra={"position_id": created.id, "code": code})
    return created


def delete_position(repo: PositionRepository, position_id: int) -> None:
    repo.delete(position_id)
    logger.info("Position deleted", extra={"position_id": position_id})

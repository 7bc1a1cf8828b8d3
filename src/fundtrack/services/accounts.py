"""Account management: seeding, cascading rename and protected delete."""

from __future__ import annotations

from typing import Iterable, Sequence

from ..domain.repositories import AccountRepository
from ..errors import AccountError
from ..logging_config import get_logger
from ..models.account import Account

logger = get_logger(__name__)

ALL_PLATFORMS = "All"


def seed_default_accounts(repo: AccountRepository, names: Iterable[str]) -> list[Account]:
    """Create the protected starter accounts, only when no account exists yet."""

    if repo.count() > 0:
        return []
    created = repo.create_many([Account(name=name, is_default=True) for name in names])
    logger.info("Seeded default accounts", extra={"accounts": [a.name for a in created]})
    return created


def _clean_name(name: str) -> str:
    cleaned = (name or "").strip()
    if not cleaned:
        raise AccountError("Account name cannot be empty.")
    return cleaned


def add_account(repo: AccountRepository, name: str) -> Account:
    cleaned = _clean_name(name)
    if repo.get_by_name(cleaned) is not None:
        raise AccountError(f"Account {cleaned!r} already exists.")
    account = repo.create(Account(name=cleaned, is_default=False))
    logger.info("Account added", extra={"account": cleaned})
    return account


def rename_account(repo: AccountRepository, account_id: int, new_name: str) -> int:
    """Rename an account and every position held under it.

    Returns how many positions were moved to the new name; 0 when the name
    is unchanged.
    """
    cleaned = _clean_name(new_name)
    account = repo.get_by_id(account_id)
    if account is None:
        raise AccountError(f"Account {account_id} not found.")
    if account.name == cleaned:
        return 0
    clash = repo.get_by_name(cleaned)
    if clash is not None and clash.id != account_id:
        raise AccountError(f"Account {cleaned!r} already exists.")

    moved = repo.rename(account_id, cleaned)
    logger.info(
        "Account renamed",
        extra={"old_name": account.name, "new_name": cleaned, "positions": moved},
    )
    return moved


def delete_account(repo: AccountRepository, account_id: int) -> None:
    """Delete a user-created account; seeded defaults are protected.

    Positions keep their platform string.
    """
    account = repo.get_by_id(account_id)
    if account is None:
        raise AccountError(f"Account {account_id} not found.")
    if account.is_default:
        raise AccountError(f"Account {account.name!r} is a default account and cannot be deleted.")
    repo.delete(account_id)
    logger.info("Account deleted", extra={"account": account.name})


def platform_filters(accounts: Sequence[Account]) -> list[str]:
    """Filter choices for the holdings list: "All" only makes sense with several accounts."""

    names = [a.name for a in accounts]
    return [ALL_PLATFORMS, *names] if len(names) > 1 else names

"""SQLModel implementation of the Account repository."""

from __future__ import annotations

from typing import Callable, Optional

from sqlalchemy import func
from sqlmodel import Session, select

from ...logging_config import get_logger
from ...models.account import Account
from .position import SQLModelPositionRepository

logger = get_logger(__name__)


class SQLModelAccountRepository:
    """SQLModel-based account repository implementation."""

    def __init__(self, session_factory: Callable[[], Session]):
        self.session_factory = session_factory
        self._positions = SQLModelPositionRepository(session_factory)

    def get_by_id(self, account_id: int) -> Optional[Account]:
        with self.session_factory() as session:
            return session.get(Account, account_id)

    def get_by_name(self, name: str) -> Optional[Account]:
        with self.session_factory() as session:
            statement = select(Account).where(Account.name == name)
            return session.exec(statement).first()

    def list_all(self) -> list[Account]:
        with self.session_factory() as session:
            statement = select(Account).order_by(Account.id)  # type: ignore[arg-type]
            return list(session.exec(statement).all())

    def count(self) -> int:
        with self.session_factory() as session:
            return session.exec(select(func.count()).select_from(Account)).one()

    def create(self, account: Account) -> Account:
        with self.session_factory() as session:
            session.add(account)
            session.commit()
            session.refresh(account)
            return account

    def create_many(self, accounts: list[Account]) -> list[Account]:
        with self.session_factory() as session:
            session.add_all(accounts)
            session.commit()
            for account in accounts:
                session.refresh(account)
            return accounts

    def delete(self, account_id: int) -> None:
        with self.session_factory() as session:
            account = session.get(Account, account_id)
            if account:
                session.delete(account)
                session.commit()

    def rename(self, account_id: int, new_name: str) -> int:
        """Rename the account and cascade the new name onto its positions.

        Both writes share one transaction; any failure rolls back both.
        Returns the number of positions rewritten, or -1 when the account
        does not exist.
        """
        with self.session_factory() as session:
            try:
                account = session.get(Account, account_id)
                if account is None:
                    return -1
                old_name = account.name
                account.name = new_name
                session.add(account)
                session.flush()
                moved = self._positions.rename_platform(old_name, new_name, session=session)
                session.commit()
            except Exception:
                session.rollback()
                logger.exception(
                    "Account rename rolled back",
                    extra={"account_id": account_id, "new_name": new_name},
                )
                raise
        return moved

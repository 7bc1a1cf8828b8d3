"""Account repository protocol."""

from __future__ import annotations

from typing import Optional, Protocol

from ...models.account import Account


class AccountRepository(Protocol):
    """Repository for managing account entities."""

    def get_by_id(self, account_id: int) -> Optional[Account]:
        """Retrieve an account by ID."""
        ...

    def get_by_name(self, name: str) -> Optional[Account]:
        """Retrieve an account by its unique name."""
        ...

    def list_all(self) -> list[Account]:
        """List all accounts in creation order."""
        ...

    def count(self) -> int:
        ...

    def create_many(self, accounts: list[Account]) -> list[Account]:
        """Create several accounts in one transaction."""
        ...

    def create(self, account: Account) -> Account:
        """Create a new account."""
        ...

    def delete(self, account_id: int) -> None:
        """Delete an account by ID."""
        ...

    def rename(self, account_id: int, new_name: str) -> int:
        """Rename an account and every position referencing it, atomically.

        Returns the number of positions whose platform was rewritten.
        """
        ...

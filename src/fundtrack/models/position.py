"""Fund position model."""

from __future__ import annotations

from typing import ClassVar, Optional

from sqlmodel import Field, SQLModel


class Position(SQLModel, table=True):
    """A holding of one fund under one platform/account.

    ``platform`` stores the account *name*, not its id, so renaming an
    account must rewrite this column on every referencing row.
    """

    __tablename__: ClassVar[str] = "position"

    id: Optional[int] = Field(default=None, primary_key=True)
    code: str = Field(index=True, nullable=False, max_length=32)
    name: str = Field(default="", max_length=255)
    platform: str = Field(default="Default", index=True, max_length=128)
    holding_shares: float = Field(nullable=False, default=0.0, ge=0)
    cost_price: float = Field(nullable=False, default=0.0)
    current_nav: float = Field(nullable=False, default=0.0)
    last_update: Optional[str] = Field(default=None, max_length=10)
    day_change_pct: float = Field(nullable=False, default=0.0)
    day_change_val: float = Field(nullable=False, default=0.0)

    @property
    def market_value(self) -> float:
        return self.holding_shares * self.current_nav

    @property
    def cost_value(self) -> float:
        return self.holding_shares * self.cost_price

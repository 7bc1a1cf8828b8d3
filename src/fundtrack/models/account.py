"""Account model; positions join to it by name through ``Position.platform``."""

from __future__ import annotations

from typing import ClassVar, Optional

from sqlmodel import Field, SQLModel


class Account(SQLModel, table=True):
    __tablename__: ClassVar[str] = "account"

    id: Optional[int] = Field(default=None, primary_key=True)
    name: str = Field(nullable=False, max_length=128, unique=True, index=True)
    is_default: bool = Field(default=False, nullable=False)

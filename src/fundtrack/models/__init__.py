"""SQLModel table exports."""

from .account import Account
from .position import Position

__all__ = ["Account", "Position"]

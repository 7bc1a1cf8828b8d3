"""Concrete repository implementations using SQLModel."""

from .account import SQLModelAccountRepository
from .position import SQLModelPositionRepository

__all__ = ["SQLModelAccountRepository", "SQLModelPositionRepository"]

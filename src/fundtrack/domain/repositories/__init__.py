"""Repository protocol definitions for domain layer."""

from .account import AccountRepository
from .position import PositionRepository

__all__ = ["AccountRepository", "PositionRepository"]

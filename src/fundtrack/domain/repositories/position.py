"""Position repository protocol."""

from __future__ import annotations

from typing import Any, Optional, Protocol

from ...models.position import Position


class PositionRepository(Protocol):
    """Repository for managing fund positions."""

    def get_by_id(self, position_id: int) -> Optional[Position]:
        """Retrieve a position by ID."""
        ...

    def list_all(self) -> list[Position]:
        """List all positions."""
        ...

    def list_by_platform(self, platform: str) -> list[Position]:
        """List positions held under one platform name."""
        ...

    def create(self, position: Position) -> Position:
        """Create a new position."""
        ...

    def update(self, position: Position) -> Position:
        """Persist changes to an existing position."""
        ...

    def update_fields(self, position_id: int, **fields: Any) -> Optional[Position]:
        """Set selected columns on one position."""
        ...

    def delete(self, position_id: int) -> None:
        """Delete a position by ID."""
        ...

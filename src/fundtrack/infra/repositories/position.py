"""SQLModel implementation of the Position repository."""

from __future__ import annotations

from typing import Any, Callable, Optional

from sqlalchemy import update
from sqlmodel import Session, select

from ...models.position import Position


class SQLModelPositionRepository:
    """SQLModel-based position repository implementation."""

    def __init__(self, session_factory: Callable[[], Session]):
        self.session_factory = session_factory

    def get_by_id(self, position_id: int) -> Optional[Position]:
        with self.session_factory() as session:
            return session.get(Position, position_id)

    def list_all(self) -> list[Position]:
        with self.session_factory() as session:
            statement = select(Position).order_by(Position.id)  # type: ignore[arg-type]
            return list(session.exec(statement).all())

    def list_by_platform(self, platform: str) -> list[Position]:
        with self.session_factory() as session:
            statement = (
                select(Position)
                .where(Position.platform == platform)
                .order_by(Position.id)  # type: ignore[arg-type]
            )
            return list(session.exec(statement).all())

    def create(self, position: Position) -> Position:
        with self.session_factory() as session:
            session.add(position)
            session.commit()
            session.refresh(position)
            return position

    def update(self, position: Position) -> Position:
        with self.session_factory() as session:
            merged = session.merge(position)
            session.commit()
            session.refresh(merged)
            return merged

    def update_fields(self, position_id: int, **fields: Any) -> Optional[Position]:
        """Set selected columns on one position; unknown column names raise ``AttributeError``."""
        with self.session_factory() as session:
            position = session.get(Position, position_id)
            if position is None:
                return None
            for key, value in fields.items():
                if key == "id" or key not in Position.model_fields:
                    raise AttributeError(f"Position has no writable field {key!r}")
                setattr(position, key, value)
            session.add(position)
            session.commit()
            session.refresh(position)
            return position

    def delete(self, position_id: int) -> None:
        with self.session_factory() as session:
            position = session.get(Position, position_id)
            if position:
                session.delete(position)
                session.commit()

    def rename_platform(self, old_name: str, new_name: str, *, session: Session | None = None) -> int:
        """Rewrite ``platform`` on every position held under ``old_name``.

        When ``session`` is given the statement joins the caller's transaction
        and nothing is committed here.
        """
        statement = (
            update(Position)
            .where(Position.platform == old_name)  # type: ignore[arg-type]
            .values(platform=new_name)
        )
        if session is not None:
            return session.execute(statement).rowcount or 0
        with self.session_factory() as own_session:
            count = own_session.execute(statement).rowcount or 0
            own_session.commit()
            return count

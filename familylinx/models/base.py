"""
Declarative base and shared columns for FamilyLinX tables.

Every table keys on a string document id and carries UTC write timestamps.
"""

from datetime import datetime

from sqlalchemy import JSON, DateTime, String
from sqlalchemy.dialects.postgresql import JSONB
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column

from familylinx.config import get_settings
from familylinx.utils import generate_id, utcnow


def get_json_type():
    """JSONB on PostgreSQL, plain JSON elsewhere."""
    return JSONB if get_settings().uses_postgresql else JSON


class Base(DeclarativeBase):
    pass


class BaseModel(Base):
    """
    Abstract document row.

    ``id`` defaults to ``{epoch_ms}-{random}``; families pass their own.
    ``updated_at`` moves on every flush that changes a column, and
    :meth:`touch` bumps it for in-place JSON edits SQLAlchemy cannot see.
    """

    __abstract__ = True

    id: Mapped[str] = mapped_column(String(100), primary_key=True, default=generate_id)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=utcnow, nullable=False
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=utcnow, onupdate=utcnow, nullable=False
    )

    def to_dict(self) -> dict:
        """Column values keyed by attribute name, relationships excluded."""
        return {column.key: getattr(self, column.key) for column in self.__table__.columns}

    def touch(self) -> None:
        self.updated_at = utcnow()

    def __repr__(self) -> str:
        return f"<{self.__class__.__name__}(id={self.id})>"

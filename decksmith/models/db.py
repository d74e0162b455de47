"""
SQLAlchemy ORM models for local deck storage.

The deck is stored as independent key-value rows so the entry list and
the name can be written and read back separately.
"""

from datetime import datetime
from typing import Any

from sqlalchemy import JSON, DateTime, String, func
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column


class Base(DeclarativeBase):
    """Base class for all ORM models."""

    pass


class SnapshotValueDB(Base):
    """
    One key of the persisted deck snapshot.

    Keys in use: "deck_entries" (list of {"id", "count"}) and
    "deck_name" (bare string).
    """

    __tablename__ = "deck_snapshot"

    key: Mapped[str] = mapped_column(String(64), primary_key=True)
    value: Mapped[Any] = mapped_column(JSON)
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), server_default=func.now(), onupdate=func.now()
    )

    def __repr__(self) -> str:
        return f"<SnapshotValueDB(key={self.key})>"

"""
SQLAlchemy ORM models for the card catalog.

The catalog row mirrors CardRecord, keyed by the case-folded card name.
Structured fields use JSON columns so they are decoded on every read.
"""

from datetime import datetime
from typing import Any

from sqlalchemy import JSON, DateTime, Float, Index, String, Text, func
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column


class Base(DeclarativeBase):
    """Base class for all ORM models."""

    pass


class CardDB(Base):
    """
    A card catalog entry.

    Exactly one row exists per case-folded name; writes replace the row.
    """

    __tablename__ = "cards"
    __table_args__ = (
        Index("idx_type_line", "type_line"),
        Index("idx_legalities", "legalities"),
        Index("idx_rarity", "rarity"),
    )

    name_key: Mapped[str] = mapped_column(String(255), primary_key=True)
    name: Mapped[str] = mapped_column(String(255))
    type_line: Mapped[str] = mapped_column(Text)
    colors: Mapped[list[str]] = mapped_column(JSON, default=list)
    color_identity: Mapped[list[str]] = mapped_column(JSON, default=list)
    rarity: Mapped[str] = mapped_column(String(32), default="")
    legalities: Mapped[dict[str, str]] = mapped_column(JSON, default=dict)
    mana_cost: Mapped[str | None] = mapped_column(Text, nullable=True)
    cmc: Mapped[float | None] = mapped_column(Float, nullable=True)

    # Display-only data
    image_uris: Mapped[dict[str, str] | None] = mapped_column(JSON, nullable=True)
    card_faces: Mapped[list[dict[str, Any]] | None] = mapped_column(JSON, nullable=True)

    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), server_default=func.now(), onupdate=func.now()
    )

    def __repr__(self) -> str:
        return f"<CardDB(name={self.name}, type_line={self.type_line})>"

"""
SQLAlchemy ORM models for persistent storage.

Models mirror the card dataclasses but add database persistence. List and
mapping fields are stored as JSON columns.
"""

from datetime import datetime
from typing import Any

from sqlalchemy import JSON, DateTime, Float, ForeignKey, Integer, String, Text, func
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column, relationship


class Base(DeclarativeBase):
    """Base class for all ORM models."""

    pass


class CardDB(Base):
    """
    Oracle-level card data.

    One row per logical card, keyed by lower-cased oracle id.
    """

    __tablename__ = "cards"

    oracle_id: Mapped[str] = mapped_column(String(64), primary_key=True)
    name: Mapped[str] = mapped_column(String(255), index=True)
    type_line: Mapped[str] = mapped_column(String(255), default="")
    layout: Mapped[str] = mapped_column(String(50), default="normal")
    cmc: Mapped[float] = mapped_column(Float, default=0.0)
    colors: Mapped[list[str]] = mapped_column(JSON, default=list)
    color_identity: Mapped[list[str]] = mapped_column(JSON, default=list)
    mana_cost: Mapped[str | None] = mapped_column(String(100), nullable=True)
    oracle_text: Mapped[str | None] = mapped_column(Text, nullable=True)
    power: Mapped[str | None] = mapped_column(String(10), nullable=True)
    toughness: Mapped[str | None] = mapped_column(String(10), nullable=True)
    keywords: Mapped[list[str]] = mapped_column(JSON, default=list)
    legalities: Mapped[dict[str, Any]] = mapped_column(JSON, default=dict)
    prints_search_uri: Mapped[str | None] = mapped_column(String(500), nullable=True)
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), server_default=func.now(), onupdate=func.now()
    )

    printings: Mapped[list["PrintingDB"]] = relationship(
        back_populates="card", cascade="all, delete-orphan"
    )

    def __repr__(self) -> str:
        return f"<CardDB(oracle_id={self.oracle_id}, name={self.name})>"


class PrintingDB(Base):
    """
    One printing of a card.

    Every printing references an existing card row.
    """

    __tablename__ = "printings"

    id: Mapped[str] = mapped_column(String(64), primary_key=True)
    oracle_id: Mapped[str] = mapped_column(
        String(64), ForeignKey("cards.oracle_id", ondelete="CASCADE"), index=True
    )
    set_code: Mapped[str] = mapped_column(String(10))
    set_name: Mapped[str] = mapped_column(String(255), default="")
    rarity: Mapped[str] = mapped_column(String(20), default="")
    scryfall_uri: Mapped[str] = mapped_column(String(500), default="")
    released_at: Mapped[str] = mapped_column(String(10), index=True)
    games: Mapped[list[str]] = mapped_column(JSON, default=list)
    image_uri: Mapped[str | None] = mapped_column(String(500), nullable=True)
    collector_number: Mapped[str | None] = mapped_column(String(20), nullable=True)
    lang: Mapped[str | None] = mapped_column(String(10), nullable=True)
    arena_id: Mapped[int | None] = mapped_column(Integer, nullable=True)

    card: Mapped["CardDB"] = relationship(back_populates="printings")

    def __repr__(self) -> str:
        return f"<PrintingDB(id={self.id}, set={self.set_code})>"


class QueryCacheDB(Base):
    """
    A search query and the ordered oracle ids it resolved to.

    Tracks when the entry was written, when it was last served and how many
    times it has been served from cache.
    """

    __tablename__ = "query_cache"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    query_text: Mapped[str] = mapped_column(Text, unique=True, index=True)
    oracle_ids: Mapped[list[str]] = mapped_column(JSON, default=list)
    cached_at: Mapped[datetime] = mapped_column(DateTime(timezone=True))
    last_accessed: Mapped[datetime] = mapped_column(DateTime(timezone=True))
    hit_count: Mapped[int] = mapped_column(Integer, default=0)

    def __repr__(self) -> str:
        return f"<QueryCacheDB(query={self.query_text!r}, ids={len(self.oracle_ids)})>"

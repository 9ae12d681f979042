"""SQLAlchemy declarative base and ORM models."""

from datetime import datetime

from sqlalchemy import Boolean, DateTime, Index, Integer, String
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column


class Base(DeclarativeBase):
    """Base class for all database models."""


class MonsterModel(Base):
    """ORM model for monsters.

    Timestamps are stored as naive UTC. level and current_level_xp are a
    cache of what total_xp derives to; they are always written together.
    """

    __tablename__ = "monsters"

    monster_id: Mapped[str] = mapped_column(String, primary_key=True)
    owner_id: Mapped[str] = mapped_column(String, nullable=False)
    name: Mapped[str] = mapped_column(String(50), nullable=False)
    template_id: Mapped[str] = mapped_column(String, nullable=False)

    mood: Mapped[str] = mapped_column(String, nullable=False, default="happy")
    last_mood_change_at: Mapped[datetime | None] = mapped_column(
        DateTime, nullable=True
    )
    # NULL for rows created before the decay timer existed
    next_mood_change_at: Mapped[datetime | None] = mapped_column(
        DateTime, nullable=True
    )

    level: Mapped[int] = mapped_column(Integer, nullable=False, default=1)
    current_level_xp: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    total_xp: Mapped[int] = mapped_column(Integer, nullable=False, default=0)

    daily_play_count: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    last_play_date: Mapped[str | None] = mapped_column(String(10), nullable=True)

    is_public: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)

    created_at: Mapped[datetime] = mapped_column(DateTime, nullable=False)

    __table_args__ = (
        Index("idx_monster_owner", "owner_id"),
        Index("idx_monster_public", "is_public"),
    )

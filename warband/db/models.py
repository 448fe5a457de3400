"""SQLAlchemy declarative base and ORM models.

Gear sets and catalog sub-documents (pieces, bonuses, drop locations) are
stored as JSON columns in their camelCase wire format; the core layer owns
their structure.
"""

from datetime import datetime, timezone

from sqlalchemy import (
    Boolean,
    DateTime,
    Float,
    ForeignKey,
    Integer,
    String,
    Text,
    UniqueConstraint,
)
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column, relationship
from sqlalchemy.types import JSON


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


class Base(DeclarativeBase):
    """Base class for all database models."""


class UserModel(Base):
    """Users mirrored from the external identity provider."""

    __tablename__ = "users"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    external_id: Mapped[str] = mapped_column(String, unique=True, index=True)
    name: Mapped[str] = mapped_column(String, nullable=False)
    email: Mapped[str | None] = mapped_column(String, nullable=True)
    image_url: Mapped[str | None] = mapped_column(String, nullable=True)
    is_admin: Mapped[bool] = mapped_column(Boolean, default=False)


class CharacterModel(Base):
    """Warband character with adventure/dungeon gear sets."""

    __tablename__ = "characters"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    user_id: Mapped[str] = mapped_column(String, index=True, nullable=False)
    class_name: Mapped[str] = mapped_column(String, nullable=False)
    name: Mapped[str | None] = mapped_column(String, nullable=True)
    hit_percent: Mapped[float] = mapped_column(Float, default=0.0)
    expertise_percent: Mapped[float] = mapped_column(Float, default=0.0)
    adventure_gear: Mapped[list] = mapped_column(JSON, nullable=False)
    dungeon_gear: Mapped[list] = mapped_column(JSON, nullable=False)
    created_at: Mapped[datetime] = mapped_column(DateTime, default=utcnow)
    updated_at: Mapped[datetime] = mapped_column(DateTime, default=utcnow)

    # 사용자당 직업 하나
    __table_args__ = (
        UniqueConstraint("user_id", "class_name", name="uq_character_user_class"),
    )


class GuildModel(Base):
    """ORM model for guilds."""

    __tablename__ = "guilds"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    name: Mapped[str] = mapped_column(String, index=True, nullable=False)
    description: Mapped[str | None] = mapped_column(Text, nullable=True)
    owner_id: Mapped[str] = mapped_column(String, unique=True, nullable=False)
    created_at: Mapped[datetime] = mapped_column(DateTime, default=utcnow)

    members: Mapped[list["GuildMemberModel"]] = relationship(
        "GuildMemberModel",
        back_populates="guild",
        cascade="all, delete-orphan",
    )
    applications: Mapped[list["GuildApplicationModel"]] = relationship(
        "GuildApplicationModel",
        back_populates="guild",
        cascade="all, delete-orphan",
    )


class GuildMemberModel(Base):
    """Guild memberships, including the owner."""

    __tablename__ = "guild_members"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    guild_id: Mapped[int] = mapped_column(
        Integer, ForeignKey("guilds.id", ondelete="CASCADE"), nullable=False
    )
    # 사용자는 한 길드에만 소속
    user_id: Mapped[str] = mapped_column(String, unique=True, nullable=False)
    role: Mapped[str] = mapped_column(String, nullable=False)
    joined_at: Mapped[datetime] = mapped_column(DateTime, default=utcnow)

    guild: Mapped["GuildModel"] = relationship("GuildModel", back_populates="members")


class GuildApplicationModel(Base):
    """ORM model for guild applications."""

    __tablename__ = "guild_applications"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    guild_id: Mapped[int] = mapped_column(
        Integer, ForeignKey("guilds.id", ondelete="CASCADE"), nullable=False
    )
    user_id: Mapped[str] = mapped_column(String, index=True, nullable=False)
    message: Mapped[str | None] = mapped_column(Text, nullable=True)
    status: Mapped[str] = mapped_column(String, default="pending")
    created_at: Mapped[datetime] = mapped_column(DateTime, default=utcnow)
    resolved_at: Mapped[datetime | None] = mapped_column(DateTime, nullable=True)

    guild: Mapped["GuildModel"] = relationship(
        "GuildModel", back_populates="applications"
    )


class GearSetModel(Base):
    """Admin-curated gear set catalog entry."""

    __tablename__ = "gear_sets"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    name: Mapped[str] = mapped_column(String, nullable=False)
    quality: Mapped[str] = mapped_column(String, nullable=False)
    classes: Mapped[list] = mapped_column(JSON, nullable=False)
    drop_locations: Mapped[list | None] = mapped_column(JSON, nullable=True)
    pieces: Mapped[list] = mapped_column(JSON, nullable=False)
    bonuses: Mapped[list] = mapped_column(JSON, nullable=False)
    required_level: Mapped[int | None] = mapped_column(Integer, nullable=True)
    drop_pattern_id: Mapped[int | None] = mapped_column(
        Integer, ForeignKey("drop_patterns.id"), nullable=True
    )
    created_at: Mapped[datetime] = mapped_column(DateTime, default=utcnow)
    updated_at: Mapped[datetime] = mapped_column(DateTime, default=utcnow)

    __table_args__ = (
        UniqueConstraint("name", "quality", name="uq_gear_set_name_quality"),
    )


class LocationModel(Base):
    """Drop locations (dungeons, raids, ...)."""

    __tablename__ = "locations"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    type: Mapped[str] = mapped_column(String, index=True, nullable=False)
    name: Mapped[str] = mapped_column(String, nullable=False)
    created_at: Mapped[datetime] = mapped_column(DateTime, default=utcnow)
    updated_at: Mapped[datetime] = mapped_column(DateTime, default=utcnow)

    bosses: Mapped[list["BossModel"]] = relationship(
        "BossModel",
        back_populates="location",
        cascade="all, delete-orphan",
    )

    __table_args__ = (
        UniqueConstraint("type", "name", name="uq_location_type_name"),
    )


class BossModel(Base):
    """ORM model for bosses within a location."""

    __tablename__ = "bosses"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    location_id: Mapped[int] = mapped_column(
        Integer, ForeignKey("locations.id", ondelete="CASCADE"), nullable=False
    )
    name: Mapped[str] = mapped_column(String, nullable=False)
    order: Mapped[int | None] = mapped_column(Integer, nullable=True)
    created_at: Mapped[datetime] = mapped_column(DateTime, default=utcnow)
    updated_at: Mapped[datetime] = mapped_column(DateTime, default=utcnow)

    location: Mapped["LocationModel"] = relationship(
        "LocationModel", back_populates="bosses"
    )


class DropPatternModel(Base):
    """Reusable slot → (location, boss) drop mapping for sets."""

    __tablename__ = "drop_patterns"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    name: Mapped[str] = mapped_column(String, unique=True, nullable=False)
    slot_drops: Mapped[list] = mapped_column(JSON, nullable=False)
    default_bonuses: Mapped[list | None] = mapped_column(JSON, nullable=True)
    created_at: Mapped[datetime] = mapped_column(DateTime, default=utcnow)
    updated_at: Mapped[datetime] = mapped_column(DateTime, default=utcnow)

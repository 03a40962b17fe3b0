from __future__ import annotations

import enum
from datetime import datetime
from typing import List, Optional
from uuid import uuid4

from sqlalchemy import (
    Boolean,
    CheckConstraint,
    DateTime,
    Enum,
    ForeignKey,
    Integer,
    String,
    Text,
    UniqueConstraint,
    func,
)
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column, relationship


def _new_id() -> str:
    return str(uuid4())


class Base(DeclarativeBase):
    pass


class Position(str, enum.Enum):
    CENTER = "CENTER"
    LEFT_WING = "LEFT_WING"
    RIGHT_WING = "RIGHT_WING"
    DEFENSE = "DEFENSE"
    GOALIE = "GOALIE"


class PlayerStatus(str, enum.Enum):
    ACTIVE = "ACTIVE"
    INJURED = "INJURED"
    UNAVAILABLE = "UNAVAILABLE"
    INACTIVE = "INACTIVE"


class GameType(str, enum.Enum):
    REGULAR = "REGULAR"
    PLAYOFF = "PLAYOFF"
    PRACTICE = "PRACTICE"
    SCRIMMAGE = "SCRIMMAGE"


class GameStatus(str, enum.Enum):
    SCHEDULED = "SCHEDULED"
    IN_PROGRESS = "IN_PROGRESS"
    COMPLETED = "COMPLETED"
    CANCELLED = "CANCELLED"
    POSTPONED = "POSTPONED"


# Games in these states release their rostered players' time
FREED_STATUSES = (GameStatus.CANCELLED, GameStatus.POSTPONED)


class AvailabilityStatus(str, enum.Enum):
    PENDING = "PENDING"
    AVAILABLE = "AVAILABLE"
    UNAVAILABLE = "UNAVAILABLE"
    MAYBE = "MAYBE"


def _enum(cls):
    return Enum(cls, native_enum=False, length=16, validate_strings=True)


class League(Base):
    __tablename__ = "leagues"
    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=_new_id)
    name: Mapped[str] = mapped_column(String(100))
    short_name: Mapped[str] = mapped_column(String(10))
    description: Mapped[str | None] = mapped_column(Text, nullable=True)

    created_at: Mapped[datetime] = mapped_column(DateTime, server_default=func.now())
    updated_at: Mapped[datetime | None] = mapped_column(DateTime, onupdate=func.now(), nullable=True)

    teams: Mapped[List["Team"]] = relationship(back_populates="league")


class Team(Base):
    __tablename__ = "teams"
    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=_new_id)
    league_id: Mapped[str | None] = mapped_column(
        String(36), ForeignKey("leagues.id", ondelete="SET NULL"), nullable=True, index=True
    )
    name: Mapped[str] = mapped_column(String(100))
    short_name: Mapped[str] = mapped_column(String(5))
    logo_url: Mapped[str | None] = mapped_column(Text, nullable=True)
    primary_color: Mapped[str | None] = mapped_column(String(7), nullable=True)
    secondary_color: Mapped[str | None] = mapped_column(String(7), nullable=True)

    created_at: Mapped[datetime] = mapped_column(DateTime, server_default=func.now())
    updated_at: Mapped[datetime | None] = mapped_column(DateTime, onupdate=func.now(), nullable=True)

    league: Mapped[Optional["League"]] = relationship(back_populates="teams")
    memberships: Mapped[List["TeamMembership"]] = relationship(back_populates="team")
    games: Mapped[List["Game"]] = relationship(back_populates="team")


class Player(Base):
    __tablename__ = "players"
    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=_new_id)
    first_name: Mapped[str] = mapped_column(String(50))
    last_name: Mapped[str] = mapped_column(String(50), index=True)
    position: Mapped[Position] = mapped_column(_enum(Position))
    jersey_number: Mapped[int | None] = mapped_column(Integer, nullable=True)
    status: Mapped[PlayerStatus] = mapped_column(_enum(PlayerStatus), default=PlayerStatus.ACTIVE)

    created_at: Mapped[datetime] = mapped_column(DateTime, server_default=func.now())
    updated_at: Mapped[datetime | None] = mapped_column(DateTime, onupdate=func.now(), nullable=True)

    memberships: Mapped[List["TeamMembership"]] = relationship(back_populates="player")

    @property
    def full_name(self) -> str:
        return f"{self.first_name} {self.last_name}"


class TeamMembership(Base):
    # Never hard-deleted: removal from a team flips is_active
    __tablename__ = "team_memberships"
    __table_args__ = (UniqueConstraint("player_id", "team_id", name="uq_membership_player_team"),)

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=_new_id)
    player_id: Mapped[str] = mapped_column(ForeignKey("players.id"), index=True)
    team_id: Mapped[str] = mapped_column(ForeignKey("teams.id"), index=True)
    is_active: Mapped[bool] = mapped_column(Boolean, default=True)
    joined_at: Mapped[datetime] = mapped_column(DateTime, server_default=func.now())

    player: Mapped[Player] = relationship(back_populates="memberships")
    team: Mapped[Team] = relationship(back_populates="memberships")


class Game(Base):
    __tablename__ = "games"
    __table_args__ = (CheckConstraint("end_time > start_time", name="ck_game_interval"),)

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=_new_id)
    team_id: Mapped[str] = mapped_column(ForeignKey("teams.id"), index=True)
    opponent: Mapped[str] = mapped_column(String(100))
    location: Mapped[str] = mapped_column(String(200))
    game_type: Mapped[GameType] = mapped_column(_enum(GameType), default=GameType.REGULAR)
    is_home: Mapped[bool] = mapped_column(Boolean, default=True)
    # naive UTC, half-open [start_time, end_time)
    start_time: Mapped[datetime] = mapped_column(DateTime, index=True)
    end_time: Mapped[datetime] = mapped_column(DateTime, index=True)
    status: Mapped[GameStatus] = mapped_column(_enum(GameStatus), default=GameStatus.SCHEDULED)
    roster_locked: Mapped[bool] = mapped_column(Boolean, default=False)

    created_at: Mapped[datetime] = mapped_column(DateTime, server_default=func.now())
    updated_at: Mapped[datetime | None] = mapped_column(DateTime, onupdate=func.now(), nullable=True)

    team: Mapped[Team] = relationship(back_populates="games")
    roster_entries: Mapped[List["GameRoster"]] = relationship(back_populates="game")
    lineup: Mapped[Optional["Lineup"]] = relationship(back_populates="game", uselist=False)
    availabilities: Mapped[List["PlayerAvailability"]] = relationship(back_populates="game")


class GameRoster(Base):
    __tablename__ = "game_rosters"
    __table_args__ = (UniqueConstraint("game_id", "player_id", name="uq_roster_game_player"),)

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=_new_id)
    game_id: Mapped[str] = mapped_column(ForeignKey("games.id"), index=True)
    player_id: Mapped[str] = mapped_column(ForeignKey("players.id"), index=True)
    added_at: Mapped[datetime] = mapped_column(DateTime, server_default=func.now())

    game: Mapped[Game] = relationship(back_populates="roster_entries")
    player: Mapped[Player] = relationship()


class Lineup(Base):
    __tablename__ = "lineups"
    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=_new_id)
    game_id: Mapped[str] = mapped_column(ForeignKey("games.id"), unique=True)
    configuration: Mapped[str] = mapped_column(Text)  # JSON as str
    updated_at: Mapped[datetime | None] = mapped_column(
        DateTime, server_default=func.now(), onupdate=func.now(), nullable=True
    )

    game: Mapped[Game] = relationship(back_populates="lineup")


class PlayerAvailability(Base):
    __tablename__ = "player_availabilities"
    __table_args__ = (UniqueConstraint("player_id", "game_id", name="uq_availability_player_game"),)

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=_new_id)
    player_id: Mapped[str] = mapped_column(ForeignKey("players.id"), index=True)
    game_id: Mapped[str] = mapped_column(ForeignKey("games.id"), index=True)
    status: Mapped[AvailabilityStatus] = mapped_column(
        _enum(AvailabilityStatus), default=AvailabilityStatus.PENDING
    )
    note: Mapped[str | None] = mapped_column(String(500), nullable=True)
    responded_at: Mapped[datetime | None] = mapped_column(DateTime, nullable=True)

    player: Mapped[Player] = relationship()
    game: Mapped[Game] = relationship(back_populates="availabilities")

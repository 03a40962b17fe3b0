from __future__ import annotations
from datetime import datetime
from typing import List, Optional
from pydantic import BaseModel, ConfigDict, Field

from rinkroster.db.models import GameStatus, GameType
from rinkroster.schemas.availability import GameAvailabilityItem
from rinkroster.schemas.lineup import LineupConfig
from rinkroster.schemas.player import Player, TeamRef


class GameCreate(BaseModel):
    team_id: str = Field(min_length=1)
    opponent: str = Field(min_length=1, max_length=100)
    location: str = Field(min_length=1, max_length=200)
    game_type: GameType = GameType.REGULAR
    start_time: datetime
    end_time: Optional[datetime] = None  # defaults to start + 2.5h
    is_home: bool = True


class GameUpdate(BaseModel):
    opponent: Optional[str] = Field(default=None, min_length=1, max_length=100)
    location: Optional[str] = Field(default=None, min_length=1, max_length=200)
    game_type: Optional[GameType] = None
    start_time: Optional[datetime] = None
    end_time: Optional[datetime] = None
    is_home: Optional[bool] = None
    status: Optional[GameStatus] = None


class GameQuery(BaseModel):
    team_id: Optional[str] = None
    status: Optional[GameStatus] = None
    start_from: Optional[datetime] = None
    start_to: Optional[datetime] = None


class Game(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: str
    team_id: str
    opponent: str
    location: str
    game_type: GameType
    is_home: bool
    start_time: datetime
    end_time: datetime
    status: GameStatus
    roster_locked: bool


class GameListItem(Game):
    team: TeamRef
    roster_count: int = 0


class GameDetail(Game):
    team: TeamRef
    roster: List[Player] = []
    lineup: Optional[LineupConfig] = None
    availabilities: List[GameAvailabilityItem] = []


class AddToRoster(BaseModel):
    player_id: str = Field(min_length=1)

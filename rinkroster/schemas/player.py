from __future__ import annotations
from typing import List, Optional
from pydantic import BaseModel, ConfigDict, Field

from rinkroster.db.models import PlayerStatus, Position


class PlayerCreate(BaseModel):
    first_name: str = Field(min_length=1, max_length=50)
    last_name: str = Field(min_length=1, max_length=50)
    position: Position
    jersey_number: Optional[int] = Field(default=None, ge=0, le=99)
    status: PlayerStatus = PlayerStatus.ACTIVE


class PlayerUpdate(BaseModel):
    first_name: Optional[str] = Field(default=None, min_length=1, max_length=50)
    last_name: Optional[str] = Field(default=None, min_length=1, max_length=50)
    position: Optional[Position] = None
    jersey_number: Optional[int] = Field(default=None, ge=0, le=99)
    status: Optional[PlayerStatus] = None


class Player(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: str
    first_name: str
    last_name: str
    position: Position
    jersey_number: Optional[int] = None
    status: PlayerStatus


class TeamRef(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: str
    name: str
    short_name: str


class PlayerWithTeams(Player):
    teams: List[TeamRef] = []  # active memberships only

from __future__ import annotations
from typing import List, Optional
from pydantic import BaseModel, ConfigDict, Field

_HEX = r"^#[0-9A-Fa-f]{6}$"


class TeamCreate(BaseModel):
    league_id: Optional[str] = None
    name: str = Field(min_length=1, max_length=100)
    short_name: str = Field(min_length=2, max_length=5)
    logo_url: Optional[str] = None
    primary_color: Optional[str] = Field(default=None, pattern=_HEX)
    secondary_color: Optional[str] = Field(default=None, pattern=_HEX)


class TeamUpdate(BaseModel):
    league_id: Optional[str] = None
    name: Optional[str] = Field(default=None, min_length=1, max_length=100)
    short_name: Optional[str] = Field(default=None, min_length=2, max_length=5)
    logo_url: Optional[str] = None
    primary_color: Optional[str] = Field(default=None, pattern=_HEX)
    secondary_color: Optional[str] = Field(default=None, pattern=_HEX)


class Team(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: str
    league_id: Optional[str] = None
    name: str
    short_name: str
    logo_url: Optional[str] = None
    primary_color: Optional[str] = None
    secondary_color: Optional[str] = None


class TeamSummary(Team):
    player_count: int = 0
    game_count: int = 0


class AddPlayerToTeam(BaseModel):
    player_id: str = Field(min_length=1)


class TeamList(BaseModel):
    items: List[TeamSummary]

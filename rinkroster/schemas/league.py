from __future__ import annotations
from typing import List, Optional
from pydantic import BaseModel, ConfigDict, Field

from rinkroster.schemas.team import TeamSummary


class LeagueCreate(BaseModel):
    name: str = Field(min_length=1, max_length=100)
    short_name: str = Field(min_length=1, max_length=10)
    description: Optional[str] = None


class LeagueUpdate(BaseModel):
    name: Optional[str] = Field(default=None, min_length=1, max_length=100)
    short_name: Optional[str] = Field(default=None, min_length=1, max_length=10)
    description: Optional[str] = None


class League(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: str
    name: str
    short_name: str
    description: Optional[str] = None


class LeagueSummary(League):
    team_count: int = 0


class LeagueDetail(League):
    teams: List[TeamSummary] = []

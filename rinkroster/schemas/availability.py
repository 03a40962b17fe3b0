from __future__ import annotations
from datetime import datetime
from typing import List, Optional
from pydantic import BaseModel, ConfigDict, Field

from rinkroster.db.models import AvailabilityStatus, Position


class SetAvailability(BaseModel):
    status: AvailabilityStatus
    note: Optional[str] = Field(default=None, max_length=500)


class AvailabilityPlayer(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: str
    first_name: str
    last_name: str
    position: Position
    jersey_number: Optional[int] = None


class GameAvailabilityItem(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    player: AvailabilityPlayer
    status: AvailabilityStatus
    note: Optional[str] = None
    responded_at: Optional[datetime] = None


class AvailabilityGame(BaseModel):
    id: str
    team_name: str
    opponent: str
    location: str
    start_time: datetime


class PlayerAvailabilityItem(BaseModel):
    game: AvailabilityGame
    status: AvailabilityStatus
    note: Optional[str] = None
    responded_at: Optional[datetime] = None


class AvailabilitySummary(BaseModel):
    total: int
    available: int
    unavailable: int
    maybe: int
    pending: int


class PlayerAvailabilityList(BaseModel):
    player_id: str
    items: List[PlayerAvailabilityItem]

# rinkroster/api/routes_players.py
from __future__ import annotations

from typing import Any, Dict, List, Optional

from fastapi import APIRouter, Depends, Query, Response, status
from sqlalchemy.orm import Session

from rinkroster.core.clock import Clock
from rinkroster.db.models import PlayerStatus, Position
from rinkroster.db.session import get_db
from rinkroster.deps import get_clock
from rinkroster.schemas.availability import AvailabilityGame, PlayerAvailabilityItem, PlayerAvailabilityList
from rinkroster.schemas.player import Player, PlayerCreate, PlayerUpdate, PlayerWithTeams, TeamRef
from rinkroster.services import availability as availability_svc
from rinkroster.services import players as players_svc

router = APIRouter(prefix="/players", tags=["players"])


def _with_teams(row: Dict[str, Any]) -> PlayerWithTeams:
    base = Player.model_validate(row["player"]).model_dump()
    return PlayerWithTeams(**base, teams=[TeamRef.model_validate(t) for t in row["teams"]])


@router.get("", response_model=List[PlayerWithTeams])
def list_players(
    team_id: Optional[str] = Query(default=None),
    status_: Optional[PlayerStatus] = Query(default=None, alias="status"),
    position: Optional[Position] = Query(default=None),
    db: Session = Depends(get_db),
):
    return [_with_teams(r) for r in players_svc.list_players(db, team_id=team_id, status=status_, position=position)]


@router.post("", response_model=Player, status_code=status.HTTP_201_CREATED)
def create_player(body: PlayerCreate, db: Session = Depends(get_db)):
    return players_svc.create_player(db, body)


@router.get("/{player_id}", response_model=PlayerWithTeams)
def get_player(player_id: str, db: Session = Depends(get_db)):
    return _with_teams(players_svc.get_player(db, player_id))


@router.patch("/{player_id}", response_model=Player)
def update_player(player_id: str, body: PlayerUpdate, db: Session = Depends(get_db)):
    return players_svc.update_player(db, player_id, body)


@router.delete("/{player_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_player(player_id: str, db: Session = Depends(get_db)):
    """Soft delete: the player is marked INACTIVE."""
    players_svc.deactivate_player(db, player_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)


@router.get("/{player_id}/availability", response_model=PlayerAvailabilityList)
def player_availability(
    player_id: str,
    upcoming: bool = Query(default=True, description="Only future games that are still on"),
    clock: Clock = Depends(get_clock),
    db: Session = Depends(get_db),
):
    rows = availability_svc.get_player_availability(db, player_id, upcoming=upcoming, clock=clock)
    items = [
        PlayerAvailabilityItem(
            game=AvailabilityGame(
                id=r.game.id,
                team_name=r.game.team.name,
                opponent=r.game.opponent,
                location=r.game.location,
                start_time=r.game.start_time,
            ),
            status=r.status,
            note=r.note,
            responded_at=r.responded_at,
        )
        for r in rows
    ]
    return PlayerAvailabilityList(player_id=player_id, items=items)

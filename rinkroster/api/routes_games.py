# rinkroster/api/routes_games.py
from __future__ import annotations

from datetime import datetime
from typing import Any, Dict, List, Optional

from fastapi import APIRouter, Depends, Query, Response, status
from sqlalchemy.orm import Session

from rinkroster.core.clock import Clock
from rinkroster.db.models import GameStatus
from rinkroster.db.session import get_db
from rinkroster.deps import get_clock, get_player_id
from rinkroster.schemas.availability import AvailabilitySummary, GameAvailabilityItem, SetAvailability
from rinkroster.schemas.game import (
    AddToRoster,
    Game,
    GameCreate,
    GameDetail,
    GameListItem,
    GameQuery,
    GameUpdate,
)
from rinkroster.schemas.lineup import LineupConfig
from rinkroster.schemas.player import Player, TeamRef
from rinkroster.services import availability as availability_svc
from rinkroster.services import games as games_svc
from rinkroster.services import lineups as lineups_svc

router = APIRouter(prefix="/games", tags=["games"])


def _list_item(row: Dict[str, Any]) -> GameListItem:
    base = Game.model_validate(row["game"]).model_dump()
    return GameListItem(**base, team=TeamRef.model_validate(row["team"]), roster_count=row["roster_count"])


# ---------------- GAMES ----------------
@router.get("", response_model=List[GameListItem])
def list_games(
    team_id: Optional[str] = Query(default=None),
    status_: Optional[GameStatus] = Query(default=None, alias="status"),
    start_from: Optional[datetime] = Query(default=None, description="Only games starting at/after this time"),
    start_to: Optional[datetime] = Query(default=None, description="Only games starting at/before this time"),
    db: Session = Depends(get_db),
):
    q = GameQuery(team_id=team_id, status=status_, start_from=start_from, start_to=start_to)
    return [_list_item(row) for row in games_svc.list_games(db, q)]


@router.post("", response_model=Game, status_code=status.HTTP_201_CREATED)
def create_game(body: GameCreate, db: Session = Depends(get_db)):
    """
    Schedules a game. Without ``end_time`` the game runs the default duration (2.5h).
    """
    return games_svc.create_game(db, body)


@router.get("/{game_id}", response_model=GameDetail)
def get_game(game_id: str, db: Session = Depends(get_db)):
    data = games_svc.get_game(db, game_id)
    base = Game.model_validate(data["game"]).model_dump()
    return GameDetail(
        **base,
        team=TeamRef.model_validate(data["team"]),
        roster=[Player.model_validate(p) for p in data["roster"]],
        lineup=data["lineup"],
        availabilities=[GameAvailabilityItem.model_validate(a) for a in data["availabilities"]],
    )


@router.patch("/{game_id}", response_model=Game)
def update_game(game_id: str, body: GameUpdate, db: Session = Depends(get_db)):
    """
    Edits a game. Time changes are rejected (409) when any rostered player
    would end up double-booked; nothing is written in that case.
    """
    return games_svc.update_game(db, game_id, body)


@router.delete("/{game_id}", status_code=status.HTTP_204_NO_CONTENT)
def cancel_game(game_id: str, db: Session = Depends(get_db)):
    """Cancels (never deletes) the game, freeing its players' time."""
    games_svc.cancel_game(db, game_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)


# ---------------- ROSTER ----------------
@router.get("/{game_id}/roster", response_model=List[Player])
def get_roster(game_id: str, db: Session = Depends(get_db)):
    return games_svc.get_roster(db, game_id)


@router.post("/{game_id}/roster", status_code=status.HTTP_201_CREATED)
def add_to_roster(game_id: str, body: AddToRoster, db: Session = Depends(get_db)):
    games_svc.add_to_roster(db, game_id, body.player_id)
    return {"message": "Player added to roster"}


@router.delete("/{game_id}/roster/{player_id}", status_code=status.HTTP_204_NO_CONTENT)
def remove_from_roster(game_id: str, player_id: str, db: Session = Depends(get_db)):
    games_svc.remove_from_roster(db, game_id, player_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)


@router.post("/{game_id}/lock")
def lock_roster(game_id: str, db: Session = Depends(get_db)):
    game = games_svc.lock_roster(db, game_id)
    return {"message": "Roster locked", "roster_locked": game.roster_locked}


@router.post("/{game_id}/unlock")
def unlock_roster(game_id: str, db: Session = Depends(get_db)):
    game = games_svc.unlock_roster(db, game_id)
    return {"message": "Roster unlocked", "roster_locked": game.roster_locked}


# ---------------- LINEUP ----------------
@router.get("/{game_id}/lineup", response_model=Optional[LineupConfig])
def get_lineup(game_id: str, db: Session = Depends(get_db)):
    return lineups_svc.get_lineup(db, game_id)


@router.put("/{game_id}/lineup")
def set_lineup(
    game_id: str,
    body: LineupConfig,
    require_rostered: Optional[bool] = Query(default=None, description="Reject players not on the roster"),
    db: Session = Depends(get_db),
):
    lineups_svc.set_lineup(db, game_id, body, require_rostered=require_rostered)
    return {"message": "Lineup saved"}


# ---------------- AVAILABILITY ----------------
@router.get("/{game_id}/availability", response_model=List[GameAvailabilityItem])
def get_game_availability(game_id: str, db: Session = Depends(get_db)):
    return availability_svc.get_game_availability(db, game_id)


@router.get("/{game_id}/availability/summary", response_model=AvailabilitySummary)
def get_availability_summary(game_id: str, db: Session = Depends(get_db)):
    return availability_svc.get_summary(db, game_id)


@router.put("/{game_id}/availability")
def set_availability(
    game_id: str,
    body: SetAvailability,
    player_id: str = Depends(get_player_id),
    clock: Clock = Depends(get_clock),
    db: Session = Depends(get_db),
):
    """
    Records the calling player's availability. Latest answer wins.
    """
    availability_svc.set_availability(db, player_id, game_id, body.status, body.note, clock=clock)
    return {"message": "Availability saved"}

from __future__ import annotations

from typing import List

from fastapi import APIRouter, Depends, Response, status
from sqlalchemy.orm import Session

from rinkroster.db.session import get_db
from rinkroster.schemas.player import Player
from rinkroster.schemas.team import AddPlayerToTeam, Team, TeamCreate, TeamSummary, TeamUpdate
from rinkroster.services import teams as teams_svc

router = APIRouter(prefix="/teams", tags=["teams"])


@router.get("", response_model=List[TeamSummary])
def list_teams(db: Session = Depends(get_db)):
    return [
        TeamSummary(**Team.model_validate(r["team"]).model_dump(), player_count=r["player_count"], game_count=r["game_count"])
        for r in teams_svc.list_teams(db)
    ]


@router.post("", response_model=Team, status_code=status.HTTP_201_CREATED)
def create_team(body: TeamCreate, db: Session = Depends(get_db)):
    return teams_svc.create_team(db, body)


@router.get("/{team_id}", response_model=Team)
def get_team(team_id: str, db: Session = Depends(get_db)):
    return teams_svc.get_team(db, team_id)


@router.patch("/{team_id}", response_model=Team)
def update_team(team_id: str, body: TeamUpdate, db: Session = Depends(get_db)):
    return teams_svc.update_team(db, team_id, body)


@router.get("/{team_id}/players", response_model=List[Player])
def team_players(team_id: str, db: Session = Depends(get_db)):
    """Active members only."""
    return teams_svc.get_players(db, team_id)


@router.post("/{team_id}/players", status_code=status.HTTP_201_CREATED)
def add_player(team_id: str, body: AddPlayerToTeam, db: Session = Depends(get_db)):
    teams_svc.add_player(db, team_id, body.player_id)
    return {"message": "Player added to team"}


@router.delete("/{team_id}/players/{player_id}", status_code=status.HTTP_204_NO_CONTENT)
def remove_player(team_id: str, player_id: str, db: Session = Depends(get_db)):
    teams_svc.remove_player(db, team_id, player_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)

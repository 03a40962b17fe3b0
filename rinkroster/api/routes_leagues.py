from __future__ import annotations

from typing import List

from fastapi import APIRouter, Depends, Response, status
from sqlalchemy.orm import Session

from rinkroster.db.session import get_db
from rinkroster.schemas.league import League, LeagueCreate, LeagueDetail, LeagueSummary, LeagueUpdate
from rinkroster.schemas.team import Team, TeamSummary
from rinkroster.services import leagues as leagues_svc

router = APIRouter(prefix="/leagues", tags=["leagues"])


@router.get("", response_model=List[LeagueSummary])
def list_leagues(db: Session = Depends(get_db)):
    return [
        LeagueSummary(**League.model_validate(r["league"]).model_dump(), team_count=r["team_count"])
        for r in leagues_svc.list_leagues(db)
    ]


@router.post("", response_model=League, status_code=status.HTTP_201_CREATED)
def create_league(body: LeagueCreate, db: Session = Depends(get_db)):
    return leagues_svc.create_league(db, body)


@router.get("/{league_id}", response_model=LeagueDetail)
def get_league(league_id: str, db: Session = Depends(get_db)):
    """League with its teams."""
    data = leagues_svc.get_league_detail(db, league_id)
    teams = [
        TeamSummary(**Team.model_validate(r["team"]).model_dump(), player_count=r["player_count"], game_count=r["game_count"])
        for r in data["teams"]
    ]
    return LeagueDetail(**League.model_validate(data["league"]).model_dump(), teams=teams)


@router.patch("/{league_id}", response_model=League)
def update_league(league_id: str, body: LeagueUpdate, db: Session = Depends(get_db)):
    return leagues_svc.update_league(db, league_id, body)


@router.delete("/{league_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_league(league_id: str, db: Session = Depends(get_db)):
    leagues_svc.delete_league(db, league_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)

from __future__ import annotations

import logging
from typing import Any, Dict, List

from sqlalchemy import func, select
from sqlalchemy.orm import Session

from rinkroster.core.errors import NotFoundError
from rinkroster.db.models import League, Team
from rinkroster.schemas.league import LeagueCreate, LeagueUpdate
from rinkroster.services.teams import list_teams

logger = logging.getLogger(__name__)


def get_league(db: Session, league_id: str) -> League:
    league = db.get(League, league_id)
    if league is None:
        raise NotFoundError("League")
    return league


def list_leagues(db: Session) -> List[Dict[str, Any]]:
    teams = (
        select(func.count(Team.id))
        .where(Team.league_id == League.id)
        .correlate(League)
        .scalar_subquery()
    )
    rows = db.execute(select(League, teams).order_by(League.name)).all()
    return [{"league": lg, "team_count": tc or 0} for lg, tc in rows]


def get_league_detail(db: Session, league_id: str) -> Dict[str, Any]:
    """League with its teams and their player/game counts."""
    league = get_league(db, league_id)
    return {"league": league, "teams": list_teams(db, league_id=league.id)}


def create_league(db: Session, data: LeagueCreate) -> League:
    league = League(**data.model_dump())
    db.add(league)
    db.commit()
    logger.info("league created id=%s name=%s", league.id, league.name)
    return league


def update_league(db: Session, league_id: str, data: LeagueUpdate) -> League:
    league = get_league(db, league_id)
    for field, value in data.model_dump(exclude_unset=True, exclude_none=True).items():
        setattr(league, field, value)
    db.commit()
    return league


def delete_league(db: Session, league_id: str) -> None:
    # Teams outlive their league; the ORM nulls their league_id
    league = get_league(db, league_id)
    db.delete(league)
    db.commit()
    logger.info("league deleted id=%s", league_id)

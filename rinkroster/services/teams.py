from __future__ import annotations

import logging
from typing import Any, Dict, List, Optional

from sqlalchemy import func, select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from rinkroster.core.errors import ConflictError, NotFoundError
from rinkroster.db.models import Game, League, Player, Team, TeamMembership
from rinkroster.schemas.team import TeamCreate, TeamUpdate

logger = logging.getLogger(__name__)


def get_team(db: Session, team_id: str) -> Team:
    team = db.get(Team, team_id)
    if team is None:
        raise NotFoundError("Team")
    return team


def list_teams(db: Session, league_id: Optional[str] = None) -> List[Dict[str, Any]]:
    players = (
        select(func.count(TeamMembership.id))
        .where(TeamMembership.team_id == Team.id, TeamMembership.is_active.is_(True))
        .correlate(Team)
        .scalar_subquery()
    )
    games = (
        select(func.count(Game.id))
        .where(Game.team_id == Team.id)
        .correlate(Team)
        .scalar_subquery()
    )
    stmt = select(Team, players, games).order_by(Team.name)
    if league_id is not None:
        stmt = stmt.where(Team.league_id == league_id)
    rows = db.execute(stmt).all()
    return [{"team": t, "player_count": pc or 0, "game_count": gc or 0} for t, pc, gc in rows]


def _check_league(db: Session, league_id: Optional[str]) -> None:
    if league_id is not None and db.get(League, league_id) is None:
        raise NotFoundError("League")


def create_team(db: Session, data: TeamCreate) -> Team:
    _check_league(db, data.league_id)
    team = Team(**data.model_dump())
    db.add(team)
    db.commit()
    logger.info("team created id=%s name=%s", team.id, team.name)
    return team


def update_team(db: Session, team_id: str, data: TeamUpdate) -> Team:
    team = get_team(db, team_id)
    changes = data.model_dump(exclude_unset=True, exclude_none=True)
    if "league_id" in data.model_fields_set:
        # an explicit null detaches the team from its league
        _check_league(db, data.league_id)
        changes["league_id"] = data.league_id
    for field, value in changes.items():
        setattr(team, field, value)
    db.commit()
    return team


def _membership(db: Session, team_id: str, player_id: str) -> Optional[TeamMembership]:
    return db.execute(
        select(TeamMembership).where(
            TeamMembership.player_id == player_id,
            TeamMembership.team_id == team_id,
        )
    ).scalar_one_or_none()


def add_player(db: Session, team_id: str, player_id: str) -> TeamMembership:
    """Join a player to a team, reactivating an earlier membership if there is one."""
    team = get_team(db, team_id)
    if db.get(Player, player_id) is None:
        raise NotFoundError("Player")

    existing = _membership(db, team.id, player_id)
    if existing is not None:
        if existing.is_active:
            raise ConflictError("Player is already on this team")
        existing.is_active = True
        db.commit()
        logger.info("membership reactivated team=%s player=%s", team.id, player_id)
        return existing

    membership = TeamMembership(player_id=player_id, team_id=team.id, is_active=True)
    db.add(membership)
    try:
        db.flush()
    except IntegrityError as exc:
        # a concurrent join of the same pair got there first
        db.rollback()
        raise ConflictError("Player is already on this team") from exc
    db.commit()
    logger.info("membership created team=%s player=%s", team.id, player_id)
    return membership


def remove_player(db: Session, team_id: str, player_id: str) -> None:
    # Soft delete: historical roster rows still reference the player
    membership = _membership(db, team_id, player_id)
    if membership is None:
        raise NotFoundError("Team membership")
    membership.is_active = False
    db.commit()
    logger.info("membership deactivated team=%s player=%s", team_id, player_id)


def get_players(db: Session, team_id: str) -> List[Player]:
    get_team(db, team_id)
    return list(
        db.execute(
            select(Player)
            .join(TeamMembership, TeamMembership.player_id == Player.id)
            .where(TeamMembership.team_id == team_id, TeamMembership.is_active.is_(True))
            .order_by(Player.last_name, Player.first_name)
        ).scalars()
    )

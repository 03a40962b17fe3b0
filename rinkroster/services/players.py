from __future__ import annotations

import logging
from typing import Any, Dict, List, Optional

from sqlalchemy import select
from sqlalchemy.orm import Session

from rinkroster.core.errors import NotFoundError
from rinkroster.db.models import Player, PlayerStatus, Position, Team, TeamMembership
from rinkroster.schemas.player import PlayerCreate, PlayerUpdate

logger = logging.getLogger(__name__)


def _active_teams(db: Session, player_id: str) -> List[Team]:
    return list(
        db.execute(
            select(Team)
            .join(TeamMembership, TeamMembership.team_id == Team.id)
            .where(TeamMembership.player_id == player_id, TeamMembership.is_active.is_(True))
            .order_by(Team.name)
        ).scalars()
    )


def list_players(
    db: Session,
    team_id: Optional[str] = None,
    status: Optional[PlayerStatus] = None,
    position: Optional[Position] = None,
) -> List[Dict[str, Any]]:
    stmt = select(Player).order_by(Player.last_name, Player.first_name)
    if status:
        stmt = stmt.where(Player.status == status)
    if position:
        stmt = stmt.where(Player.position == position)
    if team_id:
        stmt = stmt.where(
            Player.memberships.any(
                (TeamMembership.team_id == team_id) & TeamMembership.is_active.is_(True)
            )
        )
    players = db.execute(stmt).scalars().all()
    return [{"player": p, "teams": _active_teams(db, p.id)} for p in players]


def get_player(db: Session, player_id: str) -> Dict[str, Any]:
    player = db.get(Player, player_id)
    if player is None:
        raise NotFoundError("Player")
    return {"player": player, "teams": _active_teams(db, player.id)}


def create_player(db: Session, data: PlayerCreate) -> Player:
    player = Player(**data.model_dump())
    db.add(player)
    db.commit()
    logger.info("player created id=%s", player.id)
    return player


def update_player(db: Session, player_id: str, data: PlayerUpdate) -> Player:
    player = db.get(Player, player_id)
    if player is None:
        raise NotFoundError("Player")
    for field, value in data.model_dump(exclude_unset=True, exclude_none=True).items():
        setattr(player, field, value)
    db.commit()
    return player


def deactivate_player(db: Session, player_id: str) -> Player:
    """Players are never hard-deleted; they go INACTIVE."""
    player = db.get(Player, player_id)
    if player is None:
        raise NotFoundError("Player")
    player.status = PlayerStatus.INACTIVE
    db.commit()
    logger.info("player %s deactivated", player.id)
    return player

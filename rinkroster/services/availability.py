# rinkroster/services/availability.py
"""
Per-game availability responses and the coach-facing summary.

Advisory only: nothing in the roster lifecycle reads these rows, so a
player marked UNAVAILABLE can still be rostered.
"""
from __future__ import annotations

import logging
from typing import Dict, List, Optional

from sqlalchemy import select
from sqlalchemy.orm import Session, selectinload

from rinkroster.core.clock import Clock, system_clock
from rinkroster.core.errors import NotFoundError, ValidationError
from rinkroster.db.models import (
    FREED_STATUSES,
    AvailabilityStatus,
    Game,
    Player,
    PlayerAvailability,
    TeamMembership,
)
from rinkroster.services.games import get_game_row

logger = logging.getLogger(__name__)

# PENDING is what a player is before answering; it is never written
WRITABLE_STATUSES = (AvailabilityStatus.AVAILABLE, AvailabilityStatus.UNAVAILABLE, AvailabilityStatus.MAYBE)


def set_availability(
    db: Session,
    player_id: str,
    game_id: str,
    status: AvailabilityStatus,
    note: Optional[str] = None,
    *,
    clock: Clock = system_clock,
) -> PlayerAvailability:
    """
    Upsert the player's response. Last response wins and responded_at is
    refreshed every time; a re-answer without a note keeps the stored one.
    """
    status = AvailabilityStatus(status)
    if status not in WRITABLE_STATUSES:
        raise ValidationError(f"Availability status must be one of {', '.join(s.value for s in WRITABLE_STATUSES)}")

    game = get_game_row(db, game_id)
    if db.get(Player, player_id) is None:
        raise NotFoundError("Player")

    row = db.execute(
        select(PlayerAvailability).where(
            PlayerAvailability.player_id == player_id,
            PlayerAvailability.game_id == game.id,
        )
    ).scalar_one_or_none()
    if row is None:
        row = PlayerAvailability(player_id=player_id, game_id=game.id)
        db.add(row)
    row.status = status
    if note is not None:
        row.note = note
    row.responded_at = clock.now()
    db.commit()
    logger.info("availability game=%s player=%s status=%s", game.id, player_id, status.value)
    return row


def get_game_availability(db: Session, game_id: str) -> List[PlayerAvailability]:
    get_game_row(db, game_id)
    return list(
        db.execute(
            select(PlayerAvailability)
            .join(PlayerAvailability.player)
            .where(PlayerAvailability.game_id == game_id)
            .options(selectinload(PlayerAvailability.player))
            .order_by(Player.last_name, Player.first_name)
        ).scalars()
    )


def get_player_availability(
    db: Session,
    player_id: str,
    upcoming: bool = True,
    *,
    clock: Clock = system_clock,
) -> List[PlayerAvailability]:
    """A player's responses; with ``upcoming`` only future games that are still on."""
    if db.get(Player, player_id) is None:
        raise NotFoundError("Player")

    stmt = (
        select(PlayerAvailability)
        .join(PlayerAvailability.game)
        .where(PlayerAvailability.player_id == player_id)
        .options(selectinload(PlayerAvailability.game).selectinload(Game.team))
        .order_by(Game.start_time)
    )
    if upcoming:
        stmt = stmt.where(Game.start_time >= clock.now(), Game.status.not_in(FREED_STATUSES))
    return list(db.execute(stmt).scalars())


def get_summary(db: Session, game_id: str) -> Dict[str, int]:
    """
    Counts for one game. ``total`` is the team's active membership at query
    time; ``pending`` is the members who never answered, whatever the
    other players' latest answers are.
    """
    game = get_game_row(db, game_id)

    member_ids = set(
        db.execute(
            select(TeamMembership.player_id).where(
                TeamMembership.team_id == game.team_id,
                TeamMembership.is_active.is_(True),
            )
        ).scalars()
    )
    rows = db.execute(
        select(PlayerAvailability.player_id, PlayerAvailability.status).where(
            PlayerAvailability.game_id == game.id
        )
    ).all()

    responded = {pid for pid, _ in rows}
    counts = {s: 0 for s in AvailabilityStatus}
    for _, status in rows:
        counts[status] += 1

    return {
        "total": len(member_ids),
        "available": counts[AvailabilityStatus.AVAILABLE],
        "unavailable": counts[AvailabilityStatus.UNAVAILABLE],
        "maybe": counts[AvailabilityStatus.MAYBE],
        "pending": len(member_ids - responded),
    }

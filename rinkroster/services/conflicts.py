# rinkroster/services/conflicts.py
"""
Scheduling-conflict detection.

A player's time is the shared resource: every roster row on a game that is
not cancelled/postponed commits the player to that game's half-open
interval ``[start_time, end_time)``. Two intervals overlap iff
``s1 < e2 and s2 < e1``, so back-to-back games (one ending exactly when the
next starts) never conflict.

Everything here is read-only.
"""
from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime, timedelta
from typing import Any, Dict, Iterable, List, Optional

from sqlalchemy import select
from sqlalchemy.orm import Session, contains_eager

from rinkroster.core.clock import to_utc_naive
from rinkroster.core.config import settings
from rinkroster.core.errors import ValidationError
from rinkroster.db.models import FREED_STATUSES, Game, GameRoster


@dataclass(frozen=True)
class ConflictInfo:
    player_id: str
    game_id: str
    team_name: str
    opponent: str
    start_time: datetime
    end_time: datetime

    def to_dict(self) -> Dict[str, Any]:
        return {
            "player_id": self.player_id,
            "game_id": self.game_id,
            "team_name": self.team_name,
            "opponent": self.opponent,
            "start_time": self.start_time.isoformat(),
            "end_time": self.end_time.isoformat(),
        }


def default_end_time(start: datetime, minutes: Optional[int] = None) -> datetime:
    """End of a game whose end time was not given (2.5h unless configured otherwise)."""
    return start + timedelta(minutes=minutes or settings.DEFAULT_GAME_DURATION_MINUTES)


def check_interval(start: datetime, end: datetime) -> tuple[datetime, datetime]:
    start, end = to_utc_naive(start), to_utc_naive(end)
    if end <= start:
        raise ValidationError("end_time must be after start_time")
    return start, end


def describe_conflict(team_name: str, opponent: str, start_time: datetime) -> str:
    return f"Player is already rostered for {team_name} vs {opponent} at {start_time.isoformat()}"


def _overlapping_rows(
    db: Session,
    player_ids: List[str],
    start: datetime,
    end: datetime,
    exclude_game_id: Optional[str],
):
    # One query for the whole batch: every counted commitment that overlaps [start, end)
    stmt = (
        select(GameRoster.player_id, Game)
        .join(Game, GameRoster.game_id == Game.id)
        .join(Game.team)
        .options(contains_eager(Game.team))
        .where(GameRoster.player_id.in_(player_ids))
        .where(Game.status.not_in(FREED_STATUSES))
        .where(Game.start_time < end)
        .where(Game.end_time > start)
        .order_by(GameRoster.player_id, Game.start_time, Game.id)
    )
    if exclude_game_id:
        stmt = stmt.where(Game.id != exclude_game_id)
    return db.execute(stmt).all()


def find_conflict(
    db: Session,
    player_id: str,
    start: datetime,
    end: datetime,
    exclude_game_id: Optional[str] = None,
) -> Optional[Game]:
    """Earliest counted game of ``player_id`` overlapping ``[start, end)``, or None."""
    start, end = check_interval(start, end)
    rows = _overlapping_rows(db, [player_id], start, end, exclude_game_id)
    return rows[0][1] if rows else None


def find_conflicts_for_many(
    db: Session,
    player_ids: Iterable[str],
    start: datetime,
    end: datetime,
    exclude_game_id: Optional[str] = None,
) -> Dict[str, ConflictInfo]:
    """
    Batch form of :func:`find_conflict`. Returns one entry (the earliest
    overlapping game) per conflicting player; players without conflicts are
    absent from the map.
    """
    start, end = check_interval(start, end)
    ids = list(dict.fromkeys(player_ids))
    if not ids:
        return {}

    out: Dict[str, ConflictInfo] = {}
    for pid, game in _overlapping_rows(db, ids, start, end, exclude_game_id):
        if pid in out:
            continue
        out[pid] = ConflictInfo(
            player_id=pid,
            game_id=game.id,
            team_name=game.team.name,
            opponent=game.opponent,
            start_time=game.start_time,
            end_time=game.end_time,
        )
    return out

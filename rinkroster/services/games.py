# rinkroster/services/games.py
"""
Games and the roster lifecycle.

Every roster row is created or deleted here and nowhere else. A game's
roster is either open (``roster_locked=False``, the initial state) or
locked; additions and removals require it to be open, and every addition
or schedule edit goes through the conflict detector first.

Check-then-write sequences take a row lock on the game, then on the
player(s) whose time they check (the added player, or every rostered
player of a rescheduled game), so concurrent requests touching the same
game or player are serialized for the rest of the transaction. File-backed
SQLite has no row locks; its transactions start with BEGIN IMMEDIATE
instead (see rinkroster.db.engine). The unique (game, player) constraint
backs up duplicate detection.
"""
from __future__ import annotations

import logging
from datetime import datetime
from typing import Any, Dict, List, Optional

from sqlalchemy import func, select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session, selectinload

from rinkroster.core.clock import to_utc_naive
from rinkroster.core.errors import (
    AlreadyRosteredError,
    ConflictError,
    NotFoundError,
    NotOnTeamError,
    RosterLockedError,
)
from rinkroster.db.models import (
    FREED_STATUSES,
    Game,
    GameRoster,
    GameStatus,
    Player,
    PlayerAvailability,
    Team,
    TeamMembership,
)
from rinkroster.schemas.game import GameCreate, GameQuery, GameUpdate
from rinkroster.services.conflicts import (
    check_interval,
    default_end_time,
    describe_conflict,
    find_conflict,
    find_conflicts_for_many,
)

logger = logging.getLogger(__name__)


# ---------------- lookups ----------------

def get_game_row(db: Session, game_id: str, *, for_update: bool = False) -> Game:
    stmt = select(Game).where(Game.id == game_id)
    if for_update:
        stmt = stmt.with_for_update().execution_options(populate_existing=True)
    game = db.execute(stmt).scalar_one_or_none()
    if game is None:
        raise NotFoundError("Game")
    return game


def _get_player(db: Session, player_id: str, *, for_update: bool = False) -> Player:
    stmt = select(Player).where(Player.id == player_id)
    if for_update:
        stmt = stmt.with_for_update()
    player = db.execute(stmt).scalar_one_or_none()
    if player is None:
        raise NotFoundError("Player")
    return player


def _roster_entry(db: Session, game_id: str, player_id: str) -> Optional[GameRoster]:
    return db.execute(
        select(GameRoster).where(GameRoster.game_id == game_id, GameRoster.player_id == player_id)
    ).scalar_one_or_none()


def _is_counted(status: GameStatus) -> bool:
    return status not in FREED_STATUSES


# ---------------- games ----------------

def create_game(db: Session, data: GameCreate) -> Game:
    if db.get(Team, data.team_id) is None:
        raise NotFoundError("Team")

    start = to_utc_naive(data.start_time)
    end = to_utc_naive(data.end_time) if data.end_time else default_end_time(start)
    start, end = check_interval(start, end)

    game = Game(
        team_id=data.team_id,
        opponent=data.opponent,
        location=data.location,
        game_type=data.game_type,
        is_home=data.is_home,
        start_time=start,
        end_time=end,
        status=GameStatus.SCHEDULED,
        roster_locked=False,
    )
    db.add(game)
    db.commit()
    logger.info("game created id=%s team=%s %s-%s", game.id, game.team_id, start.isoformat(), end.isoformat())
    return game


def list_games(db: Session, query: Optional[GameQuery] = None) -> List[Dict[str, Any]]:
    query = query or GameQuery()
    roster_count = (
        select(func.count(GameRoster.id))
        .where(GameRoster.game_id == Game.id)
        .correlate(Game)
        .scalar_subquery()
    )
    stmt = select(Game, roster_count).options(selectinload(Game.team)).order_by(Game.start_time, Game.id)
    if query.team_id:
        stmt = stmt.where(Game.team_id == query.team_id)
    if query.status:
        stmt = stmt.where(Game.status == query.status)
    if query.start_from:
        stmt = stmt.where(Game.start_time >= to_utc_naive(query.start_from))
    if query.start_to:
        stmt = stmt.where(Game.start_time <= to_utc_naive(query.start_to))

    out: List[Dict[str, Any]] = []
    for game, count in db.execute(stmt).all():
        out.append({"game": game, "team": game.team, "roster_count": count or 0})
    return out


def get_game(db: Session, game_id: str) -> Dict[str, Any]:
    """Game with its team, roster, lineup and availability responses."""
    from rinkroster.services.lineups import get_lineup

    game = get_game_row(db, game_id)
    availabilities = db.execute(
        select(PlayerAvailability)
        .join(PlayerAvailability.player)
        .where(PlayerAvailability.game_id == game_id)
        .options(selectinload(PlayerAvailability.player))
        .order_by(Player.last_name, Player.first_name)
    ).scalars().all()
    return {
        "game": game,
        "team": game.team,
        "roster": get_roster(db, game_id),
        "lineup": get_lineup(db, game_id),
        "availabilities": list(availabilities),
    }


def update_game(db: Session, game_id: str, data: GameUpdate) -> Game:
    """
    Edit any game field. Schedule changes, and moving a cancelled/postponed
    game back into a counted status, re-check every rostered player first.
    """
    game = get_game_row(db, game_id, for_update=True)
    changes = data.model_dump(exclude_unset=True, exclude_none=True)

    new_start = changes.pop("start_time", None)
    new_end = changes.pop("end_time", None)
    new_status = changes.pop("status", None)

    if new_start is not None or new_end is not None or new_status is not None:
        _reschedule(db, game, new_start, new_end, new_status)

    for field, value in changes.items():
        setattr(game, field, value)

    db.commit()
    return game


def update_game_time(
    db: Session,
    game_id: str,
    new_start: Optional[datetime] = None,
    new_end: Optional[datetime] = None,
) -> Game:
    game = get_game_row(db, game_id, for_update=True)
    _reschedule(db, game, new_start, new_end, None)
    db.commit()
    return game


def _reschedule(
    db: Session,
    game: Game,
    new_start: Optional[datetime],
    new_end: Optional[datetime],
    new_status: Optional[GameStatus],
) -> None:
    start = to_utc_naive(new_start) if new_start is not None else game.start_time
    if new_end is not None:
        end = to_utc_naive(new_end)
    elif new_start is not None:
        end = default_end_time(start)
    else:
        end = game.end_time
    start, end = check_interval(start, end)

    status = new_status if new_status is not None else game.status
    time_changed = (start, end) != (game.start_time, game.end_time)
    reactivated = not _is_counted(game.status) and _is_counted(status)

    # A freed game holds nobody's time, so only re-check when the result counts
    if _is_counted(status) and (time_changed or reactivated):
        ensure_roster_free(db, game, start, end)

    if time_changed:
        logger.info(
            "game %s rescheduled %s-%s -> %s-%s",
            game.id, game.start_time.isoformat(), game.end_time.isoformat(), start.isoformat(), end.isoformat(),
        )
    game.start_time = start
    game.end_time = end
    if status != game.status:
        logger.info("game %s status %s -> %s", game.id, game.status.value, status.value)
        game.status = status


def ensure_roster_free(db: Session, game: Game, start: datetime, end: datetime) -> None:
    """Raise ConflictError listing every rostered player busy elsewhere during [start, end)."""
    player_ids = db.execute(
        select(GameRoster.player_id).where(GameRoster.game_id == game.id)
    ).scalars().all()
    if player_ids:
        # add_to_roster locks the player too, so a concurrent add of any of
        # these players elsewhere waits for this transaction
        db.execute(
            select(Player.id).where(Player.id.in_(player_ids)).order_by(Player.id).with_for_update()
        ).all()
    conflicts = find_conflicts_for_many(db, player_ids, start, end, exclude_game_id=game.id)
    if not conflicts:
        return

    names = {
        p.id: p.full_name
        for p in db.execute(select(Player).where(Player.id.in_(list(conflicts)))).scalars()
    }
    details = []
    for pid, info in conflicts.items():
        d = info.to_dict()
        d["player_name"] = names.get(pid)
        details.append(d)
    details.sort(key=lambda d: (d["player_name"] or "", d["player_id"]))

    logger.warning("game %s schedule change rejected: %d conflicting player(s)", game.id, len(conflicts))
    raise ConflictError(
        f"Cannot change game time: {len(conflicts)} rostered player(s) have conflicts "
        f"({', '.join(d['player_name'] or d['player_id'] for d in details)})",
        conflicts=details,
    )


def cancel_game(db: Session, game_id: str) -> Game:
    """Soft delete. Roster/stat rows stay queryable; the players' time is released."""
    game = get_game_row(db, game_id, for_update=True)
    game.status = GameStatus.CANCELLED
    db.commit()
    logger.info("game %s cancelled", game.id)
    return game


# ---------------- roster ----------------

def get_roster(db: Session, game_id: str) -> List[Player]:
    get_game_row(db, game_id)
    return list(
        db.execute(
            select(Player)
            .join(GameRoster, GameRoster.player_id == Player.id)
            .where(GameRoster.game_id == game_id)
            .order_by(Player.last_name, Player.first_name)
        ).scalars()
    )


def add_to_roster(db: Session, game_id: str, player_id: str) -> GameRoster:
    game = get_game_row(db, game_id, for_update=True)
    if game.roster_locked:
        raise RosterLockedError(game.id)

    player = _get_player(db, player_id, for_update=True)

    membership = db.execute(
        select(TeamMembership).where(
            TeamMembership.player_id == player.id,
            TeamMembership.team_id == game.team_id,
            TeamMembership.is_active.is_(True),
        )
    ).scalar_one_or_none()
    if membership is None:
        raise NotOnTeamError(player.id, game.team_id)

    if _roster_entry(db, game.id, player.id) is not None:
        raise AlreadyRosteredError(game.id, player.id)

    # The player is not on this game yet, so nothing needs excluding
    conflict = find_conflict(db, player.id, game.start_time, game.end_time)
    if conflict is not None:
        logger.warning("roster add rejected game=%s player=%s conflicts with game=%s", game.id, player.id, conflict.id)
        raise ConflictError(
            describe_conflict(conflict.team.name, conflict.opponent, conflict.start_time),
            conflicts=[{
                "player_id": player.id,
                "game_id": conflict.id,
                "team_name": conflict.team.name,
                "opponent": conflict.opponent,
                "start_time": conflict.start_time.isoformat(),
                "end_time": conflict.end_time.isoformat(),
            }],
        )

    entry = GameRoster(game_id=game.id, player_id=player.id)
    db.add(entry)
    try:
        db.flush()
    except IntegrityError as exc:
        # lost a race with a concurrent add of the same pair
        db.rollback()
        raise AlreadyRosteredError(game_id, player_id) from exc
    db.commit()
    logger.info("roster add game=%s player=%s", game.id, player.id)
    return entry


def remove_from_roster(db: Session, game_id: str, player_id: str) -> None:
    game = get_game_row(db, game_id, for_update=True)
    if game.roster_locked:
        raise RosterLockedError(game.id)

    entry = _roster_entry(db, game.id, player_id)
    if entry is None:
        raise NotFoundError("Roster entry")
    db.delete(entry)
    db.commit()
    logger.info("roster remove game=%s player=%s", game.id, player_id)


def lock_roster(db: Session, game_id: str) -> Game:
    """open -> locked. Locking a locked roster is a no-op."""
    return _set_locked(db, game_id, True)


def unlock_roster(db: Session, game_id: str) -> Game:
    """locked -> open. Unlocking an open roster is a no-op."""
    return _set_locked(db, game_id, False)


def _set_locked(db: Session, game_id: str, locked: bool) -> Game:
    game = get_game_row(db, game_id, for_update=True)
    if game.roster_locked != locked:
        game.roster_locked = locked
        logger.info("game %s roster %s", game.id, "locked" if locked else "unlocked")
    db.commit()
    return game

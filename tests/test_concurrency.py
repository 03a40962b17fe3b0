"""
Interleaved writers. Each test runs a second session in the middle of a
check-then-write sequence, right after its conflict scan.
"""

from datetime import datetime

import pytest
from sqlalchemy import func, select
from sqlalchemy.exc import OperationalError
from sqlalchemy.orm import sessionmaker

from rinkroster.core.errors import AlreadyRosteredError, ConflictError
from rinkroster.db.engine import build_engine
from rinkroster.db.models import Base, Game, GameRoster, TeamMembership
from rinkroster.services import games as games_svc
from rinkroster.services import teams as teams_svc

DAY = datetime(2025, 1, 10)


def at(hour: int, minute: int = 0) -> datetime:
    return DAY.replace(hour=hour, minute=minute)


@pytest.fixture
def file_sessions(tmp_path):
    # A real file so each session gets its own connection and its own lock
    eng = build_engine(f"sqlite:///{tmp_path / 'rink.db'}", connect_args={"timeout": 0.2})
    Base.metadata.create_all(eng)
    yield sessionmaker(bind=eng, autoflush=False, expire_on_commit=False, future=True)
    eng.dispose()


@pytest.fixture
def two_games(file_sessions, make_for):
    """G1 (Ice Hawks) 18:00-20:00 with Y rostered, G2 (Polar Bears) 21:00-23:00."""
    with file_sessions() as s:
        make = make_for(s)
        hawks = make.team("Ice Hawks")
        bears = make.team("Polar Bears")
        y = make.player(hawks, bears, first_name="Yan", last_name="Berg")
        g1 = make.game(hawks, at(18), at(20))
        g2 = make.game(bears, at(21), at(23))
        games_svc.add_to_roster(s, g1.id, y.id)
        return g1.id, g2.id, y.id


def _bookings(session_factory, player_id):
    with session_factory() as s:
        return s.execute(
            select(Game.start_time, Game.end_time)
            .join(GameRoster, GameRoster.game_id == Game.id)
            .where(GameRoster.player_id == player_id)
            .order_by(Game.start_time)
        ).all()


def test_roster_add_waits_for_reschedule(file_sessions, two_games, monkeypatch):
    g1, g2, y = two_games
    real = games_svc.find_conflicts_for_many
    blocked = []

    def scan_then_add(db, *args, **kwargs):
        found = real(db, *args, **kwargs)
        other = file_sessions()
        try:
            games_svc.add_to_roster(other, g2, y)
        except OperationalError:
            blocked.append(g2)
        finally:
            other.close()
        return found

    monkeypatch.setattr(games_svc, "find_conflicts_for_many", scan_then_add)
    with file_sessions() as s:
        games_svc.update_game_time(s, g1, at(20, 30), at(22, 30))
    monkeypatch.undo()

    assert blocked == [g2]
    # retried after the move, the add now sees the new time
    with file_sessions() as s:
        with pytest.raises(ConflictError):
            games_svc.add_to_roster(s, g2, y)
    assert _bookings(file_sessions, y) == [(at(20, 30), at(22, 30))]


def test_reschedule_waits_for_roster_add(file_sessions, two_games, monkeypatch):
    g1, g2, y = two_games
    real = games_svc.find_conflict
    blocked = []

    def scan_then_move(db, *args, **kwargs):
        found = real(db, *args, **kwargs)
        other = file_sessions()
        try:
            games_svc.update_game_time(other, g1, at(20, 30), at(22, 30))
        except OperationalError:
            blocked.append(g1)
        finally:
            other.close()
        return found

    monkeypatch.setattr(games_svc, "find_conflict", scan_then_move)
    with file_sessions() as s:
        games_svc.add_to_roster(s, g2, y)
    monkeypatch.undo()

    assert blocked == [g1]
    with file_sessions() as s:
        with pytest.raises(ConflictError):
            games_svc.update_game_time(s, g1, at(20, 30), at(22, 30))
    assert _bookings(file_sessions, y) == [(at(18), at(20)), (at(21), at(23))]


def test_duplicate_insert_race_is_already_rostered(db, make, session_factory, monkeypatch):
    team = make.team()
    x = make.player(team)
    game = make.game(team, at(18))
    real = games_svc.find_conflict

    def scan_then_insert(session, player_id, *args, **kwargs):
        found = real(session, player_id, *args, **kwargs)
        other = session_factory()
        try:
            other.add(GameRoster(game_id=game.id, player_id=player_id))
            other.commit()
        finally:
            other.close()
        return found

    monkeypatch.setattr(games_svc, "find_conflict", scan_then_insert)
    with pytest.raises(AlreadyRosteredError):
        games_svc.add_to_roster(db, game.id, x.id)
    monkeypatch.undo()

    count = db.execute(select(func.count(GameRoster.id)).where(GameRoster.game_id == game.id)).scalar_one()
    assert count == 1


def test_duplicate_join_race_is_a_conflict(db, make, session_factory, monkeypatch):
    team = make.team()
    p = make.player()
    real = teams_svc._membership

    def lookup_then_insert(session, team_id, player_id):
        found = real(session, team_id, player_id)
        other = session_factory()
        try:
            other.add(TeamMembership(player_id=player_id, team_id=team_id, is_active=True))
            other.commit()
        finally:
            other.close()
        return found

    monkeypatch.setattr(teams_svc, "_membership", lookup_then_insert)
    with pytest.raises(ConflictError):
        teams_svc.add_player(db, team.id, p.id)
    monkeypatch.undo()

    assert [m.id for m in teams_svc.get_players(db, team.id)] == [p.id]

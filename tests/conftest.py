"""Shared fixtures: in-memory database, fixed clock, entity factories, HTTP client."""

import os

# Force test-safe defaults before the app modules read settings
os.environ.setdefault("APP_ENV", "test")
os.environ.setdefault("DATABASE_URL", "sqlite://")
os.environ.setdefault("LOG_LEVEL", "WARNING")

from datetime import datetime, timedelta
from typing import Optional

import pytest
from fastapi.testclient import TestClient
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from rinkroster.db.engine import build_engine
from rinkroster.db.models import Base, Player, PlayerStatus, Position, Team
from rinkroster.deps import get_clock
from rinkroster.db.session import get_db
from rinkroster.schemas.game import GameCreate
from rinkroster.services import games as games_svc
from rinkroster.services import teams as teams_svc


class FixedClock:
    def __init__(self, now: datetime):
        self._now = now

    def now(self) -> datetime:
        return self._now

    def advance(self, **kwargs) -> datetime:
        self._now = self._now + timedelta(**kwargs)
        return self._now


@pytest.fixture
def engine():
    eng = build_engine("sqlite://", poolclass=StaticPool)
    Base.metadata.create_all(eng)
    yield eng
    Base.metadata.drop_all(eng)
    eng.dispose()


@pytest.fixture
def session_factory(engine):
    return sessionmaker(bind=engine, autoflush=False, expire_on_commit=False, future=True)


@pytest.fixture
def db(session_factory):
    session = session_factory()
    try:
        yield session
    finally:
        session.close()


@pytest.fixture
def clock():
    return FixedClock(datetime(2025, 1, 1, 12, 0))


class Factory:
    def __init__(self, db):
        self.db = db
        self._n = 0

    def team(self, name: str = "Ice Hawks", short_name: Optional[str] = None) -> Team:
        team = Team(name=name, short_name=short_name or name[:3].upper())
        self.db.add(team)
        self.db.commit()
        return team

    def player(
        self,
        *teams: Team,
        first_name: str = "Sam",
        last_name: Optional[str] = None,
        position: Position = Position.CENTER,
    ) -> Player:
        self._n += 1
        player = Player(
            first_name=first_name,
            last_name=last_name or f"Skater{self._n}",
            position=position,
            status=PlayerStatus.ACTIVE,
        )
        self.db.add(player)
        self.db.commit()
        for team in teams:
            teams_svc.add_player(self.db, team.id, player.id)
        return player

    def game(self, team: Team, start: datetime, end: Optional[datetime] = None, opponent: str = "Wolves"):
        return games_svc.create_game(
            self.db,
            GameCreate(team_id=team.id, opponent=opponent, location="Main Rink", start_time=start, end_time=end),
        )


@pytest.fixture
def make(db):
    return Factory(db)


@pytest.fixture
def make_for():
    """Factory for a session the test opens itself."""
    return Factory


@pytest.fixture
def client(session_factory, clock):
    from rinkroster.main import app

    def _override_db():
        session = session_factory()
        try:
            yield session
            session.commit()
        except Exception:
            session.rollback()
            raise
        finally:
            session.close()

    app.dependency_overrides[get_db] = _override_db
    app.dependency_overrides[get_clock] = lambda: clock
    try:
        yield TestClient(app)
    finally:
        app.dependency_overrides.clear()

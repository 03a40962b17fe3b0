import pytest
from sqlalchemy import select

from rinkroster.core.errors import ConflictError, NotFoundError
from rinkroster.db.models import PlayerStatus, Position, TeamMembership
from rinkroster.schemas.league import LeagueCreate, LeagueUpdate
from rinkroster.schemas.player import PlayerCreate, PlayerUpdate
from rinkroster.schemas.team import TeamCreate, TeamUpdate
from rinkroster.services import leagues as leagues_svc
from rinkroster.services import players as players_svc
from rinkroster.services import teams as teams_svc


def test_membership_is_soft_deleted_and_reactivated(db, make):
    team = make.team()
    p = make.player(team)

    teams_svc.remove_player(db, team.id, p.id)
    rows = db.execute(select(TeamMembership).where(TeamMembership.player_id == p.id)).scalars().all()
    assert len(rows) == 1 and rows[0].is_active is False
    assert teams_svc.get_players(db, team.id) == []

    m = teams_svc.add_player(db, team.id, p.id)
    assert m.id == rows[0].id and m.is_active is True
    assert [x.id for x in teams_svc.get_players(db, team.id)] == [p.id]


def test_adding_active_member_twice_conflicts(db, make):
    team = make.team()
    p = make.player(team)
    with pytest.raises(ConflictError):
        teams_svc.add_player(db, team.id, p.id)


def test_membership_errors(db, make):
    team = make.team()
    p = make.player()
    with pytest.raises(NotFoundError):
        teams_svc.add_player(db, "missing", p.id)
    with pytest.raises(NotFoundError):
        teams_svc.add_player(db, team.id, "missing")
    with pytest.raises(NotFoundError) as info:
        teams_svc.remove_player(db, team.id, p.id)
    assert info.value.resource == "Team membership"


def test_team_listing_counts_active_players(db, make):
    hawks = make.team("Ice Hawks")
    bears = make.team("Polar Bears")
    a = make.player(hawks, bears)
    make.player(hawks)
    teams_svc.remove_player(db, bears.id, a.id)

    rows = {r["team"].name: r for r in teams_svc.list_teams(db)}
    assert rows["Ice Hawks"]["player_count"] == 2
    assert rows["Polar Bears"]["player_count"] == 0


def test_create_and_update_team(db):
    team = teams_svc.create_team(db, TeamCreate(name="Ice Hawks", short_name="HAWK", primary_color="#112233"))
    team = teams_svc.update_team(db, team.id, TeamUpdate(short_name="IH"))
    assert (team.name, team.short_name, team.primary_color) == ("Ice Hawks", "IH", "#112233")


def test_player_crud_and_soft_delete(db, make):
    team = make.team()
    p = players_svc.create_player(db, PlayerCreate(first_name="Ann", last_name="Cole", position=Position.GOALIE))
    teams_svc.add_player(db, team.id, p.id)

    p = players_svc.update_player(db, p.id, PlayerUpdate(jersey_number=31))
    assert p.jersey_number == 31

    players_svc.deactivate_player(db, p.id)
    data = players_svc.get_player(db, p.id)
    assert data["player"].status == PlayerStatus.INACTIVE
    assert [t.id for t in data["teams"]] == [team.id]


def test_list_players_filters(db, make):
    hawks = make.team("Ice Hawks")
    bears = make.team("Polar Bears")
    make.player(hawks, last_name="Avery", position=Position.GOALIE)
    make.player(bears, last_name="Berg", position=Position.DEFENSE)

    names = lambda rows: [r["player"].last_name for r in rows]
    assert names(players_svc.list_players(db)) == ["Avery", "Berg"]
    assert names(players_svc.list_players(db, team_id=bears.id)) == ["Berg"]
    assert names(players_svc.list_players(db, position=Position.GOALIE)) == ["Avery"]


def test_unknown_player(db):
    with pytest.raises(NotFoundError):
        players_svc.get_player(db, "missing")
    with pytest.raises(NotFoundError):
        players_svc.deactivate_player(db, "missing")


def test_league_crud_and_team_counts(db, make):
    league = leagues_svc.create_league(db, LeagueCreate(name="Metro Hockey League", short_name="MHL"))
    empty = leagues_svc.create_league(db, LeagueCreate(name="Adult Rec", short_name="REC"))
    hawks = teams_svc.create_team(db, TeamCreate(name="Ice Hawks", short_name="HAWK", league_id=league.id))
    make.player(hawks)
    make.team("Polar Bears")

    rows = {r["league"].short_name: r["team_count"] for r in leagues_svc.list_leagues(db)}
    assert rows == {"MHL": 1, "REC": 0}

    detail = leagues_svc.get_league_detail(db, league.id)
    assert [(r["team"].name, r["player_count"]) for r in detail["teams"]] == [("Ice Hawks", 1)]
    assert leagues_svc.get_league_detail(db, empty.id)["teams"] == []

    league = leagues_svc.update_league(db, league.id, LeagueUpdate(description="Tuesday nights"))
    assert (league.name, league.description) == ("Metro Hockey League", "Tuesday nights")


def test_deleting_a_league_detaches_its_teams(db):
    league = leagues_svc.create_league(db, LeagueCreate(name="Metro Hockey League", short_name="MHL"))
    hawks = teams_svc.create_team(db, TeamCreate(name="Ice Hawks", short_name="HAWK", league_id=league.id))

    leagues_svc.delete_league(db, league.id)
    db.refresh(hawks)
    assert hawks.league_id is None
    with pytest.raises(NotFoundError):
        leagues_svc.get_league(db, league.id)


def test_team_league_must_exist_and_can_be_cleared(db):
    with pytest.raises(NotFoundError) as info:
        teams_svc.create_team(db, TeamCreate(name="Ice Hawks", short_name="HAWK", league_id="missing"))
    assert info.value.resource == "League"

    league = leagues_svc.create_league(db, LeagueCreate(name="Metro Hockey League", short_name="MHL"))
    team = teams_svc.create_team(db, TeamCreate(name="Ice Hawks", short_name="HAWK"))
    team = teams_svc.update_team(db, team.id, TeamUpdate(league_id=league.id))
    assert team.league_id == league.id
    # leaving league_id out keeps it, an explicit null clears it
    team = teams_svc.update_team(db, team.id, TeamUpdate(short_name="IH"))
    assert team.league_id == league.id
    team = teams_svc.update_team(db, team.id, TeamUpdate(league_id=None))
    assert team.league_id is None

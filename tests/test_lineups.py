from datetime import datetime

import pytest

from rinkroster.core.errors import NotFoundError, ValidationError
from rinkroster.schemas.lineup import LineupConfig
from rinkroster.services import games as games_svc
from rinkroster.services.lineups import get_lineup, set_lineup

START = datetime(2025, 1, 10, 18, 0)


@pytest.fixture
def game(make):
    return make.game(make.team(), START)


def test_round_trip(db, game):
    cfg = LineupConfig(
        forward_lines=[["c1", "lw1", "rw1"], ["c2", "lw2", "rw2"]],
        defense_pairs=[["ld1", "rd1"]],
        goalies=["g1", "g2"],
    )
    set_lineup(db, game.id, cfg)
    assert get_lineup(db, game.id) == cfg


def test_round_trip_partial_and_dict_input(db, game):
    set_lineup(db, game.id, {"goalies": ["g1"], "forward_lines": []})
    assert get_lineup(db, game.id) == LineupConfig(goalies=["g1"], forward_lines=[])


def test_set_replaces_previous_lineup(db, game):
    set_lineup(db, game.id, LineupConfig(goalies=["g1"]))
    set_lineup(db, game.id, LineupConfig(goalies=["g2"], defense_pairs=[["d1", "d2"]]))
    assert get_lineup(db, game.id) == LineupConfig(goalies=["g2"], defense_pairs=[["d1", "d2"]])


def test_no_lineup_yet(db, game):
    assert get_lineup(db, game.id) is None


def test_unknown_game(db):
    with pytest.raises(NotFoundError):
        set_lineup(db, "missing", LineupConfig(goalies=["g1"]))


@pytest.mark.parametrize(
    "payload",
    [
        {"forward_lines": ["c1", "lw1"]},        # not a list of lists
        {"defense_pairs": [[]]},                 # empty group
        {"goalies": [""]},                       # blank id
        {"goalies": "g1"},                       # not a list
        {"power_play": [["a"]]},                 # unknown section
    ],
)
def test_malformed_lineup(db, game, payload):
    with pytest.raises(ValidationError):
        set_lineup(db, game.id, payload)


def test_players_need_not_be_rostered_by_default(db, game):
    set_lineup(db, game.id, LineupConfig(goalies=["nobody"]))
    assert get_lineup(db, game.id).goalies == ["nobody"]


def test_require_rostered_is_opt_in(db, make):
    team = make.team()
    p = make.player(team)
    game = make.game(team, START)
    games_svc.add_to_roster(db, game.id, p.id)

    set_lineup(db, game.id, LineupConfig(forward_lines=[[p.id]]), require_rostered=True)
    with pytest.raises(ValidationError) as info:
        set_lineup(db, game.id, LineupConfig(forward_lines=[[p.id, "ghost"]]), require_rostered=True)
    assert "ghost" in info.value.message
    assert get_lineup(db, game.id) == LineupConfig(forward_lines=[[p.id]])

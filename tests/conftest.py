"""
Shared pytest fixtures for golf trip scoring tests.
"""

import json
import os
import sys
from pathlib import Path
from unittest.mock import patch

import pytest

sys.path.insert(0, str(Path(__file__).parent.parent))

from trip_scoring.models import (
    Format, HandicapConfig, Hole, RoundScore, SideGamePlayer, TeamCombo, Tee
)

# Par 72, odd stroke indexes on the front nine, even on the back
PARS = [4, 4, 3, 5, 4, 4, 3, 4, 5, 4, 3, 5, 4, 4, 3, 4, 4, 5]
STROKE_INDEXES = [7, 11, 15, 1, 3, 13, 17, 5, 9, 8, 16, 2, 12, 4, 18, 10, 14, 6]


def make_holes():
    return tuple(
        Hole(number=i + 1, par=par, stroke_index=si)
        for i, (par, si) in enumerate(zip(PARS, STROKE_INDEXES))
    )


@pytest.fixture
def holes():
    """Standard 18 holes."""
    return make_holes()


@pytest.fixture
def flat_tee(holes):
    """Tee where course handicap equals index and rating equals par."""
    return Tee(slope=113, rating=72.0, holes=holes)


@pytest.fixture
def tee(holes):
    """A typical resort tee."""
    return Tee(slope=130, rating=71.2, holes=holes)


@pytest.fixture
def trip_config():
    """The handicap rules used on recent trips."""
    return HandicapConfig(
        percentage=80,
        max_handicap=24,
        off_the_low=True,
        team_combos={
            Format.FOURSOMES: TeamCombo(low_pct=60, high_pct=40),
            Format.SCRAMBLE: TeamCombo(low_pct=35, high_pct=15),
        },
        skins_team_combos={
            Format.FOURSOMES: TeamCombo(low_pct=50, high_pct=50),
        },
    )


@pytest.fixture
def side_game_players():
    """Four players, all in skins and TILT."""
    return [
        SideGamePlayer("p1", handicap_index=0.0, skins_opt_in=True, tilt_opt_in=True),
        SideGamePlayer("p2", handicap_index=0.0, skins_opt_in=True, tilt_opt_in=True),
        SideGamePlayer("p3", handicap_index=0.0, skins_opt_in=True, tilt_opt_in=True),
        SideGamePlayer("p4", handicap_index=0.0, skins_opt_in=True, tilt_opt_in=False),
    ]


def par_round(player_id, holes, overrides=None, match_id="", side=1):
    """Gross scores equal to par, with {hole: gross} overrides."""
    overrides = overrides or {}
    return [
        RoundScore(player_id, h.number, overrides.get(h.number, h.par), match_id, side)
        for h in holes
    ]


@pytest.fixture
def clean_env():
    """Environment with no trip scoring overrides."""
    keys = [
        "TRIP_SCORING_POINTS_FOR_WIN", "TRIP_SCORING_POINTS_FOR_HALF",
        "TRIP_SCORING_SKINS_FEE", "TRIP_SCORING_TILT_FEE",
        "TRIP_SCORING_SKINS_CARRYOVER", "TRIP_SCORING_TILT_CARRYOVER",
        "TRIP_SCORING_MAX_SCORE", "TRIP_SCORING_LOG_LEVEL",
    ]
    with patch.dict(os.environ, {key: "" for key in keys}, clear=False):
        yield


@pytest.fixture
def round_data():
    """Singles round document: p1 (scratch) vs p2 (10.0), p3 vs p4, everyone makes par."""
    holes = make_holes()
    return {
        "roundId": "R1",
        "format": "singles",
        "tee": {
            "slope": 113,
            "rating": 72.0,
            "holes": [{"number": h.number, "par": h.par, "strokeIndex": h.stroke_index} for h in holes],
        },
        "players": [
            {"id": "p1", "name": "Alice", "handicapIndex": 0.0, "skinsOptIn": True, "tiltOptIn": True},
            {"id": "p2", "name": "Bob", "handicapIndex": 10.0, "skinsOptIn": True, "tiltOptIn": True},
            {"id": "p3", "name": "Cara", "handicapIndex": 0.0, "skinsOptIn": True, "tiltOptIn": True},
            {"id": "p4", "name": "Dev", "handicapIndex": 0.0, "skinsOptIn": False, "tiltOptIn": False},
        ],
        "matches": [
            {"id": "m1", "side1": ["p1"], "side2": ["p2"]},
            {"id": "m2", "side1": ["p3"], "side2": ["p4"]},
        ],
        "scores": [
            {"player": pid, "hole": h.number, "gross": h.par}
            for pid in ("p1", "p2", "p3", "p4")
            for h in holes
        ],
        "handicapConfig": {"percentage": 100, "maxHandicap": None, "offTheLow": True},
        "skins": {"entryFee": 10},
        "tilt": {"entryFee": 20},
    }


@pytest.fixture
def round_file(tmp_path, round_data):
    """round_data written to disk."""
    path = tmp_path / "round1.json"
    path.write_text(json.dumps(round_data), encoding="utf-8")
    return path

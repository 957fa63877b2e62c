"""
Tests for handicap.py - Handicaps and stroke allocation.
"""

import sys
from pathlib import Path

import pytest

sys.path.insert(0, str(Path(__file__).parent.parent))

from trip_scoring.handicap import (
    adjusted_handicap, apply_max_score, build_hole_score, compute_match_handicaps,
    course_handicap, off_the_low, playing_handicap, receives_double_stroke,
    receives_stroke, round_half_up, skins_handicap, stroke_allocation,
    strokes_received, team_handicap, uses_team_handicap
)
from trip_scoring.models import Format, HandicapConfig, Hole, PlayerHandicapInput


class TestCourseHandicap:
    """Tests for course and adjusted handicaps."""

    def test_course_handicap_values(self):
        """Test known index/slope combinations."""
        assert course_handicap(15, 135) == 18
        assert course_handicap(12.4, 130) == 14
        assert course_handicap(30, 140) == 37

    def test_missing_index_plays_scratch(self):
        assert course_handicap(None, 130) == 0

    def test_halves_round_up(self):
        """Test .5 rounds up rather than to even."""
        assert course_handicap(0.5, 113) == 1
        assert course_handicap(2.5, 113) == 3
        assert round_half_up(-0.5) == 0

    def test_adjusted_rounds_up_percentage(self):
        assert adjusted_handicap(18, 80) == 15  # 14.4

    def test_adjusted_respects_cap(self):
        assert adjusted_handicap(37, 80, 24) == 24
        assert adjusted_handicap(20, 100, None) == 20


class TestSkinsHandicap:
    """Tests for the skins / TILT handicap formula."""

    def test_flat_tee(self):
        assert skins_handicap(10, 113, 72.0, 72) == 8
        assert skins_handicap(20, 113, 72.0, 72) == 16

    def test_rating_and_slope_adjustment(self):
        """(10 x 130/113 - 0.8) x 0.8 = 8.56, rounded up."""
        assert skins_handicap(10, 130, 71.2, 72) == 9

    def test_capped(self):
        assert skins_handicap(40, 113, 72.0, 72) == 24
        assert skins_handicap(40, 113, 72.0, 72, max_handicap=18) == 18

    def test_no_cap(self):
        assert skins_handicap(40, 113, 72.0, 72, max_handicap=None) == 32


class TestTeamHandicap:
    """Tests for combining a side's handicaps."""

    def test_foursomes_combo(self):
        assert team_handicap([10, 20], 60, 40) == 14

    def test_order_does_not_matter(self):
        assert team_handicap([20, 10], 60, 40) == team_handicap([10, 20], 60, 40)

    def test_scramble_combo_rounds_half_up(self):
        """3.5 + 3.0 = 6.5 rounds to 7."""
        assert team_handicap([10, 20], 35, 15) == 7

    def test_single_player_side(self):
        assert team_handicap([15], 60, 40) == 9

    def test_empty_side(self):
        assert team_handicap([], 60, 40) == 0


class TestOffTheLow:
    """Tests for normalising against the lowest handicap."""

    def test_playing_handicap_never_negative(self):
        assert playing_handicap(5, 8) == 0
        assert playing_handicap(12, 8) == 4

    def test_off_the_low(self):
        assert off_the_low({"a": 10, "b": 14, "c": 7}) == {"a": 3, "b": 7, "c": 0}

    def test_off_the_low_empty(self):
        assert off_the_low({}) == {}

    def test_uses_team_handicap(self, trip_config):
        assert uses_team_handicap(Format.FOURSOMES, trip_config)
        assert uses_team_handicap(Format.SCRAMBLE, trip_config)
        assert not uses_team_handicap(Format.FOURBALL, trip_config)
        assert not uses_team_handicap(Format.MODIFIED_ALT_SHOT, trip_config)


class TestStrokes:
    """Tests for stroke allocation."""

    def test_receives_stroke(self):
        assert receives_stroke(10, 10)
        assert not receives_stroke(10, 11)
        assert not receives_stroke(0, 1)
        assert not receives_stroke(-2, 1)

    def test_receives_double_stroke(self):
        assert receives_double_stroke(20, 2)
        assert not receives_double_stroke(20, 3)
        assert not receives_double_stroke(18, 1)

    def test_strokes_received(self):
        assert strokes_received(20, 1) == 2
        assert strokes_received(20, 5) == 1
        assert strokes_received(5, 6) == 0

    def test_stroke_allocation_hardest_holes(self, holes):
        """SI 1, 2, 3 are holes 4, 12 and 5."""
        assert stroke_allocation(3, holes) == [4, 5, 12]

    def test_stroke_allocation_double_strokes(self, holes):
        allocation = stroke_allocation(20, holes)
        assert len(allocation) == 20
        assert allocation.count(4) == 2
        assert allocation.count(12) == 2
        assert allocation.count(5) == 1

    def test_stroke_allocation_scratch(self, holes):
        assert stroke_allocation(0, holes) == []

    def test_stroke_allocation_matches_strokes_received(self, holes):
        for hdcp in (0, 7, 18, 25):
            allocation = stroke_allocation(hdcp, holes)
            for hole in holes:
                assert allocation.count(hole.number) == strokes_received(hdcp, hole.stroke_index)


class TestScores:
    """Tests for score capping and net scores."""

    def test_apply_max_score(self):
        assert apply_max_score(9, 4, 3) == 7
        assert apply_max_score(6, 4, 3) == 6
        assert apply_max_score(9, 4, None) == 9

    def test_build_hole_score_caps_before_strokes(self):
        hole = Hole(number=4, par=5, stroke_index=1)
        score = build_hole_score("p1", hole, 9, 20, max_score=3)
        assert score.gross_score == 8
        assert score.strokes_received == 2
        assert score.net_score == 6

    def test_build_hole_score_rejects_zero(self):
        with pytest.raises(ValueError):
            build_hole_score("p1", Hole(1, 4, 1), 0, 10)


class TestMatchHandicaps:
    """Tests for compute_match_handicaps."""

    def test_singles_off_the_low(self, flat_tee, trip_config):
        players = [PlayerHandicapInput("p1", 1, 10.0), PlayerHandicapInput("p2", 2, 20.0)]
        result = {c.player_id: c for c in compute_match_handicaps(players, Format.SINGLES, trip_config, flat_tee)}

        assert result["p1"].course_handicap == 10
        assert result["p1"].playing_handicap == 0
        assert result["p2"].course_handicap == 20
        assert result["p2"].playing_handicap == 8  # 16 - 8

    def test_fourball_uses_individual_handicaps(self, flat_tee, trip_config):
        players = [
            PlayerHandicapInput("a", 1, 10.0), PlayerHandicapInput("b", 1, 20.0),
            PlayerHandicapInput("c", 2, 5.0), PlayerHandicapInput("d", 2, 15.0),
        ]
        result = {c.player_id: c.playing_handicap
                  for c in compute_match_handicaps(players, Format.FOURBALL, trip_config, flat_tee)}
        # 8, 16, 4, 12 off the low of 4
        assert result == {"a": 4, "b": 12, "c": 0, "d": 8}

    def test_foursomes_team_handicap(self, flat_tee, trip_config):
        players = [
            PlayerHandicapInput("a", 1, 10.0), PlayerHandicapInput("b", 1, 20.0),
            PlayerHandicapInput("c", 2, 5.0), PlayerHandicapInput("d", 2, 30.0),
        ]
        result = {c.player_id: c.playing_handicap
                  for c in compute_match_handicaps(players, Format.FOURSOMES, trip_config, flat_tee)}
        # Side 1: 8x0.6 + 16x0.4 = 11. Side 2: 4x0.6 + 24x0.4 = 12.
        assert result == {"a": 0, "b": 0, "c": 1, "d": 1}

    def test_missing_index_is_zero(self, flat_tee, trip_config):
        players = [PlayerHandicapInput("p1", 1, None), PlayerHandicapInput("p2", 2, 10.0)]
        result = {c.player_id: c for c in compute_match_handicaps(players, "singles", trip_config, flat_tee)}
        assert result["p1"].handicap_index == 0.0
        assert result["p1"].course_handicap == 0
        assert result["p2"].playing_handicap == 8

    def test_without_off_the_low(self, flat_tee):
        config = HandicapConfig(percentage=100, off_the_low=False)
        players = [PlayerHandicapInput("p1", 1, 10.0), PlayerHandicapInput("p2", 2, 20.0)]
        result = [c.playing_handicap for c in compute_match_handicaps(players, Format.SINGLES, config, flat_tee)]
        assert result == [10, 20]

    def test_unified_formula(self, flat_tee):
        config = HandicapConfig(percentage=80, max_handicap=None, use_unified_formula=True)
        players = [PlayerHandicapInput("p1", 1, 10.0), PlayerHandicapInput("p2", 2, 40.0)]
        result = {c.player_id: c for c in compute_match_handicaps(players, Format.SINGLES, config, flat_tee)}
        # Formula already applies 80% and the default cap of 24
        assert result["p1"].course_handicap == 8
        assert result["p2"].course_handicap == 24
        assert result["p2"].playing_handicap == 16

    def test_no_players(self, flat_tee, trip_config):
        assert compute_match_handicaps([], Format.SINGLES, trip_config, flat_tee) == []

    def test_unknown_format(self, flat_tee, trip_config):
        with pytest.raises(ValueError):
            compute_match_handicaps([PlayerHandicapInput("p1", 1, 1.0)], "bingo", trip_config, flat_tee)

"""
Tests for config.py - Configuration management.
"""

import os
from pathlib import Path
from unittest.mock import patch

import pytest

import sys
sys.path.insert(0, str(Path(__file__).parent.parent))

from trip_scoring.config import DEFAULT_HANDICAP_CONFIG, Config, get_config
from trip_scoring.models import Format, HandicapConfig, TeamCombo


class TestConfig:
    """Tests for Config class."""

    def test_config_loads_defaults(self, clean_env):
        """Test that config loads with default values."""
        config = Config()
        assert config.points_for_win == 1.0
        assert config.points_for_half == 0.5
        assert config.skins_entry_fee == 20.0
        assert config.tilt_entry_fee == 20.0
        assert config.skins_carryover is False
        assert config.tilt_carryover is False
        assert config.max_score is None
        assert config.log_level == "INFO"
        assert config.handicap_config == DEFAULT_HANDICAP_CONFIG

    def test_config_loads_env_vars(self, clean_env):
        """Test that config loads environment variables."""
        with patch.dict(os.environ, {
            "TRIP_SCORING_POINTS_FOR_WIN": "2",
            "TRIP_SCORING_POINTS_FOR_HALF": "1",
            "TRIP_SCORING_SKINS_FEE": "10",
            "TRIP_SCORING_TILT_FEE": "25.5",
            "TRIP_SCORING_SKINS_CARRYOVER": "yes",
            "TRIP_SCORING_TILT_CARRYOVER": "1",
            "TRIP_SCORING_MAX_SCORE": "3",
            "TRIP_SCORING_LOG_LEVEL": "debug",
        }, clear=False):
            config = get_config()
            assert config.points_for_win == 2.0
            assert config.points_for_half == 1.0
            assert config.skins_entry_fee == 10.0
            assert config.tilt_entry_fee == 25.5
            assert config.skins_carryover is True
            assert config.tilt_carryover is True
            assert config.max_score == 3
            assert config.log_level == "DEBUG"

    def test_false_values(self, clean_env):
        with patch.dict(os.environ, {"TRIP_SCORING_SKINS_CARRYOVER": "off"}, clear=False):
            assert Config().skins_carryover is False

    def test_bad_number_raises(self, clean_env):
        with patch.dict(os.environ, {"TRIP_SCORING_SKINS_FEE": "twenty"}, clear=False):
            with pytest.raises(ValueError):
                Config()

    def test_validate_config_ok(self, clean_env):
        assert Config().validate_config() == []

    def test_validate_config_errors(self, clean_env):
        with patch.dict(os.environ, {
            "TRIP_SCORING_POINTS_FOR_WIN": "1",
            "TRIP_SCORING_POINTS_FOR_HALF": "2",
            "TRIP_SCORING_SKINS_FEE": "-5",
            "TRIP_SCORING_LOG_LEVEL": "LOUD",
        }, clear=False):
            errors = Config().validate_config()
            assert len(errors) == 3
            assert any("POINTS_FOR_HALF" in e for e in errors)
            assert any("SKINS_FEE" in e for e in errors)
            assert any("LOUD" in e for e in errors)


class TestHandicapConfig:
    """Tests for HandicapConfig parsing."""

    def test_default_trip_rules(self):
        assert DEFAULT_HANDICAP_CONFIG.percentage == 80
        assert DEFAULT_HANDICAP_CONFIG.max_handicap == 24
        assert DEFAULT_HANDICAP_CONFIG.team_combos[Format.FOURSOMES] == TeamCombo(60, 40)
        assert DEFAULT_HANDICAP_CONFIG.skins_combos[Format.FOURSOMES] == TeamCombo(50, 50)

    def test_from_dict(self):
        config = HandicapConfig.from_dict({
            "percentage": 90,
            "maxHandicap": 18,
            "offTheLow": False,
            "useUnifiedFormula": True,
            "teamCombos": {"foursomes": {"lowPct": 60, "highPct": 40}},
        })
        assert config.percentage == 90
        assert config.max_handicap == 18
        assert config.off_the_low is False
        assert config.use_unified_formula is True
        assert config.team_combos == {Format.FOURSOMES: TeamCombo(60, 40)}

    def test_skins_combos_fall_back_to_match_combos(self):
        config = HandicapConfig.from_dict({"teamCombos": {"SCRAMBLE": {"lowPct": 35, "highPct": 15}}})
        assert config.skins_team_combos is None
        assert config.skins_combos == {Format.SCRAMBLE: TeamCombo(35, 15)}

    def test_from_empty_dict(self):
        assert HandicapConfig.from_dict(None) == HandicapConfig()
        assert HandicapConfig.from_dict({}).percentage == 100

    def test_unknown_format(self):
        with pytest.raises(ValueError):
            HandicapConfig.from_dict({"teamCombos": {"BINGO": {"lowPct": 1, "highPct": 1}}})

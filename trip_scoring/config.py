"""
Configuration management for the golf trip scoring engine.
Trip-level defaults come from the environment (optionally a .env file).
"""

import logging
import os
from dataclasses import dataclass, field
from typing import List, Optional

from dotenv import load_dotenv

from .models import Format, HandicapConfig, TeamCombo


# Load environment variables from .env file
load_dotenv()


# Defaults used by the historical trips
DEFAULT_HANDICAP_CONFIG = HandicapConfig(
    percentage=80,
    max_handicap=24,
    off_the_low=True,
    use_unified_formula=False,
    team_combos={
        Format.FOURSOMES: TeamCombo(low_pct=60, high_pct=40),
        Format.SCRAMBLE: TeamCombo(low_pct=35, high_pct=15),
    },
    skins_team_combos={
        Format.FOURSOMES: TeamCombo(low_pct=50, high_pct=50),
    },
)

# Cap applied by the skins/TILT handicap formula when the trip sets none
DEFAULT_SKINS_MAX_HANDICAP = 24

# TILT pot split for 1st / 2nd / 3rd
TILT_PAYOUT_PERCENTAGES = (0.60, 0.30, 0.10)

_TRUE_VALUES = {"1", "true", "yes", "on"}


def _env_bool(name: str, default: bool) -> bool:
    value = os.getenv(name)
    if value is None or value.strip() == "":
        return default
    return value.strip().lower() in _TRUE_VALUES


def _env_float(name: str, default: float) -> float:
    value = os.getenv(name)
    if value is None or value.strip() == "":
        return default
    return float(value)


def _env_int(name: str) -> Optional[int]:
    value = os.getenv(name)
    if value is None or value.strip() == "":
        return None
    return int(value)


@dataclass
class Config:
    """Application configuration."""
    # Match points
    points_for_win: float = 1.0
    points_for_half: float = 0.5

    # Side games
    skins_entry_fee: float = 20.0
    tilt_entry_fee: float = 20.0
    skins_carryover: bool = False
    tilt_carryover: bool = False

    # Score entry
    max_score: Optional[int] = None  # Strokes over par, None = no cap

    # Handicaps
    handicap_config: HandicapConfig = field(default_factory=lambda: DEFAULT_HANDICAP_CONFIG)

    log_level: str = "INFO"

    def __post_init__(self):
        """Load trip defaults from environment."""
        self.points_for_win = _env_float("TRIP_SCORING_POINTS_FOR_WIN", self.points_for_win)
        self.points_for_half = _env_float("TRIP_SCORING_POINTS_FOR_HALF", self.points_for_half)
        self.skins_entry_fee = _env_float("TRIP_SCORING_SKINS_FEE", self.skins_entry_fee)
        self.tilt_entry_fee = _env_float("TRIP_SCORING_TILT_FEE", self.tilt_entry_fee)
        self.skins_carryover = _env_bool("TRIP_SCORING_SKINS_CARRYOVER", self.skins_carryover)
        self.tilt_carryover = _env_bool("TRIP_SCORING_TILT_CARRYOVER", self.tilt_carryover)
        max_score = _env_int("TRIP_SCORING_MAX_SCORE")
        if max_score is not None:
            self.max_score = max_score
        self.log_level = (os.getenv("TRIP_SCORING_LOG_LEVEL") or self.log_level).upper()

    def validate_config(self) -> List[str]:
        """
        Validate configuration values.

        Returns:
            List of error messages (empty if valid)
        """
        errors = []
        if self.points_for_win <= 0:
            errors.append("TRIP_SCORING_POINTS_FOR_WIN must be positive")
        if self.points_for_half < 0 or self.points_for_half > self.points_for_win:
            errors.append("TRIP_SCORING_POINTS_FOR_HALF must be between 0 and the points for a win")
        if self.skins_entry_fee < 0:
            errors.append("TRIP_SCORING_SKINS_FEE cannot be negative")
        if self.tilt_entry_fee < 0:
            errors.append("TRIP_SCORING_TILT_FEE cannot be negative")
        if self.max_score is not None and self.max_score < 0:
            errors.append("TRIP_SCORING_MAX_SCORE cannot be negative")
        if not isinstance(logging.getLevelName(self.log_level), int):
            errors.append(f"Unknown log level: {self.log_level}")
        return errors


def get_config() -> Config:
    """Get application configuration."""
    return Config()

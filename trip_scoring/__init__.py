"""
Golf Trip Scoring
Handicaps, match play, skins, TILT and settle-up for a buddies golf trip.
"""

__version__ = "1.0.0"
__author__ = "Eric"

from .models import (
    Format, HoleResult, SplitType, Hole, Tee, TeamCombo, HandicapConfig,
    PlayerHandicapInput, PlayerRoundContext, HoleScore, MatchState, SkinsResult,
    TiltPoints, TiltCarryover, TiltResult, TiltTournament, PlayerBalance, SimplifiedDebt,
    SplitResult, RoundScore, SideGamePlayer, TiltRound, MatchRecord, PlayerStats
)
from .config import Config, get_config, DEFAULT_HANDICAP_CONFIG
from .handicap import (
    course_handicap, adjusted_handicap, skins_handicap, team_handicap, playing_handicap,
    compute_match_handicaps, receives_stroke, receives_double_stroke, strokes_received,
    stroke_allocation
)
from .match_play import compute_match_state, score_match, compute_team_standings, compute_player_stats
from .skins import calculate_skins, compute_skins_for_round
from .tilt import calculate_tilt, compute_tilt_for_round, compute_tilt_tournament, calculate_tilt_payouts
from .settlement import (
    ExpenseSplitError, validate_expense_split, calculate_expense_splits,
    build_player_balances, simplify_debts
)

__all__ = [
    # Models
    "Format", "HoleResult", "SplitType", "Hole", "Tee", "TeamCombo", "HandicapConfig",
    "PlayerHandicapInput", "PlayerRoundContext", "HoleScore", "MatchState", "SkinsResult",
    "TiltPoints", "TiltCarryover", "TiltResult", "TiltTournament", "PlayerBalance",
    "SimplifiedDebt", "SplitResult", "RoundScore", "SideGamePlayer", "TiltRound",
    "MatchRecord", "PlayerStats",
    # Config
    "Config", "get_config", "DEFAULT_HANDICAP_CONFIG",
    # Handicaps
    "course_handicap", "adjusted_handicap", "skins_handicap", "team_handicap",
    "playing_handicap", "compute_match_handicaps", "receives_stroke",
    "receives_double_stroke", "strokes_received", "stroke_allocation",
    # Games
    "compute_match_state", "score_match", "compute_team_standings", "compute_player_stats",
    "calculate_skins", "compute_skins_for_round",
    "calculate_tilt", "compute_tilt_for_round", "compute_tilt_tournament", "calculate_tilt_payouts",
    # Settlement
    "ExpenseSplitError", "validate_expense_split", "calculate_expense_splits",
    "build_player_balances", "simplify_debts",
]

"""
Handicap calculations and stroke allocation.
Turns a handicap index into course and playing handicaps for a match,
then decides which holes receive strokes.
"""

import logging
import math
from typing import Dict, Iterable, List, Optional, Sequence

from .config import DEFAULT_SKINS_MAX_HANDICAP
from .models import (
    Format, Hole, HoleScore, HandicapConfig, PlayerHandicapInput,
    PlayerRoundContext, Tee
)

logger = logging.getLogger(__name__)

SLOPE_STANDARD = 113
SKINS_ALLOWANCE = 0.8


def round_half_up(value: float) -> int:
    """Round .5 up (towards +inf), matching the reference spreadsheet."""
    return int(math.floor(value + 0.5))


# ============================================================================
# HANDICAPS
# ============================================================================

def course_handicap(index: Optional[float], slope: int) -> int:
    """
    Course handicap: round(index x slope / 113).

    A missing index plays as scratch.
    """
    return round_half_up((index or 0) * slope / SLOPE_STANDARD)


def adjusted_handicap(course_hdcp: int, percentage: float, max_handicap: Optional[int] = None) -> int:
    """Apply the trip percentage (rounded up) and the optional cap."""
    adjusted = math.ceil(course_hdcp * percentage / 100)
    if max_handicap is not None and adjusted > max_handicap:
        return max_handicap
    return adjusted


def skins_handicap(
    index: Optional[float],
    slope: int,
    rating: float,
    par: int,
    max_handicap: Optional[int] = DEFAULT_SKINS_MAX_HANDICAP,
) -> int:
    """
    WHS-style handicap used for skins, TILT and the unified match formula.

    ceil((index x slope/113 + (rating - par)) x 0.8), capped at max_handicap.
    """
    raw = ((index or 0) * slope / SLOPE_STANDARD + (rating - par)) * SKINS_ALLOWANCE
    hdcp = math.ceil(raw)
    if max_handicap is not None:
        hdcp = min(hdcp, max_handicap)
    return hdcp


def team_handicap(handicaps: Sequence[int], low_pct: float, high_pct: float) -> int:
    """Combine a side's handicaps: low x low_pct + second-low x high_pct."""
    ordered = sorted(handicaps)
    if not ordered:
        return 0
    if len(ordered) == 1:
        return round_half_up(ordered[0] * low_pct / 100)
    return round_half_up(ordered[0] * low_pct / 100 + ordered[1] * high_pct / 100)


def playing_handicap(course_hdcp: int, lowest_in_group: int) -> int:
    """Strokes received off the low. Never negative."""
    return max(0, course_hdcp - lowest_in_group)


def off_the_low(handicaps: Dict) -> Dict:
    """Subtract the lowest value from every entry, floored at 0."""
    if not handicaps:
        return {}
    lowest = min(handicaps.values())
    return {key: playing_handicap(value, lowest) for key, value in handicaps.items()}


def uses_team_handicap(fmt: Format, config: HandicapConfig) -> bool:
    """Team formats combine a side only when the trip configures a combo."""
    return fmt.is_team and fmt in config.team_combos


def compute_match_handicaps(
    players: Iterable[PlayerHandicapInput],
    fmt: Format,
    config: HandicapConfig,
    tee: Tee,
) -> List[PlayerRoundContext]:
    """
    Compute each player's playing handicap for a match.

    Individual formats normalise per player; team formats with a configured
    combo normalise per side and every member of the side plays off the
    side's handicap.
    """
    fmt = Format.parse(fmt)
    players = list(players)
    if not players:
        return []

    if config.use_unified_formula:
        # Formula already folds in the allowance and cap
        percentage, cap = 100, None
        skins_max = config.max_handicap if config.max_handicap is not None else DEFAULT_SKINS_MAX_HANDICAP
        course = {
            p.player_id: skins_handicap(p.handicap_index, tee.slope, tee.rating, tee.par, skins_max)
            for p in players
        }
    else:
        percentage, cap = config.percentage, config.max_handicap
        course = {p.player_id: course_handicap(p.handicap_index, tee.slope) for p in players}

    adjusted = {pid: adjusted_handicap(ch, percentage, cap) for pid, ch in course.items()}

    if uses_team_handicap(fmt, config):
        combo = config.team_combos[fmt]
        sides: Dict[int, List[int]] = {}
        for p in players:
            sides.setdefault(p.side, []).append(adjusted[p.player_id])
        side_hdcps = {side: team_handicap(h, combo.low_pct, combo.high_pct) for side, h in sides.items()}
        if config.off_the_low:
            side_hdcps = off_the_low(side_hdcps)
        playing = {p.player_id: max(0, side_hdcps[p.side]) for p in players}
    else:
        playing = off_the_low(adjusted) if config.off_the_low else {
            pid: max(0, value) for pid, value in adjusted.items()
        }

    logger.debug(f"{fmt.value} playing handicaps: {playing}")

    return [
        PlayerRoundContext(
            player_id=p.player_id,
            side=p.side,
            handicap_index=p.handicap_index or 0.0,
            course_handicap=course[p.player_id],
            playing_handicap=playing[p.player_id],
        )
        for p in players
    ]


# ============================================================================
# STROKE ALLOCATION
# ============================================================================

def receives_stroke(playing_hdcp: int, stroke_index: int) -> bool:
    """Check if a player receives a stroke on a hole."""
    if playing_hdcp <= 0:
        return False
    return playing_hdcp >= stroke_index


def receives_double_stroke(playing_hdcp: int, stroke_index: int) -> bool:
    """Check if a player receives two strokes on a hole (handicap > 18)."""
    if playing_hdcp <= 18:
        return False
    return (playing_hdcp - 18) >= stroke_index


def strokes_received(playing_hdcp: int, stroke_index: int) -> int:
    if receives_double_stroke(playing_hdcp, stroke_index):
        return 2
    if receives_stroke(playing_hdcp, stroke_index):
        return 1
    return 0


def stroke_allocation(playing_hdcp: int, holes: Sequence[Hole]) -> List[int]:
    """
    Hole numbers receiving strokes, for scorecard dots.

    Holes receiving two strokes appear twice. Sorted by hole number.
    """
    if playing_hdcp <= 0:
        return []

    ordered = sorted(holes, key=lambda h: h.stroke_index)
    stroke_holes = [h.number for h in ordered[:min(playing_hdcp, len(ordered))]]

    if playing_hdcp > len(ordered):
        second_pass = min(playing_hdcp - len(ordered), len(ordered))
        stroke_holes.extend(h.number for h in ordered[:second_pass])

    return sorted(stroke_holes)


# ============================================================================
# SCORES
# ============================================================================

def apply_max_score(gross: int, par: int, max_score: Optional[int]) -> int:
    """Cap gross at par + max_score. None means no cap."""
    if max_score is None:
        return gross
    return min(gross, par + max_score)


def net_score(gross: int, strokes: int) -> int:
    return gross - strokes


def build_hole_score(
    player_id: str,
    hole: Hole,
    gross: int,
    playing_hdcp: int,
    max_score: Optional[int] = None,
) -> HoleScore:
    """Cap the gross score, then record the strokes received on the hole."""
    if gross < 1:
        raise ValueError(f"Gross score must be at least 1 (hole {hole.number}, got {gross})")
    return HoleScore(
        player_id=player_id,
        hole_number=hole.number,
        gross_score=apply_max_score(gross, hole.par, max_score),
        strokes_received=strokes_received(playing_hdcp, hole.stroke_index),
    )

"""
TILT engine.
Modified Stableford with a streak multiplier. Net birdies build a streak that
multiplies every point on the next hole, good or bad. Anything worse than a
birdie resets it. The multiplier has no upper limit.
"""

import logging
from typing import Dict, Mapping, Optional, Sequence

from .config import TILT_PAYOUT_PERCENTAGES
from .handicap import apply_max_score, strokes_received
from .models import (
    Hole, HandicapConfig, RoundScore, SideGamePlayer, Tee, TiltCarryover, TiltHole,
    TiltPlayerResult, TiltPoints, TiltResult, TiltRound, TiltTournament
)
from .money import allocate_cents, round_money
from .skins import side_game_handicap

logger = logging.getLogger(__name__)

DEFAULT_POINTS = TiltPoints()
FRESH_START = TiltCarryover()


def base_points(net_vs_par: int, points: TiltPoints = DEFAULT_POINTS) -> int:
    """Map net score relative to par to base points."""
    if net_vs_par <= -3:
        return points.albatross
    if net_vs_par == -2:
        return points.eagle
    if net_vs_par == -1:
        return points.birdie
    if net_vs_par == 0:
        return points.par
    if net_vs_par == 1:
        return points.bogey
    return points.double_plus


def streak_increment(net_vs_par: int) -> int:
    """Streak gained on a hole: 1 birdie, 2 eagle, 3 albatross, 0 otherwise."""
    if net_vs_par <= -3:
        return 3
    if net_vs_par == -2:
        return 2
    if net_vs_par == -1:
        return 1
    return 0


def tilt_player_round(
    player_id: str,
    holes: Sequence[Hole],
    net_scores: Mapping[int, int],
    points: TiltPoints = DEFAULT_POINTS,
    start: TiltCarryover = FRESH_START,
) -> TiltPlayerResult:
    """
    Fold one player's round.

    The multiplier in effect on a hole was earned on the previous hole;
    holes without a score are skipped and do not break the streak.
    """
    multiplier = start.multiplier
    streak = start.streak
    running_total = 0
    result = TiltPlayerResult(player_id=player_id)

    for hole in sorted(holes, key=lambda h: h.number):
        net = net_scores.get(hole.number)
        if net is None:
            continue

        net_vs_par = net - hole.par
        base = base_points(net_vs_par, points)
        hole_points = base * multiplier
        running_total += hole_points
        result.holes.append(TiltHole(
            hole_number=hole.number,
            net_vs_par=net_vs_par,
            base_points=base,
            multiplier=multiplier,
            points=hole_points,
            running_total=running_total,
        ))

        gained = streak_increment(net_vs_par)
        if gained:
            streak += gained
            multiplier = streak + 1
        else:
            streak = 0
            multiplier = 1

    result.total_points = running_total
    result.final_multiplier = multiplier
    result.final_streak = streak
    return result


def calculate_tilt(
    holes: Sequence[Hole],
    net_scores: Mapping[str, Mapping[int, int]],
    entry_fee: float,
    player_count: Optional[int] = None,
    points: Optional[TiltPoints] = None,
    carryover_in: Optional[Mapping[str, TiltCarryover]] = None,
) -> TiltResult:
    """
    Calculate TILT results for a round.

    Args:
        holes: Holes of the round, par taken from here
        net_scores: Per player, hole number -> net score
        entry_fee: Per-player buy-in
        player_count: Players paying in (defaults to players with scores)
        points: Base point overrides
        carryover_in: Starting multiplier/streak per player from the last round

    Returns:
        TiltResult with players sorted by total points
    """
    points = points or DEFAULT_POINTS
    carryover_in = carryover_in or {}
    if player_count is None:
        player_count = len(net_scores)

    players = [
        tilt_player_round(pid, holes, nets, points, carryover_in.get(pid, FRESH_START))
        for pid, nets in net_scores.items()
    ]
    players.sort(key=lambda p: p.total_points, reverse=True)

    return TiltResult(
        players=players,
        total_pot=round_money(entry_fee * player_count),
        entry_fee=entry_fee,
        player_count=player_count,
        carryover={p.player_id: p.carryover for p in players},
    )


def compute_tilt_for_round(
    tee: Tee,
    scores: Sequence[RoundScore],
    players: Sequence[SideGamePlayer],
    config: Optional[HandicapConfig],
    entry_fee: float,
    carryover_in: Optional[Mapping[str, TiltCarryover]] = None,
    points: Optional[TiltPoints] = None,
    max_score: Optional[int] = None,
) -> TiltResult:
    """
    Compute TILT for a round from raw gross scores.

    TILT is always individual. Net scores use the same handicap as skins,
    whatever handicap the player carried in their match.
    """
    opted_in = {p.player_id for p in players if p.tilt_opt_in}
    index_by_player = {p.player_id: p.handicap_index for p in players}
    holes_by_number = {h.number: h for h in tee.holes}

    hdcps: Dict[str, int] = {}
    net_scores: Dict[str, Dict[int, int]] = {}
    for score in scores:
        hole = holes_by_number.get(score.hole_number)
        if score.player_id not in opted_in or hole is None:
            continue
        if score.player_id not in hdcps:
            hdcps[score.player_id] = side_game_handicap(index_by_player.get(score.player_id), tee, config)
        nets = net_scores.setdefault(score.player_id, {})
        if hole.number not in nets:
            gross = apply_max_score(score.gross_score, hole.par, max_score)
            nets[hole.number] = gross - strokes_received(hdcps[score.player_id], hole.stroke_index)

    return calculate_tilt(tee.holes, net_scores, entry_fee, len(net_scores), points, carryover_in)


def calculate_tilt_payouts(grand_totals: Mapping[str, float], pot: float) -> Dict[str, float]:
    """
    Pay the top three 60% / 30% / 10%.

    Tied players share the combined percentages of the positions they occupy.
    Odd cents from a tie go to the first players listed, never above the pot.
    """
    shares: Dict[str, float] = {}
    if not grand_totals or pot == 0:
        return shares

    ranked = sorted(grand_totals.items(), key=lambda item: item[1], reverse=True)
    position = 0
    i = 0
    while i < len(ranked) and position < len(TILT_PAYOUT_PERCENTAGES):
        score = ranked[i][1]
        tied = []
        while i < len(ranked) and ranked[i][1] == score:
            tied.append(ranked[i][0])
            i += 1

        share = sum(TILT_PAYOUT_PERCENTAGES[position:position + len(tied)])
        for player_id in tied:
            shares[player_id] = share * pot / len(tied)
        position += len(tied)

    return allocate_cents(shares, min(sum(shares.values()), pot))


def compute_tilt_tournament(rounds: Sequence[TiltRound], carryover: bool = False) -> TiltTournament:
    """
    Score TILT across a trip.

    With carryover each player's final multiplier and streak seed their next
    round; players sitting out a round keep their state for the one after.
    """
    state: Dict[str, TiltCarryover] = {}
    results = []
    grand_totals: Dict[str, int] = {}
    pot = 0.0

    for rnd in rounds:
        result = compute_tilt_for_round(
            rnd.tee,
            rnd.scores,
            rnd.players,
            rnd.handicap_config,
            rnd.entry_fee,
            carryover_in=state if carryover else None,
            max_score=rnd.max_score,
        )
        results.append(result)
        pot += rnd.entry_fee * result.player_count
        for player in result.players:
            grand_totals[player.player_id] = grand_totals.get(player.player_id, 0) + player.total_points
        if carryover:
            state = {**state, **result.carryover}
            logger.debug(f"TILT carryover after round {rnd.round_id}: {state}")

    return TiltTournament(
        rounds=results,
        grand_totals=grand_totals,
        total_pot=round_money(pot),
        payouts=calculate_tilt_payouts(grand_totals, pot),
    )

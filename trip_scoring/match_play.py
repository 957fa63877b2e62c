"""
Match play engine.
Folds hole-by-hole results into a match state, handles stroke play totals,
and rolls completed matches up into team standings and player stats.
"""

import logging
from typing import Dict, Iterable, List, Mapping, Optional, Sequence, Tuple

from .models import (
    Format, Hole, HoleResult, MatchRecord, MatchState, PlayerStats, RoundScore, RoundSkins,
    StrokePlayResult, TeamStanding, Tee
)
from .money import round_money

logger = logging.getLogger(__name__)

# Per player: hole number -> net score
PlayerNetScores = Mapping[int, int]


def best_ball(net_scores: Iterable[Optional[int]]) -> Optional[int]:
    """Lowest score of a side, skipping players without a score."""
    valid = [s for s in net_scores if s is not None]
    if not valid:
        return None
    return min(valid)


def hole_winner(side1_net: Optional[int], side2_net: Optional[int]) -> Optional[HoleResult]:
    """Lower net score wins the hole. None if either side has no score yet."""
    if side1_net is None or side2_net is None:
        return None
    if side1_net < side2_net:
        return HoleResult.SIDE1
    if side2_net < side1_net:
        return HoleResult.SIDE2
    return HoleResult.HALVED


def side_net_score(fmt: Format, net_scores: Sequence[Optional[int]]) -> Optional[int]:
    """Pick the score a side plays on a hole for the given format."""
    fmt = Format.parse(fmt)
    if fmt in (Format.SINGLES, Format.STROKEPLAY):
        return net_scores[0] if net_scores else None
    elif fmt in (Format.FOURBALL, Format.SHAMBLE):
        return best_ball(net_scores)
    elif fmt in (Format.FOURSOMES, Format.MODIFIED_ALT_SHOT, Format.SCRAMBLE):
        # Only one player records the side's score
        return next((s for s in net_scores if s is not None), None)
    raise ValueError(f"Unsupported format: {fmt}")


def compute_hole_results(
    fmt: Format,
    holes: Sequence[Hole],
    side1: Sequence[PlayerNetScores],
    side2: Sequence[PlayerNetScores],
) -> List[Optional[HoleResult]]:
    """Hole-by-hole results for a match, in hole order."""
    results = []
    for hole in sorted(holes, key=lambda h: h.number):
        side1_net = side_net_score(fmt, [p.get(hole.number) for p in side1])
        side2_net = side_net_score(fmt, [p.get(hole.number) for p in side2])
        results.append(hole_winner(side1_net, side2_net))
    return results


def _display_text(side1_lead: int, is_dormie: bool) -> str:
    if side1_lead == 0:
        text = "AS"  # All square
    elif side1_lead > 0:
        text = f"{side1_lead} UP"
    else:
        text = f"{abs(side1_lead)} DN"
    if is_dormie:
        text += " (Dormie)"
    return text


def compute_match_state(
    hole_results: Sequence[Optional[HoleResult]],
    total_holes: int,
    points_for_win: float,
    points_for_half: float,
) -> MatchState:
    """
    Compute the full match state from hole-by-hole results.

    The match is closed out once the lead exceeds the holes remaining.
    Recomputed from scratch every time, so corrections are always reflected.

    Args:
        hole_results: Result per hole in playing order, None for unplayed holes
        total_holes: Holes in the round
        points_for_win: Points to the winning side
        points_for_half: Points to each side in a halved match

    Returns:
        MatchState
    """
    side1_lead = 0
    holes_played = 0
    closed_at = None

    for result in hole_results:
        if result is None:
            continue

        holes_played += 1
        if result == HoleResult.SIDE1:
            side1_lead += 1
        elif result == HoleResult.SIDE2:
            side1_lead -= 1

        holes_remaining = total_holes - holes_played
        if abs(side1_lead) > holes_remaining and holes_remaining > 0:
            closed_at = holes_played
            logger.debug(f"Match closed out after {holes_played} holes")
            break

    holes_remaining = total_holes - holes_played
    is_complete = closed_at is not None or holes_played == total_holes
    is_dormie = not is_complete and abs(side1_lead) == holes_remaining and holes_remaining > 0

    result_text = None
    side1_points = 0
    side2_points = 0

    if is_complete:
        if side1_lead == 0:
            result_text = "Halved"
            side1_points = points_for_half
            side2_points = points_for_half
        else:
            if closed_at is not None:
                result_text = f"{abs(side1_lead)}&{total_holes - closed_at}"
            else:
                result_text = f"{abs(side1_lead)}UP"
            if side1_lead > 0:
                side1_points = points_for_win
            else:
                side2_points = points_for_win

    return MatchState(
        holes_played=holes_played,
        holes_remaining=holes_remaining,
        side1_lead=side1_lead,
        is_complete=is_complete,
        is_dormie=is_dormie,
        display_text=_display_text(side1_lead, is_dormie),
        result_text=result_text,
        side1_points=side1_points,
        side2_points=side2_points,
        closed_at=closed_at,
    )


def stroke_play_result(
    side1: Sequence[PlayerNetScores],
    side2: Sequence[PlayerNetScores],
    points_for_win: float,
    points_for_half: float,
) -> StrokePlayResult:
    """Compare the net totals of the first player on each side."""
    side1_total = sum(side1[0].values()) if side1 else 0
    side2_total = sum(side2[0].values()) if side2 else 0

    if side1_total < side2_total:
        return StrokePlayResult(side1_total, side2_total, f"Won by {side2_total - side1_total}",
                                points_for_win, 0)
    if side2_total < side1_total:
        return StrokePlayResult(side1_total, side2_total, f"Won by {side1_total - side2_total}",
                                0, points_for_win)
    return StrokePlayResult(side1_total, side2_total, "Tied", points_for_half, points_for_half)


def score_match(
    fmt: Format,
    holes: Sequence[Hole],
    side1: Sequence[PlayerNetScores],
    side2: Sequence[PlayerNetScores],
    points_for_win: float,
    points_for_half: float,
) -> MatchState:
    """
    Score a match in any format.

    Stroke play only uses the hole results to count holes completed; the
    result comes from comparing totals once every hole is in.
    """
    fmt = Format.parse(fmt)
    hole_results = compute_hole_results(fmt, holes, side1, side2)
    total_holes = len(holes)

    if fmt != Format.STROKEPLAY:
        return compute_match_state(hole_results, total_holes, points_for_win, points_for_half)

    holes_played = sum(1 for r in hole_results if r is not None)
    is_complete = holes_played == total_holes
    state = MatchState(
        holes_played=holes_played,
        holes_remaining=total_holes - holes_played,
        side1_lead=0,
        is_complete=is_complete,
        is_dormie=False,
        display_text=f"Thru {holes_played}",
        result_text=None,
    )
    if is_complete:
        final = stroke_play_result(side1, side2, points_for_win, points_for_half)
        state.result_text = final.result_text
        state.side1_points = final.side1_points
        state.side2_points = final.side2_points
    return state


def compute_team_standings(
    matches: Iterable[MatchRecord],
    team_ids: Sequence[str],
) -> List[TeamStanding]:
    """Roll completed matches into cup standings, best team first."""
    standings: Dict[str, TeamStanding] = {tid: TeamStanding(team_id=tid) for tid in team_ids}

    def award(teams, points, opponent_points, round_id):
        for team_id in set(teams):
            team = standings.get(team_id)
            if team is None:
                continue
            team.total_points += points
            team.by_round[round_id] = team.by_round.get(round_id, 0) + points
            if points > opponent_points:
                team.matches_won += 1
            elif points < opponent_points:
                team.matches_lost += 1
            else:
                team.matches_halved += 1

    for match in matches:
        award(match.side1_team_ids, match.side1_points, match.side2_points, match.round_id)
        award(match.side2_team_ids, match.side2_points, match.side1_points, match.round_id)

    return sorted(standings.values(), key=lambda t: t.total_points, reverse=True)


def compute_player_stats(
    player_ids: Sequence[str],
    matches: Iterable[MatchRecord],
    rounds: Iterable[Tuple[Tee, Sequence[RoundScore]]] = (),
    skins_rounds: Iterable[RoundSkins] = (),
) -> List[PlayerStats]:
    """
    Aggregate each player's trip record.

    Match record and points come from completed matches, scoring breakdown
    from gross scores against par, and skins from each round's payouts.
    Players outside player_ids are ignored.

    Args:
        player_ids: Trip players to report on
        matches: Completed matches with the players on each side
        rounds: (tee, gross scores) per round
        skins_rounds: Skins outcomes with team winnings already distributed

    Returns:
        PlayerStats sorted by match points (high first), then average to par (low first)
    """
    stats: Dict[str, PlayerStats] = {pid: PlayerStats(player_id=pid) for pid in player_ids}

    for match in matches:
        for players, mine, theirs in (
            (match.side1_player_ids, match.side1_points, match.side2_points),
            (match.side2_player_ids, match.side2_points, match.side1_points),
        ):
            for player_id in players:
                player = stats.get(player_id)
                if player is None:
                    continue
                player.matches_played += 1
                player.match_points += mine
                if mine > theirs:
                    player.matches_won += 1
                elif mine < theirs:
                    player.matches_lost += 1
                else:
                    player.matches_halved += 1

    for tee, scores in rounds:
        seen = set()
        for score in scores:
            player = stats.get(score.player_id)
            hole = tee.hole(score.hole_number)
            key = (score.player_id, score.hole_number)
            if player is None or hole is None or key in seen:
                continue
            seen.add(key)

            player.holes_played += 1
            player.total_gross += score.gross_score
            player.total_par += hole.par
            diff = score.gross_score - hole.par
            if diff <= -2:
                player.eagles += 1
            elif diff == -1:
                player.birdies += 1
            elif diff == 0:
                player.pars += 1
            elif diff == 1:
                player.bogeys += 1
            else:
                player.doubles_plus += 1

    for skins in skins_rounds:
        for payout in skins.payouts:
            player = stats.get(payout.player_id)
            if player is None:
                continue
            player.skins_won += payout.skins_won
            player.skins_money = round_money(player.skins_money + payout.money_won)

    logger.debug(f"Player stats for {len(stats)} players")
    return sorted(stats.values(), key=lambda p: (-p.match_points, p.avg_vs_par))

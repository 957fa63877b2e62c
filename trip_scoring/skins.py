"""
Skins engine.
A skin goes to the lowest unique net score on a hole. Ties win nothing,
or roll into the next hole when carryover is on. The pot is shared
equally per skin once all holes are resolved.
"""

import logging
from typing import Dict, List, Mapping, Optional, Sequence

from .config import DEFAULT_SKINS_MAX_HANDICAP
from .handicap import apply_max_score, skins_handicap, strokes_received, team_handicap
from .models import (
    Format, HandicapConfig, PlayerSkins, RoundScore, RoundSkins, SideGamePlayer,
    SkinHole, SkinsResult, Tee
)
from .money import allocate_cents, round_money

logger = logging.getLogger(__name__)

# hole number -> {participant id -> net score}; empty mapping = hole not in play
HoleNetScores = Mapping[int, Mapping[str, int]]


def calculate_skins(
    hole_scores: HoleNetScores,
    entry_fee: float,
    player_count: int,
    carryover: bool = False,
) -> SkinsResult:
    """
    Calculate skins for a round.

    Rules:
    - A skin is won by the participant with the lowest unique net score
    - Ties for the lowest score win nothing on that hole
    - With carryover, tied holes accumulate and go to the next outright winner
    - Pot = entry_fee x player_count, skin value = pot / skins awarded

    Args:
        hole_scores: Net scores per hole, keyed by hole number
        entry_fee: Per-player buy-in
        player_count: Players paying into the pot
        carryover: Roll tied holes into the next hole

    Returns:
        SkinsResult with money rounded to cents
    """
    total_pot = entry_fee * player_count
    holes: List[SkinHole] = []
    skins_by_player: Dict[str, int] = {}
    carried = 0

    for hole_number in sorted(hole_scores):
        scores = hole_scores[hole_number]
        if not scores:
            holes.append(SkinHole(hole_number=hole_number))
            continue

        low = min(scores.values())
        leaders = [pid for pid, net in scores.items() if net == low]

        if len(leaders) == 1:
            winner = leaders[0]
            skins = 1 + carried
            carried = 0
            skins_by_player[winner] = skins_by_player.get(winner, 0) + skins
            holes.append(SkinHole(hole_number=hole_number, winner_id=winner, net_score=low, skins=skins))
        else:
            if carryover:
                carried += 1
            holes.append(SkinHole(hole_number=hole_number, net_score=low))

    if carried:
        logger.debug(f"{carried} tied hole(s) never resolved, skins not awarded")

    skins_awarded = sum(skins_by_player.values())
    skin_value = total_pot / skins_awarded if skins_awarded > 0 else 0

    for hole in holes:
        if hole.winner_id:
            hole.value = round_money(skin_value * hole.skins)

    money = allocate_cents({pid: count * skin_value for pid, count in skins_by_player.items()}, total_pot)
    player_totals = [
        PlayerSkins(player_id=pid, skins_won=count, money_won=money[pid])
        for pid, count in skins_by_player.items()
    ]
    player_totals.sort(key=lambda p: p.money_won, reverse=True)

    return SkinsResult(
        holes=holes,
        skins_awarded=skins_awarded,
        skin_value=round_money(skin_value),
        total_pot=round_money(total_pot),
        player_totals=player_totals,
    )


def side_game_handicap(index: Optional[float], tee: Tee, config: Optional[HandicapConfig]) -> int:
    """Skins and TILT handicap for a player on a tee."""
    max_hdcp = DEFAULT_SKINS_MAX_HANDICAP
    if config is not None and config.max_handicap is not None:
        max_hdcp = config.max_handicap
    return skins_handicap(index, tee.slope, tee.rating, tee.par, max_hdcp)


def compute_skins_for_round(
    fmt: Format,
    tee: Tee,
    scores: Sequence[RoundScore],
    players: Sequence[SideGamePlayer],
    config: Optional[HandicapConfig],
    entry_fee: float,
    carryover: bool = False,
    max_score: Optional[int] = None,
) -> RoundSkins:
    """
    Compute skins for a round from raw gross scores.

    Format-specific logic:
    - Individual formats: each player's own skins handicap
    - SCRAMBLE: gross scores, one entry per team (match + side)
    - Other team formats: team skins handicap, one entry per team

    A hole is only in play once every competing player or team has a score.
    Team winnings are split evenly among the team's opted-in members.
    """
    fmt = Format.parse(fmt)
    opted_in = {p.player_id for p in players if p.skins_opt_in}
    index_by_player = {p.player_id: p.handicap_index for p in players}
    holes_by_number = {h.number: h for h in tee.holes}
    team_format = fmt.is_team
    scramble = fmt == Format.SCRAMBLE

    competing = [s for s in scores if s.player_id in opted_in and s.hole_number in holes_by_number]

    # Individual handicaps
    player_hdcps: Dict[str, int] = {}
    for score in competing:
        if score.player_id not in player_hdcps:
            player_hdcps[score.player_id] = 0 if scramble else side_game_handicap(
                index_by_player.get(score.player_id), tee, config
            )

    # Teams are keyed by match and side
    team_members: Dict[str, List[str]] = {}
    if team_format:
        for score in competing:
            members = team_members.setdefault(f"{score.match_id}:{score.side}", [])
            if score.player_id not in members:
                members.append(score.player_id)

    team_hdcps: Dict[str, int] = {}
    combos = config.skins_combos if config is not None else {}
    if team_format and not scramble and fmt in combos:
        combo = combos[fmt]
        for key, members in team_members.items():
            team_hdcps[key] = team_handicap([player_hdcps[m] for m in members], combo.low_pct, combo.high_pct)

    # Net score per competing unit per hole, first score recorded wins
    net_by_hole: Dict[int, Dict[str, int]] = {}
    for score in competing:
        hole = holes_by_number[score.hole_number]
        gross = apply_max_score(score.gross_score, hole.par, max_score)
        unit = f"{score.match_id}:{score.side}" if team_format else score.player_id
        hole_map = net_by_hole.setdefault(hole.number, {})
        if unit in hole_map:
            continue
        if scramble:
            hole_map[unit] = gross
        else:
            hdcp = team_hdcps.get(unit, player_hdcps[score.player_id])
            hole_map[unit] = gross - strokes_received(hdcp, hole.stroke_index)

    unique_players = sorted(player_hdcps)
    expected_units = len(team_members) if team_format else len(unique_players)

    hole_scores = {}
    for hole in tee.holes:
        hole_map = net_by_hole.get(hole.number, {})
        if len(hole_map) < expected_units:
            if hole_map:
                logger.debug(f"Hole {hole.number} not scored by every player, excluded from skins")
            hole_map = {}
        hole_scores[hole.number] = hole_map

    result = calculate_skins(hole_scores, entry_fee, len(unique_players), carryover)

    if team_format:
        by_member: Dict[str, PlayerSkins] = {}
        for total in result.player_totals:
            members = team_members.get(total.player_id, [total.player_id])
            shares = allocate_cents({m: total.money_won / len(members) for m in members}, total.money_won)
            for member in members:
                payout = by_member.setdefault(member, PlayerSkins(member, 0, 0.0))
                payout.skins_won += total.skins_won
                payout.money_won = round_money(payout.money_won + shares[member])
        payouts = list(by_member.values())
    else:
        payouts = [PlayerSkins(p.player_id, p.skins_won, p.money_won) for p in result.player_totals]

    logger.info(
        f"Skins {fmt.value}: {result.skins_awarded} skins awarded among "
        f"{len(unique_players)} players, pot {result.total_pot:.2f}"
    )

    return RoundSkins(
        result=result,
        payouts=payouts,
        unique_player_count=len(unique_players),
        team_members=team_members,
        participants=unique_players,
        entry_fee=entry_fee,
    )


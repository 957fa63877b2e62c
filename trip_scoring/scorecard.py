"""
Scorecard loading.
Reads round documents (JSON) and spreadsheet score exports (CSV) into engine
inputs, and runs a round's matches and side games from them.
"""

import json
import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Dict, List, Optional

import pandas as pd

from .config import Config
from .handicap import build_hole_score, compute_match_handicaps
from .match_play import score_match
from .models import (
    Format, HandicapConfig, Hole, MatchState, PlayerBalance, PlayerHandicapInput,
    PlayerRoundContext, RoundScore, RoundSkins, SideGamePlayer, Tee, TiltRound
)
from .skins import compute_skins_for_round

logger = logging.getLogger(__name__)

CSV_REQUIRED_COLUMNS = ("player_id", "hole", "gross")


class ScorecardError(ValueError):
    """Scorecard input that cannot be turned into scores."""
    pass


@dataclass
class MatchPairing:
    """Who plays whom in a match."""
    match_id: str
    side1: List[str]
    side2: List[str]


@dataclass
class RoundDocument:
    """A round as exported for verification."""
    round_id: str
    format: Format
    tee: Tee
    players: List[SideGamePlayer]
    names: Dict[str, str]
    matches: List[MatchPairing]
    scores: List[RoundScore]
    handicap_config: HandicapConfig = field(default_factory=HandicapConfig)
    max_score: Optional[int] = None
    skins_entry_fee: float = 0.0
    skins_carryover: bool = False
    tilt_entry_fee: float = 0.0

    def player(self, player_id: str) -> Optional[SideGamePlayer]:
        for p in self.players:
            if p.player_id == player_id:
                return p
        return None


@dataclass
class MatchOutcome:
    match: MatchPairing
    handicaps: List[PlayerRoundContext]
    state: MatchState


def parse_tee(data: dict) -> Tee:
    try:
        holes = tuple(
            Hole(number=int(h["number"]), par=int(h["par"]), stroke_index=int(h["strokeIndex"]))
            for h in data["holes"]
        )
        return Tee(slope=int(data["slope"]), rating=float(data["rating"]), holes=holes)
    except (KeyError, TypeError, ValueError) as e:
        raise ScorecardError(f"Invalid tee: {e}") from e


def _side_lookup(matches: List[MatchPairing]) -> Dict[str, tuple]:
    lookup = {}
    for m in matches:
        for pid in m.side1:
            lookup[pid] = (m.match_id, 1)
        for pid in m.side2:
            lookup[pid] = (m.match_id, 2)
    return lookup


def parse_round(data: dict, base_dir: Optional[Path] = None, config: Optional[Config] = None) -> RoundDocument:
    """
    Build a RoundDocument from its JSON form.

    Scores come from a "scores" list or from a CSV file named by "scoresCsv"
    (relative to base_dir). Match and side are taken from the match list.
    Fees, carryover, max score and handicap rules the document leaves out
    come from config when one is given.
    """
    try:
        fmt = Format.parse(data["format"])
        tee = parse_tee(data["tee"])
        players = [
            SideGamePlayer(
                player_id=str(p["id"]),
                handicap_index=p.get("handicapIndex"),
                skins_opt_in=bool(p.get("skinsOptIn", False)),
                tilt_opt_in=bool(p.get("tiltOptIn", False)),
            )
            for p in data["players"]
        ]
        names = {str(p["id"]): p.get("name", str(p["id"])) for p in data["players"]}
        matches = [
            MatchPairing(match_id=str(m["id"]), side1=[str(x) for x in m["side1"]], side2=[str(x) for x in m["side2"]])
            for m in data.get("matches", [])
        ]
    except KeyError as e:
        raise ScorecardError(f"Round document missing field {e}") from e

    if "scoresCsv" in data:
        csv_path = Path(data["scoresCsv"])
        if base_dir is not None and not csv_path.is_absolute():
            csv_path = base_dir / csv_path
        raw_scores = load_scorecard_csv(csv_path)
    else:
        raw_scores = [_score_from_dict(s) for s in data.get("scores", [])]

    sides = _side_lookup(matches)
    hole_numbers = {h.number for h in tee.holes}
    scores = []
    for score in raw_scores:
        if score.hole_number not in hole_numbers:
            raise ScorecardError(f"Score for unknown hole {score.hole_number} ({score.player_id})")
        if score.player_id in sides:
            score.match_id, score.side = sides[score.player_id]
        scores.append(score)

    skins = data.get("skins", {})
    tilt = data.get("tilt", {})
    if config is not None:
        handicap_config = (HandicapConfig.from_dict(data["handicapConfig"])
                           if data.get("handicapConfig") else config.handicap_config)
        max_score = data.get("maxScore", config.max_score)
        skins_fee = skins.get("entryFee", config.skins_entry_fee)
        skins_carryover = skins.get("carryover", config.skins_carryover)
        tilt_fee = tilt.get("entryFee", config.tilt_entry_fee)
    else:
        handicap_config = HandicapConfig.from_dict(data.get("handicapConfig"))
        max_score = data.get("maxScore")
        skins_fee = skins.get("entryFee", 0)
        skins_carryover = skins.get("carryover", False)
        tilt_fee = tilt.get("entryFee", 0)

    return RoundDocument(
        round_id=str(data.get("roundId", data.get("round_id", ""))),
        format=fmt,
        tee=tee,
        players=players,
        names=names,
        matches=matches,
        scores=scores,
        handicap_config=handicap_config,
        max_score=max_score,
        skins_entry_fee=float(skins_fee),
        skins_carryover=bool(skins_carryover),
        tilt_entry_fee=float(tilt_fee),
    )


def _score_from_dict(raw: dict) -> RoundScore:
    try:
        score = RoundScore(player_id=str(raw["player"]), hole_number=int(raw["hole"]), gross_score=int(raw["gross"]))
    except (KeyError, TypeError, ValueError) as e:
        raise ScorecardError(f"Invalid score entry {raw}: {e}") from e
    if score.gross_score < 1:
        raise ScorecardError(f"Gross score must be at least 1: {raw}")
    return score


def load_round_json(path: Path, config: Optional[Config] = None) -> RoundDocument:
    """Load a round document from disk."""
    path = Path(path)
    try:
        with open(path, "r", encoding="utf-8") as f:
            data = json.load(f)
    except json.JSONDecodeError as e:
        raise ScorecardError(f"{path.name} is not valid JSON: {e}") from e
    return parse_round(data, base_dir=path.parent, config=config)


def load_scorecard_csv(path: Path) -> List[RoundScore]:
    """
    Load gross scores from a long-format CSV export.

    Columns: player_id, hole, gross, and optionally match_id and side.
    Blank gross cells (holes not played) are skipped; any other gross or
    hole that is not a number is an error.
    """
    if not Path(path).exists():
        raise ScorecardError(f"Scorecard file not found: {path}")
    df = pd.read_csv(path)
    missing = [c for c in CSV_REQUIRED_COLUMNS if c not in df.columns]
    if missing:
        raise ScorecardError(f"{Path(path).name} is missing columns: {', '.join(missing)}")

    df = df.dropna(subset=["gross"])
    gross = pd.to_numeric(df["gross"], errors="coerce")
    hole = pd.to_numeric(df["hole"], errors="coerce")
    unreadable = df[gross.isna() | hole.isna()]
    if not unreadable.empty:
        rows = ", ".join(f"{r.player_id} hole {r.hole} ({r.gross})" for r in unreadable.itertuples(index=False))
        raise ScorecardError(f"{Path(path).name} has non-numeric scores: {rows}")
    df = df.assign(gross=gross, hole=hole)

    bad = df[df["gross"] < 1]
    if not bad.empty:
        raise ScorecardError(f"Gross scores below 1 for players: {', '.join(str(p) for p in bad['player_id'].unique())}")

    scores = []
    for row in df.itertuples(index=False):
        match_id = getattr(row, "match_id", None)
        side = getattr(row, "side", None)
        scores.append(RoundScore(
            player_id=str(row.player_id),
            hole_number=int(row.hole),
            gross_score=int(row.gross),
            match_id="" if match_id is None or pd.isna(match_id) else str(match_id),
            side=1 if side is None or pd.isna(side) else int(side),
        ))
    logger.info(f"Loaded {len(scores)} scores from {Path(path).name}")
    return scores


def load_balances_json(path: Path) -> List[PlayerBalance]:
    """Load [{id, name, netBalance}, ...] for settlement."""
    with open(path, "r", encoding="utf-8") as f:
        data = json.load(f)
    try:
        return [
            PlayerBalance(player_id=str(b["id"]), name=b.get("name", str(b["id"])), net_balance=float(b["netBalance"]))
            for b in data
        ]
    except (KeyError, TypeError, ValueError) as e:
        raise ScorecardError(f"Invalid balance entry: {e}") from e


# ============================================================================
# ROUND SCORING
# ============================================================================

def score_round_matches(
    doc: RoundDocument,
    points_for_win: float,
    points_for_half: float,
) -> List[MatchOutcome]:
    """Playing handicaps, net scores and match state for every match."""
    outcomes = []
    for match in doc.matches:
        inputs = [
            PlayerHandicapInput(player_id=pid, side=side, handicap_index=_index(doc, pid))
            for side, ids in ((1, match.side1), (2, match.side2))
            for pid in ids
        ]
        handicaps = compute_match_handicaps(inputs, doc.format, doc.handicap_config, doc.tee)
        playing = {h.player_id: h.playing_handicap for h in handicaps}

        # First score recorded for a hole wins, as in skins and TILT
        nets: Dict[str, Dict[int, int]] = {pid: {} for pid in playing}
        for score in doc.scores:
            if score.player_id not in playing or score.hole_number in nets[score.player_id]:
                continue
            hole = doc.tee.hole(score.hole_number)
            hole_score = build_hole_score(score.player_id, hole, score.gross_score,
                                          playing[score.player_id], doc.max_score)
            nets[score.player_id][hole.number] = hole_score.net_score

        state = score_match(
            doc.format,
            doc.tee.holes,
            [nets[pid] for pid in match.side1],
            [nets[pid] for pid in match.side2],
            points_for_win,
            points_for_half,
        )
        outcomes.append(MatchOutcome(match=match, handicaps=handicaps, state=state))
    return outcomes


def round_skins(doc: RoundDocument) -> RoundSkins:
    return compute_skins_for_round(
        doc.format,
        doc.tee,
        doc.scores,
        doc.players,
        doc.handicap_config,
        doc.skins_entry_fee,
        doc.skins_carryover,
        doc.max_score,
    )


def tilt_round(doc: RoundDocument) -> TiltRound:
    return TiltRound(
        round_id=doc.round_id,
        tee=doc.tee,
        scores=doc.scores,
        players=doc.players,
        entry_fee=doc.tilt_entry_fee,
        handicap_config=doc.handicap_config,
        max_score=doc.max_score,
    )


def _index(doc: RoundDocument, player_id: str) -> Optional[float]:
    player = doc.player(player_id)
    return player.handicap_index if player else None

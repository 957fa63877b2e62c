"""
Data models for the golf trip scoring engine.
Plain dataclasses with no behavior beyond derived properties, safe to serialize.
"""

from dataclasses import dataclass, field
from typing import Optional, List, Dict
from enum import Enum

from .money import round_money


class Format(Enum):
    """Round competition format."""
    FOURBALL = "FOURBALL"                    # Best ball of each side
    FOURSOMES = "FOURSOMES"                  # Alternate shot, one ball per side
    MODIFIED_ALT_SHOT = "MODIFIED_ALT_SHOT"  # Both drive, then alternate
    SCRAMBLE = "SCRAMBLE"                    # Team picks best shot every time
    SHAMBLE = "SHAMBLE"                      # Best drive, then own ball
    SINGLES = "SINGLES"                      # One vs one
    STROKEPLAY = "STROKEPLAY"                # Totals compared at the end

    @classmethod
    def parse(cls, value) -> "Format":
        """Accept a Format or its name (case-insensitive)."""
        if isinstance(value, cls):
            return value
        try:
            return cls(str(value).strip().upper())
        except ValueError:
            raise ValueError(f"Unknown round format: {value!r}") from None

    @property
    def is_team(self) -> bool:
        """Formats where a side records a single score per hole."""
        return self in (Format.FOURSOMES, Format.SCRAMBLE, Format.MODIFIED_ALT_SHOT)


class HoleResult(Enum):
    """Outcome of a single match play hole. Missing comparisons are None."""
    SIDE1 = "SIDE1"
    SIDE2 = "SIDE2"
    HALVED = "HALVED"


class SplitType(Enum):
    """How a shared expense is divided."""
    EVEN_ALL = "EVEN_ALL"
    EVEN_SOME = "EVEN_SOME"
    CUSTOM = "CUSTOM"
    FULL_PAYBACK = "FULL_PAYBACK"


@dataclass(frozen=True)
class Hole:
    """A hole on a tee. stroke_index 1 = hardest."""
    number: int
    par: int
    stroke_index: int


@dataclass(frozen=True)
class Tee:
    """Tee data needed for handicap calculations."""
    slope: int
    rating: float
    holes: tuple = ()

    @property
    def par(self) -> int:
        return sum(h.par for h in self.holes)

    def hole(self, number: int) -> Optional[Hole]:
        for h in self.holes:
            if h.number == number:
                return h
        return None


@dataclass(frozen=True)
class TeamCombo:
    """Percentages applied to the low and second-low handicap of a side."""
    low_pct: float
    high_pct: float


@dataclass(frozen=True)
class HandicapConfig:
    """Handicap rules for a trip. Passed explicitly into every calculation."""
    percentage: float = 100
    max_handicap: Optional[int] = None
    off_the_low: bool = True
    use_unified_formula: bool = False
    team_combos: Dict[Format, TeamCombo] = field(default_factory=dict)
    skins_team_combos: Optional[Dict[Format, TeamCombo]] = None

    @classmethod
    def from_dict(cls, data: Optional[dict]) -> "HandicapConfig":
        """Build from the persisted JSON shape (camelCase keys)."""
        if not data:
            return cls()

        def combos(raw):
            if raw is None:
                return None
            return {
                Format.parse(fmt): TeamCombo(low_pct=c["lowPct"], high_pct=c["highPct"])
                for fmt, c in raw.items()
            }

        return cls(
            percentage=data.get("percentage", 100),
            max_handicap=data.get("maxHandicap"),
            off_the_low=data.get("offTheLow", True),
            use_unified_formula=data.get("useUnifiedFormula", False),
            team_combos=combos(data.get("teamCombos")) or {},
            skins_team_combos=combos(data.get("skinsTeamCombos")),
        )

    @property
    def skins_combos(self) -> Dict[Format, TeamCombo]:
        """Skins team combos, falling back to the match play combos."""
        if self.skins_team_combos is not None:
            return self.skins_team_combos
        return self.team_combos


@dataclass
class PlayerHandicapInput:
    """A player entering a match with their index snapshot."""
    player_id: str
    side: int
    handicap_index: Optional[float] = None


@dataclass
class PlayerRoundContext:
    """Handicap context for a player in one match."""
    player_id: str
    side: int
    handicap_index: float
    course_handicap: int
    playing_handicap: int


@dataclass
class HoleScore:
    """A player's score on one hole, gross already capped."""
    player_id: str
    hole_number: int
    gross_score: int
    strokes_received: int = 0

    @property
    def net_score(self) -> int:
        return self.gross_score - self.strokes_received


@dataclass
class MatchState:
    """Match play state derived from hole results."""
    holes_played: int
    holes_remaining: int
    side1_lead: int  # Positive = side 1 up
    is_complete: bool
    is_dormie: bool
    display_text: str  # "2 UP", "AS", "1 DN"
    result_text: Optional[str]  # "3&2", "1UP", "Halved" once complete
    side1_points: float = 0
    side2_points: float = 0
    closed_at: Optional[int] = None


@dataclass
class StrokePlayResult:
    """Final result of a stroke play match."""
    side1_total: int
    side2_total: int
    result_text: str
    side1_points: float
    side2_points: float


@dataclass
class SkinHole:
    """Skins outcome for one hole."""
    hole_number: int
    winner_id: Optional[str] = None
    net_score: Optional[int] = None
    skins: int = 0  # Skins carried into this hole plus its own
    value: float = 0.0


@dataclass
class PlayerSkins:
    player_id: str
    skins_won: int
    money_won: float


@dataclass
class SkinsResult:
    """Skins for a round."""
    holes: List[SkinHole]
    skins_awarded: int
    skin_value: float
    total_pot: float
    player_totals: List[PlayerSkins] = field(default_factory=list)

    @property
    def money_awarded(self) -> float:
        return sum(p.money_won for p in self.player_totals)


@dataclass
class RoundSkins:
    """Skins computed from raw round data, with team winnings distributed."""
    result: SkinsResult
    payouts: List[PlayerSkins]
    unique_player_count: int
    team_members: Dict[str, List[str]] = field(default_factory=dict)
    participants: List[str] = field(default_factory=list)
    entry_fee: float = 0.0


@dataclass(frozen=True)
class TiltPoints:
    """Base points by net score relative to par."""
    albatross: int = 16
    eagle: int = 8
    birdie: int = 4
    par: int = 2
    bogey: int = 0
    double_plus: int = -4


@dataclass(frozen=True)
class TiltCarryover:
    """Streak state handed from one round to the next."""
    multiplier: int = 1
    streak: int = 0


@dataclass
class TiltHole:
    hole_number: int
    net_vs_par: int
    base_points: int
    multiplier: int
    points: int
    running_total: int


@dataclass
class TiltPlayerResult:
    """A player's TILT round."""
    player_id: str
    holes: List[TiltHole] = field(default_factory=list)
    total_points: int = 0
    final_multiplier: int = 1
    final_streak: int = 0

    @property
    def carryover(self) -> TiltCarryover:
        return TiltCarryover(multiplier=self.final_multiplier, streak=self.final_streak)


@dataclass
class TiltResult:
    """TILT results for a round, players sorted by total points."""
    players: List[TiltPlayerResult]
    total_pot: float
    entry_fee: float
    player_count: int
    carryover: Dict[str, TiltCarryover] = field(default_factory=dict)


@dataclass
class TiltTournament:
    """TILT across all rounds of a trip."""
    rounds: List[TiltResult]
    grand_totals: Dict[str, int]
    total_pot: float
    payouts: Dict[str, float] = field(default_factory=dict)


@dataclass
class PlayerBalance:
    """Signed balance: positive = owed money, negative = owes money."""
    player_id: str
    name: str
    net_balance: float
    payment_balance: float = 0.0
    expense_balance: float = 0.0
    gambling_balance: float = 0.0


@dataclass
class SimplifiedDebt:
    """A single transfer that settles part of the trip's balances."""
    from_player_id: str
    from_name: str
    to_player_id: str
    to_name: str
    amount: float


@dataclass
class SplitResult:
    """One player's share of an expense."""
    player_id: str
    amount: float
    is_payer: bool


@dataclass
class TeamStanding:
    """Cup standings for a team."""
    team_id: str
    total_points: float = 0
    matches_won: int = 0
    matches_lost: int = 0
    matches_halved: int = 0
    by_round: Dict[str, float] = field(default_factory=dict)


@dataclass
class MatchRecord:
    """A completed match as seen by the standings table."""
    round_id: str
    side1_team_ids: List[str]
    side2_team_ids: List[str]
    side1_points: float
    side2_points: float
    side1_player_ids: List[str] = field(default_factory=list)
    side2_player_ids: List[str] = field(default_factory=list)


@dataclass
class PlayerStats:
    """A player's trip record and scoring breakdown."""
    player_id: str
    matches_played: int = 0
    matches_won: int = 0
    matches_lost: int = 0
    matches_halved: int = 0
    match_points: float = 0
    holes_played: int = 0
    total_gross: int = 0
    total_par: int = 0
    eagles: int = 0            # two or more under par, gross
    birdies: int = 0
    pars: int = 0
    bogeys: int = 0
    doubles_plus: int = 0
    skins_won: int = 0
    skins_money: float = 0.0

    @property
    def avg_vs_par(self) -> float:
        """Average gross strokes over par per hole played."""
        if self.holes_played == 0:
            return 0.0
        return round_money((self.total_gross - self.total_par) / self.holes_played)


@dataclass
class RoundScore:
    """A raw gross score as entered for a match."""
    player_id: str
    hole_number: int
    gross_score: int
    match_id: str = ""
    side: int = 1


@dataclass
class SideGamePlayer:
    """A trip player's index snapshot and side game opt-ins."""
    player_id: str
    handicap_index: Optional[float] = None
    skins_opt_in: bool = False
    tilt_opt_in: bool = False


@dataclass
class TiltRound:
    """Everything needed to score one round of TILT."""
    round_id: str
    tee: Tee
    scores: List[RoundScore]
    players: List[SideGamePlayer]
    entry_fee: float
    handicap_config: Optional[HandicapConfig] = None
    max_score: Optional[int] = None


@dataclass
class PaymentItem:
    """A scheduled trip payment every player owes, and what each has paid."""
    name: str
    amount: float
    paid: Dict[str, float] = field(default_factory=dict)


@dataclass
class Expense:
    """A shared expense paid by one player, already split."""
    paid_by_id: str
    amount: float
    splits: List[SplitResult] = field(default_factory=list)
    description: str = ""

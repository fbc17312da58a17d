# career/types.py
from __future__ import annotations

from dataclasses import dataclass, field, asdict
from typing import Any, Dict, List, Literal, Optional

# --------- Canonical vocabularies ---------

Position = Literal["GK", "DEF", "MID", "ATT"]
POSITIONS = ("GK", "DEF", "MID", "ATT")

Mentality = Literal["Defensive", "Balanced", "Attacking", "Gung-Ho"]
MENTALITIES = ("Defensive", "Balanced", "Attacking", "Gung-Ho")

FOCUSES = ("Wings", "Central", "Mixed")

PLAYER_ROLES = (
    "Sweeper Keeper", "No-Nonsense", "Ball Playing", "Playmaker", "Box-to-Box",
    "Ball Winner", "Target Man", "Poacher", "False Nine", "Standard",
)

EVENT_TYPES = (
    "GOAL", "YELLOW", "RED", "SUB", "COMMENTARY",
    "SHOT_OFF_TARGET", "FOUL", "SAVE", "WOODWORK",
)
SIDES = ("home", "away")

OBJECTIVE_KINDS = ("WINS", "GOALS", "ACADEMY_PROMOTIONS", "STADIUM_EXPANSION")

FFP_HEALTHY = "Healthy"
FFP_WARNING = "Warning"
FFP_VIOLATION = "Violation"

ATTRIBUTE_KEYS = ("pace", "shooting", "passing", "tackling", "stamina")


# --------- Players ---------

@dataclass
class PlayerStats:
    appearances: int = 0
    goals: int = 0
    assists: int = 0
    avg_rating: float = 0.0
    clean_sheets: int = 0
    saves: int = 0


@dataclass
class Player:
    pid: str
    name: str
    position: str
    rating: int
    potential: int
    age: int = 24
    nationality: str = "England"
    form: float = 7.0
    fitness: int = 100
    market_value: int = 0
    salary: int = 0
    contract_years: int = 3
    is_academy: bool = False
    match_history: List[float] = field(default_factory=list)
    stats: PlayerStats = field(default_factory=PlayerStats)
    attributes: Dict[str, int] = field(default_factory=dict)

    @property
    def recent_ratings(self) -> List[float]:
        """Last five match ratings, oldest first (what the squad card shows)."""
        return self.match_history[-5:]

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)

    @classmethod
    def from_dict(cls, d: Dict[str, Any]) -> "Player":
        stats = dict(d.get("stats") or {})
        return cls(
            pid=str(d.get("pid", d.get("id", ""))),
            name=str(d.get("name", "Unknown")),
            position=str(d.get("position", "MID")),
            rating=int(d.get("rating", 60)),
            potential=int(d.get("potential", d.get("rating", 60))),
            age=int(d.get("age", 24)),
            nationality=str(d.get("nationality", "England")),
            form=float(d.get("form", 7.0)),
            fitness=int(d.get("fitness", 100)),
            market_value=int(d.get("market_value", d.get("marketValue", 0))),
            salary=int(d.get("salary", 0)),
            contract_years=int(d.get("contract_years", d.get("contractYears", 1))),
            is_academy=bool(d.get("is_academy", d.get("isAcademy", False))),
            match_history=[float(x) for x in d.get("match_history", d.get("matchHistory", []))],
            stats=PlayerStats(
                appearances=int(stats.get("appearances", 0)),
                goals=int(stats.get("goals", 0)),
                assists=int(stats.get("assists", 0)),
                avg_rating=float(stats.get("avg_rating", stats.get("avgRating", 0.0))),
                clean_sheets=int(stats.get("clean_sheets", stats.get("cleanSheets", 0))),
                saves=int(stats.get("saves", 0)),
            ),
            attributes={k: int(v) for k, v in (d.get("attributes") or {}).items() if k in ATTRIBUTE_KEYS},
        )


# --------- Club pieces ---------

@dataclass
class Stadium:
    name: str = "Home Ground"
    capacity: int = 25_000
    facility_level: int = 1


@dataclass
class Tactics:
    formation: str = "4-3-3"
    mentality: str = "Balanced"
    focus: str = "Mixed"
    role_assignments: Dict[str, str] = field(default_factory=dict)
    starting_xi: List[str] = field(default_factory=list)


@dataclass
class Transaction:
    kind: str          # "revenue" | "expenditure"
    category: str
    amount: int
    label: str = ""
    matchday: int = 0


@dataclass
class Financials:
    revenue: int = 0
    expenditure: int = 0
    transfer_spend: int = 0
    wage_bill: int = 0
    ffp_status: str = FFP_HEALTHY
    transactions: List[Transaction] = field(default_factory=list)


@dataclass
class Objective:
    oid: str
    title: str
    description: str
    kind: str
    target: int
    reward: int
    current: int = 0
    completed: bool = False
    claimed: bool = False


@dataclass
class Club:
    cid: str
    name: str
    manager_name: str = "Gaffer"
    players: List[Player] = field(default_factory=list)
    funds: int = 0
    wins: int = 0
    draws: int = 0
    losses: int = 0
    goals_for: int = 0
    goals_against: int = 0
    tactics: Tactics = field(default_factory=Tactics)
    academy_level: int = 1
    academy_promotions: int = 0
    stadium: Stadium = field(default_factory=Stadium)
    objectives: List[Objective] = field(default_factory=list)
    tier: int = 2
    season: int = 1
    matchday: int = 0
    job_security: int = 80
    manager_salary: int = 50_000
    manager_contract_years: int = 3
    financials: Financials = field(default_factory=Financials)
    point_deduction: int = 0

    @property
    def played(self) -> int:
        return self.wins + self.draws + self.losses

    def player(self, pid: str) -> Optional[Player]:
        for p in self.players:
            if p.pid == pid:
                return p
        return None

    def starters(self) -> List[Player]:
        by_id = {p.pid: p for p in self.players}
        return [by_id[pid] for pid in self.tactics.starting_xi if pid in by_id]

    def average_rating(self) -> float:
        if not self.players:
            return 0.0
        return sum(p.rating for p in self.players) / len(self.players)

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)

    @classmethod
    def from_dict(cls, d: Dict[str, Any]) -> "Club":
        tac = dict(d.get("tactics") or {})
        fin = dict(d.get("financials") or {})
        sta = dict(d.get("stadium") or {})
        return cls(
            cid=str(d.get("cid", d.get("id", "user-team"))),
            name=str(d.get("name", "Unnamed FC")),
            manager_name=str(d.get("manager_name", d.get("managerName", "Gaffer"))),
            players=[Player.from_dict(p) for p in d.get("players", [])],
            funds=int(d.get("funds", 0)),
            wins=int(d.get("wins", 0)),
            draws=int(d.get("draws", 0)),
            losses=int(d.get("losses", 0)),
            goals_for=int(d.get("goals_for", d.get("goalsFor", 0))),
            goals_against=int(d.get("goals_against", d.get("goalsAgainst", 0))),
            tactics=Tactics(
                formation=str(tac.get("formation", "4-3-3")),
                mentality=str(tac.get("mentality", "Balanced")),
                focus=str(tac.get("focus", "Mixed")),
                role_assignments=dict(tac.get("role_assignments", tac.get("roleAssignments", {}))),
                starting_xi=[str(x) for x in tac.get("starting_xi", tac.get("startingXI", []))],
            ),
            academy_level=int(d.get("academy_level", d.get("academyLevel", 1))),
            academy_promotions=int(d.get("academy_promotions", 0)),
            stadium=Stadium(
                name=str(sta.get("name", "Home Ground")),
                capacity=int(sta.get("capacity", 25_000)),
                facility_level=int(sta.get("facility_level", sta.get("facilityLevel", 1))),
            ),
            objectives=[Objective(**o) for o in d.get("objectives", []) if "oid" in o],
            tier=int(d.get("tier", 2)),
            season=int(d.get("season", 1)),
            matchday=int(d.get("matchday", 0)),
            job_security=int(d.get("job_security", d.get("jobSecurity", 80))),
            manager_salary=int(d.get("manager_salary", d.get("managerSalary", 50_000))),
            manager_contract_years=int(d.get("manager_contract_years", d.get("managerContractYears", 3))),
            financials=Financials(
                revenue=int(fin.get("revenue", 0)),
                expenditure=int(fin.get("expenditure", 0)),
                transfer_spend=int(fin.get("transfer_spend", fin.get("transferSpend", 0))),
                wage_bill=int(fin.get("wage_bill", fin.get("wageBill", 0))),
                ffp_status=str(fin.get("ffp_status", fin.get("ffpStatus", FFP_HEALTHY))),
                transactions=[Transaction(**t) for t in fin.get("transactions", [])],
            ),
            point_deduction=int(d.get("point_deduction", d.get("pointDeduction", 0)) or 0),
        )


# --------- League ---------

@dataclass
class LeagueStanding:
    name: str
    tier: int
    played: int = 0
    wins: int = 0
    draws: int = 0
    losses: int = 0
    gf: int = 0
    ga: int = 0
    points: int = 0

    @property
    def goal_diff(self) -> int:
        return int(self.gf) - int(self.ga)

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)

    @classmethod
    def from_dict(cls, d: Dict[str, Any]) -> "LeagueStanding":
        return cls(
            name=str(d["name"]),
            tier=int(d.get("tier", 2)),
            played=int(d.get("played", 0)),
            wins=int(d.get("wins", 0)),
            draws=int(d.get("draws", 0)),
            losses=int(d.get("losses", 0)),
            gf=int(d.get("gf", 0)),
            ga=int(d.get("ga", 0)),
            points=int(d.get("points", 0)),
        )


# --------- Matches ---------

@dataclass(frozen=True)
class MatchEvent:
    minute: int
    type: str
    side: str
    description: str = ""
    player: Optional[str] = None

    @property
    def is_goal(self) -> bool:
        return self.type == "GOAL"


@dataclass(frozen=True)
class MatchResult:
    home_team: str
    away_team: str
    home_score: int
    away_score: int
    events: List[MatchEvent]
    summary: str
    player_ratings: Dict[str, float]
    revenue: int
    man_of_the_match: Optional[str] = None

    @property
    def outcome(self) -> str:
        """'W', 'D' or 'L' from the user's (home) perspective."""
        if self.home_score > self.away_score:
            return "W"
        if self.home_score == self.away_score:
            return "D"
        return "L"


@dataclass(frozen=True)
class JobOffer:
    team_name: str
    tier: int
    salary: int

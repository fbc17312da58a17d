# matchsim/oracle.py
from __future__ import annotations

import math
import random
from dataclasses import dataclass
from typing import Any, Dict, List, Optional, Protocol

from career.config import FINAL_MINUTE
from career.errors import OracleFailure
from career.rng import mix
from career.types import EVENT_TYPES, SIDES, Club, MatchEvent, MatchResult, Stadium

# ---------------------------------------------------------------------------
# Request / protocol
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class MatchRequest:
    club: Club
    opponent_name: str
    opponent_strength: int
    matchday: int
    seed: int = 0

    def to_payload(self) -> Dict[str, Any]:
        """JSON body for remote oracles: roster, tactics and the opponent descriptor."""
        club = self.club
        roles = club.tactics.role_assignments
        return {
            "team": club.name,
            "strength": round(team_strength(club), 1),
            "mentality": club.tactics.mentality,
            "focus": club.tactics.focus,
            "formation": club.tactics.formation,
            "players": [
                {
                    "id": p.pid, "name": p.name, "position": p.position, "rating": p.rating,
                    "role": roles.get(p.pid, "Standard"),
                    "starting": p.pid in club.tactics.starting_xi,
                    "attributes": dict(p.attributes),
                }
                for p in club.players
            ],
            "opponent": {"name": self.opponent_name, "strength": self.opponent_strength},
        }


class MatchOracle(Protocol):
    def simulate(self, request: MatchRequest) -> MatchResult: ...


def team_strength(club: Club) -> float:
    """Average rating of the starters (whole squad when no XI is picked)."""
    pool = club.starters() or club.players
    if not pool:
        return 50.0
    return sum(p.rating for p in pool) / len(pool)


def gate_revenue(stadium: Stadium, rng: random.Random) -> int:
    attendance = stadium.capacity * (0.8 + rng.random() * 0.2)
    return int(math.floor(attendance * (30 + stadium.facility_level * 10)))


# ---------------------------------------------------------------------------
# Validation (oracle output is untrusted)
# ---------------------------------------------------------------------------

def _int_field(data: Dict[str, Any], key: str) -> int:
    v = data.get(key)
    if isinstance(v, bool) or not isinstance(v, (int, float)) or int(v) != v or v < 0:
        raise OracleFailure(f"match result has a bad {key!r}: {v!r}")
    return int(v)


def parse_event(raw: Dict[str, Any], home_name: str) -> MatchEvent:
    if not isinstance(raw, dict):
        raise OracleFailure(f"match event is not an object: {raw!r}")
    etype = str(raw.get("type", "")).upper()
    if etype not in EVENT_TYPES:
        raise OracleFailure(f"unknown match event type {etype!r}")
    minute = _int_field(raw, "minute")
    if minute > FINAL_MINUTE:
        raise OracleFailure(f"match event minute out of range: {minute}")
    side = raw.get("side")
    if side not in SIDES:
        side = "home" if raw.get("team") == home_name else "away"
    player = raw.get("player")
    return MatchEvent(
        minute=minute,
        type=etype,
        side=side,
        description=str(raw.get("description", "")),
        player=str(player) if player else None,
    )


def parse_result(
    data: Any,
    request: MatchRequest,
    revenue: Optional[int] = None,
) -> MatchResult:
    """Turn an oracle payload into a MatchResult or raise OracleFailure."""
    if not isinstance(data, dict):
        raise OracleFailure("match result is not an object")
    home_score = _int_field(data, "homeScore" if "homeScore" in data else "home_score")
    away_score = _int_field(data, "awayScore" if "awayScore" in data else "away_score")
    raw_events = data.get("events")
    if not isinstance(raw_events, list):
        raise OracleFailure("match result has no event list")
    events = [parse_event(e, request.club.name) for e in raw_events]

    raw_ratings = data.get("playerRatings", data.get("player_ratings"))
    if not isinstance(raw_ratings, dict):
        raise OracleFailure("match result has no player ratings")
    ratings: Dict[str, float] = {}
    for pid, r in raw_ratings.items():
        if isinstance(r, bool) or not isinstance(r, (int, float)) or not 0.0 <= float(r) <= 10.0:
            raise OracleFailure(f"bad rating for player {pid!r}: {r!r}")
        ratings[str(pid)] = float(r)

    if revenue is None:
        revenue = _int_field(data, "revenue")
    return MatchResult(
        home_team=request.club.name,
        away_team=request.opponent_name,
        home_score=home_score,
        away_score=away_score,
        events=sorted(events, key=lambda e: e.minute),
        summary=str(data.get("summary", "")),
        player_ratings=ratings,
        revenue=int(revenue),
        man_of_the_match=(data.get("manOfTheMatch") or {}).get("name") if isinstance(data.get("manOfTheMatch"), dict) else None,
    )


def validate_result(result: Any) -> MatchResult:
    """Sanity-check a MatchResult handed over by any oracle."""
    if not isinstance(result, MatchResult):
        raise OracleFailure(f"oracle returned {type(result).__name__}, not a MatchResult")
    if result.home_score < 0 or result.away_score < 0:
        raise OracleFailure("negative score")
    for e in result.events:
        if e.type not in EVENT_TYPES or e.side not in SIDES or not 0 <= e.minute <= FINAL_MINUTE:
            raise OracleFailure(f"malformed event: {e!r}")
    for pid, r in result.player_ratings.items():
        if not 0.0 <= float(r) <= 10.0:
            raise OracleFailure(f"rating out of range for {pid!r}: {r!r}")
    if result.revenue < 0:
        raise OracleFailure("negative revenue")
    return result


# ---------------------------------------------------------------------------
# Offline oracle
# ---------------------------------------------------------------------------

MENTALITY_ATTACK = {"Defensive": 0.8, "Balanced": 1.0, "Attacking": 1.2, "Gung-Ho": 1.4}
MENTALITY_EXPOSURE = {"Defensive": 0.75, "Balanced": 1.0, "Attacking": 1.15, "Gung-Ho": 1.35}
SCORER_WEIGHT = {"ATT": 6, "MID": 3, "DEF": 1, "GK": 0}

_FLAVOUR = {
    "SAVE": "{who} gets down well to keep it out.",
    "SHOT_OFF_TARGET": "{who} drags a shot wide.",
    "FOUL": "{who} goes through the back of his man.",
    "YELLOW": "{who} is booked.",
    "WOODWORK": "{who} rattles the crossbar!",
    "COMMENTARY": "The tempo drops as both sides regroup.",
}


def _poisson(rng: random.Random, lam: float) -> int:
    limit, k, p = math.exp(-lam), 0, 1.0
    while True:
        p *= rng.random()
        if p <= limit:
            return k
        k += 1


class LocalMatchOracle:
    """
    Seeded quick sim. Team strength against opponent strength sets the
    expected goals, mentality trades attack for exposure; everything else is
    flavour. No physics.
    """

    def __init__(self, seed: int = 0) -> None:
        self.seed = int(seed)

    def simulate(self, request: MatchRequest) -> MatchResult:
        club = request.club
        rng = random.Random(mix(self.seed ^ int(request.seed), request.matchday, request.opponent_name))
        starters = club.starters() or club.players[:11]
        mentality = club.tactics.mentality

        edge = (team_strength(club) - float(request.opponent_strength)) * 0.06
        lam_home = max(0.2, (1.35 + edge) * MENTALITY_ATTACK.get(mentality, 1.0))
        lam_away = max(0.2, (1.15 - edge) * MENTALITY_EXPOSURE.get(mentality, 1.0))
        home_goals = min(7, _poisson(rng, lam_home))
        away_goals = min(7, _poisson(rng, lam_away))

        events: List[MatchEvent] = []
        goals_by: Dict[str, int] = {}
        weights = [SCORER_WEIGHT.get(p.position, 1) for p in starters]
        for _ in range(home_goals):
            minute = rng.randint(1, 94)
            scorer = rng.choices(starters, weights=weights)[0] if starters and sum(weights) else None
            name = scorer.name if scorer else club.name
            if scorer:
                goals_by[scorer.pid] = goals_by.get(scorer.pid, 0) + 1
            events.append(MatchEvent(minute, "GOAL", "home", f"GOAL! {name} finds the net.", scorer.name if scorer else None))
        for _ in range(away_goals):
            minute = rng.randint(1, 94)
            events.append(MatchEvent(minute, "GOAL", "away", f"{request.opponent_name} score.", None))

        keepers = [p for p in starters if p.position == "GK"]
        outfield = [p for p in starters if p.position != "GK"]
        home_saves = 0
        for _ in range(rng.randint(18, 24) - len(events)):
            etype = rng.choice(("SAVE", "SAVE", "SHOT_OFF_TARGET", "FOUL", "FOUL", "YELLOW", "WOODWORK", "COMMENTARY"))
            side = rng.choice(SIDES)
            if side == "home":
                pool = keepers if etype == "SAVE" else outfield
                who = rng.choice(pool).name if pool else None
            else:
                who = None
            if etype == "SAVE" and side == "home":
                home_saves += 1
            text = _FLAVOUR[etype].format(who=who or request.opponent_name)
            events.append(MatchEvent(rng.randint(1, 95), etype, side, text, who))
        events.sort(key=lambda e: e.minute)

        outcome_bonus = 0.5 if home_goals > away_goals else (-0.5 if home_goals < away_goals else 0.0)
        ratings: Dict[str, float] = {}
        for p in starters:
            r = 6.4 + outcome_bonus + rng.uniform(-0.9, 0.9) + 0.8 * goals_by.get(p.pid, 0)
            if p.position == "GK":
                r += 0.3 * home_saves + (0.5 if away_goals == 0 else -0.2 * away_goals)
            ratings[p.pid] = round(max(4.0, min(10.0, r)), 1)

        motm = None
        if ratings:
            best = max(ratings, key=ratings.get)
            motm = next((p.name for p in starters if p.pid == best), None)

        summary = (
            f"{club.name} {home_goals}-{away_goals} {request.opponent_name}. "
            f"A {mentality.lower()} approach from the home side"
            + (" paid off." if home_goals > away_goals else " was not enough." if home_goals < away_goals else " earned a share of the spoils.")
        )
        return MatchResult(
            home_team=club.name,
            away_team=request.opponent_name,
            home_score=home_goals,
            away_score=away_goals,
            events=events,
            summary=summary,
            player_ratings=ratings,
            revenue=gate_revenue(club.stadium, rng),
            man_of_the_match=motm,
        )

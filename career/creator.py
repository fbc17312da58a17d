# career/creator.py
from __future__ import annotations

import random
from typing import Any, Dict, List, Optional, Tuple

from .config import (
    MANAGER_CONTRACT_YEARS, MANAGER_SALARY, SECURITY_START, START_FUNDS, STARTING_XI_SIZE,
)
from .objectives import default_objectives
from .rng import child_rng, short_id
from .standings import new_table
from .types import ATTRIBUTE_KEYS, Club, LeagueStanding, Player, PlayerStats, Stadium, Tactics

OPPONENTS: List[str] = [
    "Manchester Blue", "Arsenal London", "Real Madrid", "FC Bayern",
    "Paris SG", "Juventus", "Inter Milan", "Bayer Leverkusen",
    "FC Barcelona", "Atletico Madrid", "AC Milan", "Dortmund",
    "Napoli", "Chelsea Blue", "Tottenham White", "Aston Villa",
    "Newcastle Black", "Brighton Sea", "West Ham Hammer", "Monaco Prince",
    "Leicester Fox", "Leeds White", "Southampton Saint", "Ipswich Tractor",
    "Sunderland Light", "Hull Tiger", "Middlesbrough Red", "Norwich Canary",
    "Coventry Sky", "Preston Lily", "Bristol City", "Cardiff Blue",
    "Watford Hornet", "Swansea Jack", "Sheffield Steel", "Blackburn Rose",
    "Millwall Lion", "QPR Hoop", "Stoke Potters", "Plymouth Green",
]
TIER_ONE_CLUBS = 17

NATIONALITIES = ["England", "France", "Brazil", "Spain", "Germany", "Argentina", "Portugal", "Netherlands"]

_FIRST = ["Alex", "Bruno", "Callum", "Dario", "Eli", "Felix", "Gio", "Hugo", "Ivan", "Jonas",
          "Kai", "Luca", "Mateo", "Nico", "Oscar", "Pablo", "Rafa", "Sami", "Theo", "Yuri"]
_LAST  = ["Adams", "Berg", "Costa", "Duarte", "Evans", "Fischer", "Garcia", "Hughes", "Ito", "Jansen",
          "Keller", "Lopes", "Moreau", "Novak", "Okafor", "Price", "Rossi", "Silva", "Torres", "Vidal"]

# (position, rating) template of the starting squad; the first eleven start.
SQUAD_TEMPLATE: List[Tuple[str, int]] = [
    ("GK", 87), ("DEF", 89), ("DEF", 83), ("DEF", 86), ("DEF", 84),
    ("MID", 86), ("MID", 83), ("MID", 79), ("ATT", 91), ("ATT", 85), ("ATT", 84),
    ("GK", 77), ("DEF", 80), ("DEF", 76), ("DEF", 75), ("DEF", 77),
    ("MID", 81), ("MID", 80), ("MID", 79), ("ATT", 82), ("ATT", 83), ("ATT", 82),
]


def _generate_name(rng: random.Random) -> str:
    i = rng.randrange(0, len(_FIRST)); j = (i + rng.randrange(0, len(_LAST))) % len(_LAST)
    return f"{_FIRST[i]} {_LAST[j]}"


def generate_attributes(rng: random.Random, position: str, rating: int) -> Dict[str, int]:
    """Pace/shooting/passing/tackling/stamina around the rating, bent by position."""
    v = lambda: rng.randint(-10, 9)
    return {
        "pace": min(99, max(30, rating + v() + (10 if position == "ATT" else 0))),
        "shooting": min(99, max(10, rating + v() + (15 if position == "ATT" else -15))),
        "passing": min(99, max(20, rating + v() + (10 if position == "MID" else 0))),
        "tackling": min(99, max(10, rating + v() + (20 if position == "DEF" else -20))),
        "stamina": min(99, max(40, rating + v())),
    }


def generate_player(pid: str, name: str, position: str, rating: int, rng: random.Random) -> Player:
    return Player(
        pid=pid,
        name=name,
        position=position,
        rating=int(rating),
        potential=int(rating) + rng.randrange(0, 12),
        age=18 + rng.randrange(0, 15),
        nationality=rng.choice(NATIONALITIES),
        form=7.0,
        fitness=100,
        market_value=int(rating) * int(rating) * 12_000,
        salary=int(rating) * 1_200,
        contract_years=1 + rng.randrange(0, 4),
        attributes=generate_attributes(rng, position, int(rating)),
    )


def initial_squad(seed: int) -> List[Player]:
    rng = child_rng(seed, "squad")
    return [
        generate_player(str(i), _generate_name(rng), pos, rating, rng)
        for i, (pos, rating) in enumerate(SQUAD_TEMPLATE, start=1)
    ]


def initial_league() -> List[LeagueStanding]:
    pairs = [(n, 1) for n in OPPONENTS[:TIER_ONE_CLUBS]] + [(n, 2) for n in OPPONENTS[TIER_ONE_CLUBS:]]
    return new_table(pairs)


def new_club(seed: int, name: str = "Phoenix FC", manager_name: str = "Gaffer") -> Club:
    squad = initial_squad(seed)
    return Club(
        cid="user-team",
        name=name,
        manager_name=manager_name,
        players=squad,
        funds=START_FUNDS,
        tactics=Tactics(starting_xi=[p.pid for p in squad[:STARTING_XI_SIZE]]),
        academy_level=1,
        stadium=Stadium(name=f"{name.split()[0]} Arena", capacity=25_000, facility_level=1),
        objectives=default_objectives(),
        tier=2,
        matchday=0,
        job_security=SECURITY_START,
        manager_salary=MANAGER_SALARY,
        manager_contract_years=MANAGER_CONTRACT_YEARS,
    )


# ---------------------------------------------------------------------------
# Candidate records -> squad players
# ---------------------------------------------------------------------------

def _as_int(d: Dict[str, Any], key: str, default: int) -> int:
    try:
        return int(d.get(key, default))
    except (TypeError, ValueError):
        return default


def _attributes(raw: Dict[str, Any], position: str, rating: int, rng: random.Random) -> Dict[str, int]:
    """The record's own attributes where usable, generated ones for anything missing."""
    given = raw.get("attributes")
    given = given if isinstance(given, dict) else {}
    out = generate_attributes(rng, position, rating)
    for key in ATTRIBUTE_KEYS:
        if key in given:
            out[key] = min(99, max(1, _as_int(given, key, out[key])))
    return out


def transfer_player(raw: Dict[str, Any], rng: random.Random, pid: Optional[str] = None) -> Player:
    """A transfer-market record with identity and derived defaults attached."""
    rating = _as_int(raw, "rating", 70)
    position = str(raw.get("position", "MID"))
    return Player(
        pid=pid or short_id(rng),
        name=str(raw.get("name", "Unknown")),
        position=position,
        rating=rating,
        potential=max(rating, _as_int(raw, "potential", rating + rng.randrange(0, 15))),
        age=_as_int(raw, "age", 25),
        nationality=str(raw.get("nationality", "England")),
        form=7.0,
        fitness=100,
        market_value=rating * rating * 10_000,
        salary=rating * 1_000,
        contract_years=3,
        match_history=[],
        stats=PlayerStats(),
        attributes=_attributes(raw, position, rating, rng),
    )


def academy_player(raw: Dict[str, Any], rng: random.Random, pid: Optional[str] = None) -> Player:
    rating = _as_int(raw, "rating", 50)
    potential = max(rating, _as_int(raw, "potential", rating + 20))
    position = str(raw.get("position", "MID"))
    return Player(
        pid=pid or short_id(rng),
        name=str(raw.get("name", "Unknown")),
        position=position,
        rating=rating,
        potential=potential,
        age=16,
        nationality=str(raw.get("nationality", "England")),
        form=7.0,
        fitness=100,
        market_value=rating * potential * 500,
        salary=500,
        contract_years=5,
        is_academy=True,
        match_history=[],
        stats=PlayerStats(),
        attributes=_attributes(raw, position, rating, rng),
    )


# ---------------------------------------------------------------------------
# Offline candidate generator
# ---------------------------------------------------------------------------

class LocalCandidateGenerator:
    """
    Produces bare candidate records (no id, no derived fields) the way the
    remote generator would, from a seeded stream.
    """

    def __init__(self, seed: Optional[int] = None) -> None:
        self.rng = random.Random(seed)

    def transfer_market(self, average_rating: float, count: int = 4) -> List[Dict[str, Any]]:
        out = []
        for _ in range(count):
            position = self.rng.choice(("GK", "DEF", "MID", "ATT"))
            rating = max(40, min(95, int(round(average_rating)) + self.rng.randint(-4, 4)))
            out.append({
                "name": _generate_name(self.rng),
                "nationality": self.rng.choice(NATIONALITIES),
                "position": position,
                "rating": rating,
                "age": self.rng.randint(19, 32),
                "attributes": generate_attributes(self.rng, position, rating),
            })
        return out

    def academy_prospect(self, academy_level: int) -> Dict[str, Any]:
        rating_floor = 45 + academy_level * 5
        potential_floor = 70 + academy_level * 4
        position = self.rng.choice(("GK", "DEF", "MID", "ATT"))
        rating = rating_floor + self.rng.randint(0, 6)
        return {
            "name": _generate_name(self.rng),
            "nationality": self.rng.choice(NATIONALITIES),
            "position": position,
            "rating": rating,
            "potential": potential_floor + self.rng.randint(0, 12),
            "attributes": generate_attributes(self.rng, position, rating),
        }

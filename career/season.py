# career/season.py
from __future__ import annotations

import logging
from dataclasses import dataclass, field, replace
from typing import Dict, List, Optional, Tuple

from . import ledger
from .config import PROMOTION_SLOTS, SEASON_END_BONUS, SEASON_LENGTH
from .objectives import reset_for_season
from .standings import position_of, reset_rows, table_for_tier
from .types import Club, LeagueStanding

logger = logging.getLogger(__name__)


@dataclass
class SeasonSummary:
    season: int
    tier: int
    position: Optional[int]
    points: int
    wins: int
    draws: int
    losses: int
    revenue: int
    expenditure: int
    released: List[str] = field(default_factory=list)
    promoted: List[str] = field(default_factory=list)
    relegated: List[str] = field(default_factory=list)

    def to_dict(self) -> Dict:
        return {
            "season": self.season, "tier": self.tier, "position": self.position,
            "points": self.points, "wins": self.wins, "draws": self.draws, "losses": self.losses,
            "revenue": self.revenue, "expenditure": self.expenditure,
            "released": list(self.released), "promoted": list(self.promoted),
            "relegated": list(self.relegated),
        }

    @classmethod
    def from_dict(cls, d: Dict) -> "SeasonSummary":
        return cls(**d)


def is_complete(club: Club) -> bool:
    return int(club.matchday) >= SEASON_LENGTH


def advance_matchday(club: Club) -> Club:
    return replace(club, matchday=min(SEASON_LENGTH, club.matchday + 1))


def age_contracts(club: Club) -> Tuple[Club, List[str]]:
    """
    Every contract loses a year; players at 0 leave the club and are dropped
    from the starting XI and role assignments.
    """
    kept, released = [], []
    for p in club.players:
        years = int(p.contract_years) - 1
        if years > 0:
            kept.append(replace(p, contract_years=years))
        else:
            released.append(p)
    gone = {p.pid for p in released}
    tactics = replace(
        club.tactics,
        starting_xi=[pid for pid in club.tactics.starting_xi if pid not in gone],
        role_assignments={k: v for k, v in club.tactics.role_assignments.items() if k not in gone},
    )
    return replace(club, players=kept, tactics=tactics), [p.name for p in released]


def _promotion(rows: List[LeagueStanding], club: Optional[Club]) -> Tuple[List[str], List[str]]:
    """Names going up from tier 2 and down from tier 1, from the final tables."""
    top = table_for_tier(rows, 1, club)
    bottom = table_for_tier(rows, 2, club)
    slots = min(PROMOTION_SLOTS, len(top) // 2, len(bottom) // 2)
    if slots <= 0:
        return [], []
    promoted = [r.name for r in bottom[:slots]]
    relegated = [r.name for r in top[-slots:]]
    return promoted, relegated


def rollover(
    club: Club,
    rows: List[LeagueStanding],
    promotion: bool = True,
) -> Tuple[Club, List[LeagueStanding], SeasonSummary]:
    """
    Close the season:
      - final table position recorded, promotion/relegation applied
      - end-of-season bonus credited through the ledger
      - contracts aged, expired players released
      - season tallies (club and every standings row) and ledger totals reset
    """
    table = table_for_tier(rows, club.tier, club)
    mine = next((r for r in table if r.name == club.name), None)

    promoted, relegated = _promotion(rows, club) if promotion else ([], [])
    new_tier = club.tier
    if club.name in promoted:
        new_tier = 1
    elif club.name in relegated:
        new_tier = 2

    paid = ledger.credit(club, SEASON_END_BONUS, "season_bonus", f"Season {club.season} bonus")
    aged, released = age_contracts(paid)

    summary = SeasonSummary(
        season=club.season,
        tier=club.tier,
        position=position_of(table, club.name),
        points=mine.points if mine else 0,
        wins=club.wins,
        draws=club.draws,
        losses=club.losses,
        revenue=paid.financials.revenue,
        expenditure=paid.financials.expenditure,
        released=released,
        promoted=promoted,
        relegated=relegated,
    )

    moved = []
    for r in rows:
        if r.name in promoted:
            moved.append(replace(r, tier=1))
        elif r.name in relegated:
            moved.append(replace(r, tier=2))
        else:
            moved.append(r)

    new_club = replace(
        aged,
        season=club.season + 1,
        tier=new_tier,
        matchday=0,
        wins=0, draws=0, losses=0, goals_for=0, goals_against=0,
        point_deduction=0,
        financials=ledger.reset_season(aged.financials),
        objectives=reset_for_season(aged.objectives),
    )
    logger.info(
        "Season %d closed: %s finished %s in tier %d, %d released",
        summary.season, club.name, summary.position, summary.tier, len(released),
    )
    return new_club, reset_rows(moved), summary

# career/standings.py
from __future__ import annotations

from dataclasses import replace
from typing import Iterable, List, Optional, Tuple

from .config import POINTS_DRAW, POINTS_LOSS, POINTS_WIN
from .rng import mix
from .types import Club, LeagueStanding


def new_table(names_by_tier: Iterable[Tuple[str, int]]) -> List[LeagueStanding]:
    """Create zeroed standings rows from (name, tier) pairs."""
    return [LeagueStanding(name=name, tier=int(tier)) for name, tier in names_by_tier]


def points_for(wins: int, draws: int, deduction: int = 0) -> int:
    return POINTS_WIN * int(wins) + POINTS_DRAW * int(draws) - int(deduction or 0)


def user_row(club: Club) -> LeagueStanding:
    """The user's club as a standings row, always derived from the live Club."""
    return LeagueStanding(
        name=club.name,
        tier=club.tier,
        played=club.wins + club.draws + club.losses,
        wins=club.wins,
        draws=club.draws,
        losses=club.losses,
        gf=club.goals_for,
        ga=club.goals_against,
        points=points_for(club.wins, club.draws, club.point_deduction),
    )


def sort_rows(rows: Iterable[LeagueStanding]) -> List[LeagueStanding]:
    """
    Sort by:
      1) Points (desc)
      2) Goal difference (desc)
    Python's sort is stable, so equal rows keep their input order.
    """
    return sorted(rows, key=lambda r: (-int(r.points), -r.goal_diff))


def table_for_tier(
    rows: Iterable[LeagueStanding],
    tier: int,
    club: Optional[Club] = None,
    include_user: bool = True,
) -> List[LeagueStanding]:
    """
    Sorted table for one tier. The user's row replaces a placeholder of the same
    name (or is appended) only when the club currently plays in this tier.
    """
    in_tier = [r for r in rows if int(r.tier) == int(tier)]
    if club is not None and include_user and int(club.tier) == int(tier):
        mine = user_row(club)
        for i, r in enumerate(in_tier):
            if r.name == club.name:
                in_tier[i] = mine
                break
        else:
            in_tier.append(mine)
    return sort_rows(in_tier)


def position_of(table: List[LeagueStanding], name: str) -> Optional[int]:
    """1-based league position of `name` in an already sorted table."""
    for i, r in enumerate(table, start=1):
        if r.name == name:
            return i
    return None


def apply_result(row: LeagueStanding, goals_for: int, goals_against: int) -> LeagueStanding:
    """
    Return a copy of `row` with one result applied.
    Points system: 3-1-0 (W-D-L).
    """
    gf, ga = int(goals_for), int(goals_against)
    won, drawn, lost = int(gf > ga), int(gf == ga), int(gf < ga)
    return replace(
        row,
        played=row.played + 1,
        wins=row.wins + won,
        draws=row.draws + drawn,
        losses=row.losses + lost,
        gf=row.gf + gf,
        ga=row.ga + ga,
        points=row.points + won * POINTS_WIN + drawn * POINTS_DRAW + lost * POINTS_LOSS,
    )


def record_opponent(rows: List[LeagueStanding], opponent: str, goals_for: int, goals_against: int) -> List[LeagueStanding]:
    """Mirror the user's match into the opponent's row (goals from the opponent's side)."""
    return [apply_result(r, goals_for, goals_against) if r.name == opponent else r for r in rows]


# ---------------------------------------------------------------------------
# AI round (the rest of the tier plays while the user does)
# ---------------------------------------------------------------------------

def _deterministic_goals(seed: int, matchday: int, home: str, away: str) -> Tuple[int, int]:
    """Returns (home, away) goals in a small, stable range for the same inputs."""
    r = mix(seed, f"MD{matchday}:{home}-{away}")
    g_home = (r >> 5) % 4 + ((r >> 17) & 1)   # 0..4
    g_away = (r >> 9) % 3 + ((r >> 19) & 1)   # 0..3
    return int(g_home), int(g_away)


def simulate_round(
    rows: List[LeagueStanding],
    tier: int,
    exclude: Iterable[str],
    seed: int,
    matchday: int,
) -> List[LeagueStanding]:
    """
    Pair up every club of `tier` not in `exclude` and record a deterministic
    result for each pairing. The pairing rotates with the matchday; an odd club
    out sits the round out.
    """
    skip = set(exclude)
    names = [r.name for r in rows if int(r.tier) == int(tier) and r.name not in skip]
    if len(names) < 2:
        return list(rows)

    shift = matchday % len(names)
    order = names[shift:] + names[:shift]
    half = len(order) // 2
    results = {}
    for i in range(half):
        home, away = order[i], order[len(order) - 1 - i]
        gh, ga = _deterministic_goals(seed, matchday, home, away)
        results[home] = (gh, ga)
        results[away] = (ga, gh)

    out: List[LeagueStanding] = []
    for r in rows:
        if r.name in results:
            gf, ga = results[r.name]
            out.append(apply_result(r, gf, ga))
        else:
            out.append(r)
    return out


def reset_rows(rows: Iterable[LeagueStanding]) -> List[LeagueStanding]:
    return [LeagueStanding(name=r.name, tier=r.tier) for r in rows]

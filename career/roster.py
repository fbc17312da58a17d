# career/roster.py
from __future__ import annotations

import random
from dataclasses import replace
from typing import Dict, Iterable, List, Optional

from .config import FITNESS_MATCH_COST, FITNESS_MATCH_FLOOR, FITNESS_REST_GAIN
from .types import MatchEvent, Player

# ---------- helpers ----------

def clamp(lo: float, hi: float, x: float) -> float:
    return max(lo, min(hi, x))


def running_mean(mean: float, count: int, value: float) -> float:
    """Mean of `count` samples extended by one more; never stores the sum."""
    return (float(mean) * int(count) + float(value)) / (int(count) + 1)


def blended_form(form: float, rating: float) -> float:
    return clamp(1.0, 10.0, (float(form) + float(rating) / 5.0) / 2.0)


def goals_by(events: Iterable[MatchEvent], name: str, side: str = "home") -> int:
    return sum(1 for e in events if e.type == "GOAL" and e.side == side and e.player == name)


def saves_for(events: Iterable[MatchEvent], keeper: Optional[str] = None, side: str = "home") -> int:
    """Saves credited to `keeper`; unnamed saves count for whoever is in goal."""
    return sum(
        1 for e in events
        if e.type == "SAVE" and e.side == side and e.player in (keeper, None)
    )


# ---------- per-player branches ----------

def rest_player(p: Player) -> Player:
    """Did not play: recover a little fitness, nothing else changes."""
    return replace(p, fitness=int(min(100, p.fitness + FITNESS_REST_GAIN)))


def play_player(
    p: Player,
    rating: float,
    events: List[MatchEvent],
    goals_against: int,
    update_form: bool = True,
    rng: Optional[random.Random] = None,
    save_filler: bool = True,
) -> Player:
    rating = float(rating)
    s = p.stats
    stats = replace(
        s,
        appearances=s.appearances + 1,
        avg_rating=running_mean(s.avg_rating, s.appearances, rating),
        goals=s.goals + goals_by(events, p.name),
    )
    if p.position == "GK":
        saves = saves_for(events, p.name)
        if saves == 0 and save_filler:
            # cosmetic: keeps the stat moving when the oracle logs no saves
            saves = (rng or random).randint(0, 2)
        stats = replace(
            stats,
            clean_sheets=stats.clean_sheets + (1 if int(goals_against) == 0 else 0),
            saves=stats.saves + saves,
        )
    return replace(
        p,
        fitness=int(max(FITNESS_MATCH_FLOOR, p.fitness - FITNESS_MATCH_COST)),
        form=blended_form(p.form, rating) if update_form else p.form,
        match_history=list(p.match_history) + [rating],
        stats=stats,
    )


# ---------- squad ----------

def resolve_squad(
    players: List[Player],
    ratings: Dict[str, float],
    events: List[MatchEvent],
    goals_against: int,
    update_form: bool = True,
    rng: Optional[random.Random] = None,
    save_filler: bool = True,
) -> List[Player]:
    """
    Apply one finished match to the squad and return the new squad (same order).
    Players are keyed into `ratings` by pid; a missing or zero rating means the
    player did not feature.
    """
    out: List[Player] = []
    for p in players:
        r = ratings.get(p.pid)
        if not r:
            out.append(rest_player(p))
        else:
            out.append(play_player(
                p, r, events, goals_against,
                update_form=update_form, rng=rng, save_filler=save_filler,
            ))
    return out

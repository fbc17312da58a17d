# career/objectives.py
from __future__ import annotations

from dataclasses import replace
from typing import List

from .types import Club, Objective


def default_objectives() -> List[Objective]:
    return [
        Objective(
            oid="1", title="Season Target", description="Reach the board's performance goals.",
            kind="WINS", target=4, reward=15_000_000,
        ),
        Objective(
            oid="2", title="Ground Improvements", description="Raise the stadium facility level.",
            kind="STADIUM_EXPANSION", target=2, reward=5_000_000,
        ),
        Objective(
            oid="3", title="Youth Pathway", description="Bring academy prospects into the squad.",
            kind="ACADEMY_PROMOTIONS", target=2, reward=2_000_000,
        ),
    ]


def progress_of(club: Club, kind: str) -> int:
    if kind == "WINS":
        return club.wins
    if kind == "GOALS":
        return club.goals_for
    if kind == "ACADEMY_PROMOTIONS":
        return club.academy_promotions
    if kind == "STADIUM_EXPANSION":
        return club.stadium.facility_level
    return 0


def evaluate(club: Club) -> Club:
    """Refresh progress; an objective completes once and never fails."""
    out: List[Objective] = []
    for o in club.objectives:
        cur = progress_of(club, o.kind)
        out.append(replace(o, current=cur, completed=o.completed or cur >= o.target))
    return replace(club, objectives=out)


SEASONAL_KINDS = frozenset({"WINS", "GOALS"})


def reset_for_season(objectives: List[Objective]) -> List[Objective]:
    """Season-scoped goals re-arm; career-long ones (stadium, academy) carry over."""
    return [
        replace(o, current=0, completed=False, claimed=False) if o.kind in SEASONAL_KINDS else o
        for o in objectives
    ]

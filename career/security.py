# career/security.py
from __future__ import annotations

import random
from dataclasses import dataclass
from enum import Enum
from typing import List, Mapping, Sequence

from .config import (
    SECURITY_CRISIS, SECURITY_DRAW, SECURITY_LOSS, SECURITY_MAX,
    SECURITY_PLEDGE_MULT, SECURITY_PLEDGE_RESET, SECURITY_START,
    SECURITY_WARNING, SECURITY_WIN,
)
from .errors import CareerStateError
from .types import JobOffer


class CareerState(Enum):
    SECURE = "secure"
    WARNED = "warned"
    CRISIS_PENDING = "crisis_pending"
    PLEDGED = "pledged"
    SACKED = "sacked"
    RESIGNED = "resigned"
    UNEMPLOYED = "unemployed"
    EMPLOYED = "employed"

    @property
    def in_post(self) -> bool:
        return self not in OUT_OF_WORK

    @property
    def pledged(self) -> bool:
        return self is CareerState.PLEDGED


OUT_OF_WORK = frozenset({CareerState.SACKED, CareerState.RESIGNED, CareerState.UNEMPLOYED})
# states whose flag must not be overwritten by a plain secure/warned reading
_STICKY = frozenset({CareerState.CRISIS_PENDING, CareerState.PLEDGED})


@dataclass(frozen=True)
class Transition:
    state: CareerState
    security: int
    crisis_raised: bool = False
    sacked: bool = False


def standing_state(security: int) -> CareerState:
    return CareerState.WARNED if int(security) < SECURITY_WARNING else CareerState.SECURE


def security_delta(outcome: str, pledged: bool) -> int:
    """W +4, D 0, L -12; a pledged manager's losses count double."""
    if outcome == "W":
        return SECURITY_WIN
    if outcome == "D":
        return SECURITY_DRAW
    if outcome == "L":
        return SECURITY_LOSS * (SECURITY_PLEDGE_MULT if pledged else 1)
    raise ValueError(f"unknown outcome {outcome!r}")


def after_match(state: CareerState, security: int, outcome: str) -> Transition:
    """
    One evaluation per resolved match.
      - security' = max(0, security + delta)
      - security' <= 0 sacks the manager whatever else is pending
      - security' < 20 raises the board ultimatum once (not while pending/pledged)
    """
    if not state.in_post:
        raise CareerStateError(f"no match can be resolved while {state.value}")
    new_sec = min(SECURITY_MAX, max(0, int(security) + security_delta(outcome, state.pledged)))

    if new_sec <= 0:
        return Transition(CareerState.SACKED, new_sec, sacked=True)
    if new_sec < SECURITY_CRISIS and state not in _STICKY:
        return Transition(CareerState.CRISIS_PENDING, new_sec, crisis_raised=True)
    if state in _STICKY:
        return Transition(state, new_sec)
    return Transition(standing_state(new_sec), new_sec)


# ---------- manager choices at the crisis talk ----------

def pledge(state: CareerState) -> Transition:
    if state is not CareerState.CRISIS_PENDING:
        raise CareerStateError("The board has not asked for a pledge.")
    return Transition(CareerState.PLEDGED, SECURITY_PLEDGE_RESET)


def resign(state: CareerState, security: int) -> List[Transition]:
    """Resigning passes through RESIGNED straight to UNEMPLOYED."""
    if state is not CareerState.CRISIS_PENDING:
        raise CareerStateError("There is no crisis talk to resign from.")
    return [
        Transition(CareerState.RESIGNED, int(security)),
        Transition(CareerState.UNEMPLOYED, int(security)),
    ]


# ---------- unemployment ----------

# salaries on offer per tier, best paid first
OFFER_SALARIES = {1: (120_000, 85_000), 2: (45_000, 30_000)}


def generate_offers(rng: random.Random, clubs_by_tier: Mapping[int, Sequence[str]]) -> List[JobOffer]:
    """Two offers per tier, each naming a club that currently plays in that tier."""
    offers: List[JobOffer] = []
    for tier in sorted(OFFER_SALARIES):
        salaries = OFFER_SALARIES[tier]
        names = list(clubs_by_tier.get(tier, ()))
        picks = rng.sample(names, min(len(names), len(salaries)))
        offers.extend(JobOffer(team_name=n, tier=tier, salary=s) for n, s in zip(picks, salaries))
    return offers


def accept_offer(state: CareerState) -> Transition:
    if state.in_post:
        raise CareerStateError("You already have a job.")
    return Transition(CareerState.EMPLOYED, SECURITY_START)

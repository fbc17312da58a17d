import random

import pytest

from career.creator import OPPONENTS, TIER_ONE_CLUBS
from career.errors import CareerStateError
from career.security import (
    CareerState, accept_offer, after_match, generate_offers, pledge, resign, security_delta,
)

S = CareerState


def test_deltas():
    assert security_delta("W", False) == 4
    assert security_delta("D", False) == 0
    assert security_delta("L", False) == -12
    assert security_delta("L", True) == -24
    assert security_delta("W", True) == 4


def test_ladder_80_to_44_to_8_then_sacked():
    state, sec = S.SECURE, 80
    seen = []
    for _ in range(6):
        t = after_match(state, sec, "L")
        state, sec = t.state, t.security
        seen.append((sec, state, t.crisis_raised))
    assert [s for s, _, _ in seen] == [68, 56, 44, 32, 20, 8]
    # 20 is not below 20: the ultimatum only comes at 8
    assert [r for _, _, r in seen] == [False] * 5 + [True]
    assert state is S.CRISIS_PENDING

    t = after_match(state, sec, "L")
    assert t.security == 0 and t.state is S.SACKED and t.sacked


def test_single_loss_from_80_is_no_crisis():
    t = after_match(S.SECURE, 80, "L")
    assert (t.state, t.security, t.crisis_raised) == (S.SECURE, 68, False)


def test_crisis_raised_only_the_first_time():
    t = after_match(S.WARNED, 18, "L")
    assert t.state is S.CRISIS_PENDING and t.security == 6 and t.crisis_raised
    again = after_match(t.state, t.security, "D")
    assert again.state is S.CRISIS_PENDING and not again.crisis_raised
    win = after_match(t.state, t.security, "W")
    assert win.state is S.CRISIS_PENDING and win.security == 10


def test_warned_band():
    assert after_match(S.SECURE, 36, "L").state is S.WARNED
    assert after_match(S.WARNED, 24, "W").state is S.SECURE


def test_pledge_resets_and_doubles_losses():
    t = pledge(S.CRISIS_PENDING)
    assert (t.state, t.security) == (S.PLEDGED, 35)
    t = after_match(t.state, t.security, "L")
    assert (t.state, t.security, t.crisis_raised) == (S.PLEDGED, 11, False)
    t = after_match(t.state, t.security, "L")
    assert t.state is S.SACKED and t.security == 0


def test_security_is_capped():
    assert after_match(S.SECURE, 98, "W").security == 100


def test_illegal_transitions():
    with pytest.raises(CareerStateError):
        pledge(S.SECURE)
    with pytest.raises(CareerStateError):
        resign(S.PLEDGED, 30)
    with pytest.raises(CareerStateError):
        after_match(S.SACKED, 0, "W")
    with pytest.raises(CareerStateError):
        accept_offer(S.EMPLOYED)


def test_resign_passes_through_resigned():
    steps = resign(S.CRISIS_PENDING, 6)
    assert [s.state for s in steps] == [S.RESIGNED, S.UNEMPLOYED]


def test_accept_from_any_out_of_work_state():
    for state in (S.SACKED, S.RESIGNED, S.UNEMPLOYED):
        t = accept_offer(state)
        assert t.state is S.EMPLOYED and t.security == 80
        assert t.state.in_post


def test_offers_name_clubs_from_their_own_tier():
    by_tier = {1: OPPONENTS[:TIER_ONE_CLUBS], 2: OPPONENTS[TIER_ONE_CLUBS:]}
    for seed in range(40):
        offers = generate_offers(random.Random(seed), by_tier)
        assert [(o.tier, o.salary) for o in offers] == [(1, 120_000), (1, 85_000), (2, 45_000), (2, 30_000)]
        for o in offers:
            assert o.team_name in by_tier[o.tier]
        assert len({o.team_name for o in offers}) == 4


def test_offers_skip_an_empty_tier():
    offers = generate_offers(random.Random(4), {2: ["Only Club"]})
    assert [(o.team_name, o.tier) for o in offers] == [("Only Club", 2)]
    assert generate_offers(random.Random(4), {}) == []

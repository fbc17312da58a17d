from dataclasses import replace

from career.creator import OPPONENTS, TIER_ONE_CLUBS, initial_league, new_club
from career.objectives import evaluate
from career.season import age_contracts, is_complete, rollover
from career.types import Stadium


def _finished_club(**kw):
    club = new_club(11)
    return replace(club, matchday=38, wins=30, draws=4, losses=4, goals_for=80, goals_against=20, **kw)


def test_is_complete_at_matchday_38():
    assert not is_complete(replace(new_club(1), matchday=37))
    assert is_complete(replace(new_club(1), matchday=38))


def test_contracts_age_and_expired_players_leave_the_xi():
    club = new_club(2)
    leaving = {p.pid for p in club.players if p.contract_years == 1}
    aged, released = age_contracts(club)
    assert len(released) == len(leaving)
    assert all(p.contract_years >= 1 for p in aged.players)
    assert not leaving & {p.pid for p in aged.players}
    assert not leaving & set(aged.tactics.starting_xi)


def test_rollover_resets_the_season_and_pays_the_bonus():
    club = _finished_club()
    rows = initial_league()
    rows[0] = replace(rows[0], played=38, wins=20, points=60)
    new, new_rows, summary = rollover(club, rows)

    assert new.funds == club.funds + 20_000_000
    assert (new.matchday, new.wins, new.draws, new.losses, new.goals_for, new.goals_against) == (0, 0, 0, 0, 0, 0)
    assert new.season == 2
    assert new.financials.revenue == 0 and new.financials.expenditure == 0
    assert new.financials.transactions[-1].category == "season_bonus"
    assert all(r.played == 0 and r.points == 0 for r in new_rows)
    assert summary.position == 1 and summary.points == 94
    assert summary.revenue == 20_000_000


def test_promotion_and_relegation_swap_three_each_way():
    club = _finished_club()
    rows = initial_league()
    new, new_rows, summary = rollover(club, rows)

    assert new.tier == 1
    assert summary.promoted == [club.name] + OPPONENTS[TIER_ONE_CLUBS:TIER_ONE_CLUBS + 2]
    assert summary.relegated == OPPONENTS[TIER_ONE_CLUBS - 3:TIER_ONE_CLUBS]
    tiers = {r.name: r.tier for r in new_rows}
    assert all(tiers[n] == 1 for n in summary.promoted[1:])
    assert all(tiers[n] == 2 for n in summary.relegated)


def test_promotion_can_be_switched_off():
    new, _, summary = rollover(_finished_club(), initial_league(), promotion=False)
    assert new.tier == 2 and summary.promoted == [] and summary.relegated == []


def test_season_objectives_rearm_but_career_ones_carry_over():
    club = evaluate(_finished_club(stadium=Stadium(capacity=30_000, facility_level=2)))
    assert all(o.completed for o in club.objectives if o.kind in ("WINS", "STADIUM_EXPANSION"))
    new, _, _ = rollover(club, initial_league())
    kinds = {o.kind: o for o in new.objectives}
    assert not kinds["WINS"].completed and kinds["WINS"].current == 0
    assert kinds["STADIUM_EXPANSION"].completed

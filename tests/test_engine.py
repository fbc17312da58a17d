import logging
from dataclasses import replace

import pytest

from career.config import Rules
from career.engine import CareerEngine, CareerSnapshot
from career.errors import (
    CapacityExceeded, CareerStateError, InsufficientFunds, InvalidLineup,
    NotEmployed, OracleFailure, PlaybackActive, SeasonComplete,
)
from career.ledger import weekly_wages
from career.save import SaveStore
from career.security import CareerState
from career.types import MatchEvent, MatchResult


class FixedOracle:
    """Always returns the same scoreline; every starter gets `rating`."""

    def __init__(self, home, away, rating=7.0, revenue=900_000):
        self.home, self.away, self.rating, self.revenue = home, away, rating, revenue
        self.calls = 0

    def simulate(self, req):
        self.calls += 1
        starters = req.club.starters()
        events = [MatchEvent(10 + i, "GOAL", "home", "", starters[-1].name) for i in range(self.home)]
        events += [MatchEvent(60 + i, "GOAL", "away", "") for i in range(self.away)]
        return MatchResult(
            req.club.name, req.opponent_name, self.home, self.away, events, "",
            {p.pid: self.rating for p in starters}, self.revenue,
        )


class BrokenOracle:
    def simulate(self, req):
        raise RuntimeError("network down")


def _engine(home=1, away=0, rules=Rules(), **snap):
    base = CareerSnapshot.new(seed=21)
    if snap:
        base = replace(base, **snap)
    return CareerEngine(snapshot=base, oracle=FixedOracle(home, away), rules=rules)


def _play(eng):
    eng.start_match()
    eng.finish_playback()
    return eng.last_result


# ---------- match flow ----------

def test_prepare_gives_tier_opponent_and_locks():
    eng = _engine()
    req = eng.prepare_match()
    tier2 = {r.name for r in eng.snapshot.standings if r.tier == 2}
    assert req.opponent_name in tier2 and req.opponent_strength == 74
    assert eng.loading and eng.flags()["loading"]
    with pytest.raises(PlaybackActive):
        eng.prepare_match()
    eng.abort_match(req, None)
    assert not eng.loading
    assert eng.club.matchday == 0


def test_resolution_updates_squad_money_board_and_table():
    eng = _engine(2, 1)
    before = eng.club
    wages = weekly_wages(before)
    opponent, _ = eng.next_fixture()
    res = _play(eng)
    club = eng.club

    assert club.matchday == 1
    assert club.funds == before.funds + res.revenue - wages
    assert (club.wins, club.goals_for, club.goals_against) == (1, 2, 1)
    assert club.job_security == 84 and eng.state is CareerState.SECURE
    scorer = club.player(before.tactics.starting_xi[-1])
    assert scorer.stats.goals == 2 and scorer.fitness == 88
    bench = [p for p in club.players if p.pid not in before.tactics.starting_xi]
    assert all(p.stats.appearances == 0 and p.fitness == 100 for p in bench)

    opp = next(r for r in eng.snapshot.standings if r.name == opponent)
    assert (opp.played, opp.losses, opp.gf, opp.ga) == (1, 1, 1, 2)
    others = [r for r in eng.snapshot.standings if r.tier == 2 and r.name != opponent]
    assert all(r.played == 1 for r in others)
    assert eng.standings()[0].name in {club.name} | {r.name for r in others}


def test_rest_of_league_can_stand_still():
    eng = _engine(rules=Rules(simulate_other_fixtures=False))
    _play(eng)
    assert sum(r.played for r in eng.snapshot.standings) == 1


def test_absent_player_only_gains_fitness():
    eng = _engine()
    bench_pid = next(p.pid for p in eng.club.players if p.pid not in eng.club.tactics.starting_xi)
    club = eng.club
    tired = [replace(p, fitness=90) if p.pid == bench_pid else p for p in club.players]
    eng.snapshot = replace(eng.snapshot, club=replace(club, players=tired))
    _play(eng)
    p = eng.club.player(bench_pid)
    assert p.fitness == 95 and p.match_history == [] and p.stats.appearances == 0


def test_cancel_records_nothing():
    eng = _engine()
    funds = eng.club.funds
    eng.start_match()
    eng.tick_playback()
    eng.tick_playback(5.0)
    assert eng.playback_view().minute == 6
    eng.cancel_playback()
    eng.cancel_playback()
    assert eng.club.matchday == 0 and eng.club.funds == funds and eng.last_result is None
    assert eng.playback_view() is None
    _play(eng)
    assert eng.club.matchday == 1


def test_speed_changes_apply_to_live_playback():
    eng = _engine()
    eng.set_speed(4)
    eng.start_match()
    eng.tick_playback(1.0)
    assert eng.playback_view().minute == 4
    with pytest.raises(ValueError):
        eng.set_speed(0)


def test_lineup_must_have_eleven_unless_relaxed():
    eng = _engine()
    eng.toggle_starting_lineup(eng.club.tactics.starting_xi[0])
    with pytest.raises(InvalidLineup) as ei:
        eng.prepare_match()
    assert ei.value.count == 10 and not eng.loading

    relaxed = _engine(rules=Rules(enforce_starting_xi=False))
    relaxed.toggle_starting_lineup(relaxed.club.tactics.starting_xi[0])
    _play(relaxed)
    assert relaxed.club.matchday == 1


def test_twelfth_starter_refused():
    eng = _engine()
    bench = next(p.pid for p in eng.club.players if p.pid not in eng.club.tactics.starting_xi)
    with pytest.raises(CapacityExceeded):
        eng.toggle_starting_lineup(bench)
    with pytest.raises(KeyError):
        eng.toggle_starting_lineup("nobody")


def test_oracle_failure_leaves_state_untouched():
    eng = CareerEngine(snapshot=CareerSnapshot.new(seed=2), oracle=BrokenOracle())
    before = eng.snapshot
    with pytest.raises(OracleFailure):
        eng.start_match()
    assert eng.snapshot is before and not eng.loading


def test_malformed_result_is_rejected():
    eng = _engine()
    req = eng.prepare_match()
    bad = MatchResult(req.club.name, req.opponent_name, -1, 0, [], "", {}, 0)
    with pytest.raises(OracleFailure):
        eng.begin_playback(req, bad)
    assert not eng.loading and eng.playback_view() is None


def test_stale_request_refused():
    eng = _engine()
    req = eng.prepare_match()
    eng.abort_match(req)
    with pytest.raises(CareerStateError):
        eng.begin_playback(req, FixedOracle(1, 0).simulate(req))


# ---------- board ----------

def test_crisis_then_pledge_then_double_losses():
    eng = _engine(0, 1)
    eng.snapshot = replace(eng.snapshot, club=replace(eng.club, job_security=18))
    _play(eng)
    assert eng.state is CareerState.CRISIS_PENDING and eng.flags()["board_talk"]
    assert eng.club.job_security == 6

    eng.pledge()
    assert eng.state is CareerState.PLEDGED and eng.club.job_security == 35
    _play(eng)
    assert eng.club.job_security == 11 and eng.state is CareerState.PLEDGED


def test_sacking_offers_and_new_job():
    eng = _engine(0, 3)
    eng.snapshot = replace(eng.snapshot, state=CareerState.CRISIS_PENDING,
                           club=replace(eng.club, job_security=8))
    squad = [p.pid for p in eng.club.players]
    _play(eng)
    assert eng.state is CareerState.SACKED and eng.flags()["sacked"]
    assert len(eng.offers) == 4
    funds = eng.club.funds

    with pytest.raises(NotEmployed):
        eng.prepare_match()
    with pytest.raises(NotEmployed):
        eng.fetch_transfer_market()
    with pytest.raises(CareerStateError):
        eng.accept_job_offer(9)

    offer = eng.offers[0]
    club = eng.accept_job_offer(0)
    assert eng.state is CareerState.EMPLOYED and eng.state.in_post
    assert (club.name, club.tier, club.manager_salary) == (offer.team_name, 1, 120_000)
    assert club.job_security == 80 and club.matchday == 0 and club.wins == 0 and club.losses == 0
    assert [p.pid for p in club.players] == squad and club.funds == funds
    assert eng.offers == []
    assert [r.name for r in eng.standings()].count(club.name) == 1
    with pytest.raises(CareerStateError):
        eng.accept_job_offer(0)


def test_offers_come_from_the_tier_each_club_plays_in():
    eng = _engine(0, 3)
    sizes = {t: len(eng.standings(t)) for t in (1, 2)}
    eng.snapshot = replace(eng.snapshot, state=CareerState.CRISIS_PENDING,
                           club=replace(eng.club, job_security=8))
    old_name = eng.club.name
    _play(eng)
    tiers = {r.name: r.tier for r in eng.snapshot.standings}
    assert eng.offers and all(tiers[o.team_name] == o.tier for o in eng.offers)
    assert old_name not in {o.team_name for o in eng.offers}

    club = eng.accept_job_offer(0)
    assert {t: len(eng.standings(t)) for t in (1, 2)} == sizes
    assert [r.name for r in eng.standings(1)].count(club.name) == 1
    old = next(r for r in eng.snapshot.standings if r.name == old_name)
    assert old.tier == 2 and (old.played, old.losses, old.ga) == (1, 1, 3)


def test_unemployed_manager_cannot_touch_the_squad_or_rewards():
    eng = _engine(state=CareerState.UNEMPLOYED)
    before = eng.snapshot
    with pytest.raises(NotEmployed):
        eng.claim_objective(eng.club.objectives[0].oid)
    with pytest.raises(NotEmployed):
        eng.toggle_starting_lineup(eng.club.tactics.starting_xi[0])
    assert eng.snapshot is before


def test_resign_goes_straight_to_unemployed():
    eng = _engine(state=CareerState.CRISIS_PENDING)
    eng.resign()
    assert eng.state is CareerState.UNEMPLOYED and len(eng.offers) == 4
    assert eng.club.name not in [r.name for r in eng.standings()]
    with pytest.raises(CareerStateError):
        eng.pledge()


# ---------- season ----------

def test_season_complete_then_rollover():
    eng = _engine()
    eng.snapshot = replace(eng.snapshot, club=replace(eng.club, matchday=38, wins=20))
    with pytest.raises(SeasonComplete):
        eng.prepare_match()
    assert not eng.loading
    funds = eng.club.funds
    summary = eng.finish_season()
    assert eng.club.matchday == 0 and eng.club.season == 2
    assert eng.club.funds == funds + 20_000_000
    assert eng.history == [summary]
    _play(eng)
    assert eng.club.matchday == 1


def test_cannot_finish_season_early():
    with pytest.raises(CareerStateError):
        _engine().finish_season()


# ---------- squad & money ----------

def test_renew_contract():
    eng = _engine()
    p = eng.club.players[0]
    funds = eng.club.funds
    out = eng.renew_contract(p.pid)
    assert out.salary == int(p.salary * 1.15) and out.contract_years == 4
    assert eng.club.funds == funds - out.salary * 4
    with pytest.raises(KeyError):
        eng.renew_contract("ghost")


def test_renew_contract_insufficient_funds_changes_nothing():
    eng = _engine()
    eng.snapshot = replace(eng.snapshot, club=replace(eng.club, funds=10))
    before = eng.snapshot
    with pytest.raises(InsufficientFunds):
        eng.renew_contract(eng.club.players[0].pid)
    assert eng.snapshot is before


def test_transfer_market_and_signing():
    eng = _engine()
    market = eng.fetch_transfer_market()
    assert len(market) == 4 and len({p.pid for p in market}) == 4
    target = market[0]
    assert target.market_value == target.rating ** 2 * 10_000
    assert target.salary == target.rating * 1_000 and target.contract_years == 3
    assert target.potential >= target.rating and target.form == 7.0 and target.fitness == 100

    eng.snapshot = replace(eng.snapshot, club=replace(eng.club, funds=200_000_000))
    funds = eng.club.funds
    eng.buy_player(target.pid)
    assert eng.club.funds == funds - target.market_value
    assert eng.club.player(target.pid) is not None
    assert target.pid not in [p.pid for p in eng.transfer_list]
    assert eng.club.financials.transfer_spend == target.market_value
    with pytest.raises(KeyError):
        eng.buy_player(target.pid)


def test_signing_without_funds():
    eng = _engine()
    market = eng.fetch_transfer_market()
    eng.snapshot = replace(eng.snapshot, club=replace(eng.club, funds=0))
    with pytest.raises(InsufficientFunds):
        eng.buy_player(market[0].pid)
    assert len(eng.transfer_list) == 4


def test_academy_prospect_and_facility():
    eng = _engine()
    funds = eng.club.funds
    kid = eng.recruit_academy_prospect()
    assert kid.is_academy and kid.age == 16 and kid.salary == 500 and kid.contract_years == 5
    assert kid.rating >= 45 + 5 * 1 and kid.potential >= 70 + 4 * 1
    assert kid.market_value == kid.rating * kid.potential * 500
    assert eng.club.funds == funds - 500_000 and eng.club.academy_promotions == 1

    for level in (2, 3, 4, 5):
        assert eng.upgrade_academy_facility() == level
    assert eng.club.funds == funds - 500_000 - 5_000_000 * (1 + 2 + 3 + 4)
    with pytest.raises(CapacityExceeded):
        eng.upgrade_academy_facility()


def test_academy_needs_the_fee():
    eng = _engine()
    eng.snapshot = replace(eng.snapshot, club=replace(eng.club, funds=100))
    with pytest.raises(InsufficientFunds):
        eng.recruit_academy_prospect()
    assert eng.club.players == CareerSnapshot.new(seed=21).club.players


def test_stadium_expansion_completes_objective_and_reward_is_claimed_once():
    eng = _engine()
    funds = eng.club.funds
    assert eng.expand_stadium() == 30_000
    assert eng.club.stadium.facility_level == 2
    assert eng.club.funds == funds - 10_000_000
    obj = next(o for o in eng.club.objectives if o.kind == "STADIUM_EXPANSION")
    assert obj.completed and not obj.claimed
    assert eng.claim_objective(obj.oid) == 5_000_000
    assert eng.club.funds == funds - 10_000_000 + 5_000_000
    with pytest.raises(CareerStateError):
        eng.claim_objective(obj.oid)
    with pytest.raises(CareerStateError):
        eng.claim_objective("1")


def test_update_tactics():
    eng = _engine()
    pid = eng.club.players[0].pid
    eng.update_tactics(mentality="Attacking", role_assignments={pid: "Sweeper Keeper"})
    assert eng.club.tactics.mentality == "Attacking"
    assert eng.club.tactics.role_assignments[pid] == "Sweeper Keeper"
    with pytest.raises(ValueError):
        eng.update_tactics(mentality="Reckless")
    with pytest.raises(ValueError):
        eng.update_tactics(shape="diamond")
    with pytest.raises(ValueError):
        eng.update_tactics(role_assignments={pid: "Libero"})


# ---------- ids & saving ----------

def test_player_ids_stay_unique_across_restarts(tmp_path):
    store = SaveStore(str(tmp_path))
    first = CareerEngine(store=store, seed=21)
    kid = first.recruit_academy_prospect()
    first.fetch_transfer_market()
    counter = first.snapshot.next_id

    again = CareerEngine.load_or_new(store)
    assert again.snapshot.next_id == counter
    other = again.recruit_academy_prospect()
    market = again.fetch_transfer_market()
    assert other.pid != kid.pid
    pids = [p.pid for p in again.club.players] + [p.pid for p in market]
    assert len(pids) == len(set(pids))
    assert again.snapshot.next_id == counter + 5


def test_failed_save_does_not_break_the_match(tmp_path, caplog):
    blocker = tmp_path / "blocker"
    blocker.write_text("not a folder", encoding="utf-8")
    eng = CareerEngine(store=SaveStore(str(blocker)), oracle=FixedOracle(1, 0), seed=21)
    with caplog.at_level(logging.WARNING):
        _play(eng)
        assert eng.save_now() is None
    assert eng.club.matchday == 1 and eng.club.wins == 1 and not eng.loading
    assert any("Could not save career" in r.getMessage() for r in caplog.records)

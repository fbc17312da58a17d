import random
import statistics
from dataclasses import replace

from career.roster import blended_form, resolve_squad, running_mean
from career.types import MatchEvent, Player, PlayerStats


def _p(pid, position="MID", **kw):
    return Player(pid=pid, name=f"Player {pid}", position=position, rating=75, potential=80, **kw)


def test_absent_player_only_recovers_fitness():
    bench = _p("9", fitness=90, form=6.5)
    [out] = resolve_squad([bench], {}, [], goals_against=0)
    assert out.fitness == 95
    assert out.form == 6.5 and out.match_history == [] and out.stats == bench.stats

    [capped] = resolve_squad([_p("9", fitness=98)], {"9": 0}, [], goals_against=0)
    assert capped.fitness == 100


def test_played_player_fitness_history_and_mean():
    p = _p("1", fitness=100, form=7.0, stats=PlayerStats(appearances=3, avg_rating=6.0))
    [out] = resolve_squad([p], {"1": 8.0}, [], goals_against=2)
    assert out.fitness == 88
    assert out.match_history == [8.0]
    assert out.stats.appearances == 4
    assert abs(out.stats.avg_rating - 6.5) < 1e-9
    assert abs(out.form - (7.0 + 8.0 / 5) / 2) < 1e-9

    [tired] = resolve_squad([replace(p, fitness=55)], {"1": 7.0}, [], goals_against=0)
    assert tired.fitness == 50


def test_average_rating_over_a_run_of_matches():
    ratings = [6.0, 8.5, 7.2, 4.9, 9.1, 7.7, 6.3]
    squad = [_p("1")]
    for r in ratings:
        squad = resolve_squad(squad, {"1": r}, [], goals_against=1)
    [out] = squad
    assert out.stats.appearances == len(ratings)
    assert abs(out.stats.avg_rating - statistics.fmean(ratings)) < 1e-9
    assert out.match_history == ratings

    for seed in range(5):
        rng = random.Random(seed)
        sample = [round(rng.uniform(1, 10), 1) for _ in range(30)]
        mean, count = 0.0, 0
        for x in sample:
            mean, count = running_mean(mean, count, x), count + 1
        assert abs(mean - statistics.fmean(sample)) < 1e-9


def test_form_update_can_be_switched_off():
    p = _p("1", form=7.0)
    [out] = resolve_squad([p], {"1": 9.0}, [], goals_against=0, update_form=False)
    assert out.form == 7.0


def test_goals_only_count_home_events_naming_the_player():
    p = _p("1", position="ATT")
    events = [
        MatchEvent(10, "GOAL", "home", "", "Player 1"),
        MatchEvent(20, "GOAL", "home", "", "Player 1"),
        MatchEvent(30, "GOAL", "away", "", "Player 1"),
        MatchEvent(40, "GOAL", "home", "", "Someone Else"),
        MatchEvent(50, "YELLOW", "home", "", "Player 1"),
    ]
    [out] = resolve_squad([p], {"1": 8.5}, events, goals_against=1)
    assert out.stats.goals == 2


def test_keeper_clean_sheet_and_saves():
    gk = _p("1", position="GK")
    events = [
        MatchEvent(5, "SAVE", "home", "", "Player 1"),
        MatchEvent(15, "SAVE", "home", "", None),
        MatchEvent(25, "SAVE", "away", "", None),
        MatchEvent(35, "SAVE", "home", "", "Backup Keeper"),
    ]
    [out] = resolve_squad([gk], {"1": 7.5}, events, goals_against=0, save_filler=False)
    assert out.stats.clean_sheets == 1
    assert out.stats.saves == 2

    [conceded] = resolve_squad([gk], {"1": 6.0}, [], goals_against=2, save_filler=False)
    assert conceded.stats.clean_sheets == 0 and conceded.stats.saves == 0


def test_save_filler_stays_in_range():
    gk = _p("1", position="GK")
    rng = random.Random(3)
    for _ in range(20):
        [out] = resolve_squad([gk], {"1": 6.0}, [], goals_against=1, rng=rng)
        assert 0 <= out.stats.saves <= 2


def test_helpers():
    assert running_mean(0.0, 0, 7.0) == 7.0
    assert blended_form(1.0, 0.0) == 1.0
    assert blended_form(10.0, 10.0) == 6.0

import pytest

from career.types import MatchEvent, MatchResult
from matchsim.playback import PlaybackController


def _result():
    events = [
        MatchEvent(0, "COMMENTARY", "home", "pre-match"),
        MatchEvent(10, "GOAL", "home", "1-0", "A"),
        MatchEvent(10, "GOAL", "away", "1-1"),
        MatchEvent(30, "YELLOW", "away", "booked"),
        MatchEvent(50, "GOAL", "home", "2-1", "B"),
        MatchEvent(95, "GOAL", "away", "2-2 at the death"),
        MatchEvent(96, "GOAL", "home", "never shown"),
    ]
    return MatchResult("Home", "Away", 2, 2, events, "", {}, 0)


def test_live_score_matches_revealed_goals_every_tick():
    pb = PlaybackController(_result())
    while pb.running:
        pb.tick()
        goals = [e for e in pb.revealed if e.type == "GOAL"]
        assert pb.home == sum(1 for e in goals if e.side == "home")
        assert pb.away == sum(1 for e in goals if e.side == "away")
    assert pb.minute == 95 and pb.finished
    assert (pb.home, pb.away) == (2, 2)


def test_events_revealed_once_newest_first_in_list_order():
    pb = PlaybackController(_result())
    pb.run_to_end()
    descriptions = [e.description for e in pb.revealed]
    assert descriptions == ["2-2 at the death", "2-1", "booked", "1-1", "1-0"]
    assert "pre-match" not in descriptions and "never shown" not in descriptions
    assert pb.tick() == []


def test_on_complete_fires_exactly_once():
    calls = []
    pb = PlaybackController(_result(), on_complete=calls.append)
    pb.run_to_end()
    pb.tick()
    pb.advance(100.0)
    assert len(calls) == 1 and calls[0].home_score == 2


def test_cancel_is_idempotent_and_never_completes():
    calls = []
    pb = PlaybackController(_result(), on_complete=calls.append)
    for _ in range(20):
        pb.tick()
    pb.cancel()
    pb.cancel()
    assert pb.cancelled and not pb.finished
    assert pb.tick() == [] and pb.advance(50.0) == 0
    assert pb.minute == 20 and calls == []


def test_cancel_after_completion_is_a_no_op():
    pb = PlaybackController(_result())
    pb.run_to_end()
    pb.cancel()
    assert pb.finished and not pb.cancelled


def test_speed_sets_tick_period():
    pb = PlaybackController(_result(), speed=2)
    assert pb.period == 0.5
    assert pb.advance(1.0) == 2
    assert pb.advance(0.3) == 0
    assert pb.advance(0.3) == 1
    pb.set_speed(8)
    assert pb.advance(1.0) == 8
    assert pb.minute == 11

    slow = PlaybackController(_result())
    assert slow.advance(0.999) == 0 and slow.minute == 0


def test_bad_speed_rejected():
    with pytest.raises(ValueError):
        PlaybackController(_result(), speed=0)
    pb = PlaybackController(_result())
    with pytest.raises(ValueError):
        pb.set_speed(-1)


def test_view_is_a_snapshot():
    pb = PlaybackController(_result())
    for _ in range(10):
        pb.tick()
    v = pb.view()
    pb.run_to_end()
    assert v.minute == 10 and (v.home, v.away) == (1, 1) and not v.finished
    assert len(v.revealed) == 2

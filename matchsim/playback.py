# matchsim/playback.py
from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Callable, List, Optional

from career.config import BASE_TICK_SECONDS, FINAL_MINUTE
from career.types import MatchEvent, MatchResult

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class PlaybackView:
    """What the presentation layer reads while a match is live."""
    minute: int
    home: int
    away: int
    revealed: List[MatchEvent] = field(default_factory=list)
    speed: float = 1.0
    finished: bool = False
    cancelled: bool = False


class PlaybackController:
    """
    Replays a finished MatchResult minute by minute on a logical clock.

      - tick()        advance one minute (tests drive this directly)
      - advance(dt)   feed elapsed seconds; ticks every 1.0 / speed seconds
      - cancel()      stop without resolving; safe to call any number of times

    `on_complete(result)` fires exactly once, when minute 95 is reached.
    """

    def __init__(
        self,
        result: MatchResult,
        speed: float = 1.0,
        on_complete: Optional[Callable[[MatchResult], None]] = None,
        final_minute: int = FINAL_MINUTE,
    ) -> None:
        self.result = result
        self.final_minute = int(final_minute)
        self.on_complete = on_complete
        self.minute = 0
        self.home = 0
        self.away = 0
        self.revealed: List[MatchEvent] = []   # most recent first
        self.finished = False
        self.cancelled = False
        self._speed = 1.0
        self._accum = 0.0
        self.set_speed(speed)

    # ---------- clock ----------

    @property
    def speed(self) -> float:
        return self._speed

    @property
    def period(self) -> float:
        """Seconds between ticks; higher speed means a shorter period."""
        return BASE_TICK_SECONDS / self._speed

    @property
    def running(self) -> bool:
        return not (self.finished or self.cancelled)

    def set_speed(self, speed: float) -> None:
        speed = float(speed)
        if speed <= 0:
            raise ValueError("playback speed must be positive")
        self._speed = speed

    def advance(self, dt: float) -> int:
        """Accumulate elapsed time and tick as many minutes as it covers."""
        if not self.running:
            return 0
        self._accum += max(0.0, float(dt))
        ticks = 0
        while self.running and self._accum >= self.period:
            self._accum -= self.period
            self.tick()
            ticks += 1
        return ticks

    def tick(self) -> List[MatchEvent]:
        """Advance one minute and reveal that minute's events in list order."""
        if not self.running:
            return []
        self.minute += 1
        fresh = [e for e in self.result.events if e.minute == self.minute]
        for e in fresh:
            self.revealed.insert(0, e)
            if e.type == "GOAL":
                if e.side == "home":
                    self.home += 1
                else:
                    self.away += 1
        if self.minute >= self.final_minute:
            self._complete()
        return fresh

    def run_to_end(self) -> None:
        while self.running:
            self.tick()

    def cancel(self) -> None:
        if self.running:
            logger.debug("Playback cancelled at minute %d", self.minute)
        self.cancelled = self.cancelled or not self.finished

    # ---------- completion ----------

    def _complete(self) -> None:
        self.finished = True
        logger.debug("Playback reached full time: %d-%d", self.home, self.away)
        if self.on_complete is not None:
            callback, self.on_complete = self.on_complete, None
            callback(self.result)

    def view(self) -> PlaybackView:
        return PlaybackView(
            minute=self.minute,
            home=self.home,
            away=self.away,
            revealed=list(self.revealed),
            speed=self._speed,
            finished=self.finished,
            cancelled=self.cancelled,
        )

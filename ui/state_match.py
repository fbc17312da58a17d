# ui/state_match.py
from __future__ import annotations

import logging
from concurrent.futures import Future
from typing import List, Optional

import pygame

from career.config import SPEEDS
from career.errors import CareerError, OracleFailure

from .state_message import MessageState
from .uiutil import ACCENT, BG, GOOD, SUBTLE, TEXT, WARN, Button, draw_bar, draw_panel, draw_text

logger = logging.getLogger(__name__)

LOG_ROWS = 16

_EVENT_COLORS = {"GOAL": GOOD, "YELLOW": WARN, "RED": (220, 80, 80), "SAVE": ACCENT}


class MatchState:
    """
    Live match:
      - asks the oracle on the app's worker thread, polls the future each frame
      - replays the result on the engine's playback clock (update(dt) feeds it)
      - 1x/2x/4x/8x speed, Skip to full time, Back (cancels; nothing is recorded)
    """

    def __init__(self, app, engine):
        self.app = app
        self.engine = engine
        self.request = None
        self.future: Optional[Future] = None
        self.buttons: List[Button] = []
        self.speed_buttons: List[Button] = []
        self.done = False

    # ---------- lifecycle ----------

    def enter(self):
        self.layout()
        try:
            self.request = self.engine.prepare_match()
        except CareerError as e:
            self.app.pop_state()
            self.app.push_state(MessageState(self.app, str(e), title="Cannot kick off"))
            return
        self.future = self.app.executor.submit(self.engine.oracle.simulate, self.request)

    def exit(self):
        # leaving early: drop the pending request or stop the clock, never resolve
        if self.future is not None and not self.future.done():
            self.future.cancel()
        if self.request is not None and self.engine.loading:
            self.engine.abort_match(self.request, None)
        if self.engine.playback_active:
            self.engine.cancel_playback()

    def layout(self):
        w, h = self.app.screen.get_size()
        pad = 16
        self.rect_score = pygame.Rect(pad, pad, w - pad * 2, 110)
        self.rect_log = pygame.Rect(pad, self.rect_score.bottom + pad, w - pad * 2, h - self.rect_score.bottom - pad * 2 - 70)
        y = h - 62
        self.speed_buttons = [
            Button(pygame.Rect(pad + i * 90, y, 80, 44), f"{s}x", lambda s=s: self.engine.set_speed(s))
            for i, s in enumerate(SPEEDS)
        ]
        self.buttons = [
            Button(pygame.Rect(w - pad - 300, y, 140, 44), "Skip", self._skip),
            Button(pygame.Rect(w - pad - 150, y, 150, 44), "Back", self.app.pop_state),
        ]

    # ---------- actions ----------

    def _skip(self):
        self.engine.finish_playback()

    def _poll_oracle(self):
        if self.future is None or not self.future.done():
            return
        fut, self.future = self.future, None
        try:
            result = fut.result()
            self.engine.begin_playback(self.request, result)
        except OracleFailure as e:
            self._fail(e)
        except Exception as e:
            self._fail(OracleFailure(f"Match simulation failed: {e}"))

    def _fail(self, exc: Exception):
        self.engine.abort_match(self.request, exc)
        self.app.pop_state()
        self.app.push_state(MessageState(self.app, str(exc), title="Match unavailable"))

    def _on_full_time(self):
        self.done = True
        self.buttons[-1].label = "Continue"
        self.buttons[0].enabled = False
        flags = self.engine.flags()
        if flags["sacked"]:
            self.app.push_state(MessageState(self.app, "The board has lost patience. You have been sacked.", title="Sacked"))
        elif flags["board_talk"]:
            self.app.push_state(MessageState(self.app, "The chairman wants to see you in the office.", title="Board meeting"))

    # ---------- frame ----------

    def handle(self, ev):
        if ev.type == pygame.KEYDOWN and ev.key in (pygame.K_ESCAPE, pygame.K_BACKSPACE):
            self.app.pop_state()
            return
        for b in self.speed_buttons + self.buttons:
            if b.handle(ev):
                break

    def update(self, dt):
        if self.future is not None:
            self._poll_oracle()
            return
        view = self.engine.tick_playback(dt)
        if view is not None and view.finished and not self.done:
            self._on_full_time()

    def draw(self, screen):
        screen.fill(BG)
        view = self.engine.playback_view()
        req = self.request
        draw_panel(screen, self.rect_score)
        if req is None:
            return
        home, away = req.club.name, req.opponent_name
        cx = self.rect_score.centerx
        if view is None:
            draw_text(screen, f"{home}  v  {away}", (cx, self.rect_score.y + 34), 34, TEXT, "center")
            draw_text(screen, "Waiting for kick-off...", (cx, self.rect_score.y + 76), 22, SUBTLE, "center")
        else:
            draw_text(screen, f"{home}  {view.home} - {view.away}  {away}", (cx, self.rect_score.y + 34), 38, TEXT, "center")
            label = "Full time" if view.finished else f"{view.minute}'"
            draw_text(screen, label, (cx, self.rect_score.y + 70), 24, SUBTLE, "center")
            draw_bar(screen, pygame.Rect(self.rect_score.x + 16, self.rect_score.bottom - 18, self.rect_score.w - 32, 8),
                     view.minute / 95.0, ACCENT)

        draw_panel(screen, self.rect_log)
        if view is not None:
            y = self.rect_log.y + 12
            for e in view.revealed[:LOG_ROWS]:
                side = home if e.side == "home" else away
                draw_text(screen, f"{e.minute:>2}'  {side}: {e.description}", (self.rect_log.x + 16, y), 20,
                          _EVENT_COLORS.get(e.type, TEXT))
                y += 24
            if view.finished and self.engine.last_result is not None:
                draw_text(screen, self.engine.last_result.summary, (self.rect_log.x + 16, self.rect_log.bottom - 30),
                          20, SUBTLE)

        for b in self.speed_buttons:
            b.draw(screen, selected=(view is not None and float(b.label[:-1]) == view.speed))
        for b in self.buttons:
            b.draw(screen)

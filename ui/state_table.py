# ui/state_table.py
from __future__ import annotations

import pygame

from career.config import PROMOTION_SLOTS

from .uiutil import ACCENT, BAD, BG, GOOD, SUBTLE, TEXT, Button, draw_panel, draw_text


class TableState:
    """League table for either tier; the user's club is highlighted."""

    def __init__(self, app, engine):
        self.app = app
        self.engine = engine
        self.tier = engine.club.tier

    def enter(self):
        self.layout()

    def layout(self):
        w, h = self.app.screen.get_size()
        pad = 16
        self.rect_header = pygame.Rect(pad, pad, w - pad * 2, 48)
        self.rect_body = pygame.Rect(pad, self.rect_header.bottom + pad, w - pad * 2, h - (self.rect_header.bottom + pad * 2))
        self.btn_back = Button(pygame.Rect(self.rect_header.right - 132, self.rect_header.y + 6, 120, 36), "Back", self.app.pop_state)
        self.btn_tier = Button(pygame.Rect(self.rect_header.right - 264, self.rect_header.y + 6, 120, 36), "", self._toggle)

    def _toggle(self):
        self.tier = 1 if self.tier == 2 else 2

    def handle(self, ev):
        if ev.type == pygame.KEYDOWN and ev.key in (pygame.K_ESCAPE, pygame.K_BACKSPACE):
            self.app.pop_state()
            return
        self.btn_back.handle(ev) or self.btn_tier.handle(ev)

    def update(self, dt):
        self.btn_tier.label = f"Tier {1 if self.tier == 2 else 2}"

    def draw(self, screen):
        screen.fill(BG)
        draw_panel(screen, self.rect_header)
        draw_text(screen, f"Tier {self.tier} table", (self.rect_header.x + 12, self.rect_header.centery), 34, TEXT, "midleft")
        self.btn_tier.draw(screen)
        self.btn_back.draw(screen)

        draw_panel(screen, self.rect_body)
        rows = self.engine.standings(self.tier)
        x = self.rect_body.x + 14
        y = self.rect_body.y + 12
        line_h = max(18, min(26, (self.rect_body.h - 40) // max(1, len(rows) + 1)))
        draw_text(screen, "Pos  Team                          P    W   D   L    GF  GA   GD   Pts", (x, y), 20, SUBTLE)
        y += line_h
        me = self.engine.club.name
        n = len(rows)
        for i, r in enumerate(rows, start=1):
            color = TEXT
            if r.name == me:
                color = ACCENT
            elif self.tier == 2 and i <= PROMOTION_SLOTS:
                color = GOOD
            elif self.tier == 1 and i > n - PROMOTION_SLOTS:
                color = BAD
            label = (f"{i:>2}.  {r.name:28.28}  {r.played:>2}  {r.wins:>3} {r.draws:>3} {r.losses:>3}  "
                     f"{r.gf:>4} {r.ga:>3}  {r.goal_diff:>4}  {r.points:>4}")
            draw_text(screen, label, (x, y), 20, color)
            y += line_h

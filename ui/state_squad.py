# ui/state_squad.py
from __future__ import annotations

import pygame

from career.config import RENEWAL_FEE_WEEKS, RENEWAL_RAISE, STARTING_XI_SIZE

from .state_office import run_action
from .uiutil import BG, GOOD, SUBTLE, TEXT, WARN, Button, RowList, draw_panel, draw_text, money

POS_ORDER = {"GK": 0, "DEF": 1, "MID": 2, "ATT": 3}


class SquadState:
    """
    Squad list. Click a player to select; "Toggle XI" adds/removes him from the
    starting eleven, "Renew" extends his deal (15% raise, four weeks' wages up front).
    """

    def __init__(self, app, engine):
        self.app = app
        self.engine = engine
        self.order = []

    def enter(self):
        self.layout()

    def layout(self):
        w, h = self.app.screen.get_size()
        pad = 16
        self.rect_header = pygame.Rect(pad, pad, w - pad * 2, 48)
        list_w = int((w - pad * 3) * 0.62)
        self.list = RowList(pygame.Rect(pad, self.rect_header.bottom + pad, list_w, h - self.rect_header.bottom - pad * 2), [])
        self.rect_card = pygame.Rect(self.list.rect.right + pad, self.list.rect.y, w - self.list.rect.right - pad * 2, self.list.rect.h)
        self.btn_back = Button(pygame.Rect(self.rect_header.right - 132, self.rect_header.y + 6, 120, 36), "Back", self.app.pop_state)
        self.btn_xi = Button(pygame.Rect(self.rect_card.x + 16, self.rect_card.bottom - 60, 150, 44), "Toggle XI", self._toggle)
        self.btn_renew = Button(pygame.Rect(self.rect_card.x + 182, self.rect_card.bottom - 60, 150, 44), "Renew", self._renew)
        self._refresh()

    def _refresh(self):
        club = self.engine.club
        self.order = sorted(club.players, key=lambda p: (POS_ORDER.get(p.position, 9), -p.rating))
        xi = set(club.tactics.starting_xi)
        rows, colors = [], []
        for p in self.order:
            mark = "*" if p.pid in xi else " "
            rows.append(f"{mark} {p.position:<3} {p.name:22.22} {p.rating:>3}  fit {p.fitness:>3}  form {p.form:4.1f}  {p.contract_years}y")
            colors.append(GOOD if p.pid in xi else (WARN if p.contract_years <= 1 else None))
        self.list.set_rows(rows, colors)

    def _selected(self):
        i = self.list.selected
        return self.order[i] if 0 <= i < len(self.order) else None

    def _toggle(self):
        p = self._selected()
        if p is not None:
            run_action(self.app, self.engine.toggle_starting_lineup, p.pid, title="Starting XI")
            self._refresh()

    def _renew(self):
        p = self._selected()
        if p is not None:
            run_action(self.app, self.engine.renew_contract, p.pid, title="Contract")
            self._refresh()

    def handle(self, ev):
        if ev.type == pygame.KEYDOWN and ev.key in (pygame.K_ESCAPE, pygame.K_BACKSPACE):
            self.app.pop_state()
            return
        self.list.handle(ev)
        for b in (self.btn_back, self.btn_xi, self.btn_renew):
            if b.handle(ev):
                break

    def update(self, dt):
        has = self._selected() is not None
        self.btn_xi.enabled = has and self.engine.state.in_post
        self.btn_renew.enabled = has and self.engine.state.in_post

    def draw(self, screen):
        screen.fill(BG)
        draw_panel(screen, self.rect_header)
        n = len(self.engine.club.tactics.starting_xi)
        draw_text(screen, f"Squad  ·  XI {n}/{STARTING_XI_SIZE}", (self.rect_header.x + 12, self.rect_header.centery), 34,
                  TEXT if n == STARTING_XI_SIZE else WARN, "midleft")
        self.btn_back.draw(screen)
        self.list.draw(screen)

        draw_panel(screen, self.rect_card)
        p = self._selected()
        if p is None:
            draw_text(screen, "Select a player", (self.rect_card.x + 16, self.rect_card.y + 16), 24, SUBTLE)
        else:
            s = p.stats
            new_salary = int(p.salary * RENEWAL_RAISE)
            lines = [
                (f"{p.name} ({p.age}, {p.nationality})", 28, TEXT),
                (f"{p.position}  ·  Rating {p.rating}  ·  Potential {p.potential}", 22, TEXT),
                (f"Value {money(p.market_value)}  ·  Wage {money(p.salary)}  ·  {p.contract_years} years left", 20, SUBTLE),
                (f"Apps {s.appearances}  Goals {s.goals}  Avg {s.avg_rating:.2f}", 22, TEXT),
                ("  ".join(f"{k[:3].upper()} {v}" for k, v in p.attributes.items()), 22, TEXT),
                (f"Clean sheets {s.clean_sheets}  Saves {s.saves}" if p.position == "GK" else "", 22, TEXT),
                ("Recent: " + "  ".join(f"{r:.1f}" for r in p.recent_ratings), 22, SUBTLE),
                (f"Renewal: {money(new_salary)} per week, fee {money(new_salary * RENEWAL_FEE_WEEKS)}", 20, SUBTLE),
            ]
            y = self.rect_card.y + 16
            for text, size, color in lines:
                if text:
                    draw_text(screen, text, (self.rect_card.x + 16, y), size, color)
                    y += size + 10
        self.btn_xi.draw(screen)
        self.btn_renew.draw(screen)

# ui/state_transfers.py
from __future__ import annotations

from concurrent.futures import Future
from typing import Any, Callable, Optional

import pygame

from career.config import (
    ACADEMY_MAX_LEVEL, ACADEMY_RECRUIT_FEE, ACADEMY_UPGRADE_COST, STADIUM_EXPANSION_COST,
)
from career.errors import CareerError

from .state_message import MessageState
from .state_office import run_action
from .uiutil import BG, SUBTLE, TEXT, Button, RowList, draw_panel, draw_text, money


class TransfersState:
    """
    Transfer market, youth academy and stadium works.
    Scouting and academy recruiting run on the app worker, since both ask the
    candidate generator; every button is locked until the call returns.
    """

    def __init__(self, app, engine):
        self.app = app
        self.engine = engine
        self.future: Optional[Future] = None
        self.busy_label = ""
        self.fail_title = ""
        self.on_done: Optional[Callable[[Any], None]] = None
        self.buttons = []

    def enter(self):
        self.layout()

    def layout(self):
        w, h = self.app.screen.get_size()
        pad = 16
        self.rect_header = pygame.Rect(pad, pad, w - pad * 2, 48)
        self.list = RowList(pygame.Rect(pad, self.rect_header.bottom + pad, int(w * 0.6), h - self.rect_header.bottom - pad * 2 - 70), [])
        self.rect_side = pygame.Rect(self.list.rect.right + pad, self.list.rect.y, w - self.list.rect.right - pad * 2, self.list.rect.h)
        y = h - 62
        self.btn_back = Button(pygame.Rect(self.rect_header.right - 132, self.rect_header.y + 6, 120, 36), "Back", self.app.pop_state)
        self.btn_scout = Button(pygame.Rect(pad, y, 170, 44), "Scout market", self._scout)
        self.btn_buy = Button(pygame.Rect(pad + 186, y, 170, 44), "Sign player", self._buy)
        self.btn_recruit = Button(pygame.Rect(self.rect_side.x, y, 200, 44), "Promote prospect", self._recruit)
        self.btn_academy = Button(pygame.Rect(self.rect_side.x + 216, y, 200, 44), "Upgrade academy", self._upgrade)
        self.btn_stadium = Button(pygame.Rect(self.rect_side.x + 432, y, 200, 44), "Expand stadium", self._expand)
        self.buttons = [self.btn_back, self.btn_scout, self.btn_buy, self.btn_recruit, self.btn_academy, self.btn_stadium]
        self._refresh()

    def _refresh(self):
        self.list.set_rows([
            f"{p.position:<3} {p.name:22.22} {p.rating:>3}  age {p.age:>2}  {money(p.market_value):>8}  {money(p.salary)}/wk"
            for p in self.engine.transfer_list
        ])

    # ---------- actions ----------

    def _submit(self, fn: Callable[[], Any], busy_label: str, fail_title: str, on_done=None):
        self.busy_label, self.fail_title, self.on_done = busy_label, fail_title, on_done
        self.future = self.app.executor.submit(fn)

    def _scout(self):
        self._submit(self.engine.fetch_transfer_market, "Scouting...", "Scouting failed")

    def _buy(self):
        market = self.engine.transfer_list
        i = self.list.selected
        if 0 <= i < len(market):
            p = run_action(self.app, self.engine.buy_player, market[i].pid, title="Transfer")
            if p is not None:
                self.list.selected = -1
                self._refresh()
                self.app.push_state(MessageState(self.app, f"{p.name} signs for {money(p.market_value)}.", title="Done deal"))

    def _recruit(self):
        self._submit(self.engine.recruit_academy_prospect, "Visiting the academy...", "Academy", self._recruited)

    def _recruited(self, p):
        self.app.push_state(MessageState(
            self.app, f"{p.name} ({p.position}, {p.rating}, potential {p.potential}) joins the first team.",
            title="Academy",
        ))

    def _upgrade(self):
        run_action(self.app, self.engine.upgrade_academy_facility, title="Academy")

    def _expand(self):
        run_action(self.app, self.engine.expand_stadium, title="Stadium")

    # ---------- frame ----------

    def handle(self, ev):
        if ev.type == pygame.KEYDOWN and ev.key in (pygame.K_ESCAPE, pygame.K_BACKSPACE) and self.future is None:
            self.app.pop_state()
            return
        if self.future is not None:
            return
        self.list.handle(ev)
        for b in self.buttons:
            if b.handle(ev):
                break

    def update(self, dt):
        if self.future is not None and self.future.done():
            fut, self.future = self.future, None
            on_done, self.on_done = self.on_done, None
            try:
                result = fut.result()
            except CareerError as e:
                self.app.push_state(MessageState(self.app, str(e), title=self.fail_title))
            else:
                if on_done is not None:
                    on_done(result)
            self._refresh()
        busy = self.future is not None
        club = self.engine.club
        for b in self.buttons:
            b.enabled = not busy
        self.btn_buy.enabled = not busy and 0 <= self.list.selected < len(self.engine.transfer_list)
        self.btn_academy.enabled = not busy and club.academy_level < ACADEMY_MAX_LEVEL

    def draw(self, screen):
        club = self.engine.club
        screen.fill(BG)
        draw_panel(screen, self.rect_header)
        draw_text(screen, f"Transfers & facilities  ·  Funds {money(club.funds)}", (self.rect_header.x + 12, self.rect_header.centery), 30, TEXT, "midleft")
        self.list.draw(screen)
        if self.future is not None:
            draw_text(screen, self.busy_label, self.list.rect.center, 26, SUBTLE, "center")
        elif not self.engine.transfer_list:
            draw_text(screen, "No players scouted yet", self.list.rect.center, 24, SUBTLE, "center")

        draw_panel(screen, self.rect_side)
        x, y = self.rect_side.x + 16, self.rect_side.y + 16
        lines = [
            f"Academy level {club.academy_level}/{ACADEMY_MAX_LEVEL}",
            f"Prospect fee {money(ACADEMY_RECRUIT_FEE)}",
            (f"Next level {money(ACADEMY_UPGRADE_COST * club.academy_level)}"
             if club.academy_level < ACADEMY_MAX_LEVEL else "Academy fully developed"),
            "",
            f"{club.stadium.name}: {club.stadium.capacity:,} seats",
            f"Facility level {club.stadium.facility_level}",
            f"Expansion {money(STADIUM_EXPANSION_COST * club.stadium.facility_level)} (+5,000 seats)",
        ]
        for ln in lines:
            if ln:
                draw_text(screen, ln, (x, y), 22, TEXT)
            y += 30
        for b in self.buttons:
            b.draw(screen)

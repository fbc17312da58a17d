# ui/state_office.py
from __future__ import annotations

import logging
from typing import Callable, List

import pygame

from career.types import MENTALITIES
from career.errors import CareerError

from .state_message import MessageState
from .uiutil import (
    BAD, BG, GOOD, SUBTLE, TEXT, WARN,
    Button, draw_bar, draw_panel, draw_text, money,
)

logger = logging.getLogger(__name__)


def run_action(app, fn: Callable, *args, title: str = "Not possible"):
    """Call an engine action; a CareerError becomes a popup instead of a crash."""
    try:
        return fn(*args)
    except CareerError as e:
        logger.info("Action refused: %s", e)
        app.push_state(MessageState(app, str(e), title=title))
        return None


def security_color(sec: int):
    if sec < 20:
        return BAD
    if sec < 25:
        return WARN
    return GOOD


class OfficeState:
    """
    Manager's office (the hub):
      - club summary, board confidence, finances, objectives
      - Play / Squad / Transfers / Table / Save
      - board ultimatum (Pledge or Resign) and job offers take over the screen
    """

    def __init__(self, app, engine):
        self.app = app
        self.engine = engine
        self.buttons: List[Button] = []
        self.board_buttons: List[Button] = []
        self.offer_buttons: List[Button] = []
        self.claim_buttons: List[Button] = []

    # ---------- lifecycle ----------

    def enter(self):
        self.layout()

    def resume(self):
        self.layout()

    def layout(self):
        w, h = self.app.screen.get_size()
        pad = 16
        self.rect_header = pygame.Rect(pad, pad, w - pad * 2, 56)
        body_top = self.rect_header.bottom + pad
        body_h = h - body_top - 80
        self.rect_info = pygame.Rect(pad, body_top, (w - pad * 3) // 2, body_h)
        self.rect_side = pygame.Rect(self.rect_info.right + pad, body_top, self.rect_info.w, body_h)

        labels = [
            ("Play Match", self._play),
            ("Squad", self._squad),
            ("Transfers", self._transfers),
            ("Table", self._table),
            (f"Mentality: {self.engine.club.tactics.mentality}", self._cycle_mentality),
            ("Save", self._save),
        ]
        bw = (w - pad * (len(labels) + 1)) // len(labels)
        self.buttons = [
            Button(pygame.Rect(pad + i * (bw + pad), h - 64, bw, 44), text, fn)
            for i, (text, fn) in enumerate(labels)
        ]
        mid = self.rect_side.centerx
        self.board_buttons = [
            Button(pygame.Rect(mid - 230, self.rect_side.y + 200, 200, 44), "Pledge", self._pledge),
            Button(pygame.Rect(mid + 30, self.rect_side.y + 200, 200, 44), "Resign", self._resign),
        ]
        self._build_offer_buttons()
        self._build_claim_buttons()

    def _build_offer_buttons(self):
        self.offer_buttons = []
        for i, _ in enumerate(self.engine.offers):
            r = pygame.Rect(self.rect_side.right - 140, self.rect_side.y + 60 + i * 64, 120, 40)
            self.offer_buttons.append(Button(r, "Accept", lambda i=i: self._accept(i), size=20))

    def _build_claim_buttons(self):
        self.claim_buttons = []
        for i, o in enumerate(self.engine.club.objectives):
            r = pygame.Rect(self.rect_side.right - 120, self.rect_side.y + 56 + i * 70, 100, 34)
            self.claim_buttons.append(Button(r, "Claim", lambda oid=o.oid: self._claim(oid), size=20))

    def _mode(self) -> str:
        flags = self.engine.flags()
        if flags["unemployed"]:
            return "offers"
        if flags["board_talk"]:
            return "board"
        return "normal"

    # ---------- actions ----------

    def _play(self):
        if self.engine.flags()["season_complete"]:
            summary = run_action(self.app, self.engine.finish_season)
            if summary is not None:
                pos = summary.position or "-"
                lines = [f"Season {summary.season} finished {pos} in tier {summary.tier} with {summary.points} pts."]
                if summary.released:
                    lines.append(f"Contracts expired: {', '.join(summary.released)}.")
                lines.append("The board adds a £20.0M end-of-season grant.")
                self.app.push_state(MessageState(self.app, "\n".join(lines), title="Season review"))
            return
        from .state_match import MatchState
        self.app.push_state(MatchState(self.app, self.engine))

    def _squad(self):
        from .state_squad import SquadState
        self.app.push_state(SquadState(self.app, self.engine))

    def _transfers(self):
        from .state_transfers import TransfersState
        self.app.push_state(TransfersState(self.app, self.engine))

    def _table(self):
        from .state_table import TableState
        self.app.push_state(TableState(self.app, self.engine))

    def _cycle_mentality(self):
        cur = self.engine.club.tactics.mentality
        nxt = MENTALITIES[(MENTALITIES.index(cur) + 1) % len(MENTALITIES)] if cur in MENTALITIES else MENTALITIES[0]
        self.engine.update_tactics(mentality=nxt)
        self.layout()

    def _save(self):
        path = self.engine.save_now()
        text = f"Saved to {path}." if path else "Saving is disabled for this session."
        self.app.push_state(MessageState(self.app, text, title="Save"))

    def _pledge(self):
        run_action(self.app, self.engine.pledge)
        self.layout()

    def _resign(self):
        run_action(self.app, self.engine.resign)
        self.layout()

    def _accept(self, index: int):
        club = run_action(self.app, self.engine.accept_job_offer, index)
        if club is not None:
            self.layout()
            self.app.push_state(MessageState(
                self.app, f"Welcome to {club.name}. The board expects a strong start.", title="New job",
            ))

    def _claim(self, oid: str):
        reward = run_action(self.app, self.engine.claim_objective, oid)
        if reward:
            self.layout()

    # ---------- frame ----------

    def handle(self, ev):
        if ev.type == pygame.KEYDOWN and ev.key == pygame.K_ESCAPE:
            self.app.running = False
            return
        mode = self._mode()
        if mode == "offers":
            group = self.offer_buttons
        elif mode == "board":
            group = self.board_buttons
        else:
            group = self.buttons + [b for b in self.claim_buttons if b.enabled]
        for b in group:
            if b.handle(ev):
                break

    def update(self, dt):
        flags = self.engine.flags()
        if self.buttons:
            self.buttons[0].label = "Finish Season" if flags["season_complete"] else "Play Match"
        for b, o in zip(self.claim_buttons, self.engine.club.objectives):
            b.enabled = o.completed and not o.claimed
        if len(self.offer_buttons) != len(self.engine.offers):
            self._build_offer_buttons()

    def draw(self, screen):
        eng = self.engine
        club = eng.club
        screen.fill(BG)

        draw_panel(screen, self.rect_header)
        draw_text(screen, club.name, (self.rect_header.x + 14, self.rect_header.centery), 34, TEXT, "midleft")
        draw_text(
            screen,
            f"Season {club.season}  ·  Tier {club.tier}  ·  Matchday {club.matchday}/38  ·  Manager {club.manager_name}",
            (self.rect_header.right - 14, self.rect_header.centery), 22, SUBTLE, "midright",
        )

        self._draw_info(screen)
        mode = self._mode()
        if mode == "offers":
            self._draw_offers(screen)
        elif mode == "board":
            self._draw_board(screen)
        else:
            self._draw_objectives(screen)
            for b in self.buttons:
                b.draw(screen)

    def _draw_info(self, screen):
        eng = self.engine
        club = eng.club
        r = self.rect_info
        draw_panel(screen, r)
        x, y = r.x + 16, r.y + 14
        fin = club.financials
        table = eng.standings()
        pos = next((i for i, row in enumerate(table, start=1) if row.name == club.name), None)
        rows = [
            ("Funds", money(club.funds), BAD if club.funds < 0 else TEXT),
            ("Record", f"W{club.wins} D{club.draws} L{club.losses}  ({club.goals_for}-{club.goals_against})", TEXT),
            ("League position", f"{pos}/{len(table)}" if pos else "-", TEXT),
            ("Season revenue", money(fin.revenue), TEXT),
            ("Season spending", money(fin.expenditure), TEXT),
            ("Wage bill", money(fin.wage_bill), TEXT),
            ("Financial fair play", fin.ffp_status, {"Healthy": GOOD, "Warning": WARN}.get(fin.ffp_status, BAD)),
            ("Stadium", f"{club.stadium.name} ({club.stadium.capacity:,}, level {club.stadium.facility_level})", TEXT),
            ("Academy", f"Level {club.academy_level}", TEXT),
        ]
        for label, value, color in rows:
            draw_text(screen, label, (x, y), 22, SUBTLE)
            draw_text(screen, value, (r.right - 16, y), 22, color, "topright")
            y += 30

        y += 10
        draw_text(screen, f"Board confidence {club.job_security}%", (x, y), 22, SUBTLE)
        draw_bar(screen, pygame.Rect(x, y + 26, r.w - 32, 14), club.job_security / 100.0,
                 security_color(club.job_security))
        y += 56
        if eng.state.pledged:
            draw_text(screen, "You promised the board results. Losses now hurt twice as much.", (x, y), 20, WARN)
            y += 28
        if eng.state.in_post and not eng.flags()["season_complete"]:
            opponent, strength = eng.next_fixture()
            draw_text(screen, f"Next: {opponent} (strength {strength})", (x, y), 22, TEXT)
            y += 28
        last = eng.last_result
        if last is not None:
            draw_text(screen, f"Last: {last.home_team} {last.home_score}-{last.away_score} {last.away_team}",
                      (x, y), 22, SUBTLE)

    def _draw_objectives(self, screen):
        r = self.rect_side
        draw_panel(screen, r)
        draw_text(screen, "Board objectives", (r.x + 16, r.y + 14), 26, TEXT)
        y = r.y + 56
        for o, b in zip(self.engine.club.objectives, self.claim_buttons):
            status = "claimed" if o.claimed else ("complete" if o.completed else f"{o.current}/{o.target}")
            draw_text(screen, f"{o.title}  ({status})", (r.x + 16, y), 22, GOOD if o.completed else TEXT)
            draw_text(screen, f"{o.description}  Reward {money(o.reward)}", (r.x + 16, y + 26), 18, SUBTLE)
            if b.enabled:
                b.draw(screen)
            y += 70

    def _draw_board(self, screen):
        r = self.rect_side
        draw_panel(screen, r)
        draw_text(screen, "The board wants a word", (r.x + 16, r.y + 14), 28, BAD)
        lines = [
            f"Confidence has dropped to {self.engine.club.job_security}%.",
            "Pledge to turn things around and confidence resets to 35%,",
            "but every defeat from now on counts double.",
            "Or walk away now and look for another job.",
        ]
        y = r.y + 64
        for ln in lines:
            draw_text(screen, ln, (r.x + 16, y), 22, TEXT)
            y += 28
        for b in self.board_buttons:
            b.draw(screen)

    def _draw_offers(self, screen):
        r = self.rect_side
        draw_panel(screen, r)
        title = "Sacked! Offers on the table" if self.engine.state.name == "SACKED" else "Job offers"
        draw_text(screen, title, (r.x + 16, r.y + 14), 28, WARN)
        for i, (o, b) in enumerate(zip(self.engine.offers, self.offer_buttons)):
            y = r.y + 60 + i * 64
            draw_text(screen, o.team_name, (r.x + 16, y), 24, TEXT)
            draw_text(screen, f"Tier {o.tier}  ·  {money(o.salary)} per week", (r.x + 16, y + 24), 20, SUBTLE)
            b.draw(screen)

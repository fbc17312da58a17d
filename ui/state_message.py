# ui/state_message.py
from __future__ import annotations

from typing import Callable, List, Optional

import pygame

from .uiutil import BORDER, SUBTLE, TEXT, draw_text, font


def wrap_text(text: str, fnt: pygame.font.Font, max_w: int) -> List[str]:
    lines: List[str] = []
    for para in str(text).split("\n"):
        cur = ""
        for word in para.split():
            trial = f"{cur} {word}".strip()
            if fnt.size(trial)[0] <= max_w or not cur:
                cur = trial
            else:
                lines.append(cur)
                cur = word
        lines.append(cur)
    return lines


class MessageState:
    """
    Popup over the previous screen. ENTER / ESC / click closes it.

      app.push_state(MessageState(app, "Not enough funds.", title="Transfer"))
    """

    def __init__(self, app, text: str, title: str = "Message", on_close: Optional[Callable[[], None]] = None):
        self.app = app
        self.text = text
        self.title = title
        self.on_close = on_close

    def exit(self) -> None:
        if callable(self.on_close):
            self.on_close()

    def handle(self, ev) -> None:
        if ev.type == pygame.KEYDOWN and ev.key in (pygame.K_RETURN, pygame.K_KP_ENTER, pygame.K_ESCAPE):
            self.app.pop_state()
        elif ev.type == pygame.MOUSEBUTTONDOWN and ev.button == 1:
            self.app.pop_state()

    def update(self, dt: float) -> None:
        pass

    def draw(self, surface) -> None:
        # the screen underneath stays visible through the overlay
        if len(self.app.states) > 1 and self.app.states[-2] is not self:
            self.app.states[-2].draw(surface)
        w, h = surface.get_size()
        overlay = pygame.Surface((w, h), pygame.SRCALPHA)
        overlay.fill((0, 0, 0, 140))
        surface.blit(overlay, (0, 0))

        box = pygame.Rect(0, 0, min(760, int(w * 0.8)), min(360, int(h * 0.6)))
        box.center = (w // 2, h // 2)
        pygame.draw.rect(surface, (28, 32, 40), box, border_radius=12)
        pygame.draw.rect(surface, (70, 80, 95), box, 2, border_radius=12)
        pygame.draw.line(surface, BORDER, (box.x, box.y + 44), (box.right, box.y + 44), 2)

        draw_text(surface, self.title, (box.x + 16, box.y + 12), 28, TEXT)
        y = box.y + 58
        for ln in wrap_text(self.text, font(22), box.w - 32)[:10]:
            draw_text(surface, ln, (box.x + 16, y), 22, (220, 220, 220))
            y += 26
        draw_text(surface, "ENTER / ESC to close", (box.x + 16, box.bottom - 28), 16, SUBTLE)

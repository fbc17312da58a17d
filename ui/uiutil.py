# ui/uiutil.py
from __future__ import annotations

from typing import Callable, List, Optional, Tuple

import pygame

Color = Tuple[int, int, int]

# --------------- FONTS ---------------

_FONTS: dict = {}

def font(size: int) -> pygame.font.Font:
    """Cached default font; works with the dummy video driver too."""
    if size not in _FONTS:
        pygame.font.init()
        _FONTS[size] = pygame.font.SysFont(None, int(size))
    return _FONTS[size]


# --------------- COLOURS ---------------

BG: Color = (16, 18, 22)
PANEL: Color = (42, 44, 52)
BORDER: Color = (24, 24, 28)
TEXT: Color = (235, 235, 240)
SUBTLE: Color = (160, 164, 174)
ACCENT: Color = (70, 110, 190)
GOOD: Color = (80, 190, 120)
WARN: Color = (230, 180, 60)
BAD: Color = (220, 80, 80)


# --------------- TEXT / PANELS ---------------

def draw_text(surf: pygame.Surface, text: str, pos: Tuple[int, int], size: int = 22,
              color: Color = TEXT, align: str = "topleft") -> pygame.Rect:
    img = font(size).render(str(text), True, color)
    rect = img.get_rect()
    setattr(rect, align, pos)
    surf.blit(img, rect)
    return rect


def draw_panel(surf: pygame.Surface, rect: pygame.Rect, radius: int = 12) -> None:
    pygame.draw.rect(surf, PANEL, rect, border_radius=radius)
    pygame.draw.rect(surf, BORDER, rect, 2, border_radius=radius)


def draw_bar(surf: pygame.Surface, rect: pygame.Rect, frac: float, color: Color) -> None:
    """Horizontal gauge, frac in 0..1."""
    pygame.draw.rect(surf, BORDER, rect, border_radius=6)
    inner = rect.copy()
    inner.w = int(rect.w * max(0.0, min(1.0, frac)))
    if inner.w > 0:
        pygame.draw.rect(surf, color, inner, border_radius=6)


def money(amount: int) -> str:
    """£55.0M / £120K / £500."""
    a = int(amount)
    sign = "-" if a < 0 else ""
    a = abs(a)
    if a >= 1_000_000:
        return f"{sign}£{a / 1_000_000:.1f}M"
    if a >= 1_000:
        return f"{sign}£{a / 1_000:.0f}K"
    return f"{sign}£{a}"


# --------------- BUTTON ---------------

class Button:
    def __init__(self, rect: pygame.Rect, label: str, action: Optional[Callable[[], None]] = None,
                 size: int = 22):
        self.rect = pygame.Rect(rect)
        self.label = label
        self.action = action
        self.size = size
        self.enabled = True
        self.hover = False

    def handle(self, ev) -> bool:
        if ev.type == pygame.MOUSEMOTION:
            self.hover = self.rect.collidepoint(ev.pos)
        elif ev.type == pygame.MOUSEBUTTONDOWN and ev.button == 1:
            if self.enabled and self.rect.collidepoint(ev.pos) and callable(self.action):
                self.action()
                return True
        return False

    def draw(self, surf: pygame.Surface, selected: bool = False) -> None:
        bg = (76, 78, 90) if self.hover else (58, 60, 70)
        if selected:
            bg = (88, 92, 110)
        if not self.enabled:
            bg = (48, 48, 54)
        pygame.draw.rect(surf, bg, self.rect, border_radius=10)
        pygame.draw.rect(surf, BORDER, self.rect, 2, border_radius=10)
        draw_text(surf, self.label, self.rect.center, self.size,
                  TEXT if self.enabled else (155, 155, 160), align="center")


# --------------- ROW LIST ---------------

class RowList:
    """
    Clipped, scrollable list of text rows; clicking a row selects it.
    `on_select(index)` fires on every click, including re-clicks.
    """
    def __init__(self, rect: pygame.Rect, rows: List[str], row_h: int = 26,
                 on_select: Optional[Callable[[int], None]] = None):
        self.rect = pygame.Rect(rect)
        self.rows = list(rows)
        self.row_h = row_h
        self.scroll = 0
        self.selected = -1
        self.on_select = on_select
        self.colors: List[Optional[Color]] = []

    def set_rows(self, rows: List[str], colors: Optional[List[Optional[Color]]] = None) -> None:
        self.rows = list(rows)
        self.colors = list(colors or [])
        if self.selected >= len(self.rows):
            self.selected = len(self.rows) - 1

    def _max_scroll(self) -> int:
        return max(0, len(self.rows) * self.row_h - (self.rect.h - 16))

    def handle(self, ev) -> None:
        if ev.type == pygame.MOUSEWHEEL and self.rect.collidepoint(pygame.mouse.get_pos()):
            self.scroll = max(0, min(self._max_scroll(), self.scroll - ev.y * self.row_h * 3))
        elif ev.type == pygame.MOUSEBUTTONDOWN and ev.button == 1 and self.rect.collidepoint(ev.pos):
            idx = (ev.pos[1] - self.rect.y - 8 + self.scroll) // self.row_h
            if 0 <= idx < len(self.rows):
                self.selected = int(idx)
                if callable(self.on_select):
                    self.on_select(int(idx))

    def draw(self, surf: pygame.Surface, size: int = 20) -> None:
        draw_panel(surf, self.rect)
        inner = self.rect.inflate(-16, -16)
        clip = surf.get_clip()
        surf.set_clip(inner)
        y = inner.y - self.scroll
        for i, text in enumerate(self.rows):
            row = pygame.Rect(inner.x, y, inner.w, self.row_h)
            if i == self.selected:
                pygame.draw.rect(surf, ACCENT, row, border_radius=6)
            color = self.colors[i] if i < len(self.colors) and self.colors[i] else TEXT
            draw_text(surf, text, (row.x + 8, row.centery), size, color, align="midleft")
            y += self.row_h
        surf.set_clip(clip)

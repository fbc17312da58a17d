# ui/app.py
from __future__ import annotations

import logging
from concurrent.futures import ThreadPoolExecutor

import pygame

logger = logging.getLogger(__name__)


class App:
    """
    Window + state stack. The top state gets handle/update/draw each frame.
    `executor` runs oracle calls off the frame loop; screens poll the futures.
    """

    def __init__(self, width=1280, height=720, title="Phoenix FC Manager", engine=None):
        pygame.init()
        self.flags = pygame.RESIZABLE | pygame.DOUBLEBUF
        pygame.display.set_caption(title)
        self.screen = pygame.display.set_mode((width, height), self.flags)
        self.clock = pygame.time.Clock()
        self.states = []
        self.running = True
        self.engine = engine
        self.executor = ThreadPoolExecutor(max_workers=1, thread_name_prefix="oracle")

    def push_state(self, st):
        self.states.append(st)
        if hasattr(st, "enter"):
            st.enter()

    def pop_state(self):
        if not self.states:
            return
        st = self.states.pop()
        if hasattr(st, "exit"):
            st.exit()
        if self.states and hasattr(self.states[-1], "resume"):
            self.states[-1].resume()

    def _apply_resize(self, w: int, h: int):
        self.screen = pygame.display.set_mode((w, h), self.flags)
        if self.states and hasattr(self.states[-1], "layout"):
            self.states[-1].layout()

    def step(self, dt: float):
        """One frame: events, update, draw. Split out so tests can drive frames."""
        for event in pygame.event.get():
            if event.type == pygame.QUIT:
                self.running = False
                continue
            if event.type == pygame.VIDEORESIZE:
                self._apply_resize(event.w, event.h)
                continue
            if self.states and hasattr(self.states[-1], "handle"):
                self.states[-1].handle(event)
        if not self.states:
            return
        st = self.states[-1]
        if hasattr(st, "update"):
            st.update(dt)
        if self.states and hasattr(self.states[-1], "draw"):
            self.states[-1].draw(self.screen)

    def run(self):
        while self.running and self.states:
            dt = self.clock.tick(60) / 1000.0
            self.step(dt)
            pygame.display.flip()
        self.shutdown()

    def shutdown(self):
        if self.engine is not None:
            self.engine.cancel_playback()
            self.engine.save_now()
        self.executor.shutdown(wait=False, cancel_futures=True)
        pygame.quit()

# render/renderer.py
import logging
import numpy as np
import pygame
from typing import Tuple
from config import DisplayConfig, RenderConfig

BG = (0, 0, 0)
STATUS_BG = (24, 24, 28)
STATUS_LINE = (60, 60, 66)
STATUS_FG = (180, 180, 190)

class Renderer:
    """pygame window: status bar on top, pixel canvas below.

    The canvas keeps the last frame; try_clear() only blanks it once no frame
    has arrived for `wait_before_clear_ms`, so short gaps between chords don't flicker.
    """
    def __init__(self, cfg: RenderConfig, display: DisplayConfig):
        pygame.init()
        self.cfg = cfg
        self.display = display
        self.screen = pygame.display.set_mode((cfg.window_w, cfg.window_h))
        pygame.display.set_caption("color organ")
        self.font_small = pygame.font.SysFont("consolas", 14)
        self.clock = pygame.time.Clock()
        self.canvas = pygame.Surface(self.canvas_size)
        self.canvas.fill(BG)
        self.cleared = True
        self._last_frame_ms = pygame.time.get_ticks()
        logging.debug("Renderer ready: window=%dx%d canvas=%dx%d",
                      cfg.window_w, cfg.window_h, *self.canvas_size)

    @property
    def canvas_size(self) -> Tuple[int, int]:
        return self.cfg.window_w, self.cfg.window_h - self.cfg.status_h

    def tick(self, fps: float = 30) -> float:
        return self.clock.tick(fps) / 1000.0

    def present(self, frame: np.ndarray):
        h, w = frame.shape[:2]
        if (w, h) != self.canvas_size:
            raise ValueError(f"frame is {w}x{h}, canvas is {self.canvas_size[0]}x{self.canvas_size[1]}")
        img = pygame.image.frombuffer(np.ascontiguousarray(frame).tobytes(), (w, h), "RGBA")
        self.canvas.blit(img, (0, 0))
        self.cleared = False
        self._last_frame_ms = pygame.time.get_ticks()

    def try_clear(self):
        if self.cleared:
            return
        if pygame.time.get_ticks() - self._last_frame_ms >= self.display.wait_before_clear_ms:
            self.canvas.fill(BG)
            self.cleared = True

    def draw_status_bar(self, text: str = ""):
        w, sh = self.cfg.window_w, self.cfg.status_h
        pygame.draw.rect(self.screen, STATUS_BG, (0, 0, w, sh))
        pygame.draw.line(self.screen, STATUS_LINE, (0, sh - 1), (w, sh - 1), 1)
        if text:
            surf = self.font_small.render(text, True, STATUS_FG)
            self.screen.blit(surf, (10, (sh - surf.get_height()) // 2))

    def end_frame(self):
        self.screen.blit(self.canvas, (0, self.cfg.status_h))
        pygame.display.flip()

    def close(self):
        pygame.quit()

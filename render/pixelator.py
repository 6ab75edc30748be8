# ========================= render/pixelator.py =========================
import math
from typing import Callable, Optional, Sequence

import numpy as np

from colors.hsl import WeightedHSL, hsl_to_rgba, normalize_weights
from utils.sampling import draw_random_sample

FrameCallback = Callable[[np.ndarray], None]


class RandomPixelator:
    """Colors every pixel with an independent draw from a weighted pool.

    Each color takes floor(pool_size * weight) slots of the pool, so a color
    at weight 0.25 lands on about a quarter of the pixels. Frames are grainy
    on purpose; nothing is tiled or smoothed.
    """
    def __init__(self, width: int, height: int, pool_size: int = 10000,
                 rng: Optional[np.random.Generator] = None):
        self.width = width
        self.height = height
        self.pool_size = pool_size
        self.rng = rng if rng is not None else np.random.default_rng()

    def build_pool(self, distribution: Sequence[WeightedHSL]) -> np.ndarray:
        dist = normalize_weights(distribution)
        if not dist:
            return np.zeros((0, 4), dtype=np.uint8)
        counts = [math.floor(self.pool_size * wc.weight) for wc in dist]
        if sum(counts) == 0:
            # every share rounds down to nothing: the heaviest color gets the pool
            heaviest = max(range(len(dist)), key=lambda i: dist[i].weight)
            counts = [1 if i == heaviest else 0 for i in range(len(dist))]
        rgba = np.array([hsl_to_rgba(wc.color) for wc in dist], dtype=np.uint8)
        return np.repeat(rgba, counts, axis=0)

    def draw(self, distribution: Sequence[WeightedHSL]) -> Optional[np.ndarray]:
        """(height, width, 4) RGBA frame, or None when there is nothing to draw."""
        pool = self.build_pool(distribution)
        if len(pool) == 0:
            return None
        pixels = draw_random_sample(pool, self.width * self.height, "allow-repeats", self.rng)
        return pixels.reshape(self.height, self.width, 4)

    def __call__(self, distribution: Sequence[WeightedHSL], on_frame: FrameCallback,
                 try_clear: Callable[[], None]):
        frame = self.draw(distribution)
        if frame is None:
            try_clear()
        else:
            on_frame(frame)

# ========================= colors/hsl.py =========================
import colorsys
from dataclasses import dataclass
from enum import Enum
from typing import List, Sequence, Tuple

from colors.okhsl import okhsl_to_srgb

RGB = Tuple[int, int, int]
RGBA = Tuple[int, int, int, int]


class ColorSpace(str, Enum):
    STANDARD = "hsl"
    OKHSL = "okhsl"


@dataclass(frozen=True)
class HSL:
    hue: float          # [0, 360)
    saturation: float   # [0, 100]
    light: float        # [0, 100]
    space: ColorSpace = ColorSpace.STANDARD


@dataclass(frozen=True)
class WeightedHSL:
    color: HSL
    weight: float


def _unit(v: float) -> float:
    return min(1.0, max(0.0, v / 100.0))


def hsl_to_rgb(hsl: HSL) -> RGB:
    h = (hsl.hue % 360) / 360.0
    s, l = _unit(hsl.saturation), _unit(hsl.light)
    if hsl.space == ColorSpace.OKHSL:
        r, g, b = okhsl_to_srgb(h, s, l)
    else:
        # colorsys takes h, l, s; saturation 0 is handled as achromatic there
        r, g, b = colorsys.hls_to_rgb(h, l, s)
    return round(r * 255), round(g * 255), round(b * 255)


def hsl_to_rgba(hsl: HSL, alpha: int = 255) -> RGBA:
    return (*hsl_to_rgb(hsl), alpha)


def hsl_to_hex(hsl: HSL) -> str:
    return "#{:02x}{:02x}{:02x}".format(*hsl_to_rgb(hsl))


def normalize_weights(colors: Sequence[WeightedHSL]) -> List[WeightedHSL]:
    """Rescale weights to sum to 1. Returns new values; a distribution whose
    total weight is not positive has nothing to draw and comes back empty."""
    total = sum(wc.weight for wc in colors)
    if total <= 0:
        return []
    return [WeightedHSL(wc.color, wc.weight / total) for wc in colors]

# ========================= colors/harmony.py =========================
"""Notes -> weighted colors.

Hues come from the circle of fifths, chords are blended as vectors in the
HSL cylinder, and every color is spread into harmonic-series overtones.
"""
import math
from typing import List, Optional, Sequence

from colors.hsl import HSL, ColorSpace, WeightedHSL, normalize_weights
from config import AppConfig, CircleConfig, ColorConfig, DecayConfig, MixBias, OvertoneConfig, RenderBias
from notes.tracker import PlayedNote

FIFTHS = {
    "C": 0,
    "G": 30,
    "D": 60,
    "A": 90,
    "E": 120,
    "B": 150,
    "F#": 180,
    "Db": 210,
    "Ab": 240,
    "Eb": 270,
    "Bb": 300,
    "F": 330,
}

PIANO_LOW = 21
PIANO_KEYS = 88

# (hue shift in degrees, semitones above the fundamental) for harmonics 2..7.
# Sharp moves counterclockwise, so sharp subtracts and flat adds.
OVERTONES = (
    (0, 12),                    # octave
    (-31, 19),                  # octave + fifth, 2 cents sharp
    (0, 24),                    # two octaves
    (-120 + 15 * 14 / 50, 28),  # major third, 14 cents flat
    (-31, 31),                  # fifth
    (60 + 15 * 31 / 50, 34),    # minor seventh, 31 cents flat
)


def _clamp(v: float, lo: float = 0.0, hi: float = 100.0) -> float:
    return min(hi, max(lo, v))


def note_hue(circle: CircleConfig, pitch_class: str) -> float:
    return abs(360 - FIFTHS[pitch_class] + circle.degree_offset + FIFTHS[circle.tonic]) % 360


def decayed_velocity(note: PlayedNote, decay: DecayConfig) -> float:
    if decay.decay_per_second <= 0:
        return note.velocity
    return note.velocity * max(0.0, 1.0 - decay.decay_per_second * note.age)


def note_color(circle: CircleConfig, color: ColorConfig, note: PlayedNote,
               velocity: Optional[float] = None) -> HSL:
    velocity = note.velocity if velocity is None else velocity
    key = note.midi - PIANO_LOW
    if color.saturation_from_velocity:
        light = key * (100 / PIANO_KEYS)
        saturation = 100 * (0.7 + 0.3 * velocity)
    else:
        pos = key / (PIANO_KEYS - 1)
        light = color.light_floor + (color.light_ceiling - color.light_floor) * pos
        saturation = color.saturation_floor + (color.saturation_ceiling - color.saturation_floor) * pos
    return HSL(
        hue=note_hue(circle, note.note.pitch_class),
        saturation=_clamp(saturation),
        light=_clamp(light),
        space=ColorSpace(color.space),
    )


def notes_to_colors(circle: CircleConfig, color: ColorConfig, notes: Sequence[PlayedNote],
                    decay: Optional[DecayConfig] = None) -> List[HSL]:
    decay = decay or DecayConfig()
    return [note_color(circle, color, n, decayed_velocity(n, decay)) for n in notes]


def _to_vector(hsl: HSL):
    rad = math.radians(hsl.hue)
    return math.cos(rad) * hsl.saturation, math.sin(rad) * hsl.saturation, hsl.light


def _from_vector(x: float, y: float, z: float, space: ColorSpace) -> HSL:
    h = math.degrees(math.atan2(y, x))
    hue = h + 360 if h < 0 else h
    return HSL(hue=hue % 360, saturation=_clamp(math.hypot(x, y)), light=_clamp(z), space=space)


def _mix_weights(bias: MixBias, count: int, velocities: Optional[Sequence[float]]) -> List[float]:
    weights = []
    for i in range(count):
        if i == 0:
            weights.append(bias.root_bias)
        elif i == count - 1:
            weights.append(bias.melody_bias)
        else:
            weights.append(1.0)
    if not (bias.consider_velocity and velocities is not None):
        return weights
    weighted = []
    for i, (w, v) in enumerate(zip(weights, velocities)):
        middle = 0 < i < count - 1
        weighted.append(w * v if (not middle or bias.velocity_on_middle) else w)
    # all-silent chord: fall back to positional weights
    return weighted if sum(weighted) > 0 else weights


def mix_colors(bias: MixBias, colors: Sequence[HSL],
               velocities: Optional[Sequence[float]] = None) -> HSL:
    """Blend colors as weighted vectors (cos h * s, sin h * s, l).

    Index 0 gets the root bias, the last index the melody bias. A single
    color is returned as is.
    """
    if not colors:
        raise ValueError("mix_colors needs at least one color")
    if len(colors) == 1:
        return colors[0]
    space = colors[0].space
    if any(c.space != space for c in colors):
        raise ValueError("Cannot mix colors from different color spaces")
    if velocities is not None and len(velocities) != len(colors):
        raise ValueError("velocities must match colors")

    weights = _mix_weights(bias, len(colors), velocities)
    if sum(weights) <= 0:
        # zero root and melody bias on a two-note chord: plain average
        weights = [1.0] * len(colors)
    total = sum(weights)

    x = y = z = 0.0
    for c, w in zip(colors, weights):
        cx, cy, cz = _to_vector(c)
        x += cx * w
        y += cy * w
        z += cz * w
    return _from_vector(x / total, y / total, z / total, space)


def lighten(color: HSL, semitones: int) -> float:
    return min(100.0, (100 / PIANO_KEYS) * semitones + color.light)


def color_overtones(color: HSL, config: OvertoneConfig) -> List[WeightedHSL]:
    count = max(0, min(config.number_overtones, len(OVERTONES)))
    result = [WeightedHSL(color, 1.0)]
    for harmonic, (shift, semitones) in enumerate(OVERTONES[:count], start=2):
        overtone = HSL(
            hue=(color.hue + shift) % 360,
            saturation=color.saturation,
            light=lighten(color, semitones),
            space=color.space,
        )
        result.append(WeightedHSL(overtone, 1 / (config.backoff_coefficient * harmonic)))
    return normalize_weights(result)


def role_bias(render: RenderBias, index: int, count: int, has_emergent: bool) -> float:
    if index == 0:
        return render.root_bias
    if has_emergent and index == count - 1:
        return render.emergent_bias
    if index == count - (2 if has_emergent else 1):
        return render.melody_bias
    return render.middle_bias


def weighted_distribution(notes: Sequence[PlayedNote], cfg: AppConfig) -> List[WeightedHSL]:
    """One normalized color distribution for the chord in `notes`.

    `notes` must be ordered low to high. Each note color plus, for chords,
    the emergent mix of all of them is expanded into overtones; each group is
    then scaled by its role (root / middle / melody / emergent).
    """
    if not notes:
        return []
    velocities = [decayed_velocity(n, cfg.decay) for n in notes]
    colors = notes_to_colors(cfg.circle, cfg.color, notes, cfg.decay)
    has_emergent = len(colors) > 1
    if has_emergent:
        colors.append(mix_colors(cfg.mix, colors, velocities))

    flat: List[WeightedHSL] = []
    for i, c in enumerate(colors):
        bias = role_bias(cfg.render_bias, i, len(colors), has_emergent)
        flat.extend(WeightedHSL(wc.color, wc.weight * bias) for wc in color_overtones(c, cfg.overtone))
    return normalize_weights(flat)

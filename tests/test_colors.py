import itertools

import pytest

from colors.harmony import (
    FIFTHS,
    color_overtones,
    mix_colors,
    note_color,
    note_hue,
    notes_to_colors,
    weighted_distribution,
)
from colors.hsl import HSL, ColorSpace, WeightedHSL, hsl_to_hex, hsl_to_rgb, hsl_to_rgba, normalize_weights
from config import AppConfig, CircleConfig, ColorConfig, DecayConfig, MixBias, OvertoneConfig, RenderBias
from notes.model import midi_to_scientific
from notes.tracker import PlayedNote


def played(midi, velocity=1.0, age=0.0):
    return PlayedNote(velocity=velocity, note=midi_to_scientific(midi, midi // 12 - 1), age=age)


def in_range(c: HSL):
    return 0 <= c.hue < 360 and 0 <= c.saturation <= 100 and 0 <= c.light <= 100


# ---- hue wheel ----

@pytest.mark.parametrize("pc, hue", [("C", 0), ("G", 330), ("D", 300), ("F", 30), ("F#", 180)])
def test_hue_tonic_c(pc, hue):
    assert note_hue(CircleConfig(tonic="C", degree_offset=0), pc) == pytest.approx(hue)


def test_hue_rotates_with_tonic_and_offset():
    assert note_hue(CircleConfig(tonic="G", degree_offset=0), "G") == pytest.approx(0)
    assert note_hue(CircleConfig(tonic="C", degree_offset=60), "C") == pytest.approx(60)


def test_every_pitch_class_hue_in_range():
    for tonic, pc in itertools.product(FIFTHS, FIFTHS):
        h = note_hue(CircleConfig(tonic=tonic, degree_offset=45), pc)
        assert 0 <= h < 360


# ---- note colors ----

def test_saturation_light_hit_floor_and_ceiling():
    color = ColorConfig(light_floor=5, light_ceiling=95, saturation_floor=80, saturation_ceiling=100,
                        space="hsl")
    low = note_color(CircleConfig(), color, played(21))
    high = note_color(CircleConfig(), color, played(108))
    assert (low.light, low.saturation) == pytest.approx((5, 80))
    assert (high.light, high.saturation) == pytest.approx((95, 100))
    assert low.space == ColorSpace.STANDARD


def test_out_of_piano_range_is_clamped():
    c = note_color(CircleConfig(), ColorConfig(), played(127))
    assert in_range(c)


def test_velocity_saturation_mode():
    color = ColorConfig(saturation_from_velocity=True, space="okhsl")
    c = note_color(CircleConfig(), color, played(65, velocity=0.5))
    assert c.saturation == pytest.approx(85)
    assert c.light == pytest.approx(44 * 100 / 88)
    assert c.space == ColorSpace.OKHSL


def test_decay_discounts_velocity():
    color = ColorConfig(saturation_from_velocity=True)
    [fresh, old] = notes_to_colors(CircleConfig(), color, [played(60, 1.0), played(60, 1.0, age=10)],
                                   DecayConfig(decay_per_second=0.1))
    assert fresh.saturation == pytest.approx(100)
    assert old.saturation == pytest.approx(70)


# ---- mixing ----

def test_mix_single_is_identity():
    c = HSL(123.4, 56.7, 89.0, ColorSpace.OKHSL)
    assert mix_colors(MixBias(), [c]) is c


def test_mix_empty_raises():
    with pytest.raises(ValueError):
        mix_colors(MixBias(), [])


def test_mix_wraps_around_zero():
    m = mix_colors(MixBias(root_bias=1, melody_bias=1), [HSL(10, 100, 50), HSL(350, 100, 50)])
    assert min(m.hue, 360 - m.hue) == pytest.approx(0, abs=1e-9)
    assert m.light == pytest.approx(50)


def test_mix_unweighted_is_order_independent():
    bias = MixBias(root_bias=1, melody_bias=1, consider_velocity=False)
    colors = [HSL(20, 90, 30), HSL(140, 60, 60), HSL(260, 80, 50)]
    results = [mix_colors(bias, list(p)) for p in itertools.permutations(colors)]
    for r in results[1:]:
        assert r.hue == pytest.approx(results[0].hue)
        assert r.saturation == pytest.approx(results[0].saturation)
        assert r.light == pytest.approx(results[0].light)


def test_mix_biased_is_order_dependent():
    bias = MixBias(root_bias=3, melody_bias=1, consider_velocity=False)
    a, b = HSL(20, 90, 30), HSL(140, 60, 60)
    assert mix_colors(bias, [a, b]).hue != pytest.approx(mix_colors(bias, [b, a]).hue)


def test_mix_velocity_weighting():
    a, b = HSL(0, 100, 20), HSL(0, 100, 80)
    bias = MixBias(root_bias=1, melody_bias=1, consider_velocity=True)
    assert mix_colors(bias, [a, b], [1.0, 0.0]).light == pytest.approx(20)
    # all silent: positional weights only
    assert mix_colors(bias, [a, b], [0.0, 0.0]).light == pytest.approx(50)


def test_mix_middle_velocity_flag():
    colors = [HSL(0, 0, 0), HSL(0, 0, 90), HSL(0, 0, 0)]
    vel = [1.0, 0.0, 1.0]
    on = mix_colors(MixBias(1, 1, True, velocity_on_middle=True), colors, vel)
    off = mix_colors(MixBias(1, 1, True, velocity_on_middle=False), colors, vel)
    assert on.light == pytest.approx(0)
    assert off.light == pytest.approx(30)


def test_mix_zero_root_and_melody_bias_averages():
    a, b = HSL(0, 100, 20), HSL(0, 100, 80)
    bias = MixBias(root_bias=0, melody_bias=0, consider_velocity=True)
    assert mix_colors(bias, [a, b], [1.0, 1.0]).light == pytest.approx(50)
    assert mix_colors(bias, [a, b]).light == pytest.approx(50)


def test_mix_rejects_mixed_spaces():
    with pytest.raises(ValueError):
        mix_colors(MixBias(), [HSL(0, 50, 50, ColorSpace.STANDARD), HSL(0, 50, 50, ColorSpace.OKHSL)])


def test_mix_does_not_mutate_inputs():
    colors = [HSL(10, 50, 50), HSL(200, 50, 50)]
    before = list(colors)
    mix_colors(MixBias(), colors, [0.5, 0.5])
    assert colors == before


# ---- overtones ----

def test_overtone_table():
    base = HSL(10, 80, 40, ColorSpace.OKHSL)
    out = color_overtones(base, OvertoneConfig(number_overtones=6, backoff_coefficient=1.5))
    assert len(out) == 7
    assert out[0].color is base
    hues = [wc.color.hue for wc in out]
    assert hues == pytest.approx([10, 10, 339, 10, (10 - 115.8) % 360, 339, 79.3])
    lights = [wc.color.light for wc in out]
    assert lights == pytest.approx([40] + [min(100, 40 + 100 / 88 * s) for s in (12, 19, 24, 28, 31, 34)])
    assert all(wc.color.space == ColorSpace.OKHSL for wc in out)
    assert all(wc.color.saturation == 80 for wc in out)


def test_overtone_weights_back_off():
    out = color_overtones(HSL(0, 50, 50), OvertoneConfig(number_overtones=2, backoff_coefficient=2))
    raw = [1, 1 / 4, 1 / 6]
    assert [wc.weight for wc in out] == pytest.approx([r / sum(raw) for r in raw])


def test_overtone_light_is_clamped():
    out = color_overtones(HSL(0, 50, 95), OvertoneConfig(number_overtones=6))
    assert all(wc.color.light <= 100 for wc in out)
    assert out[-1].color.light == 100


@pytest.mark.parametrize("count", [0, 1, 3, 6, 9])
def test_overtone_count_and_normalization(count):
    out = color_overtones(HSL(300, 50, 50), OvertoneConfig(number_overtones=count))
    assert len(out) == 1 + min(count, 6)
    assert sum(wc.weight for wc in out) == pytest.approx(1)
    assert all(in_range(wc.color) for wc in out)


def test_normalize_weights_returns_new_values():
    src = [WeightedHSL(HSL(0, 0, 0), 2.0), WeightedHSL(HSL(0, 0, 0), 6.0)]
    out = normalize_weights(src)
    assert [wc.weight for wc in out] == pytest.approx([0.25, 0.75])
    assert src[0].weight == 2.0
    assert normalize_weights([WeightedHSL(HSL(0, 0, 0), 0.0)]) == []


# ---- full distribution ----

def test_distribution_empty():
    assert weighted_distribution([], AppConfig()) == []


def test_distribution_single_note():
    dist = weighted_distribution([played(60)], AppConfig())
    assert len(dist) == 7
    assert sum(wc.weight for wc in dist) == pytest.approx(1)


def test_distribution_chord_roles():
    cfg = AppConfig()
    cfg.render_bias = RenderBias(root_bias=0, middle_bias=0, melody_bias=0, emergent_bias=1)
    chord = [played(48), played(64), played(67)]
    dist = weighted_distribution(chord, cfg)
    assert len(dist) == 4 * 7
    assert sum(wc.weight for wc in dist) == pytest.approx(1)
    # only the emergent group carries weight
    assert all(wc.weight == 0 for wc in dist[:21])
    emergent = mix_colors(cfg.mix, notes_to_colors(cfg.circle, cfg.color, chord), [1.0, 1.0, 1.0])
    assert dist[21].color == emergent


def test_distribution_melody_and_middle_groups():
    cfg = AppConfig()
    cfg.render_bias = RenderBias(root_bias=1, middle_bias=2, melody_bias=3, emergent_bias=4)
    dist = weighted_distribution([played(48), played(55), played(64), played(67)], cfg)
    groups = [sum(wc.weight for wc in dist[i:i + 7]) for i in range(0, len(dist), 7)]
    assert groups == pytest.approx([1 / 12, 2 / 12, 2 / 12, 3 / 12, 4 / 12])


def test_distribution_two_notes_without_root_or_melody_bias():
    cfg = AppConfig()
    cfg.mix = MixBias(root_bias=0, melody_bias=0)
    cfg.validate()
    dist = weighted_distribution([played(60), played(67)], cfg)
    assert len(dist) == 3 * 7
    assert sum(wc.weight for wc in dist) == pytest.approx(1)
    assert all(in_range(wc.color) for wc in dist)


def test_distribution_values_in_range():
    cfg = AppConfig()
    dist = weighted_distribution([played(p, 0.7) for p in (21, 40, 61, 88, 108)], cfg)
    assert all(in_range(wc.color) for wc in dist)


# ---- conversion ----

def test_standard_hsl_to_rgb():
    assert hsl_to_rgb(HSL(0, 100, 50)) == (255, 0, 0)
    assert hsl_to_rgb(HSL(120, 100, 50)) == (0, 255, 0)
    assert hsl_to_rgb(HSL(240, 0, 100)) == (255, 255, 255)
    assert hsl_to_hex(HSL(240, 100, 50)) == "#0000ff"
    assert hsl_to_rgba(HSL(0, 0, 0)) == (0, 0, 0, 255)


def test_achromatic_has_equal_channels():
    r, g, b = hsl_to_rgb(HSL(77, 0, 40))
    assert r == g == b


def test_okhsl_extremes():
    assert hsl_to_rgb(HSL(200, 100, 0, ColorSpace.OKHSL)) == (0, 0, 0)
    assert hsl_to_rgb(HSL(200, 100, 100, ColorSpace.OKHSL)) == (255, 255, 255)
    r, g, b = hsl_to_rgb(HSL(200, 0, 50, ColorSpace.OKHSL))
    assert r == g == b


def test_okhsl_colors_in_gamut():
    for hue in range(0, 360, 15):
        for s in (20, 80, 100):
            rgb = hsl_to_rgb(HSL(hue, s, 60, ColorSpace.OKHSL))
            assert all(0 <= v <= 255 for v in rgb)

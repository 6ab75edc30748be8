# colors/okhsl.py
"""okhsl -> sRGB, after Björn Ottosson's Oklab color picker reference.

All inputs and outputs are floats in [0, 1]; hue is in turns.
"""
import math
from typing import Tuple

FLT_MAX = 1e30


def _cbrt(x: float) -> float:
    return math.copysign(abs(x) ** (1.0 / 3.0), x)


def oklab_to_linear_srgb(L: float, a: float, b: float) -> Tuple[float, float, float]:
    l_ = L + 0.3963377774 * a + 0.2158037573 * b
    m_ = L - 0.1055613458 * a - 0.0638541728 * b
    s_ = L - 0.0894841775 * a - 1.2914855480 * b
    l, m, s = l_ ** 3, m_ ** 3, s_ ** 3
    return (
        +4.0767416621 * l - 3.3077115913 * m + 0.2309699292 * s,
        -1.2684380046 * l + 2.6097574011 * m - 0.3413193965 * s,
        -0.0041960863 * l - 0.7034186147 * m + 1.7076147010 * s,
    )


def srgb_transfer(x: float) -> float:
    if x <= 0.0031308:
        return 12.92 * x
    return 1.055 * x ** (1 / 2.4) - 0.055


def toe_inv(x: float) -> float:
    k1, k2 = 0.206, 0.03
    k3 = (1 + k1) / (1 + k2)
    return (x * x + k1 * x) / (k3 * (x + k2))


def compute_max_saturation(a: float, b: float) -> float:
    # polynomial first guess per gamut edge, then one Halley step
    if -1.88170328 * a - 0.80936493 * b > 1:
        k0, k1, k2, k3, k4 = 1.19086277, 1.76576728, 0.59662641, 0.75515197, 0.56771245
        wl, wm, ws = 4.0767416621, -3.3077115913, 0.2309699292
    elif 1.81444104 * a - 1.19445276 * b > 1:
        k0, k1, k2, k3, k4 = 0.73956515, -0.45954404, 0.08285427, 0.12541070, 0.14503204
        wl, wm, ws = -1.2684380046, 2.6097574011, -0.3413193965
    else:
        k0, k1, k2, k3, k4 = 1.35733652, -0.00915799, -1.15130210, -0.50559606, 0.00692167
        wl, wm, ws = -0.0041960863, -0.7034186147, 1.7076147010

    S = k0 + k1 * a + k2 * b + k3 * a * a + k4 * a * b

    k_l = 0.3963377774 * a + 0.2158037573 * b
    k_m = -0.1055613458 * a - 0.0638541728 * b
    k_s = -0.0894841775 * a - 1.2914855480 * b

    l_, m_, s_ = 1 + S * k_l, 1 + S * k_m, 1 + S * k_s
    l, m, s = l_ ** 3, m_ ** 3, s_ ** 3
    l_dS, m_dS, s_dS = 3 * k_l * l_ * l_, 3 * k_m * m_ * m_, 3 * k_s * s_ * s_
    l_dS2, m_dS2, s_dS2 = 6 * k_l * k_l * l_, 6 * k_m * k_m * m_, 6 * k_s * k_s * s_

    f = wl * l + wm * m + ws * s
    f1 = wl * l_dS + wm * m_dS + ws * s_dS
    f2 = wl * l_dS2 + wm * m_dS2 + ws * s_dS2
    return S - f * f1 / (f1 * f1 - 0.5 * f * f2)


def find_cusp(a: float, b: float) -> Tuple[float, float]:
    S_cusp = compute_max_saturation(a, b)
    rgb = oklab_to_linear_srgb(1, S_cusp * a, S_cusp * b)
    L_cusp = _cbrt(1.0 / max(rgb))
    return L_cusp, L_cusp * S_cusp


def find_gamut_intersection(a: float, b: float, L1: float, C1: float, L0: float,
                            cusp: Tuple[float, float]) -> float:
    L_cusp, C_cusp = cusp
    if ((L1 - L0) * C_cusp - (L_cusp - L0) * C1) <= 0:
        # lower half, triangle is exact
        return C_cusp * L0 / (C1 * L_cusp + C_cusp * (L0 - L1))

    t = C_cusp * (L0 - 1) / (C1 * (L_cusp - 1) + C_cusp * (L0 - L1))

    dL, dC = L1 - L0, C1
    k_l = 0.3963377774 * a + 0.2158037573 * b
    k_m = -0.1055613458 * a - 0.0638541728 * b
    k_s = -0.0894841775 * a - 1.2914855480 * b
    l_dt, m_dt, s_dt = dL + dC * k_l, dL + dC * k_m, dL + dC * k_s

    L = L0 * (1 - t) + t * L1
    C = t * C1
    l_, m_, s_ = L + C * k_l, L + C * k_m, L + C * k_s
    l, m, s = l_ ** 3, m_ ** 3, s_ ** 3
    ldt, mdt, sdt = 3 * l_dt * l_ * l_, 3 * m_dt * m_ * m_, 3 * s_dt * s_ * s_
    ldt2, mdt2, sdt2 = 6 * l_dt * l_dt * l_, 6 * m_dt * m_dt * m_, 6 * s_dt * s_dt * s_

    def step(wl, wm, ws):
        v = wl * l + wm * m + ws * s - 1
        v1 = wl * ldt + wm * mdt + ws * sdt
        v2 = wl * ldt2 + wm * mdt2 + ws * sdt2
        u = v1 / (v1 * v1 - 0.5 * v * v2)
        return -v * u if u >= 0 else FLT_MAX

    t_r = step(4.0767416621, -3.3077115913, 0.2309699292)
    t_g = step(-1.2684380046, 2.6097574011, -0.3413193965)
    t_b = step(-0.0041960863, -0.7034186147, 1.7076147010)
    return t + min(t_r, t_g, t_b)


def get_st_mid(a: float, b: float) -> Tuple[float, float]:
    S = 0.11516993 + 1 / (
        7.44778970 + 4.15901240 * b
        + a * (-2.19557347 + 1.75198401 * b
               + a * (-2.13704948 - 10.02301043 * b
                      + a * (-4.24894561 + 5.38770819 * b + 4.69891013 * a))))
    T = 0.11239642 + 1 / (
        1.61320320 - 0.68124379 * b
        + a * (0.40370612 + 0.90148123 * b
               + a * (-0.27087943 + 0.61223990 * b
                      + a * (0.00299215 - 0.45399568 * b - 0.14661872 * a))))
    return S, T


def get_cs(L: float, a: float, b: float) -> Tuple[float, float, float]:
    cusp = find_cusp(a, b)
    C_max = find_gamut_intersection(a, b, L, 1, L, cusp)
    L_cusp, C_cusp = cusp
    S_max, T_max = C_cusp / L_cusp, C_cusp / (1 - L_cusp)
    k = C_max / min(L * S_max, (1 - L) * T_max)

    S_mid, T_mid = get_st_mid(a, b)
    C_a, C_b = L * S_mid, (1 - L) * T_mid
    C_mid = 0.9 * k * math.sqrt(math.sqrt(1 / (1 / C_a ** 4 + 1 / C_b ** 4)))

    C_a, C_b = L * 0.4, (1 - L) * 0.8
    C_0 = math.sqrt(1 / (1 / C_a ** 2 + 1 / C_b ** 2))
    return C_0, C_mid, C_max


def okhsl_to_srgb(h: float, s: float, l: float) -> Tuple[float, float, float]:
    if l >= 1:
        return 1.0, 1.0, 1.0
    if l <= 0:
        return 0.0, 0.0, 0.0

    a_ = math.cos(2 * math.pi * h)
    b_ = math.sin(2 * math.pi * h)
    L = toe_inv(l)

    if s <= 0:
        C = 0.0
    else:
        C_0, C_mid, C_max = get_cs(L, a_, b_)
        mid, mid_inv = 0.8, 1.25
        if s < mid:
            t = mid_inv * s
            k_1 = mid * C_0
            k_2 = 1 - k_1 / C_mid
            C = t * k_1 / (1 - k_2 * t)
        else:
            t = (s - mid) / (1 - mid)
            k_0 = C_mid
            k_1 = (1 - mid) * C_mid * C_mid * mid_inv * mid_inv / C_0
            k_2 = 1 - k_1 / (C_max - C_mid)
            C = k_0 + t * k_1 / (1 - k_2 * t)

    r, g, b = oklab_to_linear_srgb(L, C * a_, C * b_)
    return tuple(min(1.0, max(0.0, srgb_transfer(v))) for v in (r, g, b))

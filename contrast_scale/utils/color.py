"""Color space conversions and WCAG contrast math.

Provides:
    - sRGB (8-bit) → linear RGB → CIE XYZ (D65) → relative luminance
    - XYZ → Oklab (LMS cone response, cube-root compression)
    - Oklab → OKHSL (hue, saturation, toe-corrected lightness)
    - Luminance → OKHSL lightness for achromatic D65 colors
    - WCAG 2.x contrast ratio and its inversion
    - Lightness rounding onto the 0.01 grid used as bucket keys

Used by:
    - Catalog generation: per-color XYZ / OKHSL columns
    - Lightness table: step → contrast → luminance → OKHSL lightness
    - Separation search: pair contrast from stored luminance

All conversions operate on numpy arrays (or python floats where noted).
Channel arrays carry the channel on the last axis, shape (..., 3).

Invariants:
    - Relative luminance Y in [0, 1]
    - OKHSL lightness in [0, 1], hue in degrees [0, 360), saturation in [0, 1]
    - Contrast ratios in [1, 21]
"""

import math
from typing import Tuple, Union

import numpy as np

from ..errors import DomainValidationError

ArrayLike = Union[float, np.ndarray]

# WCAG 2.x contrast constants
WCAG_LUMINANCE_OFFSET = 0.05
WCAG_MAX_CONTRAST = 21.0
WCAG_THRESHOLD = 0.18

# D65 white point chromaticity (x, y)
D65_X = 0.3127
D65_Y = 0.329
D65_X_FACTOR = D65_X / D65_Y
D65_Z_FACTOR = (1.0 - D65_X - D65_Y) / D65_Y

# Linear sRGB → XYZ (D65)
SRGB_TO_XYZ = np.array([
    [0.41239079926595934, 0.357584339383878, 0.1804807884018343],
    [0.21263900587151027, 0.715168678767756, 0.07219231536073371],
    [0.01933081871559182, 0.11919477979462598, 0.9505321522496607],
])

# XYZ → LMS (Oklab M1)
XYZ_TO_LMS = np.array([
    [+0.8189330101, +0.3618667424, -0.1288597137],
    [+0.0329845436, +0.9293118715, +0.0361456387],
    [+0.0482003018, +0.2643662691, +0.6338517070],
])

# LMS' → Oklab (Oklab M2)
LMS_TO_OKLAB = np.array([
    [+0.2104542553, +0.7936177850, -0.0040720468],
    [+1.9779984951, -2.4285922050, +0.4505937099],
    [+0.0259040371, +0.7827717662, -0.8086757660],
])

# Oklab → LMS' (inverse of M2) and LMS → linear sRGB, used for gamut search
OKLAB_TO_LMS = np.array([
    [1.0, +0.3963377774, +0.2158037573],
    [1.0, -0.1055613458, -0.0638541728],
    [1.0, -0.0894841775, -1.2914855480],
])
LMS_TO_LINEAR_SRGB = np.array([
    [+4.0767416621, -3.3077115913, +0.2309699292],
    [-1.2684380046, +2.6097574011, -0.3413193965],
    [-0.0041960863, -0.7034186147, +1.7076147010],
])

# OKHSL toe constants
TOE_K1 = 0.206
TOE_K2 = 0.03
TOE_K3 = (1.0 + TOE_K1) / (1.0 + TOE_K2)

# Lightness rounding (bucket keys)
LIGHTNESS_PRECISION = 100
LIGHTNESS_CAP_THRESHOLD = 0.995
NEAR_WHITE_LIGHTNESS = 0.99
PURE_WHITE_LIGHTNESS = 1.0
# The matrix chain maps D65 white to 1 - ~1.4e-6, not exactly 1
WHITE_TOLERANCE = 1e-5


# ============================================================================
# sRGB / XYZ
# ============================================================================

def srgb_to_linear(rgb: np.ndarray) -> np.ndarray:
    """Convert gamma-encoded sRGB [0,1] to linear RGB [0,1].

    Parameters
    ----------
    rgb : np.ndarray
        sRGB values, any shape, range [0, 1]

    Returns
    -------
    np.ndarray
        Linear RGB values, same shape

    Notes
    -----
    Exact sRGB transfer function:
        - Linear region: x / 12.92 for x <= 0.04045
        - Power region: ((x + 0.055) / 1.055)^2.4
    """
    rgb = np.clip(np.asarray(rgb, dtype=np.float64), 0.0, 1.0)
    return np.where(rgb <= 0.04045, rgb / 12.92, np.power((rgb + 0.055) / 1.055, 2.4))


def srgb8_to_xyz(rgb8: np.ndarray) -> np.ndarray:
    """Convert 8-bit sRGB triples to CIE XYZ (D65).

    Parameters
    ----------
    rgb8 : np.ndarray
        Integer channels in [0, 255], shape (..., 3)

    Returns
    -------
    np.ndarray
        XYZ coordinates, shape (..., 3); Y is the relative luminance
    """
    linear = srgb_to_linear(np.asarray(rgb8, dtype=np.float64) / 255.0)
    return linear @ SRGB_TO_XYZ.T


# ============================================================================
# Oklab / OKHSL
# ============================================================================

def xyz_to_oklab(xyz: np.ndarray) -> np.ndarray:
    """Convert XYZ (D65) to Oklab.

    Parameters
    ----------
    xyz : np.ndarray
        XYZ coordinates, shape (..., 3)

    Returns
    -------
    np.ndarray
        Oklab (L, a, b), shape (..., 3)

    Notes
    -----
    Negative cone responses are clamped to zero before the cube root.
    """
    lms = np.maximum(np.asarray(xyz, dtype=np.float64) @ XYZ_TO_LMS.T, 0.0)
    return np.cbrt(lms) @ LMS_TO_OKLAB.T


def luminance_to_oklab_lightness(y: ArrayLike) -> ArrayLike:
    """Oklab lightness of an achromatic (D65) color with luminance ``y``.

    Parameters
    ----------
    y : float or np.ndarray
        Relative luminance in [0, 1]

    Returns
    -------
    float or np.ndarray
        Oklab L, same shape as ``y``
    """
    y_arr = np.asarray(y, dtype=np.float64)
    xyz = np.stack([D65_X_FACTOR * y_arr, y_arr, D65_Z_FACTOR * y_arr], axis=-1)
    lightness = xyz_to_oklab(xyz)[..., 0]
    if lightness.ndim == 0:
        return float(lightness)
    return lightness


def toe(L: ArrayLike) -> ArrayLike:
    """OKHSL toe: remap Oklab lightness to perceptual lightness.

    toe(L) = 0.5 * (k3*L - k1 + sqrt((k3*L - k1)^2 + 4*k2*k3*L))

    Fixed points: toe(0) = 0, toe(1) = 1.
    """
    if isinstance(L, np.ndarray):
        k3l_k1 = TOE_K3 * L - TOE_K1
        return 0.5 * (k3l_k1 + np.sqrt(k3l_k1 * k3l_k1 + 4.0 * TOE_K2 * TOE_K3 * L))
    k3l_k1 = TOE_K3 * L - TOE_K1
    return 0.5 * (k3l_k1 + math.sqrt(k3l_k1 * k3l_k1 + 4.0 * TOE_K2 * TOE_K3 * L))


def luminance_to_okhsl_lightness(y: ArrayLike) -> ArrayLike:
    """OKHSL lightness of an achromatic (D65) color with luminance ``y``."""
    return toe(luminance_to_oklab_lightness(y))


def _oklab_to_linear_srgb(L: np.ndarray, a: np.ndarray, b: np.ndarray) -> np.ndarray:
    lab = np.stack([L, a, b], axis=-1)
    lms = (lab @ OKLAB_TO_LMS.T) ** 3
    return lms @ LMS_TO_LINEAR_SRGB.T


def _compute_max_saturation(a: np.ndarray, b: np.ndarray) -> np.ndarray:
    """Max saturation S = C/L in the sRGB gamut along normalized hue (a, b).

    Polynomial first guess per gamut face (red, green, blue), then one
    Halley step on the component that crosses zero.
    """
    #            k0           k1           k2           k3           k4           wl             wm             ws
    coeffs = np.array([
        [+1.19086277, +1.76576728, +0.59662641, +0.75515197, +0.56771245, +4.0767416621, -3.3077115913, +0.2309699292],
        [+0.73956515, -0.45954404, +0.08285427, +0.12541070, +0.14503204, -1.2684380046, +2.6097574011, -0.3413193965],
        [+1.35733652, -0.00915799, -1.15130210, -0.50559606, +0.00692167, -0.0041960863, -0.7034186147, +1.7076147010],
    ])
    red = -1.88170328 * a - 0.80936493 * b > 1
    green = 1.81444104 * a - 1.19445276 * b > 1
    face = np.where(red, 0, np.where(green, 1, 2))
    k0, k1, k2, k3, k4, wl, wm, ws = np.moveaxis(coeffs[face], -1, 0)

    S = k0 + k1 * a + k2 * b + k3 * a * a + k4 * a * b

    k_l = OKLAB_TO_LMS[0, 1] * a + OKLAB_TO_LMS[0, 2] * b
    k_m = OKLAB_TO_LMS[1, 1] * a + OKLAB_TO_LMS[1, 2] * b
    k_s = OKLAB_TO_LMS[2, 1] * a + OKLAB_TO_LMS[2, 2] * b

    l_ = 1.0 + S * k_l
    m_ = 1.0 + S * k_m
    s_ = 1.0 + S * k_s

    l, m, s = l_ ** 3, m_ ** 3, s_ ** 3
    l_dS, m_dS, s_dS = 3.0 * k_l * l_ ** 2, 3.0 * k_m * m_ ** 2, 3.0 * k_s * s_ ** 2
    l_dS2, m_dS2, s_dS2 = 6.0 * k_l ** 2 * l_, 6.0 * k_m ** 2 * m_, 6.0 * k_s ** 2 * s_

    f = wl * l + wm * m + ws * s
    f1 = wl * l_dS + wm * m_dS + ws * s_dS
    f2 = wl * l_dS2 + wm * m_dS2 + ws * s_dS2

    return S - f * f1 / (f1 * f1 - 0.5 * f * f2)


def _find_cusp(a: np.ndarray, b: np.ndarray) -> Tuple[np.ndarray, np.ndarray]:
    """Lightness and chroma of the gamut cusp for normalized hue (a, b)."""
    S_cusp = _compute_max_saturation(a, b)
    rgb_at_max = _oklab_to_linear_srgb(np.ones_like(a), S_cusp * a, S_cusp * b)
    L_cusp = np.cbrt(1.0 / np.max(rgb_at_max, axis=-1))
    return L_cusp, L_cusp * S_cusp


def _find_gamut_intersection(
    a: np.ndarray,
    b: np.ndarray,
    L: np.ndarray,
    L_cusp: np.ndarray,
    C_cusp: np.ndarray,
) -> np.ndarray:
    """Chroma where the constant-lightness line at ``L`` leaves the gamut.

    Specialization of the general line/gamut intersection with L0 = L1 = L
    and C1 = 1, so ``t`` is directly the chroma.
    """
    lower = L <= L_cusp

    # Lower half: intersection with the black-cusp edge is exact
    t_lower = C_cusp * L / L_cusp

    # Upper half: white-cusp edge, refined by one Halley step per channel
    t = C_cusp * (L - 1.0) / (L_cusp - 1.0)

    k_l = OKLAB_TO_LMS[0, 1] * a + OKLAB_TO_LMS[0, 2] * b
    k_m = OKLAB_TO_LMS[1, 1] * a + OKLAB_TO_LMS[1, 2] * b
    k_s = OKLAB_TO_LMS[2, 1] * a + OKLAB_TO_LMS[2, 2] * b

    l_ = L + t * k_l
    m_ = L + t * k_m
    s_ = L + t * k_s
    l, m, s = l_ ** 3, m_ ** 3, s_ ** 3
    ldt, mdt, sdt = 3 * k_l * l_ ** 2, 3 * k_m * m_ ** 2, 3 * k_s * s_ ** 2
    ldt2, mdt2, sdt2 = 6 * k_l ** 2 * l_, 6 * k_m ** 2 * m_, 6 * k_s ** 2 * s_

    steps = []
    for wl, wm, ws in LMS_TO_LINEAR_SRGB:
        f = wl * l + wm * m + ws * s - 1.0
        f1 = wl * ldt + wm * mdt + ws * sdt
        f2 = wl * ldt2 + wm * mdt2 + ws * sdt2
        u = f1 / (f1 * f1 - 0.5 * f * f2)
        steps.append(np.where(u >= 0.0, -f * u, np.inf))

    t_upper = t + np.minimum(np.minimum(steps[0], steps[1]), steps[2])
    return np.where(lower, t_lower, t_upper)


def _get_ST_mid(a: np.ndarray, b: np.ndarray) -> Tuple[np.ndarray, np.ndarray]:
    """Smooth approximation of the cusp (S, T) used for the mid chroma."""
    S = 0.11516993 + 1.0 / (
        7.44778970 + 4.15901240 * b
        + a * (-2.19557347 + 1.75198401 * b
               + a * (-2.13704948 - 10.02301043 * b
                      + a * (-4.24894561 + 5.38770819 * b + 4.69891013 * a)))
    )
    T = 0.11239642 + 1.0 / (
        1.61320320 - 0.68124379 * b
        + a * (0.40370612 + 0.90148123 * b
               + a * (-0.27087943 + 0.61223990 * b
                      + a * (0.00299215 - 0.45399568 * b - 0.14661872 * a)))
    )
    return S, T


def oklab_to_okhsl(lab: np.ndarray) -> np.ndarray:
    """Convert Oklab to OKHSL.

    Parameters
    ----------
    lab : np.ndarray
        Oklab (L, a, b), shape (..., 3), colors inside the sRGB gamut

    Returns
    -------
    np.ndarray
        OKHSL (h, s, l), shape (..., 3); h in degrees [0, 360), s and l in [0, 1]

    Notes
    -----
    Achromatic colors (chroma ~ 0) and the black/white endpoints have no
    defined hue; they are reported with h = 0 and s = 0.
    """
    lab = np.asarray(lab, dtype=np.float64)
    L, a, b = lab[..., 0], lab[..., 1], lab[..., 2]
    C = np.sqrt(a * a + b * b)

    chromatic = (C > 1e-7) & (L > 1e-7) & (L < 1.0 - 1e-7)
    # Dummy hue/lightness for undefined entries keeps the math finite
    C_safe = np.where(chromatic, C, 1.0)
    a_ = np.where(chromatic, a / C_safe, 1.0)
    b_ = np.where(chromatic, b / C_safe, 0.0)
    L_safe = np.where(chromatic, L, 0.5)

    with np.errstate(divide="ignore", invalid="ignore"):
        L_cusp, C_cusp = _find_cusp(a_, b_)
        C_max = _find_gamut_intersection(a_, b_, L_safe, L_cusp, C_cusp)

        ST_max_S = C_cusp / L_cusp
        ST_max_T = C_cusp / (1.0 - L_cusp)
        k = C_max / np.minimum(L_safe * ST_max_S, (1.0 - L_safe) * ST_max_T)

        ST_mid_S, ST_mid_T = _get_ST_mid(a_, b_)
        C_a = L_safe * ST_mid_S
        C_b = (1.0 - L_safe) * ST_mid_T
        C_mid = 0.9 * k * np.sqrt(np.sqrt(1.0 / (1.0 / C_a ** 4 + 1.0 / C_b ** 4)))

        C_a = L_safe * 0.4
        C_b = (1.0 - L_safe) * 0.8
        C_0 = np.sqrt(1.0 / (1.0 / C_a ** 2 + 1.0 / C_b ** 2))

        mid = 0.8
        mid_inv = 1.25
        C_in = np.where(chromatic, C, 0.0)

        # Below the mid chroma
        k_1 = mid * C_0
        k_2 = 1.0 - k_1 / C_mid
        s_low = mid * C_in / (k_1 + k_2 * C_in)

        # Above the mid chroma
        k_1 = (1.0 - mid) * C_mid * C_mid * mid_inv * mid_inv / C_0
        k_2 = 1.0 - k_1 / (C_max - C_mid)
        t = (C_in - C_mid) / (k_1 + k_2 * (C_in - C_mid))
        s_high = mid + (1.0 - mid) * t

    s = np.where(C_in < C_mid, s_low, s_high)
    s = np.where(chromatic, np.clip(s, 0.0, 1.0), 0.0)

    h = 0.5 + 0.5 * np.arctan2(-b, -a) / np.pi
    h = np.where(chromatic, np.mod(h * 360.0, 360.0), 0.0)

    l = toe(np.clip(L, 0.0, None))
    return np.stack([h, s, l], axis=-1)


# ============================================================================
# WCAG CONTRAST
# ============================================================================

def contrast_ratio(y1: float, y2: float) -> float:
    """WCAG contrast ratio between two relative luminances.

    Symmetric in its arguments; 1.0 for equal luminances, 21.0 for white
    on black.
    """
    lighter = y1 if y1 >= y2 else y2
    darker = y2 if y1 >= y2 else y1
    return (lighter + WCAG_LUMINANCE_OFFSET) / (darker + WCAG_LUMINANCE_OFFSET)


def reverse_wcag_contrast(
    contrast: float = 4.5,
    y: float = 1.0,
    threshold: float = WCAG_THRESHOLD,
) -> float:
    """Luminance that has exactly ``contrast`` against reference luminance ``y``.

    Parameters
    ----------
    contrast : float
        Target contrast ratio in [1, 21]
    y : float
        Reference luminance in [0, 1]
    threshold : float
        Reference luminances above this are treated as the lighter color
        (solve for a darker one); at or below, solve for a lighter one

    Returns
    -------
    float
        Luminance clamped to [0, 1]

    Raises
    ------
    DomainValidationError
        If ``y`` or ``contrast`` is out of range
    """
    if not 0.0 <= y <= 1.0:
        raise DomainValidationError(
            f"Invalid luminance value: {y} (must be between 0 and 1)"
        )
    if not 1.0 <= contrast <= WCAG_MAX_CONTRAST:
        raise DomainValidationError(
            f"Invalid contrast ratio: {contrast} (must be between 1 and {WCAG_MAX_CONTRAST:g})"
        )

    if y > threshold:
        output = (y + WCAG_LUMINANCE_OFFSET) / contrast - WCAG_LUMINANCE_OFFSET
    else:
        output = contrast * (y + WCAG_LUMINANCE_OFFSET) - WCAG_LUMINANCE_OFFSET
    return max(0.0, min(1.0, output))


def scale_to_contrast(step: int, scale_max: int = 1000, max_contrast: float = WCAG_MAX_CONTRAST) -> float:
    """Map a scale step to a contrast ratio by exponential interpolation.

    step 0 → 1.0, step ``scale_max`` → ``max_contrast``; equal step
    differences give equal contrast ratios. Clamped to [1, max_contrast]
    against exp/log round-off at the end points.
    """
    contrast = math.exp(math.log(max_contrast) * step / scale_max)
    return min(max(contrast, 1.0), max_contrast)


# ============================================================================
# LIGHTNESS ROUNDING
# ============================================================================

def round_lightness(
    ok_l: ArrayLike,
    precision: int = LIGHTNESS_PRECISION,
    cap_threshold: float = LIGHTNESS_CAP_THRESHOLD,
    near_white: float = NEAR_WHITE_LIGHTNESS,
) -> ArrayLike:
    """Round OKHSL lightness onto the bucket grid.

    Parameters
    ----------
    ok_l : float or np.ndarray
        Raw OKHSL lightness
    precision : int
        Grid resolution, default 100 (two decimals)
    cap_threshold : float
        Values in [cap_threshold, 1) round to ``near_white`` instead of 1.0
    near_white : float
        Bucket for almost-white colors, default 0.99

    Returns
    -------
    float or np.ndarray
        Rounded lightness (half-up), same shape as ``ok_l``

    Notes
    -----
    Only pure white lands in the 1.0 bucket. Values within WHITE_TOLERANCE
    of 1.0 count as pure white.
    """
    raw = np.asarray(ok_l, dtype=np.float64)
    white = raw >= PURE_WHITE_LIGHTNESS - WHITE_TOLERANCE
    rounded = np.floor(raw * precision + 0.5) / precision
    rounded = np.where((raw >= cap_threshold) & ~white, near_white, rounded)
    rounded = np.where(white, PURE_WHITE_LIGHTNESS, rounded)
    if rounded.ndim == 0:
        return float(rounded)
    return rounded

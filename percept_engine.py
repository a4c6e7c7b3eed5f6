# -*- coding: utf-8 -*-
"""
Percept: Perceptual color appearance for 8-bit RGB
Copyright (c) 2026 opticsWolf

SPDX-License-Identifier: LGPL-3.0-or-later

Color Appearance Engine
=======================
Immutable value types for every stage of the CIECAM02 pipeline and the
conversions between them:

    RGB8 -> LinearRGB -> XYZ -> LMS -> (adaptation, HPE) -> JCh -> Jab[space]

Every type can be built from its predecessor (``XYZ.from_linear``,
``JCh.from_lms``, ...) or straight from raw RGB (``from_rgb``), which
composes the whole chain.  Raw RGB is an :class:`RGB8` or any 3-sequence of
ints in [0, 255].

Linear steps and chromatic adaptation run on the backend selected by
``percept_dispatch``; the appearance correlates are plain scalar math shared
with the numba batch kernels in ``percept_batch``.

Viewing conditions are fixed (``percept_constants.VC``: D65, average
surround, L_A = 64 / pi / 5, Y_b = 20).

References:
    - CIE 159:2004 "A colour appearance model for colour management systems:
      CIECAM02"
    - Luo, M. R., Cui, G., & Li, C. (2006). "Uniform colour spaces based on
      CIECAM02 colour appearance model".
"""

import math
import operator
from dataclasses import dataclass
from typing import Final, Sequence, Tuple, Union

from numba.extending import register_jitable

import percept_dispatch as dispatch
from percept_constants import VC, JabSpace
from percept_cones import Triple
from percept_metrics import squared_difference
from percept_srgb import linearize

__all__ = [
    "RGBLike",
    "RGB8",
    "LinearRGB",
    "XYZ",
    "LMS",
    "HPE",
    "JCh",
    "Jab",
    "hue_quadrature",
    "appearance_correlates",
    "jab_from_correlates",
]

DEG2RAD: Final[float] = math.pi / 180.0
RAD2DEG: Final[float] = 180.0 / math.pi

# Flattened viewing conditions.  Module-level floats so numba can freeze
# them into compiled kernels.
_AW: Final[float] = VC.achromatic_response_to_white
_NBB: Final[float] = VC.nbb
_NCB: Final[float] = VC.ncb
_NC: Final[float] = VC.nc
_C: Final[float] = VC.c
_CZ: Final[float] = VC.c * VC.z
_FL_4: Final[float] = VC.fl ** 0.25
_CHROMA_N: Final[float] = (1.64 - 0.29 ** VC.n) ** 0.73


# =============================================================================
# 1. APPEARANCE MATH
# =============================================================================

@register_jitable
def hue_quadrature(h: float) -> float:
    """
    Hue quadrature H (0..400) from hue angle h (degrees, [0, 360)).

    Piecewise interpolation between the unique hues red (20.14), yellow (90),
    green (164.25) and blue (237.53) with eccentricities 0.8, 0.7, 1.0, 1.2.
    A boundary angle belongs to the segment that starts at it.  Angles below
    20.14 continue the blue-red segment (offset by 360), so H is continuous
    across 0/360 and wraps from 400 to 0 at 20.14.
    """
    if h < 20.14:
        temp = ((h + 122.47) / 1.2) + ((20.14 - h) / 0.8)
        return 300.0 + (100.0 * ((h + 122.47) / 1.2)) / temp
    elif h < 90.0:
        temp = ((h - 20.14) / 0.8) + ((90.0 - h) / 0.7)
        return (100.0 * ((h - 20.14) / 0.8)) / temp
    elif h < 164.25:
        temp = ((h - 90.0) / 0.7) + ((164.25 - h) / 1.0)
        return 100.0 + ((100.0 * ((h - 90.0) / 0.7)) / temp)
    elif h < 237.53:
        temp = ((h - 164.25) / 1.0) + ((237.53 - h) / 1.2)
        return 200.0 + ((100.0 * ((h - 164.25) / 1.0)) / temp)
    temp = ((h - 237.53) / 1.2) + ((360.0 - h + 20.14) / 0.8)
    return 300.0 + ((100.0 * ((h - 237.53) / 1.2)) / temp)


@register_jitable
def appearance_correlates(
    lpa: float, mpa: float, spa: float
) -> Tuple[float, float, float, float, float, float, float]:
    """
    CIECAM02 correlates from post-adaptation HPE responses.

    Returns:
        (J, C, H, h, Q, M, s)

    Degenerate inputs are defined rather than raised: an achromatic stimulus
    (a = b = 0) has h = 0, a non-positive achromatic response gives J = 0,
    and zero brightness gives s = 0.
    """
    ca = lpa - ((12.0 * mpa) / 11.0) + (spa / 11.0)
    cb = (1.0 / 9.0) * (lpa + mpa - 2.0 * spa)

    if ca == 0.0 and cb == 0.0:
        h = 0.0
    else:
        h = RAD2DEG * math.atan2(cb, ca)
        if h < 0.0:
            h += 360.0
        if h >= 360.0:
            h -= 360.0

    H = hue_quadrature(h)

    a_resp = (2.0 * lpa + mpa + 0.05 * spa - 0.305) * _NBB
    if a_resp > 0.0:
        J = 100.0 * (a_resp / _AW) ** _CZ
    else:
        J = 0.0

    et = 0.25 * (math.cos(h * DEG2RAD + 2.0) + 3.8)
    t = ((50000.0 / 13.0) * _NC * _NCB * et * math.sqrt(ca * ca + cb * cb)
         / (lpa + mpa + (21.0 / 20.0) * spa))

    root_j = math.sqrt(J / 100.0)
    C = t ** 0.9 * root_j * _CHROMA_N
    Q = (4.0 / _C) * root_j * (_AW + 4.0) * _FL_4
    M = C * _FL_4
    if Q > 0.0:
        s = 100.0 * math.sqrt(M / Q)
    else:
        s = 0.0
    return J, C, H, h, Q, M, s


@register_jitable
def jab_from_correlates(
    J: float, M: float, h: float, k_l: float, c1: float, c2: float
) -> Triple:
    """
    CAM02 uniform space coordinates from lightness, colorfulness and hue.

        J' = (1 + 100 c1) J / (1 + c1 J) / K_L
        M' = ln(1 + c2 M) / c2
        a', b' = M' cos(h), M' sin(h)
    """
    j_prime = ((1.0 + 100.0 * c1) * J) / (1.0 + c1 * J) / k_l
    m_prime = (1.0 / c2) * math.log(1.0 + c2 * M)
    h_rad = DEG2RAD * h
    return j_prime, m_prime * math.cos(h_rad), m_prime * math.sin(h_rad)


# =============================================================================
# 2. VALUE TYPES
# =============================================================================

@dataclass(slots=True, frozen=True)
class RGB8:
    """8-bit sRGB color.  Channels are validated integers in [0, 255]."""
    r: int
    g: int
    b: int

    def __post_init__(self) -> None:
        for name in ("r", "g", "b"):
            value = getattr(self, name)
            try:
                channel = operator.index(value)
            except TypeError:
                raise TypeError(
                    f"RGB8.{name} must be an integer, got {type(value).__name__}"
                ) from None
            if not 0 <= channel <= 255:
                raise ValueError(f"RGB8.{name} must be in [0, 255], got {channel}")
            object.__setattr__(self, name, channel)

    @classmethod
    def coerce(cls, rgb: "RGBLike") -> "RGB8":
        """Returns *rgb* as an RGB8, accepting any 3-sequence of ints."""
        if isinstance(rgb, RGB8):
            return rgb
        if len(rgb) != 3:
            raise ValueError(f"Expected 3 channels, got {len(rgb)}")
        return cls(rgb[0], rgb[1], rgb[2])

    def as_tuple(self) -> Tuple[int, int, int]:
        return (self.r, self.g, self.b)


RGBLike = Union[RGB8, Sequence[int]]


@dataclass(slots=True, frozen=True)
class LinearRGB:
    """Linear-light RGB in [0, 1]."""
    r: float
    g: float
    b: float

    @classmethod
    def from_rgb(cls, rgb: RGBLike) -> "LinearRGB":
        c = RGB8.coerce(rgb)
        return cls(linearize(c.r), linearize(c.g), linearize(c.b))


@dataclass(slots=True, frozen=True)
class XYZ:
    """CIE 1931 XYZ, Y = 100 for the reference white."""
    x: float
    y: float
    z: float

    @classmethod
    def from_linear(cls, rgb: LinearRGB) -> "XYZ":
        return cls(*dispatch.linear_to_xyz(rgb.r, rgb.g, rgb.b))

    @classmethod
    def from_rgb(cls, rgb: RGBLike) -> "XYZ":
        return cls.from_linear(LinearRGB.from_rgb(rgb))


@dataclass(slots=True, frozen=True)
class LMS:
    """CAT02 cone responses."""
    l: float
    m: float
    s: float

    @classmethod
    def from_xyz(cls, xyz: XYZ) -> "LMS":
        return cls(*dispatch.xyz_to_lms(xyz.x, xyz.y, xyz.z))

    @classmethod
    def from_rgb(cls, rgb: RGBLike) -> "LMS":
        return cls.from_xyz(XYZ.from_rgb(rgb))


@dataclass(slots=True, frozen=True)
class HPE:
    """
    Hunt-Pointer-Estevez cone responses.

    ``from_lms`` is the bare matrix step; chromatic adaptation is applied
    only on the way to :class:`JCh`.
    """
    lh: float
    mh: float
    sh: float

    @classmethod
    def from_lms(cls, lms: LMS) -> "HPE":
        return cls(*dispatch.lms_to_hpe(lms.l, lms.m, lms.s))

    @classmethod
    def from_rgb(cls, rgb: RGBLike) -> "HPE":
        return cls.from_lms(LMS.from_rgb(rgb))


@dataclass(slots=True, frozen=True)
class JCh:
    """
    CIECAM02 appearance correlates.

    Attributes:
        J: Lightness.
        C: Chroma.
        H: Hue quadrature (0..400).
        h: Hue angle in degrees, [0, 360).
        Q: Brightness.
        M: Colorfulness.
        s: Saturation.
    """
    J: float
    C: float
    H: float
    h: float
    Q: float
    M: float
    s: float

    @classmethod
    def from_lms(cls, lms: LMS) -> "JCh":
        lc, mc, sc = dispatch.transform_cones(lms.l, lms.m, lms.s)
        lh, mh, sh = dispatch.lms_to_hpe(lc, mc, sc)
        lpa, mpa, spa = dispatch.nonlinear_adaptation(lh, mh, sh)
        return cls(*appearance_correlates(lpa, mpa, spa))

    @classmethod
    def from_rgb(cls, rgb: RGBLike) -> "JCh":
        return cls.from_lms(LMS.from_rgb(rgb))


@dataclass(slots=True, frozen=True)
class Jab:
    """
    CAM02 uniform color space coordinates, tagged with their space.

    Values from different spaces are not comparable; distance functions raise
    ``SpaceMismatchError`` when the tags differ.
    """
    J: float
    a: float
    b: float
    space: JabSpace = JabSpace.UCS

    @classmethod
    def from_jch(cls, jch: JCh, space: JabSpace = JabSpace.UCS) -> "Jab":
        J, a, b = jab_from_correlates(jch.J, jch.M, jch.h, space.k_l, space.c1, space.c2)
        return cls(J, a, b, space)

    @classmethod
    def from_rgb(cls, rgb: RGBLike, space: JabSpace = JabSpace.UCS) -> "Jab":
        return cls.from_jch(JCh.from_rgb(rgb), space)

    @classmethod
    def from_tuple(cls, values: Sequence[float], space: JabSpace = JabSpace.UCS) -> "Jab":
        J, a, b = values
        return cls(float(J), float(a), float(b), space)

    def as_tuple(self) -> Triple:
        return (self.J, self.a, self.b)

    def squared_difference(self, other: "Jab") -> float:
        """Squared CAM02 distance to *other*, which must share this space."""
        return squared_difference(self, other)


# =============================================================================
# Validation Block
# =============================================================================
if __name__ == "__main__":
    print(f"--- Percept CAM02 validation (backend: {dispatch.active_backend().value}) ---")
    for rgb in ((0, 0, 0), (255, 255, 255), (255, 0, 0), (0, 0, 255)):
        jch = JCh.from_rgb(rgb)
        jab = Jab.from_jch(jch)
        print(f"   {rgb!s:>16}: J={jch.J:7.2f} C={jch.C:7.2f} h={jch.h:7.2f} "
              f"| UCS J'={jab.J:7.2f} a'={jab.a:7.2f} b'={jab.b:7.2f}")

# -*- coding: utf-8 -*-
"""
Percept: Perceptual color appearance for 8-bit RGB
Copyright (c) 2026 opticsWolf

SPDX-License-Identifier: LGPL-3.0-or-later

Cone-Space Transforms (Scalar Reference)
========================================
Fixed matrices of the CIECAM02 front end and the scalar formulas that use
them:

    linear RGB -> XYZ -> CAT02 LMS -> (chromatic adaptation) -> HPE
    -> nonlinear cone adaptation

Everything in this module is a pure function of its arguments.  Viewing
conditions are passed in explicitly so that ``percept_constants`` can reuse
these formulas to derive the viewing conditions themselves.

The scalar formulas are the reference for ``percept_vector``: the linear maps
are written as ``(m0 * a) + (m1 * b) + (m2 * c)`` with left-to-right
association, which is exactly the order the 4-lane implementation uses, so
both paths produce identical IEEE 754 results.

References:
    - IEC 61966-2-1:1999 (sRGB primaries, 4-digit matrix)
    - CIE 159:2004 "A colour appearance model for colour management systems:
      CIECAM02"
    - Moroney et al. (2002). "The CIECAM02 color appearance model".
"""

import math
from typing import Final, Tuple, TypeAlias

import numpy as np
import numpy.typing as npt
from numba.extending import register_jitable

__all__ = [
    # --- Type Aliases ---
    "Triple",
    "Matrix3",

    # --- Constants ---
    "D65_XYZ",
    "REF_WHITE_D65",

    # --- Matrices ---
    "M_SRGB_TO_XYZ",
    "M_XYZ_TO_CAT02",
    "M_CAT02_TO_HPE",
    "M_SRGB_TO_XYZ_T",
    "M_XYZ_TO_CAT02_T",
    "M_CAT02_TO_HPE_T",

    # --- Functions ---
    "linear_to_xyz",
    "xyz_to_lms",
    "lms_to_hpe",
    "chromatic_adaptation",
    "nonlinear_adaptation_scalar",
    "inverse_nonlinear_adaptation_scalar",
]

# --- Type Aliases ---
Triple: TypeAlias = Tuple[float, float, float]
Matrix3: TypeAlias = Tuple[Triple, Triple, Triple]
ArrayFloat: TypeAlias = npt.NDArray[np.floating]

# --- Reference White ---
# D65, 2 degree observer, scaled to Y = 100.
D65_XYZ: Final[Triple] = (95.047, 100.0, 108.883)
REF_WHITE_D65: Final[ArrayFloat] = np.array(D65_XYZ, dtype=np.float64)

# --- Matrices ---
# Kept as row-major 3x3 arrays (column-vector convention).  The ``_T``
# variants are pre-transposed for row-vector batches: ``np.dot(rows, M_T)``.

# sRGB primaries, 4-digit form.  The reference appearance values are only
# reproduced with this exact rounding.
_M_SRGB_TO_XYZ_BASE = np.array([
    [0.4124, 0.3576, 0.1805],
    [0.2126, 0.7152, 0.0722],
    [0.0193, 0.1192, 0.9505],
], dtype=np.float64)

# CAT02 (CIECAM02 chromatic adaptation)
_M_XYZ_TO_CAT02_BASE = np.array([
    [ 0.7328, 0.4296, -0.1624],
    [-0.7036, 1.6975,  0.0061],
    [ 0.0030, 0.0136,  0.9834],
], dtype=np.float64)

# Hunt-Pointer-Estevez applied to CAT02 responses (M_HPE @ M_CAT02^-1),
# precomputed to seven digits.
_M_CAT02_TO_HPE_BASE = np.array([
    [ 0.7409792, 0.2180250, 0.0410058],
    [ 0.2853532, 0.6242014, 0.0904454],
    [-0.0096280, -0.0056980, 1.0153260],
], dtype=np.float64)

for _m in (_M_SRGB_TO_XYZ_BASE, _M_XYZ_TO_CAT02_BASE, _M_CAT02_TO_HPE_BASE):
    _m.setflags(write=False)
del _m


def _as_tuple(m: ArrayFloat) -> Matrix3:
    rows = m.tolist()
    return (tuple(rows[0]), tuple(rows[1]), tuple(rows[2]))  # type: ignore[return-value]


M_SRGB_TO_XYZ: Final[Matrix3] = _as_tuple(_M_SRGB_TO_XYZ_BASE)
M_XYZ_TO_CAT02: Final[Matrix3] = _as_tuple(_M_XYZ_TO_CAT02_BASE)
M_CAT02_TO_HPE: Final[Matrix3] = _as_tuple(_M_CAT02_TO_HPE_BASE)

M_SRGB_TO_XYZ_T: Final[ArrayFloat] = _M_SRGB_TO_XYZ_BASE.T.copy()
M_XYZ_TO_CAT02_T: Final[ArrayFloat] = _M_XYZ_TO_CAT02_BASE.T.copy()
M_CAT02_TO_HPE_T: Final[ArrayFloat] = _M_CAT02_TO_HPE_BASE.T.copy()

# --- Nonlinear adaptation constants ---
_NL_EXPONENT: Final[float] = 0.42
_NL_SCALE: Final[float] = 400.0
_NL_HALF_SAT: Final[float] = 27.13
_NL_OFFSET: Final[float] = 0.1


# =============================================================================
# 1. LINEAR MAPS
# =============================================================================

def _apply(m: Matrix3, a: float, b: float, c: float) -> Triple:
    return (
        (m[0][0] * a) + (m[0][1] * b) + (m[0][2] * c),
        (m[1][0] * a) + (m[1][1] * b) + (m[1][2] * c),
        (m[2][0] * a) + (m[2][1] * b) + (m[2][2] * c),
    )


def linear_to_xyz(r: float, g: float, b: float) -> Triple:
    """Linear RGB [0..1] -> CIE XYZ [0..100]."""
    x, y, z = _apply(M_SRGB_TO_XYZ, r, g, b)
    return (x * 100.0, y * 100.0, z * 100.0)


def xyz_to_lms(x: float, y: float, z: float) -> Triple:
    """CIE XYZ -> CAT02 LMS cone responses."""
    return _apply(M_XYZ_TO_CAT02, x, y, z)


def lms_to_hpe(l: float, m: float, s: float) -> Triple:
    """CAT02 LMS -> Hunt-Pointer-Estevez cone responses."""
    return _apply(M_CAT02_TO_HPE, l, m, s)


# =============================================================================
# 2. ADAPTATION
# =============================================================================

@register_jitable
def chromatic_adaptation(cone: float, white_cone: float, white_y: float, d: float) -> float:
    """
    Von Kries style CAT02 gain for one cone channel.

        c' = c * ((Y_w * D) / c_w + (1 - D))

    No guard is applied to ``white_cone``; it is a fixed non-zero constant for
    the D65 white point.
    """
    return cone * (((white_y * d) / white_cone) + (1.0 - d))


@register_jitable
def nonlinear_adaptation_scalar(cone: float, fl: float) -> float:
    """
    Post-adaptation cone compression.

        p  = (F_L * c / 100) ^ 0.42
        c' = 400 * p / (27.13 + p) + 0.1

    Negative responses (not reachable from 8-bit sRGB input) are mirrored,
    following the sign-symmetric CIECAM02 form, so the result stays real.
    """
    p = (abs(fl * cone) / 100.0) ** _NL_EXPONENT
    return math.copysign((_NL_SCALE * p) / (_NL_HALF_SAT + p), cone) + _NL_OFFSET


@register_jitable
def inverse_nonlinear_adaptation_scalar(adapted: float, fl: float) -> float:
    """
    Inverse of :func:`nonlinear_adaptation_scalar`.

        c = (100 / F_L) * (27.13 * |c' - 0.1| / (400 - |c' - 0.1|)) ^ (1 / 0.42)
    """
    v = adapted - _NL_OFFSET
    mag = abs(v)
    base = (_NL_HALF_SAT * mag) / (_NL_SCALE - mag)
    return math.copysign((100.0 / fl) * base ** (1.0 / _NL_EXPONENT), v)

# -*- coding: utf-8 -*-
"""
Percept: Perceptual color appearance for 8-bit RGB
Copyright (c) 2026 opticsWolf

SPDX-License-Identifier: LGPL-3.0-or-later

4-Lane Vector Transforms
========================
SIMD-shaped twins of the scalar transforms in ``percept_cones``.

Each color travels as one ``float64[4]`` lane vector ``[c0, c1, c2, 0]``;
the fourth lane is padding and is always 0 on output.  A 3x3 map is applied
as three broadcast multiplies and two adds over matrix *columns*:

    out = (a * col0 + b * col1) + c * col2

which performs, per lane, the same IEEE 754 operations in the same order as
the scalar reference.  Results for the linear maps and the chromatic
adaptation gain are therefore identical, bit for bit.  Nonlinear adaptation
uses NumPy's ``power`` and agrees with ``math`` to within rounding.

Whether this path is used is decided by ``percept_dispatch`` from
:func:`simd_available`.
"""

import functools
import logging
from typing import Dict, Final, TypeAlias

import numpy as np
import numpy.typing as npt

from percept_constants import D65_LMS, VC
from percept_cones import (
    M_CAT02_TO_HPE,
    M_SRGB_TO_XYZ,
    M_XYZ_TO_CAT02,
    Matrix3,
)

__all__ = [
    "Lanes",
    "LANE_FEATURES",
    "cpu_features",
    "simd_available",
    "to_lanes",
    "linear_to_xyz_lanes",
    "xyz_to_lms_lanes",
    "lms_to_hpe_lanes",
    "transform_cones_lanes",
    "nonlinear_adaptation_lanes",
    "inverse_nonlinear_adaptation_lanes",
]

logger = logging.getLogger(__name__)

Lanes: TypeAlias = npt.NDArray[np.float64]

# NumPy dispatch names of 128-bit float SIMD extensions, per architecture.
LANE_FEATURES: Final[tuple[str, ...]] = (
    "SSE", "SSE2",        # x86 / x86_64
    "NEON", "ASIMD",      # ARMv7 / AArch64
    "VSX",                # POWER
    "VX",                 # s390x
)


def _columns(m: Matrix3) -> tuple[Lanes, Lanes, Lanes]:
    cols = []
    for j in range(3):
        col = np.array([m[0][j], m[1][j], m[2][j], 0.0], dtype=np.float64)
        col.setflags(write=False)
        cols.append(col)
    return cols[0], cols[1], cols[2]


_XYZ_COLS: Final = _columns(M_SRGB_TO_XYZ)
_LMS_COLS: Final = _columns(M_XYZ_TO_CAT02)
_HPE_COLS: Final = _columns(M_CAT02_TO_HPE)

# Per-lane chromatic adaptation gain, (Y_w * D) / c_w + (1 - D).  The padding
# lane divides by 1.0 so it stays finite and multiplies a 0 input.
_WHITE_LANES: Final[Lanes] = np.array([D65_LMS[0], D65_LMS[1], D65_LMS[2], 1.0])
_CONE_GAIN: Final[Lanes] = (VC.white_xyz[1] * VC.d) / _WHITE_LANES + (1.0 - VC.d)
_CONE_GAIN.setflags(write=False)

_PAD_MASK: Final[Lanes] = np.array([1.0, 1.0, 1.0, 0.0])
_PAD_MASK.setflags(write=False)


# =============================================================================
# 1. CAPABILITY PROBE
# =============================================================================

def cpu_features() -> Dict[str, bool]:
    """
    Returns NumPy's runtime CPU feature map (``{"SSE2": True, ...}``).

    An empty dict is returned when this NumPy build does not expose one.
    """
    try:
        from numpy._core._multiarray_umath import __cpu_features__
    except ImportError:
        try:
            from numpy.core._multiarray_umath import __cpu_features__
        except ImportError:
            logger.debug("NumPy exposes no CPU feature map")
            return {}
    return dict(__cpu_features__)


@functools.lru_cache(maxsize=1)
def simd_available() -> bool:
    """
    True if the host supports 4-wide float SIMD.

    Probed once per process; the answer is cached.
    """
    features = cpu_features()
    found = [name for name in LANE_FEATURES if features.get(name, False)]
    logger.debug("4-lane SIMD features detected: %s", found or "none")
    return bool(found)


# =============================================================================
# 2. LANE TRANSFORMS
# =============================================================================

def to_lanes(a: float, b: float, c: float) -> Lanes:
    """Packs three channels into a padded lane vector."""
    return np.array([a, b, c, 0.0], dtype=np.float64)


def _apply(cols: tuple[Lanes, Lanes, Lanes], lanes: Lanes) -> Lanes:
    return (lanes[0] * cols[0] + lanes[1] * cols[1]) + lanes[2] * cols[2]


def linear_to_xyz_lanes(rgb: Lanes) -> Lanes:
    """Linear RGB lanes -> XYZ lanes (0..100)."""
    return _apply(_XYZ_COLS, rgb) * 100.0


def xyz_to_lms_lanes(xyz: Lanes) -> Lanes:
    """XYZ lanes -> CAT02 LMS lanes."""
    return _apply(_LMS_COLS, xyz)


def lms_to_hpe_lanes(lms: Lanes) -> Lanes:
    """CAT02 LMS lanes -> HPE lanes."""
    return _apply(_HPE_COLS, lms)


def transform_cones_lanes(lms: Lanes) -> Lanes:
    """Chromatic adaptation of all three cone lanes against D65."""
    return lms * _CONE_GAIN


def nonlinear_adaptation_lanes(cones: Lanes, fl: float = VC.fl) -> Lanes:
    """Nonlinear cone compression on all lanes; padding stays 0."""
    p = (np.abs(fl * cones) / 100.0) ** 0.42
    out = np.copysign((400.0 * p) / (27.13 + p), cones) + 0.1
    return out * _PAD_MASK


def inverse_nonlinear_adaptation_lanes(adapted: Lanes, fl: float = VC.fl) -> Lanes:
    """Inverse of :func:`nonlinear_adaptation_lanes`; padding stays 0."""
    v = (adapted - 0.1) * _PAD_MASK
    mag = np.abs(v)
    base = (27.13 * mag) / (400.0 - mag)
    return np.copysign((100.0 / fl) * base ** (1.0 / 0.42), v)

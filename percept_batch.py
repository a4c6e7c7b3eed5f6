# -*- coding: utf-8 -*-
"""
Percept: Perceptual color appearance for 8-bit RGB
Copyright (c) 2026 opticsWolf

SPDX-License-Identifier: LGPL-3.0-or-later

Batch Appearance Engine
=======================
Bulk conversion of 8-bit sRGB pixels, shape (N, 3) or (3,), into every
pipeline space.

Per-pixel work is independent, so the appearance stage runs as a
``numba`` ``prange`` loop.  The per-pixel formulas are the very functions the
scalar value types use (``percept_cones`` and ``percept_engine``, marked
``register_jitable``); batch and scalar results agree to within
floating-point rounding.  Linear steps use ``np.dot`` against pre-transposed
matrices.

Layout of JCh batches: columns ``JCH_COLUMNS = (J, C, H, h, Q, M, s)``.

Toggle strict IEEE 754 kernels at runtime via::

    import percept_batch as pb
    pb.set_strict_ieee(True)   # fastmath=False kernels
    pb.set_strict_ieee(False)  # back to fast mode (default)
"""

import functools
import logging
from typing import Any, Callable, Final, Tuple, TypeAlias

import numpy as np
import numpy.typing as npt
from numba import njit, prange

from percept_constants import D65_LMS, VC, JabSpace
from percept_cones import (
    M_CAT02_TO_HPE_T,
    M_SRGB_TO_XYZ_T,
    M_XYZ_TO_CAT02_T,
    chromatic_adaptation,
    nonlinear_adaptation_scalar,
)
from percept_engine import appearance_correlates, jab_from_correlates
from percept_srgb import SRGB_LOOKUP

__all__ = [
    "ArrayFloat",
    "ArrayRGB8",
    "JCH_COLUMNS",
    "set_strict_ieee",
    "handle_rgb",
    "AppearanceEngine",
]

logger = logging.getLogger(__name__)

ArrayFloat: TypeAlias = npt.NDArray[np.floating]
ArrayRGB8: TypeAlias = npt.NDArray[np.uint8]

JCH_COLUMNS: Final[Tuple[str, ...]] = ("J", "C", "H", "h", "Q", "M", "s")

# Frozen into the kernels at compile time.
_HPE_M: Final[ArrayFloat] = np.ascontiguousarray(M_CAT02_TO_HPE_T.T)
_WL: Final[float] = D65_LMS[0]
_WM: Final[float] = D65_LMS[1]
_WS: Final[float] = D65_LMS[2]
_YW: Final[float] = VC.white_xyz[1]
_D: Final[float] = VC.d
_FL: Final[float] = VC.fl


# --- Runtime Configuration ---
_STRICT_IEEE: bool = False

def set_strict_ieee(enabled: bool = True) -> None:
    """
    Toggle between fast (default) and strict IEEE 754 batch kernels.

    Args:
        enabled: If True, use ``fastmath=False`` kernels.
    """
    global _STRICT_IEEE
    _STRICT_IEEE = bool(enabled)
    logger.debug("Strict IEEE batch kernels: %s", _STRICT_IEEE)


# =============================================================================
# 1. INPUT HANDLING
# =============================================================================

def _as_rgb8(arr: np.ndarray) -> ArrayRGB8:
    if arr.dtype == np.uint8:
        return np.ascontiguousarray(arr)
    if arr.dtype.kind not in "iu":
        raise TypeError(f"Expected integer RGB data, got dtype {arr.dtype}")
    if arr.size and (arr.min() < 0 or arr.max() > 255):
        raise ValueError(
            f"RGB values must be in [0, 255], got range [{arr.min()}, {arr.max()}]"
        )
    return np.ascontiguousarray(arr, dtype=np.uint8)


def handle_rgb(func: Callable[..., np.ndarray]) -> Callable[..., np.ndarray]:
    """
    Decorator to normalize 8-bit RGB input to a contiguous (N, 3) uint8 array.

    - If input is (3,), returns the single result row.
    - If input is (N, 3), returns the (N, ...) result.
    """
    @functools.wraps(func)
    def wrapper(rgb: Any, *args: Any, **kwargs: Any) -> np.ndarray:
        arr = np.asarray(rgb)
        arr_in = _as_rgb8(np.atleast_2d(arr))

        if arr_in.ndim != 2 or arr_in.shape[-1] != 3:
            raise ValueError(f"Expected shape (N, 3) or (3,), got {arr.shape}")

        res = func(arr_in, *args, **kwargs)

        if arr.ndim == 1:
            return res[0]
        return res
    return wrapper


# =============================================================================
# 2. KERNELS
# =============================================================================

@njit(cache=True, fastmath=True, parallel=True)
def _lms_to_jch_kernel(lms: ArrayFloat) -> ArrayFloat:
    """
    Adapted LMS -> JCh correlates, one pixel per ``prange`` iteration.
    Input shape (N, 3), output shape (N, 7).
    """
    n = lms.shape[0]
    out = np.empty((n, 7), dtype=np.float64)
    for i in prange(n):
        lc = chromatic_adaptation(lms[i, 0], _WL, _YW, _D)
        mc = chromatic_adaptation(lms[i, 1], _WM, _YW, _D)
        sc = chromatic_adaptation(lms[i, 2], _WS, _YW, _D)

        lh = _HPE_M[0, 0] * lc + _HPE_M[0, 1] * mc + _HPE_M[0, 2] * sc
        mh = _HPE_M[1, 0] * lc + _HPE_M[1, 1] * mc + _HPE_M[1, 2] * sc
        sh = _HPE_M[2, 0] * lc + _HPE_M[2, 1] * mc + _HPE_M[2, 2] * sc

        corr = appearance_correlates(
            nonlinear_adaptation_scalar(lh, _FL),
            nonlinear_adaptation_scalar(mh, _FL),
            nonlinear_adaptation_scalar(sh, _FL),
        )
        for k in range(7):
            out[i, k] = corr[k]
    return out

@njit(cache=True, fastmath=False, parallel=True)
def _lms_to_jch_kernel_strict(lms: ArrayFloat) -> ArrayFloat:
    """Adapted LMS -> JCh, strict IEEE 754 variant."""
    n = lms.shape[0]
    out = np.empty((n, 7), dtype=np.float64)
    for i in prange(n):
        lc = chromatic_adaptation(lms[i, 0], _WL, _YW, _D)
        mc = chromatic_adaptation(lms[i, 1], _WM, _YW, _D)
        sc = chromatic_adaptation(lms[i, 2], _WS, _YW, _D)

        lh = _HPE_M[0, 0] * lc + _HPE_M[0, 1] * mc + _HPE_M[0, 2] * sc
        mh = _HPE_M[1, 0] * lc + _HPE_M[1, 1] * mc + _HPE_M[1, 2] * sc
        sh = _HPE_M[2, 0] * lc + _HPE_M[2, 1] * mc + _HPE_M[2, 2] * sc

        corr = appearance_correlates(
            nonlinear_adaptation_scalar(lh, _FL),
            nonlinear_adaptation_scalar(mh, _FL),
            nonlinear_adaptation_scalar(sh, _FL),
        )
        for k in range(7):
            out[i, k] = corr[k]
    return out

@njit(cache=True, fastmath=True, parallel=True)
def _jch_to_jab_kernel(jch: ArrayFloat, k_l: float, c1: float, c2: float) -> ArrayFloat:
    """JCh (N, 7) -> Jab (N, 3) for one CAM02 space."""
    n = jch.shape[0]
    out = np.empty((n, 3), dtype=np.float64)
    for i in prange(n):
        J, a, b = jab_from_correlates(jch[i, 0], jch[i, 5], jch[i, 3], k_l, c1, c2)
        out[i, 0] = J
        out[i, 1] = a
        out[i, 2] = b
    return out

@njit(cache=True, fastmath=False, parallel=True)
def _jch_to_jab_kernel_strict(jch: ArrayFloat, k_l: float, c1: float, c2: float) -> ArrayFloat:
    """JCh -> Jab, strict IEEE 754 variant."""
    n = jch.shape[0]
    out = np.empty((n, 3), dtype=np.float64)
    for i in prange(n):
        J, a, b = jab_from_correlates(jch[i, 0], jch[i, 5], jch[i, 3], k_l, c1, c2)
        out[i, 0] = J
        out[i, 1] = a
        out[i, 2] = b
    return out


# --- Kernel dispatchers ---

def _lms_to_jch(lms: ArrayFloat) -> ArrayFloat:
    if _STRICT_IEEE:
        return _lms_to_jch_kernel_strict(lms)
    return _lms_to_jch_kernel(lms)

def _jch_to_jab(jch: ArrayFloat, space: JabSpace) -> ArrayFloat:
    if _STRICT_IEEE:
        return _jch_to_jab_kernel_strict(jch, space.k_l, space.c1, space.c2)
    return _jch_to_jab_kernel(jch, space.k_l, space.c1, space.c2)


# =============================================================================
# 3. APPEARANCE ENGINE
# =============================================================================

class AppearanceEngine:
    """Static utility class for batch 8-bit sRGB -> CAM02 conversion.

    Public methods take (N, 3) or (3,) integer RGB data; ``_raw`` helpers
    assume a validated (N, 3) array and are chained by the pipelines so each
    stage is checked only once.
    """

    # =====================================================================
    #  Internal _raw fast-path methods
    # =====================================================================

    @staticmethod
    def _linear_raw(rgb: ArrayRGB8) -> ArrayFloat:
        return SRGB_LOOKUP[rgb]

    @staticmethod
    def _xyz_raw(rgb: ArrayRGB8) -> ArrayFloat:
        return np.dot(AppearanceEngine._linear_raw(rgb), M_SRGB_TO_XYZ_T) * 100.0

    @staticmethod
    def _lms_raw(rgb: ArrayRGB8) -> ArrayFloat:
        return np.dot(AppearanceEngine._xyz_raw(rgb), M_XYZ_TO_CAT02_T)

    @staticmethod
    def _jch_raw(rgb: ArrayRGB8) -> ArrayFloat:
        return _lms_to_jch(np.ascontiguousarray(AppearanceEngine._lms_raw(rgb)))

    # =====================================================================
    #  Public API
    # =====================================================================

    @staticmethod
    @handle_rgb
    def srgb_to_linear(rgb: ArrayRGB8) -> ArrayFloat:
        """8-bit sRGB -> linear RGB [0..1] via the lookup table."""
        return AppearanceEngine._linear_raw(rgb)

    @staticmethod
    @handle_rgb
    def srgb_to_xyz(rgb: ArrayRGB8) -> ArrayFloat:
        """8-bit sRGB -> XYZ [0..100] (D65)."""
        return AppearanceEngine._xyz_raw(rgb)

    @staticmethod
    @handle_rgb
    def srgb_to_lms(rgb: ArrayRGB8) -> ArrayFloat:
        """8-bit sRGB -> CAT02 LMS."""
        return AppearanceEngine._lms_raw(rgb)

    @staticmethod
    @handle_rgb
    def srgb_to_hpe(rgb: ArrayRGB8) -> ArrayFloat:
        """8-bit sRGB -> HPE (matrix step only, no adaptation)."""
        return np.dot(AppearanceEngine._lms_raw(rgb), M_CAT02_TO_HPE_T)

    @staticmethod
    @handle_rgb
    def srgb_to_jch(rgb: ArrayRGB8) -> ArrayFloat:
        """
        8-bit sRGB -> CIECAM02 correlates.

        Returns:
            Array of shape (N, 7) (or (7,)) with columns ``JCH_COLUMNS``.
        """
        return AppearanceEngine._jch_raw(rgb)

    @staticmethod
    @handle_rgb
    def srgb_to_jab(rgb: ArrayRGB8, space: JabSpace = JabSpace.UCS) -> ArrayFloat:
        """
        8-bit sRGB -> CAM02 Jab.

        Args:
            rgb: Integer RGB, shape (N, 3) or (3,).
            space: Target CAM02 space (UCS, LCD or SCD).

        Returns:
            Jab coordinates, shape (N, 3) or (3,).
        """
        return _jch_to_jab(AppearanceEngine._jch_raw(rgb), space)

    @staticmethod
    def jch_to_jab(jch: ArrayFloat, space: JabSpace = JabSpace.UCS) -> ArrayFloat:
        """
        CIECAM02 correlates -> CAM02 Jab.

        Args:
            jch: Correlates with columns ``JCH_COLUMNS``, shape (N, 7) or (7,).
            space: Target CAM02 space.
        """
        arr = np.asarray(jch)
        arr_in = np.ascontiguousarray(np.atleast_2d(arr), dtype=np.float64)
        if arr_in.ndim != 2 or arr_in.shape[-1] != len(JCH_COLUMNS):
            raise ValueError(f"Expected last dimension size 7, got shape {arr.shape}")

        res = _jch_to_jab(arr_in, space)

        if arr.ndim == 1:
            return res[0]
        return res

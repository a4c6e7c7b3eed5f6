# -*- coding: utf-8 -*-
"""
Percept: Perceptual color appearance for 8-bit RGB
Copyright (c) 2026 opticsWolf

SPDX-License-Identifier: LGPL-3.0-or-later

Backend Dispatch
================
Chooses between the scalar reference transforms (``percept_cones``) and the
4-lane vector transforms (``percept_vector``) and exposes one function per
pipeline step that routes to the active backend.

The backend is resolved lazily, exactly once, under a lock:

    * ``auto``   -> vector if :func:`percept_vector.simd_available`, else scalar
    * ``vector`` -> vector, or scalar with a ``RuntimeWarning`` if unsupported
    * ``scalar`` -> scalar

Toggle at runtime via::

    import percept_dispatch as pd
    pd.set_backend("scalar")   # force the reference path
    pd.set_backend("auto")     # back to capability detection (default)

The initial setting comes from the ``PERCEPT_BACKEND`` environment variable.
"""

import logging
import os
import threading
import warnings
from enum import Enum
from typing import Optional, Union

import percept_vector as vec
from percept_constants import D65_LMS, VC
from percept_cones import (
    Triple,
    chromatic_adaptation,
    linear_to_xyz as _linear_to_xyz_scalar,
    lms_to_hpe as _lms_to_hpe_scalar,
    nonlinear_adaptation_scalar,
    xyz_to_lms as _xyz_to_lms_scalar,
)

__all__ = [
    "Backend",
    "ENV_BACKEND",
    "set_backend",
    "requested_backend",
    "active_backend",
    "linear_to_xyz",
    "xyz_to_lms",
    "lms_to_hpe",
    "transform_cones",
    "nonlinear_adaptation",
]

logger = logging.getLogger(__name__)

ENV_BACKEND = "PERCEPT_BACKEND"


class Backend(str, Enum):
    AUTO = "auto"
    SCALAR = "scalar"
    VECTOR = "vector"


def _backend_from_env() -> Backend:
    raw = os.getenv(ENV_BACKEND)
    if raw is None:
        return Backend.AUTO
    try:
        return Backend(raw.strip().lower())
    except ValueError:
        warnings.warn(
            f"Ignoring {ENV_BACKEND}={raw!r}; expected one of "
            f"{[b.value for b in Backend]}.",
            RuntimeWarning,
            stacklevel=2,
        )
        return Backend.AUTO


_lock = threading.Lock()
_requested: Backend = _backend_from_env()
_active: Optional[Backend] = None


def set_backend(backend: Union[Backend, str] = Backend.AUTO) -> None:
    """
    Selects the transform backend.

    The choice is resolved on the next conversion and then cached.

    Args:
        backend: ``"auto"``, ``"scalar"`` or ``"vector"``.

    Raises:
        ValueError: If *backend* is not a known backend name.
    """
    global _requested, _active
    choice = Backend(backend.lower())
    with _lock:
        _requested = choice
        _active = None
    logger.info("Transform backend set to %s", choice.value)


def requested_backend() -> Backend:
    """The backend most recently asked for (may be ``AUTO``)."""
    return _requested


def _resolve(requested: Backend) -> Backend:
    if requested is Backend.SCALAR:
        return Backend.SCALAR
    if vec.simd_available():
        return Backend.VECTOR
    if requested is Backend.VECTOR:
        warnings.warn(
            "Vector backend requested but no 4-lane SIMD support was "
            "detected; using the scalar backend.",
            RuntimeWarning,
            stacklevel=4,
        )
    return Backend.SCALAR


def active_backend() -> Backend:
    """The resolved backend, either ``SCALAR`` or ``VECTOR``."""
    global _active
    active = _active
    if active is not None:
        return active
    with _lock:
        if _active is None:
            _active = _resolve(_requested)
            logger.debug(
                "Resolved transform backend: requested=%s active=%s",
                _requested.value, _active.value,
            )
        return _active


def _unpack(lanes: vec.Lanes) -> Triple:
    return (float(lanes[0]), float(lanes[1]), float(lanes[2]))


# =============================================================================
# Dispatched pipeline steps
# =============================================================================

def linear_to_xyz(r: float, g: float, b: float) -> Triple:
    """Linear RGB -> XYZ on the active backend."""
    if active_backend() is Backend.VECTOR:
        return _unpack(vec.linear_to_xyz_lanes(vec.to_lanes(r, g, b)))
    return _linear_to_xyz_scalar(r, g, b)


def xyz_to_lms(x: float, y: float, z: float) -> Triple:
    """XYZ -> CAT02 LMS on the active backend."""
    if active_backend() is Backend.VECTOR:
        return _unpack(vec.xyz_to_lms_lanes(vec.to_lanes(x, y, z)))
    return _xyz_to_lms_scalar(x, y, z)


def lms_to_hpe(l: float, m: float, s: float) -> Triple:
    """CAT02 LMS -> HPE on the active backend."""
    if active_backend() is Backend.VECTOR:
        return _unpack(vec.lms_to_hpe_lanes(vec.to_lanes(l, m, s)))
    return _lms_to_hpe_scalar(l, m, s)


def transform_cones(l: float, m: float, s: float) -> Triple:
    """Chromatic adaptation of LMS against the D65 white, active backend."""
    if active_backend() is Backend.VECTOR:
        return _unpack(vec.transform_cones_lanes(vec.to_lanes(l, m, s)))
    y_w, d = VC.white_xyz[1], VC.d
    return (
        chromatic_adaptation(l, D65_LMS[0], y_w, d),
        chromatic_adaptation(m, D65_LMS[1], y_w, d),
        chromatic_adaptation(s, D65_LMS[2], y_w, d),
    )


def nonlinear_adaptation(a: float, b: float, c: float) -> Triple:
    """
    Nonlinear cone compression with the ``VC`` luminance factor.

    Always scalar: the vector variant differs from the reference by
    rounding, and downstream appearance values must not depend on the host.
    """
    fl = VC.fl
    return (
        nonlinear_adaptation_scalar(a, fl),
        nonlinear_adaptation_scalar(b, fl),
        nonlinear_adaptation_scalar(c, fl),
    )

# -*- coding: utf-8 -*-
"""
Percept: Perceptual color appearance for 8-bit RGB
Copyright (c) 2026 opticsWolf

SPDX-License-Identifier: LGPL-3.0-or-later

CAM02 Color Differences
=======================
Distances between colors in the same CAM02 uniform space (UCS, LCD or SCD):

    dE'^2 = (dJ' / K_L)^2 + da'^2 + db'^2

Python cannot keep Jab values of different spaces apart at the type level,
so the space tag carried by every ``Jab`` is checked at call time and a
:class:`SpaceMismatchError` is raised when the tags differ.
"""

import math
from typing import TYPE_CHECKING, Tuple, TypeAlias

import numpy as np
import numpy.typing as npt
from numba import njit, prange

from percept_constants import JabSpace

if TYPE_CHECKING:
    from percept_engine import Jab

__all__ = [
    "SpaceMismatchError",
    "squared_difference",
    "distance",
    "batch_squared_difference",
]

ArrayFloat: TypeAlias = npt.NDArray[np.floating]


class SpaceMismatchError(TypeError):
    """Raised when colors from different CAM02 Jab spaces are compared."""

    def __init__(self, left: JabSpace, right: JabSpace) -> None:
        super().__init__(
            f"Cannot compare Jab values from different spaces: "
            f"{left.name} vs {right.name}"
        )
        self.left = left
        self.right = right


def squared_difference(x: "Jab", y: "Jab") -> float:
    """
    Squared CAM02 color difference between two Jab values.

    Args:
        x: First color.
        y: Second color, in the same space as *x*.

    Returns:
        (|dJ'| / K_L)^2 + da'^2 + db'^2.  Zero when ``x == y``.

    Raises:
        SpaceMismatchError: If ``x.space`` is not ``y.space``.
    """
    if x.space is not y.space:
        raise SpaceMismatchError(x.space, y.space)
    dj = abs(x.J - y.J) / x.space.k_l
    da = abs(x.a - y.a)
    db = abs(x.b - y.b)
    return dj * dj + da * da + db * db


def distance(x: "Jab", y: "Jab") -> float:
    """CAM02 color difference dE' (square root of :func:`squared_difference`)."""
    return math.sqrt(squared_difference(x, y))


@njit(cache=True, fastmath=True, parallel=True)
def _batch_squared_difference(jab1: ArrayFloat, jab2: ArrayFloat, k_l: float) -> ArrayFloat:
    """Parallel loop for squared CAM02 differences."""
    n = len(jab1)
    res = np.empty(n, dtype=np.float64)
    for i in prange(n):
        dj = abs(jab1[i, 0] - jab2[i, 0]) / k_l
        da = jab1[i, 1] - jab2[i, 1]
        db = jab1[i, 2] - jab2[i, 2]
        res[i] = dj * dj + da * da + db * db
    return res


def _prepare_inputs(jab1: ArrayFloat, jab2: ArrayFloat) -> Tuple[ArrayFloat, ArrayFloat]:
    """
    Broadcasting helper.

    A single color on either side is broadcast against N colors on the other;
    the broadcast view is materialised so the ``prange`` kernel sees
    C-contiguous float64 memory.
    """
    j1 = np.ascontiguousarray(np.atleast_2d(jab1), dtype=np.float64)
    j2 = np.ascontiguousarray(np.atleast_2d(jab2), dtype=np.float64)

    if j1.shape[-1] != 3 or j2.shape[-1] != 3 or j1.ndim != 2 or j2.ndim != 2:
        raise ValueError(f"Inputs must have shape (N, 3), got {j1.shape} and {j2.shape}")

    if j1.shape[0] != j2.shape[0]:
        if j1.shape[0] == 1: j1 = np.ascontiguousarray(np.broadcast_to(j1, j2.shape))
        elif j2.shape[0] == 1: j2 = np.ascontiguousarray(np.broadcast_to(j2, j1.shape))
        else: raise ValueError(f"Shapes {j1.shape} and {j2.shape} are not broadcastable.")
    return j1, j2


def batch_squared_difference(jab1: ArrayFloat, jab2: ArrayFloat,
                             space: JabSpace = JabSpace.UCS) -> ArrayFloat:
    """
    Squared CAM02 differences for arrays of Jab coordinates.

    Both arrays must hold coordinates of *space*; raw arrays carry no tag, so
    the caller states it once for the pair.

    Args:
        jab1: Colors, shape (N, 3) or (3,).
        jab2: Colors, shape (N, 3) or (3,).  1-vs-N broadcasting is supported.
        space: Space both inputs belong to (sets K_L).

    Returns:
        Squared differences, shape (N,), or a float for two (3,) inputs.
    """
    a = np.asarray(jab1)
    b = np.asarray(jab2)
    l1, l2 = _prepare_inputs(a, b)
    res = _batch_squared_difference(l1, l2, space.k_l)
    if a.ndim == 1 and b.ndim == 1: return float(res[0])
    return res

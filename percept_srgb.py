# -*- coding: utf-8 -*-
"""
Percept: Perceptual color appearance for 8-bit RGB
Copyright (c) 2026 opticsWolf

SPDX-License-Identifier: LGPL-3.0-or-later

sRGB Transfer Functions
=======================
Linear-light conversion for 8-bit sRGB channels.

The domain of the forward transfer function is exactly the 256 byte values,
so it is evaluated once at import into a read-only lookup table.  Every
per-pixel conversion in the package indexes ``SRGB_LOOKUP`` instead of
calling ``pow``.

References:
    - IEC 61966-2-1:1999 (sRGB Standard)
"""

from typing import Final, TypeAlias

import numpy as np
import numpy.typing as npt

__all__ = [
    "ArrayFloat",
    "SRGB_LOOKUP",
    "linearize_channel",
    "linearize",
    "gamma_encode",
]

ArrayFloat: TypeAlias = npt.NDArray[np.floating]

# IEC 61966-2-1 breakpoints.  The encoded threshold divided by the linear
# slope gives the decoded threshold (0.04045 / 12.92 ~= 0.0031308).
_ENCODED_THRESHOLD: Final[float] = 0.04045
_LINEAR_THRESHOLD: Final[float] = 0.0031308
_LINEAR_SLOPE: Final[float] = 12.92


def linearize_channel(c: int) -> float:
    """
    Applies the sRGB EOTF to one 8-bit channel value.

    This is the reference formula the lookup table is built from.

    Args:
        c: Channel value in [0, 255].

    Returns:
        Linear-light intensity in [0, 1].
    """
    v = c / 255.0
    if v > _ENCODED_THRESHOLD:
        return ((v + 0.055) / 1.055) ** 2.4
    return v / _LINEAR_SLOPE


def _build_lookup() -> ArrayFloat:
    table = np.array([linearize_channel(i) for i in range(256)], dtype=np.float64)
    table.setflags(write=False)
    return table


# Built once at import.  Module import runs under the interpreter's import
# lock, so concurrent first users all see the same finished table.
SRGB_LOOKUP: Final[ArrayFloat] = _build_lookup()


def linearize(c: int) -> float:
    """Table-backed equivalent of :func:`linearize_channel`."""
    return float(SRGB_LOOKUP[c])


def gamma_encode(linear: float) -> int:
    """
    Applies the sRGB OETF and quantizes to the nearest byte.

    Inputs outside [0, 1] are clamped.  ``gamma_encode(linearize(c)) == c``
    holds for every byte ``c``.
    """
    if linear <= _LINEAR_THRESHOLD:
        encoded = _LINEAR_SLOPE * linear
    else:
        encoded = 1.055 * (linear ** (1.0 / 2.4)) - 0.055
    encoded = min(1.0, max(0.0, encoded))
    return int(encoded * 255.0 + 0.5)

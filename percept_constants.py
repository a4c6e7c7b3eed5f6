# -*- coding: utf-8 -*-
"""
Percept: Perceptual color appearance for 8-bit RGB
Copyright (c) 2026 opticsWolf

SPDX-License-Identifier: LGPL-3.0-or-later

Viewing Conditions & Jab Spaces
===============================
The CIECAM02 parameters every appearance computation depends on.

``VC`` is derived once, at import, from the D65 white point, an adapting
luminance of (64 / pi) / 5 cd/m^2, a background of Y_b = 20 and the average
surround.  The achromatic response of the white point is obtained by pushing
the white point itself through the same chromatic and nonlinear adaptation
used for ordinary colors (``percept_cones``); the call graph is

    derive_viewing_conditions -> adapt(white) -> achromatic_response_to_white

so nothing here depends on a later pipeline stage.

``VC`` is a frozen dataclass and is never rebuilt; readers on any thread can
share it without locking.
"""

import logging
import math
from dataclasses import dataclass
from enum import Enum
from typing import Final

from percept_cones import (
    D65_XYZ,
    Triple,
    chromatic_adaptation,
    lms_to_hpe,
    nonlinear_adaptation_scalar,
    xyz_to_lms,
)

__all__ = [
    "Surround",
    "SURROUND_AVERAGE",
    "SURROUND_DIM",
    "SURROUND_DARK",
    "ViewingConditions",
    "derive_viewing_conditions",
    "VC",
    "D65_LMS",
    "JabSpace",
]

logger = logging.getLogger(__name__)


@dataclass(slots=True, frozen=True)
class Surround:
    """CIECAM02 surround: exponential factor F, impact c, chromatic induction N_c."""
    f:  float
    c:  float
    nc: float


SURROUND_AVERAGE: Final[Surround] = Surround(f=1.0, c=0.69, nc=1.0)
SURROUND_DIM:     Final[Surround] = Surround(f=0.9, c=0.59, nc=0.9)
SURROUND_DARK:    Final[Surround] = Surround(f=0.8, c=0.525, nc=0.8)

# Adapting luminance: 64 lux reference white over pi, with the 20 % grey
# world assumption.
_DEFAULT_LA: Final[float] = (64.0 / math.pi) / 5.0
_DEFAULT_YB: Final[float] = 20.0


@dataclass(slots=True, frozen=True)
class ViewingConditions:
    """
    Derived CIECAM02 viewing-condition parameters.

    Attributes:
        white_xyz: Adopted white (Y = 100 scale).
        white_lms: White point in CAT02 LMS.
        la: Adapting field luminance (cd/m^2).
        yb: Relative background luminance.
        f, c, nc: Surround parameters.
        n: Background induction factor, Y_b / Y_w.
        k: 1 / (5 L_A + 1).
        z: Base exponential nonlinearity, 1.48 + sqrt(n).
        fl: Luminance-level adaptation factor F_L.
        nbb, ncb: Brightness and chromatic background induction factors.
        d: Degree of adaptation D.  Not clamped to [0, 1].
        achromatic_response_to_white: A_w.
    """
    white_xyz: Triple
    white_lms: Triple
    la:  float
    yb:  float
    f:   float
    c:   float
    nc:  float
    n:   float
    k:   float
    z:   float
    fl:  float
    nbb: float
    ncb: float
    d:   float
    achromatic_response_to_white: float


def derive_viewing_conditions(
    white_xyz: Triple = D65_XYZ,
    la: float = _DEFAULT_LA,
    yb: float = _DEFAULT_YB,
    surround: Surround = SURROUND_AVERAGE,
) -> ViewingConditions:
    """
    Derives the full CIECAM02 parameter set.

    The order below matters: every line only uses values computed above it.

    Args:
        white_xyz: Adopted white point, Y = 100 scale.
        la: Adapting luminance in cd/m^2.
        yb: Background relative luminance.
        surround: Surround parameters.

    Returns:
        Immutable viewing conditions.
    """
    y_white = white_xyz[1]

    n = yb / y_white
    k = 1.0 / ((5.0 * la) + 1.0)
    z = 1.48 + math.sqrt(n)
    k4 = k ** 4
    fl = (0.2 * k4 * (5.0 * la)) + 0.1 * ((1.0 - k4) ** 2) * (5.0 * la) ** (1.0 / 3.0)
    nbb = 0.725 * (1.0 / n) ** 0.2
    ncb = nbb
    d = surround.f * (1.0 - (1.0 / 3.6) * math.exp((-la - 42.0) / 92.0))

    # Adapt the white point as if it were an ordinary color.
    white_lms = xyz_to_lms(*white_xyz)
    adapted = tuple(
        chromatic_adaptation(cone, cone, y_white, d) for cone in white_lms
    )
    lh, mh, sh = lms_to_hpe(*adapted)
    lpa = nonlinear_adaptation_scalar(lh, fl)
    mpa = nonlinear_adaptation_scalar(mh, fl)
    spa = nonlinear_adaptation_scalar(sh, fl)
    aw = (2.0 * lpa + mpa + 0.05 * spa - 0.305) * nbb

    return ViewingConditions(
        white_xyz=tuple(white_xyz),  # type: ignore[arg-type]
        white_lms=white_lms,
        la=la, yb=yb,
        f=surround.f, c=surround.c, nc=surround.nc,
        n=n, k=k, z=z, fl=fl, nbb=nbb, ncb=ncb, d=d,
        achromatic_response_to_white=aw,
    )


VC: Final[ViewingConditions] = derive_viewing_conditions()
D65_LMS: Final[Triple] = VC.white_lms

logger.debug(
    "Viewing conditions: L_A=%.6f n=%.6f z=%.6f F_L=%.6f N_bb=%.6f D=%.6f A_w=%.6f",
    VC.la, VC.n, VC.z, VC.fl, VC.nbb, VC.d, VC.achromatic_response_to_white,
)


class JabSpace(Enum):
    """
    CAM02 uniform color spaces.

    Each member carries the (K_L, c1, c2) constants of the JCh -> Jab
    transform from Luo, Cui & Li (2006).  Jab values are only comparable
    within the same space.
    """
    UCS = (1.00, 0.007, 0.0228)
    LCD = (0.77, 0.007, 0.0053)
    SCD = (1.24, 0.007, 0.0363)

    def __init__(self, k_l: float, c1: float, c2: float) -> None:
        self.k_l = k_l
        self.c1 = c1
        self.c2 = c2

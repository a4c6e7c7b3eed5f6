from __future__ import annotations

import numpy as np
import pytest

from percept_cones import (
    D65_XYZ,
    M_CAT02_TO_HPE,
    M_CAT02_TO_HPE_T,
    M_SRGB_TO_XYZ,
    M_SRGB_TO_XYZ_T,
    M_XYZ_TO_CAT02,
    chromatic_adaptation,
    inverse_nonlinear_adaptation_scalar,
    linear_to_xyz,
    lms_to_hpe,
    nonlinear_adaptation_scalar,
    xyz_to_lms,
)
from percept_constants import D65_LMS, VC


def test_tuple_and_array_matrices_agree() -> None:
    np.testing.assert_array_equal(np.array(M_SRGB_TO_XYZ), M_SRGB_TO_XYZ_T.T)
    np.testing.assert_array_equal(np.array(M_CAT02_TO_HPE), M_CAT02_TO_HPE_T.T)


def test_linear_white_maps_near_d65() -> None:
    x, y, z = linear_to_xyz(1.0, 1.0, 1.0)
    assert y == pytest.approx(100.0, abs=1e-9)
    # 4-digit primaries land slightly off the D65 tristimulus values
    assert x == pytest.approx(D65_XYZ[0], abs=0.01)
    assert z == pytest.approx(D65_XYZ[2], abs=0.05)


def test_cat02_of_d65_is_white_lms() -> None:
    assert xyz_to_lms(*D65_XYZ) == D65_LMS


def test_hpe_is_identity_on_equal_energy() -> None:
    # HPE rows sum to ~1, so an equal-energy stimulus is (almost) preserved
    for v in lms_to_hpe(50.0, 50.0, 50.0):
        assert v == pytest.approx(50.0, abs=1e-3)


def test_chromatic_adaptation_maps_white_to_y_white() -> None:
    for cone in D65_LMS:
        adapted = chromatic_adaptation(cone, cone, VC.white_xyz[1], VC.d)
        expected = VC.white_xyz[1] * VC.d + cone * (1.0 - VC.d)
        assert adapted == pytest.approx(expected, rel=1e-12)


def test_chromatic_adaptation_full_degree_equalizes_white() -> None:
    for cone in D65_LMS:
        assert chromatic_adaptation(cone, cone, 100.0, 1.0) == pytest.approx(100.0)


def test_nonlinear_adaptation_of_zero_is_offset() -> None:
    assert nonlinear_adaptation_scalar(0.0, VC.fl) == pytest.approx(0.1)


def test_nonlinear_adaptation_is_sign_symmetric() -> None:
    for cone in (0.5, 10.0, 95.0, 300.0):
        pos = nonlinear_adaptation_scalar(cone, VC.fl) - 0.1
        neg = nonlinear_adaptation_scalar(-cone, VC.fl) - 0.1
        assert neg == pytest.approx(-pos, rel=1e-12)


def test_nonlinear_adaptation_saturates_below_400() -> None:
    assert nonlinear_adaptation_scalar(1e9, VC.fl) < 400.1


@pytest.mark.parametrize("cone", [-80.0, -1.0, 0.25, 1.0, 42.0, 100.0, 250.0])
def test_inverse_nonlinear_adaptation_round_trip(cone: float) -> None:
    adapted = nonlinear_adaptation_scalar(cone, VC.fl)
    assert inverse_nonlinear_adaptation_scalar(adapted, VC.fl) == pytest.approx(cone, rel=1e-9)

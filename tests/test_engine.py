from __future__ import annotations

import dataclasses
import math

import numpy as np
import pytest

import percept_dispatch as dispatch
from percept_constants import JabSpace
from percept_engine import (
    HPE,
    LMS,
    RGB8,
    XYZ,
    Jab,
    JCh,
    LinearRGB,
    appearance_correlates,
    hue_quadrature,
    jab_from_correlates,
)

# Two-decimal reference values
REF = 0.005


@pytest.mark.parametrize(
    "value, lightness",
    [(0, 0.00), (50, 14.92), (100, 32.16), (150, 52.09), (200, 74.02),
     (250, 97.57), (255, 100.00)],
)
def test_gray_lightness(value: int, lightness: float) -> None:
    assert JCh.from_rgb((value, value, value)).J == pytest.approx(lightness, abs=0.01)


def test_red_correlates() -> None:
    red = JCh.from_rgb((255, 0, 0))
    assert red.J == pytest.approx(46.93, abs=REF)
    assert red.C == pytest.approx(111.30, abs=REF)
    assert red.h == pytest.approx(32.15, abs=REF)


@pytest.mark.parametrize(
    "rgb, expected",
    [
        ((0, 0, 0), (0.00, None, None)),
        ((50, 50, 50), (22.96, None, None)),
        ((150, 150, 150), (64.89, None, None)),
        ((255, 255, 255), (100.00, -1.91, -1.15)),
        ((255, 0, 0), (60.05, 38.69, 24.32)),
        ((0, 0, 255), (31.22, -8.38, -39.16)),
    ],
)
def test_ucs_reference_vectors(rgb: tuple, expected: tuple) -> None:
    jab = Jab.from_rgb(rgb)
    assert jab.space is JabSpace.UCS
    for got, want in zip(jab.as_tuple(), expected):
        if want is not None:
            assert got == pytest.approx(want, abs=REF)


def test_chain_matches_from_rgb() -> None:
    rgb = RGB8(12, 200, 77)
    lin = LinearRGB.from_rgb(rgb)
    xyz = XYZ.from_linear(lin)
    lms = LMS.from_xyz(xyz)
    assert XYZ.from_rgb(rgb) == xyz
    assert LMS.from_rgb(rgb) == lms
    assert HPE.from_rgb(rgb) == HPE.from_lms(lms)
    assert JCh.from_rgb(rgb) == JCh.from_lms(lms)
    assert Jab.from_rgb(rgb, JabSpace.SCD) == Jab.from_jch(JCh.from_lms(lms), JabSpace.SCD)


def test_deterministic() -> None:
    first = Jab.from_rgb((31, 41, 59))
    for _ in range(10):
        assert Jab.from_rgb((31, 41, 59)) == first


def test_backends_give_identical_appearance(force_simd: None) -> None:
    samples = [(0, 0, 0), (255, 255, 255), (255, 0, 0), (3, 141, 59), (200, 100, 250)]
    dispatch.set_backend("scalar")
    scalar = [JCh.from_rgb(rgb) for rgb in samples]
    dispatch.set_backend("vector")
    assert dispatch.active_backend() is dispatch.Backend.VECTOR
    vector = [JCh.from_rgb(rgb) for rgb in samples]
    assert scalar == vector


def test_gray_lightness_is_monotonic() -> None:
    lightness = np.array([JCh.from_rgb((v, v, v)).J for v in range(256)])
    assert lightness[0] == pytest.approx(0.0, abs=1e-6)
    assert np.all(np.diff(lightness) > 0)


def test_correlates_are_finite_for_primaries() -> None:
    for rgb in ((255, 0, 0), (0, 255, 0), (0, 0, 255), (255, 255, 0), (0, 255, 255)):
        jch = JCh.from_rgb(rgb)
        assert all(math.isfinite(v) for v in dataclasses.astuple(jch))
        assert 0.0 <= jch.h < 360.0
        assert 0.0 <= jch.H < 400.0


# --- Hue quadrature ---

@pytest.mark.parametrize("boundary", [90.0, 164.25, 237.53])
def test_hue_quadrature_continuous_at_boundaries(boundary: float) -> None:
    below = hue_quadrature(boundary - 1e-9)
    at = hue_quadrature(boundary)
    assert below == pytest.approx(at, abs=1e-6)


def test_hue_quadrature_wraps_at_red() -> None:
    # H runs 0..400 starting at unique red
    assert hue_quadrature(20.14) == pytest.approx(0.0, abs=1e-12)
    assert hue_quadrature(20.14 - 1e-9) == pytest.approx(400.0, abs=1e-6)


def test_hue_quadrature_continuous_across_zero() -> None:
    assert hue_quadrature(360.0 - 1e-9) == pytest.approx(hue_quadrature(0.0), abs=1e-6)


@pytest.mark.parametrize(
    "h, H", [(20.14, 0.0), (90.0, 100.0), (164.25, 200.0), (237.53, 300.0)]
)
def test_unique_hues(h: float, H: float) -> None:
    assert hue_quadrature(h) == pytest.approx(H, abs=1e-9)


def test_hue_quadrature_monotonic_from_red() -> None:
    hs = np.concatenate([np.linspace(20.14, 359.99, 500), np.linspace(0.0, 20.13, 50)])
    quad = [hue_quadrature(float(h)) for h in hs]
    assert np.all(np.diff(quad) > 0)


# --- Degenerate cases ---

def test_achromatic_hue_is_zero() -> None:
    # ca = cb = 0 exactly
    J, C, H, h, Q, M, s = appearance_correlates(11.0, 11.0, 11.0)
    assert h == 0.0
    assert C == 0.0
    assert J > 0.0


def test_non_positive_achromatic_response_gives_zero_lightness() -> None:
    J, C, H, h, Q, M, s = appearance_correlates(0.05, 0.05, 0.05)
    assert J == 0.0
    assert Q == 0.0
    assert s == 0.0


def test_jab_of_zero_colorfulness() -> None:
    J, a, b = jab_from_correlates(50.0, 0.0, 123.0, 1.0, 0.007, 0.0228)
    assert (a, b) == (0.0, 0.0)
    assert J == pytest.approx(1.7 * 50.0 / 1.35)


# --- Value types ---

def test_rgb8_validation() -> None:
    assert RGB8(np.uint8(7), 0, 255).as_tuple() == (7, 0, 255)
    with pytest.raises(ValueError):
        RGB8(256, 0, 0)
    with pytest.raises(ValueError):
        RGB8(0, -1, 0)
    with pytest.raises(TypeError):
        RGB8(0, 0, 1.5)  # type: ignore[arg-type]
    with pytest.raises(ValueError):
        RGB8.coerce((1, 2, 3, 4))


def test_rgb8_is_frozen() -> None:
    with pytest.raises(dataclasses.FrozenInstanceError):
        RGB8(1, 2, 3).r = 4  # type: ignore[misc]


def test_jab_tuple_helpers() -> None:
    jab = Jab.from_tuple((50, -3, 4.5), JabSpace.LCD)
    assert jab.as_tuple() == (50.0, -3.0, 4.5)
    assert jab.space is JabSpace.LCD
    assert Jab.from_tuple((1.0, 2.0, 3.0)).space is JabSpace.UCS


def test_jab_spaces_differ() -> None:
    jch = JCh.from_rgb((10, 180, 90))
    ucs, lcd, scd = (Jab.from_jch(jch, space) for space in JabSpace)
    assert ucs.as_tuple() != lcd.as_tuple() != scd.as_tuple()
    # c1 is shared, so J' only differs by K_L
    assert lcd.J * 0.77 == pytest.approx(ucs.J)
    assert scd.J * 1.24 == pytest.approx(ucs.J)
